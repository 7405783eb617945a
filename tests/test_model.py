import pytest

from richrule.model import (
    Accept,
    Audit,
    Destination,
    Drop,
    ForwardPort,
    IcmpBlock,
    IcmpType,
    Limit,
    Log,
    Mark,
    Port,
    Protocol,
    Reject,
    Rule,
    Service,
    Source,
)

CLAUSE_TYPES = [
    Limit,
    Source,
    Destination,
    Service,
    Port,
    Protocol,
    IcmpBlock,
    IcmpType,
    ForwardPort,
    Log,
    Audit,
    Accept,
    Reject,
    Drop,
    Mark,
]


@pytest.mark.parametrize("clause_type", CLAUSE_TYPES)
def test_fresh_clause_is_empty(clause_type):
    assert clause_type().is_empty()


@pytest.mark.parametrize(
    "clause",
    [
        Limit("1/m"),
        Source(invert="true"),
        Destination(address="10.0.0.1"),
        Service(name="ssh"),
        Port(protocol="udp"),
        Protocol(value="gre"),
        IcmpBlock(name="echo-request"),
        IcmpType(name="echo-reply"),
        ForwardPort(to_addr="10.0.0.2"),
        Log(level="info"),
        Audit(limit=Limit("1/m")),
        Accept(flag=True),
        Reject(type="icmp-host-prohibited"),
        Drop(limit=Limit("2/s")),
        Mark(set="0x1"),
    ],
)
def test_any_set_field_makes_clause_present(clause):
    assert not clause.is_empty()


def test_accept_limit_without_flag_is_not_present():
    accept = Accept(limit=Limit("3/m"))
    assert not accept.is_empty()
    assert accept.present is False


def test_actions_lists_every_action_set():
    rule = Rule(
        family="ipv4",
        accept=Accept(flag=True),
        reject=Reject(type="tcp-reset"),
        drop=Drop(flag=True),
    )
    assert rule.actions() == ["accept", "reject", "drop"]
    assert Rule().actions() == []


def test_copy_is_independent():
    rule = Rule(family="ipv4", log=Log(limit=Limit("1/m")))
    clone = rule.copy()
    clone.log.limit.value = "5/m"
    assert rule.log.limit.value == "1/m"
    assert clone != rule


def test_to_dict_uses_wire_keys():
    rule = Rule(
        family="ipv4",
        icmp_block=IcmpBlock(name="echo-request"),
        forward_port=ForwardPort(port="80", protocol="tcp", to_port="8080", to_addr="10.0.0.2"),
        drop=Drop(flag=True, limit=Limit("1/m")),
    )
    payload = rule.to_dict()
    assert payload["family"] == "ipv4"
    assert payload["icmpblock"] == {"name": "echo-request"}
    assert payload["forwardport"] == {
        "port": "80",
        "protocol": "tcp",
        "toport": "8080",
        "toaddr": "10.0.0.2",
    }
    assert payload["drop"] == {"flag": True, "limit": {"value": "1/m"}}
    assert payload["icmptype"] == {"name": ""}
    assert Rule.from_dict(payload) == rule


def test_from_dict_fills_missing_keys_with_zero_values():
    rule = Rule.from_dict({"family": "ipv6", "service": {"name": "dns"}, "bogus": 1})
    assert rule == Rule(family="ipv6", service=Service(name="dns"))


def test_from_dict_maps_nulls_to_zero_values():
    rule = Rule.from_dict(
        {
            "family": "ipv4",
            "service": {"name": None},
            "log": {"prefix": "ssh", "limit": None},
            "forwardport": None,
            "accept": {"flag": True, "limit": {"value": None}},
        }
    )
    assert rule == Rule(family="ipv4", log=Log(prefix="ssh"), accept=Accept(flag=True))
    assert str(rule) == "rule family=ipv4 log prefix=ssh accept  "


@pytest.mark.parametrize(
    "data",
    [
        {"accept": {"flag": True, "limit": "1/m"}},
        {"drop": {"flag": "false"}},
        {"port": {"port": 80, "protocol": "tcp"}},
        {"service": "ssh"},
        {"family": 4},
    ],
)
def test_from_dict_rejects_wrong_json_types(data):
    with pytest.raises(ValueError):
        Rule.from_dict(data)
