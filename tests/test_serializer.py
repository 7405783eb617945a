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
from richrule.serializer import rule_to_string


def test_source_service_accept():
    rule = Rule(
        family="ipv4",
        source=Source(address="10.0.0.0/24"),
        service=Service(name="ftp"),
        accept=Accept(flag=True),
    )
    assert rule_to_string(rule) == "rule family=ipv4 source address=10.0.0.0/24 service name=ftp accept  "
    assert str(rule) == rule_to_string(rule)


def test_empty_rule():
    assert rule_to_string(Rule()) == "rule "


def test_clause_order_is_fixed():
    rule = Rule(family="ipv6")
    rule.mark = Mark(set="0x1")
    rule.service = Service(name="ssh")
    rule.destination = Destination(address="192.168.1.1")
    assert rule_to_string(rule) == "rule family=ipv6 destination address=192.168.1.1 service name=ssh mark set=0x1 "


def test_source_address_wins_over_mac():
    rule = Rule(source=Source(address="10.0.0.1", mac="aa:bb:cc:dd:ee:ff"))
    assert rule_to_string(rule) == "rule  source address=10.0.0.1 "


def test_source_mac_then_ipset():
    assert rule_to_string(Rule(source=Source(mac="aa:bb:cc:dd:ee:ff", invert="true"))) == (
        "rule  source mac=aa:bb:cc:dd:ee:ff invert=true "
    )
    assert rule_to_string(Rule(source=Source(ipset="blocklist"))) == "rule  source ipset=blocklist "


def test_source_then_destination_keeps_double_space():
    rule = Rule(
        family="ipv4",
        source=Source(address="10.0.0.1"),
        destination=Destination(address="10.0.0.2", invert="true"),
    )
    assert rule_to_string(rule) == (
        "rule family=ipv4 source address=10.0.0.1  destination address=10.0.0.2 invert=true "
    )


def test_port_uses_name_key():
    rule = Rule(family="ipv4", port=Port(port="8080-8090", protocol="udp"))
    assert rule_to_string(rule) == "rule family=ipv4 port name=8080-8090 protocol=udp "


def test_single_value_clauses():
    rule = Rule(
        protocol=Protocol(value="gre"),
        icmp_block=IcmpBlock(name="echo-request"),
        icmp_type=IcmpType(name="echo-reply"),
    )
    assert rule_to_string(rule) == "rule protocol value=gre icmp-block name=echo-request icmp-type name=echo-reply "


def test_forward_port_optional_fields():
    rule = Rule(
        family="ipv4",
        forward_port=ForwardPort(port="80", protocol="tcp", to_port="8080", to_addr="10.0.0.2"),
    )
    assert rule_to_string(rule) == "rule family=ipv4 forward-port port=80 protocol=tcp to-port=8080 to-addr=10.0.0.2 "
    assert rule_to_string(Rule(forward_port=ForwardPort(port="22", to_addr="10.0.0.3"))) == (
        "rule forward-port port=22 to-addr=10.0.0.3 "
    )


def test_log_and_audit():
    rule = Rule(
        family="ipv4",
        service=Service(name="ftp"),
        log=Log(prefix="ftp", level="info", limit=Limit("1/m")),
        accept=Accept(flag=True),
    )
    assert rule_to_string(rule) == "rule family=ipv4 service name=ftp log prefix=ftp level=info limit value=1/m accept  "

    rule = Rule(service=Service(name="ftp"), audit=Audit(limit=Limit("1/m")), accept=Accept(flag=True))
    assert rule_to_string(rule) == "rule service name=ftp audit limit value=1/m accept  "


def test_accept_and_drop_limits():
    assert rule_to_string(Rule(accept=Accept(flag=True, limit=Limit("3/m")))) == "rule accept limit value=3/m "
    assert rule_to_string(Rule(drop=Drop(flag=True))) == "rule drop  "


def test_limit_dangles_when_action_flag_is_false():
    rule = Rule(family="ipv4", service=Service(name="ssh"), accept=Accept(limit=Limit("3/m")))
    assert rule_to_string(rule) == "rule family=ipv4 service name=ssh limit value=3/m "


def test_reject_is_rendered_without_type():
    assert rule_to_string(Rule(reject=Reject(type="icmp-host-prohibited"))) == (
        "rule reject type=icmp-host-prohibited "
    )
    assert rule_to_string(Rule(reject=Reject(limit=Limit("2/m")))) == "rule reject  limit value=2/m "


def test_mark_options():
    assert rule_to_string(Rule(mark=Mark(set="0x1/0xff", limit=Limit("1/s")))) == (
        "rule mark set=0x1/0xff limit value=1/s "
    )
    assert rule_to_string(Rule(mark=Mark(limit=Limit("1/s")))) == "rule mark limit value=1/s "


def test_multiple_actions_all_render():
    rule = Rule(family="ipv4", accept=Accept(flag=True), drop=Drop(flag=True))
    assert rule_to_string(rule) == "rule family=ipv4 accept  drop  "
