"""Data structures describing a firewalld rich rule."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping


class Clause:
    """Mixin for clause dataclasses whose absence is their zero value."""

    def is_empty(self) -> bool:
        return self == type(self)()


@dataclass
class Limit(Clause):
    value: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value}

    @staticmethod
    def from_dict(data: Mapping[str, Any] | None) -> "Limit":
        if data is None:
            return Limit()
        if not isinstance(data, Mapping):
            raise ValueError(f"limit must be an object like {{\"value\": \"1/m\"}}, got {data!r}")
        value = data.get("value")
        return Limit() if value is None else Limit(value=_string_field("limit.value", value))


@dataclass
class Source(Clause):
    address: str = ""
    mac: str = ""
    ipset: str = ""
    invert: str = ""


@dataclass
class Destination(Clause):
    address: str = ""
    invert: str = ""


@dataclass
class Service(Clause):
    name: str = ""


@dataclass
class Port(Clause):
    port: str = ""
    protocol: str = ""


@dataclass
class Protocol(Clause):
    value: str = ""


@dataclass
class IcmpBlock(Clause):
    name: str = ""


@dataclass
class IcmpType(Clause):
    name: str = ""


@dataclass
class ForwardPort(Clause):
    port: str = ""
    protocol: str = ""
    to_port: str = ""
    to_addr: str = ""


@dataclass
class Log(Clause):
    prefix: str = ""
    level: str = ""
    limit: Limit = field(default_factory=Limit)


@dataclass
class Audit(Clause):
    limit: Limit = field(default_factory=Limit)


@dataclass
class Accept(Clause):
    flag: bool = False
    limit: Limit = field(default_factory=Limit)

    @property
    def present(self) -> bool:
        return self.flag


@dataclass
class Reject(Clause):
    type: str = ""
    limit: Limit = field(default_factory=Limit)


@dataclass
class Drop(Clause):
    flag: bool = False
    limit: Limit = field(default_factory=Limit)

    @property
    def present(self) -> bool:
        return self.flag


@dataclass
class Mark(Clause):
    set: str = ""
    limit: Limit = field(default_factory=Limit)


# Dict keys used by the JSON form of a rule; anything not listed maps 1:1.
_RULE_KEYS: Dict[str, str] = {
    "icmp_block": "icmpblock",
    "icmp_type": "icmptype",
    "forward_port": "forwardport",
}
_FORWARD_PORT_KEYS: Dict[str, str] = {
    "to_port": "toport",
    "to_addr": "toaddr",
}


@dataclass
class Rule:
    family: str = ""
    source: Source = field(default_factory=Source)
    destination: Destination = field(default_factory=Destination)
    service: Service = field(default_factory=Service)
    port: Port = field(default_factory=Port)
    protocol: Protocol = field(default_factory=Protocol)
    icmp_block: IcmpBlock = field(default_factory=IcmpBlock)
    icmp_type: IcmpType = field(default_factory=IcmpType)
    forward_port: ForwardPort = field(default_factory=ForwardPort)
    log: Log = field(default_factory=Log)
    audit: Audit = field(default_factory=Audit)
    accept: Accept = field(default_factory=Accept)
    reject: Reject = field(default_factory=Reject)
    drop: Drop = field(default_factory=Drop)
    mark: Mark = field(default_factory=Mark)

    def __str__(self) -> str:
        from .serializer import rule_to_string

        return rule_to_string(self)

    def copy(self) -> "Rule":
        return copy.deepcopy(self)

    def actions(self) -> List[str]:
        """Names of the action clauses set on this rule, in render order.

        More than one entry means the rule is ambiguous to firewalld; the
        model does not prevent it.
        """
        present = []
        if self.accept.present:
            present.append("accept")
        if not self.reject.is_empty():
            present.append("reject")
        if self.drop.present:
            present.append("drop")
        if not self.mark.is_empty():
            present.append("mark")
        return present

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"family": self.family}
        for item in fields(self):
            if item.name == "family":
                continue
            key = _RULE_KEYS.get(item.name, item.name)
            payload[key] = _clause_to_dict(getattr(self, item.name))
        return payload

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Rule":
        """Build a rule from its JSON form.

        Missing keys and nulls take zero values; values of the wrong JSON
        type raise ValueError.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"rule must be an object, got {data!r}")
        family = data.get("family")
        rule = Rule(family="" if family is None else _string_field("family", family))
        for item in fields(rule):
            if item.name == "family":
                continue
            key = _RULE_KEYS.get(item.name, item.name)
            clause_type = type(getattr(rule, item.name))
            setattr(rule, item.name, _clause_from_dict(clause_type, data.get(key)))
        return rule


def _clause_to_dict(clause: Clause) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for item in fields(clause):
        value = getattr(clause, item.name)
        key = _FORWARD_PORT_KEYS.get(item.name, item.name) if isinstance(clause, ForwardPort) else item.name
        payload[key] = value.to_dict() if isinstance(value, Limit) else value
    return payload


def _clause_from_dict(clause_type: type, data: Any) -> Clause:
    if data is None:
        return clause_type()
    if not isinstance(data, Mapping):
        raise ValueError(f"{clause_type.__name__} must be an object, got {data!r}")
    kwargs: Dict[str, Any] = {}
    for item in fields(clause_type):
        key = _FORWARD_PORT_KEYS.get(item.name, item.name) if clause_type is ForwardPort else item.name
        value = data.get(key)
        # null and missing keys both mean the zero value
        if value is None:
            continue
        if item.name == "limit":
            kwargs[item.name] = Limit.from_dict(value)
        elif item.name == "flag":
            if not isinstance(value, bool):
                raise ValueError(f"{clause_type.__name__}.flag must be true or false, got {value!r}")
            kwargs[item.name] = value
        else:
            kwargs[item.name] = _string_field(f"{clause_type.__name__}.{key}", value)
    return clause_type(**kwargs)


def _string_field(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {value!r}")
    return value
