"""firewalld rich-rule codec public API surface."""

from .model import (
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
from .parser import ParseError, RejectMode, parse_rule, parse_rules, read_rules_file
from .serializer import rule_to_string

__all__ = [
    "Accept",
    "Audit",
    "Destination",
    "Drop",
    "ForwardPort",
    "IcmpBlock",
    "IcmpType",
    "Limit",
    "Log",
    "Mark",
    "ParseError",
    "Port",
    "Protocol",
    "Reject",
    "RejectMode",
    "Rule",
    "Service",
    "Source",
    "parse_rule",
    "parse_rules",
    "read_rules_file",
    "rule_to_string",
]
