"""Render :class:`Rule` values into firewalld rich-rule text.

Each clause renderer returns its own fragment including the trailing space;
fragments are concatenated as-is, so the canonical output keeps the double
spaces firewalld tolerates (e.g. after ``source`` or ``accept``).
"""
from __future__ import annotations

from typing import Callable, List, Tuple

from .model import (
    Accept,
    Audit,
    Clause,
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


def _limit(limit: Limit) -> str:
    return "limit value=" + limit.value


def render_source(source: Source) -> str:
    text = " source "
    if source.address:
        text += "address=" + source.address
    elif source.mac:
        text += "mac=" + source.mac
    else:
        text += "ipset=" + source.ipset
    if source.invert:
        text += " invert=" + source.invert
    return text + " "


def render_destination(destination: Destination) -> str:
    text = " destination "
    if destination.address:
        text += "address=" + destination.address
    if destination.invert:
        text += " invert=" + destination.invert
    return text + " "


def render_service(service: Service) -> str:
    return f"service name={service.name} "


def render_port(port: Port) -> str:
    text = "port "
    if port.port:
        text += "name=" + port.port
    if port.protocol:
        text += " protocol=" + port.protocol
    return text + " "


def render_protocol(protocol: Protocol) -> str:
    return f"protocol value={protocol.value} "


def render_icmp_block(icmp_block: IcmpBlock) -> str:
    return f"icmp-block name={icmp_block.name} "


def render_icmp_type(icmp_type: IcmpType) -> str:
    return f"icmp-type name={icmp_type.name} "


def render_forward_port(forward_port: ForwardPort) -> str:
    text = "forward-port "
    if forward_port.port:
        text += "port=" + forward_port.port
    if forward_port.protocol:
        text += " protocol=" + forward_port.protocol
    if forward_port.to_port:
        text += " to-port=" + forward_port.to_port
    if forward_port.to_addr:
        text += " to-addr=" + forward_port.to_addr
    return text + " "


def render_log(log: Log) -> str:
    text = "log"
    if log.prefix:
        text += " prefix=" + log.prefix
    if log.level:
        text += " level=" + log.level
    if not log.limit.is_empty():
        text += " " + _limit(log.limit)
    return text + " "


def render_audit(audit: Audit) -> str:
    text = "audit"
    if not audit.limit.is_empty():
        text += " " + _limit(audit.limit)
    return text + " "


def _render_flag_action(keyword: str, flag: bool, limit: Limit) -> str:
    # The limit is appended even without the keyword; callers only reach
    # this for non-empty clauses, so flag=False means a dangling limit.
    text = keyword + " " if flag else ""
    if not limit.is_empty():
        text += _limit(limit)
    return text + " "


def render_accept(accept: Accept) -> str:
    return _render_flag_action("accept", accept.flag, accept.limit)


def render_drop(drop: Drop) -> str:
    return _render_flag_action("drop", drop.flag, drop.limit)


def render_reject(reject: Reject) -> str:
    text = "reject "
    if reject.type:
        text += "type=" + reject.type
    if not reject.limit.is_empty():
        text += " " + _limit(reject.limit)
    return text + " "


def render_mark(mark: Mark) -> str:
    text = "mark"
    if mark.set:
        text += " set=" + mark.set
    if not mark.limit.is_empty():
        text += " " + _limit(mark.limit)
    return text + " "


CLAUSE_RENDERERS: List[Tuple[str, Callable[..., str]]] = [
    ("source", render_source),
    ("destination", render_destination),
    ("service", render_service),
    ("port", render_port),
    ("protocol", render_protocol),
    ("icmp_block", render_icmp_block),
    ("icmp_type", render_icmp_type),
    ("forward_port", render_forward_port),
    ("log", render_log),
    ("audit", render_audit),
    ("accept", render_accept),
    ("reject", render_reject),
    ("drop", render_drop),
    ("mark", render_mark),
]


def rule_to_string(rule: Rule) -> str:
    """Serialize a rule; never fails, whatever combination of clauses is set."""
    text = "rule "
    if rule.family:
        text += "family=" + rule.family
    for attribute, renderer in CLAUSE_RENDERERS:
        clause: Clause = getattr(rule, attribute)
        if clause.is_empty():
            continue
        fragment = renderer(clause)
        if not text.endswith(" ") and not fragment.startswith(" "):
            # only after "family=<f>": keep it a separate token
            text += " "
        text += fragment
    return text
