"""Rich-rule text parser.

The parser works on the space-split token list of a rule and consumes it
destructively: it finds the first clause keyword, removes it together with
the ``key=value`` tokens that belong to it, then rescans from the start
until no keyword is left. Whatever remains is noise and is dropped.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

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

logger = logging.getLogger(__name__)

KEYWORDS = (
    "rule",
    "source",
    "destination",
    "service",
    "port",
    "protocol",
    "icmp-block",
    "icmp-type",
    "forward-port",
    "log",
    "audit",
    "accept",
    "drop",
    "reject",
    "mark",
)


# Clause order of serialized rules.
RENDER_ORDER = (
    "rule",
    "source",
    "destination",
    "service",
    "port",
    "protocol",
    "icmp-block",
    "icmp-type",
    "forward-port",
    "log",
    "audit",
    "accept",
    "reject",
    "drop",
    "mark",
)


class ParseError(RuntimeError):
    pass


class RejectMode(Enum):
    """How ``reject`` options are recognised.

    ``COMPAT`` matches the option on the right-hand side of ``key=value``
    (``x=type`` followed by the type token), so ``reject type=<t>`` leaves
    the type unset. ``KEYED`` reads ``type=<t>`` like every other clause.
    """

    COMPAT = "compat"
    KEYED = "keyed"


def split_token(token: str) -> Tuple[str, Optional[str]]:
    key, sep, value = token.partition("=")
    return key, (value if sep else None)


def read_rules_file(path: Path, reject_mode: RejectMode = RejectMode.COMPAT) -> List[Rule]:
    """Load a file holding one rich rule per line."""
    lines = [
        line.strip()
        for line in path.read_text().splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
    return parse_rules(lines, reject_mode=reject_mode)


def parse_rules(texts: Iterable[str], reject_mode: RejectMode = RejectMode.COMPAT) -> List[Rule]:
    return [parse_rule(text, reject_mode=reject_mode) for text in texts]


def parse_rule(text: str, reject_mode: RejectMode = RejectMode.COMPAT) -> Rule:
    tokens = text.split(" ")
    rule = Rule()
    while True:
        index = _find_keyword(tokens)
        if index is None:
            break
        keyword = tokens.pop(index)
        handler = _KEYWORD_HANDLERS[keyword]
        try:
            handler(rule, tokens, index, reject_mode)
        except ParseError as exc:
            raise ParseError(f"Malformed rich rule {text!r}: {exc}") from exc

    leftover = [token for token in tokens if token]
    if leftover:
        logger.debug("Dropping unrecognised tokens %s from %r", leftover, text)
    return rule


def _find_keyword(tokens: List[str]) -> Optional[int]:
    for index, token in enumerate(tokens):
        if token in KEYWORDS:
            return index
    return None


def _starts_later_clause(keyword: str, token: str) -> bool:
    return token in RENDER_ORDER and RENDER_ORDER.index(token) > RENDER_ORDER.index(keyword)


def _pop_value(tokens: List[str], index: int, keyword: str) -> str:
    if index >= len(tokens):
        raise ParseError(f"'{keyword}' expects a value but the rule ends")
    token = tokens.pop(index)
    _, value = split_token(token)
    if value is None:
        raise ParseError(f"'{keyword}' expects key=value, got {token!r}")
    return value


def _pop_limit(tokens: List[str], index: int, keyword: str) -> Limit:
    # "limit value=<rate>": the bare limit token sits at index
    tokens.pop(index)
    return Limit(value=_pop_value(tokens, index, f"{keyword} limit"))


def _consume_fields(
    tokens: List[str],
    index: int,
    keyword: str,
    names: Iterable[str],
) -> Dict[str, object]:
    """Consume ``key=value`` tokens at ``index`` while their key is in ``names``.

    ``limit`` is special: it is a bare token followed by ``value=<rate>``.
    The first token with another key stops the scan and stays in place, as
    does a bare keyword of a clause rendered after this one (``port`` then
    ``protocol value=...``). Any other field name without ``=`` is an error.
    """
    wanted = set(names)
    found: Dict[str, object] = {}
    while index < len(tokens):
        token = tokens[index]
        key, value = split_token(token)
        if key == "limit" and "limit" in wanted:
            found["limit"] = _pop_limit(tokens, index, keyword)
            continue
        if key not in wanted:
            break
        if value is None:
            if _starts_later_clause(keyword, token):
                break
            raise ParseError(f"'{keyword}' expects key=value, got {token!r}")
        tokens.pop(index)
        found[key] = value
    return found


def _parse_head(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    found = _consume_fields(tokens, index, "rule", ("family",))
    if "family" in found:
        rule.family = str(found["family"])


def _parse_source(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    found = _consume_fields(tokens, index, "source", ("address", "mac", "ipset", "invert"))
    rule.source = Source(**found)


def _parse_destination(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    found = _consume_fields(tokens, index, "destination", ("address", "invert"))
    rule.destination = Destination(**found)


def _parse_service(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    rule.service = Service(name=_pop_value(tokens, index, "service"))


def _parse_port(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    found = _consume_fields(tokens, index, "port", ("name", "protocol"))
    rule.port = Port(port=str(found.get("name", "")), protocol=str(found.get("protocol", "")))


# protocol, icmp-block and icmp-type take whatever token follows as their value
def _parse_protocol(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    rule.protocol = Protocol(value=_pop_value(tokens, index, "protocol"))


def _parse_icmp_block(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    rule.icmp_block = IcmpBlock(name=_pop_value(tokens, index, "icmp-block"))


def _parse_icmp_type(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    rule.icmp_type = IcmpType(name=_pop_value(tokens, index, "icmp-type"))


def _parse_forward_port(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    found = _consume_fields(tokens, index, "forward-port", ("port", "protocol", "to-port", "to-addr"))
    rule.forward_port = ForwardPort(
        port=str(found.get("port", "")),
        protocol=str(found.get("protocol", "")),
        to_port=str(found.get("to-port", "")),
        to_addr=str(found.get("to-addr", "")),
    )


def _parse_log(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    found = _consume_fields(tokens, index, "log", ("prefix", "level", "limit"))
    rule.log = Log(**found)


def _parse_audit(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    rule.audit = Audit(limit=_optional_limit(tokens, index, "audit"))


def _parse_accept(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    rule.accept = Accept(flag=True, limit=_optional_limit(tokens, index, "accept"))


def _parse_drop(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    rule.drop = Drop(flag=True, limit=_optional_limit(tokens, index, "drop"))


def _optional_limit(tokens: List[str], index: int, keyword: str) -> Limit:
    # Nothing left at index is fine: the clause simply has no limit.
    if index < len(tokens) and split_token(tokens[index])[0] == "limit":
        return _pop_limit(tokens, index, keyword)
    return Limit()


def _parse_mark(rule: Rule, tokens: List[str], index: int, _mode: RejectMode) -> None:
    found = _consume_fields(tokens, index, "mark", ("set", "limit"))
    rule.mark = Mark(**found)


def _parse_reject(rule: Rule, tokens: List[str], index: int, mode: RejectMode) -> None:
    if mode is RejectMode.KEYED:
        found = _consume_fields(tokens, index, "reject", ("type", "limit"))
        rule.reject = Reject(**found)
        return

    reject = Reject()
    while index < len(tokens):
        _, selector = split_token(tokens[index])
        if selector == "type":
            tokens.pop(index)
            if index >= len(tokens):
                raise ParseError("'reject' type marker is not followed by a type")
            reject.type = tokens.pop(index)
        elif selector == "limit":
            tokens.pop(index)
            reject.limit = Limit(value=_pop_value(tokens, index, "reject limit"))
        else:
            break
    rule.reject = reject


_KEYWORD_HANDLERS: Dict[str, Callable[[Rule, List[str], int, RejectMode], None]] = {
    "rule": _parse_head,
    "source": _parse_source,
    "destination": _parse_destination,
    "service": _parse_service,
    "port": _parse_port,
    "protocol": _parse_protocol,
    "icmp-block": _parse_icmp_block,
    "icmp-type": _parse_icmp_type,
    "forward-port": _parse_forward_port,
    "log": _parse_log,
    "audit": _parse_audit,
    "accept": _parse_accept,
    "drop": _parse_drop,
    "reject": _parse_reject,
    "mark": _parse_mark,
}
