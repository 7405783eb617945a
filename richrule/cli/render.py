"""CLI for building a rich-rule string from options or a JSON description."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import typer
from rich.console import Console

from ..model import (
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
from ..ports import check_port, split_port_protocol
from ..serializer import rule_to_string

ACTIONS = ("accept", "reject", "drop", "mark")

app = typer.Typer(help="Render a firewalld rich rule")
console = Console(stderr=True)
logger = logging.getLogger(__name__)


@app.command()
def main(
    family: str = typer.Option("", help="ipv4 or ipv6"),
    source: str = typer.Option("", help="Source address"),
    source_mac: str = typer.Option("", help="Source MAC address"),
    source_ipset: str = typer.Option("", help="Source ipset name"),
    source_invert: str = typer.Option("", help="Invert the source match, e.g. true"),
    destination: str = typer.Option("", help="Destination address"),
    destination_invert: str = typer.Option("", help="Invert the destination match"),
    service: str = typer.Option("", help="Service name"),
    port: str = typer.Option("", help="Port or range, optionally /protocol (default tcp)"),
    protocol: str = typer.Option("", help="Protocol value"),
    icmp_block: str = typer.Option("", help="ICMP type to block"),
    icmp_type: str = typer.Option("", help="ICMP type to match"),
    forward_port: str = typer.Option("", help="Port to forward, optionally /protocol"),
    to_port: str = typer.Option("", help="Forward destination port"),
    to_addr: str = typer.Option("", help="Forward destination address"),
    log_prefix: str = typer.Option("", help="Log prefix"),
    log_level: str = typer.Option("", help="Log level"),
    log_limit: str = typer.Option("", help="Log rate limit, e.g. 1/m"),
    audit_limit: str = typer.Option("", help="Audit rate limit"),
    action: Optional[str] = typer.Option(None, help="accept, reject, drop or mark"),
    action_limit: str = typer.Option("", help="Rate limit of the action"),
    reject_type: str = typer.Option("", help="Reject type, e.g. icmp-host-prohibited"),
    mark_set: str = typer.Option("", help="Mark value/mask"),
    json_file: Optional[Path] = typer.Option(
        None, "--json-file", exists=True, readable=True, help="Rule as JSON (overrides options)"
    ),
) -> None:
    logging.basicConfig()
    if json_file:
        try:
            rule = Rule.from_dict(json.loads(json_file.read_text()))
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--json-file") from exc
    else:
        rule = rule_from_cli_args(
            family=family,
            source=source,
            source_mac=source_mac,
            source_ipset=source_ipset,
            source_invert=source_invert,
            destination=destination,
            destination_invert=destination_invert,
            service=service,
            port=port,
            protocol=protocol,
            icmp_block=icmp_block,
            icmp_type=icmp_type,
            forward_port=forward_port,
            to_port=to_port,
            to_addr=to_addr,
            log_prefix=log_prefix,
            log_level=log_level,
            log_limit=log_limit,
            audit_limit=audit_limit,
            action=action,
            action_limit=action_limit,
            reject_type=reject_type,
            mark_set=mark_set,
        )
    if len(rule.actions()) > 1:
        console.print(f"[yellow]Rule sets several actions: {', '.join(rule.actions())}[/yellow]")
    typer.echo(rule_to_string(rule))


def rule_from_cli_args(**kwargs: Optional[str]) -> Rule:
    """Build a rule from the flat option set of the render command."""
    rule = Rule(family=kwargs.get("family") or "")
    rule.source = Source(
        address=kwargs.get("source") or "",
        mac=kwargs.get("source_mac") or "",
        ipset=kwargs.get("source_ipset") or "",
        invert=kwargs.get("source_invert") or "",
    )
    rule.destination = Destination(
        address=kwargs.get("destination") or "",
        invert=kwargs.get("destination_invert") or "",
    )
    rule.service = Service(name=kwargs.get("service") or "")
    if kwargs.get("port"):
        number, proto = _checked_port(kwargs["port"], "--port")
        rule.port = Port(port=number, protocol=proto)
    rule.protocol = Protocol(value=kwargs.get("protocol") or "")
    rule.icmp_block = IcmpBlock(name=kwargs.get("icmp_block") or "")
    rule.icmp_type = IcmpType(name=kwargs.get("icmp_type") or "")
    if kwargs.get("forward_port"):
        number, proto = _checked_port(kwargs["forward_port"], "--forward-port")
        rule.forward_port = ForwardPort(
            port=number,
            protocol=proto,
            to_port=kwargs.get("to_port") or "",
            to_addr=kwargs.get("to_addr") or "",
        )
    rule.log = Log(
        prefix=kwargs.get("log_prefix") or "",
        level=kwargs.get("log_level") or "",
        limit=Limit(kwargs.get("log_limit") or ""),
    )
    rule.audit = Audit(limit=Limit(kwargs.get("audit_limit") or ""))

    action = kwargs.get("action")
    limit = Limit(kwargs.get("action_limit") or "")
    if action == "accept":
        rule.accept = Accept(flag=True, limit=limit)
    elif action == "drop":
        rule.drop = Drop(flag=True, limit=limit)
    elif action == "reject":
        rule.reject = Reject(type=kwargs.get("reject_type") or "", limit=limit)
    elif action == "mark":
        rule.mark = Mark(set=kwargs.get("mark_set") or "", limit=limit)
    elif action:
        raise typer.BadParameter(f"Unknown action {action}; expected one of {', '.join(ACTIONS)}")
    logger.debug("Built rule %r", rule)
    return rule


def _checked_port(text: str, option: str) -> Tuple[str, str]:
    try:
        check_port(text)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint=option) from exc
    return split_port_protocol(text)
