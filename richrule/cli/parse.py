"""CLI for decoding rich-rule strings into their clauses."""
from __future__ import annotations

import json
import logging
from dataclasses import fields
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..model import Limit, Rule
from ..parser import ParseError, RejectMode, parse_rules, read_rules_file

app = typer.Typer(help="Parse firewalld rich rules and show their clauses")
console = Console()
logger = logging.getLogger(__name__)


@app.command()
def main(
    rules: Optional[List[str]] = typer.Argument(None, help="Rich rule strings to parse"),
    file: Optional[Path] = typer.Option(
        None, "--file", exists=True, readable=True, help="File with one rich rule per line"
    ),
    reject_mode: RejectMode = typer.Option(
        RejectMode.COMPAT, envvar="RICHRULE_REJECT_MODE", help="How reject options are read"
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log dropped tokens"),
) -> None:
    logging.basicConfig()
    if verbose:
        logging.getLogger("richrule").setLevel(logging.DEBUG)

    try:
        parsed = parse_rules(rules or [], reject_mode=reject_mode)
        if file:
            parsed.extend(read_rules_file(file, reject_mode=reject_mode))
    except ParseError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    logger.debug("Parsed %d rule(s)", len(parsed))

    if json_output:
        typer.echo(json.dumps([rule.to_dict() for rule in parsed], indent=2))
        return
    for idx, rule in enumerate(parsed, start=1):
        console.print(_rule_table(idx, rule))
        actions = rule.actions()
        if len(actions) > 1:
            console.print(f"[yellow]  rule {idx} sets several actions: {', '.join(actions)}[/yellow]")


def _rule_table(idx: int, rule: Rule) -> Table:
    table = Table(title=f"[{idx}] family={rule.family or '-'}")
    table.add_column("Clause")
    table.add_column("Field")
    table.add_column("Value")
    for item in fields(rule):
        if item.name == "family":
            continue
        clause = getattr(rule, item.name)
        if clause.is_empty():
            continue
        for clause_field in fields(clause):
            value = getattr(clause, clause_field.name)
            if isinstance(value, Limit):
                value = value.value
            if value in ("", False):
                continue
            table.add_row(item.name.replace("_", "-"), clause_field.name.replace("_", "-"), str(value))
    return table
