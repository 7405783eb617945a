"""Port/protocol helpers used when building rules from user input."""
from __future__ import annotations

from typing import Tuple

DEFAULT_PROTOCOL = "tcp"


def split_port_protocol(text: str) -> Tuple[str, str]:
    """Split ``"80/udp"`` into ``("80", "udp")``; the protocol defaults to tcp."""
    if "/" in text:
        port, protocol = text.split("/", 1)
        return port, protocol
    return text, DEFAULT_PROTOCOL


def check_port(text: str) -> None:
    """Reject ports and ``start-end`` ranges outside 1-65535.

    Accepts a bare port or a ``port/protocol`` pair.
    """
    port, _ = split_port_protocol(text)
    bounds = port.split("-", 1) if "-" in port else [port]
    try:
        values = [int(bound) for bound in bounds]
    except ValueError as exc:
        raise ValueError(f"Invalid port: {text}") from exc
    if any(not 0 < value <= 65535 for value in values):
        raise ValueError(f"Port out of range: {text}")
    if len(values) == 2 and values[0] > values[1]:
        raise ValueError(f"Port range is reversed: {text}")
