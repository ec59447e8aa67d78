"""OSC metric strings: building and decoding lmt_osc_v1."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from .util import ParseError, skip_fields, take_fields

# Import states and their one-character codes as shown by ltop.
_STATE_CODES = {
    "CLOSED": "C",
    "NEW": "N",
    "DISCONN": "D",
    "CONNECTING": "c",
    "REPLAY": "r",
    "REPLAY_LOCKS": "l",
    "REPLAY_WAIT": "w",
    "RECOVER": "R",
    "FULL": "F",
    "EVICTED": "E",
}

_NUM = r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|(?i:inf(?:inity)?|nan)"
_SKIP_FLOAT = rf"\s*[-+]?(?:{_NUM})"

_MDS_HEADER = re.compile(rf"{_SKIP_FLOAT};([^;]+)")
_OSCINFO = re.compile(r"([^;]+);([^;]+)")


@dataclass
class OscReport:
    """A decoded lmt_osc_v1 string: the server and its raw OSC groups."""

    name: str
    oscs: list[str] = field(default_factory=list)


def osc_state_code(state: str) -> str:
    """Translate an import state name to its one-character code, or "?"."""
    return _STATE_CODES.get(state, "?")


def format_osc_v1(nodename: str, oscs: Iterable[tuple[str, str]]) -> str:
    """Build an lmt_osc_v1 string from (uuid, state name) pairs."""
    entries = list(oscs)
    if not entries:
        raise ValueError("no OSCs to report")
    result = f"1;{nodename};" + "".join(
        f"{uuid};{osc_state_code(state)};" for uuid, state in entries
    )
    if result.endswith(";"):
        result = result[:-1]
    return result


def decode_osc_v1(s: str) -> OscReport:
    """Split an lmt_osc_v1 string into the server name and per-OSC groups."""
    m = _MDS_HEADER.match(s)
    if not m:
        raise ParseError("lmt_osc_v1: parse error: mdsinfo")
    try:
        rest = skip_fields(s, 2, ";")
    except ParseError as exc:
        raise ParseError("lmt_osc_v1: parse error: skipping mdsinfo") from exc
    oscs = []
    while (taken := take_fields(rest, 2, ";")) is not None:
        group, rest = taken
        oscs.append(group)
    if rest:
        raise ParseError("lmt_osc_v1: parse error: string not exhausted")
    return OscReport(m.group(1), oscs)


def decode_osc_v1_oscinfo(s: str) -> tuple[str, str]:
    """Decode one OSC group into its (name, state code) pair."""
    m = _OSCINFO.match(s)
    if not m:
        raise ParseError("lmt_osc_v1: parse error: oscinfo")
    try:
        rest = skip_fields(s, 2, ";")
    except ParseError as exc:
        raise ParseError("lmt_osc_v1: parse error: skipping oscinfo") from exc
    if rest:
        raise ParseError("lmt_osc_v1: parse error: oscinfo: string not exhausted")
    return m.group(1), m.group(2)