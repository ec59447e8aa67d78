"""LNET router metric strings: building and decoding lmt_router_v1."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .util import ParseError

_U64_LIMIT = 1 << 64

_NUM = r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|(?i:inf(?:inity)?|nan)"
_SKIP_FLOAT = rf"\s*[-+]?(?:{_NUM})"
_FLOAT = rf"\s*([-+]?(?:{_NUM}))"
_U64 = r"\s*([-+]?[0-9]+)"

_ROUTER_V1 = re.compile(rf"{_SKIP_FLOAT};([^;]+);{_FLOAT};{_FLOAT};{_U64}")


def _u64(text: str) -> int:
    value = int(text)
    if abs(value) >= _U64_LIMIT:
        return _U64_LIMIT - 1
    return value % _U64_LIMIT


@dataclass
class RouterReport:
    """A decoded lmt_router_v1 string."""

    name: str
    pct_cpu: float
    pct_mem: float
    bytes: int


def format_router_v1(nodename: str, pct_cpu: float, pct_mem: float, newbytes: int) -> str:
    """Build an lmt_router_v1 string.

    The version is written as "1.0" for compatibility with older readers.
    """
    return f"1.0;{nodename};{pct_cpu:.6f};{pct_mem:.6f};{newbytes}"


def decode_router_v1(s: str) -> RouterReport:
    """Decode an lmt_router_v1 string."""
    m = _ROUTER_V1.match(s)
    if not m:
        raise ParseError("lmt_router_v1: parse error")
    return RouterReport(
        m.group(1), float(m.group(2)), float(m.group(3)), _u64(m.group(4))
    )