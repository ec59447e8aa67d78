"""OSS and OST metric strings: building and decoding lmt_ost and lmt_oss."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from .util import ParseError, skip_fields, take_fields

# Number of ';'-delimited fields describing one OST in an lmt_ost_v2 string.
OST_V2_FIELDS = 15

# The recovery status is built in a 64 byte buffer, so at most 63 characters.
_RECOVERY_MAX = 63

_U64_LIMIT = 1 << 64

_NUM = r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|(?i:inf(?:inity)?|nan)"
_SKIP_FLOAT = rf"\s*[-+]?(?:{_NUM})"
_FLOAT = rf"\s*([-+]?(?:{_NUM}))"
_U64 = r"\s*([-+]?[0-9]+)"
_FIELD = r"([^;]+)"

_OSS_HEADER = re.compile(rf"{_SKIP_FLOAT};{_FIELD};{_FLOAT};{_FLOAT}")
_OSTINFO = re.compile(rf"{_FIELD};" + ";".join([_U64] * 13) + rf";{_FIELD}")
_OST_V1 = re.compile(rf"{_SKIP_FLOAT};{_FIELD};{_FIELD};" + ";".join([_U64] * 6))


def _u64(text: str) -> int:
    """Convert decimal text the way an unsigned 64-bit scan does."""
    value = int(text)
    if abs(value) >= _U64_LIMIT:
        return _U64_LIMIT - 1
    return value % _U64_LIMIT


@dataclass
class OstInfo:
    """Counters for one object storage target."""

    name: str
    inodes_free: int
    inodes_total: int
    kbytes_free: int
    kbytes_total: int
    read_bytes: int
    write_bytes: int
    iops: int
    num_exports: int
    lock_count: int
    grant_rate: int
    cancel_rate: int
    connect: int
    reconnect: int
    recov_status: str

    def encode(self) -> str:
        """Render this target as its group of fields, with a trailing ';'."""
        counters = (
            self.inodes_free,
            self.inodes_total,
            self.kbytes_free,
            self.kbytes_total,
            self.read_bytes,
            self.write_bytes,
            self.iops,
            self.num_exports,
            self.lock_count,
            self.grant_rate,
            self.cancel_rate,
            self.connect,
            self.reconnect,
        )
        return ";".join([self.name, *map(str, counters), self.recov_status]) + ";"


@dataclass
class OssReport:
    """A decoded lmt_ost_v2 string: the server and its raw OST groups."""

    name: str
    pct_cpu: float
    pct_mem: float
    osts: list[str] = field(default_factory=list)


@dataclass
class OssV1Record:
    """A decoded legacy lmt_oss_v1 string."""

    name: str
    pct_cpu: float
    pct_mem: float


@dataclass
class OstV1Record:
    """A decoded legacy lmt_ost_v1 string."""

    ossname: str
    ostname: str
    inodes_free: int
    inodes_total: int
    kbytes_free: int
    kbytes_total: int
    read_bytes: int
    write_bytes: int


def sum_iops(bins: Iterable[tuple[int, int]]) -> int:
    """Sum read and write RPC counts over all histogram bins."""
    return sum(reads + writes for reads, writes in bins) % _U64_LIMIT


def format_recovery_status(
    status: str,
    completed_clients: str | None = None,
    time_remaining: str | None = None,
) -> str:
    """Build the recovery status field; the status word always comes first."""
    completed = completed_clients if completed_clients is not None else ""
    remaining = time_remaining if time_remaining is not None else "0"
    return f"{status} {completed} {remaining}s remaining"[:_RECOVERY_MAX]


def format_ost_v2(
    nodename: str, pct_cpu: float, pct_mem: float, osts: Iterable[OstInfo]
) -> str:
    """Build an lmt_ost_v2 string for a server and its targets."""
    targets = list(osts)
    if not targets:
        raise ValueError("no OSTs to report")
    header = f"2;{nodename};{pct_cpu:.6f};{pct_mem:.6f};"
    return header + "".join(target.encode() for target in targets)


def decode_ost_v2(s: str) -> OssReport:
    """Split an lmt_ost_v2 string into server fields and per-OST groups."""
    m = _OSS_HEADER.match(s)
    if not m:
        raise ParseError("lmt_ost_v2: parse error: oss component")
    try:
        rest = skip_fields(s, 4, ";")
    except ParseError as exc:
        raise ParseError("lmt_ost_v2: parse error: skipping oss component") from exc
    osts = []
    while (taken := take_fields(rest, OST_V2_FIELDS, ";")) is not None:
        group, rest = taken
        osts.append(group)
    if rest:
        raise ParseError("lmt_ost_v2: parse error: string not exhausted")
    return OssReport(m.group(1), float(m.group(2)), float(m.group(3)), osts)


def decode_ost_v2_ostinfo(s: str) -> OstInfo:
    """Decode one OST group taken from an lmt_ost_v2 string."""
    m = _OSTINFO.match(s)
    if not m:
        raise ParseError("lmt_ost_v2: parse error: ostinfo")
    groups = m.groups()
    counters = [_u64(g) for g in groups[1:14]]
    return OstInfo(groups[0], *counters, groups[14])


def decode_oss_v1(s: str) -> OssV1Record:
    """Decode a legacy lmt_oss_v1 string."""
    m = _OSS_HEADER.match(s)
    if not m:
        raise ParseError("lmt_oss_v1: parse error")
    return OssV1Record(m.group(1), float(m.group(2)), float(m.group(3)))


def decode_ost_v1(s: str) -> OstV1Record:
    """Decode a legacy lmt_ost_v1 string."""
    m = _OST_V1.match(s)
    if not m:
        raise ParseError("lmt_ost_v1: parse error")
    groups = m.groups()
    return OstV1Record(groups[0], groups[1], *(_u64(g) for g in groups[2:]))