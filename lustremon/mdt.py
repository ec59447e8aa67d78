"""Metadata server metric strings: building and decoding lmt_mdt and lmt_mds."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from .util import ParseError, append_field, skip_fields, take_fields

# Fixed order of operations in an lmt_mdt_v1 string.
OPTAB_MDT_V1 = (
    "open",
    "close",
    "mknod",
    "link",
    "unlink",
    "mkdir",
    "rmdir",
    "rename",
    "getxattr",
    "process_config",
    "connect",
    "reconnect",
    "disconnect",
    "statfs",
    "create",
    "destroy",
    "setattr",
    "getattr",
    "llog_init",
    "notify",
    "quotactl",
)

# Fixed order of operations in a legacy lmt_mds_v2 string.
OPTAB_MDS_V2 = (
    "open",
    "close",
    "mknod",
    "link",
    "unlink",
    "mkdir",
    "rmdir",
    "rename",
    "getxattr",
    "setxattr",
    "iocontrol",
    "get_info",
    "set_info_async",
    "attach",
    "detach",
    "setup",
    "precleanup",
    "cleanup",
    "process_config",
    "postrecov",
    "add_conn",
    "del_conn",
    "connect",
    "reconnect",
    "disconnect",
    "statfs",
    "statfs_async",
    "packmd",
    "unpackmd",
    "checkmd",
    "preallocate",
    "precreate",
    "create",
    "destroy",
    "setattr",
    "setattr_async",
    "getattr",
    "getattr_async",
    "brw",
    "brw_async",
    "prep_async_page",
    "reget_short_lock",
    "release_short_lock",
    "queue_async_io",
    "queue_group_io",
    "trigger_group_io",
    "set_async_flags",
    "teardown_async_page",
    "merge_lvb",
    "adjust_kms",
    "punch",
    "sync",
    "migrate",
    "copy",
    "iterate",
    "preprw",
    "commitrw",
    "enqueue",
    "match",
    "change_cbdata",
    "cancel",
    "cancel_unused",
    "join_lru",
    "init_export",
    "destroy_export",
    "extent_calc",
    "llog_init",
    "llog_finish",
    "pin",
    "unpin",
    "import_event",
    "notify",
    "health_check",
    "quotacheck",
    "quotactl",
    "quota_adjust_quint",
    "ping",
    "register_page_removal_cb",
    "unregister_page_removal_cb",
    "register_lock_cancel_cb",
    "unregister_lock_cancel_cb",
)

# Number of ';'-delimited fields describing one MDT in an lmt_mdt_v1 string.
MDT_V1_FIELDS = 5 + 3 * len(OPTAB_MDT_V1)

_U64_LIMIT = 1 << 64

_NUM = r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|(?i:inf(?:inity)?|nan)"
_SKIP_FLOAT = rf"\s*[-+]?(?:{_NUM})"
_FLOAT = rf"\s*([-+]?(?:{_NUM}))"
_U64 = r"\s*([-+]?[0-9]+)"
_FIELD = r"([^;]+)"

_MDS_HEADER = re.compile(rf"{_SKIP_FLOAT};{_FIELD};{_FLOAT};{_FLOAT}")
_MDTINFO = re.compile(rf"{_FIELD};" + ";".join([_U64] * 4))
_MDOP = re.compile(";".join([_U64] * 3) + rf";{_FIELD}")
_MDS_V2 = re.compile(
    rf"{_SKIP_FLOAT};{_FIELD};{_FIELD};{_FLOAT};{_FLOAT};" + ";".join([_U64] * 4)
)


def _u64(text: str) -> int:
    """Convert decimal text the way an unsigned 64-bit scan does."""
    value = int(text)
    if abs(value) >= _U64_LIMIT:
        return _U64_LIMIT - 1
    return value % _U64_LIMIT


@dataclass
class MdOp:
    """Statistics for one metadata operation."""

    name: str
    samples: int
    sum: int
    sumsquares: int


@dataclass
class MdtInfo:
    """Counters for one metadata target."""

    name: str
    inodes_free: int
    inodes_total: int
    kbytes_free: int
    kbytes_total: int
    ops: list[MdOp] = field(default_factory=list)

    def encode(self) -> str:
        """Render this target as its group of fields, with a trailing ';'.

        Every operation of the fixed table is written in table order;
        operations without statistics are written as zeroes.
        """
        by_name: dict[str, MdOp] = {}
        for op in self.ops:
            by_name.setdefault(op.name, op)
        parts = [
            f"{self.name};{self.inodes_free};{self.inodes_total};"
            f"{self.kbytes_free};{self.kbytes_total};"
        ]
        for opname in OPTAB_MDT_V1:
            op = by_name.get(opname)
            if op is None:
                parts.append("0;0;0;")
            else:
                parts.append(f"{op.samples};{op.sum};{op.sumsquares};")
        return "".join(parts)


@dataclass
class MdsReport:
    """A decoded lmt_mdt_v1 string: the server and its raw MDT groups."""

    name: str
    pct_cpu: float
    pct_mem: float
    mdts: list[str] = field(default_factory=list)


@dataclass
class MdsV2Record:
    """A decoded legacy lmt_mds_v2 string."""

    mdsname: str
    mdtname: str
    pct_cpu: float
    pct_mem: float
    inodes_free: int
    inodes_total: int
    kbytes_free: int
    kbytes_total: int
    ops: list[MdOp] = field(default_factory=list)


def _decode_op_groups(
    rest: str, optab: tuple[str, ...], proto: str, context: str
) -> tuple[list[MdOp], str]:
    ops = []
    while (taken := take_fields(rest, 3, ";")) is not None:
        group, rest = taken
        if len(ops) >= len(optab):
            raise ParseError(f"{proto}: parse error: too many mdops")
        ops.append(decode_mdt_v1_mdops(append_field(group, optab[len(ops)], ";")))
    if rest:
        raise ParseError(f"{proto}: parse error: {context}string not exhausted")
    return ops, rest


def format_mdt_v1(
    nodename: str, pct_cpu: float, pct_mem: float, mdts: Iterable[MdtInfo]
) -> str:
    """Build an lmt_mdt_v1 string for a server and its targets."""
    targets = list(mdts)
    if not targets:
        raise ValueError("no MDTs to report")
    result = f"1;{nodename};{pct_cpu:.6f};{pct_mem:.6f};"
    result += "".join(target.encode() for target in targets)
    if result.endswith(";"):
        result = result[:-1]
    return result


def decode_mdt_v1(s: str) -> MdsReport:
    """Split an lmt_mdt_v1 string into server fields and per-MDT groups."""
    m = _MDS_HEADER.match(s)
    if not m:
        raise ParseError("lmt_mdt_v1: parse error: mdsinfo")
    try:
        rest = skip_fields(s, 4, ";")
    except ParseError as exc:
        raise ParseError("lmt_mdt_v1: parse error: skipping mdsinfo") from exc
    mdts = []
    while (taken := take_fields(rest, MDT_V1_FIELDS, ";")) is not None:
        group, rest = taken
        mdts.append(group)
    if rest:
        raise ParseError("lmt_mdt_v1: parse error: string not exhausted")
    return MdsReport(m.group(1), float(m.group(2)), float(m.group(3)), mdts)


def decode_mdt_v1_mdtinfo(s: str) -> MdtInfo:
    """Decode one MDT group taken from an lmt_mdt_v1 string."""
    m = _MDTINFO.match(s)
    if not m:
        raise ParseError("lmt_mdt_v1: parse error: mdtinfo")
    try:
        rest = skip_fields(s, 5, ";")
    except ParseError as exc:
        raise ParseError("lmt_mdt_v1: parse error: skipping mdtinfo") from exc
    ops, _ = _decode_op_groups(rest, OPTAB_MDT_V1, "lmt_mdt_v1", "mdtinfo: ")
    counters = [_u64(g) for g in m.groups()[1:]]
    return MdtInfo(m.group(1), *counters, ops)


def decode_mdt_v1_mdops(s: str) -> MdOp:
    """Decode an operation string of the form "samples;sum;sumsquares;name"."""
    m = _MDOP.match(s)
    if not m:
        raise ParseError("lmt_mdt_v1: parse error: mdops")
    samples, total, sumsquares = (_u64(g) for g in m.groups()[:3])
    return MdOp(m.group(4), samples, total, sumsquares)


def decode_mds_v2(s: str) -> MdsV2Record:
    """Decode a legacy lmt_mds_v2 string: one server with one target."""
    m = _MDS_V2.match(s)
    if not m:
        raise ParseError("lmt_mds_v2: parse error: mds component")
    try:
        rest = skip_fields(s, 9, ";")
    except ParseError as exc:
        raise ParseError("lmt_mds_v2: parse error: skipping mds component") from exc
    ops, _ = _decode_op_groups(rest, OPTAB_MDS_V2, "lmt_mds_v2", "")
    groups = m.groups()
    return MdsV2Record(
        groups[0],
        groups[1],
        float(groups[2]),
        float(groups[3]),
        *(_u64(g) for g in groups[4:8]),
        ops,
    )


def decode_mds_v2_mdops(s: str) -> MdOp:
    """Decode a legacy operation string; same form as lmt_mdt_v1 operations."""
    return decode_mdt_v1_mdops(s)