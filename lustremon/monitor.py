"""Route incoming metric strings to the storage handler for their kind."""

from __future__ import annotations

import math
import re
import struct
from typing import Callable, Protocol, Union

from .util import ParseError

MONITOR_NAME = "lmt_mysql"
METRIC_NAMES = ("lmt_mdt", "lmt_ost", "lmt_router")
LEGACY_METRIC_NAMES = ("lmt_oss", "lmt_mds")

_NUM = r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|(?i:inf(?:inity)?|nan)"
_VERSION = re.compile(rf"\s*([-+]?(?:{_NUM}))")


class MetricSink(Protocol):
    """Storage for decoded metrics, one method per metric kind and version."""

    def insert_ost_v2(self, s: str) -> None:
        """Store an lmt_ost_v2 string: one server with several targets."""

    def insert_mdt_v1(self, s: str) -> None:
        """Store an lmt_mdt_v1 string: one server with several targets."""

    def insert_router_v1(self, s: str) -> None:
        """Store an lmt_router_v1 string."""

    def insert_mds_v2(self, s: str) -> None:
        """Store a legacy lmt_mds_v2 string."""

    def insert_oss_v1(self, s: str) -> None:
        """Store a legacy lmt_oss_v1 string."""

    def insert_ost_v1(self, s: str) -> None:
        """Store a legacy lmt_ost_v1 string."""


class UnknownMetricError(LookupError):
    """A metric name and version pair that no handler accepts."""

    def __init__(self, nodename: str, metric_name: str, version: float) -> None:
        self.nodename = nodename
        self.metric_name = metric_name
        self.version = version
        shown = int(version) if math.isfinite(version) else version
        super().__init__(f"{nodename}: {metric_name}_v{shown}: unknown metric")


def metric_names() -> str:
    """Comma-separated names of every metric this monitor accepts."""
    return ",".join(METRIC_NAMES + LEGACY_METRIC_NAMES)


def _as_single(value: float) -> float:
    """Round a value to single precision, as the version is read."""
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def parse_version(s: str) -> float:
    """Read the leading version number of a metric string."""
    m = _VERSION.match(s)
    if not m:
        raise ParseError("error parsing metric version")
    return _as_single(float(m.group(1)))


_Handler = Callable[[MetricSink, str], None]

_HANDLERS: dict[tuple[str, float], _Handler] = {
    ("lmt_ost", 2.0): lambda sink, s: sink.insert_ost_v2(s),
    ("lmt_mdt", 1.0): lambda sink, s: sink.insert_mdt_v1(s),
    ("lmt_router", 1.0): lambda sink, s: sink.insert_router_v1(s),
    ("lmt_mds", 2.0): lambda sink, s: sink.insert_mds_v2(s),
    ("lmt_oss", 1.0): lambda sink, s: sink.insert_oss_v1(s),
    ("lmt_ost", 1.0): lambda sink, s: sink.insert_ost_v1(s),
}


def dispatch_metric(
    nodename: str,
    metric_name: str,
    value: Union[str, bytes],
    sink: MetricSink,
) -> None:
    """Pass a metric value to the sink method for its name and version.

    Raises TypeError for a value that is not a string, ParseError when the
    version cannot be read, and UnknownMetricError for an unhandled pair.
    """
    if isinstance(value, (bytes, bytearray)):
        s = bytes(value).split(b"\0", 1)[0].decode("utf-8", errors="replace")
    elif isinstance(value, str):
        s = value
    else:
        raise TypeError(
            f"{nodename}: {metric_name}: incorrect metric_type: "
            f"{type(value).__name__}"
        )
    try:
        version = parse_version(s)
    except ParseError as exc:
        raise ParseError(
            f"{nodename}: {metric_name}: error parsing metric version"
        ) from exc
    handler = _HANDLERS.get((metric_name, version))
    if handler is None:
        raise UnknownMetricError(nodename, metric_name, version)
    handler(sink, s)