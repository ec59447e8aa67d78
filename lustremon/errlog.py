"""Message logging to a stream, a file or syslog."""

from __future__ import annotations

import enum
import os
import sys
from typing import TextIO

try:
    import syslog as _syslog
except ImportError:  # not available on every platform
    _syslog = None

FACILITIES = {
    "daemon": 3 << 3,
    "local0": 16 << 3,
    "local1": 17 << 3,
    "local2": 18 << 3,
    "local3": 19 << 3,
    "local4": 20 << 3,
    "local5": 21 << 3,
    "local6": 22 << 3,
    "local7": 23 << 3,
    "user": 1 << 3,
}

LEVELS = {
    "emerg": 0,
    "alert": 1,
    "crit": 2,
    "err": 3,
    "warning": 4,
    "notice": 5,
    "info": 6,
    "debug": 7,
}

_MESSAGE_MAX = 255
_ERRTEXT_MAX = 63
_LOG_PID = 0x01
_LOG_NDELAY = 0x08


class _Dest(enum.Enum):
    STREAM = "stream"
    SYSLOG = "syslog"


def _name_of(value: int, table: dict[str, int]) -> str | None:
    return next((name for name, n in table.items() if n == value), None)


class ErrorLog:
    """Writes messages prefixed with a program name to a chosen destination."""

    def __init__(self, prog: str = "<unknown>") -> None:
        self.prog = os.path.basename(prog)
        self._dest = _Dest.STREAM
        self._stream_kind: str | None = None  # "stdout", "stderr", "file"
        self._file: TextIO | None = None
        self._filename: str | None = None
        self._facility = FACILITIES["daemon"]
        self._level = LEVELS["err"]

    def __enter__(self) -> ErrorLog:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close an open log file and any syslog connection."""
        if self._file is not None:
            self._file.close()
            self._file = None
            self._stream_kind = None
        if self._dest is _Dest.SYSLOG and _syslog is not None:
            _syslog.closelog()

    def _open_syslog(self) -> None:
        if _syslog is None:
            raise OSError("syslog is not available on this platform")
        _syslog.openlog(self.prog, _LOG_NDELAY | _LOG_PID, self._facility)
        self._dest = _Dest.SYSLOG

    def set_dest(self, dest: str) -> None:
        """Choose where messages go.

        ``dest`` is "syslog", "syslog:FACILITY[:LEVEL]", "stderr", "stdout"
        or a file name to append to.
        """
        self.close()
        if dest == "syslog":
            self._open_syslog()
        elif dest.startswith("syslog:"):
            fac, has_level, lev = dest[len("syslog:"):].partition(":")
            if fac not in FACILITIES:
                raise ValueError(f"unknown syslog facility: {fac}")
            self._facility = FACILITIES[fac]
            if has_level:
                if lev not in LEVELS:
                    raise ValueError(f"unknown syslog level: {lev}")
                self._level = LEVELS[lev]
            self._open_syslog()
        else:
            if dest in ("stderr", "stdout"):
                self._stream_kind = dest
            else:
                self._file = open(dest, "a", encoding="utf-8")
                self._stream_kind = "file"
                self._filename = dest
            self._dest = _Dest.STREAM

    def get_dest(self) -> str:
        """Describe the current destination in the form set_dest accepts."""
        if self._dest is _Dest.SYSLOG:
            return "syslog:{}:{}".format(
                _name_of(self._facility, FACILITIES), _name_of(self._level, LEVELS)
            )
        if self._stream_kind in ("stdout", "stderr"):
            return self._stream_kind
        if self._stream_kind == "file" and self._filename is not None:
            return self._filename
        return "unknown"

    def _stream(self) -> TextIO:
        if self._stream_kind is None:
            self._stream_kind = "stderr"
        if self._stream_kind == "file" and self._file is not None:
            return self._file
        return sys.stdout if self._stream_kind == "stdout" else sys.stderr

    def _emit(self, text: str) -> None:
        if self._dest is _Dest.SYSLOG and _syslog is not None:
            _syslog.syslog(self._level, text)
            return
        stream = self._stream()
        stream.write(f"{self.prog}: {text}\n")
        stream.flush()

    def msg(self, message: str) -> None:
        """Log a message."""
        self._emit(message[:_MESSAGE_MAX])

    def err(self, message: str, errnum: int) -> None:
        """Log a message followed by the description of ``errnum``."""
        errtext = os.strerror(errnum)[:_ERRTEXT_MAX]
        self._emit(f"{message[:_MESSAGE_MAX]}: {errtext}")

    def msg_exit(self, message: str) -> None:
        """Log a message, then exit with status 1."""
        self.msg(message)
        raise SystemExit(1)

    def err_exit(self, message: str, errnum: int) -> None:
        """Log a message with the description of ``errnum``, then exit with status 1."""
        self.err(message, errnum)
        raise SystemExit(1)