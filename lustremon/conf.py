"""Configuration registry, loaded from a Lua-style assignment file."""

from __future__ import annotations

import math
import os
import re
import sys
from dataclasses import dataclass
from typing import Union

DEFAULT_CONFIG_PATH = "/etc/lmt/lmt.conf"

# Each setting is read from the global named "lmt_" followed by the field name.
_KEY_PREFIX = "lmt_"

_STRING_FIELDS = (
    "db_rwuser",
    "db_rwpasswd",
    "db_rouser",
    "db_ropasswd",
    "db_host",
)

_INT_FIELDS = (
    "db_port",
    "db_debug",
    "db_autoconf",
    "cbr_debug",
    "proto_debug",
)

_KEYWORDS = frozenset(
    "and break do else elseif end false for function if in local nil not or "
    "repeat return then true until while".split()
)

_Value = Union[str, int, float, bool, None]


class ConfigError(Exception):
    """The configuration file could not be read or has a bad value."""


@dataclass
class LmtConfig:
    """Settings for database access and debugging."""

    db_rwuser: str | None = None
    db_rwpasswd: str | None = None
    db_rouser: str | None = None
    db_ropasswd: str | None = None
    db_host: str | None = None
    db_port: int = 0
    db_debug: int = 0
    db_autoconf: int = 1
    cbr_debug: int = 0
    proto_debug: int = 0


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<comment>--(?:\[(?P<ceq>=*)\[.*?\](?P=ceq)\]|[^\n]*))
  | (?P<longstr>\[(?P<leq>=*)\[(?P<lbody>.*?)\](?P=leq)\])
  | (?P<str>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
  | (?P<num>0[xX][0-9a-fA-F]+|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>[=;,\-])
    """,
    re.VERBOSE | re.DOTALL,
)

_SIMPLE_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "a": "\a", "b": "\b",
    "f": "\f", "v": "\v", "\\": "\\", '"': '"', "'": "'", "\n": "\n",
}

_DECIMAL_RE = re.compile(r"[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_HEX_RE = re.compile(r"[-+]?0[xX][0-9a-fA-F]+")


def _unescape(body: str, path: str, line: int) -> str:
    out = []
    chars = iter(enumerate(body))
    for index, ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        _, nxt = next(chars)
        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
        elif nxt.isdigit():
            digits = re.match(r"[0-9]{1,3}", body[index + 1:]).group(0)
            for _extra in digits[1:]:
                next(chars)
            code = int(digits)
            if code > 255:
                raise ConfigError(f"{path}:{line}: escape sequence too large")
            out.append(chr(code))
        else:
            out.append(nxt)
    return "".join(out)


def _to_number(value: _Value) -> int | float | None:
    """Lua's numeric coercion: numbers and numeric strings."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    text = value.strip()
    if _HEX_RE.fullmatch(text):
        return int(text, 16)
    if _DECIMAL_RE.fullmatch(text):
        return float(text)
    return None


def _to_string(value: _Value) -> str | None:
    """Lua's string coercion: strings and numbers."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        return format(value, ".14g")
    return str(value)


class _Parser:
    def __init__(self, text: str, path: str) -> None:
        self.path = path
        self.tokens = list(self._tokenize(text))
        self.pos = 0
        self.env: dict[str, _Value] = {}
        self.locals: dict[str, _Value] = {}

    def _tokenize(self, text: str):
        pos = 0
        while pos < len(text):
            m = _TOKEN_RE.match(text, pos)
            line = text.count("\n", 0, pos) + 1
            if not m:
                raise ConfigError(
                    f"{self.path}:{line}: unexpected symbol near '{text[pos]}'"
                )
            kind = m.lastgroup
            if kind in ("ceq", "leq", "lbody"):
                kind = "comment" if m.group("comment") else "longstr"
            pos = m.end()
            if kind in ("ws", "comment"):
                continue
            if kind == "longstr":
                body = m.group("lbody")
                if body.startswith("\r\n"):
                    body = body[2:]
                elif body.startswith("\n"):
                    body = body[1:]
                yield ("str", body, line)
            elif kind == "str":
                yield ("str", _unescape(m.group(0)[1:-1], self.path, line), line)
            else:
                yield (kind, m.group(0), line)

    def _peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _error(self, tok) -> ConfigError:
        if tok is None:
            line = self.tokens[-1][2] if self.tokens else 1
            return ConfigError(f"{self.path}:{line}: unexpected symbol near <eof>")
        return ConfigError(f"{self.path}:{tok[2]}: unexpected symbol near '{tok[1]}'")

    def _accept(self, kind: str, value: str | None = None):
        tok = self._peek()
        if tok and tok[0] == kind and (value is None or tok[1] == value):
            self.pos += 1
            return tok
        return None

    def _expect_name(self) -> str:
        tok = self._peek()
        if not tok or tok[0] != "name" or tok[1] in _KEYWORDS:
            raise self._error(tok)
        self.pos += 1
        return tok[1]

    def _expect(self, kind: str, value: str) -> None:
        if not self._accept(kind, value):
            raise self._error(self._peek())

    def _expr(self) -> _Value:
        tok = self._peek()
        if tok is None:
            raise self._error(tok)
        if self._accept("op", "-"):
            operand = _to_number(self._expr())
            if operand is None:
                raise ConfigError(
                    f"{self.path}:{tok[2]}: attempt to perform arithmetic on a non-number"
                )
            return -operand
        self.pos += 1
        kind, text, _ = tok
        if kind == "num":
            if text[:2] in ("0x", "0X"):
                return int(text, 16)
            if any(c in text for c in ".eE"):
                return float(text)
            return int(text)
        if kind == "str":
            return text
        if kind == "name":
            if text == "true":
                return True
            if text == "false":
                return False
            if text == "nil":
                return None
            if text in _KEYWORDS:
                raise self._error(tok)
            if text in self.locals:
                return self.locals[text]
            return self.env.get(text)
        raise self._error(tok)

    def parse(self) -> dict[str, _Value]:
        while self._peek() is not None:
            if self._accept(";", None) or self._accept("op", ";"):
                continue
            is_local = bool(self._accept("name", "local"))
            names = [self._expect_name()]
            while self._accept("op", ","):
                names.append(self._expect_name())
            self._expect("op", "=")
            values = [self._expr()]
            while self._accept("op", ","):
                values.append(self._expr())
            target = self.locals if is_local else self.env
            for index, name in enumerate(names):
                target[name] = values[index] if index < len(values) else None
        return self.env


def parse_config(text: str, path: str = "<string>") -> LmtConfig:
    """Parse configuration text and return the resulting settings."""
    env = _Parser(text, path).parse()
    config = LmtConfig()
    for attr in _STRING_FIELDS:
        key = _KEY_PREFIX + attr
        value = env.get(key)
        if value is None:
            continue
        converted = _to_string(value)
        if converted is None:
            raise ConfigError(f"{path}: `{key}' should be string")
        setattr(config, attr, converted)
    for attr in _INT_FIELDS:
        key = _KEY_PREFIX + attr
        value = env.get(key)
        if value is None:
            continue
        number = _to_number(value)
        if number is None or (isinstance(number, float) and not math.isfinite(number)):
            raise ConfigError(f"{path}: `{key}' should be number")
        setattr(config, attr, int(number))
    return config


def load_config(path: str | None = None, verbose: bool = False) -> LmtConfig:
    """Load settings from ``path``, or from the default file if it is readable.

    A missing default file is not an error: defaults are returned.
    """
    if path is None:
        if not os.access(DEFAULT_CONFIG_PATH, os.R_OK):
            return LmtConfig()
        path = DEFAULT_CONFIG_PATH
    try:
        try:
            with open(path, encoding="utf-8") as fh:
                text = fh.read()
        except OSError as exc:
            raise ConfigError(f"cannot open {path}: {exc.strerror}") from exc
        return parse_config(text, path)
    except ConfigError as exc:
        if verbose:
            print(exc, file=sys.stderr)
        raise