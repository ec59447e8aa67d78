import pytest

from lustremon.osc import (
    decode_osc_v1,
    decode_osc_v1_oscinfo,
    format_osc_v1,
    osc_state_code,
)
from lustremon.util import ParseError


@pytest.mark.parametrize(
    "state, code",
    [
        ("CLOSED", "C"),
        ("NEW", "N"),
        ("DISCONN", "D"),
        ("CONNECTING", "c"),
        ("REPLAY", "r"),
        ("REPLAY_LOCKS", "l"),
        ("REPLAY_WAIT", "w"),
        ("RECOVER", "R"),
        ("FULL", "F"),
        ("EVICTED", "E"),
        ("<UNKNOWN>", "?"),
    ],
)
def test_state_codes(state, code):
    assert osc_state_code(state) == code


def test_format_pinned():
    s = format_osc_v1("mds1", [("fs-OST0000_UUID", "FULL"), ("fs-OST0001_UUID", "DISCONN")])
    assert s == "1;mds1;fs-OST0000_UUID;F;fs-OST0001_UUID;D"


def test_round_trip():
    pairs = [("fs-OST0000_UUID", "FULL"), ("fs-OST0001_UUID", "EVICTED"), ("x", "bogus")]
    report = decode_osc_v1(format_osc_v1("mds1", pairs))
    assert report.name == "mds1"
    decoded = [decode_osc_v1_oscinfo(group) for group in report.oscs]
    assert decoded == [(uuid, osc_state_code(state)) for uuid, state in pairs]


def test_format_requires_oscs():
    with pytest.raises(ValueError):
        format_osc_v1("mds1", [])


def test_decode_without_oscs():
    report = decode_osc_v1("1;mds1")
    assert report.name == "mds1"
    assert report.oscs == []


def test_decode_bad_header():
    with pytest.raises(ParseError):
        decode_osc_v1("v1;mds1;a;F")


def test_decode_leftover_field():
    with pytest.raises(ParseError):
        decode_osc_v1("1;mds1;a;F;b")


def test_oscinfo_extra_field():
    with pytest.raises(ParseError):
        decode_osc_v1_oscinfo("a;F;extra")


def test_oscinfo_empty_state():
    with pytest.raises(ParseError):
        decode_osc_v1_oscinfo("a;")


def test_oscinfo_trailing_separator_accepted():
    assert decode_osc_v1_oscinfo("fs-OST0002_UUID;R;") == ("fs-OST0002_UUID", "R")