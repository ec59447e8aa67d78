import pytest

from lustremon.router import RouterReport, decode_router_v1, format_router_v1
from lustremon.util import ParseError


def test_format_router_v1_exact():
    assert format_router_v1("rtr1", 12.5, 50.0, 1024) == "1.0;rtr1;12.500000;50.000000;1024"


def test_format_uses_legacy_version_prefix():
    assert format_router_v1("r", 0.0, 0.0, 0).startswith("1.0;")


def test_round_trip():
    report = decode_router_v1(format_router_v1("rtr7", 3.25, 75.5, 123456789))
    assert report == RouterReport("rtr7", 3.25, 75.5, 123456789)


def test_decode_integer_version():
    report = decode_router_v1("1;rtr;10;20;30")
    assert (report.name, report.pct_cpu, report.pct_mem, report.bytes) == (
        "rtr",
        10.0,
        20.0,
        30,
    )


def test_decode_ignores_trailing_text():
    report = decode_router_v1("1.0;rtr;1.5;2.5;99;extra")
    assert report.bytes == 99


@pytest.mark.parametrize(
    "text",
    [
        "",
        "garbage",
        "1.0;rtr;1.5;2.5",
        "1.0;rtr;1.5;2.5;",
        "1.0;;1.5;2.5;10",
        "1.0;rtr;busy;2.5;10",
    ],
)
def test_decode_errors(text):
    with pytest.raises(ParseError):
        decode_router_v1(text)