import pytest

from lustremon.mdt import (
    OPTAB_MDS_V2,
    OPTAB_MDT_V1,
    MdOp,
    MdtInfo,
    decode_mds_v2,
    decode_mds_v2_mdops,
    decode_mdt_v1,
    decode_mdt_v1_mdops,
    decode_mdt_v1_mdtinfo,
    format_mdt_v1,
)
from lustremon.util import ParseError


def _full_mdt(name, base):
    ops = [MdOp(op, base + i, base * 2 + i, base * 3 + i) for i, op in enumerate(OPTAB_MDT_V1)]
    return MdtInfo(name, base, base + 100, base + 200, base + 300, ops)


def test_format_decode_round_trip():
    mdts = [_full_mdt("lc1-MDT0000", 7), _full_mdt("lc2-MDT0000", 11)]
    s = format_mdt_v1("mds1", 12.5, 50.0, mdts)
    report = decode_mdt_v1(s)
    assert report.name == "mds1"
    assert report.pct_cpu == 12.5
    assert report.pct_mem == 50.0
    assert len(report.mdts) == 2
    decoded = [decode_mdt_v1_mdtinfo(group) for group in report.mdts]
    assert decoded == mdts


def test_format_header_and_no_trailing_semicolon():
    s = format_mdt_v1("mds1", 1.0, 2.0, [_full_mdt("fs-MDT0000", 1)])
    assert s.startswith("1;mds1;1.000000;2.000000;fs-MDT0000;")
    assert not s.endswith(";")


def test_format_requires_targets():
    with pytest.raises(ValueError):
        format_mdt_v1("mds1", 1.0, 2.0, [])


def test_encode_substitutes_zeroes_for_missing_ops():
    info = MdtInfo("fs-MDT0000", 1, 2, 3, 4, [MdOp("mkdir", 9, 8, 7)])
    encoded = info.encode()
    assert encoded.endswith(";")
    assert encoded.count(";") == 5 + 3 * len(OPTAB_MDT_V1)
    decoded = decode_mdt_v1_mdtinfo(encoded[:-1])
    assert [op.name for op in decoded.ops] == list(OPTAB_MDT_V1)
    by_name = {op.name: op for op in decoded.ops}
    assert by_name["mkdir"] == MdOp("mkdir", 9, 8, 7)
    assert by_name["open"] == MdOp("open", 0, 0, 0)


def test_encode_ignores_ops_outside_table():
    plain = MdtInfo("fs-MDT0000", 1, 2, 3, 4, [])
    extra = MdtInfo("fs-MDT0000", 1, 2, 3, 4, [MdOp("ping", 5, 5, 5)])
    assert extra.encode() == plain.encode()


def test_decode_without_targets():
    report = decode_mdt_v1("1;mds1;3.5;4.5")
    assert report.name == "mds1"
    assert report.mdts == []


def test_decode_bad_header():
    with pytest.raises(ParseError):
        decode_mdt_v1("1;mds1;notanumber;4.5;")


def test_decode_leftover_fields():
    with pytest.raises(ParseError):
        decode_mdt_v1("1;mds1;3.5;4.5;a;b")


def test_mdtinfo_too_many_ops():
    s = "fs-MDT0000;1;2;3;4;" + "1;2;3;" * (len(OPTAB_MDT_V1) + 1)
    with pytest.raises(ParseError):
        decode_mdt_v1_mdtinfo(s)


def test_mdtinfo_leftover_fields():
    with pytest.raises(ParseError):
        decode_mdt_v1_mdtinfo("fs-MDT0000;1;2;3;4;1;2")


def test_mdtinfo_bad_counter():
    with pytest.raises(ParseError):
        decode_mdt_v1_mdtinfo("fs-MDT0000;x;2;3;4")


def test_mdops_decode():
    assert decode_mdt_v1_mdops("5;10;20;open") == MdOp("open", 5, 10, 20)


def test_mdops_bad():
    with pytest.raises(ParseError):
        decode_mdt_v1_mdops("x;1;2;open")


def test_mds_v2_decode():
    s = "2.0;mds1;fs-MDT0000;1.5;2.5;10;20;30;40;" + "1;2;3;" * 3
    rec = decode_mds_v2(s)
    assert rec.mdsname == "mds1"
    assert rec.mdtname == "fs-MDT0000"
    assert (rec.pct_cpu, rec.pct_mem) == (1.5, 2.5)
    assert (rec.inodes_free, rec.inodes_total, rec.kbytes_free, rec.kbytes_total) == (
        10,
        20,
        30,
        40,
    )
    assert [op.name for op in rec.ops] == list(OPTAB_MDS_V2[:3])
    assert all((op.samples, op.sum, op.sumsquares) == (1, 2, 3) for op in rec.ops)


def test_mds_v2_all_ops_accepted():
    s = "2;mds1;fs-MDT0000;1;2;10;20;30;40;" + "4;5;6;" * len(OPTAB_MDS_V2)
    rec = decode_mds_v2(s)
    assert len(rec.ops) == len(OPTAB_MDS_V2)
    assert rec.ops[-1].name == OPTAB_MDS_V2[-1]


def test_mds_v2_too_many_ops():
    s = "2;mds1;fs-MDT0000;1;2;10;20;30;40;" + "4;5;6;" * (len(OPTAB_MDS_V2) + 1)
    with pytest.raises(ParseError):
        decode_mds_v2(s)


def test_mds_v2_bad_header():
    with pytest.raises(ParseError):
        decode_mds_v2("2;mds1;fs-MDT0000;1;2;10;20")


def test_mds_v2_mdops_matches_v1():
    assert decode_mds_v2_mdops("3;4;5;close") == decode_mdt_v1_mdops("3;4;5;close")