import errno
import os

import pytest

from lustremon.errlog import ErrorLog


def test_prog_is_basename(capsys):
    log = ErrorLog("/usr/sbin/lmtd")
    log.msg("hello")
    assert capsys.readouterr().err == "lmtd: hello\n"


def test_default_dest_unknown_then_stderr(capsys):
    log = ErrorLog("prog")
    assert log.get_dest() == "unknown"
    log.msg("first")
    assert log.get_dest() == "stderr"
    assert capsys.readouterr().err == "prog: first\n"


def test_stdout_dest(capsys):
    log = ErrorLog("prog")
    log.set_dest("stdout")
    log.msg("to out")
    captured = capsys.readouterr()
    assert captured.out == "prog: to out\n"
    assert captured.err == ""
    assert log.get_dest() == "stdout"


def test_file_dest(tmp_path):
    path = tmp_path / "lmt.log"
    with ErrorLog("lmtd") as log:
        log.set_dest(str(path))
        assert log.get_dest() == str(path)
        log.msg("one")
        log.msg("two")
    assert path.read_text() == "lmtd: one\nlmtd: two\n"


def test_file_dest_appends(tmp_path):
    path = tmp_path / "lmt.log"
    path.write_text("old\n")
    with ErrorLog("lmtd") as log:
        log.set_dest(str(path))
        log.msg("new")
    assert path.read_text() == "old\nlmtd: new\n"


def test_err_includes_strerror(tmp_path):
    path = tmp_path / "lmt.log"
    with ErrorLog("lmtd") as log:
        log.set_dest(str(path))
        log.err("open", errno.ENOENT)
    assert path.read_text() == f"lmtd: open: {os.strerror(errno.ENOENT)}\n"


def test_message_truncated(capsys):
    log = ErrorLog("p")
    log.msg("x" * 300)
    assert capsys.readouterr().err == "p: " + "x" * 255 + "\n"


def test_msg_exit(capsys):
    log = ErrorLog("p")
    with pytest.raises(SystemExit) as info:
        log.msg_exit("fatal")
    assert info.value.code == 1
    assert capsys.readouterr().err == "p: fatal\n"


def test_err_exit(capsys):
    log = ErrorLog("p")
    with pytest.raises(SystemExit) as info:
        log.err_exit("read", errno.EIO)
    assert info.value.code == 1
    assert capsys.readouterr().err == f"p: read: {os.strerror(errno.EIO)}\n"


def test_close_file_resets_dest(tmp_path):
    log = ErrorLog("p")
    log.set_dest(str(tmp_path / "a.log"))
    log.close()
    assert log.get_dest() == "unknown"


def test_switch_file_to_stderr(tmp_path, capsys):
    path = tmp_path / "a.log"
    log = ErrorLog("p")
    log.set_dest(str(path))
    log.set_dest("stderr")
    log.msg("back")
    assert log.get_dest() == "stderr"
    assert capsys.readouterr().err == "p: back\n"
    assert path.read_text() == ""


def test_unopenable_file(tmp_path):
    log = ErrorLog("p")
    with pytest.raises(OSError):
        log.set_dest(str(tmp_path / "missing" / "x.log"))


def test_syslog_default_names():
    with ErrorLog("p") as log:
        log.set_dest("syslog")
        assert log.get_dest() == "syslog:daemon:err"


def test_syslog_facility_and_level():
    with ErrorLog("p") as log:
        log.set_dest("syslog:local3:debug")
        assert log.get_dest() == "syslog:local3:debug"


def test_syslog_facility_only_keeps_level():
    with ErrorLog("p") as log:
        log.set_dest("syslog:user")
        assert log.get_dest() == "syslog:user:err"


def test_unknown_facility():
    log = ErrorLog("p")
    with pytest.raises(ValueError, match="unknown syslog facility: bogus"):
        log.set_dest("syslog:bogus")


def test_unknown_level():
    log = ErrorLog("p")
    with pytest.raises(ValueError, match="unknown syslog level: loud"):
        log.set_dest("syslog:daemon:loud")