from __future__ import annotations

import pytest

from vmdrivers.util import CmdError, CmdResult, shell_join
from vmdrivers.util import run_cmd as _run_cmd


def test_shell_join_quotes() -> None:
    cmd = ["echo", "a b", "c'd"]
    s = shell_join(cmd)
    assert "'a b'" in s
    assert s.startswith("echo ")


def test_run_cmd_success_and_failure() -> None:
    ok = _run_cmd(["bash", "-c", "printf ok"], check=True, capture=True)
    assert ok.code == 0
    assert ok.stdout == "ok"
    bad = _run_cmd(["bash", "-c", "exit 7"], check=False, capture=True)
    assert bad.code == 7
    with pytest.raises(CmdError):
        _run_cmd(["bash", "-c", "exit 9"], check=True, capture=True)


def test_run_cmd_merge_stderr_keeps_order() -> None:
    res = _run_cmd(
        ["bash", "-c", "echo one; echo two >&2; echo three"],
        check=True,
        merge_stderr=True,
    )
    assert res.stdout.split() == ["one", "two", "three"]
    assert res.stderr == ""
    assert res.output == res.stdout


def test_cmd_result_output_concatenates() -> None:
    assert CmdResult(0, "a\n", "b\n").output == "a\nb\n"


def test_run_cmd_sudo_prefix_when_non_root(monkeypatch) -> None:
    calls = []

    class P:
        returncode = 0
        stdout = ""
        stderr = ""

    monkeypatch.setattr("vmdrivers.util.os.geteuid", lambda: 1000)
    monkeypatch.setattr(
        "vmdrivers.util.subprocess.run",
        lambda cmd, **kwargs: (calls.append(cmd) or P()),
    )
    _run_cmd(["echo", "x"], sudo=True, check=True, capture=True)
    assert calls[0][:3] == ["sudo", "-n", "echo"]
