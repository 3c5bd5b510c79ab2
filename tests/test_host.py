"""Tests for the local host capability object."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from vmdrivers.host import LocalHost, check_commands
from vmdrivers.version import extract_driver_version


def test_check_commands(monkeypatch) -> None:
    present = {'curl'}
    monkeypatch.setattr(
        'vmdrivers.host.which',
        lambda cmd: f'/usr/bin/{cmd}' if cmd in present else None,
    )
    missing, missing_opt = check_commands()
    assert missing == ['ssh-keygen']
    assert missing_opt == ['virsh']


def test_local_host_file_ops(tmp_path: Path) -> None:
    host = LocalHost()
    fpath = tmp_path / 'f'
    with host.open_exclusive(fpath) as fobj:
        fobj.write(b'abc')
    with pytest.raises(FileExistsError):
        host.open_exclusive(fpath)
    host.truncate(fpath, 10)
    assert fpath.stat().st_size == 10
    host.chmod(fpath, 0o700)
    assert stat.S_IMODE(fpath.stat().st_mode) == 0o700
    assert host.listdir(tmp_path) == ['f']
    host.remove(fpath)
    host.remove(fpath)
    assert not host.exists(fpath)


def test_local_host_run_combines_output() -> None:
    res = LocalHost().run(['bash', '-c', 'echo out; echo err >&2; exit 3'])
    assert res.code == 3
    assert res.output.split() == ['out', 'err']


def test_local_host_run_replaces_undecodable_bytes() -> None:
    res = LocalHost().run(['bash', '-c', r"printf 'version: v1.0.0\n\377\376\n'"])
    assert res.code == 0
    assert '\ufffd' in res.output
    assert extract_driver_version(res.output) == '1.0.0'
