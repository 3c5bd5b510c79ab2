"""Tests for the curl-backed fetcher."""

from __future__ import annotations

from pathlib import Path

import pytest

from vmdrivers.fetch import CurlFetcher
from vmdrivers.util import CmdError, CmdResult


def test_fetch_copies_local_and_file_urls(tmp_path: Path) -> None:
    src = tmp_path / 'src.bin'
    src.write_bytes(b'payload')
    f = CurlFetcher()
    out = f.fetch(str(src), tmp_path / 'a' / 'dst.bin')
    assert out.read_bytes() == b'payload'
    out2 = f.fetch(src.as_uri(), tmp_path / 'b.bin', progress=False)
    assert out2.read_bytes() == b'payload'
    assert not Path(str(out2) + '.part').exists()


def test_fetch_downloads_to_part_then_moves(monkeypatch, tmp_path: Path) -> None:
    calls = []

    def fake_run_cmd(cmd, **kwargs):
        calls.append((cmd, kwargs))
        Path(cmd[cmd.index('-o') + 1]).write_bytes(b'driver')
        return CmdResult(0, '', '')

    monkeypatch.setattr('vmdrivers.fetch.run_cmd', fake_run_cmd)
    dest = tmp_path / 'drv'
    CurlFetcher().fetch('https://example.com/drv', dest, progress=False)
    cmd, kwargs = calls[0]
    assert cmd[:3] == ['curl', '-L', '--fail']
    assert '--silent' in cmd
    assert cmd[cmd.index('-o') + 1] == str(dest) + '.part'
    assert cmd[-1] == 'https://example.com/drv'
    assert kwargs['capture'] is True
    assert dest.read_bytes() == b'driver'
    assert not Path(str(dest) + '.part').exists()


def test_fetch_failure_removes_partial(monkeypatch, tmp_path: Path) -> None:
    def fake_run_cmd(cmd, **kwargs):
        Path(cmd[cmd.index('-o') + 1]).write_bytes(b'half')
        raise CmdError(cmd, CmdResult(22, '', 'The requested URL returned error: 404'))

    monkeypatch.setattr('vmdrivers.fetch.run_cmd', fake_run_cmd)
    dest = tmp_path / 'drv'
    with pytest.raises(CmdError):
        CurlFetcher().fetch('https://example.com/drv', dest)
    assert not dest.exists()
    assert not Path(str(dest) + '.part').exists()
