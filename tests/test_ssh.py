from __future__ import annotations

from pathlib import Path

from vmdrivers.ssh import SSHKeygen
from vmdrivers.util import CmdResult


def test_ssh_keygen_command(monkeypatch, tmp_path: Path) -> None:
    calls = []
    monkeypatch.setattr(
        'vmdrivers.ssh.run_cmd',
        lambda cmd, **kwargs: (calls.append(cmd) or CmdResult(0, '', '')),
    )
    key = tmp_path / 'store' / 'id_rsa'
    SSHKeygen().generate(key)
    assert key.parent.is_dir()
    cmd = calls[0]
    assert cmd[:5] == ['ssh-keygen', '-t', 'rsa', '-b', '2048']
    assert cmd[cmd.index('-N') + 1] == ''
    assert cmd[-2:] == ['-f', str(key)]
