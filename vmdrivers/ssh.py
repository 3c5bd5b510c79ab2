"""SSH key pair generation for new machines."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from loguru import logger

from .util import ensure_dir, run_cmd

log = logger


class KeyGenerator(Protocol):
    def generate(self, path: Path) -> None: ...


class SSHKeygen:
    """Create an unencrypted RSA key at ``path`` and ``path.pub`` with ``ssh-keygen``."""

    def __init__(self, bits: int = 2048):
        self.bits = bits

    def generate(self, path: Path) -> None:
        path = Path(path)
        ensure_dir(path.parent)
        run_cmd(
            [
                'ssh-keygen',
                '-t',
                'rsa',
                '-b',
                str(self.bits),
                '-N',
                '',
                '-q',
                '-f',
                str(path),
            ],
            check=True,
            capture=True,
        )
        log.debug('Generated ssh key pair {}', path)
