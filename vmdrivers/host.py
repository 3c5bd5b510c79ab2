"""Host capability object and host dependency checks.

Everything that touches the local system on behalf of reconciliation and
provisioning goes through a :class:`LocalHost` instance, so tests can hand in
a fake with the same methods.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from loguru import logger

from .util import CmdResult, run_cmd, which

log = logger

REQUIRED_CMDS = ['curl', 'ssh-keygen']
OPTIONAL_CMDS = ['virsh']


def check_commands() -> tuple[list[str], list[str]]:
    missing = [c for c in REQUIRED_CMDS if which(c) is None]
    missing_opt = [c for c in OPTIONAL_CMDS if which(c) is None]
    return missing, missing_opt


class LocalHost:
    """Filesystem and process access on the machine we are running on."""

    def which(self, name: str) -> Optional[str]:
        return which(name)

    def run(self, cmd: Sequence[str]) -> CmdResult:
        return run_cmd(cmd, check=False, capture=True, merge_stderr=True)

    def exists(self, path: Path) -> bool:
        return os.path.exists(path)

    def remove(self, path: Path) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass

    def chmod(self, path: Path, mode: int) -> None:
        os.chmod(path, mode)

    def chown(self, path: Path, uid: int, gid: int) -> None:
        os.chown(path, uid, gid)

    def listdir(self, path: Path) -> list[str]:
        return sorted(os.listdir(path))

    def open_exclusive(self, path: Path, mode: int = 0o644) -> BinaryIO:
        """Open ``path`` for writing, failing if it already exists."""
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, mode)
        return os.fdopen(fd, 'wb')

    def truncate(self, path: Path, size: int) -> None:
        os.truncate(path, size)

    def getuid(self) -> int:
        return os.getuid()

    def getegid(self) -> int:
        return os.getegid()
