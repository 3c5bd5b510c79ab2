"""Single-file downloads for driver binaries and boot images."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse

from loguru import logger

from .util import CmdError, ensure_dir, run_cmd

log = logger


class Fetcher(Protocol):
    def fetch(self, url: str, dest: Path, *, progress: bool = True) -> Path: ...


def _local_source(url: str) -> Path | None:
    parsed = urlparse(url)
    if parsed.scheme == 'file':
        return Path(parsed.path)
    if parsed.scheme == '':
        return Path(url)
    return None


class CurlFetcher:
    """Download with ``curl`` into ``<dest>.part`` and move into place.

    ``file://`` URLs and bare local paths are copied instead.
    """

    def fetch(self, url: str, dest: Path, *, progress: bool = True) -> Path:
        dest = Path(dest)
        ensure_dir(dest.parent)
        tmp = Path(str(dest) + '.part')
        tmp.unlink(missing_ok=True)
        src = _local_source(url)
        try:
            if src is not None:
                log.debug('Copying {} to {}', src, dest)
                shutil.copyfile(src, tmp)
            else:
                log.debug('Downloading {} to {}', url, dest)
                flags = ['--progress-bar'] if progress else ['--silent', '--show-error']
                run_cmd(
                    ['curl', '-L', '--fail', *flags, '-o', str(tmp), url],
                    check=True,
                    capture=not progress,
                )
            tmp.replace(dest)
        except (CmdError, OSError):
            tmp.unlink(missing_ok=True)
            raise
        return dest
