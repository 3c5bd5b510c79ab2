"""Stage a boot ISO into a machine's store directory."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse

from loguru import logger

from .fetch import CurlFetcher, Fetcher
from .machine import Machine
from .util import ensure_dir

log = logger

BOOT_ISO_NAME = 'boot.iso'


class IsoStager(Protocol):
    def copy_iso_to_machine_dir(self, boot_url: str, machine: Machine) -> Path: ...


class CachedIsoStager:
    """Download each boot URL once into ``cache_dir`` and copy it per machine."""

    def __init__(
        self,
        cache_dir: str | Path,
        *,
        fetcher: Fetcher | None = None,
        progress: bool = True,
    ):
        self.cache_dir = Path(cache_dir)
        self.fetcher = fetcher or CurlFetcher()
        self.progress = progress

    def cached_path(self, boot_url: str) -> Path:
        name = Path(urlparse(boot_url).path).name or BOOT_ISO_NAME
        return self.cache_dir / name

    def copy_iso_to_machine_dir(self, boot_url: str, machine: Machine) -> Path:
        dst = machine.resolve_store_path(BOOT_ISO_NAME)
        if dst.exists():
            log.debug('Boot ISO already staged: {}', dst)
            return dst
        cached = self.cached_path(boot_url)
        if not cached.exists():
            log.info('Downloading boot ISO {} to {}', boot_url, cached)
            self.fetcher.fetch(boot_url, cached, progress=self.progress)
        ensure_dir(dst.parent)
        log.debug('Copying {} to {}', cached, dst)
        shutil.copyfile(cached, dst)
        return dst
