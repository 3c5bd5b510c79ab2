"""Tests for boot ISO staging."""

from __future__ import annotations

from pathlib import Path

from vmdrivers.iso import BOOT_ISO_NAME, CachedIsoStager
from vmdrivers.machine import Machine


class FakeFetcher:
    def __init__(self):
        self.calls = []

    def fetch(self, url, dest, *, progress=True):
        self.calls.append(url)
        Path(dest).parent.mkdir(parents=True, exist_ok=True)
        Path(dest).write_bytes(b'ISO9660')
        return Path(dest)


def test_stager_caches_download_and_is_idempotent(tmp_path: Path) -> None:
    fetcher = FakeFetcher()
    stager = CachedIsoStager(tmp_path / 'cache', fetcher=fetcher)
    url = 'https://example.com/iso/minikube-v1.0.0.iso'
    m1 = Machine('vm1', tmp_path / 'vm1')
    m2 = Machine('vm2', tmp_path / 'vm2')

    iso1 = stager.copy_iso_to_machine_dir(url, m1)
    again = stager.copy_iso_to_machine_dir(url, m1)
    iso2 = stager.copy_iso_to_machine_dir(url, m2)

    assert fetcher.calls == [url]
    assert stager.cached_path(url) == tmp_path / 'cache' / 'minikube-v1.0.0.iso'
    assert iso1 == again == tmp_path / 'vm1' / BOOT_ISO_NAME
    assert iso2.read_bytes() == b'ISO9660'
