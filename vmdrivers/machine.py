"""Per-machine store layout and the driver start/stop/restart contract."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from loguru import logger

from .config import VMDriversConfig
from .util import ensure_dir, run_cmd

log = logger

LIBVIRT_URI = 'qemu:///system'


@dataclass
class Machine:
    """A VM instance and the store directory that holds its artifacts."""

    name: str
    store_path: Path
    ssh_key_name: str = 'id_rsa'

    @classmethod
    def from_config(cls, cfg: VMDriversConfig) -> 'Machine':
        cfg = cfg.expanded_paths()
        return cls(
            name=cfg.machine.name,
            store_path=Path(cfg.machine.store_dir) / cfg.machine.name,
            ssh_key_name=cfg.machine.ssh_key_name,
        )

    def resolve_store_path(self, fname: str = '.') -> Path:
        return self.store_path / fname

    @property
    def ssh_key_path(self) -> Path:
        return self.resolve_store_path(self.ssh_key_name)

    @property
    def public_ssh_key_path(self) -> Path:
        return Path(str(self.ssh_key_path) + '.pub')

    def ensure_store(self) -> Path:
        return ensure_dir(self.store_path)


class Driver(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


def restart(driver: Driver) -> None:
    """Restart via ``stop()`` then ``start()``.

    For drivers without a native restart. If ``stop()`` raises, the error
    propagates unchanged and ``start()`` is not attempted.
    """
    driver.stop()
    driver.start()


class CommonDriver:
    """Behaviour shared by drivers that have nothing more specific to offer."""

    def get_create_flags(self) -> list:
        return []

    def set_config_from_flags(self, flags) -> None:
        return None

    def start(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    def restart(self) -> None:
        restart(self)


class LibvirtDriver(CommonDriver):
    """Start and stop a libvirt domain through ``virsh``."""

    def __init__(self, name: str, *, sudo: bool = True):
        self.name = name
        self.sudo = sudo

    def _virsh(self, *args: str) -> None:
        run_cmd(
            ['virsh', '-c', LIBVIRT_URI, *args],
            sudo=self.sudo,
            check=True,
            capture=True,
        )

    def start(self) -> None:
        log.info('Starting VM {}', self.name)
        self._virsh('start', self.name)

    def stop(self) -> None:
        log.info('Stopping VM {}', self.name)
        self._virsh('shutdown', self.name)
