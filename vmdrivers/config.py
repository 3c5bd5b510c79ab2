"""TOML-backed configuration for driver installation and machine provisioning."""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path

import ubelt as ub

from .errors import ConfigError
from .util import expand

DEFAULT_DRIVER_NAME = 'docker-machine-driver-kvm2'
DEFAULT_BOOT_URL = (
    'https://storage.googleapis.com/minikube/iso/minikube-v1.0.0.iso'
)
DEFAULT_CONFIG_NAME = '.vmdrivers.toml'

_SECTIONS = ('driver', 'machine', 'paths')


def default_cache_dir() -> str:
    return str(ub.Path.appdir('vmdrivers', type='cache'))


@dataclass
class DriverConfig:
    name: str = DEFAULT_DRIVER_NAME
    install_dir: str = '~/.local/bin'
    # Empty means: use the minimum registered for the driver.
    min_version: str = ''
    progress: bool = True


@dataclass
class MachineConfig:
    name: str = 'minikube'
    store_dir: str = '~/.vmdrivers/machines'
    disk_size_mb: int = 20000
    boot_url: str = DEFAULT_BOOT_URL
    ssh_key_name: str = 'id_rsa'


@dataclass
class PathsConfig:
    cache_dir: str = ''


@dataclass
class DriverEntryConfig:
    name: str
    url: str
    min_version: str = ''
    extractor: str = 'text'


@dataclass
class VMDriversConfig:
    driver: DriverConfig = field(default_factory=DriverConfig)
    machine: MachineConfig = field(default_factory=MachineConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    drivers: list[DriverEntryConfig] = field(default_factory=list)
    verbosity: int = 1

    def expanded_paths(self) -> 'VMDriversConfig':
        self.driver.install_dir = expand(self.driver.install_dir)
        self.machine.store_dir = expand(self.machine.store_dir)
        self.paths.cache_dir = (
            expand(self.paths.cache_dir)
            if self.paths.cache_dir
            else default_cache_dir()
        )
        return self


def _toml_escape(s: str) -> str:
    return s.replace('\\', '\\\\').replace('"', '\\"')


def _emit_toml_kv(lines: list[str], key: str, val: object) -> None:
    if isinstance(val, bool):
        lines.append(f'{key} = {"true" if val else "false"}')
    elif isinstance(val, int):
        lines.append(f'{key} = {val}')
    else:
        lines.append(f'{key} = "{_toml_escape(str(val))}"')


def dump_toml(cfg: VMDriversConfig) -> str:
    d = asdict(cfg)
    lines: list[str] = []
    if cfg.verbosity != 1:
        lines.append(f'verbosity = {cfg.verbosity}')
        lines.append('')
    for section in _SECTIONS:
        lines.append(f'[{section}]')
        for k, v in d[section].items():
            _emit_toml_kv(lines, k, v)
        lines.append('')
    for entry in d['drivers']:
        lines.append('[[drivers]]')
        for k, v in entry.items():
            _emit_toml_kv(lines, k, v)
        lines.append('')
    return '\n'.join(lines).rstrip() + '\n'


def loads(text: str) -> VMDriversConfig:
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as ex:
        raise ConfigError('parse config', cause=ex) from ex
    cfg = VMDriversConfig()
    for section in _SECTIONS:
        body = raw.get(section, None)
        if isinstance(body, dict):
            obj = getattr(cfg, section)
            for k, v in body.items():
                if hasattr(obj, k):
                    setattr(obj, k, v)
    for item in raw.get('drivers', []):
        if not isinstance(item, dict):
            continue
        name = str(item.get('name', '')).strip()
        url = str(item.get('url', '')).strip()
        if not name or not url:
            raise ConfigError(
                'parse config', detail='[[drivers]] entries need name and url'
            )
        cfg.drivers.append(
            DriverEntryConfig(
                name=name,
                url=url,
                min_version=str(item.get('min_version', '')).strip(),
                extractor=str(item.get('extractor', 'text') or 'text'),
            )
        )
    if 'verbosity' in raw:
        cfg.verbosity = int(raw['verbosity'])
    return cfg


def load(path: Path) -> VMDriversConfig:
    if not path.exists():
        raise ConfigError(
            'load config',
            str(path),
            detail=f'not found; run: vmdrivers config init --config {path}',
        )
    return loads(path.read_text(encoding='utf-8'))


def save(path: Path, cfg: VMDriversConfig) -> None:
    path.write_text(dump_toml(cfg), encoding='utf-8')
