from __future__ import annotations

from pathlib import Path

import scriptconfig as scfg
from loguru import logger

from ..config import DEFAULT_CONFIG_NAME, VMDriversConfig, load

log = logger


class _BaseCommand(scfg.DataConfig):
    """Base options shared by all commands."""

    config = scfg.Value(
        None, help=f'Path to config TOML (default: {DEFAULT_CONFIG_NAME}).'
    )
    verbose = scfg.Value(
        0,
        short_alias=['v'],
        isflag='counter',
        help='Increase verbosity (-v, -vv).',
    )


def _cfg_path(p: str | None) -> Path:
    return Path(p or DEFAULT_CONFIG_NAME).resolve()


def _load_cfg(config_path: str | None) -> VMDriversConfig:
    """Load the config file, or defaults when no file was asked for or found."""
    path = _cfg_path(config_path)
    if config_path is None and not path.exists():
        log.debug('No config at {}; using defaults', path)
        return VMDriversConfig().expanded_paths()
    return load(path).expanded_paths()


__all__ = ['_BaseCommand', '_cfg_path', '_load_cfg', 'log']
