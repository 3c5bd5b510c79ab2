"""Decide whether a driver binary needs (re)installing and install it."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import semver
from loguru import logger

from .errors import DriverPermissionError, FetchError
from .fetch import CurlFetcher, Fetcher
from .host import LocalHost
from .registry import DriverRegistry, default_registry
from .version import (
    NO_VERSION,
    NO_VERSION_SUPPORT,
    NOT_FOUND,
    DriverProbe,
    extract_driver_version,
    parse_min_version,
    probe_driver,
)

log = logger

DRIVER_MODE = 0o777

# Reasons recorded on ReconcileResult.
OUTDATED = 'outdated'
CURRENT = 'current'

VersionLike = Union[semver.Version, str, None]


@dataclass
class ReconcileContext:
    """Side-effecting capabilities used during reconciliation."""

    host: LocalHost = field(default_factory=LocalHost)
    fetcher: Fetcher = field(default_factory=CurlFetcher)
    registry: DriverRegistry = field(default_factory=default_registry)
    progress: bool = True
    dry_run: bool = False


@dataclass
class ReconcileResult:
    driver: str
    probe: DriverProbe
    reason: str
    installed: bool = False
    target: Optional[Path] = None

    @property
    def needed_install(self) -> bool:
        return self.reason != CURRENT


def _resolve_min_version(
    driver: str, min_version: VersionLike, registry: DriverRegistry
) -> semver.Version:
    if isinstance(min_version, semver.Version):
        return min_version
    if min_version:
        return parse_min_version(str(min_version), driver=driver)
    spec = registry.get(driver)
    if spec is not None:
        return spec.min_version
    return semver.Version(0, 0, 0)


def reconcile_driver(
    driver: str,
    dest_dir: str | Path,
    min_version: VersionLike = None,
    *,
    ctx: ReconcileContext | None = None,
) -> ReconcileResult:
    """Install ``driver`` into ``dest_dir`` unless a recent enough one is on PATH.

    The binary is (re)installed when it is not on PATH, does not support the
    ``version`` subcommand, prints no version, or reports a version older
    than ``min_version``. A version that is present but not valid semver
    raises :class:`VersionParseError` and nothing is installed.
    """
    ctx = ctx or ReconcileContext()
    required = _resolve_min_version(driver, min_version, ctx.registry)
    spec = ctx.registry.get(driver)
    extractor = spec.extractor if spec is not None else extract_driver_version
    probe = probe_driver(driver, ctx.host, extractor=extractor)

    if probe.state in (NOT_FOUND, NO_VERSION_SUPPORT, NO_VERSION):
        reason = probe.state
    elif probe.version is not None and probe.version < required:
        reason = OUTDATED
    else:
        reason = CURRENT

    result = ReconcileResult(driver=driver, probe=probe, reason=reason)
    if reason == CURRENT:
        log.debug(
            'Driver {} version {} satisfies >= {}', driver, probe.version, required
        )
        return result
    log.info(
        'Driver {} needs install (reason={}, found={}, required>={})',
        driver,
        reason,
        probe.version if probe.version is not None else '-',
        required,
    )
    result.target = install_driver(driver, dest_dir, ctx=ctx)
    result.installed = result.target is not None and not ctx.dry_run
    return result


def install_driver(
    driver: str,
    dest_dir: str | Path,
    *,
    ctx: ReconcileContext | None = None,
) -> Optional[Path]:
    """Download a registered driver into ``dest_dir`` and make it executable.

    Returns the installed path, or None when ``driver`` is not registered.
    """
    ctx = ctx or ReconcileContext()
    spec = ctx.registry.get(driver)
    if spec is None:
        log.debug('Driver {} is not registered for install; skipping', driver)
        return None

    target = Path(dest_dir).expanduser() / spec.name
    if ctx.dry_run:
        log.info('DRYRUN: download {} to {}; chmod 0777', spec.url, target)
        return target

    log.info('Downloading driver {}:', driver)
    ctx.host.remove(target)
    try:
        ctx.fetcher.fetch(spec.url, target, progress=ctx.progress)
    except Exception as ex:
        raise FetchError(
            f"can't download driver {driver} from: {spec.url}",
            target,
            cause=ex,
        ) from ex
    try:
        ctx.host.chmod(target, DRIVER_MODE)
    except OSError as ex:
        raise DriverPermissionError(
            f'chmod driver {driver} from: {spec.url}', target, cause=ex
        ) from ex
    log.info('Installed driver {} to {}', driver, target)
    return target
