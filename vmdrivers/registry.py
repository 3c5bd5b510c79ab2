"""Registry of installable drivers: where to download them and how new they must be."""

from __future__ import annotations

from dataclasses import dataclass, field

import semver

from .config import DEFAULT_DRIVER_NAME, VMDriversConfig
from .version import (
    VersionExtractor,
    extract_driver_version,
    get_extractor,
    parse_min_version,
)

DRIVER_KVM2_DOWNLOAD_URL = (
    'https://storage.googleapis.com/minikube/releases/latest/'
    'docker-machine-driver-kvm2'
)
DRIVER_KVM2_MIN_VERSION = '1.0.0'


@dataclass(frozen=True)
class DriverSpec:
    name: str
    url: str
    min_version: semver.Version
    extractor: VersionExtractor = extract_driver_version


@dataclass
class DriverRegistry:
    drivers: dict[str, DriverSpec] = field(default_factory=dict)

    def register(self, spec: DriverSpec) -> None:
        self.drivers[spec.name] = spec

    def get(self, name: str) -> DriverSpec | None:
        return self.drivers.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.drivers

    def names(self) -> list[str]:
        return sorted(self.drivers)


def default_registry() -> DriverRegistry:
    reg = DriverRegistry()
    reg.register(
        DriverSpec(
            name=DEFAULT_DRIVER_NAME,
            url=DRIVER_KVM2_DOWNLOAD_URL,
            min_version=parse_min_version(DRIVER_KVM2_MIN_VERSION),
        )
    )
    return reg


def registry_from_config(
    cfg: VMDriversConfig, *, base: DriverRegistry | None = None
) -> DriverRegistry:
    """Layer ``[[drivers]]`` entries from ``cfg`` over the default registry.

    An entry without ``min_version`` keeps the minimum of the entry it
    replaces, or ``0.0.0`` for a new driver.
    """
    reg = base if base is not None else default_registry()
    for entry in cfg.drivers:
        prev = reg.get(entry.name)
        if entry.min_version:
            min_version = parse_min_version(entry.min_version, driver=entry.name)
        elif prev is not None:
            min_version = prev.min_version
        else:
            min_version = semver.Version(0, 0, 0)
        reg.register(
            DriverSpec(
                name=entry.name,
                url=entry.url,
                min_version=min_version,
                extractor=get_extractor(entry.extractor),
            )
        )
    return reg

