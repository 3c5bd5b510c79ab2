"""Tests for the driver registry."""

from __future__ import annotations

import pytest
import semver

from vmdrivers.config import DEFAULT_DRIVER_NAME, DriverEntryConfig, VMDriversConfig
from vmdrivers.errors import VersionParseError
from vmdrivers.registry import (
    DRIVER_KVM2_DOWNLOAD_URL,
    default_registry,
    registry_from_config,
)
from vmdrivers.version import extract_driver_version, extract_json_version


def test_default_registry_knows_kvm2() -> None:
    reg = default_registry()
    assert reg.names() == [DEFAULT_DRIVER_NAME]
    spec = reg.get(DEFAULT_DRIVER_NAME)
    assert spec.url == DRIVER_KVM2_DOWNLOAD_URL
    assert spec.min_version == semver.Version(1, 0, 0)
    assert spec.extractor is extract_driver_version
    assert 'docker-machine-driver-hyperkit' not in reg


def test_registry_from_config_adds_and_overrides() -> None:
    cfg = VMDriversConfig()
    cfg.drivers = [
        DriverEntryConfig(
            name='docker-machine-driver-hyperkit',
            url='https://example.com/hyperkit',
            min_version='v1.2.0',
            extractor='json',
        ),
        DriverEntryConfig(name=DEFAULT_DRIVER_NAME, url='https://mirror/kvm2'),
    ]
    reg = registry_from_config(cfg)
    assert reg.names() == ['docker-machine-driver-hyperkit', DEFAULT_DRIVER_NAME]
    hk = reg.get('docker-machine-driver-hyperkit')
    assert hk.min_version == semver.Version(1, 2, 0)
    assert hk.extractor is extract_json_version
    kvm2 = reg.get(DEFAULT_DRIVER_NAME)
    assert kvm2.url == 'https://mirror/kvm2'
    assert kvm2.min_version == semver.Version(1, 0, 0)


def test_registry_from_config_new_driver_without_minimum() -> None:
    cfg = VMDriversConfig()
    cfg.drivers = [DriverEntryConfig(name='drv', url='https://example.com/drv')]
    assert registry_from_config(cfg).get('drv').min_version == semver.Version(0, 0, 0)


def test_registry_from_config_rejects_bad_minimum() -> None:
    cfg = VMDriversConfig()
    cfg.drivers = [
        DriverEntryConfig(name='drv', url='https://example.com/drv', min_version='one')
    ]
    with pytest.raises(VersionParseError):
        registry_from_config(cfg)
