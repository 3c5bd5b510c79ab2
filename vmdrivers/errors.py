"""Project-specific exception types."""

from __future__ import annotations


class VMDriversError(RuntimeError):
    """Base error for driver and disk provisioning failures.

    Carries the failing operation name and the path/identifier it acted on.
    The underlying exception is chained via ``raise ... from`` and kept on
    ``cause`` for callers that inspect it directly.
    """

    def __init__(
        self,
        op: str,
        target: str = '',
        *,
        cause: BaseException | None = None,
        detail: str = '',
    ):
        self.op = op
        self.target = str(target)
        self.cause = cause
        msg = op
        if self.target:
            msg = f'{msg} ({self.target})'
        if detail:
            msg = f'{msg}: {detail}'
        elif cause is not None:
            msg = f'{msg}: {cause}'
        super().__init__(msg)


class ConfigError(VMDriversError):
    """Raised when a config file is missing or malformed."""


class DriverLookupError(VMDriversError):
    """Raised when a driver binary is required but not resolvable."""


class VersionParseError(VMDriversError):
    """Raised when a driver reports a version that is not valid semver."""


class FetchError(VMDriversError):
    """Raised when a driver binary or boot image cannot be downloaded."""


class DriverPermissionError(VMDriversError):
    """Raised when an installed driver cannot be marked executable."""


class DiskCreateError(VMDriversError):
    """Raised when the raw disk image cannot be opened, written or sized."""


class OwnershipError(VMDriversError):
    """Raised when store path ownership cannot be normalized."""


class ProvisionError(VMDriversError):
    """Raised when a step of disk provisioning fails."""

    @property
    def step(self) -> str:
        return self.op
