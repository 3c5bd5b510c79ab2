"""Driver version extraction, parsing and probing.

Drivers such as the KVM2 and hyperkit machine drivers support a ``version``
subcommand that prints::

    version: vX.Y.Z
    commit: <hash>

Extraction (text -> token) is kept separate from parsing (token -> semver) so
other output formats only need a new extractor.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Callable, Optional

import semver
from loguru import logger

from .errors import DriverLookupError, VersionParseError

log = logger

VERSION_PREFIX = 'v'

_VERSION_RE = re.compile(r'version:(.*)')

VersionExtractor = Callable[[str], str]


def extract_driver_version(text: str) -> str:
    """Return the version token after ``version:`` or '' if there is none."""
    match = _VERSION_RE.search(text or '')
    if match is None:
        return ''
    token = match.group(1).strip()
    return token.removeprefix(VERSION_PREFIX)


def extract_json_version(text: str) -> str:
    """Version token from structured ``{"version": "..."}`` output."""
    try:
        data = json.loads(text or '')
    except ValueError:
        return ''
    if not isinstance(data, dict):
        return ''
    token = str(data.get('version', '') or '').strip()
    return token.removeprefix(VERSION_PREFIX)


EXTRACTORS: dict[str, VersionExtractor] = {
    'text': extract_driver_version,
    'json': extract_json_version,
}


def get_extractor(name: str) -> VersionExtractor:
    try:
        return EXTRACTORS[name]
    except KeyError:
        raise ValueError(
            f'Unknown version extractor {name!r}; expected one of: '
            f'{", ".join(sorted(EXTRACTORS))}'
        ) from None


def parse_version(token: str, *, driver: str = '') -> semver.Version:
    """Parse a semver token exactly as reported; no prefix is stripped here.

    Raises:
        VersionParseError: the token is not a well-formed semantic version.
    """
    try:
        return semver.Version.parse(token.strip())
    except (ValueError, TypeError) as ex:
        raise VersionParseError(
            "can't parse driver version", driver or token, cause=ex
        ) from ex


def parse_min_version(text: str, *, driver: str = '') -> semver.Version:
    """Parse a configured minimum version, which may carry one ``v`` prefix."""
    return parse_version(text.strip().removeprefix(VERSION_PREFIX), driver=driver)


NOT_FOUND = 'not-found'
NO_VERSION_SUPPORT = 'no-version-support'
NO_VERSION = 'no-version'
VERSION_KNOWN = 'version-known'


@dataclass(frozen=True)
class DriverProbe:
    """What a single look at a local driver binary found."""

    driver: str
    state: str
    path: str = ''
    output: str = ''
    token: str = ''
    version: Optional[semver.Version] = None

    @property
    def found(self) -> bool:
        return self.state != NOT_FOUND


def probe_driver(
    driver: str,
    host,
    *,
    extractor: VersionExtractor = extract_driver_version,
) -> DriverProbe:
    """Look up ``driver`` on PATH and ask it for its version.

    A missing binary, a failing ``version`` subcommand and output without a
    version line are normal outcomes reported through ``state``. A version
    line that is not valid semver raises :class:`VersionParseError`.
    """
    path = host.which(driver)
    if not path:
        log.debug('Driver {} not found on PATH', driver)
        return DriverProbe(driver, NOT_FOUND)
    try:
        res = host.run([driver, 'version'])
    except OSError as ex:
        log.debug('Driver {} could not be executed: {}', driver, ex)
        return DriverProbe(driver, NO_VERSION_SUPPORT, path=path)
    if res.code != 0:
        log.debug(
            'Driver {} does not support version (code={})', driver, res.code
        )
        return DriverProbe(
            driver, NO_VERSION_SUPPORT, path=path, output=res.output
        )
    token = extractor(res.output)
    if not token:
        return DriverProbe(driver, NO_VERSION, path=path, output=res.output)
    version = parse_version(token, driver=driver)
    log.debug('Driver {} at {} reports version {}', driver, path, version)
    return DriverProbe(
        driver,
        VERSION_KNOWN,
        path=path,
        output=res.output,
        token=token,
        version=version,
    )


def require_driver(probe: DriverProbe) -> DriverProbe:
    if not probe.found:
        raise DriverLookupError(
            'look up driver', probe.driver, detail='not found on PATH'
        )
    return probe
