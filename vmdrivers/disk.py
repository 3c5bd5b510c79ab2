"""Raw disk image creation and the per-machine disk provisioning sequence."""

from __future__ import annotations

import contextlib
import io
import tarfile
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from .errors import DiskCreateError, OwnershipError, ProvisionError
from .host import LocalHost
from .iso import CachedIsoStager, IsoStager
from .machine import Machine
from .ssh import KeyGenerator, SSHKeygen

log = logger

# The guest automount script formats a disk whose tar starts with this file.
FORMAT_ME_MAGIC = 'boot2docker, please format-me'
DISK_SUFFIX = '.rawdisk'
BYTES_PER_MB = 1_000_000


def disk_path(machine: Machine) -> Path:
    return machine.resolve_store_path(machine.name + DISK_SUFFIX)


def _add_file(tw: tarfile.TarFile, name: str, data: bytes, mode: int) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = mode
    tw.addfile(info, io.BytesIO(data))


def make_disk_image(public_key_path: Path) -> bytes:
    """Tar container seeding ``.ssh/authorized_keys`` from the public key."""
    pub_key = Path(public_key_path).read_bytes()
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode='w', format=tarfile.USTAR_FORMAT) as tw:
        _add_file(tw, FORMAT_ME_MAGIC, FORMAT_ME_MAGIC.encode(), 0o644)
        ssh_dir = tarfile.TarInfo('.ssh')
        ssh_dir.type = tarfile.DIRTYPE
        ssh_dir.mode = 0o700
        tw.addfile(ssh_dir)
        _add_file(tw, '.ssh/authorized_keys', pub_key, 0o644)
        _add_file(tw, '.ssh/authorized_keys2', pub_key, 0o644)
    return buf.getvalue()


def create_raw_disk_image(
    public_key_path: Path,
    path: Path,
    size_mb: int,
    *,
    host: LocalHost | None = None,
) -> Path:
    """Write the seeded tar to ``path`` and size the file to ``size_mb`` MB.

    ``path`` is opened with exclusive create, so an existing file is an error
    rather than being overwritten. A file this call created is removed again
    if any later step fails.
    """
    host = host or LocalHost()
    try:
        data = make_disk_image(public_key_path)
    except OSError as ex:
        raise DiskCreateError('make disk image', public_key_path, cause=ex) from ex
    try:
        fobj = host.open_exclusive(path, 0o644)
    except OSError as ex:
        raise DiskCreateError('open', path, cause=ex) from ex
    try:
        try:
            fobj.write(data)
        except OSError as ex:
            with contextlib.suppress(OSError):
                fobj.close()
            raise DiskCreateError('write tar', path, cause=ex) from ex
        try:
            fobj.close()
        except OSError as ex:
            raise DiskCreateError('close', path, cause=ex) from ex
        try:
            host.truncate(path, size_mb * BYTES_PER_MB)
        except OSError as ex:
            raise DiskCreateError('truncate', path, cause=ex) from ex
    except DiskCreateError:
        host.remove(path)
        raise
    return path


def fix_permissions(path: Path, *, host: LocalHost | None = None) -> None:
    """Chown ``path`` and its direct children to the current uid and egid."""
    host = host or LocalHost()
    log.info('Fixing permissions on {} ...', path)
    uid, gid = host.getuid(), host.getegid()
    try:
        host.chown(path, uid, gid)
    except OSError as ex:
        raise OwnershipError('chown dir', path, cause=ex) from ex
    try:
        names = host.listdir(path)
    except OSError as ex:
        raise OwnershipError('read dir', path, cause=ex) from ex
    for name in names:
        fpath = Path(path) / name
        try:
            host.chown(fpath, uid, gid)
        except OSError as ex:
            raise OwnershipError('chown file', fpath, cause=ex) from ex


@dataclass
class ProvisionContext:
    host: LocalHost = field(default_factory=LocalHost)
    iso_stager: IsoStager | None = None
    keygen: KeyGenerator = field(default_factory=SSHKeygen)
    dry_run: bool = False


@dataclass
class ProvisionResult:
    disk_path: Path
    created: bool


def provision_disk(
    machine: Machine,
    boot_url: str,
    size_mb: int,
    *,
    ctx: ProvisionContext,
) -> ProvisionResult:
    """Stage the boot ISO, ensure an SSH key, and build the raw disk once.

    Safe to call repeatedly for the same machine: an existing disk image is
    left untouched. Calls for one machine must not run concurrently.
    """
    host = ctx.host
    log.info('Making disk image using store path: {}', machine.store_path)
    dpath = disk_path(machine)
    if ctx.dry_run:
        log.info(
            'DRYRUN: stage {}; ssh-keygen {}; create {} ({} MB)',
            boot_url,
            machine.ssh_key_path,
            dpath,
            size_mb,
        )
        return ProvisionResult(dpath, created=False)

    stager = ctx.iso_stager
    if stager is None:
        raise ProvisionError('copy iso to machine dir', detail='no ISO stager')
    try:
        stager.copy_iso_to_machine_dir(boot_url, machine)
    except Exception as ex:
        raise ProvisionError('copy iso to machine dir', boot_url, cause=ex) from ex

    key_path = machine.ssh_key_path
    if not host.exists(key_path):
        log.info('Creating ssh key: {}...', key_path)
        try:
            ctx.keygen.generate(key_path)
        except Exception as ex:
            raise ProvisionError('generate ssh key', key_path, cause=ex) from ex

    if host.exists(dpath):
        log.debug('Raw disk image exists: {}', dpath)
        return ProvisionResult(dpath, created=False)

    log.info('Creating raw disk image: {}...', dpath)
    try:
        create_raw_disk_image(
            machine.public_ssh_key_path, dpath, size_mb, host=host
        )
    except DiskCreateError as ex:
        raise ProvisionError('create raw disk image', dpath, cause=ex) from ex
    store = machine.resolve_store_path('.')
    try:
        fix_permissions(store, host=host)
    except OwnershipError as ex:
        raise ProvisionError('fixing permissions', store, cause=ex) from ex
    return ProvisionResult(dpath, created=True)


def default_provision_context(
    cache_dir: str | Path, *, progress: bool = True, dry_run: bool = False
) -> ProvisionContext:
    return ProvisionContext(
        iso_stager=CachedIsoStager(cache_dir, progress=progress),
        dry_run=dry_run,
    )
