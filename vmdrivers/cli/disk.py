from __future__ import annotations

import scriptconfig as scfg

from ..disk import default_provision_context, disk_path, provision_disk
from ..machine import Machine
from ._common import _BaseCommand, _load_cfg


class ProvisionCLI(_BaseCommand):
    """Stage the boot ISO, create the SSH key and build the raw disk."""

    dry_run = scfg.Value(
        False, isflag=True, help='Print actions without running.'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg = _load_cfg(args.config)
        machine = Machine.from_config(cfg)
        if not args.dry_run:
            machine.ensure_store()
        ctx = default_provision_context(
            cfg.paths.cache_dir,
            progress=bool(cfg.driver.progress),
            dry_run=bool(args.dry_run),
        )
        result = provision_disk(
            machine, cfg.machine.boot_url, int(cfg.machine.disk_size_mb), ctx=ctx
        )
        if result.created:
            print(f'✅ Created raw disk image: {result.disk_path}')
        else:
            print(f'➖ Raw disk image unchanged: {result.disk_path}')
        return 0


class DiskPathCLI(_BaseCommand):
    """Print the raw disk image path of the configured machine."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg = _load_cfg(args.config)
        print(str(disk_path(Machine.from_config(cfg))))
        return 0


class DiskModalCLI(scfg.ModalCLI):
    """Machine disk provisioning."""

    provision = ProvisionCLI
    path = DiskPathCLI
