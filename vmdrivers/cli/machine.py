from __future__ import annotations

import scriptconfig as scfg

from ..machine import LibvirtDriver
from ._common import _BaseCommand, _load_cfg


class RestartCLI(_BaseCommand):
    """Restart the configured machine's libvirt domain (stop, then start)."""

    sudo = scfg.Value(True, isflag=True, help='Run virsh through sudo -n.')

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg = _load_cfg(args.config)
        LibvirtDriver(cfg.machine.name, sudo=bool(args.sudo)).restart()
        print(f'✅ Restarted {cfg.machine.name}')
        return 0


class MachineModalCLI(scfg.ModalCLI):
    """Machine lifecycle helpers."""

    restart = RestartCLI
