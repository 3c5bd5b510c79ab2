from __future__ import annotations

import scriptconfig as scfg

from ..host import LocalHost, check_commands
from ..reconcile import ReconcileContext, reconcile_driver
from ..registry import registry_from_config
from ..version import probe_driver, require_driver
from ._common import _BaseCommand, _load_cfg


class _DriverCommand(_BaseCommand):
    driver = scfg.Value('', help='Driver name override (default: [driver].name).')


class ProbeCLI(_DriverCommand):
    """Report whether the driver is on PATH and which version it reports."""

    strict = scfg.Value(
        False, isflag=True, help='Fail when the driver is not on PATH.'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg = _load_cfg(args.config)
        name = str(args.driver or '').strip() or cfg.driver.name
        spec = registry_from_config(cfg).get(name)
        kw = {'extractor': spec.extractor} if spec is not None else {}
        probe = probe_driver(name, LocalHost(), **kw)
        if args.strict:
            require_driver(probe)
        print(f'driver: {probe.driver}')
        print(f'state: {probe.state}')
        print(f'path: {probe.path or "-"}')
        print(f'version: {probe.version if probe.version is not None else "-"}')
        return 0


class EnsureCLI(_DriverCommand):
    """Install or update the driver if it is missing or too old."""

    dry_run = scfg.Value(
        False, isflag=True, help='Print actions without running.'
    )
    install_dir = scfg.Value(
        '', help='Install directory override (default: [driver].install_dir).'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg = _load_cfg(args.config)
        name = str(args.driver or '').strip() or cfg.driver.name
        dest = str(args.install_dir or '').strip() or cfg.driver.install_dir
        ctx = ReconcileContext(
            registry=registry_from_config(cfg),
            progress=bool(cfg.driver.progress),
            dry_run=bool(args.dry_run),
        )
        result = reconcile_driver(
            name, dest, cfg.driver.min_version or None, ctx=ctx
        )
        if result.installed:
            print(f'✅ Installed {name} to {result.target} ({result.reason})')
        elif result.needed_install and result.target is None:
            print(f'➖ {name} needs install ({result.reason}) but is not installable')
        elif result.needed_install:
            print(f'➖ Would install {name} to {result.target} ({result.reason})')
        else:
            print(f'✅ {name} {result.probe.version} is up to date')
        return 0


class DoctorCLI(_BaseCommand):
    """Check host prerequisites and list missing tools."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        cls.cli(argv=argv, data=kwargs)
        missing, missing_opt = check_commands()
        if missing:
            print('❌ Missing required commands:', ', '.join(missing))
            return 2
        if missing_opt:
            print('➖ Missing optional commands:', ', '.join(missing_opt))
        print('✅ Required host commands are present.')
        return 0


class DriverModalCLI(scfg.ModalCLI):
    """Driver binary inspection and installation."""

    probe = ProbeCLI
    ensure = EnsureCLI
    doctor = DoctorCLI
