"""Command Line Interface for visdeploy
Deploys the TPL Dataflow debugger visualizer into the Visual Studio Visualizers folder
"""
import argparse
import logging
import sys
from pathlib import Path

from .config import VISUALIZER_ASSEMBLY_NAMES, default_source_dir, load_file_list, visualizers_dir
from .deployer import DeployOutcome, VersionGatedDeployer
from .errors import DeployError
from .file_watcher import AssemblyWatcher
from .host import DEFAULT_PROG_ID, resolve_visual_studio_dir
from .package import VisualizerPackage

logger = logging.getLogger(__name__)

OUTCOME_SYMBOLS = {
    DeployOutcome.COPIED: '✓',
    DeployOutcome.SKIPPED_UP_TO_DATE: '=',
    DeployOutcome.FAILED: '❌',
}


def setup_logging(debug=False):
    """Setup logging configuration"""
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler('visdeploy.log'),
        ]
    )


def _file_names(args):
    if getattr(args, 'files', None):
        try:
            return load_file_list(args.files)
        except OSError as e:
            raise DeployError(f"Cannot read file list {args.files}: {e}") from e
    return VISUALIZER_ASSEMBLY_NAMES


def _source_dir(args):
    return Path(args.source).resolve() if args.source else default_source_dir()


def print_report(report):
    for result in report.results:
        symbol = OUTCOME_SYMBOLS[result.outcome]
        line = f"  {symbol} {result.file_name}: {result.label}"
        if result.source_version:
            line += f" (source {result.source_version}"
            if result.destination_version:
                line += f", deployed {result.destination_version}"
            line += ")"
        if result.reason:
            line += f" - {result.reason}"
        print(line)

    s = report.summary()
    dry_run = any(r.dry_run for r in report.results)
    copied = "to copy" if dry_run else "copied"
    print(f"\n{s['copied']} {copied}, {s['skipped']} up to date, {s['failed']} failed "
          f"({s['evaluated']}/{s['total']} evaluated)")


def cmd_deploy(args):
    """Deploy command: copy newer assemblies into the Visualizers folder"""
    source_dir = _source_dir(args)
    print(f"📂 Source: {source_dir}")

    try:
        package = VisualizerPackage(
            source_dir,
            file_names=_file_names(args),
            visual_studio_dir=args.vs_dir,
            prog_id=args.prog_id,
            strict=args.strict,
            deployer=VersionGatedDeployer(dry_run=getattr(args, 'dry_run', False)),
        )
        ok = package.initialize()
    except DeployError as e:
        print(f"❌ {e}")
        return 1

    if package.last_report:
        print_report(package.last_report)
    if not ok:
        print("❌ Deployment incomplete")
        return 1
    return 0


def cmd_check(args):
    """Check command: show what deploy would do without copying"""
    args.dry_run = True
    args.strict = True
    return cmd_deploy(args)


def cmd_watch(args):
    """Watch command: deploy, then redeploy whenever a listed file changes"""
    source_dir = _source_dir(args)
    try:
        vs_dir = resolve_visual_studio_dir(args.vs_dir, args.prog_id)
        file_names = _file_names(args)
    except DeployError as e:
        print(f"❌ {e}")
        return 1

    deployer = VersionGatedDeployer()
    destination = visualizers_dir(vs_dir)

    print("=== Initial deployment ===")
    print_report(deployer.deploy_all(file_names, source_dir, destination))

    watcher = AssemblyWatcher(source_dir, destination, file_names, deployer)
    watcher.start()
    return 0


def cmd_version(args):
    from visdeploy import __version__
    print(f"visdeploy {__version__}")
    return 0


def _add_common_arguments(parser):
    parser.add_argument('--source', '-s', help='Folder holding the assemblies (default: next to this tool)')
    parser.add_argument('--vs-dir', help='Visual Studio user folder (default: ask the running IDE)')
    parser.add_argument('--prog-id', default=DEFAULT_PROG_ID,
                        help=f'COM ProgID of Visual Studio (default: {DEFAULT_PROG_ID})')
    parser.add_argument('--files', help='Text file with the file names to deploy, one per line')
    parser.add_argument('--debug', action='store_true', help='Verbose log output')


def build_parser():
    parser = argparse.ArgumentParser(
        prog='visdeploy',
        description='Deploy debugger visualizers into the Visual Studio Visualizers folder',
        epilog='Example: visdeploy deploy --source bin\\Release --strict'
    )
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    deploy_parser = subparsers.add_parser('deploy', help='Copy assemblies that are newer than the deployed ones')
    _add_common_arguments(deploy_parser)
    deploy_parser.add_argument(
        '--strict',
        action='store_true',
        help='Try every file and fail if any could not be deployed'
    )
    deploy_parser.add_argument('--dry-run', action='store_true', help='Only report what would be copied')
    deploy_parser.set_defaults(func=cmd_deploy)

    check_parser = subparsers.add_parser('check', help='Report what deploy would do')
    _add_common_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    watch_parser = subparsers.add_parser('watch', help='Redeploy whenever an assembly is rebuilt')
    _add_common_arguments(watch_parser)
    watch_parser.set_defaults(func=cmd_watch)

    version_parser = subparsers.add_parser('version', help='Show version information')
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return 0

    if args.command != 'version':
        setup_logging(args.debug)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
