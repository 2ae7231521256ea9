"""
Certificate sync commands
"""

import sys

from ..common.settings import load_settings
from ..utils import sync


def register_sync_commands(subparsers):
    """Register sync, check and render commands"""
    sync_parser = subparsers.add_parser('sync', help='Download changed certificates and update the TLS config')
    sync_parser.set_defaults(func=sync_run)

    check_parser = subparsers.add_parser('check', help='Show which certificates changed, without downloading')
    check_parser.set_defaults(func=sync_check)

    render_parser = subparsers.add_parser('render', help='Print the TLS config fragment for the configured certificates')
    render_parser.set_defaults(func=sync_render)


def sync_run(args):
    """Run a full sync"""
    settings = load_settings(args.config)
    result = sync.run_sync(settings)

    if result.deployed:
        print(f"Deployed: {', '.join(result.deployed)}")
    if result.failed:
        print(f"Failed: {', '.join(result.failed)}", file=sys.stderr)
    sys.exit(0 if result.ok else 1)


def sync_check(args):
    """Report change status per certificate"""
    settings = load_settings(args.config)
    statuses = sync.check_only(settings)

    print(f"{'Name':<30} {'Status':<15}")
    print("-" * 45)
    for name, status in statuses.items():
        print(f"{name:<30} {status:<15}")

    failed = [name for name, status in statuses.items() if status in sync.CertStatus.FAILED]
    sys.exit(1 if failed else 0)


def sync_render(args):
    """Print the fragment that sync would write"""
    settings = load_settings(args.config)
    print(sync.build_fragment(settings), end='')
