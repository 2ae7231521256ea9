"""
Local sync status
"""

from ..common.settings import load_settings
from ..utils.deploy import DeploymentWriter
from ..utils.state_store import StateStore


def register_status_commands(subparsers):
    """Register status command"""
    status_parser = subparsers.add_parser('status', help='Show recorded ETags and deployed files')
    status_parser.set_defaults(func=status_show)


def status_show(args):
    """Show state file and deploy directory status"""
    settings = load_settings(args.config)
    state = StateStore(settings.db_path).load()
    writer = DeploymentWriter(settings.ssl_dir)

    print(f"State file: {settings.db_path}")
    print(f"SSL directory: {settings.ssl_dir}")
    print(f"TLS config: {settings.tls_config_path}")
    print()
    print(f"{'Name':<30} {'Files':<10} {'ETag':<40}")
    print("-" * 80)
    for name in settings.cert_names:
        files = 'present' if writer.has_files(name) else 'missing'
        etag = state.get(name, 'never synced')
        print(f"{name:<30} {files:<10} {etag:<40}")

    # Entries left over from names no longer configured
    stale = [name for name in state if name not in settings.cert_names]
    if stale:
        print()
        print(f"Not configured but in state file: {', '.join(stale)}")
