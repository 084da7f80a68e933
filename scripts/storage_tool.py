#!/usr/bin/env python3
"""Maintenance commands for the persistent storage directory.

Usage:
    python3 scripts/storage_tool.py [--config PATH] info
    python3 scripts/storage_tool.py cleanup [--scope persistent|session|both]
    python3 scripts/storage_tool.py export backup.json [--key KEY ...]
    python3 scripts/storage_tool.py import backup.json [--overwrite] [--target persistent]
    python3 scripts/storage_tool.py clear [--scope persistent]

The session backend only lives as long as this process, so in practice
these commands act on the persistent store configured in
`data/config/storage_config.yml`.
"""
import argparse
import json
import sys
from pathlib import Path

import yaml

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from haven_lib.bootstrap import bootstrap  # noqa: E402
from haven_lib.storage.adapter import Scope  # noqa: E402
from haven_lib.storage.backup import export_data, import_data, read_backup, write_backup  # noqa: E402

SCOPES = [s.value for s in Scope]


def main(argv=None):
    p = argparse.ArgumentParser()
    p.add_argument('--config', type=Path, default=None, help='storage config YAML')
    sub = p.add_subparsers(dest='command', required=True)

    sub.add_parser('info')

    cleanup = sub.add_parser('cleanup')
    cleanup.add_argument('--scope', choices=SCOPES, default='both')

    exp = sub.add_parser('export')
    exp.add_argument('path', type=Path)
    exp.add_argument('--key', action='append', dest='keys')
    exp.add_argument('--format', choices=['json', 'yaml'])

    imp = sub.add_parser('import')
    imp.add_argument('path', type=Path)
    imp.add_argument('--overwrite', action='store_true')
    imp.add_argument('--target', choices=SCOPES, default='persistent')
    imp.add_argument('--format', choices=['json', 'yaml'])

    clear = sub.add_parser('clear')
    clear.add_argument('--scope', choices=SCOPES, default='persistent')

    args = p.parse_args(argv)
    _, service = bootstrap(args.config)

    if args.command == 'info':
        print(json.dumps(service.storage_info(), indent=2))
        return 0

    if args.command == 'cleanup':
        removed = service.cleanup_expired(Scope(args.scope))
        print(f"Removed {removed} expired items")
        return 0

    if args.command == 'export':
        data = export_data(service, args.keys)
        try:
            path = write_backup(data, args.path, args.format)
        except (OSError, ValueError) as e:
            print(f"Failed to write {args.path}: {e}")
            return 2
        print(f"Exported {len(data['persistent'])} persistent and {len(data['session'])} session items to {path}")
        return 0

    if args.command == 'import':
        try:
            data = read_backup(args.path, args.format)
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"Failed to read {args.path}: {e}")
            return 2
        if not import_data(service, data, overwrite=args.overwrite, target=Scope(args.target)):
            print("Import finished with errors")
            return 1
        print("Import complete")
        return 0

    if args.command == 'clear':
        removed = service.clear(Scope(args.scope))
        print(f"Removed {removed} items")
        return 0

    return 1


if __name__ == '__main__':
    sys.exit(main())
