#!/usr/bin/env python3
"""
notion-sync - Bidirectional Apple Reminders ↔ Notion database synchronization.
"""

import argparse
import logging
import sys

from notion_sync.core.config import load_config, get_default_config_path
from notion_sync.commands import (
    SyncCommand,
    StatusCommand,
    HistoryCommand,
    AddMappingCommand,
    RemoveMappingCommand,
    WatchCommand,
)


def main(argv=None):
    """Main entry point for notion-sync."""
    parser = argparse.ArgumentParser(
        description="Bidirectional task sync between Apple Reminders and Notion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  notion-sync add-mapping work.json    # Bind a Reminders list to a database
  notion-sync sync                     # Sync all enabled mappings once
  notion-sync sync --mapping ID        # Sync a single mapping
  notion-sync status                   # Show mappings and last sync times
  notion-sync history ID --limit 5     # Show recent passes for a mapping
  notion-sync watch                    # Keep syncing every few minutes
        """
    )

    default_config = get_default_config_path()

    parser.add_argument(
        '--config',
        help=f'Path to configuration file (default: {default_config})',
        default=None
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Sync command
    sync_parser = subparsers.add_parser('sync', help='Run one sync pass')
    sync_parser.add_argument(
        '--mapping',
        metavar='ID',
        help='Only sync the mapping with this id'
    )

    # Status command
    subparsers.add_parser('status', help='Show mappings and last sync times')

    # History command
    history_parser = subparsers.add_parser('history', help='Show sync history for a mapping')
    history_parser.add_argument('mapping_id', help='Mapping id')
    history_parser.add_argument(
        '--limit',
        type=int,
        default=10,
        help='Number of entries to show (default: 10)'
    )

    # Mapping commands
    add_parser = subparsers.add_parser('add-mapping', help='Add a mapping from a JSON file')
    add_parser.add_argument('file', help='Path to the mapping JSON file')
    add_parser.add_argument(
        '--no-verify',
        action='store_true',
        help='Do not look up the database schema in Notion'
    )

    remove_parser = subparsers.add_parser('remove-mapping', help='Remove a mapping and its sync records')
    remove_parser.add_argument('mapping_id', help='Mapping id')

    # Watch command
    watch_parser = subparsers.add_parser('watch', help='Sync periodically until interrupted')
    watch_parser.add_argument(
        '--interval',
        type=int,
        help='Minutes between passes (default: from config)'
    )

    args = parser.parse_args(argv)

    # Configure logging if verbose mode is enabled
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    if not args.command:
        parser.print_help()
        return 1

    config = load_config(args.config)

    if args.verbose:
        actual_config_path = args.config if args.config else get_default_config_path()
        print(f"Using config: {actual_config_path}")

    try:
        if args.command == 'sync':
            cmd = SyncCommand(config, verbose=args.verbose)
            success = cmd.run(mapping_id=args.mapping)

        elif args.command == 'status':
            cmd = StatusCommand(config, verbose=args.verbose)
            success = cmd.run()

        elif args.command == 'history':
            cmd = HistoryCommand(config, verbose=args.verbose)
            success = cmd.run(args.mapping_id, limit=args.limit)

        elif args.command == 'add-mapping':
            cmd = AddMappingCommand(config, verbose=args.verbose)
            success = cmd.run(args.file, verify=not args.no_verify)

        elif args.command == 'remove-mapping':
            cmd = RemoveMappingCommand(config, verbose=args.verbose)
            success = cmd.run(args.mapping_id)

        elif args.command == 'watch':
            cmd = WatchCommand(config, verbose=args.verbose)
            success = cmd.run(interval=args.interval)

        else:
            print(f"Unknown command '{args.command}'.")
            return 1

        return 0 if success else 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130
    except Exception as e:
        print(f"Error: {e}")
        if not args.verbose:
            print("Re-run with --verbose for more detail.")
        else:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
