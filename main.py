"""
=========================================================
Command-line entry point for the CDC staging pipeline.
=========================================================

Runs the full or incremental staging load for every table listed in the
configuration document, or prints the statements a run would execute.

Usage:
    # Re-materialize every staging table from live source rows
    python main.py --full

    # Merge rows changed since the last sync
    python main.py --incremental

    # Show the MERGE statements for a local configuration file
    python main.py --incremental --dry-run --config-file config.json

    # Check the configured warehouse answers
    python main.py --check-connection

Example:
    >>> from main import main
    >>> exit_code = main(['--full', '--dry-run', '--config-file', 'config.json'])
"""

import argparse
import sys
from typing import List, Optional

from core.config import config
from core.logger import get_logger, setup_logging
from models.staging_models import TableStatus
from staging.loader import FULL_MODE, INCREMENTAL_MODE, StagingManager
from utils.database_utils import DryRunExecutor, get_connection_info, verify_connection

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="CDC Staging Loader - full and incremental staging SQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full (re-)materialization of all staging tables
  python main.py --full

  # Incremental merge, keep going when one table fails
  python main.py --incremental --continue-on-error

  # Print generated SQL without touching the warehouse
  python main.py --incremental --dry-run --config-file config.json

  # Test the warehouse connection
  python main.py --check-connection
        """
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        '--full',
        action='store_true',
        help='Recreate every staging table from live source rows'
    )
    mode.add_argument(
        '--incremental',
        action='store_true',
        help='Merge new and deleted source rows into existing staging tables'
    )
    mode.add_argument(
        '--check-connection',
        action='store_true',
        help='Show the configured connection and test it, then exit'
    )

    parser.add_argument(
        '--config-file',
        type=str,
        default=None,
        help='Local configuration JSON (default: read from the warehouse stage)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print generated statements instead of executing them'
    )
    parser.add_argument(
        '--continue-on-error',
        action='store_true',
        help='Keep executing remaining tables after a statement fails'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=config.log_level.upper(),
        help='Logging level'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write logs to this file under logs/'
    )
    return parser


def check_connection() -> int:
    """Print the configured connection (password hidden) and whether it answers."""
    print(f"Warehouse: {get_connection_info()['url']}")
    success, message = verify_connection()
    print(f"{'✅' if success else '❌'} {message}")
    return 0 if success else 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command-line interface for the staging loader.

    Exit Codes:
        0: Success
        1: Error
        130: User interrupt (Ctrl+C)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.dry_run and not args.config_file:
        parser.error('--dry-run needs --config-file, the stage cannot be read without a connection')

    setup_logging(
        log_level=args.log_level,
        log_file=args.log_file,
        log_dir=str(config.project.logs_dir)
    )

    if args.check_connection:
        return check_connection()

    mode = FULL_MODE if args.full else INCREMENTAL_MODE
    executor = DryRunExecutor() if args.dry_run else None
    manager = StagingManager(executor=executor, continue_on_error=args.continue_on_error)

    try:
        status = manager.run(mode, path=args.config_file)
    except KeyboardInterrupt:
        logger.warning("\n⚠️  Operation interrupted by user")
        return 130
    finally:
        manager.close()

    if args.dry_run:
        for result in manager.last_results:
            if result.statement:
                print(f"-- {result.table_name} ({result.mode})")
                print(result.statement)
                print()

    print(status)
    succeeded = status.startswith('✅') and not any(
        result.status == TableStatus.FAILED for result in manager.last_results
    )
    return 0 if succeeded else 1


if __name__ == '__main__':
    sys.exit(main())
