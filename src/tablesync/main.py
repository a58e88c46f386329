"""Command line entry point."""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .config.loader import ConfigLoader
from .config.schema import SyncConfig
from .config.settings import get_settings
from .core.connector import TableSyncConnector
from .database import SQLAlchemyRecordStore, init_database
from .exceptions import TableSyncError
from .utils.logging import setup_logging, get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tablesync",
        description="Synchronize local records with a remote data table"
    )
    parser.add_argument("--config", help="Path of the sync config file (.json or .yaml)")
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    configure = subparsers.add_parser("configure", help="Save credentials and table URL")
    configure.add_argument("--app-id", required=True)
    configure.add_argument("--app-secret", required=True)
    configure.add_argument("--table-url", required=True, help="Shared URL of the remote table")
    configure.add_argument("--disabled", action="store_true", help="Save with syncing disabled")

    subparsers.add_parser("show-config", help="Print the saved config with the secret masked")
    subparsers.add_parser("test-connection", help="Fetch a token and read the remote table")
    subparsers.add_parser("fields", help="List the remote table's columns")

    sync = subparsers.add_parser("sync", help="Run one bidirectional sync")
    sync.add_argument("--database-url", help="Local database URL; defaults to the configured one")

    export = subparsers.add_parser("export", help="Print the local records as JSON")
    export.add_argument("--database-url", help="Local database URL; defaults to the configured one")

    return parser


def cmd_configure(args, loader: ConfigLoader) -> int:
    config = SyncConfig.from_table_url(
        app_id=args.app_id,
        app_secret=args.app_secret,
        table_url=args.table_url,
        enabled=not args.disabled
    )
    loader.save(config)
    print(f"Saved configuration to {loader.file_path}")
    print(f"  app_token: {config.app_token}")
    print(f"  table_id:  {config.table_id}")
    return 0


def cmd_show_config(loader: ConfigLoader) -> int:
    config = loader.load_public()
    if config is None:
        print("Sync is not configured")
        return 1
    print(json.dumps(config.to_dict(), indent=2, ensure_ascii=False))
    return 0


async def cmd_test_connection(loader: ConfigLoader) -> int:
    async with TableSyncConnector.from_config_file(loader) as connector:
        print(await connector.test_connection())
    return 0


async def cmd_fields(loader: ConfigLoader) -> int:
    async with TableSyncConnector.from_config_file(loader) as connector:
        fields = await connector.table_fields()
    for table_field in fields:
        print(f"{table_field.field_name}\ttype={table_field.type}\tid={table_field.field_id}")
    return 0


async def cmd_sync(args, loader: ConfigLoader) -> int:
    db_manager = init_database(args.database_url)
    try:
        store = SQLAlchemyRecordStore(db_manager)
        async with TableSyncConnector.from_config_file(loader) as connector:
            result = await connector.sync(store)
    finally:
        db_manager.close()

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.success else 1


def cmd_export(args) -> int:
    db_manager = init_database(args.database_url)
    try:
        records = SQLAlchemyRecordStore(db_manager).snapshot()
    finally:
        db_manager.close()

    print(json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False))
    return 0


async def run(args) -> int:
    loader = ConfigLoader(args.config) if args.config else ConfigLoader()

    if args.command == "configure":
        return cmd_configure(args, loader)
    if args.command == "show-config":
        return cmd_show_config(loader)
    if args.command == "test-connection":
        return await cmd_test_connection(loader)
    if args.command == "fields":
        return await cmd_fields(loader)
    if args.command == "sync":
        return await cmd_sync(args, loader)
    if args.command == "export":
        return cmd_export(args)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(log_level=args.log_level or settings.logging.level)
    logger = get_logger("main")

    try:
        return asyncio.run(run(args))
    except TableSyncError as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
