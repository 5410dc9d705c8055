#!/usr/bin/env python3
"""Command-line pass tracker."""

from __future__ import annotations

import argparse
import asyncio
import locale
import sys
from typing import Optional, Sequence

from config import Config, load_config
from core import configure_logging, get_logger
from core.exceptions import ApplicationError, NotFoundError, StorageError, ValidationError
from database import SQLitePool, SQLiteKeyValueStore, run_migrations
from database.models import PassRecord
from services import PassStore, can_consume, days_left_text, format_date, status_of
from utils.validators import parse_date

logger = get_logger(__name__)


def describe(record: PassRecord) -> str:
    """One line summary of a pass."""
    line = (
        f"{record.id}  {record.name}  {record.tickets}回  "
        f"{format_date(record.purchased_at)} - {format_date(record.expires_at)}  "
        f"[{status_of(record).value}] {days_left_text(record)}"
    )
    if record.note:
        line += f"  ({record.note})"
    return line


async def add_pass(store: PassStore, args: argparse.Namespace) -> int:
    purchased_at = parse_date(args.date) if args.date else None
    record = await store.create(args.name, note=args.note, purchased_at=purchased_at)
    print(describe(record))
    return 0


async def list_passes(store: PassStore, args: argparse.Namespace) -> int:
    records = await store.list_sorted()
    if not records:
        print("No passes registered.")
        return 0
    for record in records:
        print(describe(record))
    return 0


async def use_ticket(store: PassStore, args: argparse.Namespace) -> int:
    before = await store.get_by_id(args.id)
    if before is not None and not can_consume(before):
        print(f"Cannot use a ticket: {days_left_text(before)}")
        print(describe(before))
        return 1
    record = await store.consume_use(args.id)
    print(describe(record))
    return 0


async def edit_pass(store: PassStore, args: argparse.Namespace) -> int:
    fields = {}
    if args.name is not None:
        fields["name"] = args.name
    if args.note is not None:
        fields["note"] = args.note
    if args.date is not None:
        fields["purchased_at"] = parse_date(args.date)
    if args.tickets is not None:
        fields["tickets"] = args.tickets
    if not fields:
        print("Nothing to change.")
        return 1
    record = await store.update(args.id, fields)
    print(describe(record))
    return 0


async def delete_pass(store: PassStore, args: argparse.Namespace) -> int:
    removed = await store.delete(args.id)
    print("Deleted." if removed else "No such pass.")
    return 0


async def clear_passes(store: PassStore, args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to delete every pass without --yes.")
        return 1
    removed = await store.clear_all()
    print(f"Deleted {removed} pass(es).")
    return 0


def use_system_collation() -> None:
    """Sort names with the user's locale rules instead of by code point."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(f"Locale collation unavailable, sorting names by code point: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Four-use pass tracker")
    parser.add_argument("--db-path", default=None, help="Database path (overrides DATABASE_PATH)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    add_parser = subparsers.add_parser("add", help="Register a new pass")
    add_parser.add_argument("name", help="Pass holder name")
    add_parser.add_argument("--note", default="", help="Optional note")
    add_parser.add_argument("--date", default=None, help="Purchase date, YYYY-MM-DD (default: now)")
    add_parser.set_defaults(func=add_pass)

    list_parser = subparsers.add_parser("list", help="List passes, usable ones first")
    list_parser.set_defaults(func=list_passes)

    use_parser = subparsers.add_parser("use", help="Use one ticket of a pass")
    use_parser.add_argument("id", help="Pass id")
    use_parser.set_defaults(func=use_ticket)

    edit_parser = subparsers.add_parser("edit", help="Edit a pass")
    edit_parser.add_argument("id", help="Pass id")
    edit_parser.add_argument("--name", default=None)
    edit_parser.add_argument("--note", default=None)
    edit_parser.add_argument("--date", default=None, help="New purchase date, YYYY-MM-DD")
    edit_parser.add_argument("--tickets", type=int, default=None)
    edit_parser.set_defaults(func=edit_pass)

    delete_parser = subparsers.add_parser("delete", help="Delete a pass")
    delete_parser.add_argument("id", help="Pass id")
    delete_parser.set_defaults(func=delete_pass)

    clear_parser = subparsers.add_parser("clear", help="Delete every pass")
    clear_parser.add_argument("--yes", action="store_true", help="Confirm deletion")
    clear_parser.set_defaults(func=clear_passes)

    return parser


async def run(args: argparse.Namespace, config: Config) -> int:
    """Open the database, run one command and close the database."""
    database_path = args.db_path or config.database_path
    async with SQLitePool(
        database_path=database_path,
        pool_size=config.db_pool_size,
        busy_timeout_ms=config.db_busy_timeout,
    ) as pool:
        await run_migrations(pool)
        store = PassStore(SQLiteKeyValueStore(pool))
        return await args.func(store, args)


def main(argv: Optional[Sequence[str]] = None, config: Optional[Config] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = config or load_config()
    except ApplicationError as e:
        print(f"Configuration error: {e}")
        return 2

    configure_logging(config)
    use_system_collation()

    try:
        return asyncio.run(run(args, config))
    except ValidationError as e:
        print(f"Invalid input: {e}")
        return 1
    except NotFoundError as e:
        print(f"Not found: {e.pass_id}")
        return 1
    except StorageError as e:
        logger.error(f"Storage failure: {e}")
        print(f"Storage error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
