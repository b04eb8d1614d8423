import argparse
import json
import logging
import sqlite3
import sys
from pathlib import Path
from typing import Any

import yaml

from portable_content.adapters.sqlite.database import connect, connect_in_memory, initialize
from portable_content.adapters.sqlite.migrator import get_table_info, list_tables, run_migrations
from portable_content.core.services.validation import create_validation_service
from portable_content.rules.loader import load_rules
from portable_content.rules.models import Rules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


def get_rules(path: str) -> Rules:
    rules_path = Path(path)
    if not rules_path.exists():
        logger.info("Rules file %s not found, using defaults.", rules_path)
        return Rules()
    return load_rules(rules_path)


def print_schema(conn: sqlite3.Connection) -> None:
    print("\nDatabase Information:")
    print("====================")
    for table in list_tables(conn):
        print(f"\nTable: {table}")
        for column in get_table_info(conn, table):
            line = f"  {column['name']} ({column['type']}) "
            line += "NOT NULL" if column["notnull"] else "NULL"
            if column["pk"]:
                line += " PRIMARY KEY"
            print(line)


def handle_migrate(rules: Rules, args: argparse.Namespace) -> int:
    if args.memory:
        logger.info("Creating in-memory database...")
        conn = connect_in_memory()
        run_migrations(conn, rules.storage.migrations_dir)
    else:
        path = args.path or rules.storage.db_path
        logger.info("Initializing database: %s", path)
        conn = initialize(path, rules.storage.migrations_dir)

    try:
        print("Database migration completed successfully!")
        if args.info:
            print_schema(conn)
    finally:
        conn.close()
    return 0


def handle_info(rules: Rules, args: argparse.Namespace) -> int:
    path = args.path or rules.storage.db_path
    if not Path(path).exists():
        logger.error("Database %s not found. Run 'migrate' first.", path)
        return 1

    conn = connect(path)
    try:
        print_schema(conn)
    finally:
        conn.close()
    return 0


def _load_document(path: Path) -> Any:
    with open(path) as f:
        content = f.read()
    if path.suffix == ".json":
        return json.loads(content)
    return yaml.safe_load(content)


def handle_validate(rules: Rules, args: argparse.Namespace) -> int:
    try:
        document = _load_document(Path(args.file))
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Cannot read %s: %s", args.file, e)
        return 1

    if not isinstance(document, dict):
        print("document: Content must be a mapping of fields")
        return 1

    service = create_validation_service(rules)
    result = service.validate_content_creation(document)
    if result.is_valid:
        print("Content is valid.")
        return 0

    for message in result.all_messages():
        print(message)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Portable content CLI")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply database migrations")
    target = migrate_parser.add_mutually_exclusive_group()
    target.add_argument("--path", help="Database file path (default from rules)")
    target.add_argument("--memory", action="store_true", help="Use an in-memory database")
    migrate_parser.add_argument(
        "--info", action="store_true", help="Show database information after migration"
    )

    # info
    info_parser = subparsers.add_parser("info", help="Show tables and columns")
    info_parser.add_argument("--path", help="Database file path (default from rules)")

    # validate
    validate_parser = subparsers.add_parser("validate", help="Validate a content document")
    validate_parser.add_argument("file", help="JSON or YAML content document")

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    try:
        rules = get_rules(args.rules)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    handlers = {
        "migrate": handle_migrate,
        "info": handle_info,
        "validate": handle_validate,
    }
    try:
        return handlers[args.command](rules, args)
    except RuntimeError as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
