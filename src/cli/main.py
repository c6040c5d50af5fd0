"""ChefORG store CLI entry points.
This module exposes commands to inspect and mutate stored tables.
It maps argparse commands onto store client calls and prints envelopes.
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import json
from pathlib import Path
from typing import Any, Sequence

from core.config import CheforgConfig
from core.errors import CheforgConfigError, CheforgError
from core.types import ResultEnvelope
from store.query_builder import QueryBuilder
from store.seed_data import read_seed_file, seed_tables
from store.store_client import StoreClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="cheforg", description="ChefORG store CLI")
    parser.add_argument("--data-root", help="Override CHEFORG_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("tables", help="List persisted tables")
    _add_select_command(subparsers)
    _add_insert_command(subparsers)
    _add_update_command(subparsers)
    _add_delete_command(subparsers)
    _add_seed_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ChefORG store CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code: 0 on success, 1 when the operation failed.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.data_root)
    except CheforgConfigError as error:
        parser.error(str(error))
    if args.command == "tables":
        for table in client.tables():
            print(table)
        return 0
    try:
        if args.command == "seed":
            return _run_seed_command(client, args)
        envelope = asyncio.run(_run_table_command(client, args))
    except (ValueError, CheforgError) as error:
        parser.error(str(error))
    return _print_envelope(envelope)


def _build_client(data_root: str | None) -> StoreClient:
    """Build store client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured store client.

    Raises:
        CheforgConfigError: If a CHEFORG_* variable is invalid.
    """
    config = CheforgConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return StoreClient(config=config)


def _add_select_command(subparsers: Any) -> None:
    """Register the select command and its filter and pagination flags.

    Args:
        subparsers: Subparser collection from the top-level parser.
    """
    command = subparsers.add_parser("select", help="Query rows of a table")
    command.add_argument("table")
    for operator in ("eq", "gte", "lte"):
        command.add_argument(
            f"--{operator}",
            action="append",
            default=[],
            metavar="FIELD=VALUE",
            help=f"Add an '{operator}' filter; VALUE is parsed as JSON when possible",
        )
    command.add_argument(
        "--in",
        dest="in_",
        action="append",
        default=[],
        metavar="FIELD=JSON_ARRAY",
        help="Keep rows whose FIELD is one of the listed values",
    )
    command.add_argument("--order", metavar="FIELD", help="Sort by FIELD")
    command.add_argument("--desc", action="store_true", help="Sort descending")
    command.add_argument("--limit", type=int)
    command.add_argument("--range", type=int, nargs=2, metavar=("START", "END"))
    command.add_argument("--single", action="store_true", help="Return only the first row")


def _add_insert_command(subparsers: Any) -> None:
    """Register the insert command.

    Args:
        subparsers: Subparser collection from the top-level parser.
    """
    command = subparsers.add_parser("insert", help="Insert one record or an array of records")
    command.add_argument("table")
    command.add_argument("records", help="JSON object or array of objects")


def _add_update_command(subparsers: Any) -> None:
    """Register the update command.

    Args:
        subparsers: Subparser collection from the top-level parser.
    """
    command = subparsers.add_parser("update", help="Merge fields into matching rows")
    command.add_argument("table")
    command.add_argument("patch", help="JSON object of fields to set")
    _add_match_arguments(command)


def _add_delete_command(subparsers: Any) -> None:
    """Register the delete command.

    Args:
        subparsers: Subparser collection from the top-level parser.
    """
    command = subparsers.add_parser("delete", help="Remove matching rows")
    command.add_argument("table")
    _add_match_arguments(command)


def _add_match_arguments(command: argparse.ArgumentParser) -> None:
    """Add the required, mutually exclusive --eq and --match flags.

    Args:
        command: Update or delete subparser.
    """
    group = command.add_mutually_exclusive_group(required=True)
    group.add_argument("--eq", metavar="FIELD=VALUE", help="Match rows where FIELD equals VALUE")
    group.add_argument("--match", metavar="JSON", help="Match rows equal to every pair")


def _add_seed_command(subparsers: Any) -> None:
    """Register the seed command.

    Args:
        subparsers: Subparser collection from the top-level parser.
    """
    command = subparsers.add_parser("seed", help="Load a JSON seed file into tables")
    command.add_argument("seed_file")
    command.add_argument(
        "--replace", action="store_true", help="Clear each seeded table before inserting"
    )


async def _run_table_command(
    client: StoreClient, args: argparse.Namespace
) -> ResultEnvelope[Any]:
    """Dispatch a single-table command.

    Args:
        client: Store client.
        args: Parsed CLI args.

    Returns:
        Operation envelope.

    Raises:
        ValueError: If an argument value cannot be parsed.
    """
    handle = client.from_(args.table)
    if args.command == "select":
        return await _build_query(handle.select(), args)
    if args.command == "insert":
        return await handle.insert(json.loads(args.records))
    if args.command == "update":
        request = handle.update(_parse_json_object(args.patch, "patch"))
        if args.eq:
            return await request.eq(*_parse_assignment(args.eq))
        return await request.match(_parse_json_object(args.match, "--match"))
    delete_request = handle.delete()
    if args.eq:
        return await delete_request.eq(*_parse_assignment(args.eq))
    return await delete_request.match(_parse_json_object(args.match, "--match"))


def _build_query(query: QueryBuilder, args: argparse.Namespace) -> QueryBuilder:
    """Apply select flags to a query builder.

    Args:
        query: Base select builder.
        args: Parsed CLI args.

    Returns:
        Configured builder.
    """
    for assignment in args.eq:
        query = query.eq(*_parse_assignment(assignment))
    for assignment in args.gte:
        query = query.gte(*_parse_assignment(assignment))
    for assignment in args.lte:
        query = query.lte(*_parse_assignment(assignment))
    for assignment in args.in_:
        field, values = _parse_assignment(assignment)
        query = query.in_(field, values)
    if args.order:
        query = query.order(args.order, ascending=not args.desc)
    if args.limit is not None:
        query = query.limit(args.limit)
    if args.range:
        query = query.range(args.range[0], args.range[1])
    if args.single:
        query = query.single()
    return query


def _run_seed_command(client: StoreClient, args: argparse.Namespace) -> int:
    """Handle seed command.

    Args:
        client: Store client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    payload = read_seed_file(Path(args.seed_file))
    results = asyncio.run(seed_tables(client, payload, replace_existing=args.replace))
    failed = False
    for table, envelope in results.items():
        if envelope.ok:
            print(f"{table}\t{len(envelope.data or [])}")
        else:
            failed = True
            print(f"{table}\terror\t{envelope.error.message if envelope.error else ''}")
    return 1 if failed else 0


def _parse_assignment(raw: str) -> tuple[str, Any]:
    """Split ``FIELD=VALUE`` and decode VALUE as JSON, falling back to text.

    Raises:
        ValueError: If the assignment has no ``=``.
    """
    field, separator, raw_value = raw.partition("=")
    if not separator or not field:
        raise ValueError(f"Expected FIELD=VALUE, got '{raw}'.")
    try:
        return field, json.loads(raw_value)
    except json.JSONDecodeError:
        return field, raw_value


def _parse_json_object(raw: str, label: str) -> dict[str, Any]:
    """Decode a JSON object argument.

    Raises:
        ValueError: If the argument is not a JSON object.
    """
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError(f"Expected {label} to be a JSON object.")
    return payload


def _print_envelope(envelope: ResultEnvelope[Any]) -> int:
    """Print an envelope as indented JSON.

    Args:
        envelope: Operation result.

    Returns:
        Exit code: 0 on success, 1 on error.
    """
    print(json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False))
    return 0 if envelope.ok else 1
