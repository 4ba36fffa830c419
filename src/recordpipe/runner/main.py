"""
CLI main entry point.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ..config import Config, build_data_manager, build_pipeline, create_default_config, load_config
from ..data_manager import MemoryStore
from ..pipeline import PipeError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="recordpipe",
        description="Read remote collections into in-memory stores and query them",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("recordpipe.yaml"),
        help="Path to config file (default: recordpipe.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # init-config command
    init_parser = subparsers.add_parser("init-config", help="Write a default config file")
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file",
    )

    # status command
    subparsers.add_parser("status", help="Show configured stores and pipes")

    # fetch command
    fetch_parser = subparsers.add_parser(
        "fetch", help="Read a remote collection into a store and print it"
    )
    fetch_parser.add_argument("pipe", help="Name of the configured pipe")
    fetch_parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="Store to load into (default: store with the pipe's name)",
    )
    fetch_parser.add_argument(
        "--where",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Filter condition (repeatable); VALUE is parsed as JSON when possible",
    )
    fetch_parser.add_argument(
        "--match-any",
        action="store_true",
        help="Include records matching any condition (default: all)",
    )

    return parser


def parse_where(conditions: list[str]) -> dict[str, Any]:
    """Turn FIELD=VALUE strings into a filter spec.

    Raises:
        ValueError: If a condition has no '='.
    """
    spec: dict[str, Any] = {}
    for condition in conditions:
        field, sep, raw = condition.partition("=")
        if not sep or not field:
            raise ValueError(f"Invalid condition '{condition}', expected FIELD=VALUE")
        try:
            spec[field] = json.loads(raw)
        except json.JSONDecodeError:
            spec[field] = raw
    return spec


def cmd_init_config(config_path: Path, force: bool) -> int:
    """Write the default config file."""
    if config_path.exists() and not force:
        print(f"❌ {config_path} already exists (use --force to overwrite)")
        return 1

    create_default_config(config_path)
    print(f"✓ Wrote {config_path}")
    return 0


def cmd_status(config: Config) -> int:
    """Show configured stores and pipes."""
    print("\n📊 recordpipe status")
    print("=" * 40)
    print(f"  Remote base URL:  {config.remote.base_url or '(not set)'}")

    print(f"\n  Stores ({len(config.stores)}):")
    for store in config.stores:
        sync = "sync" if store.data_sync else "no sync"
        print(f"    - {store.name} [{store.type}, record_id={store.record_id}, {sync}]")

    print(f"\n  Pipes ({len(config.pipes)}):")
    for pipe in config.pipes:
        print(f"    - {pipe.name} [{pipe.type}, endpoint={pipe.endpoint or pipe.name}]")

    errors = config.validate()
    if errors:
        print("\n  ⚠️  Configuration problems:")
        for error in errors:
            print(f"    - {error}")
        print()
        return 1

    print()
    return 0


def cmd_fetch(
    config: Config,
    pipe_name: str,
    store_name: str | None,
    where: list[str],
    match_any: bool,
) -> int:
    """Read a remote collection into a store, filter it and print JSON."""
    try:
        spec = parse_where(where)
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    pipeline = build_pipeline(config)
    pipe = pipeline.get(pipe_name)
    if pipe is None:
        print(f"❌ Unknown pipe '{pipe_name}'")
        return 1

    manager = build_data_manager(config)
    store_name = store_name or pipe_name
    store = manager.get(store_name)
    if store is None:
        # Ad-hoc store sharing the pipe's identity field
        store = MemoryStore(store_name, record_id=pipe.record_id, data_sync=True)

    try:
        pipe.read(stores=store)
    except PipeError as e:
        logger.error("Fetch from pipe %s failed: %s", pipe_name, e)
        print(f"❌ Fetch failed: {e}")
        return 1

    records = store.filter(spec, match_any=match_any)
    print(json.dumps(records, indent=2, default=str))
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init-config":
        return cmd_init_config(parsed.config, parsed.force)

    # Load config
    try:
        config = load_config(parsed.config)
    except Exception as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    # Route to command
    if parsed.command == "status":
        return cmd_status(config)
    elif parsed.command == "fetch":
        return cmd_fetch(config, parsed.pipe, parsed.store, parsed.where, parsed.match_any)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
