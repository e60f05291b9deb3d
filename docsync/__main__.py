"""CLI entry point for docsync."""

import argparse
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

from .client import DocSyncClient
from .config import load_config
from .errors import DocSyncError


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = "".join(traceback.format_exception(*record.exc_info))

        # Safe JSON serialization
        try:
            return json.dumps(log_data)
        except (TypeError, ValueError):
            log_data["message"] = str(log_data["message"])
            if "exception" in log_data:
                log_data["exception"] = str(log_data["exception"])
            return json.dumps(log_data)


def setup_logging(verbose: bool = False, log_level: str | None = None, json_output: bool = False) -> None:
    """Configure logging.

    Args:
        verbose: Enable debug logging (ignored if log_level is set).
        log_level: Explicit log level (warning, info, debug).
        json_output: Output logs as JSON lines for machine parsing.
    """
    if log_level:
        level_map = {
            "warning": logging.WARNING,
            "info": logging.INFO,
            "debug": logging.DEBUG,
        }
        level = level_map.get(log_level, logging.INFO)
    else:
        level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )

    # httpx logs every request at INFO
    if level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def _print_record(record) -> None:
    print(json.dumps(
        {
            "collection": record.collection_name,
            "objectId": record.object_id,
            "createdAt": record.created_at.isoformat() if record.created_at else None,
            "updatedAt": record.updated_at.isoformat() if record.updated_at else None,
        },
        indent=2,
    ))


def cmd_status(args: argparse.Namespace) -> int:
    """Check connectivity status."""
    config = load_config(args.config)

    with DocSyncClient(config) as client:
        connected = client.transport.check_connection()

    status_data = {
        "timestamp": datetime.now().isoformat(),
        "server": {
            "base_url": config.server.base_url,
            "application_id": config.server.application_id or None,
            "rest_api_key_set": bool(config.server.rest_api_key),
            "timeout_seconds": config.server.timeout_seconds,
            "connected": connected,
        },
        "records": {
            "endpoint_prefix": config.records.endpoint_prefix,
            "reserved_keys": config.records.reserved_keys,
        },
        "executor": {
            "max_workers": config.executor.max_workers,
        },
    }

    if getattr(args, "json", False):
        print(json.dumps(status_data, indent=2))
        return 0 if connected else 1

    print(f"Server: {config.server.base_url}")
    print(f"  Connected: {'yes' if connected else 'no'}")
    print(f"  Application id: {config.server.application_id or '(not set)'}")
    print(f"  REST API key: {'set' if config.server.rest_api_key else '(not set)'}")
    print(f"Records endpoint prefix: {config.records.endpoint_prefix}")
    print(f"Reserved keys: {', '.join(config.records.reserved_keys)}")
    print(f"Background workers: {config.executor.max_workers}")

    return 0 if connected else 1


def cmd_save(args: argparse.Namespace) -> int:
    """Create or update a record from a JSON object."""
    try:
        fields = json.loads(args.data)
    except json.JSONDecodeError as e:
        print(f"Invalid --data JSON: {e}", file=sys.stderr)
        return 1
    if not isinstance(fields, dict):
        print("--data must be a JSON object", file=sys.stderr)
        return 1

    config = load_config(args.config)
    with DocSyncClient(config) as client:
        if args.id:
            record = client.without_data(args.collection, args.id)
        else:
            record = client.create(args.collection)

        try:
            for key, value in fields.items():
                record.put(key, value)
            record.save()
        except DocSyncError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        _print_record(record)
    return 0


def cmd_increment(args: argparse.Namespace) -> int:
    """Atomically increment a numeric field of an existing record."""
    config = load_config(args.config)
    with DocSyncClient(config) as client:
        record = client.without_data(args.collection, args.id)
        try:
            record.increment(args.key, args.amount)
            record.save()
        except DocSyncError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        _print_record(record)
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Delete an existing record."""
    config = load_config(args.config)
    with DocSyncClient(config) as client:
        record = client.without_data(args.collection, args.id)
        try:
            record.delete()
        except DocSyncError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    print(f"Deleted {args.collection}/{args.id}")
    return 0


def _number(text: str) -> int | float:
    try:
        return int(text)
    except ValueError:
        return float(text)


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="docsync",
        description="Create, update and delete records in a remote document store",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config file (default: none, use defaults and env)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["warning", "info", "debug"],
        default=None,
        help="Set log level explicitly (overrides -v/--verbose)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output logs as JSON for machine parsing",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Status command
    status_parser = subparsers.add_parser("status", help="Check connectivity status")
    status_parser.add_argument(
        "--json",
        action="store_true",
        help="Output status as JSON",
    )
    status_parser.set_defaults(func=cmd_status)

    # Save command
    save_parser = subparsers.add_parser("save", help="Create or update a record")
    save_parser.add_argument("collection", help="Collection (class) name")
    save_parser.add_argument(
        "--id",
        default=None,
        help="Object id to update (omit to create a new record)",
    )
    save_parser.add_argument(
        "--data",
        required=True,
        help="Fields as a JSON object (e.g. {\"score\": 3})",
    )
    save_parser.set_defaults(func=cmd_save)

    # Increment command
    increment_parser = subparsers.add_parser("increment", help="Increment a numeric field")
    increment_parser.add_argument("collection", help="Collection (class) name")
    increment_parser.add_argument("key", help="Field to increment")
    increment_parser.add_argument("--id", required=True, help="Object id")
    increment_parser.add_argument(
        "--amount",
        type=_number,
        default=1,
        help="Amount to add (default: 1, negative to decrement)",
    )
    increment_parser.set_defaults(func=cmd_increment)

    # Delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a record")
    delete_parser.add_argument("collection", help="Collection (class) name")
    delete_parser.add_argument("--id", required=True, help="Object id")
    delete_parser.set_defaults(func=cmd_delete)

    args = parser.parse_args()

    setup_logging(args.verbose, args.log_level, getattr(args, "json", False))

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
