"""CLI entry point for the Steer operation gateway."""

import argparse
import json
import logging

from .config.loader import get_log_level
from .gateway.catalog import OperationCatalog
from .models.config import GatewayConfig
from .observability.logging import configure_logging

logger = logging.getLogger(__name__)


def list_operations(category=None, as_json: bool = False):
    """Print the operation catalog."""
    catalog = OperationCatalog()
    entries = catalog.describe()
    if category:
        entries = [entry for entry in entries if entry["category"] == category]

    if as_json:
        print(json.dumps(entries, indent=2))
        return

    print("Operations:")
    print("-" * 50)
    for entry in entries:
        marker = "cached" if entry["cacheable"] else "      "
        ttl = entry.get("defaultTtlSeconds")
        ttl_text = f" ttl={ttl:g}s" if ttl else ""
        print(f"{marker} {entry['name']} [{entry['category']}]{ttl_text}")
        if entry.get("description"):
            print(f"   {entry['description']}")


def show_config():
    """Print the effective configuration (defaults plus environment overrides)."""
    config = GatewayConfig.from_env()
    print(json.dumps(config.to_wire(), indent=2))


def main(argv=None):
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="Steer operation gateway CLI")
    parser.add_argument('--log-level', default=None, help='Logging level (default: $STEER_OPS_LOG_LEVEL or INFO)')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    list_parser = subparsers.add_parser('list-operations', help='List catalog operations')
    list_parser.add_argument('--category', help='Only show operations in this rate-limit category')
    list_parser.add_argument('--json', action='store_true', help='Print JSON instead of text')

    subparsers.add_parser('show-config', help='Show the effective gateway configuration')

    args = parser.parse_args(argv)
    configure_logging(args.log_level or get_log_level())

    if args.command == 'list-operations':
        list_operations(args.category, args.json)
    elif args.command == 'show-config':
        show_config()
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
