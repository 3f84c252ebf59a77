# -*- coding: utf-8 -*-
"""
Comandos de línea para sincronizar ofertas de Mirakl

Uso:
    mirakl-sync sync-offers
    mirakl-sync sync-offers --sku=ABC123
    mirakl-sync sync-offers --state=11
    mirakl-sync sync-offers --since=2024-01-01
    mirakl-sync check
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from .client import MiraklClient
from .config import MiraklConfig
from .exceptions import MiraklError
from .helper import DEFAULT_MAX_PER_PAGE, MiraklHelper
from .offer_store import JsonOfferStore
from .offer_sync import OfferSynchronizer

_logger = logging.getLogger(__name__)

DEFAULT_STORE = Path('results') / 'mirakl_offers.json'


def positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        prog='mirakl-sync',
        description="Synchronize Mirakl marketplace data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sync_parser = subparsers.add_parser(
        "sync-offers",
        help="Sync offers from Mirakl to the local store",
    )
    sync_parser.add_argument("--sku", default=None, help="Filter by SKU")
    sync_parser.add_argument(
        "--state",
        default=None,
        help="Filter by offer state code",
    )
    sync_parser.add_argument(
        "--since",
        default=None,
        help="Filter by updated since date (YYYY-MM-DD)",
    )
    sync_parser.add_argument(
        "--store",
        type=Path,
        default=DEFAULT_STORE,
        help=f"JSON file where offers are stored (default: {DEFAULT_STORE})",
    )
    sync_parser.add_argument(
        "--max-per-page",
        type=positive_int,
        default=DEFAULT_MAX_PER_PAGE,
        help=f"Offers per API page (default: {DEFAULT_MAX_PER_PAGE})",
    )

    subparsers.add_parser(
        "check",
        help="Check that the Mirakl API is reachable with the configured credentials",
    )

    return parser


def _print_table(rows):
    width = max(len(str(metric)) for metric, _ in rows + [('Metric', '')])
    print(f"{'Metric':<{width}}  Value")
    print(f"{'-' * width}  -----")
    for metric, value in rows:
        print(f"{metric:<{width}}  {value}")


def sync_offers(args) -> int:
    filters = {}

    if args.sku:
        filters['sku'] = args.sku
        print(f"Filtering by SKU: {args.sku}")

    if args.state:
        filters['state'] = args.state
        print(f"Filtering by state: {args.state}")

    if args.since:
        try:
            filters['updated_since'] = datetime.strptime(args.since, '%Y-%m-%d')
        except ValueError:
            print(f"Invalid date format: {args.since}", file=sys.stderr)
            return 1
        print(f"Filtering by updated since: {args.since}")

    try:
        store = JsonOfferStore(args.store)
    except (OSError, ValueError) as e:
        print(f"Could not read offer store {args.store}: {e}", file=sys.stderr)
        return 1

    try:
        client = MiraklClient(MiraklConfig.from_env())
    except MiraklError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    print("Starting Mirakl offers synchronization...")

    try:
        synchronizer = OfferSynchronizer(
            MiraklHelper(client),
            processor=store.upsert,
            max_per_page=args.max_per_page,
        )
        stats = synchronizer.run(filters)
        store.save()
    except Exception as e:
        print(f"Synchronization failed: {e}", file=sys.stderr)
        _logger.error("Mirakl sync command failed", exc_info=True)
        return 1
    finally:
        client.close()

    total = stats['processed'] + stats['errors']
    success_rate = round(stats['processed'] / max(total, 1) * 100, 2)

    print("\nSynchronization completed successfully!")
    _print_table([
        ('Total Processed', total),
        ('Created', stats['created']),
        ('Updated', stats['updated']),
        ('Skipped', stats['skipped']),
        ('Errors', stats['errors']),
        ('Success Rate', f"{success_rate}%"),
    ])
    return 0


def check(args) -> int:
    try:
        client = MiraklClient(MiraklConfig.from_env())
    except MiraklError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    with client:
        if client.health_check():
            print(f"Mirakl API reachable at {client.base_url}")
            return 0

    print(f"Mirakl API not reachable at {client.base_url}", file=sys.stderr)
    return 1


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='[%(levelname)s] %(name)s: %(message)s',
    )

    if args.command == "sync-offers":
        return sync_offers(args)
    elif args.command == "check":
        return check(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
