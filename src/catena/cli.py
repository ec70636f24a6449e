"""
``catena-publish``: publish a JSON file of disclosures.

Usage:
    catena-publish -f disclosures.json [-c 10] [--network testrpc]

Environment Variables (also read from ``.env``):
    CATENA_RPC_URL: RPC endpoint overriding the network default
    CATENA_PRIVATE_KEY: Key for local signing; node accounts are used if unset
    CATENA_DISCLOSURE_MANAGER: DisclosureManager address
    CATENA_AGREEMENT_TRACKER: DisclosureAgreementTracker address
"""

import argparse
import asyncio
import logging
import os
import sys

import pydantic
from dotenv import load_dotenv

from catena.batch import BatchPublisher, DisclosureStore, PublisherConfig
from catena.client import CatenaClient
from catena.config import Network
from catena.constants import DEFAULT_MAX_UNCONFIRMED, GWEI
from catena.errors import CatenaError
from catena.utils.logging import configure_logging, get_logger

_logger = get_logger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="catena-publish",
        description="Publish disclosures from a JSON file to the DisclosureManager ledger",
    )
    parser.add_argument("-f", "--file", dest="path", help="Path to the disclosures JSON file")
    parser.add_argument(
        "-c",
        "--max-unconfirmed",
        type=int,
        default=DEFAULT_MAX_UNCONFIRMED,
        help="Maximum number of sent but unconfirmed transactions (default: %(default)s)",
    )
    parser.add_argument(
        "--network",
        default=Network.TESTRPC.value,
        choices=[n.value for n in Network],
        help="Network to publish to (default: %(default)s)",
    )
    parser.add_argument("--rpc-url", default=None, help="RPC endpoint (env: CATENA_RPC_URL)")
    parser.add_argument(
        "--disclosure-manager", default=None, help="DisclosureManager address (env: CATENA_DISCLOSURE_MANAGER)"
    )
    parser.add_argument(
        "--agreement-tracker", default=None, help="DisclosureAgreementTracker address (env: CATENA_AGREEMENT_TRACKER)"
    )
    parser.add_argument(
        "--gas-price",
        type=int,
        default=None,
        help="Fixed gas price in gwei (default: ask the node)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser


async def _publish(args) -> int:
    client = CatenaClient.create(
        args.network,
        rpc_url=args.rpc_url or os.getenv("CATENA_RPC_URL"),
        disclosure_manager=args.disclosure_manager or os.getenv("CATENA_DISCLOSURE_MANAGER"),
        agreement_tracker=args.agreement_tracker or os.getenv("CATENA_AGREEMENT_TRACKER"),
        private_key=os.getenv("CATENA_PRIVATE_KEY") or None,
        gas_price=args.gas_price * GWEI if args.gas_price is not None else None,
    )
    config = PublisherConfig(max_unconfirmed=args.max_unconfirmed)
    store = DisclosureStore(args.path)
    store.backup()
    summary = await BatchPublisher(client, store, config).run()

    print(
        f"Published {summary.confirmed} of {summary.total} disclosures "
        f"({summary.skipped} already published, {summary.resumed} resumed, {len(summary.failed)} failed)"
    )
    for key in summary.failed:
        print(f"Failed: {key}", file=sys.stderr)
    return 0


def main(argv=None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.path:
        parser.print_usage(sys.stderr)
        print("Error: -f <file> is required", file=sys.stderr)
        return 1

    configure_logging(logging.DEBUG if args.verbose else logging.INFO, stream=sys.stdout)
    try:
        return asyncio.run(_publish(args))
    except (CatenaError, pydantic.ValidationError, OSError) as exc:
        _logger.error("Batch publish failed", extra={"error": str(exc)})
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
