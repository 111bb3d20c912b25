#!/usr/bin/env python3
"""GM Price Publisher.

Computes the current USD price of the configured GM market tokens from
oracle tickers and the on-chain Reader contract, and writes the snapshot
to prices.json and prices.csv.

Each invocation is a one-shot snapshot; on any error nothing is written and
the process exits with status 1.
"""

import argparse
import asyncio
import logging
import os
import sys

from .src.config import DEFAULT_NETWORK, DEFAULT_NETWORKS, PublishConfig
from .src.ContractUtility import ContractUtility
from .src.MarketMatcher import MarketMatcher
from .src.MarketReader import MarketReader
from .src.OracleClient import OracleClient
from .src.PricePublisher import PricePublisher, PriceSnapshot
from .src.SnapshotWriter import SnapshotWriter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def parse_markets(markets_str: str | None) -> list[str] | None:
    """Parse a comma-separated list of market token addresses.

    :param markets_str: Comma-separated addresses, or None.
    :returns: List of addresses, or None if not provided.
    """
    if not markets_str:
        return None
    return [m.strip() for m in markets_str.split(",") if m.strip()]


async def publish(config: PublishConfig) -> PriceSnapshot:
    """Collect a price snapshot for the configured markets.

    :param config: Effective publisher configuration.
    :returns: Complete PriceSnapshot.
    """
    contract_utility = ContractUtility(config.rpc_url)
    reader = MarketReader(
        contract=contract_utility.get_contract("Reader", config.reader_address),
        data_store_address=config.data_store_address,
    )
    publisher = PricePublisher(
        oracle_client=OracleClient(config.oracle_url, timeout=config.fetch_timeout),
        matcher=MarketMatcher(config.target_markets),
        reader=reader,
    )

    try:
        return await publisher.collect()
    finally:
        await OracleClient.close_shared_client()
        await contract_utility.disconnect()


def main() -> None:
    """Main entry point for the GM Price Publisher CLI."""
    parser = argparse.ArgumentParser(
        description="GM Price Publisher: GM market token USD prices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available networks:
  {', '.join(sorted(DEFAULT_NETWORKS))}

Examples:
  # Publish the default markets to dist/
  python -m gmprice.main

  # Custom RPC endpoint and output directory
  python -m gmprice.main --rpc-url https://arbitrum.example/rpc --output-dir out

Environment variables (CLI args take precedence):
  NETWORK, RPC_URL, ORACLE_URL, MARKETS, OUTPUT_DIR, FETCH_TIMEOUT
""",
    )

    parser.add_argument(
        "--network",
        type=str,
        help=f"Network to publish for (default: {DEFAULT_NETWORK})",
        default=os.environ.get("NETWORK") or DEFAULT_NETWORK,
    )

    parser.add_argument(
        "--rpc-url",
        dest="rpc_url",
        type=str,
        help="JSON-RPC endpoint (default: the network's public endpoint)",
        default=os.environ.get("RPC_URL"),
    )

    parser.add_argument(
        "--oracle-url",
        dest="oracle_url",
        type=str,
        help="Oracle service base URL (default: the network's oracle)",
        default=os.environ.get("ORACLE_URL"),
    )

    parser.add_argument(
        "--markets",
        type=str,
        help="Comma-separated market token addresses (default: the network's markets)",
        default=os.environ.get("MARKETS"),
    )

    parser.add_argument(
        "--output-dir",
        dest="output_dir",
        type=str,
        help="Directory for prices.json and prices.csv (default: dist)",
        default=os.environ.get("OUTPUT_DIR") or "dist",
    )

    parser.add_argument(
        "--fetch-timeout",
        dest="fetch_timeout",
        type=float,
        help="Timeout for oracle requests in seconds (default: 10.0)",
        default=os.environ.get("FETCH_TIMEOUT") or "10.0",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    markets = parse_markets(args.markets)
    if args.markets is not None and not markets:
        parser.error("At least one market must be specified")

    try:
        config = PublishConfig.for_network(
            args.network,
            oracle_url=args.oracle_url,
            rpc_url=args.rpc_url,
            markets=markets,
            output_dir=args.output_dir,
            fetch_timeout=args.fetch_timeout,
        )
    except ValueError as e:
        parser.error(str(e))

    # Log configuration
    logger.info("=" * 60)
    logger.info("GM Price Publisher")
    logger.info("=" * 60)
    logger.info(f"Network:           {args.network}")
    logger.info(f"RPC URL:           {config.rpc_url}")
    logger.info(f"Oracle URL:        {config.oracle_url}")
    logger.info(f"Reader:            {config.reader_address}")
    logger.info(f"Data Store:        {config.data_store_address}")
    logger.info(f"Markets:           {', '.join(sorted(config.target_markets))}")
    logger.info(f"Output Dir:        {config.output_dir}")
    logger.info(f"Fetch Timeout:     {config.fetch_timeout}s")
    logger.info("=" * 60)

    try:
        logger.info("Fetching GM token prices...")
        snapshot = asyncio.run(publish(config))
        SnapshotWriter(config.output_dir).write(snapshot)
        logger.info(SnapshotWriter.render_json(snapshot).rstrip())
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
