"""PricePublisher: Orchestrates one GM market token price snapshot.

Architecture:
    - Markets, tickers and tokens are fetched concurrently from the oracle
    - MarketMatcher selects the target markets and pairs their tickers
    - MarketReader values every resolved market concurrently on-chain
    - Raw 30-decimal outputs are converted to 4-decimal USD
    - Results keep the oracle's market order and share one timestamp

Any failure aborts the snapshot and cancels valuations still in flight;
there is no partial result.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

from web3 import Web3

from .FixedPoint import to_usd
from .MarketMatcher import MarketMatcher, ResolvedMarket, index_tokens
from .OracleData import MarketDescriptor, TokenMetadata

if TYPE_CHECKING:
    from .MarketReader import MarketReader, MarketValuation
    from .OracleClient import OracleClient

logger = logging.getLogger(__name__)

UNKNOWN_SYMBOL = "?"


def utc_timestamp() -> str:
    """Return the current UTC time as ISO-8601 with millisecond precision.

    :returns: Timestamp like "2024-01-01T00:00:00.000Z".
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def market_name(market: MarketDescriptor, tokens: dict[str, TokenMetadata]) -> str:
    """Build the display name of a market.

    :param market: Market descriptor.
    :param tokens: Token metadata indexed by address.
    :returns: Name like "ETH/USD [WETH-USDC]", with "?" for unknown symbols.
    """

    def symbol(address: str) -> str:
        token = tokens.get(address)
        return token.symbol if token and token.symbol else UNKNOWN_SYMBOL

    return (
        f"{symbol(market.index_token)}/USD "
        f"[{symbol(market.long_token)}-{symbol(market.short_token)}]"
    )


@dataclass(frozen=True)
class MarketResult:
    """Published price of one market token.

    :ivar address: Checksummed market token address.
    :ivar name: Display name.
    :ivar price: Market token price in USD (4 decimals, truncated).
    :ivar pool_value: Pool value in USD (4 decimals, truncated).
    """

    address: str
    name: str
    price: float
    pool_value: float


@dataclass(frozen=True)
class PriceSnapshot:
    """All market results captured in one run.

    :ivar updated: ISO-8601 UTC capture time.
    :ivar markets: Results in oracle market order.
    """

    updated: str
    markets: tuple[MarketResult, ...]

    def to_json(self) -> dict[str, Any]:
        """Return the JSON document keyed by market address."""
        return {
            "updated": self.updated,
            "markets": {
                r.address: {"name": r.name, "price": r.price, "poolValue": r.pool_value}
                for r in self.markets
            },
        }

    def to_rows(self) -> list[tuple[str, float]]:
        """Return one (name, price) row per market."""
        return [(r.name, r.price) for r in self.markets]


class PricePublisher:
    """Builds price snapshots for a fixed set of target markets.

    :ivar oracle_client: Oracle service client.
    :ivar matcher: Target market matcher.
    :ivar reader: On-chain market valuation reader.
    """

    def __init__(
        self,
        oracle_client: OracleClient,
        matcher: MarketMatcher,
        reader: MarketReader,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        """Initialize the publisher.

        :param oracle_client: Oracle service client.
        :param matcher: Matcher configured with the target markets.
        :param reader: Reader contract wrapper.
        :param clock: Callable returning the capture timestamp.
        """
        self.oracle_client = oracle_client
        self.matcher = matcher
        self.reader = reader
        self.clock = clock

    async def collect(self) -> PriceSnapshot:
        """Fetch, match and value all target markets.

        :returns: PriceSnapshot with one result per target market found.
        :raises PublishError: If any oracle fetch, match or valuation fails.
        """
        snapshot = await self.oracle_client.fetch_all()
        resolved = self.matcher.resolve(snapshot)
        tokens = index_tokens(snapshot.tokens)

        logger.info(f"Valuing {len(resolved)} markets")
        tasks = [
            asyncio.ensure_future(self.reader.get_market_token_price(r))
            for r in resolved
        ]
        try:
            valuations = await asyncio.gather(*tasks)
        except BaseException:
            # Cancel valuations still in flight
            for task in tasks:
                task.cancel()
            raise

        results = tuple(
            self._build_result(r, v, tokens)
            for r, v in zip(resolved, valuations, strict=True)
        )
        return PriceSnapshot(updated=self.clock(), markets=results)

    @staticmethod
    def _build_result(
        resolved: ResolvedMarket,
        valuation: MarketValuation,
        tokens: dict[str, TokenMetadata],
    ) -> MarketResult:
        result = MarketResult(
            address=Web3.to_checksum_address(resolved.market.market_token),
            name=market_name(resolved.market, tokens),
            price=to_usd(valuation.price),
            pool_value=to_usd(valuation.pool_value),
        )
        logger.info(
            f"{result.name}: ${result.price:.4f} (pool ${result.pool_value:,.4f})"
        )
        return result
