"""MarketMatcher: Joins oracle markets, tickers and tokens by address.

Algorithm:
    1. Index tickers by (canonical) token address, last entry wins
    2. Keep the oracle markets whose market token is a target, in oracle order
    3. Fail if no target market is listed
    4. Resolve each market's index/long/short tickers, failing on the first
       market with a missing ticker

A ResolvedMarket is only ever built with all three tickers present.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .errors import MissingOraclePrice, NoTargetMarketsFound
from .OracleData import MarketDescriptor, OracleSnapshot, PriceTicker, TokenMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedMarket:
    """A target market joined with the tickers of its three tokens.

    :ivar market: The oracle market descriptor.
    :ivar index_price: Ticker of the index token.
    :ivar long_price: Ticker of the long token.
    :ivar short_price: Ticker of the short token.
    """

    market: MarketDescriptor
    index_price: PriceTicker
    long_price: PriceTicker
    short_price: PriceTicker


def index_tickers(tickers: Iterable[PriceTicker]) -> dict[str, PriceTicker]:
    """Index tickers by token address.

    :param tickers: Tickers in oracle order.
    :returns: Dict mapping token address to its last reported ticker.
    """
    indexed: dict[str, PriceTicker] = {}
    for ticker in tickers:
        if ticker.token_address in indexed:
            logger.warning(
                f"Duplicate ticker for {ticker.token_address}, using the last one"
            )
        indexed[ticker.token_address] = ticker
    return indexed


def index_tokens(tokens: Iterable[TokenMetadata]) -> dict[str, TokenMetadata]:
    """Index token metadata by address.

    :param tokens: Tokens in oracle order.
    :returns: Dict mapping address to metadata.
    """
    return {token.address: token for token in tokens}


class MarketMatcher:
    """Selects target markets and resolves their oracle prices.

    :ivar target_markets: Canonical addresses of the markets to resolve.

    .. code-block:: python

        matcher = MarketMatcher(config.target_markets)
        resolved = matcher.resolve(await oracle_client.fetch_all())
    """

    def __init__(self, target_markets: frozenset[str]) -> None:
        """Initialize the matcher.

        :param target_markets: Target market token addresses (any casing).
        """
        self.target_markets = frozenset(m.lower() for m in target_markets)

    def select(self, markets: Iterable[MarketDescriptor]) -> list[MarketDescriptor]:
        """Filter the oracle market list down to the target markets.

        :param markets: Markets in oracle order.
        :returns: Target markets in oracle order.
        :raises NoTargetMarketsFound: If no target market is listed.
        """
        selected = [m for m in markets if m.market_token in self.target_markets]
        if not selected:
            raise NoTargetMarketsFound(self.target_markets)

        found = {m.market_token for m in selected}
        for missing in sorted(self.target_markets - found):
            logger.warning(f"Target market {missing} not listed by oracle")
        return selected

    def resolve(self, snapshot: OracleSnapshot) -> list[ResolvedMarket]:
        """Resolve every target market in the snapshot.

        :param snapshot: Oracle collections for this run.
        :returns: Resolved markets in oracle order.
        :raises NoTargetMarketsFound: If no target market is listed.
        :raises MissingOraclePrice: If any target market lacks a ticker.
        """
        tickers = index_tickers(snapshot.tickers)
        return [
            self._resolve_market(market, tickers)
            for market in self.select(snapshot.markets)
        ]

    @staticmethod
    def _resolve_market(
        market: MarketDescriptor, tickers: dict[str, PriceTicker]
    ) -> ResolvedMarket:
        missing = [t for t in dict.fromkeys(market.tokens) if t not in tickers]
        if missing:
            raise MissingOraclePrice(market.market_token, missing)

        return ResolvedMarket(
            market=market,
            index_price=tickers[market.index_token],
            long_price=tickers[market.long_token],
            short_price=tickers[market.short_token],
        )
