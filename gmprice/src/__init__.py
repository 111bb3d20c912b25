"""
GM Price Publisher - Market Token Valuation Module

This module publishes USD prices of GM market tokens:
- OracleClient: Fetches markets, tickers and tokens from the oracle service
- MarketMatcher: Pairs target markets with their token tickers
- MarketReader: Values market tokens via the on-chain Reader contract
- PricePublisher: Main orchestrator for a price snapshot
- SnapshotWriter: JSON and CSV output
"""

from .config import DEFAULT_NETWORKS, PublishConfig
from .errors import (
    MissingOraclePrice,
    NoTargetMarketsFound,
    OracleError,
    PublishError,
    ValuationCallFailed,
)
from .FixedPoint import to_usd
from .MarketMatcher import MarketMatcher, ResolvedMarket
from .MarketReader import MAX_PNL_FACTOR_FOR_TRADERS, MarketReader
from .OracleClient import OracleClient
from .PricePublisher import MarketResult, PricePublisher, PriceSnapshot
from .SnapshotWriter import SnapshotWriter

__all__ = [
    "DEFAULT_NETWORKS",
    "MAX_PNL_FACTOR_FOR_TRADERS",
    "MarketMatcher",
    "MarketReader",
    "MarketResult",
    "MissingOraclePrice",
    "NoTargetMarketsFound",
    "OracleClient",
    "OracleError",
    "PriceSnapshot",
    "PricePublisher",
    "PublishConfig",
    "PublishError",
    "ResolvedMarket",
    "SnapshotWriter",
    "ValuationCallFailed",
    "to_usd",
]
