"""MarketReader: On-chain market token valuation via the Reader contract.

For each resolved market, ``Reader.getMarketTokenPrice`` is called (read-only)
with:

    - the DataStore address
    - the market's (marketToken, indexToken, longToken, shortToken)
    - the (min, max) price bounds of the index, long and short tokens
    - the MAX_PNL_FACTOR_FOR_TRADERS pnl factor key
    - ``maximize=False``, valuing the pool at the minimizing price

The call returns the market token price and a MarketPoolValueInfo record,
both in 30-decimal USD.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from eth_abi import encode
from web3 import Web3

from .errors import ValuationCallFailed
from .MarketMatcher import ResolvedMarket

if TYPE_CHECKING:
    from web3.contract import AsyncContract

logger = logging.getLogger(__name__)


def pnl_factor_key(name: str) -> bytes:
    """Compute a DataStore key as keccak256(abi.encode(name)).

    :param name: Key identifier string.
    :returns: 32-byte key.
    """
    return Web3.keccak(encode(["string"], [name]))


MAX_PNL_FACTOR_FOR_TRADERS = pnl_factor_key("MAX_PNL_FACTOR_FOR_TRADERS")


@dataclass(frozen=True)
class MarketPoolValueInfo:
    """Pool accounting returned alongside the market token price.

    All values are 30-decimal USD or raw token amounts; only pool_value is
    used for publishing.
    """

    pool_value: int
    long_pnl: int
    short_pnl: int
    net_pnl: int
    long_token_amount: int
    short_token_amount: int
    long_token_usd: int
    short_token_usd: int
    total_borrowing_fees: int
    borrowing_fee_pool_factor: int
    impact_pool_amount: int

    @classmethod
    def from_call_result(cls, value: Any) -> MarketPoolValueInfo:
        """Build from the decoded tuple returned by the contract.

        :param value: Decoded struct (tuple or named tuple) of eleven ints.
        :returns: New MarketPoolValueInfo.
        """
        return cls(*tuple(value))


@dataclass(frozen=True)
class MarketValuation:
    """Raw valuation of one market.

    :ivar market_token: Address of the valued market.
    :ivar price: Market token price (signed, 30-decimal USD).
    :ivar pool_info: Pool accounting record.
    """

    market_token: str
    price: int
    pool_info: MarketPoolValueInfo

    @property
    def pool_value(self) -> int:
        """Pool value (signed, 30-decimal USD)."""
        return self.pool_info.pool_value


class MarketReader:
    """Calls the Reader contract to value market tokens.

    :ivar contract: Reader contract instance.
    :ivar data_store_address: DataStore contract address.
    :ivar pnl_factor_type: PnL factor key passed to the reader.
    :ivar maximize: Whether to value at the maximizing price.
    """

    def __init__(
        self,
        contract: AsyncContract,
        data_store_address: str,
        pnl_factor_type: bytes = MAX_PNL_FACTOR_FOR_TRADERS,
        maximize: bool = False,
    ) -> None:
        """Initialize the market reader.

        :param contract: Reader contract instance.
        :param data_store_address: DataStore contract address.
        :param pnl_factor_type: PnL factor key (default: MAX_PNL_FACTOR_FOR_TRADERS).
        :param maximize: Value at the maximizing price (default: False).
        """
        self.contract = contract
        self.data_store_address = Web3.to_checksum_address(data_store_address)
        self.pnl_factor_type = pnl_factor_type
        self.maximize = maximize

    def build_args(self, resolved: ResolvedMarket) -> tuple:
        """Build the getMarketTokenPrice arguments for a market.

        :param resolved: Market with its three tickers.
        :returns: Positional argument tuple for the contract function.
        """
        market = resolved.market
        return (
            self.data_store_address,
            (
                Web3.to_checksum_address(market.market_token),
                Web3.to_checksum_address(market.index_token),
                Web3.to_checksum_address(market.long_token),
                Web3.to_checksum_address(market.short_token),
            ),
            resolved.index_price.bounds,
            resolved.long_price.bounds,
            resolved.short_price.bounds,
            self.pnl_factor_type,
            self.maximize,
        )

    async def get_market_token_price(self, resolved: ResolvedMarket) -> MarketValuation:
        """Value one market token on-chain.

        :param resolved: Market with its three tickers.
        :returns: MarketValuation with the raw contract outputs.
        :raises ValuationCallFailed: If the call fails or reverts.
        """
        market_token = resolved.market.market_token
        logger.debug(f"Calling getMarketTokenPrice for {market_token}")
        try:
            price, pool_info = await self.contract.functions.getMarketTokenPrice(
                *self.build_args(resolved)
            ).call()
        except Exception as e:
            raise ValuationCallFailed(market_token, str(e) or type(e).__name__) from e

        return MarketValuation(
            market_token=market_token,
            price=int(price),
            pool_info=MarketPoolValueInfo.from_call_result(pool_info),
        )
