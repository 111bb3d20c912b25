"""OracleData: Immutable records parsed from the oracle service.

All addresses are canonicalized to lowercase at ingestion, since the oracle
endpoints are not consistent in the letter-casing of the same address. Every
later lookup can therefore compare addresses with plain equality.

.. code-block:: python

    >>> ticker = PriceTicker.from_json(
    ...     {"tokenAddress": "0xAbC", "minPrice": "10", "maxPrice": "11"}
    ... )
    >>> ticker.token_address
    '0xabc'
    >>> ticker.min_price
    10
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import OracleResponseError


def canonical_address(address: Any) -> str:
    """Normalize an address to its canonical (lowercase) form.

    :param address: Address as reported by a source.
    :returns: Lowercase address string.
    :raises OracleResponseError: If address is not a 0x-prefixed string.
    """
    if not isinstance(address, str) or not address.lower().startswith("0x"):
        raise OracleResponseError(f"Invalid address: {address!r}")
    return address.lower()


def _parse_price(value: Any, field: str) -> int:
    # Prices are decimal strings too large for float, int() keeps full precision
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise OracleResponseError(f"Invalid {field}: {value!r}")
    try:
        price = int(value)
    except ValueError as e:
        raise OracleResponseError(f"Invalid {field}: {value!r}") from e
    if price < 0:
        raise OracleResponseError(f"Negative {field}: {value!r}")
    return price


def _require(data: Any, key: str, kind: str) -> Any:
    if not isinstance(data, dict):
        raise OracleResponseError(f"Expected {kind} object, got {type(data).__name__}")
    if key not in data:
        raise OracleResponseError(f"Missing '{key}' in {kind}: {data}")
    return data[key]


@dataclass(frozen=True)
class MarketDescriptor:
    """A market (liquidity pool share) listed by the oracle.

    :ivar market_token: Address of the market token.
    :ivar index_token: Address of the index token.
    :ivar long_token: Address of the long collateral token.
    :ivar short_token: Address of the short collateral token.
    """

    market_token: str
    index_token: str
    long_token: str
    short_token: str

    @classmethod
    def from_json(cls, data: Any) -> MarketDescriptor:
        """Parse a market entry from the ``/markets`` endpoint.

        :param data: Decoded JSON object.
        :returns: New MarketDescriptor.
        :raises OracleResponseError: If a field is missing or invalid.
        """
        return cls(
            market_token=canonical_address(_require(data, "marketToken", "market")),
            index_token=canonical_address(_require(data, "indexToken", "market")),
            long_token=canonical_address(_require(data, "longToken", "market")),
            short_token=canonical_address(_require(data, "shortToken", "market")),
        )

    @property
    def tokens(self) -> tuple[str, str, str]:
        """Return the (index, long, short) token addresses."""
        return (self.index_token, self.long_token, self.short_token)


@dataclass(frozen=True)
class PriceTicker:
    """A min/max price bound for one token, in oracle scaling.

    :ivar token_address: Address of the priced token.
    :ivar min_price: Lower price bound.
    :ivar max_price: Upper price bound.
    :ivar token_symbol: Symbol reported alongside the ticker, if any.
    """

    token_address: str
    min_price: int
    max_price: int
    token_symbol: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> PriceTicker:
        """Parse a ticker entry from the ``/prices/tickers`` endpoint.

        :param data: Decoded JSON object.
        :returns: New PriceTicker.
        :raises OracleResponseError: If a field is missing or invalid.
        """
        symbol = data.get("tokenSymbol") if isinstance(data, dict) else None
        return cls(
            token_address=canonical_address(_require(data, "tokenAddress", "ticker")),
            min_price=_parse_price(_require(data, "minPrice", "ticker"), "minPrice"),
            max_price=_parse_price(_require(data, "maxPrice", "ticker"), "maxPrice"),
            token_symbol=symbol if isinstance(symbol, str) else None,
        )

    @property
    def bounds(self) -> tuple[int, int]:
        """Return the (min, max) pair in contract argument order."""
        return (self.min_price, self.max_price)


@dataclass(frozen=True)
class TokenMetadata:
    """Display information for a token.

    Only the address is required; symbol and decimals are cosmetic and are
    None when the oracle omits them or reports them with the wrong type.

    :ivar address: Token address.
    :ivar symbol: Token symbol (e.g., "ETH"), if reported.
    :ivar decimals: Token decimals, if reported.
    """

    address: str
    symbol: str | None = None
    decimals: int | None = None

    @classmethod
    def from_json(cls, data: Any) -> TokenMetadata:
        """Parse a token entry from the ``/tokens`` endpoint.

        :param data: Decoded JSON object.
        :returns: New TokenMetadata.
        :raises OracleResponseError: If the address is missing or invalid.
        """
        address = canonical_address(_require(data, "address", "token"))
        symbol = data.get("symbol")
        decimals = data.get("decimals")
        if isinstance(decimals, bool) or not isinstance(decimals, int):
            decimals = None
        return cls(
            address=address,
            symbol=symbol if isinstance(symbol, str) else None,
            decimals=decimals,
        )


@dataclass(frozen=True)
class OracleSnapshot:
    """The three oracle collections fetched for a single run.

    :ivar markets: Markets in oracle order.
    :ivar tickers: Price tickers in oracle order.
    :ivar tokens: Token metadata in oracle order.
    """

    markets: tuple[MarketDescriptor, ...]
    tickers: tuple[PriceTicker, ...]
    tokens: tuple[TokenMetadata, ...]
