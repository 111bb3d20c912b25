"""OracleClient: Async client for the oracle service REST endpoints.

Three collections are read per run, concurrently:

    - ``GET /markets``         -> ``{"markets": [MarketDescriptor, ...]}``
    - ``GET /prices/tickers``  -> ``[PriceTicker, ...]``
    - ``GET /tokens``          -> ``{"tokens": [TokenMetadata, ...]}``

A shared httpx.AsyncClient is used to avoid connection overhead. Non-2xx
statuses, transport errors, invalid JSON and malformed markets are raised;
there is no retry or fallback. Malformed ticker and token entries are
skipped, since a target market missing its ticker still fails in the matcher.

.. code-block:: python

    client = OracleClient("https://arbitrum-api.gmxinfra.io")
    snapshot = await client.fetch_all()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, ClassVar, TypeVar

import httpx

from .errors import OracleFetchError, OracleHTTPError, OracleResponseError
from .OracleData import MarketDescriptor, OracleSnapshot, PriceTicker, TokenMetadata

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OracleClient:
    """Client for the oracle service.

    :cvar DEFAULT_TIMEOUT: Default HTTP request timeout in seconds.
    :ivar base_url: Oracle service base URL.
    :ivar timeout: Request timeout in seconds.
    """

    # Class-level shared HTTP client
    _shared_client: ClassVar[httpx.AsyncClient | None] = None

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the oracle client.

        :param base_url: Oracle service base URL.
        :param timeout: Request timeout in seconds (default: 10).
        :param client: Optional HTTP client; the shared client is used if omitted.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._client = client

    @classmethod
    def get_shared_client(cls) -> httpx.AsyncClient:
        """Get or create the shared HTTP client.

        :returns: Shared httpx.AsyncClient instance.
        """
        if cls._shared_client is None or cls._shared_client.is_closed:
            cls._shared_client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0),
                limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
                follow_redirects=True,
            )
        return cls._shared_client

    @classmethod
    async def close_shared_client(cls) -> None:
        """Close the shared HTTP client."""
        if cls._shared_client is not None and not cls._shared_client.is_closed:
            await cls._shared_client.aclose()
            cls._shared_client = None

    async def fetch_markets(self) -> list[MarketDescriptor]:
        """Fetch the market list.

        :returns: Markets in oracle order.
        """
        data = await self._get_json("/markets")
        return self._parse_list(
            self._unwrap(data, "markets"), MarketDescriptor.from_json, "markets"
        )

    async def fetch_tickers(self) -> list[PriceTicker]:
        """Fetch the price tickers.

        Malformed entries are skipped with a warning; a target market whose
        ticker was skipped fails later with MissingOraclePrice.

        :returns: Valid tickers in oracle order.
        """
        data = await self._get_json("/prices/tickers")
        return self._parse_list(
            data, PriceTicker.from_json, "tickers", skip_invalid=True
        )

    async def fetch_tokens(self) -> list[TokenMetadata]:
        """Fetch the token metadata list.

        Token metadata is display-only, so malformed entries are skipped
        with a warning.

        :returns: Valid tokens in oracle order.
        """
        data = await self._get_json("/tokens")
        return self._parse_list(
            self._unwrap(data, "tokens"),
            TokenMetadata.from_json,
            "tokens",
            skip_invalid=True,
        )

    async def fetch_all(self) -> OracleSnapshot:
        """Fetch markets, tickers and tokens concurrently.

        The first failing request propagates; no partial snapshot is returned.

        :returns: OracleSnapshot with all three collections.
        """
        markets, tickers, tokens = await asyncio.gather(
            self.fetch_markets(),
            self.fetch_tickers(),
            self.fetch_tokens(),
        )
        logger.info(
            f"Oracle snapshot: {len(markets)} markets, {len(tickers)} tickers, "
            f"{len(tokens)} tokens"
        )
        return OracleSnapshot(
            markets=tuple(markets), tickers=tuple(tickers), tokens=tuple(tokens)
        )

    @staticmethod
    def _unwrap(data: Any, key: str) -> Any:
        if not isinstance(data, dict) or key not in data:
            raise OracleResponseError(f"Expected object with '{key}' list")
        return data[key]

    @staticmethod
    def _parse_list(
        data: Any,
        parse: Callable[[Any], T],
        kind: str,
        skip_invalid: bool = False,
    ) -> list[T]:
        if not isinstance(data, list):
            raise OracleResponseError(
                f"Expected {kind} list, got {type(data).__name__}"
            )
        if not skip_invalid:
            return [parse(item) for item in data]

        parsed: list[T] = []
        for item in data:
            try:
                parsed.append(parse(item))
            except OracleResponseError as e:
                logger.warning(f"Skipping malformed entry in {kind}: {e}")
        return parsed

    async def _get_json(self, path: str) -> Any:
        """Make an HTTP GET request and decode the JSON body.

        :param path: Endpoint path relative to base_url.
        :returns: Decoded JSON document.
        :raises OracleHTTPError: On non-2xx response.
        :raises OracleFetchError: On network/timeout errors.
        :raises OracleResponseError: If the body is not valid JSON.
        """
        url = f"{self.base_url}{path}"
        client = self._client or self.get_shared_client()
        logger.debug(f"GET {url}")
        try:
            response = await client.get(url, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise OracleFetchError(f"Request timeout for {url}: {e}") from e
        except httpx.RequestError as e:
            raise OracleFetchError(f"Request failed for {url}: {e}") from e

        if not response.is_success:
            logger.debug(
                "HTTP GET %s failed with status %s: %s",
                url,
                response.status_code,
                response.text[:200],
            )
            raise OracleHTTPError(response.status_code, response.text[:200])

        try:
            return response.json()
        except ValueError as e:
            raise OracleResponseError(f"Invalid JSON from {url}: {e}") from e
