"""Unit tests for OracleClient."""

import asyncio

import httpx
import pytest

from gmprice.src.errors import OracleFetchError, OracleHTTPError, OracleResponseError
from gmprice.src.OracleClient import OracleClient

BASE_URL = "https://oracle.test"

MARKETS = {
    "markets": [
        {
            "marketToken": "0xM1",
            "indexToken": "0xI1",
            "longToken": "0xL1",
            "shortToken": "0xS1",
        }
    ]
}
TICKERS = [
    {"tokenAddress": "0xI1", "tokenSymbol": "ETH", "minPrice": "10", "maxPrice": "11"},
]
TOKENS = {"tokens": [{"address": "0xI1", "symbol": "ETH", "decimals": 18}]}


def make_client(routes: dict) -> OracleClient:
    """Build an OracleClient backed by a mock transport."""

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, httpx.Response):
            return route
        if isinstance(route, Exception):
            raise route
        return httpx.Response(200, json=route)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OracleClient(BASE_URL, client=http_client)


def default_routes() -> dict:
    return {"/markets": MARKETS, "/prices/tickers": TICKERS, "/tokens": TOKENS}


class TestOracleClientInit:
    """Test OracleClient initialization."""

    def test_strips_trailing_slash(self) -> None:
        """Base URL should not end with a slash."""
        client = OracleClient(f"{BASE_URL}/")
        assert client.base_url == BASE_URL

    def test_default_timeout(self) -> None:
        """Timeout defaults to DEFAULT_TIMEOUT."""
        assert OracleClient(BASE_URL).timeout == OracleClient.DEFAULT_TIMEOUT
        assert OracleClient(BASE_URL, timeout=3.0).timeout == 3.0


class TestOracleClientFetch:
    """Test successful fetches."""

    def test_fetch_all(self) -> None:
        """All three collections are fetched and parsed."""
        client = make_client(default_routes())
        snapshot = asyncio.run(client.fetch_all())

        assert [m.market_token for m in snapshot.markets] == ["0xm1"]
        assert snapshot.tickers[0].token_address == "0xi1"
        assert snapshot.tickers[0].bounds == (10, 11)
        assert snapshot.tokens[0].symbol == "ETH"

    def test_empty_collections(self) -> None:
        """Empty lists are valid responses."""
        client = make_client(
            {"/markets": {"markets": []}, "/prices/tickers": [], "/tokens": {"tokens": []}}
        )
        snapshot = asyncio.run(client.fetch_all())
        assert snapshot.markets == ()
        assert snapshot.tickers == ()
        assert snapshot.tokens == ()

    def test_skips_malformed_entries(self) -> None:
        """Malformed tickers and tokens are skipped, loose metadata is kept."""
        routes = default_routes()
        routes["/prices/tickers"] = TICKERS + [
            {"tokenAddress": "0xJunk", "minPrice": "abc", "maxPrice": "1"},
            {"tokenSymbol": "NOADDR", "minPrice": "1", "maxPrice": "1"},
        ]
        routes["/tokens"] = {
            "tokens": TOKENS["tokens"]
            + [
                {"address": "0x77", "symbol": None, "decimals": 18},
                {"address": "0x78", "symbol": "NODEC"},
                {"symbol": "NOADDR", "decimals": 6},
            ]
        }
        client = make_client(routes)
        snapshot = asyncio.run(client.fetch_all())

        assert [t.token_address for t in snapshot.tickers] == ["0xi1"]
        assert [t.address for t in snapshot.tokens] == ["0xi1", "0x77", "0x78"]
        assert snapshot.tokens[1].symbol is None
        assert snapshot.tokens[2].decimals is None


class TestOracleClientErrors:
    """Test that every oracle failure is raised."""

    def test_http_error(self) -> None:
        """Non-2xx status raises OracleHTTPError."""
        routes = default_routes()
        routes["/prices/tickers"] = httpx.Response(503, text="unavailable")
        client = make_client(routes)

        with pytest.raises(OracleHTTPError) as exc_info:
            asyncio.run(client.fetch_all())
        assert exc_info.value.status_code == 503

    def test_malformed_json(self) -> None:
        """Invalid JSON body raises OracleResponseError."""
        routes = default_routes()
        routes["/tokens"] = httpx.Response(200, text="<html>oops</html>")
        client = make_client(routes)

        with pytest.raises(OracleResponseError, match="Invalid JSON"):
            asyncio.run(client.fetch_all())

    def test_wrong_shape(self) -> None:
        """A markets payload without the markets key is rejected."""
        routes = default_routes()
        routes["/markets"] = MARKETS["markets"]
        client = make_client(routes)

        with pytest.raises(OracleResponseError, match="markets"):
            asyncio.run(client.fetch_markets())

    def test_tickers_not_a_list(self) -> None:
        """A ticker payload that is not a list is rejected."""
        routes = default_routes()
        routes["/prices/tickers"] = {"tickers": TICKERS}
        client = make_client(routes)

        with pytest.raises(OracleResponseError, match="Expected tickers list"):
            asyncio.run(client.fetch_tickers())

    def test_transport_error(self) -> None:
        """Connection failures raise OracleFetchError."""
        routes = default_routes()
        routes["/markets"] = httpx.ConnectError("connection refused")
        client = make_client(routes)

        with pytest.raises(OracleFetchError, match="Request failed"):
            asyncio.run(client.fetch_markets())

    def test_timeout(self) -> None:
        """Timeouts raise OracleFetchError."""
        routes = default_routes()
        routes["/tokens"] = httpx.ReadTimeout("too slow")
        client = make_client(routes)

        with pytest.raises(OracleFetchError, match="Request timeout"):
            asyncio.run(client.fetch_tokens())
