"""Error taxonomy for the GM price publisher.

Every error below is fatal to a publishing run: nothing in the pipeline
catches them, and no output is written when one is raised.
"""


class PublishError(Exception):
    """Base exception for publishing errors."""

    pass


class OracleError(PublishError):
    """Base exception for oracle service errors."""

    pass


class OracleFetchError(OracleError):
    """Raised when an oracle request fails at the transport level."""

    pass


class OracleHTTPError(OracleError):
    """Raised when the oracle service answers with a non-2xx status.

    :ivar status_code: HTTP status code from the failed request.
    """

    def __init__(self, status_code: int, message: str):
        """Initialize the HTTP error.

        :param status_code: HTTP status code.
        :param message: Error message from response.
        """
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class OracleResponseError(OracleError):
    """Raised when an oracle payload is not valid JSON or has the wrong shape."""

    pass


class NoTargetMarketsFound(PublishError):
    """Raised when none of the configured markets is listed by the oracle."""

    def __init__(self, targets: frozenset[str]):
        self.targets = targets
        super().__init__(
            f"No target markets found in oracle market list: {sorted(targets)}"
        )


class MissingOraclePrice(PublishError):
    """Raised when a target market lacks a ticker for one of its tokens.

    :ivar market_token: Address of the affected market.
    :ivar missing: Token addresses without a ticker.
    """

    def __init__(self, market_token: str, missing: list[str]):
        self.market_token = market_token
        self.missing = missing
        super().__init__(
            f"Missing oracle prices for market {market_token}: {', '.join(missing)}"
        )


class ValuationCallFailed(PublishError):
    """Raised when the on-chain market token valuation call fails.

    :ivar market_token: Address of the market being valued.
    """

    def __init__(self, market_token: str, reason: str):
        self.market_token = market_token
        super().__init__(f"Valuation call failed for market {market_token}: {reason}")
