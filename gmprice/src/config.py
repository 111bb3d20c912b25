"""Publisher configuration and per-network deployment defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from web3 import Web3

from .OracleData import canonical_address

DEFAULT_NETWORK = "arbitrum"


@dataclass(frozen=True)
class NetworkDeployment:
    """Well-known endpoints and contracts for one network.

    :ivar oracle_url: Base URL of the oracle service.
    :ivar rpc_url: Public JSON-RPC endpoint.
    :ivar reader_address: Reader contract exposing getMarketTokenPrice.
    :ivar data_store_address: DataStore contract passed to the reader.
    :ivar markets: Default target market token addresses.
    """

    oracle_url: str
    rpc_url: str
    reader_address: str
    data_store_address: str
    markets: tuple[str, ...]


DEFAULT_NETWORKS: dict[str, NetworkDeployment] = {
    "arbitrum": NetworkDeployment(
        oracle_url="https://arbitrum-api.gmxinfra.io",
        rpc_url="https://arb1.arbitrum.io/rpc",
        reader_address="0x470fbC46bcC0f16532691Df360A07d8Bf5ee0789",
        data_store_address="0xFD70de6b91282D8017aA4E741e9Ae325CAb992d8",
        markets=(
            "0x47c031236e19d024b42f8AE6780E44A573170703",
            "0x70d95587d40A2caf56bd97485aB3Eec10Bee6336",
            "0x7C11F78Ce78768518D743E81Fdfa2F860C6b9A77",
        ),
    ),
}


@dataclass(frozen=True)
class PublishConfig:
    """Effective configuration for one publishing run.

    Target markets are stored in canonical (lowercase) form; contract
    addresses are stored checksummed.

    :ivar oracle_url: Base URL of the oracle service.
    :ivar rpc_url: JSON-RPC endpoint of the chain node.
    :ivar reader_address: Reader contract address.
    :ivar data_store_address: DataStore contract address.
    :ivar target_markets: Market token addresses to publish.
    :ivar output_dir: Directory receiving prices.json and prices.csv.
    :ivar fetch_timeout: Timeout for oracle requests in seconds.
    """

    oracle_url: str
    rpc_url: str
    reader_address: str
    data_store_address: str
    target_markets: frozenset[str]
    output_dir: Path = field(default_factory=lambda: Path("dist"))
    fetch_timeout: float = 10.0

    def __post_init__(self) -> None:
        if not self.target_markets:
            raise ValueError("At least one target market must be specified")
        if self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive")
        for name in ("reader_address", "data_store_address"):
            value = getattr(self, name)
            if not Web3.is_address(value.lower()):
                raise ValueError(f"Invalid {name}: {value}")
            object.__setattr__(self, name, Web3.to_checksum_address(value))
        for market in self.target_markets:
            if not Web3.is_address(market.lower()):
                raise ValueError(f"Invalid market address: {market}")
        object.__setattr__(
            self,
            "target_markets",
            frozenset(canonical_address(m) for m in self.target_markets),
        )

    @classmethod
    def for_network(
        cls,
        network: str,
        *,
        oracle_url: str | None = None,
        rpc_url: str | None = None,
        markets: list[str] | None = None,
        output_dir: Path | str = "dist",
        fetch_timeout: float = 10.0,
    ) -> PublishConfig:
        """Build a configuration from network defaults and overrides.

        :param network: Network name (key of DEFAULT_NETWORKS).
        :param oracle_url: Optional oracle base URL override.
        :param rpc_url: Optional RPC endpoint override.
        :param markets: Optional target market list override.
        :param output_dir: Output directory (default: "dist").
        :param fetch_timeout: Oracle request timeout (default: 10.0).
        :returns: New PublishConfig.
        :raises ValueError: If the network is unknown or a value is invalid.
        """
        deployment = DEFAULT_NETWORKS.get(network)
        if deployment is None:
            available = ", ".join(sorted(DEFAULT_NETWORKS))
            raise ValueError(f"Unknown network '{network}'. Available: {available}")

        return cls(
            oracle_url=(oracle_url or deployment.oracle_url).rstrip("/"),
            rpc_url=rpc_url or deployment.rpc_url,
            reader_address=deployment.reader_address,
            data_store_address=deployment.data_store_address,
            target_markets=frozenset(
                markets if markets is not None else deployment.markets
            ),
            output_dir=Path(output_dir),
            fetch_timeout=fetch_timeout,
        )
