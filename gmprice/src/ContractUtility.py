"""ContractUtility: Async Web3 initialization and contract ABI loading."""

import json
from pathlib import Path

from web3 import AsyncWeb3
from web3.contract import AsyncContract


class ContractUtility:
    """Utility for Web3 connection and contract ABI loading.

    :ivar rpc_url: JSON-RPC endpoint URL.
    :ivar w3: Configured AsyncWeb3 instance.
    """

    def __init__(self, rpc_url: str) -> None:
        """Initialize the contract utility.

        :param rpc_url: JSON-RPC endpoint of the chain node.
        """
        self.rpc_url = rpc_url
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(self.rpc_url))

    def get_contract(self, contract_name: str, address: str) -> AsyncContract:
        """Bind a packaged ABI to a deployed contract address.

        :param contract_name: Name of the contract (e.g., "Reader").
        :param address: Checksummed contract address.
        :returns: AsyncContract instance.
        """
        return self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address),
            abi=self.get_abi(contract_name),
        )

    async def disconnect(self) -> None:
        """Close the provider's HTTP session, if it holds one."""
        disconnect = getattr(self.w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()

    @staticmethod
    def get_abi(contract_name: str) -> list:
        """Load the ABI of a contract from the packaged abi folder.

        :param contract_name: Name of the contract (e.g., "Reader").
        :returns: Contract ABI.
        """
        abi_path = (Path(__file__).parent / "abi" / f"{contract_name}.json").resolve()

        with open(abi_path, "r") as file:
            contract_data = json.load(file)

        return contract_data["abi"]
