"""ContractUtility: Web3 initialization and bundled ABI loading."""

import json
import logging
import os
from pathlib import Path

from sapphirepy import sapphire
from web3 import Web3

logger = logging.getLogger(__name__)

NETWORKS = {
    "ethereum": "https://ethereum-rpc.publicnode.com",
    "sapphire": "https://sapphire.oasis.io",
    "sapphire-testnet": "https://testnet.sapphire.oasis.io",
    "sapphire-localnet": "http://localhost:8545",
    "localnet": "http://localhost:8545",
}

ABI_DIR = Path(__file__).parent / "abi"


class ContractUtility:
    """Utility for Web3 connection and contract ABI loading.

    :ivar network: Network RPC URL.
    :ivar w3: Configured Web3 instance, Sapphire-wrapped on Sapphire networks.
    """

    def __init__(self, network_name: str, timeout: float = 10.0) -> None:
        """Initialize the contract utility.

        :param network_name: Name of the network, or an RPC URL.
        :param timeout: HTTP timeout for RPC requests in seconds.
        """
        # RPC_URL env var overrides the default for the network
        self.network = os.environ.get("RPC_URL") or NETWORKS.get(network_name, network_name)

        self.w3 = Web3(
            Web3.HTTPProvider(self.network, request_kwargs={"timeout": timeout})
        )
        if network_name.startswith("sapphire"):
            self.w3 = sapphire.wrap(self.w3)
        logger.debug(f"Connected Web3 to {self.network} ({network_name})")

    @staticmethod
    def get_abi(contract_name: str) -> list:
        """Load the ABI of a bundled contract interface.

        :param contract_name: Name of the interface (e.g., "AggregatorV3Interface").
        :returns: ABI list.
        :raises FileNotFoundError: If no ABI is bundled under that name.
        """
        with open(ABI_DIR / f"{contract_name}.json", "r") as file:
            return json.load(file)
