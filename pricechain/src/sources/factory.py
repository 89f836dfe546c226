"""Web3SourceFactory: Builds price sources for bound addresses."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..ContractUtility import ContractUtility
from .base import PriceSource, get_source_class

if TYPE_CHECKING:
    from web3 import Web3

logger = logging.getLogger(__name__)


class Web3SourceFactory:
    """Creates and caches one source adapter per contract address.

    All pairs handled by a factory share one source kind.

    :ivar w3: Web3 instance used for contract calls.
    :ivar source_class: Source implementation for every address.
    """

    def __init__(self, w3: Web3, kind: str) -> None:
        """Initialize the factory.

        :param w3: Web3 instance.
        :param kind: Registered source name ("twap" or "feed").
        :raises ValueError: If the kind is unknown.
        """
        self.w3 = w3
        self.source_class = get_source_class(kind)
        self.abi = ContractUtility.get_abi(self.source_class.ABI_NAME)
        self._sources: dict[str, PriceSource] = {}

    def __call__(self, address: str) -> PriceSource:
        source = self._sources.get(address)
        if source is None:
            contract = self.w3.eth.contract(address=address, abi=self.abi)
            source = self.source_class(contract)
            self._sources[address] = source
            logger.debug(f"Created {self.source_class.name} source for {address}")
        return source
