"""Base price source interface and source registry.

A price source wraps one on-chain contract and answers a single query: the
current observation over a window. Every source raises
:class:`~pricechain.src.errors.InvalidPriceData` for unusable output and
:class:`~pricechain.src.errors.SourceUnavailable` when the call itself fails.

.. code-block:: python

    @register_source
    class MySource(PriceSource):
        name = "mysource"
        ABI_NAME = "MyOracle"

        def fetch(self, window: int) -> Observation:
            raw = self._call(self.contract.functions.peek())
            return Observation(price=raw)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from web3.exceptions import Web3Exception

from ..errors import SourceUnavailable
from ..PriceDeriver import Observation

if TYPE_CHECKING:
    from web3.contract import Contract
    from web3.contract.contract import ContractFunction

logger = logging.getLogger(__name__)


class PriceSource(ABC):
    """Abstract base class for price sources.

    :cvar name: Unique identifier of the source kind.
    :cvar ABI_NAME: Name of the bundled ABI used to bind the contract.
    :ivar contract: Web3 contract (or any object with the same ``functions`` API).
    """

    name: ClassVar[str] = ""
    ABI_NAME: ClassVar[str] = ""

    def __init__(self, contract: Contract) -> None:
        self.contract = contract

    @property
    def address(self) -> str:
        return self.contract.address

    @abstractmethod
    def fetch(self, window: int) -> Observation:
        """Fetch and validate the current observation.

        :param window: Query window in seconds (the update interval).
        :returns: Validated observation.
        :raises InvalidPriceData: If the source output is unusable.
        :raises SourceUnavailable: If the source call fails.
        """
        pass

    def _call(self, function: ContractFunction) -> Any:
        """Execute a read-only contract call.

        :raises SourceUnavailable: On RPC, transport or revert errors.
        """
        try:
            return function.call()
        except (Web3Exception, OSError) as e:
            logger.debug(f"[{self.name}] call to {self.address} failed: {e}")
            raise SourceUnavailable(f"[{self.name}] {self.address}: {e}") from e


# Registry of available sources (populated by subclass imports)
SOURCE_REGISTRY: dict[str, type[PriceSource]] = {}


def register_source(cls: type[PriceSource]) -> type[PriceSource]:
    """Decorator to register a source class in the global registry.

    :raises ValueError: If the source has no name defined.
    """
    if not cls.name:
        raise ValueError(f"Source {cls.__name__} must define a 'name' class variable")
    SOURCE_REGISTRY[cls.name] = cls
    return cls


def get_source_class(name: str) -> type[PriceSource]:
    """Get a source class by name.

    :raises ValueError: If the source name is unknown.
    """
    if name not in SOURCE_REGISTRY:
        available = ", ".join(sorted(SOURCE_REGISTRY.keys()))
        raise ValueError(f"Unknown source '{name}'. Available: {available}")
    return SOURCE_REGISTRY[name]


def get_available_sources() -> list[str]:
    """Get the sorted list of registered source names."""
    return sorted(SOURCE_REGISTRY.keys())
