"""
Price sources for the price chain.

Usage:
    from pricechain.src.sources import Web3SourceFactory, get_available_sources

    get_available_sources()
    # ['feed', 'twap']

    factory = Web3SourceFactory(w3, "feed")
    observation = factory("0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419").fetch(86400)
"""

# Import base classes and utilities
from .base import (
    SOURCE_REGISTRY,
    PriceSource,
    get_available_sources,
    get_source_class,
    register_source,
)

# Import all source implementations to trigger registration
from .factory import Web3SourceFactory
from .feed import RoundFeedSource
from .twap import TwapSource

__all__ = [
    "PriceSource",
    "register_source",
    "get_source_class",
    "get_available_sources",
    "SOURCE_REGISTRY",
    "RoundFeedSource",
    "TwapSource",
    "Web3SourceFactory",
]
