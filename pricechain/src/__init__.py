"""
Price Chain - Rate-limited, hash-chained price records

This module provides an auditable, append-only record of prices per pair:
- PairRegistry: First-write-wins pair to source binding
- UpdateGate: Minimum interval between updates of a pair
- PriceDeriver: TWAP and round feed price derivation
- ChainHasher: Frozen v1 update encoding and keccak256 chaining
- PriceChain: Orchestrates update/get and emits PriceUpdated events
- AuditLog: CBOR persistence and offline replay of events
- PriceChainKeeper: Periodic refresh loop
- sources: Web3 price source adapters
"""

from .AuditLog import AuditLog
from .ChainHasher import ENCODING_VERSION, encode_update, next_hash
from .errors import (
    AuditWriteFailed,
    HostUnavailable,
    InvalidIdentifier,
    InvalidPriceData,
    MissingSourceAddress,
    PriceChainError,
    ReentrantUpdate,
    SourceMismatch,
    SourceUnavailable,
    UntrackedPair,
    UpdateTooSoon,
)
from .HostEnvironment import HostEnvironment, HostSnapshot, SystemHost, Web3Host
from .PairRegistry import ZERO_ADDRESS, PairRegistry
from .PriceChain import PriceChain
from .PriceChainKeeper import PriceChainKeeper
from .PriceRecord import ZERO_HASH, PriceRecord, PriceUpdated
from .UpdateGate import DEFAULT_UPDATE_INTERVAL, UpdateGate

__all__ = [
    "AuditLog",
    "AuditWriteFailed",
    "DEFAULT_UPDATE_INTERVAL",
    "ENCODING_VERSION",
    "HostEnvironment",
    "HostSnapshot",
    "HostUnavailable",
    "InvalidIdentifier",
    "InvalidPriceData",
    "MissingSourceAddress",
    "PairRegistry",
    "PriceChain",
    "PriceChainError",
    "PriceChainKeeper",
    "PriceRecord",
    "PriceUpdated",
    "ReentrantUpdate",
    "SourceMismatch",
    "SourceUnavailable",
    "SystemHost",
    "UntrackedPair",
    "UpdateGate",
    "UpdateTooSoon",
    "Web3Host",
    "ZERO_ADDRESS",
    "ZERO_HASH",
    "encode_update",
    "next_hash",
]
