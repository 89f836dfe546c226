"""PriceRecord: Per-pair price state and the audit event emitted on update.

A pair key is an exact byte string (e.g. ``b"ETH/USD"``). Keys are never
normalized: ``b"eth/usd"`` and ``b"ETH/USD"`` are two different pairs.

.. code-block:: python

    >>> record = PriceRecord.empty()
    >>> record.is_empty
    True
    >>> record.chain_hash == ZERO_HASH
    True
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidIdentifier

# Chain hash of a pair that has never been updated.
ZERO_HASH = b"\x00" * 32


def to_pair_key(pair: bytes | str) -> bytes:
    """Convert a pair identifier to its exact byte key.

    Strings are UTF-8 encoded as-is, without case folding or trimming.

    :param pair: Pair identifier as bytes or str.
    :returns: The pair key bytes.
    :raises InvalidIdentifier: If the key is empty or not bytes/str.
    """
    if isinstance(pair, str):
        key = pair.encode("utf-8")
    elif isinstance(pair, (bytes, bytearray)):
        key = bytes(pair)
    else:
        raise InvalidIdentifier(f"Pair key must be bytes or str, got {type(pair).__name__}")
    if not key:
        raise InvalidIdentifier("Pair key must not be empty")
    return key


@dataclass(frozen=True)
class PriceRecord:
    """Current state of a tracked pair.

    :ivar chain_hash: 32-byte running digest, ``ZERO_HASH`` before the first update.
    :ivar last_update_time: Host timestamp of the last accepted update (0 = never).
    :ivar last_price: Derived price of the last accepted update.
    :ivar auxiliary: Round id for round feeds, None for TWAP sources.
    :ivar last_feed_timestamp: Timestamp reported by the source (update time for TWAP).
    :ivar last_block_height: Host block height at the last accepted update.
    """

    chain_hash: bytes = ZERO_HASH
    last_update_time: int = 0
    last_price: int = 0
    auxiliary: int | None = None
    last_feed_timestamp: int = 0
    last_block_height: int = 0

    @classmethod
    def empty(cls) -> PriceRecord:
        """Return the zero-valued record of a pair never updated."""
        return cls()

    @property
    def is_empty(self) -> bool:
        """Check if this record has never been updated."""
        return self.last_update_time == 0


@dataclass(frozen=True)
class PriceUpdated:
    """Audit event emitted once per accepted update.

    Replaying the events of a pair in order through
    :func:`~pricechain.src.ChainHasher.next_hash` reproduces ``chain_hash``.

    :ivar pair: Pair key.
    :ivar price: Derived price.
    :ivar auxiliary: Round id, or None for TWAP sources.
    :ivar timestamp: Feed timestamp (round feeds) or update time (TWAP).
    :ivar block_height: Host block height at the update.
    :ivar chain_hash: Chain hash after the update.
    """

    pair: bytes
    price: int
    auxiliary: int | None
    timestamp: int
    block_height: int
    chain_hash: bytes

    def to_dict(self) -> dict:
        """Return a plain dict suitable for CBOR encoding."""
        return {
            "pair": self.pair,
            "price": self.price,
            "auxiliary": self.auxiliary,
            "timestamp": self.timestamp,
            "block_height": self.block_height,
            "chain_hash": self.chain_hash,
        }

    @classmethod
    def from_dict(cls, data: dict) -> PriceUpdated:
        """Build an event from a dict produced by :meth:`to_dict`.

        :raises KeyError: If a field is missing.
        """
        return cls(
            pair=bytes(data["pair"]),
            price=int(data["price"]),
            auxiliary=data["auxiliary"],
            timestamp=int(data["timestamp"]),
            block_height=int(data["block_height"]),
            chain_hash=bytes(data["chain_hash"]),
        )
