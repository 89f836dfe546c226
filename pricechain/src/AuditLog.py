"""AuditLog: Collects, persists and replays PriceUpdated events.

The log is the externally consumable audit trail. On disk it is a file of
concatenated CBOR maps, one per event, appended in commit order. Replaying
the events of a pair through the chain hasher reproduces its chain hash.

.. code-block:: python

    log = AuditLog(path="audit.cbor")
    chain.add_listener(log)
    ...
    replayed = AuditLog.replay(AuditLog.load("audit.cbor"))
    replayed[b"ETH/USD"] == chain.get(b"ETH/USD").chain_hash
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import cbor2

from . import ChainHasher
from .PriceRecord import ZERO_HASH, PriceUpdated

if TYPE_CHECKING:
    from .PriceChain import PriceChain

logger = logging.getLogger(__name__)


class AuditLog:
    """Listener appending every event to a CBOR file, or to memory.

    With a path, events live only in the file so a long-running keeper does
    not accumulate them. Without one, they are kept in ``events``.

    A write failure propagates to the price chain, which then aborts the
    update, so the log never misses a committed record.

    :ivar events: Events received, in order (only when no path is set).
    :ivar path: Optional CBOR file the events are appended to.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.events: list[PriceUpdated] = []
        self.path = Path(path) if path else None

    def __call__(self, event: PriceUpdated) -> None:
        if self.path is not None:
            self.append_to(self.path, event)
        else:
            self.events.append(event)

    def history(self) -> list[PriceUpdated]:
        """Get every event received, reading the file when a path is set."""
        if self.path is None:
            return list(self.events)
        if not self.path.exists():
            return []
        return self.load(self.path)

    def events_for(self, pair: bytes) -> list[PriceUpdated]:
        """Get the events of one pair in commit order."""
        return [e for e in self.history() if e.pair == pair]

    @staticmethod
    def append_to(path: str | Path, event: PriceUpdated) -> None:
        """Append one event to a CBOR log file."""
        with open(path, "ab") as file:
            file.write(cbor2.dumps(event.to_dict()))

    @staticmethod
    def load(path: str | Path) -> list[PriceUpdated]:
        """Read all events of a CBOR log file.

        :param path: Log file path.
        :returns: Events in file order.
        :raises cbor2.CBORDecodeError: If the file is corrupt or truncated.
        """
        data = Path(path).read_bytes()
        stream = io.BytesIO(data)
        events = []
        while stream.tell() < len(data):
            events.append(PriceUpdated.from_dict(cbor2.load(stream)))
        logger.debug(f"Loaded {len(events)} events from {path}")
        return events

    @staticmethod
    def replay(events: Iterable[PriceUpdated]) -> dict[bytes, bytes]:
        """Recompute the chain hash of every pair from its events.

        Each event's own ``chain_hash`` is ignored; only its inputs are used.

        :param events: Events in commit order.
        :returns: Dict mapping pair key to the recomputed chain hash.
        """
        hashes: dict[bytes, bytes] = {}
        for event in events:
            hashes[event.pair] = ChainHasher.next_hash(
                hashes.get(event.pair, ZERO_HASH),
                event.price,
                event.timestamp,
                event.auxiliary,
                event.block_height,
            )
        return hashes

    @staticmethod
    def first_mismatch(events: Iterable[PriceUpdated]) -> PriceUpdated | None:
        """Find the first event whose recorded hash differs from the replay.

        :returns: The first tampered event, or None if the log is consistent.
        """
        hashes: dict[bytes, bytes] = {}
        for event in events:
            expected = ChainHasher.next_hash(
                hashes.get(event.pair, ZERO_HASH),
                event.price,
                event.timestamp,
                event.auxiliary,
                event.block_height,
            )
            if expected != event.chain_hash:
                return event
            hashes[event.pair] = expected
        return None

    def verify(self, chain: PriceChain) -> dict[bytes, bool]:
        """Compare replayed hashes against the records held by a chain.

        :param chain: Price chain whose records are checked.
        :returns: Dict mapping each tracked pair to whether its hash matches.
        """
        replayed = self.replay(self.history())
        result = {}
        for pair in chain.pairs():
            result[pair] = replayed.get(pair, ZERO_HASH) == chain.get(pair).chain_hash
            if not result[pair]:
                logger.warning(f"Audit mismatch for {pair!r}")
        return result
