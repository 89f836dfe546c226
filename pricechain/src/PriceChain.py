"""PriceChain: Single entry point for registering and refreshing pairs.

An update runs these steps while holding an exclusive section for the pair:

    1. Validate the pair key
    2. Resolve the source address (the binding is created only on commit)
    3. Load the current record (empty record for a new pair)
    4. Read the host snapshot and check the update gate
    5. Fetch and derive the observation from the source
    6. Compute the next chain hash
    7. Hand the PriceUpdated event to every listener (the audit log)
    8. Commit record and binding together

Any failure in steps 1-7 raises and leaves registry and store untouched. A
listener that raises aborts the update with AuditWriteFailed, so a committed
record always has its event in every listener.

A nested or concurrent update of the same pair fails with ReentrantUpdate,
so a source calling back into ``update`` cannot pass the gate twice.

.. code-block:: python

    chain = PriceChain(Web3SourceFactory(w3, "feed"), Web3Host(w3))
    chain.update(b"ETH/USD", "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419")
    chain.get(b"ETH/USD").last_price
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator

from . import ChainHasher
from .errors import AuditWriteFailed, HostUnavailable, ReentrantUpdate, UntrackedPair
from .PairRegistry import PairRegistry
from .PriceRecord import PriceRecord, PriceUpdated, to_pair_key
from .RecordStore import RecordStore
from .UpdateGate import DEFAULT_UPDATE_INTERVAL, UpdateGate

if TYPE_CHECKING:
    from .HostEnvironment import HostEnvironment
    from .sources import PriceSource

logger = logging.getLogger(__name__)

Listener = Callable[[PriceUpdated], None]


class PriceChain:
    """Registry, gate, hasher and store sequenced behind ``update``/``get``.

    :ivar registry: Pair to source bindings.
    :ivar store: Current record per pair.
    :ivar gate: Update rate limit; its interval is also the TWAP window.
    :ivar host: Supplier of timestamps and block heights.
    :ivar source_factory: Maps a bound address to a price source.
    """

    def __init__(
        self,
        source_factory: Callable[[str], PriceSource],
        host: HostEnvironment,
        update_interval: int = DEFAULT_UPDATE_INTERVAL,
        listeners: list[Listener] | None = None,
    ) -> None:
        """Initialize the price chain.

        :param source_factory: Callable returning the source for an address.
        :param host: Host environment for timestamps and heights.
        :param update_interval: Minimum seconds between updates of a pair
            (default: 86400).
        :param listeners: Callables receiving every PriceUpdated event.
        :raises ValueError: If update_interval is not positive.
        """
        self.registry = PairRegistry()
        self.store = RecordStore()
        self.gate = UpdateGate(update_interval)
        self.host = host
        self.source_factory = source_factory
        self.listeners: list[Listener] = list(listeners or [])

        self._in_flight: set[bytes] = set()
        self._guard = threading.Lock()

    def add_listener(self, listener: Listener) -> None:
        self.listeners.append(listener)

    @contextmanager
    def _exclusive(self, pair: bytes) -> Iterator[None]:
        with self._guard:
            if pair in self._in_flight:
                raise ReentrantUpdate(f"Update of {pair!r} already in progress")
            self._in_flight.add(pair)
        try:
            yield
        finally:
            with self._guard:
                self._in_flight.discard(pair)

    def update(self, pair: bytes | str, source_hint: str | None = None) -> PriceRecord:
        """Refresh a pair, binding it to ``source_hint`` on first use.

        :param pair: Pair key (str is UTF-8 encoded, never normalized).
        :param source_hint: Source address, or None/zero address to use the
            bound source.
        :returns: The committed record.
        :raises InvalidIdentifier: If the pair key or address is malformed.
        :raises MissingSourceAddress: If a new pair has no source hint.
        :raises SourceMismatch: If the hint differs from the bound source.
        :raises UpdateTooSoon: If the gate interval has not elapsed.
        :raises InvalidPriceData: If the source output is unusable.
        :raises SourceUnavailable: If the source call fails.
        :raises HostUnavailable: If the host snapshot fails or is unusable.
        :raises AuditWriteFailed: If a listener rejects the event.
        :raises ReentrantUpdate: If the pair is already being updated.
        """
        key = to_pair_key(pair)

        with self._exclusive(key):
            address = self.registry.resolve(key, source_hint)
            record = self.store.load(key)

            host = self.host.snapshot()
            if host.timestamp <= 0 or host.block_height < 0:
                raise HostUnavailable(
                    f"Unusable host snapshot: timestamp={host.timestamp}, "
                    f"height={host.block_height}"
                )
            self.gate.check(key, record, host.timestamp)

            observation = self.source_factory(address).fetch(self.gate.interval)
            feed_timestamp = (
                host.timestamp
                if observation.feed_timestamp is None
                else observation.feed_timestamp
            )

            chain_hash = ChainHasher.next_hash(
                record.chain_hash,
                observation.price,
                feed_timestamp,
                observation.auxiliary,
                host.block_height,
            )
            new_record = PriceRecord(
                chain_hash=chain_hash,
                last_update_time=host.timestamp,
                last_price=observation.price,
                auxiliary=observation.auxiliary,
                last_feed_timestamp=feed_timestamp,
                last_block_height=host.block_height,
            )

            event = PriceUpdated(
                pair=key,
                price=new_record.last_price,
                auxiliary=new_record.auxiliary,
                timestamp=feed_timestamp,
                block_height=new_record.last_block_height,
                chain_hash=chain_hash,
            )
            self._emit(event)

            # A positive timestamp past the gate makes the record non-empty
            # and newer than the stored one, so neither step below raises.
            self.store.commit(key, new_record)
            self.registry.bind(key, address)

            logger.info(
                f"{key.decode('utf-8', 'replace')}: price={new_record.last_price} "
                f"aux={new_record.auxiliary} height={new_record.last_block_height} "
                f"hash=0x{chain_hash.hex()}"
            )

        return new_record

    def _emit(self, event: PriceUpdated) -> None:
        for listener in self.listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Listener {listener!r} failed for {event.pair!r}: {e}")
                raise AuditWriteFailed(
                    f"Listener {listener!r} rejected the event for {event.pair!r}: {e}"
                ) from e

    def get(self, pair: bytes | str) -> PriceRecord:
        """Get the current record of a tracked pair.

        :param pair: Pair key.
        :returns: Immutable snapshot of the record.
        :raises InvalidIdentifier: If the pair key is malformed.
        :raises UntrackedPair: If the pair has no source binding.
        """
        key = to_pair_key(pair)
        record = self.store.get(key)
        if record is None or not self.registry.is_bound(key):
            raise UntrackedPair(f"Pair {key!r} is not tracked")
        return record

    def source_of(self, pair: bytes | str) -> str | None:
        """Get the bound source address of a pair, or None if unbound."""
        return self.registry.source_of(to_pair_key(pair))

    def pairs(self) -> list[bytes]:
        """Get all tracked pair keys."""
        return self.registry.pairs()
