"""RecordStore: Current price record of every tracked pair.

Records are only created and replaced through :meth:`RecordStore.commit`,
never deleted, and never moved backwards in time.
"""

from __future__ import annotations

from .PriceRecord import PriceRecord


class RecordStore:
    """In-memory store of per-pair price records."""

    def __init__(self) -> None:
        self._records: dict[bytes, PriceRecord] = {}

    def load(self, pair: bytes) -> PriceRecord:
        """Get the record of a pair, or the empty record if never updated."""
        return self._records.get(pair, PriceRecord.empty())

    def get(self, pair: bytes) -> PriceRecord | None:
        """Get the committed record of a pair, or None if it has none.

        Used by :meth:`PriceChain.get`, which reports a missing record as
        an untracked pair.
        """
        return self._records.get(pair)

    def commit(self, pair: bytes, record: PriceRecord) -> None:
        """Store the new record of a pair.

        :param pair: Pair key.
        :param record: Record replacing the current one.
        :raises ValueError: If the record would move the pair back in time
            or is the empty record.
        """
        if record.is_empty:
            raise ValueError(f"Refusing to commit an empty record for {pair!r}")
        current = self._records.get(pair)
        if current is not None and record.last_update_time < current.last_update_time:
            raise ValueError(
                f"Record for {pair!r} would regress from "
                f"{current.last_update_time} to {record.last_update_time}"
            )
        self._records[pair] = record

    def __contains__(self, pair: object) -> bool:
        return pair in self._records

    def __len__(self) -> int:
        return len(self._records)
