"""UpdateGate: Minimum interval between accepted updates of a pair.

The first update of a pair always passes. Afterwards an update passes once
``now >= last_update_time + interval`` (the boundary itself passes).

.. code-block:: python

    >>> gate = UpdateGate(interval=60)
    >>> gate.check(b"ETH/USD", PriceRecord(last_update_time=1000), now=1060)
    >>> gate.next_allowed(PriceRecord(last_update_time=1000))
    1060
"""

from __future__ import annotations

from .errors import UpdateTooSoon
from .PriceRecord import PriceRecord

DEFAULT_UPDATE_INTERVAL = 86400  # one day


class UpdateGate:
    """Rate limit for per-pair updates.

    :ivar interval: Minimum seconds between two accepted updates.
    """

    def __init__(self, interval: int = DEFAULT_UPDATE_INTERVAL) -> None:
        """Initialize the gate.

        :param interval: Minimum seconds between updates (default: 86400).
        :raises ValueError: If interval is not positive.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval

    def next_allowed(self, record: PriceRecord) -> int:
        """Get the earliest timestamp at which the next update passes.

        :param record: Current record of the pair.
        :returns: 0 for a pair never updated, else last update + interval.
        """
        if record.is_empty:
            return 0
        return record.last_update_time + self.interval

    def check(self, pair: bytes, record: PriceRecord, now: int) -> None:
        """Check that an update of the pair may proceed at ``now``.

        :param pair: Pair key, used for the error message.
        :param record: Current record of the pair.
        :param now: Host timestamp of the update.
        :raises UpdateTooSoon: If the interval has not elapsed.
        """
        if record.is_empty:
            return
        next_allowed = self.next_allowed(record)
        if now < next_allowed:
            raise UpdateTooSoon(pair, now, next_allowed)
