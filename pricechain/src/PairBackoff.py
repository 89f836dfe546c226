"""PairBackoff: Per-pair exponential backoff for the refresh keeper.

When a pair's source is unavailable or reports unusable data, the keeper
stops trying that pair for a while. The backoff doubles with each consecutive
failure up to a cap; a successful update clears it.

The price chain itself never retries; this only throttles the keeper.

.. code-block:: python

    >>> backoff = PairBackoff()
    >>> backoff.record_failure(b"ETH/USD")
    5.0
    >>> backoff.record_failure(b"ETH/USD")
    10.0
    >>> backoff.record_success(b"ETH/USD")
    >>> backoff.is_ready(b"ETH/USD")
    True
"""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass
class PairStatus:
    """Failure tracking of a single pair.

    :ivar consecutive_failures: Failures since the last success.
    :ivar retry_at: Unix timestamp when the pair may be tried again.
    :ivar last_error: Kind of the last error, if any.
    """

    consecutive_failures: int = 0
    retry_at: float = 0.0
    last_error: str | None = None


class PairBackoff:
    """Exponential backoff keyed by pair.

    :ivar base_backoff_seconds: Backoff after the first failure.
    :ivar max_backoff_seconds: Cap of the backoff.
    """

    DEFAULT_BASE_BACKOFF_SECONDS = 5
    DEFAULT_MAX_BACKOFF_SECONDS = 300  # 5 minutes

    def __init__(
        self,
        base_backoff_seconds: float = DEFAULT_BASE_BACKOFF_SECONDS,
        max_backoff_seconds: float = DEFAULT_MAX_BACKOFF_SECONDS,
    ) -> None:
        self.base_backoff_seconds = base_backoff_seconds
        self.max_backoff_seconds = max_backoff_seconds
        self._status: dict[bytes, PairStatus] = {}

    def record_failure(self, pair: bytes, error: str | None = None) -> float:
        """Record a failed update attempt.

        :param pair: Pair key.
        :param error: Error kind, kept for status reporting.
        :returns: The backoff duration in seconds.
        """
        status = self._status.setdefault(pair, PairStatus())
        status.consecutive_failures += 1
        status.last_error = error

        backoff_seconds = float(
            min(
                self.base_backoff_seconds * (2 ** (status.consecutive_failures - 1)),
                self.max_backoff_seconds,
            )
        )
        status.retry_at = time.time() + backoff_seconds
        return backoff_seconds

    def record_success(self, pair: bytes) -> None:
        self._status.pop(pair, None)

    def is_ready(self, pair: bytes) -> bool:
        """Check if the pair is outside its backoff window."""
        status = self._status.get(pair)
        return status is None or time.time() >= status.retry_at

    def get_status(self, pair: bytes) -> PairStatus | None:
        return self._status.get(pair)
