"""PriceDeriver: Turns raw source output into a single signed price.

Two derivations are supported:

* Cumulative ticks (TWAP pool oracles): the source reports tick cumulatives
  for the window ``[period, 0]``; the price is the average tick over the
  window, ``(c1 - c0) / period``, truncated toward zero.
* Round feeds: the source reports
  ``(roundId, answer, startedAt, updatedAt, answeredInRound)``; the price is
  ``answer``, which must be positive.

.. code-block:: python

    >>> derive_twap_price([0, 86400], 86400).price
    1
    >>> derive_twap_price([0, -7], 2).price
    -3
    >>> obs = derive_feed_price((1, 2000, 10, 20, 1))
    >>> (obs.price, obs.auxiliary, obs.feed_timestamp)
    (2000, 1, 20)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .errors import InvalidPriceData

INT56_MIN = -(2**55)
INT56_MAX = 2**55 - 1
INT256_MIN = -(2**255)
INT256_MAX = 2**255 - 1
UINT80_MAX = 2**80 - 1


@dataclass(frozen=True)
class Observation:
    """A validated observation from a price source.

    :ivar price: Derived signed price.
    :ivar auxiliary: Source-specific metadata (round id), or None.
    :ivar feed_timestamp: Timestamp reported by the source, or None if the
        source has no native timestamp.
    """

    price: int
    auxiliary: int | None = None
    feed_timestamp: int | None = None


def trunc_div(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero.

    Differs from ``//`` for negative quotients: ``trunc_div(-7, 2) == -3``
    while ``-7 // 2 == -4``.

    :raises ZeroDivisionError: If denominator is zero.
    """
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def derive_twap_price(tick_cumulatives: Sequence[int], period: int) -> Observation:
    """Derive the time-weighted average tick from two tick cumulatives.

    :param tick_cumulatives: Cumulatives for ``[period, 0]`` seconds ago.
    :param period: Window length in seconds.
    :returns: Observation without auxiliary data or feed timestamp.
    :raises InvalidPriceData: If the source output is malformed.
    """
    if period <= 0:
        raise InvalidPriceData(f"TWAP period must be positive, got {period}")
    if len(tick_cumulatives) != 2:
        raise InvalidPriceData(
            f"Expected 2 tick cumulatives, got {len(tick_cumulatives)}"
        )

    c0, c1 = tick_cumulatives
    for value in (c0, c1):
        if not isinstance(value, int) or not INT56_MIN <= value <= INT56_MAX:
            raise InvalidPriceData(f"Tick cumulative out of int56 range: {value!r}")

    return Observation(price=trunc_div(c1 - c0, period))


def derive_feed_price(round_data: Sequence[int]) -> Observation:
    """Derive the price from a round feed's ``latestRoundData`` tuple.

    :param round_data: ``(roundId, answer, startedAt, updatedAt, answeredInRound)``.
    :returns: Observation with the round id and the feed's ``updatedAt``.
    :raises InvalidPriceData: If the answer is not positive or a field is malformed.
    """
    if len(round_data) != 5:
        raise InvalidPriceData(f"Expected 5 round data fields, got {len(round_data)}")

    round_id, answer, _started_at, updated_at, _answered_in_round = round_data

    if not isinstance(answer, int) or not INT256_MIN <= answer <= INT256_MAX:
        raise InvalidPriceData(f"Answer out of int256 range: {answer!r}")
    if answer <= 0:
        raise InvalidPriceData(f"Non-positive answer: {answer}")
    if not isinstance(round_id, int) or not 0 <= round_id <= UINT80_MAX:
        raise InvalidPriceData(f"Round id out of uint80 range: {round_id!r}")
    if not isinstance(updated_at, int) or updated_at < 0:
        raise InvalidPriceData(f"Invalid updatedAt: {updated_at!r}")

    return Observation(price=answer, auxiliary=round_id, feed_timestamp=updated_at)
