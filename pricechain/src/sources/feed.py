"""Discrete round feed source.

Contract: Chainlink style aggregator,
``latestRoundData() -> (uint80 roundId, int256 answer, uint256 startedAt,
uint256 updatedAt, uint80 answeredInRound)``.
"""

import logging

from ..errors import InvalidPriceData
from ..PriceDeriver import Observation, derive_feed_price
from .base import PriceSource, register_source

logger = logging.getLogger(__name__)


@register_source
class RoundFeedSource(PriceSource):
    """Source reading the latest round of an aggregator feed."""

    name = "feed"
    ABI_NAME = "AggregatorV3Interface"

    def fetch(self, window: int) -> Observation:
        """Fetch the latest round. The window is not used by round feeds."""
        round_data = self._call(self.contract.functions.latestRoundData())
        try:
            round_data = tuple(round_data)
        except TypeError as e:
            raise InvalidPriceData(
                f"[feed] Malformed latestRoundData() result: {round_data!r}"
            ) from e

        observation = derive_feed_price(round_data)
        logger.debug(
            f"[feed] {self.address}: round={observation.auxiliary}, "
            f"answer={observation.price}, updatedAt={observation.feed_timestamp}"
        )
        return observation
