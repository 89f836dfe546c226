"""Cumulative-tick (TWAP) source.

Contract: Uniswap V3 style pool oracle,
``observe(uint32[] secondsAgos) -> (int56[] tickCumulatives, uint160[] ...)``.
The source queries ``[window, 0]`` and averages the tick over the window.
The result is an average tick, not a quote-currency price.
"""

import logging

from ..errors import InvalidPriceData
from ..PriceDeriver import Observation, derive_twap_price
from .base import PriceSource, register_source

logger = logging.getLogger(__name__)


@register_source
class TwapSource(PriceSource):
    """Source reading time-weighted average ticks from a pool oracle."""

    name = "twap"
    ABI_NAME = "IUniswapV3PoolOracle"

    def fetch(self, window: int) -> Observation:
        """Fetch the average tick over the last ``window`` seconds.

        :param window: TWAP window in seconds.
        :returns: Observation with no auxiliary data.
        """
        result = self._call(self.contract.functions.observe([window, 0]))
        try:
            tick_cumulatives = list(result[0])
        except (TypeError, IndexError) as e:
            raise InvalidPriceData(f"[twap] Malformed observe() result: {result!r}") from e

        observation = derive_twap_price(tick_cumulatives, window)
        logger.debug(
            f"[twap] {self.address}: ticks={tick_cumulatives}, window={window}s, "
            f"tick={observation.price}"
        )
        return observation
