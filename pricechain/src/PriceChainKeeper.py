"""PriceChainKeeper: Periodic refresh loop over configured pairs.

The keeper is an ordinary caller of :meth:`PriceChain.update`. Every
``refresh_period`` it tries each configured pair that is not in backoff:

    - success: the pair's backoff is cleared
    - UpdateTooSoon: expected between intervals, logged at DEBUG
    - InvalidPriceData / SourceUnavailable / HostUnavailable: the pair
      enters backoff
    - any other PriceChainError (e.g. SourceMismatch): logged as an error,
      the pair enters backoff
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .errors import (
    HostUnavailable,
    InvalidPriceData,
    PriceChainError,
    SourceUnavailable,
    UpdateTooSoon,
)
from .PairBackoff import PairBackoff

if TYPE_CHECKING:
    from .PriceChain import PriceChain

logger = logging.getLogger(__name__)


class PriceChainKeeper:
    """Keeps a set of pairs refreshed on a price chain.

    :ivar chain: Price chain to update.
    :ivar pairs: Dict mapping pair key to its source address.
    :ivar refresh_period: Seconds between refresh passes.
    :ivar backoff: Per-pair failure backoff.
    """

    def __init__(
        self,
        chain: PriceChain,
        pairs: dict[bytes, str],
        refresh_period: int = 300,
        backoff: PairBackoff | None = None,
    ) -> None:
        """Initialize the keeper.

        :param chain: Price chain to update.
        :param pairs: Dict mapping pair key to source address.
        :param refresh_period: Seconds between passes (minimum: 1, default: 300).
        :param backoff: Optional backoff tracker.
        """
        self.chain = chain
        self.pairs = dict(pairs)
        self.refresh_period = max(1, refresh_period)
        self.backoff = backoff or PairBackoff()

    def refresh_pair(self, pair: bytes, source: str) -> bool:
        """Try to update one pair.

        :returns: True if a new record was committed.
        """
        name = pair.decode("utf-8", "replace")
        try:
            self.chain.update(pair, source)
        except UpdateTooSoon as e:
            logger.debug(f"{name}: gate closed until {e.next_allowed}")
            return False
        except PriceChainError as e:
            backoff = self.backoff.record_failure(pair, e.kind)
            if isinstance(e, (InvalidPriceData, SourceUnavailable, HostUnavailable)):
                logger.warning(f"{name}: update failed ({e.kind}): {e}; backoff {backoff:.1f}s")
            else:
                logger.error(f"{name}: update failed ({e.kind}): {e}; backoff {backoff:.1f}s")
            return False

        self.backoff.record_success(pair)
        return True

    def refresh_all(self) -> int:
        """Run one pass over all pairs not in backoff.

        :returns: Number of pairs updated.
        """
        updated = 0
        for pair, source in self.pairs.items():
            if not self.backoff.is_ready(pair):
                logger.debug(f"{pair!r}: in backoff, skipping")
                continue
            if self.refresh_pair(pair, source):
                updated += 1
        return updated

    async def run(self, once: bool = False) -> None:
        """Run refresh passes until cancelled.

        Each pass runs in a worker thread, since source and host calls block.

        :param once: Run a single pass and return.
        """
        logger.info(
            f"Starting keeper for {len(self.pairs)} pairs, "
            f"refresh_period={self.refresh_period}s"
        )
        while True:
            updated = await asyncio.to_thread(self.refresh_all)
            logger.debug(f"Refresh pass done, {updated}/{len(self.pairs)} updated")
            if once:
                return
            await asyncio.sleep(self.refresh_period)
