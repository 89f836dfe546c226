"""HostEnvironment: Timestamp and block height consumed by the price chain.

The price chain never reads a clock itself. A host environment supplies, for
each update, the current timestamp and a monotonically increasing height:

- SystemHost: local wall clock and a local sequence counter.
- Web3Host: timestamp and number of the latest block of a web3 chain.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from web3.exceptions import Web3Exception

from .errors import HostUnavailable

if TYPE_CHECKING:
    from web3 import Web3

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostSnapshot:
    """Timestamp and height observed together.

    :ivar timestamp: Host timestamp in seconds.
    :ivar block_height: Host block (or sequence) height.
    """

    timestamp: int
    block_height: int


class HostEnvironment(ABC):
    """Abstract base class for host environments."""

    @abstractmethod
    def snapshot(self) -> HostSnapshot:
        """Read the current timestamp and block height.

        :returns: HostSnapshot taken atomically.
        """
        pass


class SystemHost(HostEnvironment):
    """Host backed by the local clock.

    The height is a local sequence number incremented on every snapshot.

    :ivar height: Last sequence number handed out.
    """

    def __init__(self, start_height: int = 0) -> None:
        self.height = start_height
        self._lock = threading.Lock()

    def snapshot(self) -> HostSnapshot:
        with self._lock:
            self.height += 1
            return HostSnapshot(timestamp=int(time.time()), block_height=self.height)


class Web3Host(HostEnvironment):
    """Host backed by the latest block of a web3 chain.

    :ivar w3: Web3 instance.
    """

    def __init__(self, w3: Web3) -> None:
        self.w3 = w3

    def snapshot(self) -> HostSnapshot:
        """Read the latest block.

        :raises HostUnavailable: If the RPC call fails.
        """
        try:
            block = self.w3.eth.get_block("latest")
        except (Web3Exception, OSError) as e:
            raise HostUnavailable(f"Failed to read latest block: {e}") from e
        logger.debug(f"Latest block {block['number']} at {block['timestamp']}")
        return HostSnapshot(
            timestamp=int(block["timestamp"]), block_height=int(block["number"])
        )
