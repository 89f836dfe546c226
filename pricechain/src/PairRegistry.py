"""PairRegistry: First-write-wins binding of pairs to source addresses.

The first caller for a pair nominates its source. Every later caller either
omits the source (zero address or None) or re-asserts the same address.

.. code-block:: python

    >>> registry = PairRegistry()
    >>> registry.resolve_or_bind(b"ETH/USD", "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419")
    '0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419'
    >>> registry.resolve_or_bind(b"ETH/USD", None)
    '0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419'
"""

from __future__ import annotations

import logging

from web3 import Web3

from .errors import InvalidIdentifier, MissingSourceAddress, SourceMismatch

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def normalize_address(address: str | None) -> str:
    """Return the checksum form of an address, or ZERO_ADDRESS when omitted.

    :param address: Hex address, ``None`` or empty string.
    :returns: Checksum address.
    :raises InvalidIdentifier: If the address is malformed.
    """
    if not address:
        return ZERO_ADDRESS
    if not Web3.is_address(address):
        raise InvalidIdentifier(f"Invalid source address: {address!r}")
    return Web3.to_checksum_address(address)


class PairRegistry:
    """Registry of pair to source address bindings.

    Bindings are never removed or changed once created.
    """

    def __init__(self) -> None:
        self._bindings: dict[bytes, str] = {}

    def resolve(self, pair: bytes, candidate: str | None) -> str:
        """Resolve the source of a pair without creating a binding.

        :param pair: Pair key.
        :param candidate: Source hint, zero address or None to omit.
        :returns: The bound address, or the candidate for an unbound pair.
        :raises MissingSourceAddress: If the pair is unbound and no hint given.
        :raises SourceMismatch: If a non-zero hint differs from the binding.
        """
        candidate = normalize_address(candidate)
        bound = self._bindings.get(pair)

        if bound is None:
            if candidate == ZERO_ADDRESS:
                raise MissingSourceAddress(f"No source address given for new pair {pair!r}")
            return candidate

        if candidate != ZERO_ADDRESS and candidate != bound:
            raise SourceMismatch(pair, bound, candidate)
        return bound

    def bind(self, pair: bytes, address: str) -> None:
        """Bind a pair to a source. Re-binding the same address is a no-op.

        :raises MissingSourceAddress: If the address is zero.
        :raises SourceMismatch: If the pair is bound to another address.
        """
        address = self.resolve(pair, address)
        if pair not in self._bindings:
            self._bindings[pair] = address
            logger.info(f"Bound {pair!r} to source {address}")

    def resolve_or_bind(self, pair: bytes, candidate: str | None) -> str:
        """Resolve the source of a pair, binding it on first use.

        Public single-step form for callers that manage bindings on their
        own. :class:`PriceChain` uses ``resolve`` and ``bind`` separately so
        that the binding is written only when the first record commits.

        :param pair: Pair key.
        :param candidate: Source hint, zero address or None to omit.
        :returns: The bound address.
        :raises MissingSourceAddress: If the pair is unbound and no hint given.
        :raises SourceMismatch: If a non-zero hint differs from the binding.
        """
        address = self.resolve(pair, candidate)
        self.bind(pair, address)
        return address

    def source_of(self, pair: bytes) -> str | None:
        """Get the bound source address of a pair, or None if unbound."""
        return self._bindings.get(pair)

    def is_bound(self, pair: bytes) -> bool:
        return pair in self._bindings

    def pairs(self) -> list[bytes]:
        """Get all bound pair keys in binding order."""
        return list(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)
