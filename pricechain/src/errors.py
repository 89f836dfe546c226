"""Error kinds raised by the price chain.

Every failure of an ``update`` or ``get`` call raises a subclass of
:class:`PriceChainError`. Each subclass carries a stable ``kind`` string so
callers (keepers, CLIs, RPC wrappers) can branch on the cause without
matching on messages.

.. code-block:: python

    try:
        chain.update(b"ETH/USD")
    except UpdateTooSoon as e:
        retry_at = e.next_allowed
    except PriceChainError as e:
        logger.warning(f"update failed ({e.kind}): {e}")
"""

from __future__ import annotations


class PriceChainError(Exception):
    """Base exception for price chain errors.

    :cvar kind: Machine-readable error identifier.
    """

    kind = "price_chain_error"


class InvalidIdentifier(PriceChainError):
    """Raised for an empty pair key or a malformed source address."""

    kind = "invalid_identifier"


class MissingSourceAddress(PriceChainError):
    """Raised when an unbound pair is updated without a source address."""

    kind = "missing_source_address"


class SourceMismatch(PriceChainError):
    """Raised when a non-zero source hint differs from the bound source.

    :ivar bound: Address the pair is bound to.
    :ivar candidate: Address supplied by the caller.
    """

    kind = "source_mismatch"

    def __init__(self, pair: bytes, bound: str, candidate: str):
        self.bound = bound
        self.candidate = candidate
        super().__init__(
            f"{pair!r} is bound to {bound}, refusing source {candidate}"
        )


class UpdateTooSoon(PriceChainError):
    """Raised when the update gate is still closed for a pair.

    :ivar next_allowed: Earliest host timestamp at which an update passes.
    """

    kind = "update_too_soon"

    def __init__(self, pair: bytes, now: int, next_allowed: int):
        self.now = now
        self.next_allowed = next_allowed
        super().__init__(
            f"{pair!r} updated too soon: now={now}, next allowed at {next_allowed}"
        )


class UntrackedPair(PriceChainError):
    """Raised when reading a pair that has no source binding."""

    kind = "untracked_pair"


class InvalidPriceData(PriceChainError):
    """Raised when the source reports an unusable observation."""

    kind = "invalid_price_data"


class SourceUnavailable(PriceChainError):
    """Raised when querying the bound source fails outright."""

    kind = "source_unavailable"


class ReentrantUpdate(PriceChainError):
    """Raised when an update for a pair starts while another is in flight."""

    kind = "reentrant_update"


class HostUnavailable(PriceChainError):
    """Raised when the host cannot supply a usable timestamp and height."""

    kind = "host_unavailable"


class AuditWriteFailed(PriceChainError):
    """Raised when a listener fails to accept an event; nothing is committed."""

    kind = "audit_write_failed"
