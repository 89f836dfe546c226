"""ChainHasher: Folds each accepted update into a pair's running digest.

Encoding version 1 is frozen. Two independent implementations replaying the
same updates must produce identical digests, so the layout below must never
change; a new layout needs a new version byte.

Version 1 layout (Solidity ``abi.encodePacked``, big-endian, 91 bytes)::

    offset  size  type     field
    0       1     uint8    version (0x01)
    1       32    bytes32  previous chain hash
    33      32    int256   price (two's complement)
    65      8     uint64   timestamp (feed timestamp, or update time for TWAP)
    73      10    uint80   auxiliary (round id), or block height if absent
    83      8     uint64   block height

    chain_hash = keccak256(encoding)

Equivalent Solidity::

    keccak256(abi.encodePacked(uint8(1), prev, price, uint64(ts), uint80(aux), uint64(height)))
"""

from __future__ import annotations

from eth_abi.exceptions import EncodingError
from eth_abi.packed import encode_packed
from web3 import Web3

from .errors import InvalidPriceData

ENCODING_VERSION = 1
ENCODING_TYPES = ["uint8", "bytes32", "int256", "uint64", "uint80", "uint64"]
ENCODING_LENGTH = 91


def encode_update(
    prev_hash: bytes,
    price: int,
    timestamp: int,
    auxiliary: int | None,
    block_height: int,
) -> bytes:
    """Encode an update with the version 1 layout.

    :param prev_hash: Previous 32-byte chain hash.
    :param price: Derived price.
    :param timestamp: Feed timestamp or update time.
    :param auxiliary: Round id, or None to use the block height in its slot.
    :param block_height: Host block height.
    :returns: The 91-byte encoding.
    :raises InvalidPriceData: If a field does not fit its slot.
    """
    if len(prev_hash) != 32:
        raise InvalidPriceData(f"Previous hash must be 32 bytes, got {len(prev_hash)}")

    aux_slot = block_height if auxiliary is None else auxiliary
    try:
        return encode_packed(
            ENCODING_TYPES,
            [ENCODING_VERSION, bytes(prev_hash), price, timestamp, aux_slot, block_height],
        )
    except EncodingError as e:
        raise InvalidPriceData(f"Update does not fit the v{ENCODING_VERSION} encoding: {e}") from e


def next_hash(
    prev_hash: bytes,
    price: int,
    timestamp: int,
    auxiliary: int | None,
    block_height: int,
) -> bytes:
    """Compute the chain hash following ``prev_hash``.

    :returns: 32-byte keccak256 digest of :func:`encode_update`.
    :raises InvalidPriceData: If a field does not fit its slot.
    """
    return bytes(
        Web3.keccak(encode_update(prev_hash, price, timestamp, auxiliary, block_height))
    )
