"""Unit tests for CLI helpers."""

import pytest

from pricechain.main import parse_pairs, verify_log
from pricechain.src.AuditLog import AuditLog
from pricechain.src.ChainHasher import next_hash
from pricechain.src.PriceRecord import ZERO_HASH, PriceUpdated


class TestParsePairs:
    """Test PAIRS parsing."""

    def test_empty(self) -> None:
        assert parse_pairs(None) == {}
        assert parse_pairs("") == {}

    def test_multiple_pairs(self) -> None:
        pairs = parse_pairs("ETH/USD=0xabc, BTC/USD = 0xdef ,")
        assert pairs == {b"ETH/USD": "0xabc", b"BTC/USD": "0xdef"}

    def test_case_is_preserved(self) -> None:
        """Pair names are exact keys."""
        pairs = parse_pairs("eth/usd=0x1,ETH/USD=0x2")
        assert list(pairs) == [b"eth/usd", b"ETH/USD"]

    def test_missing_address(self) -> None:
        with pytest.raises(ValueError, match="Expected 'PAIR=0xADDRESS'"):
            parse_pairs("ETH/USD")

    def test_empty_pair_name(self) -> None:
        with pytest.raises(ValueError, match="Pair name is empty"):
            parse_pairs("=0xabc")


class TestVerifyLog:
    """Test offline verification."""

    def test_consistent_log(self, tmp_path) -> None:
        path = tmp_path / "audit.cbor"
        chain_hash = next_hash(ZERO_HASH, 2000, 100, 1, 7)
        AuditLog.append_to(path, PriceUpdated(b"ETH/USD", 2000, 1, 100, 7, chain_hash))

        assert verify_log(str(path)) == 0

    def test_tampered_log(self, tmp_path) -> None:
        path = tmp_path / "audit.cbor"
        chain_hash = next_hash(ZERO_HASH, 2000, 100, 1, 7)
        AuditLog.append_to(path, PriceUpdated(b"ETH/USD", 2001, 1, 100, 7, chain_hash))

        assert verify_log(str(path)) == 1
