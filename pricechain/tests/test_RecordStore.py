"""Unit tests for PriceRecord and RecordStore."""

import pytest

from pricechain.src.errors import InvalidIdentifier
from pricechain.src.PriceRecord import ZERO_HASH, PriceRecord, PriceUpdated, to_pair_key
from pricechain.src.RecordStore import RecordStore


class TestPairKey:
    """Test pair key conversion."""

    def test_bytes_kept_exactly(self) -> None:
        assert to_pair_key(b"ETH/USD") == b"ETH/USD"
        assert to_pair_key(bytearray(b"eth/usd ")) == b"eth/usd "

    def test_str_is_utf8_encoded_without_normalization(self) -> None:
        assert to_pair_key(" Eth/Usd") == b" Eth/Usd"

    def test_empty_rejected(self) -> None:
        with pytest.raises(InvalidIdentifier):
            to_pair_key(b"")
        with pytest.raises(InvalidIdentifier):
            to_pair_key("")

    def test_wrong_type_rejected(self) -> None:
        with pytest.raises(InvalidIdentifier, match="bytes or str"):
            to_pair_key(42)


class TestPriceRecord:
    """Test the record dataclass."""

    def test_empty_record(self) -> None:
        record = PriceRecord.empty()
        assert record.is_empty
        assert record.chain_hash == ZERO_HASH
        assert record.last_price == 0
        assert record.auxiliary is None

    def test_records_are_immutable(self) -> None:
        record = PriceRecord(last_update_time=5)
        with pytest.raises(AttributeError):
            record.last_price = 10

    def test_event_dict_round_trip(self) -> None:
        event = PriceUpdated(b"ETH/USD", -4, None, 10, 20, b"\x01" * 32)
        assert PriceUpdated.from_dict(event.to_dict()) == event


class TestRecordStore:
    """Test record storage."""

    def test_load_missing_returns_empty(self) -> None:
        store = RecordStore()
        assert store.load(b"ETH/USD") == PriceRecord.empty()
        assert store.get(b"ETH/USD") is None
        assert b"ETH/USD" not in store

    def test_commit_and_get(self) -> None:
        store = RecordStore()
        record = PriceRecord(chain_hash=b"\x02" * 32, last_update_time=100, last_price=7)
        store.commit(b"ETH/USD", record)

        assert store.get(b"ETH/USD") == record
        assert b"ETH/USD" in store
        assert len(store) == 1

    def test_commit_rejects_regression(self) -> None:
        """A record may not move a pair back in time."""
        store = RecordStore()
        store.commit(b"ETH/USD", PriceRecord(last_update_time=100))

        with pytest.raises(ValueError, match="regress"):
            store.commit(b"ETH/USD", PriceRecord(last_update_time=99))
        assert store.get(b"ETH/USD").last_update_time == 100

    def test_commit_rejects_empty_record(self) -> None:
        with pytest.raises(ValueError, match="empty record"):
            RecordStore().commit(b"ETH/USD", PriceRecord.empty())
