"""Unit tests for PairBackoff."""

from unittest.mock import patch

from pricechain.src.PairBackoff import PairBackoff


class TestPairBackoffFailures:
    """Test failure recording and backoff growth."""

    def test_first_failure_backoff(self) -> None:
        backoff = PairBackoff(base_backoff_seconds=5.0)
        assert backoff.record_failure(b"ETH/USD", "source_unavailable") == 5.0

        status = backoff.get_status(b"ETH/USD")
        assert status.consecutive_failures == 1
        assert status.last_error == "source_unavailable"

    def test_exponential_backoff(self) -> None:
        """Backoff doubles with each consecutive failure."""
        backoff = PairBackoff(base_backoff_seconds=5.0)
        durations = [backoff.record_failure(b"ETH/USD") for _ in range(4)]
        assert durations == [5.0, 10.0, 20.0, 40.0]

    def test_max_backoff_cap(self) -> None:
        backoff = PairBackoff(base_backoff_seconds=100.0, max_backoff_seconds=150.0)
        assert backoff.record_failure(b"ETH/USD") == 100.0
        assert backoff.record_failure(b"ETH/USD") == 150.0
        assert backoff.record_failure(b"ETH/USD") == 150.0

    def test_pairs_are_independent(self) -> None:
        backoff = PairBackoff(base_backoff_seconds=60.0)
        backoff.record_failure(b"ETH/USD")

        assert not backoff.is_ready(b"ETH/USD")
        assert backoff.is_ready(b"BTC/USD")


class TestPairBackoffReadiness:
    """Test backoff windows over time."""

    @patch("pricechain.src.PairBackoff.time.time")
    def test_ready_after_backoff(self, mock_time) -> None:
        mock_time.return_value = 1000.0
        backoff = PairBackoff(base_backoff_seconds=10.0)
        backoff.record_failure(b"ETH/USD")
        # retry_at = 1010

        mock_time.return_value = 1005.0
        assert not backoff.is_ready(b"ETH/USD")

        mock_time.return_value = 1010.0  # Exactly at retry_at
        assert backoff.is_ready(b"ETH/USD")

    def test_success_clears_status(self) -> None:
        backoff = PairBackoff(base_backoff_seconds=60.0)
        backoff.record_failure(b"ETH/USD")
        backoff.record_failure(b"ETH/USD")

        backoff.record_success(b"ETH/USD")

        assert backoff.is_ready(b"ETH/USD")
        assert backoff.get_status(b"ETH/USD") is None
        assert backoff.record_failure(b"ETH/USD") == 60.0

    def test_unknown_pair_is_ready(self) -> None:
        assert PairBackoff().is_ready(b"SOL/USD")
        assert PairBackoff().get_status(b"SOL/USD") is None
