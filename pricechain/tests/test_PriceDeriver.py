"""Unit tests for PriceDeriver."""

import pytest

from pricechain.src.errors import InvalidPriceData
from pricechain.src.PriceDeriver import (
    INT56_MAX,
    INT56_MIN,
    UINT80_MAX,
    derive_feed_price,
    derive_twap_price,
    trunc_div,
)


class TestTruncDiv:
    """Test truncating integer division."""

    def test_positive(self) -> None:
        assert trunc_div(7, 2) == 3

    def test_negative_numerator_truncates_toward_zero(self) -> None:
        """Negative quotients round toward zero, not down."""
        assert trunc_div(-7, 2) == -3
        assert -7 // 2 == -4

    def test_negative_denominator(self) -> None:
        assert trunc_div(7, -2) == -3
        assert trunc_div(-7, -2) == 3

    def test_exact(self) -> None:
        assert trunc_div(-8, 2) == -4

    def test_large_values_are_exact(self) -> None:
        """No float rounding on large operands."""
        assert trunc_div(-(2**200) - 1, 3) == -((2**200 + 1) // 3)

    def test_zero_denominator(self) -> None:
        with pytest.raises(ZeroDivisionError):
            trunc_div(1, 0)


class TestDeriveTwapPrice:
    """Test cumulative-tick derivation."""

    def test_one_day_average(self) -> None:
        """c0=0, c1=86400 over one day averages to tick 1."""
        observation = derive_twap_price([0, 86400], 86400)
        assert observation.price == 1
        assert observation.auxiliary is None
        assert observation.feed_timestamp is None

    def test_three(self) -> None:
        assert derive_twap_price([0, 86400 * 3], 86400).price == 3

    def test_negative_delta_truncates(self) -> None:
        """Falling cumulatives truncate toward zero."""
        assert derive_twap_price([100, 93], 2).price == -3

    def test_wrong_length(self) -> None:
        with pytest.raises(InvalidPriceData, match="Expected 2 tick cumulatives"):
            derive_twap_price([1, 2, 3], 10)
        with pytest.raises(InvalidPriceData):
            derive_twap_price([], 10)

    def test_out_of_int56_range(self) -> None:
        """Cumulatives must fit int56."""
        derive_twap_price([INT56_MIN, INT56_MAX], 2**56)
        with pytest.raises(InvalidPriceData, match="int56"):
            derive_twap_price([0, INT56_MAX + 1], 10)
        with pytest.raises(InvalidPriceData, match="int56"):
            derive_twap_price([INT56_MIN - 1, 0], 10)

    def test_non_integer(self) -> None:
        with pytest.raises(InvalidPriceData):
            derive_twap_price([0, 1.5], 10)

    def test_non_positive_period(self) -> None:
        with pytest.raises(InvalidPriceData, match="period"):
            derive_twap_price([0, 10], 0)


class TestDeriveFeedPrice:
    """Test round feed derivation."""

    def test_valid_round(self) -> None:
        """answer is the price, roundId the auxiliary, updatedAt the feed time."""
        observation = derive_feed_price((1, 2000, 1_699_999_000, 1_699_999_900, 1))
        assert observation.price == 2000
        assert observation.auxiliary == 1
        assert observation.feed_timestamp == 1_699_999_900

    def test_zero_answer(self) -> None:
        with pytest.raises(InvalidPriceData, match="Non-positive"):
            derive_feed_price((1, 0, 0, 0, 1))

    def test_negative_answer(self) -> None:
        with pytest.raises(InvalidPriceData, match="Non-positive"):
            derive_feed_price((1, -5, 0, 0, 1))

    def test_round_id_range(self) -> None:
        derive_feed_price((UINT80_MAX, 1, 0, 0, 0))
        with pytest.raises(InvalidPriceData, match="uint80"):
            derive_feed_price((UINT80_MAX + 1, 1, 0, 0, 0))

    def test_wrong_length(self) -> None:
        with pytest.raises(InvalidPriceData, match="Expected 5"):
            derive_feed_price((1, 2000, 0, 0))
