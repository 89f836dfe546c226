"""Unit tests for price sources and the source factory."""

from unittest.mock import MagicMock

import pytest
from web3 import Web3
from web3.exceptions import ContractLogicError

from pricechain.src.ContractUtility import ContractUtility
from pricechain.src.errors import InvalidPriceData, SourceUnavailable
from pricechain.src.sources import (
    PriceSource,
    RoundFeedSource,
    TwapSource,
    Web3SourceFactory,
    get_available_sources,
    get_source_class,
    register_source,
)

ADDR = Web3.to_checksum_address("0x" + "55" * 20)


class TestSourceRegistry:
    """Test source registration."""

    def test_available_sources(self) -> None:
        assert get_available_sources() == ["feed", "twap"]

    def test_get_source_class(self) -> None:
        assert get_source_class("twap") is TwapSource
        assert get_source_class("feed") is RoundFeedSource

    def test_unknown_source(self) -> None:
        with pytest.raises(ValueError, match="Unknown source 'pyth'"):
            get_source_class("pyth")

    def test_register_requires_name(self) -> None:
        class Nameless(PriceSource):
            def fetch(self, window):
                return None

        with pytest.raises(ValueError, match="must define a 'name'"):
            register_source(Nameless)


class TestTwapSource:
    """Test the cumulative-tick source."""

    def test_fetch(self) -> None:
        contract = MagicMock()
        contract.functions.observe.return_value.call.return_value = ([0, 3600 * 5], [0, 0])

        observation = TwapSource(contract).fetch(3600)

        contract.functions.observe.assert_called_once_with([3600, 0])
        assert observation.price == 5
        assert observation.auxiliary is None

    def test_malformed_result(self) -> None:
        contract = MagicMock()
        contract.functions.observe.return_value.call.return_value = 12
        with pytest.raises(InvalidPriceData, match="Malformed"):
            TwapSource(contract).fetch(3600)

    def test_call_failure(self) -> None:
        """Contract reverts surface as SourceUnavailable."""
        contract = MagicMock()
        contract.address = ADDR
        contract.functions.observe.return_value.call.side_effect = ContractLogicError("OLD")
        with pytest.raises(SourceUnavailable, match="twap"):
            TwapSource(contract).fetch(3600)

    def test_transport_failure(self) -> None:
        contract = MagicMock()
        contract.functions.observe.return_value.call.side_effect = ConnectionError("refused")
        with pytest.raises(SourceUnavailable):
            TwapSource(contract).fetch(3600)


class TestRoundFeedSource:
    """Test the round feed source."""

    def test_fetch(self) -> None:
        contract = MagicMock()
        contract.functions.latestRoundData.return_value.call.return_value = [
            18446744073709552000, 250000000000, 1700000000, 1700000012, 18446744073709552000
        ]

        observation = RoundFeedSource(contract).fetch(86400)

        assert observation.price == 250000000000
        assert observation.auxiliary == 18446744073709552000
        assert observation.feed_timestamp == 1700000012

    def test_non_positive_answer(self) -> None:
        contract = MagicMock()
        contract.functions.latestRoundData.return_value.call.return_value = (1, 0, 0, 0, 1)
        with pytest.raises(InvalidPriceData):
            RoundFeedSource(contract).fetch(86400)

    def test_malformed_result(self) -> None:
        contract = MagicMock()
        contract.functions.latestRoundData.return_value.call.return_value = None
        with pytest.raises(InvalidPriceData, match="Malformed"):
            RoundFeedSource(contract).fetch(86400)


class TestContractUtilityAbi:
    """Test bundled ABI loading."""

    def test_load_bundled_abis(self) -> None:
        feed_abi = ContractUtility.get_abi("AggregatorV3Interface")
        pool_abi = ContractUtility.get_abi("IUniswapV3PoolOracle")

        assert "latestRoundData" in [item["name"] for item in feed_abi]
        assert [item["name"] for item in pool_abi] == ["observe"]

    def test_unknown_abi(self) -> None:
        with pytest.raises(FileNotFoundError):
            ContractUtility.get_abi("Missing")


class TestWeb3SourceFactory:
    """Test address to source mapping."""

    def test_creates_and_caches(self) -> None:
        w3 = MagicMock()
        factory = Web3SourceFactory(w3, "feed")

        first = factory(ADDR)
        second = factory(ADDR)

        assert isinstance(first, RoundFeedSource)
        assert first is second
        w3.eth.contract.assert_called_once_with(
            address=ADDR, abi=ContractUtility.get_abi("AggregatorV3Interface")
        )

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError, match="Unknown source"):
            Web3SourceFactory(MagicMock(), "median")
