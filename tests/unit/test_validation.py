"""Unit tests for address and chain selector validation."""
from __future__ import annotations

import pytest

from defi_portfolio.validation import (
    ValidationError,
    address_family,
    normalize_address,
    parse_chain_ids,
)

EVM_WALLET = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
SOLANA_WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


class TestAddressFamily:
    def test_evm(self) -> None:
        assert address_family(EVM_WALLET) == "evm"

    def test_solana(self) -> None:
        assert address_family(SOLANA_WALLET) == "solana"

    @pytest.mark.parametrize(
        "address",
        ["", "0x1234", "0xZZZd35cc6634c0532925a3b844bc454e4438f44e", "not an address", "0OIl"],
    )
    def test_invalid(self, address: str) -> None:
        with pytest.raises(ValidationError):
            address_family(address)

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            address_family("nope")


class TestNormalizeAddress:
    def test_evm_checksummed(self) -> None:
        assert normalize_address(EVM_WALLET) == "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"

    def test_solana_unchanged(self) -> None:
        assert normalize_address(SOLANA_WALLET) == SOLANA_WALLET


class TestParseChainIds:
    def test_none_means_all(self) -> None:
        assert parse_chain_ids(None) is None

    def test_comma_string(self) -> None:
        assert parse_chain_ids("1, 8453,Solana") == (1, 8453, "solana")

    def test_iterable_of_ints(self) -> None:
        assert parse_chain_ids([1, 10]) == (1, 10)

    def test_duplicates_removed(self) -> None:
        assert parse_chain_ids("1,1,10") == (1, 10)

    def test_empty_raises(self) -> None:
        with pytest.raises(ValidationError, match="empty"):
            parse_chain_ids(" , ")

    def test_garbage_raises(self) -> None:
        with pytest.raises(ValidationError, match="Invalid chain selector"):
            parse_chain_ids("1;drop")
