"""Unit tests for JSON conversion of model objects."""
from __future__ import annotations

import json

from defi_portfolio.models import (
    ChainPortfolio,
    Portfolio,
    Position,
    TokenBalance,
)
from defi_portfolio.serialize import MAX_SAFE_INTEGER, to_jsonable


class TestToJsonable:
    def test_token_balance_amount_is_string(self) -> None:
        out = to_jsonable(TokenBalance("0xa", "USDC", 6, 1_500_000, 1.0))
        assert out["balance"] == "1500000"
        assert out["balance_formatted"] == "1.5"
        assert out["value_usd"] == 1.5

    def test_big_ints_become_strings(self) -> None:
        assert to_jsonable(MAX_SAFE_INTEGER) == MAX_SAFE_INTEGER
        assert to_jsonable(MAX_SAFE_INTEGER + 1) == str(MAX_SAFE_INTEGER + 1)

    def test_position_includes_value_and_metadata(self, usdc_supply_position: Position) -> None:
        out = to_jsonable(usdc_supply_position)
        assert out["value_usd"] == 10_000.0
        assert out["protocol"]["id"] == "aave-v3"
        assert out["yield_info"] == {"apy": 0.03, "apr": 0.03}
        assert isinstance(out["tokens"], list)

    def test_mapping_keys_stringified(self, usdc_supply_position: Position) -> None:
        portfolio = Portfolio(
            address="0xw",
            positions=(usdc_supply_position,),
            by_chain={1: ChainPortfolio(1, "Ethereum", (usdc_supply_position,))},
        )
        out = to_jsonable(portfolio)
        assert list(out["by_chain"]) == ["1"]
        assert out["by_chain"]["1"]["total_value_usd"] == 10_000.0
        assert out["wallet"] is None

    def test_result_is_json_serializable(self, usdc_supply_position: Position) -> None:
        json.dumps(to_jsonable(Portfolio(address="0xw", positions=(usdc_supply_position,))))
