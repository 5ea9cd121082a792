"""Compound V3 (Comet) markets per chain."""
from dataclasses import dataclass

from ...config import ChainId


@dataclass(frozen=True)
class CometMarket:
    comet: str
    base_token: str
    base_symbol: str


COMPOUND_V3_MARKETS: dict[ChainId, tuple[CometMarket, ...]] = {
    1: (
        CometMarket(
            "0xc3d688B66703497DAA19211EEdff47f25384cdc3",
            "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            "USDC",
        ),
        CometMarket(
            "0xA17581A9E3356d9A858b789D68B4d866e593aE94",
            "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
            "WETH",
        ),
    ),
    42161: (
        CometMarket(
            "0xA5EDBDD9646f8dFF606d7448e414884C7d905dCA",
            "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
            "USDC",
        ),
    ),
    10: (
        CometMarket(
            "0x2e44e174f7D53F0212823acC11C01A11d58c5bCB",
            "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
            "USDC",
        ),
    ),
    8453: (
        CometMarket(
            "0xb125E6687d4313864e53df431d5425969c15Eb2F",
            "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            "USDC",
        ),
        CometMarket(
            "0x46e6b214b524310239732D51387075E0e70970bf",
            "0x4200000000000000000000000000000000000006",
            "WETH",
        ),
    ),
}


def _view(name: str, inputs: list[dict], outputs: list[dict]) -> dict:
    return {
        "inputs": inputs,
        "name": name,
        "outputs": outputs,
        "stateMutability": "view",
        "type": "function",
    }


COMET_ABI = [
    _view("balanceOf", [{"name": "account", "type": "address"}], [{"name": "", "type": "uint256"}]),
    _view(
        "borrowBalanceOf",
        [{"name": "account", "type": "address"}],
        [{"name": "", "type": "uint256"}],
    ),
    _view(
        "userBasic",
        [{"name": "account", "type": "address"}],
        [
            {"name": "principal", "type": "int104"},
            {"name": "baseTrackingIndex", "type": "uint64"},
            {"name": "baseTrackingAccrued", "type": "uint64"},
            {"name": "assetsIn", "type": "uint16"},
            {"name": "_reserved", "type": "uint8"},
        ],
    ),
    _view("getUtilization", [], [{"name": "", "type": "uint256"}]),
    _view(
        "getSupplyRate",
        [{"name": "utilization", "type": "uint256"}],
        [{"name": "", "type": "uint64"}],
    ),
    _view("numAssets", [], [{"name": "", "type": "uint8"}]),
    _view(
        "getAssetInfo",
        [{"name": "i", "type": "uint8"}],
        [
            {
                "components": [
                    {"name": "offset", "type": "uint8"},
                    {"name": "asset", "type": "address"},
                    {"name": "priceFeed", "type": "address"},
                    {"name": "scale", "type": "uint64"},
                    {"name": "borrowCollateralFactor", "type": "uint64"},
                    {"name": "liquidateCollateralFactor", "type": "uint64"},
                    {"name": "liquidationFactor", "type": "uint64"},
                    {"name": "supplyCap", "type": "uint128"},
                ],
                "name": "",
                "type": "tuple",
            }
        ],
    ),
    _view(
        "userCollateral",
        [{"name": "account", "type": "address"}, {"name": "asset", "type": "address"}],
        [{"name": "balance", "type": "uint128"}, {"name": "_reserved", "type": "uint128"}],
    ),
]
