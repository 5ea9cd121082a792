"""Aave V3 deployments per chain."""
from dataclasses import dataclass

from ...config import ChainId


@dataclass(frozen=True)
class AaveDeployment:
    pool: str
    data_provider: str


AAVE_V3_ADDRESSES: dict[ChainId, AaveDeployment] = {
    1: AaveDeployment(
        pool="0x87870Bca3F3fD6335C3F4ce8392D69350B4fA4E2",
        data_provider="0x7B4EB56E7CD4b454BA8ff71E4518426369a138a3",
    ),
    42161: AaveDeployment(
        pool="0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        data_provider="0x69FA688f1Dc47d4B5d8029D5a35FB7a548310654",
    ),
    10: AaveDeployment(
        pool="0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        data_provider="0x69FA688f1Dc47d4B5d8029D5a35FB7a548310654",
    ),
    8453: AaveDeployment(
        pool="0xA238Dd80C259a72e81d7e4664a9801593F98d1c5",
        data_provider="0x2d8A3C5677189723C4cB8873CfC9C8976FDF38Ac",
    ),
}

POOL_ABI = [
    {
        "inputs": [{"name": "user", "type": "address"}],
        "name": "getUserAccountData",
        "outputs": [
            {"name": "totalCollateralBase", "type": "uint256"},
            {"name": "totalDebtBase", "type": "uint256"},
            {"name": "availableBorrowsBase", "type": "uint256"},
            {"name": "currentLiquidationThreshold", "type": "uint256"},
            {"name": "ltv", "type": "uint256"},
            {"name": "healthFactor", "type": "uint256"},
        ],
        "stateMutability": "view",
        "type": "function",
    }
]

DATA_PROVIDER_ABI = [
    {
        "inputs": [],
        "name": "getAllReservesTokens",
        "outputs": [
            {
                "components": [
                    {"name": "symbol", "type": "string"},
                    {"name": "tokenAddress", "type": "address"},
                ],
                "name": "",
                "type": "tuple[]",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "asset", "type": "address"},
            {"name": "user", "type": "address"},
        ],
        "name": "getUserReserveData",
        "outputs": [
            {"name": "currentATokenBalance", "type": "uint256"},
            {"name": "currentStableDebt", "type": "uint256"},
            {"name": "currentVariableDebt", "type": "uint256"},
            {"name": "principalStableDebt", "type": "uint256"},
            {"name": "scaledVariableDebt", "type": "uint256"},
            {"name": "stableBorrowRate", "type": "uint256"},
            {"name": "liquidityRate", "type": "uint256"},
            {"name": "stableRateLastUpdated", "type": "uint40"},
            {"name": "usageAsCollateralEnabled", "type": "bool"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "asset", "type": "address"}],
        "name": "getReserveData",
        "outputs": [
            {"name": "unbacked", "type": "uint256"},
            {"name": "accruedToTreasuryScaled", "type": "uint256"},
            {"name": "totalAToken", "type": "uint256"},
            {"name": "totalStableDebt", "type": "uint256"},
            {"name": "totalVariableDebt", "type": "uint256"},
            {"name": "liquidityRate", "type": "uint256"},
            {"name": "variableBorrowRate", "type": "uint256"},
            {"name": "stableBorrowRate", "type": "uint256"},
            {"name": "averageStableBorrowRate", "type": "uint256"},
            {"name": "liquidityIndex", "type": "uint256"},
            {"name": "variableBorrowIndex", "type": "uint256"},
            {"name": "lastUpdateTimestamp", "type": "uint40"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]
