"""Uniswap V3 periphery / core deployments."""
from dataclasses import dataclass

from ...chains.evm.erc20 import ERC20_ABI
from ...config import ChainId


@dataclass(frozen=True)
class UniswapDeployment:
    position_manager: str
    factory: str


_CANONICAL = UniswapDeployment(
    position_manager="0xC36442b4a4522E871399CD717aBDD847Ab11FE88",
    factory="0x1F98431c8aD98523631AE4a59f267346ea31F984",
)

UNISWAP_V3_ADDRESSES: dict[ChainId, UniswapDeployment] = {
    1: _CANONICAL,
    42161: _CANONICAL,
    10: _CANONICAL,
    8453: UniswapDeployment(
        position_manager="0x03a520b32C04BF3bEEf7BEb72E919cf822Ed34f1",
        factory="0x33128a8fC17869897dcE68Ed026d694621f6FDfD",
    ),
}

POSITION_MANAGER_ABI = [
    ERC20_ABI[0],
    {
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "index", "type": "uint256"},
        ],
        "name": "tokenOfOwnerByIndex",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "name": "positions",
        "outputs": [
            {"name": "nonce", "type": "uint96"},
            {"name": "operator", "type": "address"},
            {"name": "token0", "type": "address"},
            {"name": "token1", "type": "address"},
            {"name": "fee", "type": "uint24"},
            {"name": "tickLower", "type": "int24"},
            {"name": "tickUpper", "type": "int24"},
            {"name": "liquidity", "type": "uint128"},
            {"name": "feeGrowthInside0LastX128", "type": "uint256"},
            {"name": "feeGrowthInside1LastX128", "type": "uint256"},
            {"name": "tokensOwed0", "type": "uint128"},
            {"name": "tokensOwed1", "type": "uint128"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

FACTORY_ABI = [
    {
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
            {"name": "fee", "type": "uint24"},
        ],
        "name": "getPool",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    }
]

POOL_ABI = [
    {
        "inputs": [],
        "name": "slot0",
        "outputs": [
            {"name": "sqrtPriceX96", "type": "uint160"},
            {"name": "tick", "type": "int24"},
            {"name": "observationIndex", "type": "uint16"},
            {"name": "observationCardinality", "type": "uint16"},
            {"name": "observationCardinalityNext", "type": "uint16"},
            {"name": "feeProtocol", "type": "uint8"},
            {"name": "unlocked", "type": "bool"},
        ],
        "stateMutability": "view",
        "type": "function",
    }
]
