"""Rocket Pool rETH deployments."""
from ...chains.evm.erc20 import ERC20_ABI
from ...config import ChainId

RETH_ADDRESSES: dict[ChainId, str] = {
    1: "0xae78736Cd615f374D3085123A210448E74Fc6393",
    42161: "0xEC70Dcb4A1EFa46b8F2D97C310C9c4790ba5ffA8",
    10: "0x9Bcef72be871e61ED4fBbc7630889beE758eb81D",
    8453: "0xB6fe221Fe9EeF5aBa221c348bA20A1Bf5e73624c",
}

ROCKET_POOL_ESTIMATED_APR = 0.032

RETH_ABI = ERC20_ABI + [
    {
        "inputs": [{"name": "_rethAmount", "type": "uint256"}],
        "name": "getEthValue",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    }
]
