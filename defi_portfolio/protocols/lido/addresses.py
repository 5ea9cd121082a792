"""Lido stETH / wstETH deployments."""
from ...chains.evm.erc20 import ERC20_ABI
from ...config import ChainId

# stETH is only native to mainnet; L2s carry bridged wstETH.
STETH_ADDRESS = "0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84"

WSTETH_ADDRESSES: dict[ChainId, str] = {
    1: "0x7f39C581F595B53c5cb19bD0b3f8dA6c935E2Ca0",
    42161: "0x5979D7b546E38E414F7E9822514be443A4800529",
    10: "0x1F32b1c2345538c0c6f582fCB022739c4A194Ebb",
    8453: "0xc1CBa3fCea344f92D9239c08C0568f6F2F0ee452",
}

LIDO_ESTIMATED_APR = 0.034

WSTETH_ABI = ERC20_ABI + [
    {
        "inputs": [{"name": "_wstETHAmount", "type": "uint256"}],
        "name": "getStETHByWstETH",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    }
]
