from .client import CallResult, ContractCall, EvmClient
from .erc20 import ERC20_ABI

__all__ = ["CallResult", "ContractCall", "ERC20_ABI", "EvmClient"]
