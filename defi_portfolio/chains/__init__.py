"""Chain clients and the chain registry."""
from .evm.client import CallResult, ContractCall, EvmClient
from .registry import ChainRegistry, UnknownChainError, default_client_factory
from .solana.client import SolanaClient

__all__ = [
    "CallResult",
    "ChainRegistry",
    "ContractCall",
    "EvmClient",
    "SolanaClient",
    "UnknownChainError",
    "default_client_factory",
]
