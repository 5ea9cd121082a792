"""Chain client protocol — blockchain RPC abstraction."""
from typing import Protocol


class ChainClient(Protocol):
    """Read-only client bound to a single RPC endpoint."""

    url: str

    async def get_balance(self, address: str) -> int: ...

    async def get_block_height(self) -> int: ...

    async def close(self) -> None: ...
