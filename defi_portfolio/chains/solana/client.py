"""Solana JSON-RPC client."""
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import ChainConfig

logger = logging.getLogger(__name__)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


class SolanaClient:
    """Solana RPC client bound to a single endpoint.

    Endpoint failover is handled by the chain registry, which builds one
    client per URL.
    """

    def __init__(self, config: ChainConfig, rpc_url: str | None = None) -> None:
        self.url = rpc_url or config.primary_rpc
        self.timeout = config.rpc_timeout

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make a JSON-RPC call; raises RuntimeError on an RPC error payload."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.post(
                self.url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                result = await response.json()

        if "error" in result:
            raise RuntimeError(f"RPC Error: {result['error']}")
        return result.get("result")

    async def get_balance(self, address: str) -> int:
        """Native SOL balance in lamports."""
        result = await self.rpc_call("getBalance", [address])
        return int((result or {}).get("value", 0))

    async def get_token_accounts_by_owner(
        self, owner: str, program_id: str = TOKEN_PROGRAM_ID
    ) -> list[dict[str, Any]]:
        """SPL token accounts for ``owner`` in jsonParsed encoding."""
        result = await self.rpc_call(
            "getTokenAccountsByOwner",
            [owner, {"programId": program_id}, {"encoding": "jsonParsed"}],
        )
        return (result or {}).get("value", [])

    async def get_block_height(self) -> int:
        return int(await self.rpc_call("getSlot", []))

    async def close(self) -> None:
        # Sessions are per-call; nothing to release.
        return None


def aggregate_token_accounts(accounts: list[dict[str, Any]]) -> dict[str, tuple[int, int]]:
    """Sum jsonParsed token accounts per mint into ``{mint: (amount, decimals)}``.

    A wallet may hold several accounts for the same mint; empty accounts
    and entries that do not parse are skipped.
    """
    balances: dict[str, tuple[int, int]] = {}
    for account in accounts:
        try:
            info = account["account"]["data"]["parsed"]["info"]
            mint = info["mint"]
            amount = int(info["tokenAmount"]["amount"])
            decimals = int(info["tokenAmount"]["decimals"])
        except (KeyError, TypeError, ValueError):
            logger.debug("Skipping unparseable token account: %s", account.get("pubkey"))
            continue
        if amount == 0:
            continue
        previous = balances.get(mint, (0, decimals))[0]
        balances[mint] = (previous + amount, decimals)
    return balances
