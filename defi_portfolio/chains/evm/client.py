"""EVM RPC client built on web3.py, with Multicall3 batching."""
from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from typing import Any, Sequence

import aiohttp
import certifi
from eth_utils.abi import collapse_if_tuple
from web3 import AsyncHTTPProvider, AsyncWeb3

from ...config import ChainConfig

logger = logging.getLogger(__name__)

MULTICALL3_ABI = [
    {
        "inputs": [
            {
                "components": [
                    {"name": "target", "type": "address"},
                    {"name": "allowFailure", "type": "bool"},
                    {"name": "callData", "type": "bytes"},
                ],
                "name": "calls",
                "type": "tuple[]",
            }
        ],
        "name": "aggregate3",
        "outputs": [
            {
                "components": [
                    {"name": "success", "type": "bool"},
                    {"name": "returnData", "type": "bytes"},
                ],
                "name": "returnData",
                "type": "tuple[]",
            }
        ],
        "stateMutability": "payable",
        "type": "function",
    }
]


@dataclass(frozen=True)
class ContractCall:
    """One read to batch through Multicall3."""

    address: str
    abi: list[dict[str, Any]]
    fn_name: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class CallResult:
    success: bool
    value: Any = None


def _function_abi(abi: list[dict[str, Any]], fn_name: str) -> dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == fn_name:
            return entry
    raise ValueError(f"Function {fn_name} not found in ABI")


def _output_types(fn_abi: dict[str, Any]) -> list[str]:
    return [collapse_if_tuple(output) for output in fn_abi.get("outputs", [])]


class EvmClient:
    """Contract reader bound to one EVM RPC endpoint."""

    def __init__(
        self,
        config: ChainConfig,
        rpc_url: str | None = None,
        w3: AsyncWeb3 | None = None,
    ) -> None:
        self.chain_id = config.chain_id
        self.url = rpc_url or config.primary_rpc
        self._multicall3 = config.multicall3
        if w3 is not None:
            self._w3 = w3
        else:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            self._w3 = AsyncWeb3(
                AsyncHTTPProvider(
                    self.url,
                    request_kwargs={
                        "timeout": aiohttp.ClientTimeout(total=config.rpc_timeout),
                        "ssl": ssl_context,
                    },
                )
            )

    @property
    def w3(self) -> AsyncWeb3:
        return self._w3

    def _contract(self, address: str, abi: list[dict[str, Any]]) -> Any:
        return self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address), abi=abi
        )

    @staticmethod
    def _prepare_args(args: Sequence[Any]) -> list[Any]:
        prepared: list[Any] = []
        for arg in args:
            if isinstance(arg, str) and len(arg) == 42 and AsyncWeb3.is_address(arg):
                arg = AsyncWeb3.to_checksum_address(arg)
            prepared.append(arg)
        return prepared

    async def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        return int(await self._w3.eth.get_balance(AsyncWeb3.to_checksum_address(address)))

    async def get_block_height(self) -> int:
        return int(await self._w3.eth.block_number)

    async def call(self, address: str, abi: list[dict[str, Any]], fn_name: str, *args: Any) -> Any:
        """Execute a single ``eth_call`` against a view function."""
        contract = self._contract(address, abi)
        fn = getattr(contract.functions, fn_name)
        return await fn(*self._prepare_args(args)).call()

    async def multicall(self, calls: Sequence[ContractCall]) -> list[CallResult]:
        """Batch view calls through Multicall3 ``aggregate3``.

        Individual call failures are reported per entry and never fail
        the batch; a failure of the aggregate call itself propagates.
        """
        if not calls:
            return []

        payload: list[tuple[str, bool, bytes]] = []
        output_types: list[list[str]] = []
        for call in calls:
            output_types.append(_output_types(_function_abi(call.abi, call.fn_name)))
            contract = self._contract(call.address, call.abi)
            encoded = contract.encode_abi(call.fn_name, args=self._prepare_args(call.args))
            payload.append((contract.address, True, bytes.fromhex(encoded[2:])))

        raw_results = await self._aggregate3(payload)

        results: list[CallResult] = []
        for call, types, (success, return_data) in zip(calls, output_types, raw_results):
            if not success or not return_data:
                results.append(CallResult(False))
                continue
            try:
                decoded = self._w3.codec.decode(types, return_data)
            except Exception as e:
                logger.debug("Could not decode %s at %s: %s", call.fn_name, call.address, e)
                results.append(CallResult(False))
                continue
            value = decoded[0] if len(decoded) == 1 else tuple(decoded)
            results.append(CallResult(True, value))
        return results

    async def _aggregate3(
        self, payload: list[tuple[str, bool, bytes]]
    ) -> list[tuple[bool, bytes]]:
        multicall = self._contract(self._multicall3, MULTICALL3_ABI)
        return await multicall.functions.aggregate3(payload).call()

    async def close(self) -> None:
        await self._w3.provider.disconnect()
