"""Pure decoding of Aave V3 style reads into positions — no I/O."""
from __future__ import annotations

from typing import Any, Sequence

from ...config import ChainId
from ...models import Position, ProtocolInfo, TokenBalance, YieldInfo
from ..base import RAY, WAD, sanitize_health_factor


def ray_to_rate(value: int) -> float:
    """Convert a ray-scaled (1e27) annual rate to a fraction."""
    return int(value) / RAY


def parse_health_factor(account_data: Sequence[Any] | None) -> float | None:
    """Health factor from ``getUserAccountData``; None without debt or on bad data."""
    if not account_data or len(account_data) < 6:
        return None
    return sanitize_health_factor(int(account_data[5]) / WAD)


def parse_user_reserve(
    protocol: ProtocolInfo,
    chain_id: ChainId,
    symbol: str,
    token_address: str,
    decimals: int,
    reserve_data: Sequence[Any],
    health_factor: float | None,
) -> list[Position]:
    """Build supply/collateral and borrow positions for one reserve.

    ``reserve_data`` is the ``getUserReserveData`` tuple: aToken balance at
    0, stable debt at 1, variable debt at 2, liquidity rate at 6 and the
    collateral flag at 8.
    """
    a_token_balance = int(reserve_data[0])
    stable_debt = int(reserve_data[1])
    variable_debt = int(reserve_data[2])
    liquidity_rate = int(reserve_data[6])
    used_as_collateral = bool(reserve_data[8])

    def token(amount: int) -> tuple[TokenBalance, ...]:
        return (TokenBalance(token_address, symbol, decimals, amount),)

    positions: list[Position] = []
    if a_token_balance > 0:
        rate = ray_to_rate(liquidity_rate)
        positions.append(
            Position(
                id=f"{protocol.id}-supply-{chain_id}-{token_address}",
                protocol=protocol,
                chain_id=chain_id,
                type="collateral" if used_as_collateral else "supply",
                tokens=token(a_token_balance),
                yield_info=YieldInfo(apy=rate, apr=rate),
                health_factor=health_factor,
            )
        )
    if variable_debt > 0:
        positions.append(
            Position(
                id=f"{protocol.id}-borrow-variable-{chain_id}-{token_address}",
                protocol=protocol,
                chain_id=chain_id,
                type="borrow",
                tokens=token(variable_debt),
                health_factor=health_factor,
                metadata={"rate_mode": "variable"},
            )
        )
    if stable_debt > 0:
        positions.append(
            Position(
                id=f"{protocol.id}-borrow-stable-{chain_id}-{token_address}",
                protocol=protocol,
                chain_id=chain_id,
                type="borrow",
                tokens=token(stable_debt),
                health_factor=health_factor,
                metadata={"rate_mode": "stable"},
            )
        )
    return positions
