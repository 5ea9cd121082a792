"""Pure Uniswap V3 position math — no I/O."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

Q96 = 2**96


@dataclass(frozen=True)
class NftPosition:
    token_id: int
    token0: str
    token1: str
    fee: int
    tick_lower: int
    tick_upper: int
    liquidity: int
    tokens_owed0: int
    tokens_owed1: int

    @property
    def is_empty(self) -> bool:
        return self.liquidity == 0 and self.tokens_owed0 == 0 and self.tokens_owed1 == 0


def parse_position(token_id: int, data: Sequence[Any]) -> NftPosition:
    """Decode the ``positions(tokenId)`` return tuple."""
    return NftPosition(
        token_id=int(token_id),
        token0=str(data[2]),
        token1=str(data[3]),
        fee=int(data[4]),
        tick_lower=int(data[5]),
        tick_upper=int(data[6]),
        liquidity=int(data[7]),
        tokens_owed0=int(data[10]),
        tokens_owed1=int(data[11]),
    )


def tick_to_sqrt_price(tick: int) -> float:
    return math.pow(1.0001, tick / 2)


def principal_amounts(
    liquidity: int, sqrt_price_x96: int, tick_lower: int, tick_upper: int
) -> tuple[int, int]:
    """Estimate token0/token1 base-unit amounts backing ``liquidity`` at the current price."""
    if liquidity <= 0 or sqrt_price_x96 <= 0:
        return 0, 0

    sqrt_p = sqrt_price_x96 / Q96
    sqrt_a = tick_to_sqrt_price(tick_lower)
    sqrt_b = tick_to_sqrt_price(tick_upper)

    if sqrt_p <= sqrt_a:
        amount0 = liquidity * (sqrt_b - sqrt_a) / (sqrt_a * sqrt_b)
        amount1 = 0.0
    elif sqrt_p >= sqrt_b:
        amount0 = 0.0
        amount1 = liquidity * (sqrt_b - sqrt_a)
    else:
        amount0 = liquidity * (sqrt_b - sqrt_p) / (sqrt_p * sqrt_b)
        amount1 = liquidity * (sqrt_p - sqrt_a)
    return int(amount0), int(amount1)


def in_range(current_tick: int, tick_lower: int, tick_upper: int) -> bool:
    return tick_lower <= current_tick <= tick_upper
