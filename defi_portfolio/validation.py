"""Input validation for addresses and chain selectors."""
from __future__ import annotations

import re
from typing import Iterable

from web3 import Web3

from .config import ChainId

_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


class ValidationError(ValueError):
    """Malformed client input; raised before any remote call is made."""


def address_family(address: str) -> str:
    """Return ``"evm"`` or ``"solana"`` for a syntactically valid address."""
    if not isinstance(address, str) or not address:
        raise ValidationError("Address must be a non-empty string")
    if address.startswith("0x"):
        if not Web3.is_address(address):
            raise ValidationError(f"Invalid EVM address: {address}")
        return "evm"
    if _BASE58_RE.match(address):
        return "solana"
    raise ValidationError(f"Unrecognised address format: {address}")


def normalize_address(address: str) -> str:
    """Checksum EVM addresses; base58 accounts are returned unchanged."""
    if address_family(address) == "evm":
        return Web3.to_checksum_address(address)
    return address


def parse_chain_ids(raw: str | Iterable[ChainId] | None) -> tuple[ChainId, ...] | None:
    """Parse ``"1,8453,solana"`` (or an iterable) into a chain id tuple.

    ``None`` means "all supported chains".
    """
    if raw is None:
        return None
    items = raw.split(",") if isinstance(raw, str) else list(raw)

    chain_ids: list[ChainId] = []
    for item in items:
        if isinstance(item, int) and not isinstance(item, bool):
            chain_id: ChainId = item
        else:
            text = str(item).strip().lower()
            if not text:
                continue
            if text.isdigit():
                chain_id = int(text)
            elif re.fullmatch(r"[a-z][a-z0-9-]*", text):
                chain_id = text
            else:
                raise ValidationError(f"Invalid chain selector: {item!r}")
        if chain_id not in chain_ids:
            chain_ids.append(chain_id)

    if not chain_ids:
        raise ValidationError("Chain selector is empty")
    return tuple(chain_ids)
