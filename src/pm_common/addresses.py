"""Deterministic identifiers for markets, their mints and custody accounts.

A market's id is derived from its creator and name, the same way the
on-chain program derives the market account address from the seeds
("market_v2", authority, project_name). The same authority therefore cannot
open two markets under one name; a second create collides on the id.
"""

import hashlib

from src.pm_common.enums import Outcome

_MARKET_SEED = b"market_v2"
_MINT_SEED = b"mint"
_SEPARATOR = b"\x00"


def _digest(*parts: bytes) -> str:
    h = hashlib.sha256()
    for part in parts:
        h.update(part)
        h.update(_SEPARATOR)
    return h.hexdigest()[:40]


def derive_market_id(authority: str, project_name: str) -> str:
    return "mkt_" + _digest(_MARKET_SEED, authority.encode(), project_name.encode())


def derive_mint_id(market_id: str, outcome: Outcome) -> str:
    return f"{outcome.value.lower()}_" + _digest(
        _MINT_SEED, market_id.encode(), outcome.value.encode()
    )


def custody_owner(market_id: str) -> str:
    """Owner id of the pool's three custody token accounts."""
    return f"liquidity:{market_id}"
