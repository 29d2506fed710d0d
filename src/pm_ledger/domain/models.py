"""Domain models for pm_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass


@dataclass
class TokenAccount:
    mint: str
    owner: str
    balance: int             # smallest unit of the mint, u64
