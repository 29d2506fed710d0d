"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum

from src.pm_common.errors import CorruptedStateError


class Outcome(str, Enum):
    YES = "YES"
    NO = "NO"

    def opposite(self) -> "Outcome":
        return Outcome.NO if self is Outcome.YES else Outcome.YES

    @classmethod
    def parse(cls, value: object) -> "Outcome":
        """Strict decode of a stored outcome. Anything but YES/NO is corruption."""
        if isinstance(value, Outcome):
            return value
        try:
            return cls(value)
        except ValueError:
            raise CorruptedStateError(f"unknown outcome value {value!r}") from None


class TradeDirection(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class MarketStatus(str, Enum):
    """Open → Settled, one way. Derived from Market.is_settled."""
    OPEN = "OPEN"
    SETTLED = "SETTLED"


class LedgerEntryType(str, Enum):
    MINT = "MINT"
    BURN = "BURN"
    TRANSFER_OUT = "TRANSFER_OUT"
    TRANSFER_IN = "TRANSFER_IN"
