"""Integer arithmetic utilities for on-ledger amounts.

All amounts, reserves and balances are int in the smallest unit of their
token. No float, no Decimal. Stored counters are unsigned 64-bit; products
are formed at full precision (at most 128 bits for two u64 operands) and
narrowed back with an explicit overflow check, never wrapped or saturated.
"""

from src.pm_common.errors import ArithmeticOverflowError

CURRENCY_DECIMALS = 6         # USDC
OUTCOME_TOKEN_DECIMALS = 9    # YES / NO mints

U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1


def to_u64(value: int, what: str = "value") -> int:
    """Narrow an intermediate result into the stored u64 range."""
    if value < 0 or value > U64_MAX:
        raise ArithmeticOverflowError(f"{what}={value} does not fit in u64")
    return value


def checked_add(a: int, b: int, what: str = "sum") -> int:
    return to_u64(a + b, what)


def checked_sub(a: int, b: int, what: str = "difference") -> int:
    if b > a:
        raise ArithmeticOverflowError(f"{what}: {a} - {b} underflows")
    return a - b


def mul_div_floor(a: int, b: int, denominator: int, what: str = "quotient") -> int:
    """floor(a * b / denominator) with a u128 intermediate, narrowed to u64."""
    if denominator == 0:
        raise ArithmeticOverflowError(f"{what}: division by zero")
    product = a * b
    if product > U128_MAX:
        raise ArithmeticOverflowError(f"{what}: intermediate {product} exceeds u128")
    return to_u64(product // denominator, what)


def _fixed_to_display(amount: int, decimals: int) -> str:
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10**decimals)
    return f"{sign}{whole:,}.{frac:0{decimals}d}"


def currency_to_display(units: int) -> str:
    """1_500_000 -> '$1.500000', -2_000_000 -> '-$2.000000'."""
    text = _fixed_to_display(units, CURRENCY_DECIMALS)
    if text.startswith("-"):
        return "-$" + text[1:]
    return "$" + text


def tokens_to_display(units: int) -> str:
    """1_000_000_000 -> '1.000000000'."""
    return _fixed_to_display(units, OUTCOME_TOKEN_DECIMALS)
