"""
Formatting helpers (non-core arithmetic).

Core arithmetic uses integer/rational types. Decimal here is only for
formatting and convenience (e.g., tests, logs, display).
"""

from decimal import Decimal, localcontext
from typing import Any

from .constants import DECIMAL_PRECISION
from .exc import AmountDomainError
from .amounts import Amount
from .fraction import Fraction

# ---------------------------------------------------------------------------
# Decimal precision (formatting only)
# ---------------------------------------------------------------------------

#: Precision used by every Decimal view below, set through `localcontext`.
#: Wide enough for 18-decimal token amounts beyond 1e18 units.
DEFAULT_DECIMAL_PRECISION: int = DECIMAL_PRECISION


def fmt_dec(x: Decimal, places: int = 18) -> str:
    """Format a Decimal in scientific notation with fixed fractional digits.

    The output is stable for logs and tests, e.g.:
      Decimal('1')        -> '1.000000000000000000E+0'
      Decimal('1.5e18')   -> '1.500000000000000000E+18'
    """
    return format(x, f".{places}E")


def amount_to_decimal(a: Amount) -> Decimal:
    """Convert an Amount into whole token units for logging/printing only."""
    if not isinstance(a, Amount):
        raise AmountDomainError("amount_to_decimal(): expected Amount")
    return a.to_decimal()


def fraction_to_decimal(f: Fraction) -> Decimal:
    """Decimal view of a Fraction for logging/printing only."""
    if not isinstance(f, Fraction):
        raise AmountDomainError("fraction_to_decimal(): expected Fraction")
    return f.to_decimal()


def fmt_amount(a: Amount) -> str:
    """Human string: '1.5 TKN' (symbol falls back to the token address)."""
    label = a.token.symbol or a.token.address
    with localcontext() as ctx:
        ctx.prec = DEFAULT_DECIMAL_PRECISION
        return f"{amount_to_decimal(a).normalize():f} {label}"


def fmt_value(v: Any) -> str:
    """Best-effort display for bound values (Amount or raw int)."""
    if isinstance(v, Amount):
        return fmt_amount(v)
    return str(v)


__all__ = [
    "DEFAULT_DECIMAL_PRECISION",
    "fmt_dec",
    "amount_to_decimal",
    "fraction_to_decimal",
    "fmt_amount",
    "fmt_value",
]
