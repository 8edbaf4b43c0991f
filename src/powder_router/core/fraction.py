"""
Fraction primitive: exact rational numbers for compositions and slippage.

- Stored as an integer numerator/denominator pair, *unreduced*, so that raw
  on-chain values (e.g. Q128 composition numerators) survive a round-trip.
- Equality and ordering are defined by cross-multiplication, never by the
  stored fields; `reduced()` gives the canonical form on request.
- Floats are rejected at input. Decimal is used only to parse literal strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from math import gcd
from typing import Optional, Tuple, Union

from .constants import DECIMAL_PRECISION
from .exc import InvalidFraction

# Debug printing control
DEBUG_FRACTION = False

def _dbg(msg: str) -> None:
    if DEBUG_FRACTION:
        print(msg)


def _require_int(name: str, v: object) -> int:
    # bool is an int subclass but never a meaningful numerator/denominator
    if isinstance(v, bool) or not isinstance(v, int):
        raise InvalidFraction(f"{name} must be int, got {type(v).__name__}")
    return v


@dataclass(frozen=True, eq=False)
class Fraction:
    """Exact rational `numerator / denominator` (denominator != 0)."""
    numerator: int
    denominator: int = 1

    def __post_init__(self):
        _require_int("numerator", self.numerator)
        _require_int("denominator", self.denominator)
        if self.denominator == 0:
            raise InvalidFraction("denominator must be non-zero")

    # ------------- normal forms -------------

    def _signed(self) -> Tuple[int, int]:
        """(n, d) with the sign carried by n and d > 0; no reduction."""
        if self.denominator < 0:
            return -self.numerator, -self.denominator
        return self.numerator, self.denominator

    def reduced(self) -> "Fraction":
        """Canonical form: gcd-reduced, positive denominator, zero as 0/1."""
        n, d = self._signed()
        if n == 0:
            return Fraction(0, 1)
        g = gcd(n, d)
        return Fraction(n // g, d // g)

    # ------------- predicates -------------

    def equal_to(self, n: int) -> bool:
        """True iff this fraction is exactly the integer `n`."""
        return self.numerator == _require_int("n", n) * self.denominator

    # ------------- comparisons (cross-multiplication) -------------

    def _cmp_core(self, other: "Fraction") -> int:
        a, b = self._signed()
        c, d = other._signed()
        lhs, rhs = a * d, c * b
        return (lhs > rhs) - (lhs < rhs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, bool):
            return NotImplemented
        if isinstance(other, int):
            return self.equal_to(other)
        if not isinstance(other, Fraction):
            return NotImplemented
        return self._cmp_core(other) == 0

    def __hash__(self) -> int:
        r = self.reduced()
        if r.denominator == 1:
            return hash(r.numerator)  # consistent with int equality
        return hash((r.numerator, r.denominator))

    def __lt__(self, other: "Fraction") -> bool:
        o = _comparable(other)
        return NotImplemented if o is None else self._cmp_core(o) < 0

    def __le__(self, other: "Fraction") -> bool:
        o = _comparable(other)
        return NotImplemented if o is None else self._cmp_core(o) <= 0

    def __gt__(self, other: "Fraction") -> bool:
        o = _comparable(other)
        return NotImplemented if o is None else self._cmp_core(o) > 0

    def __ge__(self, other: "Fraction") -> bool:
        o = _comparable(other)
        return NotImplemented if o is None else self._cmp_core(o) >= 0

    # ------------- arithmetic (exact, unreduced) -------------

    def __add__(self, other: Union["Fraction", int]) -> "Fraction":
        o = _coerce(other)
        if self.denominator == o.denominator:
            return Fraction(self.numerator + o.numerator, self.denominator)
        return Fraction(
            self.numerator * o.denominator + o.numerator * self.denominator,
            self.denominator * o.denominator,
        )

    __radd__ = __add__

    def __sub__(self, other: Union["Fraction", int]) -> "Fraction":
        o = _coerce(other)
        return self + Fraction(-o.numerator, o.denominator)

    def __rsub__(self, other: int) -> "Fraction":
        return _coerce(other) - self

    def __mul__(self, other: Union["Fraction", int]) -> "Fraction":
        o = _coerce(other)
        return Fraction(self.numerator * o.numerator, self.denominator * o.denominator)

    __rmul__ = __mul__

    # ------------- integer quotients -------------

    def quotient_floor(self) -> int:
        n, d = self._signed()
        return n // d

    def quotient_ceil(self) -> int:
        n, d = self._signed()
        return -(-n // d)

    # ------------- conversions -------------

    def to_decimal(self) -> Decimal:
        """Decimal approximation for logs/printing only."""
        n, d = self._signed()
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            return Decimal(n) / Decimal(d)

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"


def _coerce(v: Union[Fraction, int]) -> Fraction:
    if isinstance(v, Fraction):
        return v
    return Fraction(_require_int("operand", v), 1)


def _comparable(v: object) -> Optional[Fraction]:
    """Fraction view of an ordering operand; None for unsupported types."""
    if isinstance(v, Fraction):
        return v
    if isinstance(v, int) and not isinstance(v, bool):
        return Fraction(v, 1)
    return None


# ----------------------------
# Public constructors
# ----------------------------

def create_fraction(numerator: int, denominator: int = 1) -> Fraction:
    """Build a Fraction from an integer pair; zero denominator -> InvalidFraction."""
    return Fraction(numerator, denominator)


def fraction_from_string(s: str) -> Fraction:
    """Parse a literal decimal string ("0.02", "1.5", "-3", "2e-3") exactly.

    The result is stored over a power of ten and is not reduced.
    """
    if not isinstance(s, str):
        raise InvalidFraction(f"expected decimal string, got {type(s).__name__}")
    try:
        x = Decimal(s.strip())
    except InvalidOperation:
        raise InvalidFraction(f"not a decimal literal: {s!r}") from None
    if x.is_nan() or x.is_infinite():
        raise InvalidFraction(f"not a finite decimal: {s!r}")

    tup = x.as_tuple()
    digits = int("".join(str(d) for d in tup.digits)) if tup.digits else 0
    if tup.sign:
        digits = -digits
    exp = tup.exponent
    _dbg(f"fraction_from_string: digits={digits}, exp={exp}")
    if exp >= 0:
        return Fraction(digits * 10 ** exp, 1)
    return Fraction(digits, 10 ** (-exp))


def fraction_equal_to(f: Fraction, n: int) -> bool:
    """True iff `f` reduces to exactly the integer `n`."""
    return f.equal_to(n)


__all__ = [
    "Fraction",
    "create_fraction",
    "fraction_from_string",
    "fraction_equal_to",
]
