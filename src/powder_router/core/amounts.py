"""
Amount primitives: Token descriptors and token-tagged integer amounts.

- Amount carries a raw integer at the token's native precision; Decimal only
  appears at the string/display boundary and never silently truncates.
- Non-negative domain: all amounts are >= 0; negative values are rejected at input.
- Amounts of different tokens never compare or combine.
- Slippage bounds (`bounded_by`) round conservatively: SUPPLY rounds up,
  RECEIVE rounds down.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import TypeVar, Union

from eth_utils import is_address, to_checksum_address

from .constants import DECIMAL_PRECISION
from .exc import AmountDomainError, InvalidFraction
from .fraction import Fraction

# Debug printing control
DEBUG_AMOUNTS = False

def _dbg(msg: str) -> None:
    if DEBUG_AMOUNTS:
        print(msg)


# ----------------------------
# Integer rounding helpers (centralised)
# ----------------------------

def _ceil_div(a: int, b: int) -> int:
    if a < 0 or b <= 0:
        raise AmountDomainError("_ceil_div expects a>=0 and b>0")
    return 0 if a == 0 else -(-a // b)


def _floor_div(a: int, b: int) -> int:
    if a < 0 or b <= 0:
        raise AmountDomainError("_floor_div expects a>=0 and b>0")
    return a // b


def _require_raw(v: object) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise AmountDomainError(f"raw amount must be int, got {type(v).__name__}")
    if v < 0:
        raise AmountDomainError(f"raw amount must be >= 0, got {v}")
    return v


# ----------------------------
# Token descriptor
# ----------------------------

@dataclass(frozen=True)
class Token:
    """ERC20 descriptor. Identity is (address, chain_id); address is checksummed."""
    address: str
    decimals: int = 18
    symbol: str = field(default="", compare=False)
    name: str = field(default="", compare=False)
    chain_id: int = 1

    def __post_init__(self):
        if not isinstance(self.address, str) or not is_address(self.address):
            raise AmountDomainError(f"invalid token address: {self.address!r}")
        object.__setattr__(self, "address", to_checksum_address(self.address))
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise AmountDomainError("token decimals must be int")
        if not 0 <= self.decimals <= 77:
            raise AmountDomainError(f"token decimals out of range: {self.decimals}")

    def sort_key(self) -> str:
        """Canonical ordering key (lowercase address)."""
        return self.address.lower()

    def sorts_before(self, other: "Token") -> bool:
        return self.sort_key() < other.sort_key()


# ----------------------------
# Amount (token-tagged integer)
# ----------------------------

@dataclass(frozen=True)
class Amount:
    """Token amount at native precision: `raw / 10**token.decimals` units."""
    token: Token
    raw: int

    def __post_init__(self):
        _require_raw(self.raw)

    # ------------- conversions -------------

    def to_decimal(self) -> Decimal:
        """Decimal value in whole token units, for logs/printing only."""
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            return Decimal(self.raw).scaleb(-self.token.decimals)

    # ------------- comparisons (same token only) -------------

    def _check_same(self, other: object) -> "Amount":
        if not isinstance(other, Amount):
            raise AmountDomainError("Amount arithmetic requires Amount operands")
        if other.token != self.token:
            raise AmountDomainError(
                f"token mismatch: {self.token.address} vs {other.token.address}"
            )
        return other

    def __lt__(self, other: "Amount") -> bool:
        return self.raw < self._check_same(other).raw

    def __le__(self, other: "Amount") -> bool:
        return self.raw <= self._check_same(other).raw

    def __gt__(self, other: "Amount") -> bool:
        return self.raw > self._check_same(other).raw

    def __ge__(self, other: "Amount") -> bool:
        return self.raw >= self._check_same(other).raw

    # ------------- arithmetic (integer domain) -------------

    def __add__(self, other: "Amount") -> "Amount":
        o = self._check_same(other)
        return Amount(self.token, self.raw + o.raw)

    def __sub__(self, other: "Amount") -> "Amount":
        o = self._check_same(other)
        if self.raw < o.raw:
            raise AmountDomainError("subtraction underflow would produce negative amount")
        return Amount(self.token, self.raw - o.raw)

    def scale(self, f: Fraction, *, round_up: bool) -> "Amount":
        """Multiply by a non-negative Fraction, rounding in the given direction."""
        return Amount(self.token, _scale_raw(self.raw, f, round_up=round_up))


def _scale_raw(raw: int, f: Fraction, *, round_up: bool) -> int:
    r = f.reduced()
    if r.numerator < 0:
        raise AmountDomainError(f"negative scale factor not allowed: {f}")
    num = raw * r.numerator
    return _ceil_div(num, r.denominator) if round_up else _floor_div(num, r.denominator)


# ----------------------------
# Constructors
# ----------------------------

def create_amount_from_raw(token: Token, raw: int) -> Amount:
    return Amount(token, raw)


def create_amount_from_string(token: Token, s: str) -> Amount:
    """Parse whole-unit decimal string ("1.5") into raw units of `token`.

    Strings with more fractional digits than `token.decimals` are rejected.
    """
    try:
        x = Decimal(s.strip())
    except (InvalidOperation, AttributeError):
        raise AmountDomainError(f"not a decimal literal: {s!r}") from None
    if x.is_nan() or x.is_infinite():
        raise AmountDomainError(f"invalid Decimal for Amount: {s!r}")
    if x < 0:
        raise AmountDomainError(f"negative amount not allowed: {s!r}")

    # Integer-only scaling; Decimal context precision never touches the digits.
    tup = x.as_tuple()
    digits = int("".join(str(d) for d in tup.digits)) if tup.digits else 0
    shift = tup.exponent + token.decimals
    if shift >= 0:
        raw = digits * 10 ** shift
    else:
        q, r = divmod(digits, 10 ** (-shift))
        if r != 0:
            raise AmountDomainError(
                f"{s!r} has more than {token.decimals} fractional digits"
            )
        raw = q
    _dbg(f"create_amount_from_string: {s} -> {raw}")
    return Amount(token, raw)


# ----------------------------
# Slippage bounds
# ----------------------------

class BoundDirection(str, Enum):
    """Which side of the trade an amount sits on, relative to the caller."""

    SUPPLY = "supply"    # caller pays: bound is a maximum
    RECEIVE = "receive"  # caller receives or owes: bound is a minimum


def _check_tolerance(tolerance: Fraction) -> Fraction:
    if not isinstance(tolerance, Fraction):
        raise InvalidFraction(f"tolerance must be a Fraction, got {type(tolerance).__name__}")
    if tolerance < 0 or tolerance >= 1:
        raise InvalidFraction(f"tolerance must be in [0, 1), got {tolerance}")
    return tolerance.reduced()


A = TypeVar("A", int, Amount)


def bounded_by(amount: A, tolerance: Fraction, direction: Union[BoundDirection, str]) -> A:
    """Slippage-bounded amount for `amount` under `tolerance`.

    SUPPLY  -> ceil(amount * (1 + tolerance)), the most the caller will pay.
    RECEIVE -> floor(amount * (1 - tolerance)), the least the caller will accept.

    Accepts a raw int or an Amount and returns the same kind.
    """
    t = _check_tolerance(tolerance)
    d = BoundDirection(direction)
    raw = amount.raw if isinstance(amount, Amount) else _require_raw(amount)

    if d is BoundDirection.SUPPLY:
        bounded = _ceil_div(raw * (t.denominator + t.numerator), t.denominator)
    else:
        bounded = _floor_div(raw * (t.denominator - t.numerator), t.denominator)
    _dbg(f"bounded_by: raw={raw}, t={t}, dir={d.value} -> {bounded}")

    if isinstance(amount, Amount):
        return Amount(amount.token, bounded)
    return bounded


__all__ = [
    "Token",
    "Amount",
    "BoundDirection",
    "create_amount_from_raw",
    "create_amount_from_string",
    "bounded_by",
]
