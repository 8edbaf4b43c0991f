"""
Core datatypes for engine state, aligned with the engine's read layout.

These datatypes are immutable so that decoding and route building remain
pure and testable.

Notes:
- Liquidity is carried as raw integers at native on-chain precision.
- Composition entries are exact Fractions (Q128 numerators over 2**128).
- Zero liquidity is a valid state; "not found" is represented by `None` at
  the decoder boundary, never by zeroed records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple

from .amounts import Token
from .constants import MAX_SCALING_FACTOR, MAX_SPREAD, MAX_STRIKE, MIN_SPREAD, MIN_STRIKE, NUM_SPREADS
from .exc import InvalidCommandInput
from .fraction import Fraction


# ---------------------------------------------------------------------------
# Pair key
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PairKey:
    """Pair identity: canonically ordered tokens plus a scaling factor.

    `token0` must sort strictly before `token1` by lowercase address; use
    `PairKey.from_tokens` to order two arbitrary tokens.
    """

    token0: Token
    token1: Token
    scaling_factor: int = 0

    def __post_init__(self):
        if not isinstance(self.token0, Token):
            raise InvalidCommandInput("token0", self.token0, "expected Token")
        if not isinstance(self.token1, Token):
            raise InvalidCommandInput("token1", self.token1, "expected Token")
        if not self.token0.sorts_before(self.token1):
            raise InvalidCommandInput(
                "token0", self.token0.address, "token0 must sort strictly before token1"
            )
        sf = self.scaling_factor
        if isinstance(sf, bool) or not isinstance(sf, int) or not 0 <= sf <= MAX_SCALING_FACTOR:
            raise InvalidCommandInput("scaling_factor", sf, f"must be int in [0, {MAX_SCALING_FACTOR}]")

    @classmethod
    def from_tokens(cls, token_a: Token, token_b: Token, scaling_factor: int = 0) -> "PairKey":
        if token_b.sorts_before(token_a):
            token_a, token_b = token_b, token_a
        return cls(token_a, token_b, scaling_factor)

    def has_token(self, token: Token) -> bool:
        return token == self.token0 or token == self.token1


# ---------------------------------------------------------------------------
# Strike
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LiquidityTier:
    """Liquidity for one spread tier of a strike.

    `borrowed <= swap` is a protocol expectation only; it is not enforced here.
    """

    swap: int
    borrowed: int


@dataclass(frozen=True)
class Strike:
    """Decoded strike state: one LiquidityTier per spread plus list pointers.

    Tier liquidity is a raw int, not an Amount: liquidity units belong to the
    strike rather than to either pair token, so there is no token to tag.
    """

    pair: PairKey
    strike: int
    liquidity: Tuple[LiquidityTier, ...]
    next_0_to_1: int = 0
    next_1_to_0: int = 0

    def tier(self, spread: int) -> LiquidityTier:
        """Liquidity for a 1-based spread tier."""
        if not 1 <= spread <= NUM_SPREADS:
            raise IndexError(f"spread {spread} out of range [1, {NUM_SPREADS}]")
        return self.liquidity[spread - 1]

    def total_swap(self) -> int:
        return sum(t.swap for t in self.liquidity)

    def total_borrowed(self) -> int:
        return sum(t.borrowed for t in self.liquidity)


# ---------------------------------------------------------------------------
# Pair
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Pair:
    """Decoded pair state.

    Fields:
    - composition: one Fraction per spread tier, each in [0, 1].
    - strike_current: active strike per spread tier.
    - initialized: engine flag; decoders only return Pairs with this set.
    - strikes: strikes read alongside the pair, keyed by strike index.
    """

    key: PairKey
    composition: Tuple[Fraction, ...]
    strike_current: Tuple[int, ...]
    initialized: bool
    strikes: Mapping[int, Strike] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "strikes", MappingProxyType(dict(self.strikes)))

    def with_strikes(self, strikes: Mapping[int, Strike]) -> "Pair":
        merged = dict(self.strikes)
        merged.update(strikes)
        return Pair(self.key, self.composition, self.strike_current, self.initialized, merged)


def check_strike(strike: int, field_name: str = "strike") -> int:
    """Validate a strike index against the int24 width."""
    if isinstance(strike, bool) or not isinstance(strike, int):
        raise InvalidCommandInput(field_name, strike, "must be int")
    if not MIN_STRIKE <= strike <= MAX_STRIKE:
        raise InvalidCommandInput(field_name, strike, f"must be in [{MIN_STRIKE}, {MAX_STRIKE}]")
    return strike


def check_spread(spread: int) -> int:
    """Validate a 1-based spread tier."""
    if isinstance(spread, bool) or not isinstance(spread, int):
        raise InvalidCommandInput("spread", spread, "must be int")
    if not MIN_SPREAD <= spread <= MAX_SPREAD:
        raise InvalidCommandInput("spread", spread, f"must be in [{MIN_SPREAD}, {MAX_SPREAD}]")
    return spread


__all__ = [
    "PairKey",
    "LiquidityTier",
    "Strike",
    "Pair",
    "check_strike",
    "check_spread",
]
