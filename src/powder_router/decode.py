"""Decode raw engine read results into typed Pair / Strike records.

Raw results arrive either as positional tuples (as web3 returns struct
outputs) or as mappings keyed by the ABI output names:

  pair:   (composition[5], strikeCurrent[5], initialized)
  strike: (liquidity[5] of (swap, borrowed), next0To1, next1To0, initialized)

Decoding is a pure transform. No rounding is performed: composition
numerators stay Q128 integers inside Fractions and liquidity stays at native
precision. "Not found" is decided only by the `initialized` flag (or the
NOT_FOUND sentinel from a reader), never by zero values.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Tuple

from .core import (
    NUM_SPREADS,
    MIN_STRIKE,
    MAX_STRIKE,
    MAX_UINT128,
    MAX_UINT256,
    Q128,
    DecodeError,
    Fraction,
    LiquidityTier,
    Pair,
    PairKey,
    Strike,
)

# Debug printing control
DEBUG_DECODE = False

def _dbg(msg: str) -> None:
    if DEBUG_DECODE:
        print(f"[decode] {msg}")


class _NotFound:
    """Sentinel returned by readers for a strike the engine has never touched."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()

PAIR_FIELDS: Tuple[str, ...] = ("composition", "strikeCurrent", "initialized")
STRIKE_FIELDS: Tuple[str, ...] = ("liquidity", "next0To1", "next1To0", "initialized")


# ---------------------------------------------------------------------------
# Field access helpers
# ---------------------------------------------------------------------------

def _get(raw: Any, index: int, name: str, label: str) -> Any:
    """Fetch field `name` (mapping) or position `index` (sequence)."""
    if isinstance(raw, Mapping):
        if name not in raw:
            raise DecodeError(label)
        return raw[name]
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise DecodeError(label, f"expected tuple or mapping, got {type(raw).__name__}")
    if index >= len(raw):
        raise DecodeError(label)
    return raw[index]


def _as_int(v: Any, label: str, lo: int, hi: int) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise DecodeError(label, f"expected int, got {type(v).__name__}")
    if not lo <= v <= hi:
        raise DecodeError(label, f"value {v} outside [{lo}, {hi}]")
    return v


def _as_bool(v: Any, label: str) -> bool:
    if not isinstance(v, bool):
        raise DecodeError(label, f"expected bool, got {type(v).__name__}")
    return v


def _as_array(v: Any, label: str) -> Sequence[Any]:
    if isinstance(v, (str, bytes, Mapping)) or not isinstance(v, Sequence):
        raise DecodeError(label, f"expected array, got {type(v).__name__}")
    if len(v) < NUM_SPREADS:
        raise DecodeError(f"{label}[{len(v)}]")
    if len(v) > NUM_SPREADS:
        raise DecodeError(label, f"expected {NUM_SPREADS} entries, got {len(v)}")
    return v


# ---------------------------------------------------------------------------
# Pair
# ---------------------------------------------------------------------------

def decode_pair(raw: Any, key: PairKey) -> Optional[Pair]:
    """Decode a pair read; returns None for an uninitialized pair."""
    if raw is None or raw is NOT_FOUND:
        return None

    comp_raw = _as_array(_get(raw, 0, "composition", "composition"), "composition")
    composition = tuple(
        Fraction(_as_int(c, f"composition[{i}]", 0, MAX_UINT128), Q128)
        for i, c in enumerate(comp_raw)
    )

    sc_raw = _as_array(_get(raw, 1, "strikeCurrent", "strikeCurrent"), "strikeCurrent")
    strike_current = tuple(
        _as_int(s, f"strikeCurrent[{i}]", MIN_STRIKE, MAX_STRIKE)
        for i, s in enumerate(sc_raw)
    )

    initialized = _as_bool(_get(raw, 2, "initialized", "initialized"), "initialized")
    _dbg(f"pair {key.token0.address}/{key.token1.address} initialized={initialized}")
    if not initialized:
        return None

    return Pair(
        key=key,
        composition=composition,
        strike_current=strike_current,
        initialized=initialized,
    )


def encode_pair(pair: Pair) -> Tuple[Tuple[int, ...], Tuple[int, ...], bool]:
    """Raw positional tuple for a Pair (inverse of `decode_pair`)."""
    comp = []
    for i, f in enumerate(pair.composition):
        if f.denominator != Q128:
            # Re-express over Q128; exact only for fractions decoded from chain.
            scaled = f * Q128
            if scaled.reduced().denominator != 1:
                raise DecodeError(f"composition[{i}]", "not representable as Q128")
            comp.append(scaled.quotient_floor())
        else:
            comp.append(f.numerator)
    return tuple(comp), tuple(pair.strike_current), pair.initialized


# ---------------------------------------------------------------------------
# Strike
# ---------------------------------------------------------------------------

def _decode_tier(v: Any, i: int) -> LiquidityTier:
    label = f"liquidity[{i}]"
    swap = _as_int(_get(v, 0, "swap", f"{label}.swap"), f"{label}.swap", 0, MAX_UINT256)
    borrowed = _as_int(
        _get(v, 1, "borrowed", f"{label}.borrowed"), f"{label}.borrowed", 0, MAX_UINT256
    )
    return LiquidityTier(swap=swap, borrowed=borrowed)


def decode_strike(raw: Any, key: PairKey, strike: int) -> Optional[Strike]:
    """Decode a strike read; returns None when the strike was never initialized.

    All-zero liquidity with `initialized=True` decodes to a zeroed Strike.
    `borrowed > swap` is decoded unchanged.
    """
    if raw is None or raw is NOT_FOUND:
        return None

    liq_raw = _as_array(_get(raw, 0, "liquidity", "liquidity"), "liquidity")
    liquidity = tuple(_decode_tier(v, i) for i, v in enumerate(liq_raw))
    next_0_to_1 = _as_int(_get(raw, 1, "next0To1", "next0To1"), "next0To1", MIN_STRIKE, MAX_STRIKE)
    next_1_to_0 = _as_int(_get(raw, 2, "next1To0", "next1To0"), "next1To0", MIN_STRIKE, MAX_STRIKE)
    initialized = _as_bool(_get(raw, 3, "initialized", "initialized"), "initialized")
    _dbg(f"strike {strike} initialized={initialized}")
    if not initialized:
        return None

    return Strike(
        pair=key,
        strike=strike,
        liquidity=liquidity,
        next_0_to_1=next_0_to_1,
        next_1_to_0=next_1_to_0,
    )


def encode_strike(strike: Strike) -> Tuple[Tuple[Tuple[int, int], ...], int, int, bool]:
    """Raw positional tuple for a Strike (inverse of `decode_strike`)."""
    liquidity = tuple((t.swap, t.borrowed) for t in strike.liquidity)
    return liquidity, strike.next_0_to_1, strike.next_1_to_0, True


# ---------------------------------------------------------------------------
# Position balance
# ---------------------------------------------------------------------------

def decode_position_balance(raw: Any) -> int:
    """Decode a balance read; accepts a bare uint or a 1-tuple."""
    if isinstance(raw, (tuple, list)):
        raw = _get(raw, 0, "balance", "balance")
    return _as_int(raw, "balance", 0, MAX_UINT256)


__all__ = [
    "NOT_FOUND",
    "PAIR_FIELDS",
    "STRIKE_FIELDS",
    "decode_pair",
    "encode_pair",
    "decode_strike",
    "encode_strike",
    "decode_position_balance",
]
