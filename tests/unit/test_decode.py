import pytest

from powder_router.core import NUM_SPREADS, Q128, DecodeError, LiquidityTier, create_fraction
from powder_router.decode import (
    NOT_FOUND,
    decode_pair,
    decode_position_balance,
    decode_strike,
    encode_pair,
    encode_strike,
)


# -----------------------------
# Pair
# -----------------------------

def test_pair_composition_kept_as_exact_q128_fraction(pair_key):
    print("[decode-pair] composition numerators stay unreduced over Q128")
    raw = ([0, Q128 // 2, Q128 // 4, Q128 - 1, 1], [0, -1, 2, -8_388_608, 8_388_607], True)
    pair = decode_pair(raw, pair_key)
    assert pair is not None
    assert pair.key == pair_key
    assert pair.initialized is True
    assert pair.composition[0] == 0
    assert pair.composition[1] == create_fraction(1, 2)
    assert create_fraction(9, 10) < pair.composition[3] < 1
    assert (pair.composition[4].numerator, pair.composition[4].denominator) == (1, Q128)
    assert pair.strike_current == (0, -1, 2, -8_388_608, 8_388_607)
    assert encode_pair(pair) == (tuple(raw[0]), tuple(raw[1]), True)


def test_uninitialized_pair_is_not_found(pair_key):
    print("[decode-pair-uninit] initialized=False -> None; zero composition alone is not 'missing'")
    assert decode_pair(([0] * NUM_SPREADS, [0] * NUM_SPREADS, False), pair_key) is None
    assert decode_pair(None, pair_key) is None
    assert decode_pair(NOT_FOUND, pair_key) is None

    zeroed = decode_pair(([0] * NUM_SPREADS, [0] * NUM_SPREADS, True), pair_key)
    assert zeroed is not None
    assert all(c == 0 for c in zeroed.composition)


def test_pair_mapping_form(pair_key):
    print("[decode-pair-mapping] mapping keyed by ABI output names decodes the same")
    raw = {"composition": [0] * 5, "strikeCurrent": [3] * 5, "initialized": True}
    pair = decode_pair(raw, pair_key)
    assert pair.strike_current == (3,) * 5


@pytest.mark.parametrize(
    "raw,field",
    [
        (([0] * 5, [0] * 5), "initialized"),
        (([0] * 4, [0] * 5, True), "composition[4]"),
        (([0] * 5, [0] * 2, True), "strikeCurrent[2]"),
        (([0] * 5, [0, 0, 0, 2 ** 23, 0], True), "strikeCurrent[3]"),
        (([0, -1, 0, 0, 0], [0] * 5, True), "composition[1]"),
        (({"composition": [0] * 5, "initialized": True}), "strikeCurrent"),
    ],
)
def test_pair_decode_error_names_field(pair_key, raw, field):
    print(f"[decode-pair-error] malformed read -> DecodeError(field={field})")
    with pytest.raises(DecodeError) as ei:
        decode_pair(raw, pair_key)
    assert ei.value.field == field


# -----------------------------
# Strike
# -----------------------------

def _strike_raw(tiers, initialized=True, nxt=(0, 0)):
    return ([tuple(t) for t in tiers], nxt[0], nxt[1], initialized)


def test_strike_decodes_tiers_in_spread_order(pair_key):
    print("[decode-strike] tier i maps to spread i+1")
    tiers = [(10, 1), (20, 2), (30, 3), (40, 4), (50, 5)]
    s = decode_strike(_strike_raw(tiers, nxt=(-4, 7)), pair_key, 0)
    assert s is not None
    assert s.pair == pair_key
    assert s.strike == 0
    assert s.tier(1) == LiquidityTier(swap=10, borrowed=1)
    assert s.tier(5) == LiquidityTier(swap=50, borrowed=5)
    assert (s.next_0_to_1, s.next_1_to_0) == (-4, 7)
    assert s.total_swap() == 150
    assert s.total_borrowed() == 15
    assert encode_strike(s) == (tuple(tiers), -4, 7, True)


def test_zero_strike_is_distinct_from_not_found(pair_key):
    print("[decode-strike-zero] all-zero initialized strike -> zeroed Strike; NOT_FOUND -> None")
    s = decode_strike(_strike_raw([(0, 0)] * 5), pair_key, 12)
    assert s is not None
    assert s.total_swap() == 0 and s.total_borrowed() == 0
    assert decode_strike(NOT_FOUND, pair_key, 12) is None
    assert decode_strike(None, pair_key, 12) is None
    assert decode_strike(_strike_raw([(0, 0)] * 5, initialized=False), pair_key, 12) is None


def test_borrowed_above_swap_decodes_unchanged(pair_key):
    print("[decode-strike-overborrow] borrowed > swap is reported as-is")
    s = decode_strike(_strike_raw([(1, 9)] + [(0, 0)] * 4), pair_key, -3)
    assert s.tier(1) == LiquidityTier(swap=1, borrowed=9)


def test_tier_index_out_of_range(pair_key):
    s = decode_strike(_strike_raw([(0, 0)] * 5), pair_key, 0)
    with pytest.raises(IndexError):
        s.tier(0)
    with pytest.raises(IndexError):
        s.tier(NUM_SPREADS + 1)


@pytest.mark.parametrize(
    "raw,field",
    [
        (([(0, 0)] * 3, 0, 0, True), "liquidity[3]"),
        (([(0, 0)] * 4 + [(5,)], 0, 0, True), "liquidity[4].borrowed"),
        (([(0, 0), (-1, 0)] + [(0, 0)] * 3, 0, 0, True), "liquidity[1].swap"),
        (([(0, 0)] * 5, 0), "next1To0"),
        (([(0, 0)] * 5, 0, 0, 1), "initialized"),
        ("0xdeadbeef", "liquidity"),
    ],
)
def test_strike_decode_error_names_field(pair_key, raw, field):
    print(f"[decode-strike-error] malformed read -> DecodeError(field={field})")
    with pytest.raises(DecodeError) as ei:
        decode_strike(raw, pair_key, 0)
    assert ei.value.field == field


def test_strike_mapping_form(pair_key):
    print("[decode-strike-mapping] nested mappings decode like tuples")
    raw = {
        "liquidity": [{"swap": 7, "borrowed": 2}] + [{"swap": 0, "borrowed": 0}] * 4,
        "next0To1": 0,
        "next1To0": 0,
        "initialized": True,
    }
    s = decode_strike(raw, pair_key, 1)
    assert s.tier(1) == LiquidityTier(swap=7, borrowed=2)


# -----------------------------
# Position balance
# -----------------------------

def test_position_balance_forms():
    print("[decode-balance] bare uint and 1-tuple both decode; negatives fail")
    assert decode_position_balance(5) == 5
    assert decode_position_balance((7,)) == 7
    with pytest.raises(DecodeError):
        decode_position_balance(-1)
