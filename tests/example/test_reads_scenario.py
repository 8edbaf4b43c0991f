# tests/example/test_reads_scenario.py
# End-to-end read scenario: three routes executed against the in-memory engine,
# then the pair and strike read back through the decoder.

import pytest

from conftest import ALICE, EngineRevert, FakeEngine

from powder_router.client import get_pair, get_strike
from powder_router.commands import AddLiquidity, BorrowLiquidity, CommandType, CreatePair, RemoveLiquidity
from powder_router.core import LiquidityTier, create_amount_from_string, create_fraction, fraction_equal_to
from powder_router.router import RouteRequest, build_route

E18 = 10 ** 18


@pytest.fixture(scope="module")
def engine():
    return FakeEngine()


@pytest.fixture()
def clean(engine):
    """Each test starts from the same engine state; reset via snapshot/revert."""
    sid = engine.snapshot()
    yield engine
    assert engine.revert(sid)


def _send(engine, commands, nonce, slippage=(2, 100)):
    now = engine.block_timestamp()
    req = RouteRequest(ALICE, commands, nonce, now + 60, create_fraction(*slippage))
    payload = build_route(req, now=now)
    engine.execute(payload.calldata)
    return payload


def test_create_add_borrow_then_read(clean, pair_key):
    print("\n[scenario-reads] CreatePair(0) -> AddLiquidity(1e18, spread 1) -> BorrowLiquidity(1.5 t0, 0.5e18)")
    engine = clean
    collateral = create_amount_from_string(pair_key.token0, "1.5")

    _send(engine, [CreatePair(pair_key, 0)], nonce=0)
    _send(engine, [AddLiquidity(pair_key, 0, 1, E18)], nonce=1)
    borrow = _send(engine, [BorrowLiquidity(pair_key, 0, collateral, E18 // 2)], nonce=2)

    b = borrow.bounds[0]
    print("  borrow bounds ->", b.get("amount_desired_collateral").bound.raw, b.get("amount_desired_debt").bound)
    assert [c for c, _ in engine.executed] == [
        CommandType.CREATE_PAIR, CommandType.ADD_LIQUIDITY, CommandType.BORROW_LIQUIDITY,
    ]

    pair = get_pair(engine, pair_key, strikes=[0])
    assert pair is not None
    assert pair.initialized is True
    assert all(fraction_equal_to(c, 0) for c in pair.composition)
    assert pair.strike_current == (0,) * 5

    strike = pair.strikes[0]
    print("  strike[0] tiers ->", strike.liquidity)
    assert strike.tier(1) == LiquidityTier(swap=E18 // 2, borrowed=E18 // 2)
    for spread in range(2, 6):
        assert strike.tier(spread) == LiquidityTier(swap=0, borrowed=0)


def test_state_reset_between_tests(clean, pair_key):
    print("\n[scenario-reset] previous test's pair is gone after revert")
    assert get_pair(clean, pair_key) is None
    assert get_strike(clean, pair_key, 0) is None


def test_batch_is_atomic(clean, pair_key):
    print("\n[scenario-atomic] a failing command reverts the whole route")
    # RemoveLiquidity on an empty strike fails after CreatePair succeeded.
    with pytest.raises(EngineRevert):
        _send(clean, [CreatePair(pair_key, 0), RemoveLiquidity(pair_key, 0, 1, E18)], nonce=0)
    assert get_pair(clean, pair_key) is None


def test_expired_route_rejected_by_engine(clean, pair_key):
    print("\n[scenario-deadline] calldata built earlier expires once blocks pass")
    now = clean.block_timestamp()
    req = RouteRequest(ALICE, [CreatePair(pair_key, 0)], 0, now + 10, create_fraction(0, 1))
    payload = build_route(req, now=now)
    clean.mine(10)
    with pytest.raises(EngineRevert):
        clean.execute(payload.calldata)
