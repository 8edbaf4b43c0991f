import pytest
from dataclasses import FrozenInstanceError

from powder_router.commands import (
    Accrue,
    AddLiquidity,
    BorrowLiquidity,
    CommandType,
    CreatePair,
    RemoveLiquidity,
    RepayLiquidity,
    Swap,
)
from powder_router.core import (
    InvalidCommandInput,
    PairKey,
    Token,
    create_amount_from_raw,
    create_amount_from_string,
)


def test_command_wire_ids_are_stable():
    print("[commands-ids] wire ids are fixed")
    assert [int(c) for c in CommandType] == [0, 1, 2, 3, 4, 5, 6]
    assert CreatePair.command_type is CommandType.CREATE_PAIR
    assert Accrue.command_type is CommandType.ACCRUE
    assert AddLiquidity.takes_recipient and not CreatePair.takes_recipient


def test_commands_are_immutable(pair_key):
    cmd = AddLiquidity(pair_key, 0, 1, 10)
    with pytest.raises(FrozenInstanceError):
        cmd.amount_desired = 11  # type: ignore[misc]


def test_pair_key_orders_tokens(tokens):
    print("[pairkey-order] from_tokens sorts; direct construction rejects reversed order")
    t0, t1 = tokens
    assert PairKey.from_tokens(t1, t0) == PairKey(t0, t1, 0)
    with pytest.raises(InvalidCommandInput) as ei:
        PairKey(t1, t0, 0)
    assert ei.value.field == "token0"
    with pytest.raises(InvalidCommandInput) as ei:
        PairKey(t0, t1, 256)
    assert ei.value.field == "scaling_factor"


@pytest.mark.parametrize(
    "kwargs,field",
    [
        (dict(strike=2 ** 23, spread=1, amount_desired=1), "strike"),
        (dict(strike=-(2 ** 23) - 1, spread=1, amount_desired=1), "strike"),
        (dict(strike=0, spread=0, amount_desired=1), "spread"),
        (dict(strike=0, spread=6, amount_desired=1), "spread"),
        (dict(strike=0, spread=1, amount_desired=0), "amount_desired"),
        (dict(strike=0, spread=1, amount_desired=-5), "amount_desired"),
        (dict(strike=0, spread=1, amount_desired=2 ** 256), "amount_desired"),
        (dict(strike=0, spread=True, amount_desired=1), "spread"),
    ],
)
def test_liquidity_command_validation(pair_key, kwargs, field):
    print(f"[commands-validate] {kwargs} -> InvalidCommandInput(field={field})")
    for cls in (AddLiquidity, RemoveLiquidity):
        with pytest.raises(InvalidCommandInput) as ei:
            cls(pair=pair_key, **kwargs)
        assert ei.value.field == field


def test_strike_bounds_inclusive(pair_key):
    print("[commands-strike-edges] int24 edges are accepted")
    CreatePair(pair_key, 2 ** 23 - 1)
    CreatePair(pair_key, -(2 ** 23))
    Accrue(pair_key, -(2 ** 23))


def test_pair_must_be_pair_key(tokens):
    with pytest.raises(InvalidCommandInput) as ei:
        CreatePair(tokens, 0)  # type: ignore[arg-type]
    assert ei.value.field == "pair"


def test_borrow_collateral_must_be_pair_token(pair_key):
    print("[commands-borrow] collateral outside the pair -> InvalidCommandInput")
    stranger = Token("0x" + "99" * 20, 18, "X")
    with pytest.raises(InvalidCommandInput) as ei:
        BorrowLiquidity(pair_key, 0, create_amount_from_raw(stranger, 1), 1)
    assert ei.value.field == "amount_desired_collateral"

    with pytest.raises(InvalidCommandInput) as ei:
        BorrowLiquidity(pair_key, 0, create_amount_from_raw(pair_key.token0, 0), 1)
    assert ei.value.field == "amount_desired_collateral"

    with pytest.raises(InvalidCommandInput) as ei:
        BorrowLiquidity(pair_key, 0, create_amount_from_string(pair_key.token0, "1.5"), 0)
    assert ei.value.field == "amount_desired_debt"


def test_repay_accepts_either_collateral_token(pair_key):
    RepayLiquidity(pair_key, 0, 10, create_amount_from_raw(pair_key.token0, 1))
    RepayLiquidity(pair_key, 0, 10, create_amount_from_raw(pair_key.token1, 1))


def test_swap_direction_and_token_rules(pair_key):
    print("[commands-swap] in/out must be opposite pair tokens; zero_for_one follows input token")
    t0, t1 = pair_key.token0, pair_key.token1
    s = Swap(pair_key, create_amount_from_raw(t0, 100), create_amount_from_raw(t1, 90))
    assert s.zero_for_one is True
    s = Swap(pair_key, create_amount_from_raw(t1, 100), create_amount_from_raw(t0, 90))
    assert s.zero_for_one is False

    with pytest.raises(InvalidCommandInput) as ei:
        Swap(pair_key, create_amount_from_raw(t0, 100), create_amount_from_raw(t0, 90))
    assert ei.value.field == "amount_desired_out"


@pytest.mark.parametrize(
    "amount,reason",
    [(0, "must be strictly positive"), (-1, "must be strictly positive"), (2 ** 256, "exceeds uint256")],
)
def test_liquidity_rejection_reason_names_the_violation(pair_key, amount, reason):
    print(f"[commands-reason] amount_desired={amount} -> {reason!r}")
    with pytest.raises(InvalidCommandInput) as ei:
        AddLiquidity(pair_key, 0, 1, amount)
    assert ei.value.reason == reason
    assert reason in str(ei.value)
