"""Route commands: a closed set of immutable, self-validating intents.

Each command validates its own inputs at construction time (no chain access)
and raises InvalidCommandInput naming the offending field. Commands carry
data only; the route builder (`router.build_route`) decides how each one is
bounded and encoded.

Amount conventions:
  - liquidity quantities (`amount_desired`, `amount_desired_debt`) are raw
    ints at native on-chain precision;
  - token quantities (`amount_desired_collateral`, swap amounts) are Amounts
    and must be denominated in one of the pair's tokens.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Union

from .core import (
    MAX_UINT256,
    Amount,
    InvalidCommandInput,
    PairKey,
    check_spread,
    check_strike,
)


class CommandType(IntEnum):
    """Wire identifiers for router commands."""

    SWAP = 0
    ADD_LIQUIDITY = 1
    BORROW_LIQUIDITY = 2
    REPAY_LIQUIDITY = 3
    REMOVE_LIQUIDITY = 4
    ACCRUE = 5
    CREATE_PAIR = 6


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _check_pair(pair: object) -> PairKey:
    if not isinstance(pair, PairKey):
        raise InvalidCommandInput("pair", pair, "expected PairKey")
    return pair


def _check_liquidity(field: str, v: object) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise InvalidCommandInput(field, v, "must be int")
    if v <= 0:
        raise InvalidCommandInput(field, v, "must be strictly positive")
    if v > MAX_UINT256:
        raise InvalidCommandInput(field, v, "exceeds uint256")
    return v


def _check_token_amount(field: str, v: object, pair: PairKey) -> Amount:
    if not isinstance(v, Amount):
        raise InvalidCommandInput(field, v, "expected Amount")
    if not pair.has_token(v.token):
        raise InvalidCommandInput(field, v.token.address, "token is not part of the pair")
    if v.raw <= 0:
        raise InvalidCommandInput(field, v.raw, "must be strictly positive")
    if v.raw > MAX_UINT256:
        raise InvalidCommandInput(field, v.raw, "exceeds uint256")
    return v


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CreatePair:
    """Initialize a pair at `strike`. Must precede liquidity commands on a new pair."""

    command_type: ClassVar[CommandType] = CommandType.CREATE_PAIR
    takes_recipient: ClassVar[bool] = False

    pair: PairKey
    strike: int

    def __post_init__(self):
        _check_pair(self.pair)
        check_strike(self.strike)


@dataclass(frozen=True)
class AddLiquidity:
    """Provide `amount_desired` liquidity at (strike, spread)."""

    command_type: ClassVar[CommandType] = CommandType.ADD_LIQUIDITY
    takes_recipient: ClassVar[bool] = True

    pair: PairKey
    strike: int
    spread: int
    amount_desired: int

    def __post_init__(self):
        _check_pair(self.pair)
        check_strike(self.strike)
        check_spread(self.spread)
        _check_liquidity("amount_desired", self.amount_desired)


@dataclass(frozen=True)
class RemoveLiquidity:
    """Withdraw `amount_desired` liquidity from (strike, spread)."""

    command_type: ClassVar[CommandType] = CommandType.REMOVE_LIQUIDITY
    takes_recipient: ClassVar[bool] = True

    pair: PairKey
    strike: int
    spread: int
    amount_desired: int

    def __post_init__(self):
        _check_pair(self.pair)
        check_strike(self.strike)
        check_spread(self.spread)
        _check_liquidity("amount_desired", self.amount_desired)


@dataclass(frozen=True)
class BorrowLiquidity:
    """Post collateral and borrow liquidity at `strike`."""

    command_type: ClassVar[CommandType] = CommandType.BORROW_LIQUIDITY
    takes_recipient: ClassVar[bool] = True

    pair: PairKey
    strike: int
    amount_desired_collateral: Amount
    amount_desired_debt: int

    def __post_init__(self):
        _check_pair(self.pair)
        check_strike(self.strike)
        _check_token_amount("amount_desired_collateral", self.amount_desired_collateral, self.pair)
        _check_liquidity("amount_desired_debt", self.amount_desired_debt)


@dataclass(frozen=True)
class RepayLiquidity:
    """Repay borrowed liquidity at `strike` and reclaim collateral."""

    command_type: ClassVar[CommandType] = CommandType.REPAY_LIQUIDITY
    takes_recipient: ClassVar[bool] = True

    pair: PairKey
    strike: int
    amount_desired_debt: int
    amount_desired_collateral: Amount

    def __post_init__(self):
        _check_pair(self.pair)
        check_strike(self.strike)
        _check_liquidity("amount_desired_debt", self.amount_desired_debt)
        _check_token_amount("amount_desired_collateral", self.amount_desired_collateral, self.pair)


@dataclass(frozen=True)
class Swap:
    """Swap one pair token for the other.

    The input token is the token of `amount_desired_in`; `amount_desired_out`
    must be denominated in the other token.
    """

    command_type: ClassVar[CommandType] = CommandType.SWAP
    takes_recipient: ClassVar[bool] = True

    pair: PairKey
    amount_desired_in: Amount
    amount_desired_out: Amount

    def __post_init__(self):
        _check_pair(self.pair)
        _check_token_amount("amount_desired_in", self.amount_desired_in, self.pair)
        _check_token_amount("amount_desired_out", self.amount_desired_out, self.pair)
        if self.amount_desired_in.token == self.amount_desired_out.token:
            raise InvalidCommandInput(
                "amount_desired_out",
                self.amount_desired_out.token.address,
                "must be the opposite token of amount_desired_in",
            )

    @property
    def zero_for_one(self) -> bool:
        return self.amount_desired_in.token == self.pair.token0


@dataclass(frozen=True)
class Accrue:
    """Accrue interest on borrowed liquidity at `strike`."""

    command_type: ClassVar[CommandType] = CommandType.ACCRUE
    takes_recipient: ClassVar[bool] = False

    pair: PairKey
    strike: int

    def __post_init__(self):
        _check_pair(self.pair)
        check_strike(self.strike)


Command = Union[
    CreatePair,
    AddLiquidity,
    RemoveLiquidity,
    BorrowLiquidity,
    RepayLiquidity,
    Swap,
    Accrue,
]

COMMAND_TYPES = (
    CreatePair,
    AddLiquidity,
    RemoveLiquidity,
    BorrowLiquidity,
    RepayLiquidity,
    Swap,
    Accrue,
)


__all__ = [
    "CommandType",
    "CreatePair",
    "AddLiquidity",
    "RemoveLiquidity",
    "BorrowLiquidity",
    "RepayLiquidity",
    "Swap",
    "Accrue",
    "Command",
    "COMMAND_TYPES",
]
