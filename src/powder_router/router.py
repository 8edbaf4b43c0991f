"""Route builder: compile an ordered command batch into one router call.

`build_route` is a pure, stateless transform `RouteRequest -> RoutePayload`.
For each command, in list order, it resolves the desired amounts, bounds
them by the request's slippage tolerance and encodes the bounded command:

  - amounts the caller supplies (liquidity added, collateral posted, debt
    repaid, swap input) get a maximum: ceil(desired * (1 + slippage));
  - amounts the caller receives or owes (liquidity removed, debt taken,
    collateral returned, swap output) get a minimum:
    floor(desired * (1 - slippage)).

`to` (beneficiary) and `deadline` are threaded into every command that takes
a recipient. Order is preserved: a CreatePair must precede liquidity
commands on a fresh pair. Nothing is submitted here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from eth_utils import is_address, to_checksum_address

from .abi import decode_route_call, encode_command_input, encode_route_call
from .commands import (
    COMMAND_TYPES,
    Accrue,
    AddLiquidity,
    BorrowLiquidity,
    Command,
    CommandType,
    CreatePair,
    RemoveLiquidity,
    RepayLiquidity,
    Swap,
)
from .core import (
    MAX_UINT256,
    Amount,
    BoundDirection,
    ExpiredDeadline,
    Fraction,
    InvalidCommandInput,
    PairKey,
    UnsupportedCommand,
    bounded_by,
)

# Debug printing control
DEBUG_ROUTER = False

def _dbg(msg: str) -> None:
    if DEBUG_ROUTER:
        print(f"[router] {msg}")


# ---------------------------------------------------------------------------
# Request / payload
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RouteRequest:
    """Caller intent for one atomic route.

    `nonce` must never be reused across two in-flight requests from the same
    signer (see `client.NonceTracker`). `deadline` is a unix timestamp that
    must be strictly after the reference block timestamp at build time.
    """

    to: str
    commands: Tuple[Command, ...]
    nonce: int
    deadline: int
    slippage: Fraction

    def __post_init__(self):
        if not isinstance(self.to, str) or not is_address(self.to):
            raise InvalidCommandInput("to", self.to, "expected an address")
        object.__setattr__(self, "to", to_checksum_address(self.to))

        if isinstance(self.commands, (str, bytes)) or not isinstance(self.commands, Sequence):
            raise InvalidCommandInput("commands", self.commands, "expected a sequence of commands")
        object.__setattr__(self, "commands", tuple(self.commands))
        if not self.commands:
            raise InvalidCommandInput("commands", self.commands, "at least one command required")

        for name in ("nonce", "deadline"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise InvalidCommandInput(name, v, "must be int")
            if not 0 <= v <= MAX_UINT256:
                raise InvalidCommandInput(name, v, "must fit uint256")

        if not isinstance(self.slippage, Fraction):
            raise InvalidCommandInput("slippage", self.slippage, "expected Fraction")
        if self.slippage < 0 or self.slippage >= 1:
            raise InvalidCommandInput("slippage", str(self.slippage), "must be in [0, 1)")


@dataclass(frozen=True)
class BoundedAmount:
    """One desired amount and the bound baked into the payload."""

    field: str
    direction: BoundDirection
    desired: Union[int, Amount]
    bound: Union[int, Amount]


@dataclass(frozen=True)
class CommandBounds:
    """Bounds computed for the command at `index` (exposed for inspection)."""

    index: int
    command_type: CommandType
    amounts: Tuple[BoundedAmount, ...]

    def get(self, field: str) -> BoundedAmount:
        for a in self.amounts:
            if a.field == field:
                return a
        raise KeyError(field)


@dataclass(frozen=True)
class RoutePayload:
    """Immutable compiled route: encoded commands plus ready-to-send calldata."""

    to: str
    nonce: int
    deadline: int
    commands: Tuple[int, ...]
    inputs: Tuple[bytes, ...]
    bounds: Tuple[CommandBounds, ...]
    calldata: bytes


# ---------------------------------------------------------------------------
# Per-command compilation
# ---------------------------------------------------------------------------

def _raw(v: Union[int, Amount]) -> int:
    return v.raw if isinstance(v, Amount) else v


def _pair_head(pair: PairKey) -> Tuple[str, str, int]:
    return pair.token0.address, pair.token1.address, pair.scaling_factor


def _selector(pair: PairKey, a: Amount) -> int:
    return 0 if a.token == pair.token0 else 1


def _bound(field: str, direction: BoundDirection, desired: Union[int, Amount], slippage: Fraction) -> BoundedAmount:
    bound = bounded_by(desired, slippage, direction)
    if _raw(bound) > MAX_UINT256:
        raise InvalidCommandInput(field, _raw(desired), "slippage bound exceeds uint256")
    return BoundedAmount(field, direction, desired, bound)


def _compile(cmd: Command, slippage: Fraction) -> Tuple[Tuple[BoundedAmount, ...], Tuple[Any, ...]]:
    """Return (bounded amounts, ABI input values) for one command.

    Recipient and deadline are appended by the caller for commands that
    take them.
    """
    if isinstance(cmd, CreatePair):
        return (), _pair_head(cmd.pair) + (cmd.strike,)

    if isinstance(cmd, AddLiquidity):
        liq = _bound("amount_desired", BoundDirection.SUPPLY, cmd.amount_desired, slippage)
        values = _pair_head(cmd.pair) + (
            cmd.strike, cmd.spread, cmd.amount_desired, _raw(liq.bound),
        )
        return (liq,), values

    if isinstance(cmd, RemoveLiquidity):
        liq = _bound("amount_desired", BoundDirection.RECEIVE, cmd.amount_desired, slippage)
        values = _pair_head(cmd.pair) + (
            cmd.strike, cmd.spread, cmd.amount_desired, _raw(liq.bound),
        )
        return (liq,), values

    if isinstance(cmd, BorrowLiquidity):
        coll = _bound("amount_desired_collateral", BoundDirection.SUPPLY, cmd.amount_desired_collateral, slippage)
        debt = _bound("amount_desired_debt", BoundDirection.RECEIVE, cmd.amount_desired_debt, slippage)
        values = _pair_head(cmd.pair) + (
            cmd.strike,
            _selector(cmd.pair, cmd.amount_desired_collateral),
            cmd.amount_desired_collateral.raw, _raw(coll.bound),
            cmd.amount_desired_debt, _raw(debt.bound),
        )
        return (coll, debt), values

    if isinstance(cmd, RepayLiquidity):
        debt = _bound("amount_desired_debt", BoundDirection.SUPPLY, cmd.amount_desired_debt, slippage)
        coll = _bound("amount_desired_collateral", BoundDirection.RECEIVE, cmd.amount_desired_collateral, slippage)
        values = _pair_head(cmd.pair) + (
            cmd.strike,
            _selector(cmd.pair, cmd.amount_desired_collateral),
            cmd.amount_desired_debt, _raw(debt.bound),
            cmd.amount_desired_collateral.raw, _raw(coll.bound),
        )
        return (debt, coll), values

    if isinstance(cmd, Swap):
        amt_in = _bound("amount_desired_in", BoundDirection.SUPPLY, cmd.amount_desired_in, slippage)
        amt_out = _bound("amount_desired_out", BoundDirection.RECEIVE, cmd.amount_desired_out, slippage)
        values = _pair_head(cmd.pair) + (
            cmd.zero_for_one,
            cmd.amount_desired_in.raw, _raw(amt_in.bound),
            cmd.amount_desired_out.raw, _raw(amt_out.bound),
        )
        return (amt_in, amt_out), values

    if isinstance(cmd, Accrue):
        return (), _pair_head(cmd.pair) + (cmd.strike,)

    raise UnsupportedCommand(cmd)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def build_route(request: RouteRequest, *, now: int) -> RoutePayload:
    """Compile `request` into a RoutePayload.

    Parameters
    ----------
    request : RouteRequest
        Ordered commands, beneficiary, nonce, deadline and slippage.
    now : int
        Reference timestamp (normally the latest block timestamp).

    Raises
    ------
    ExpiredDeadline
        If `request.deadline <= now`; raised before any encoding work.
    UnsupportedCommand
        If a command is not one of the known command kinds.
    """
    if request.deadline <= now:
        raise ExpiredDeadline(request.deadline, now)

    command_ids = []
    inputs = []
    bounds = []
    for i, cmd in enumerate(request.commands):
        if not isinstance(cmd, COMMAND_TYPES):
            raise UnsupportedCommand(cmd)
        amounts, values = _compile(cmd, request.slippage)
        if cmd.takes_recipient:
            values += (request.to, request.deadline)
        command_ids.append(int(cmd.command_type))
        inputs.append(encode_command_input(cmd.command_type, values))
        bounds.append(CommandBounds(i, cmd.command_type, amounts))
        _dbg(f"#{i} {cmd.command_type.name}: " + ", ".join(
            f"{a.field} desired={_raw(a.desired)} bound={_raw(a.bound)}" for a in amounts
        ))

    calldata = encode_route_call(request.to, command_ids, inputs, request.nonce, request.deadline)
    return RoutePayload(
        to=request.to,
        nonce=request.nonce,
        deadline=request.deadline,
        commands=tuple(command_ids),
        inputs=tuple(inputs),
        bounds=tuple(bounds),
        calldata=calldata,
    )


def decode_route_calldata(calldata: bytes) -> Dict[str, Any]:
    """Inverse of the calldata encoding in `build_route` (inspection/testing)."""
    return decode_route_call(calldata)


def find_bounds(payload: RoutePayload, command_type: CommandType) -> Optional[CommandBounds]:
    """First CommandBounds of the given type, or None."""
    for b in payload.bounds:
        if b.command_type is command_type:
            return b
    return None


__all__ = [
    "RouteRequest",
    "BoundedAmount",
    "CommandBounds",
    "RoutePayload",
    "build_route",
    "decode_route_calldata",
    "find_bounds",
]
