"""Engine positions: immutable descriptors plus an externally read balance.

A Position is never mutated; a new balance means a new Position value.
Position ids are `keccak256(abi.encode(uint8 kind, address token0,
address token1, uint8 scalingFactor, int24 strike, uint8 spread))`.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum

from eth_abi import encode
from eth_utils import is_address, to_checksum_address
from web3 import Web3

from .abi import APPROVE_SELECTOR
from .core import (
    MAX_UINT256,
    InvalidCommandInput,
    PairKey,
    Token,
    check_spread,
    check_strike,
)


class PositionKind(IntEnum):
    BI_DIRECTIONAL = 0
    LIMIT = 1
    DEBT = 2

    @classmethod
    def parse(cls, v: "PositionKind | str") -> "PositionKind":
        """Accept an enum member or its protocol name ("BiDirectional", "Limit", "Debt")."""
        if isinstance(v, PositionKind):
            return v
        names = {"BiDirectional": cls.BI_DIRECTIONAL, "Limit": cls.LIMIT, "Debt": cls.DEBT}
        if v not in names:
            raise InvalidCommandInput("kind", v, f"expected one of {sorted(names)}")
        return names[v]


@dataclass(frozen=True)
class PositionData:
    """Descriptor shared by every position kind."""

    token0: Token
    token1: Token
    scaling_factor: int
    strike: int
    spread: int

    def __post_init__(self):
        # PairKey validates token order and scaling factor.
        PairKey(self.token0, self.token1, self.scaling_factor)
        check_strike(self.strike)
        check_spread(self.spread)

    @property
    def pair(self) -> PairKey:
        return PairKey(self.token0, self.token1, self.scaling_factor)


@dataclass(frozen=True)
class Position:
    kind: PositionKind
    data: PositionData
    balance: int

    def __post_init__(self):
        b = self.balance
        if isinstance(b, bool) or not isinstance(b, int) or not 0 <= b <= MAX_UINT256:
            raise InvalidCommandInput("balance", b, "must be int in uint256 range")

    @property
    def id(self) -> bytes:
        return position_id(self.kind, self.data)

    def with_balance(self, balance: int) -> "Position":
        return replace(self, balance=balance)


def position_id(kind: PositionKind, data: PositionData) -> bytes:
    encoded = encode(
        ["uint8", "address", "address", "uint8", "int24", "uint8"],
        [
            int(kind),
            data.token0.address,
            data.token1.address,
            data.scaling_factor,
            data.strike,
            data.spread,
        ],
    )
    return bytes(Web3.keccak(encoded))


def create_position(kind: "PositionKind | str", data: PositionData, balance: int) -> Position:
    return Position(PositionKind.parse(kind), data, balance)


def build_position_approval(position: Position, spender: str, approved: bool = True) -> bytes:
    """Calldata for the engine's `approve(spender, id, approved)`.

    Approval itself is submitted by the caller before routing positions.
    """
    if not isinstance(spender, str) or not is_address(spender):
        raise InvalidCommandInput("spender", spender, "expected an address")
    return APPROVE_SELECTOR + encode(
        ["address", "bytes32", "bool"],
        [to_checksum_address(spender), position.id, bool(approved)],
    )


__all__ = [
    "PositionKind",
    "PositionData",
    "Position",
    "position_id",
    "create_position",
    "build_position_approval",
]
