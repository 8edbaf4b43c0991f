# Top-level API for powder_router.
"""
Top-level API for powder_router.

This module exposes the stable interface for building and decoding engine
interactions:
  - commands: immutable route intents (CreatePair, AddLiquidity, ...)
  - build_route: compile commands + slippage + deadline into one router call
  - decode_pair / decode_strike: typed views over raw engine reads

Chain access (web3 readers/submitters, nonce tracking, dev-chain snapshots)
lives in `powder_router.client` and is not imported here.
"""

# NOTE:
#   Everything exported here is pure: no network access, no global state.
#   Import `powder_router.client` explicitly when talking to a node.

from __future__ import annotations

from .commands import (
    CommandType,
    CreatePair,
    AddLiquidity,
    RemoveLiquidity,
    BorrowLiquidity,
    RepayLiquidity,
    Swap,
    Accrue,
    Command,
)
from .router import (
    RouteRequest,
    RoutePayload,
    CommandBounds,
    BoundedAmount,
    build_route,
    decode_route_calldata,
)
from .decode import (
    NOT_FOUND,
    decode_pair,
    decode_strike,
    encode_pair,
    encode_strike,
)
from .positions import (
    PositionKind,
    PositionData,
    Position,
    create_position,
)

# Core value types
from .core import (
    Fraction,
    create_fraction,
    fraction_from_string,
    fraction_equal_to,
    Token,
    Amount,
    BoundDirection,
    create_amount_from_raw,
    create_amount_from_string,
    bounded_by,
    PairKey,
    Pair,
    Strike,
    LiquidityTier,
    InvalidFraction,
    AmountDomainError,
    DecodeError,
    InvalidCommandInput,
    ExpiredDeadline,
    UnsupportedCommand,
    NonceReuse,
)

__all__ = [
    # commands
    "CommandType",
    "CreatePair",
    "AddLiquidity",
    "RemoveLiquidity",
    "BorrowLiquidity",
    "RepayLiquidity",
    "Swap",
    "Accrue",
    "Command",
    # router
    "RouteRequest",
    "RoutePayload",
    "CommandBounds",
    "BoundedAmount",
    "build_route",
    "decode_route_calldata",
    # decoder
    "NOT_FOUND",
    "decode_pair",
    "decode_strike",
    "encode_pair",
    "encode_strike",
    # positions
    "PositionKind",
    "PositionData",
    "Position",
    "create_position",
    # core value types
    "Fraction",
    "create_fraction",
    "fraction_from_string",
    "fraction_equal_to",
    "Token",
    "Amount",
    "BoundDirection",
    "create_amount_from_raw",
    "create_amount_from_string",
    "bounded_by",
    "PairKey",
    "Pair",
    "Strike",
    "LiquidityTier",
    # exceptions
    "InvalidFraction",
    "AmountDomainError",
    "DecodeError",
    "InvalidCommandInput",
    "ExpiredDeadline",
    "UnsupportedCommand",
    "NonceReuse",
]
