"""
Powder Router Core
==================

Unified exports for integer-domain primitives used by the decoder and the
route builder. All arithmetic is exact: raw integers at native on-chain
precision and rational Fractions. Decimal helpers are provided *only* for
I/O formatting.
"""

# NOTE:
#   The `core` package defines the value types shared by every other module.
#   Nothing in here performs network access.

# Protocol constants
from .constants import (
    NUM_SPREADS,
    MIN_SPREAD,
    MAX_SPREAD,
    MIN_STRIKE,
    MAX_STRIKE,
    Q128,
    MAX_UINT128,
    MAX_UINT256,
    MAX_SCALING_FACTOR,
)

# Exact rationals
from .fraction import (
    Fraction,
    create_fraction,
    fraction_from_string,
    fraction_equal_to,
)

# Token amounts and slippage bounds
from .amounts import (
    Token,
    Amount,
    BoundDirection,
    create_amount_from_raw,
    create_amount_from_string,
    bounded_by,
)

# Engine state records
from .datatypes import (
    PairKey,
    LiquidityTier,
    Strike,
    Pair,
    check_strike,
    check_spread,
)

# Decimal formatting helpers (non-core arithmetic)
from .fmt import (
    fmt_dec,
    fmt_amount,
    amount_to_decimal,
    fraction_to_decimal,
)

# Core exceptions
from .exc import (
    InvalidFraction,
    AmountDomainError,
    DecodeError,
    InvalidCommandInput,
    ExpiredDeadline,
    UnsupportedCommand,
    NonceReuse,
)

__all__ = [
    # constants
    "NUM_SPREADS",
    "MIN_SPREAD",
    "MAX_SPREAD",
    "MIN_STRIKE",
    "MAX_STRIKE",
    "Q128",
    "MAX_UINT128",
    "MAX_UINT256",
    "MAX_SCALING_FACTOR",
    # fraction
    "Fraction",
    "create_fraction",
    "fraction_from_string",
    "fraction_equal_to",
    # amounts
    "Token",
    "Amount",
    "BoundDirection",
    "create_amount_from_raw",
    "create_amount_from_string",
    "bounded_by",
    # datatypes
    "PairKey",
    "LiquidityTier",
    "Strike",
    "Pair",
    "check_strike",
    "check_spread",
    # fmt
    "fmt_dec",
    "fmt_amount",
    "amount_to_decimal",
    "fraction_to_decimal",
    # exceptions
    "InvalidFraction",
    "AmountDomainError",
    "DecodeError",
    "InvalidCommandInput",
    "ExpiredDeadline",
    "UnsupportedCommand",
    "NonceReuse",
]
