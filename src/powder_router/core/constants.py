"""
Powder Router Core Constants (integer domain)
=============================================

Protocol-wide integer constants mirrored from the engine contracts. Decimal
quanta used for display live next to the formatting helpers in `fmt.py`.
"""

# NOTE: Strike and spread bounds follow the engine's ABI widths (int24 / uint8).

# ---------------------------------------------------------------------------
# Spread tiers
# ---------------------------------------------------------------------------

#: Number of discrete spread tiers per strike.
NUM_SPREADS: int = 5

#: Spread tiers are 1-based on the wire.
MIN_SPREAD: int = 1
MAX_SPREAD: int = NUM_SPREADS


# ---------------------------------------------------------------------------
# Strike index (int24)
# ---------------------------------------------------------------------------

STRIKE_BITS: int = 24
MIN_STRIKE: int = -(2 ** (STRIKE_BITS - 1))
MAX_STRIKE: int = 2 ** (STRIKE_BITS - 1) - 1


# ---------------------------------------------------------------------------
# Fixed-point and integer widths
# ---------------------------------------------------------------------------

#: Composition values are Q128 fixed-point numerators.
Q128: int = 2 ** 128

MAX_UINT8: int = 2 ** 8 - 1
MAX_UINT128: int = 2 ** 128 - 1
MAX_UINT256: int = 2 ** 256 - 1

#: Scaling factor is a uint8 on the wire.
MAX_SCALING_FACTOR: int = MAX_UINT8


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

#: Significant digits for Decimal views of amounts and fractions. Applied
#: through a local context only; the caller's global context is untouched.
DECIMAL_PRECISION: int = 60


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

__all__ = [
    "NUM_SPREADS",
    "MIN_SPREAD",
    "MAX_SPREAD",
    "STRIKE_BITS",
    "MIN_STRIKE",
    "MAX_STRIKE",
    "Q128",
    "MAX_UINT8",
    "MAX_UINT128",
    "MAX_UINT256",
    "MAX_SCALING_FACTOR",
    "DECIMAL_PRECISION",
]
