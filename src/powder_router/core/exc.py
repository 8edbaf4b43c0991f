"""
Core exception types for powder_router.

These are dependency-free and may be imported by all modules. Every failure
raised by the library is local and synchronous; network errors raised by
web3 are never wrapped.
"""

__all__ = [
    "InvalidFraction",
    "AmountDomainError",
    "DecodeError",
    "InvalidCommandInput",
    "ExpiredDeadline",
    "UnsupportedCommand",
    "NonceReuse",
]


class InvalidFraction(Exception):
    """Raised for a zero denominator or a tolerance outside [0, 1)."""
    pass


class AmountDomainError(Exception):
    """Raised when amount inputs violate the non-negative domain or mix tokens."""
    pass


class DecodeError(Exception):
    """Raised when a raw read result is short or malformed.

    Attributes
    ----------
    field : str
        Name of the missing or malformed field (dotted for nested values,
        e.g. ``liquidity[2].borrowed``).
    """

    def __init__(self, field, reason="missing"):
        super().__init__(f"cannot decode field '{field}': {reason}")
        self.field = field
        self.reason = reason


class InvalidCommandInput(Exception):
    """Raised when a command or route request fails construction-time validation.

    Attributes
    ----------
    field : str
        The offending input field.
    value : Any
        The rejected value.
    """

    def __init__(self, field, value, reason):
        super().__init__(f"invalid {field}={value!r}: {reason}")
        self.field = field
        self.value = value
        self.reason = reason


class ExpiredDeadline(Exception):
    """Raised when a route deadline is at or before the reference timestamp."""

    def __init__(self, deadline, now):
        super().__init__(f"deadline={deadline} is not after reference timestamp={now}")
        self.deadline = deadline
        self.now = now


class UnsupportedCommand(Exception):
    """Raised when the router builder meets a command kind it cannot encode."""

    def __init__(self, command):
        super().__init__(f"unsupported command: {type(command).__name__}")
        self.command = command


class NonceReuse(Exception):
    """Raised when a signer's nonce is at or below one already confirmed or in flight."""

    def __init__(self, signer, nonce):
        super().__init__(f"nonce {nonce} already used or in flight for signer {signer}")
        self.signer = signer
        self.nonce = nonce
