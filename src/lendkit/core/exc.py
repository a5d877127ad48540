"""
Core exception types for lendkit.core.

These are dependency-free and may be imported by all core modules.
"""

__all__ = [
    "LendkitError",
    "FormatError",
    "FixedPointOverflowError",
    "ConfigError",
    "PrecisionWarning",
]


class LendkitError(Exception):
    """Base class for all lendkit errors."""
    pass


class FormatError(LendkitError, ValueError):
    """Raised for malformed input: wrong byte length, non-finite or non-numeric values.

    Always recoverable locally; display code substitutes a placeholder.
    """
    pass


class FixedPointOverflowError(LendkitError, OverflowError):
    """Raised when an encode target does not fit a signed 128-bit raw value.

    Attributes
    ----------
    value : Any
        The value that was being encoded.
    raw : int | None
        The scaled integer that fell outside the i128 range, when known.
    """

    def __init__(self, value, raw=None):
        super().__init__(f"encode(): {value} does not fit I80F48 (raw={raw})")
        self.value = value
        self.raw = raw


class ConfigError(LendkitError):
    """Raised when a configuration file carries an invalid value."""
    pass


class PrecisionWarning(UserWarning):
    """Emitted when a decoded value is narrowed to float beyond the 53-bit safe range.

    The Decimal value stays exact; only the narrowed float is approximate.
    """
    pass
