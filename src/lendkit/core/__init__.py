"""
lendkit Core
============

Unified exports for the I80F48 fixed-point codec and its display layers.
All arithmetic is exact (Python int / wide-context Decimal).
Float is produced *only* by the explicit narrowing helpers, for display.

Core exposes WrappedI80F48 (16-byte wire value) and ValueKind (display policy)
as public API.
"""

# NOTE:
#   The `core` package never performs I/O. Account fetching, instruction
#   building and signing live outside this package and only exchange raw
#   16-byte fields or Decimals with it.

# Wire constants
from .constants import (
    FRACTIONAL_BITS,
    FIXED_SCALE,
    WRAPPED_SIZE,
    I128_MIN,
    I128_MAX,
    MAX_SAFE_INTEGER,
    U64_MAX,
)

# Codec
from .codec import (
    WrappedI80F48,
    decode,
    encode,
    raw_from_bytes,
    raw_to_bytes,
    raw_to_decimal,
    scale_to_raw,
    narrow_to_float,
)

# Display primitives
from .fmt import (
    to_fixed,
    to_exponential,
    parse_number,
)

# Contextual interpretation
from .interpret import (
    ValueKind,
    format_value,
    format_wrapped,
    parse_display,
)

# Balances and magnitude tiers
from .balance import (
    DEFAULT_PLACEHOLDER,
    compute_token_amount,
    scale_native_amount,
    format_magnitude,
    format_raw_token_amount,
    format_token_amount,
    Rendered,
    render_or_placeholder,
)

# Core exceptions
from .exc import (
    LendkitError,
    FormatError,
    FixedPointOverflowError,
    ConfigError,
    PrecisionWarning,
)

__all__ = [
    # constants
    "FRACTIONAL_BITS",
    "FIXED_SCALE",
    "WRAPPED_SIZE",
    "I128_MIN",
    "I128_MAX",
    "MAX_SAFE_INTEGER",
    "U64_MAX",
    # codec
    "WrappedI80F48",
    "decode",
    "encode",
    "raw_from_bytes",
    "raw_to_bytes",
    "raw_to_decimal",
    "scale_to_raw",
    "narrow_to_float",
    # fmt
    "to_fixed",
    "to_exponential",
    "parse_number",
    # interpret
    "ValueKind",
    "format_value",
    "format_wrapped",
    "parse_display",
    # balance
    "DEFAULT_PLACEHOLDER",
    "compute_token_amount",
    "scale_native_amount",
    "format_magnitude",
    "format_raw_token_amount",
    "format_token_amount",
    "Rendered",
    "render_or_placeholder",
    # exceptions
    "LendkitError",
    "FormatError",
    "FixedPointOverflowError",
    "ConfigError",
    "PrecisionWarning",
]
