# Top-level API for lendkit (exact fixed-point domain).
"""
Top-level API for lendkit.

This module exposes the stable interface for working with I80F48 account fields:
  - WrappedI80F48: 16-byte wire value with exact Decimal views
  - ValueKind / format_value: contextual display of decoded fields
  - format_token_amount / format_raw_token_amount: tiered token amounts

Reports over bank and lending-account JSON live in `lendkit.reports`;
configuration and logging setup live in `lendkit.config` and
`lendkit.logging_config`.
"""

# NOTE:
#   Nothing in this package performs network I/O. Callers fetch and decode
#   accounts themselves and pass the resulting JSON or raw bytes in.

from __future__ import annotations

__version__ = "0.1.0"

from .core import (
    WrappedI80F48,
    decode,
    encode,
    narrow_to_float,
    ValueKind,
    format_value,
    format_wrapped,
    parse_display,
    compute_token_amount,
    format_magnitude,
    format_raw_token_amount,
    format_token_amount,
    render_or_placeholder,
    LendkitError,
    FormatError,
    FixedPointOverflowError,
    ConfigError,
    PrecisionWarning,
)

__all__ = [
    "__version__",
    "WrappedI80F48",
    "decode",
    "encode",
    "narrow_to_float",
    "ValueKind",
    "format_value",
    "format_wrapped",
    "parse_display",
    "compute_token_amount",
    "format_magnitude",
    "format_raw_token_amount",
    "format_token_amount",
    "render_or_placeholder",
    "LendkitError",
    "FormatError",
    "FixedPointOverflowError",
    "ConfigError",
    "PrecisionWarning",
]
