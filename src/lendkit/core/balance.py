"""
Token balances from (shares, share value) pairs and magnitude-tiered display.

- `compute_token_amount`: exact Decimal product of two decoded I80F48 values.
  Both operands are already in token display units, so `token_decimals` is
  never applied here.
- `format_raw_token_amount`: native integer ledger amount / 10^decimals,
  then tiered display.
- `format_magnitude` tiers (first match wins):
      < 0.000001 -> exponential, 6 digits
      < 1        -> fixed 6 dp
      < 1000     -> fixed 2 dp
      < 1000000  -> /1000, fixed 2 dp, 'K'
      otherwise  -> /1000000, fixed 2 dp, 'M'

This layer is display-only. `render_or_placeholder` lets report code keep
going past a malformed field while retaining the error for logging.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Any, Callable, Optional

from .constants import (
    EXACT_DIGITS,
    TIER_EXPONENTIAL,
    TIER_SUB_UNIT,
    TIER_THOUSAND,
    TIER_MILLION,
)
from .exc import FormatError
from .fmt import as_display_decimal, to_fixed, to_exponential

logger = logging.getLogger(__name__)

# Product of two exact decodes needs twice the digits of one.
_PRODUCT_DIGITS = 2 * EXACT_DIGITS

#: Placeholder substituted for a field that could not be rendered.
DEFAULT_PLACEHOLDER = "n/a"


def _check_decimals(token_decimals: Any, fn: str) -> int:
    if isinstance(token_decimals, bool) or not isinstance(token_decimals, int) or token_decimals < 0:
        raise FormatError(f"{fn}(): token_decimals must be a non-negative int, got {token_decimals!r}")
    return token_decimals


# ---------------------------------------------------------------------------
# Arithmetic (exact)
# ---------------------------------------------------------------------------

def compute_token_amount(shares: Any, share_value: Any, token_decimals: int) -> Decimal:
    """Exact token amount represented by `shares` at `share_value`.

    Returns Decimal(0) without multiplying when either operand is zero.
    """
    _check_decimals(token_decimals, "compute_token_amount")
    s = as_display_decimal(shares, "compute_token_amount")
    v = as_display_decimal(share_value, "compute_token_amount")
    if s.is_zero() or v.is_zero():
        return Decimal(0)
    with localcontext() as ctx:
        ctx.prec = _PRODUCT_DIGITS
        amount = s * v
    logger.debug("compute_token_amount: %s * %s -> %s", s, v, amount)
    return amount


def scale_native_amount(native_amount: Any, token_decimals: int) -> Decimal:
    """Native integer ledger amount -> Decimal in display units (exact)."""
    _check_decimals(token_decimals, "scale_native_amount")
    if isinstance(native_amount, float):
        raise FormatError("scale_native_amount(): native amounts are integers, got float")
    d = as_display_decimal(native_amount, "scale_native_amount")
    if d != d.to_integral_value():
        raise FormatError(f"scale_native_amount(): native amount must be integral, got {d}")
    return _shift(d, -token_decimals)


def _shift(d: Decimal, places: int) -> Decimal:
    """Exact d * 10^places (no context rounding)."""
    t = d.as_tuple()
    return Decimal((t.sign, t.digits, t.exponent + places))


# ---------------------------------------------------------------------------
# Display (tiered)
# ---------------------------------------------------------------------------

def format_magnitude(value: Any) -> str:
    """Render a token amount with the magnitude tiers described above."""
    d = as_display_decimal(value, "format_magnitude")
    if d < TIER_EXPONENTIAL:
        return to_exponential(d, 6)
    if d < TIER_SUB_UNIT:
        return to_fixed(d, 6)
    if d < TIER_THOUSAND:
        return to_fixed(d, 2)
    if d < TIER_MILLION:
        return to_fixed(_shift(d, -3), 2) + "K"
    return to_fixed(_shift(d, -6), 2) + "M"


def format_raw_token_amount(native_amount: Any, token_decimals: int) -> str:
    """Render a native integer amount (e.g. from a transfer log) for display.

      (999, 0)       -> '999.00'
      (1500, 0)      -> '1.50K'
      (2_500_000, 0) -> '2.50M'
      (500, 6)       -> '0.000500'
    """
    return format_magnitude(scale_native_amount(native_amount, token_decimals))


def format_token_amount(shares: Any, share_value: Any, token_decimals: int) -> str:
    """Render the token amount of a (shares, share value) pair; '0' when either is zero."""
    amount = compute_token_amount(shares, share_value, token_decimals)
    if amount.is_zero():
        return "0"
    return format_magnitude(amount)


# ---------------------------------------------------------------------------
# Placeholder substitution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rendered:
    """Display text plus the FormatError that forced a placeholder, if any."""
    text: str
    error: Optional[FormatError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def render_or_placeholder(
    fn: Callable[..., str],
    *args: Any,
    placeholder: str = DEFAULT_PLACEHOLDER,
    field: str = "",
) -> Rendered:
    """Call a display function; on FormatError return `placeholder` and keep the error.

    Other exceptions (including FixedPointOverflowError) propagate.
    """
    try:
        return Rendered(fn(*args))
    except FormatError as e:
        name = field or getattr(fn, "__name__", "value")
        logger.warning("could not render %s: %s", name, e, extra={"field": name})
        return Rendered(placeholder, e)


__all__ = [
    "DEFAULT_PLACEHOLDER",
    "compute_token_amount",
    "scale_native_amount",
    "format_magnitude",
    "format_raw_token_amount",
    "format_token_amount",
    "Rendered",
    "render_or_placeholder",
]
