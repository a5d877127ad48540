"""
Display helpers (non-core arithmetic).

Core arithmetic stays in exact Decimal/integer form. Everything here renders a
finished value into operator-facing text and is the last step in any pipeline:
fixed-point notation, exponential notation, and parsing such text back.

Rounding for display is half-up on the exact value, so `0.125` -> `0.13`.
Exponential strings use an unpadded exponent (`8.00e-3`, `1.50e+4`).
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any

from .constants import EXACT_DIGITS
from .exc import FormatError
from .codec import to_decimal_input


# ---------------------------------------------------------------------------
# Input coercion
# ---------------------------------------------------------------------------

def as_display_decimal(value: Any, fn: str) -> Decimal:
    """Accept Decimal/int/float for display; reject text and non-finite values."""
    if isinstance(value, str):
        raise FormatError(f"{fn}(): expected a number, got text {value!r}")
    return to_decimal_input(value, fn)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def to_fixed(value: Any, places: int) -> str:
    """Fixed-point text with exactly `places` fractional digits.

      Decimal('0.8')      , 2 -> '0.80'
      Decimal('0.0005')   , 6 -> '0.000500'
      Decimal('-0.001')   , 2 -> '0.00'   (no negative zero)
    """
    d = as_display_decimal(value, "to_fixed")
    if places < 0:
        raise FormatError(f"to_fixed(): places must be >= 0, got {places}")
    with localcontext() as ctx:
        ctx.prec = max(EXACT_DIGITS, d.adjusted() + 1) + places + 1
        ctx.rounding = ROUND_HALF_UP
        q = d.quantize(Decimal(1).scaleb(-places))
    if q.is_zero():
        q = q.copy_abs()
    return format(q, "f")


def to_exponential(value: Any, digits: int) -> str:
    """Exponential text with `digits` fractional digits in the mantissa.

      Decimal('0.008')     , 2 -> '8.00e-3'
      Decimal('0.00000025'), 6 -> '2.500000e-7'
      Decimal('0')         , 2 -> '0.00e+0'
    """
    d = as_display_decimal(value, "to_exponential")
    if digits < 0:
        raise FormatError(f"to_exponential(): digits must be >= 0, got {digits}")
    if d.is_zero():
        mantissa, exponent, sign = "0" * (digits + 1), 0, ""
    else:
        with localcontext() as ctx:
            ctx.prec = digits + 1
            ctx.rounding = ROUND_HALF_UP
            r = ctx.plus(d)
        t = r.as_tuple()
        mantissa = "".join(str(x) for x in t.digits).ljust(digits + 1, "0")
        exponent = r.adjusted()
        sign = "-" if t.sign else ""
    head = mantissa[0] + (f".{mantissa[1:]}" if digits else "")
    return f"{sign}{head}e{'+' if exponent >= 0 else '-'}{abs(exponent)}"


# ---------------------------------------------------------------------------
# Parsing (display text back to Decimal)
# ---------------------------------------------------------------------------

_SUFFIXES = {
    "K": Decimal(1000),
    "M": Decimal(1000000),
}


def parse_number(text: str) -> Decimal:
    """Parse fixed, exponential or K/M-suffixed display text into a Decimal.

    `'1.50K'` -> 1500, `'2.50M'` -> 2500000, `'8.00e-3'` -> 0.008.
    """
    if not isinstance(text, str):
        raise FormatError(f"parse_number(): expected text, got {type(text).__name__}")
    s = text.strip()
    factor = Decimal(1)
    if s and s[-1].upper() in _SUFFIXES:
        factor = _SUFFIXES[s[-1].upper()]
        s = s[:-1].rstrip()
    try:
        d = Decimal(s)
    except InvalidOperation:
        raise FormatError(f"parse_number(): malformed number {text!r}") from None
    if not d.is_finite():
        raise FormatError(f"parse_number(): non-finite number {text!r}")
    with localcontext() as ctx:
        ctx.prec = EXACT_DIGITS
        return d * factor


__all__ = [
    "as_display_decimal",
    "to_fixed",
    "to_exponential",
    "parse_number",
]
