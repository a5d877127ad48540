"""
Contextual interpretation of I80F48 fields for display.

The same 16 bytes can hold a risk weight, an interest rate, a fee, a share
value or a share balance. `ValueKind` is supplied at the call site (it is not
stored on-chain) and selects only the display policy:

- WEIGHT  -> fixed 2 dp            ('0.80')
- RATE    -> x100, fixed 2 dp, '%' ('10.00%')
- FEE     -> same as RATE
- SHARE   -> fixed 6 dp            ('1.000000')
- BALANCE -> fixed 6 dp below 1 in magnitude, fixed 2 dp otherwise
- DEFAULT -> exponential (2 digits) for 0 < |v| < 0.01, fixed 2 dp otherwise

The decoded value is never altered by the kind.
"""

from __future__ import annotations

from decimal import Decimal, localcontext
from enum import Enum
from typing import Any, Union

from .constants import EXACT_DIGITS, SMALL_VALUE_THRESHOLD
from .exc import FormatError
from .codec import WrappedI80F48, decode
from .fmt import as_display_decimal, to_fixed, to_exponential, parse_number


class ValueKind(Enum):
    """Display policy for a decoded fixed-point field."""
    WEIGHT = "weight"
    RATE = "rate"
    FEE = "fee"
    SHARE = "share"
    BALANCE = "balance"
    DEFAULT = "default"

    @classmethod
    def parse(cls, tag: Union["ValueKind", str]) -> "ValueKind":
        """Resolve a tag from config/CLI text ('rate', 'RATE') to a ValueKind."""
        if isinstance(tag, cls):
            return tag
        if isinstance(tag, str):
            try:
                return cls(tag.strip().lower())
            except ValueError:
                pass
        raise FormatError(f"ValueKind.parse(): unknown value kind {tag!r}")

    @property
    def is_percentage(self) -> bool:
        return self in (ValueKind.RATE, ValueKind.FEE)


def _percent(d: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = EXACT_DIGITS
        return d * 100


def format_value(value: Any, kind: Union[ValueKind, str] = ValueKind.DEFAULT) -> str:
    """Render an already-decoded value under the display policy of `kind`."""
    kind = ValueKind.parse(kind)
    d = as_display_decimal(value, "format_value")

    if kind is ValueKind.WEIGHT:
        return to_fixed(d, 2)
    if kind is ValueKind.RATE or kind is ValueKind.FEE:
        return to_fixed(_percent(d), 2) + "%"
    if kind is ValueKind.SHARE:
        return to_fixed(d, 6)
    if kind is ValueKind.BALANCE:
        return to_fixed(d, 6 if abs(d) < 1 else 2)
    if kind is ValueKind.DEFAULT:
        # Exact zero stays fixed ("0.00"), not "0.00e+0".
        if not d.is_zero() and abs(d) < SMALL_VALUE_THRESHOLD:
            return to_exponential(d, 2)
        return to_fixed(d, 2)
    raise FormatError(f"format_value(): unhandled value kind {kind!r}")


def format_wrapped(wrapped: Any, kind: Union[ValueKind, str] = ValueKind.DEFAULT) -> str:
    """Decode a wrapped field and render it.

    `wrapped` may be a WrappedI80F48, 16 bytes, 16 ints, or the IDL JSON shape
    `{"value": [...]}`. Decode errors (FormatError) propagate unchanged.
    """
    if isinstance(wrapped, (WrappedI80F48, dict)):
        value = WrappedI80F48.coerce(wrapped).to_decimal()
    else:
        value = decode(wrapped)
    return format_value(value, kind)


def parse_display(text: str, kind: Union[ValueKind, str] = ValueKind.DEFAULT) -> Decimal:
    """Parse text produced by `format_value` back into a Decimal.

    RATE/FEE text must carry a '%' suffix and is divided by 100; other kinds
    must not. K/M suffixes and exponential notation are accepted.
    """
    kind = ValueKind.parse(kind)
    if not isinstance(text, str):
        raise FormatError(f"parse_display(): expected text, got {type(text).__name__}")
    s = text.strip()
    has_percent = s.endswith("%")
    if kind.is_percentage != has_percent:
        raise FormatError(f"parse_display(): {text!r} does not match kind {kind.value}")
    if has_percent:
        with localcontext() as ctx:
            ctx.prec = EXACT_DIGITS
            return parse_number(s[:-1]) / 100
    return parse_number(s)


__all__ = [
    "ValueKind",
    "format_value",
    "format_wrapped",
    "parse_display",
]
