"""
I80F48 codec: 16-byte wrapped fixed-point <-> exact Decimal.

- Wire format: little-endian two's-complement signed 128-bit integer `raw`,
  value = raw / 2^48.
- Decode is exact: every multiple of 2^-48 has a terminating decimal expansion
  (at most 48 fractional digits), so no context rounding is involved.
- Encode scales by 2^48 in Decimal, rounds once (half-even by default, or
  truncation), and range-checks against i128. Out of range raises
  FixedPointOverflowError; values are never clamped.
- Floats are a display-only narrowing; see `narrow_to_float`.

# Alignment notes:
# - Byte order and scale match the on-chain `WrappedI80F48 { value: [u8; 16] }`
#   account field, so encode(0.8) reproduces the bytes stored by the program.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_EVEN, localcontext
from typing import Any, Dict, List, Union

from .constants import (
    FIXED_SCALE,
    FRACTIONAL_BITS,
    WRAPPED_SIZE,
    I128_MIN,
    I128_MAX,
    MAX_SAFE_INTEGER,
    EXACT_DIGITS,
)
from .exc import FormatError, FixedPointOverflowError, PrecisionWarning

logger = logging.getLogger(__name__)

# 1 / 2^48 == 5^48 / 10^48, which keeps the fractional stage in integers.
_FIVE_POW: int = 5 ** FRACTIONAL_BITS

#: Rounding modes accepted by `encode`.
SUPPORTED_ROUNDINGS = (ROUND_HALF_EVEN, ROUND_DOWN)

# Anything above this decimal exponent cannot fit 80 integer bits.
_MAX_ADJUSTED_EXPONENT = 24

BytesLike = Union[bytes, bytearray, memoryview, List[int], tuple]
Numeric = Union[Decimal, int, float, str]


# ----------------------------
# Input validation
# ----------------------------

def _as_wire_bytes(data: Any, fn: str) -> bytes:
    """Return `data` as exactly 16 bytes or raise FormatError (no padding/truncation)."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        buf = bytes(data)
    elif isinstance(data, (list, tuple)):
        for b in data:
            if isinstance(b, bool) or not isinstance(b, int) or not 0 <= b <= 255:
                raise FormatError(f"{fn}(): byte values must be ints in 0..255, got {b!r}")
        buf = bytes(data)
    else:
        raise FormatError(f"{fn}(): expected bytes-like input, got {type(data).__name__}")
    if len(buf) != WRAPPED_SIZE:
        raise FormatError(f"{fn}(): expected {WRAPPED_SIZE} bytes, got {len(buf)}")
    return buf


def to_decimal_input(value: Any, fn: str = "encode") -> Decimal:
    """Coerce a user-supplied number to a finite Decimal.

    Floats go through `repr` so that `0.8` means the decimal 0.8 rather than
    its binary approximation.
    """
    if isinstance(value, bool):
        raise FormatError(f"{fn}(): bool is not a numeric value")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, float):
        d = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            d = Decimal(value.strip().replace("_", ""))
        except InvalidOperation:
            raise FormatError(f"{fn}(): malformed decimal {value!r}") from None
    else:
        raise FormatError(f"{fn}(): unsupported type {type(value).__name__}")
    if not d.is_finite():
        raise FormatError(f"{fn}(): non-finite value {d}")
    return d


# ----------------------------
# Integer stage
# ----------------------------

def raw_from_bytes(data: BytesLike) -> int:
    """Interpret 16 little-endian bytes as a signed two's-complement i128."""
    buf = _as_wire_bytes(data, "raw_from_bytes")
    return int.from_bytes(buf, "little", signed=True)


def raw_to_bytes(raw: int) -> bytes:
    """Serialize a signed i128 into 16 little-endian two's-complement bytes."""
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise FormatError(f"raw_to_bytes(): raw must be int, got {type(raw).__name__}")
    if raw < I128_MIN or raw > I128_MAX:
        raise FixedPointOverflowError(Decimal(raw) / FIXED_SCALE, raw)
    return raw.to_bytes(WRAPPED_SIZE, "little", signed=True)


def raw_to_decimal(raw: int) -> Decimal:
    """Exact Decimal value of a raw I80F48 integer."""
    if raw == 0:
        return Decimal(0)
    sign = "-" if raw < 0 else ""
    integer_part, fractional_raw = divmod(abs(raw), FIXED_SCALE)
    frac = f"{fractional_raw * _FIVE_POW:0{FRACTIONAL_BITS}d}".rstrip("0")
    if not frac:
        return Decimal(f"{sign}{integer_part}")
    return Decimal(f"{sign}{integer_part}.{frac}")


def scale_to_raw(value: Numeric, rounding: str = ROUND_HALF_EVEN) -> int:
    """Scale a decimal value by 2^48 and round once to the raw i128 integer."""
    if rounding not in SUPPORTED_ROUNDINGS:
        raise FormatError(f"scale_to_raw(): unsupported rounding {rounding!r}")
    d = to_decimal_input(value, "encode")
    if d.is_zero():
        return 0
    if d.adjusted() > _MAX_ADJUSTED_EXPONENT:
        raise FixedPointOverflowError(value)
    with localcontext() as ctx:
        # Wide enough for the exact product: digits of d plus 15 digits of 2^48.
        ctx.prec = max(EXACT_DIGITS, len(d.as_tuple().digits) + 20)
        scaled = d * FIXED_SCALE
        raw = int(scaled.to_integral_value(rounding=rounding))
    if raw < I128_MIN or raw > I128_MAX:
        raise FixedPointOverflowError(value, raw)
    return raw


# ----------------------------
# Public codec
# ----------------------------

def decode(data: BytesLike) -> Decimal:
    """Decode 16 wire bytes into the exact Decimal they represent.

    Raises FormatError when `data` is not exactly 16 bytes.
    """
    raw = raw_from_bytes(data)
    value = raw_to_decimal(raw)
    logger.debug("decode: raw=%d -> %s", raw, value)
    return value


def encode(value: Numeric, rounding: str = ROUND_HALF_EVEN) -> bytes:
    """Encode a decimal value into 16 wire bytes.

    `rounding` is ROUND_HALF_EVEN (default) or ROUND_DOWN (truncate toward zero).
    Raises FixedPointOverflowError if the scaled value does not fit i128.
    """
    raw = scale_to_raw(value, rounding)
    logger.debug("encode: %s -> raw=%d (%s)", value, raw, rounding)
    return raw_to_bytes(raw)


def narrow_to_float(value: Decimal) -> float:
    """Narrow an exact Decimal to float for display.

    Emits PrecisionWarning when the integer part exceeds 2^53 - 1; the float is
    then approximate. Never feed the result back into fixed-point arithmetic.
    """
    if not isinstance(value, Decimal) or not value.is_finite():
        raise FormatError(f"narrow_to_float(): expected finite Decimal, got {value!r}")
    if abs(int(value)) > MAX_SAFE_INTEGER:
        warnings.warn(
            f"narrow_to_float(): integer part of {value} exceeds 2^53-1; float is approximate",
            PrecisionWarning,
            stacklevel=2,
        )
    return float(value)


# ----------------------------
# Wrapped value
# ----------------------------

@dataclass(frozen=True)
class WrappedI80F48:
    """Immutable 16-byte I80F48 field as stored on-chain."""
    value: bytes

    def __post_init__(self):
        # Normalise bytearray/list input to immutable bytes.
        object.__setattr__(self, "value", _as_wire_bytes(self.value, "WrappedI80F48"))

    # ------------- constructors -------------

    @staticmethod
    def zero() -> "WrappedI80F48":
        return WrappedI80F48(bytes(WRAPPED_SIZE))

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "WrappedI80F48":
        return cls(_as_wire_bytes(data, "WrappedI80F48.from_bytes"))

    @classmethod
    def from_raw(cls, raw: int) -> "WrappedI80F48":
        return cls(raw_to_bytes(raw))

    @classmethod
    def from_decimal(cls, x: Numeric, rounding: str = ROUND_HALF_EVEN) -> "WrappedI80F48":
        """Encode a decimal configuration value (e.g. an asset weight of 0.8)."""
        return cls(encode(x, rounding))

    @classmethod
    def from_list(cls, values: List[int]) -> "WrappedI80F48":
        return cls(_as_wire_bytes(values, "WrappedI80F48.from_list"))

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "WrappedI80F48":
        """Build from the IDL/JSON shape `{"value": [u8; 16]}`."""
        if not isinstance(obj, dict) or "value" not in obj:
            raise FormatError("WrappedI80F48.from_json(): expected a mapping with a 'value' key")
        return cls.from_list(obj["value"])

    @classmethod
    def coerce(cls, obj: Any) -> "WrappedI80F48":
        """Accept a WrappedI80F48, 16 bytes, 16 ints, or `{"value": [...]}`."""
        if isinstance(obj, cls):
            return obj
        if isinstance(obj, dict):
            return cls.from_json(obj)
        return cls(_as_wire_bytes(obj, "WrappedI80F48.coerce"))

    # ------------- views -------------

    @property
    def raw(self) -> int:
        return int.from_bytes(self.value, "little", signed=True)

    def to_decimal(self) -> Decimal:
        return raw_to_decimal(self.raw)

    def to_float(self) -> float:
        """Display-only float view (see narrow_to_float)."""
        return narrow_to_float(self.to_decimal())

    def to_list(self) -> List[int]:
        return list(self.value)

    def to_json(self) -> Dict[str, List[int]]:
        return {"value": self.to_list()}

    def hex(self) -> str:
        return self.value.hex()

    # ------------- predicates -------------

    def is_zero(self) -> bool:
        return not any(self.value)

    def is_negative(self) -> bool:
        return self.value[-1] & 0x80 != 0

    def __str__(self) -> str:
        return format(self.to_decimal(), "f")


__all__ = [
    "SUPPORTED_ROUNDINGS",
    "to_decimal_input",
    "raw_from_bytes",
    "raw_to_bytes",
    "raw_to_decimal",
    "scale_to_raw",
    "decode",
    "encode",
    "narrow_to_float",
    "WrappedI80F48",
]
