"""
Fixed-point wire constants (integer domain)
===========================================

Only integer and Decimal constants describing the on-chain I80F48 layout and
the display tiers live here. Codec and formatting logic is in `codec.py` and
`fmt.py`.
"""

# NOTE: I80F48 = 80 integer/sign bits + 48 fractional bits, stored as a 16-byte
# little-endian two's-complement integer inside a `{ value: [u8; 16] }` wrapper.

from decimal import Decimal

# ---------------------------------------------------------------------------
# I80F48 layout
# ---------------------------------------------------------------------------

#: Number of fractional bits in the fixed-point representation.
FRACTIONAL_BITS: int = 48

#: Scale factor: raw / FIXED_SCALE is the represented value.
FIXED_SCALE: int = 1 << FRACTIONAL_BITS

#: Serialized width in bytes (128 bits).
WRAPPED_SIZE: int = 16

#: Signed 128-bit bounds for the raw integer.
I128_MIN: int = -(1 << 127)
I128_MAX: int = (1 << 127) - 1

#: Largest integer a float (IEEE-754 double) represents exactly.
MAX_SAFE_INTEGER: int = (1 << 53) - 1

#: u64::MAX, used on-chain as the "no limit" sentinel for deposit/borrow caps.
U64_MAX: int = (1 << 64) - 1

#: Decimal context precision that holds any decoded I80F48 value exactly
#: (at most 24 integer digits plus 48 fractional digits).
EXACT_DIGITS: int = 96


# ---------------------------------------------------------------------------
# Display tiers (magnitude formatter)
# ---------------------------------------------------------------------------

# Below this, token amounts are shown in exponential form.
TIER_EXPONENTIAL: Decimal = Decimal("0.000001")

# Below this, token amounts keep 6 decimal places.
TIER_SUB_UNIT: Decimal = Decimal("1")

# Below this, token amounts keep 2 decimal places; above, K suffix.
TIER_THOUSAND: Decimal = Decimal("1000")

# Below this, K suffix; above, M suffix.
TIER_MILLION: Decimal = Decimal("1000000")

# DEFAULT kind switches to exponential form below this magnitude.
SMALL_VALUE_THRESHOLD: Decimal = Decimal("0.01")


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

__all__ = [
    "FRACTIONAL_BITS",
    "FIXED_SCALE",
    "WRAPPED_SIZE",
    "I128_MIN",
    "I128_MAX",
    "MAX_SAFE_INTEGER",
    "U64_MAX",
    "EXACT_DIGITS",
    "TIER_EXPONENTIAL",
    "TIER_SUB_UNIT",
    "TIER_THOUSAND",
    "TIER_MILLION",
    "SMALL_VALUE_THRESHOLD",
]
