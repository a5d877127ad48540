from decimal import Decimal

import pytest

from lendkit.core.fmt import to_fixed, to_exponential, parse_number
from lendkit.core.exc import FormatError


# -----------------------------
# to_fixed
# -----------------------------

@pytest.mark.parametrize(
    "value,places,expected",
    [
        (Decimal("0.8"), 2, "0.80"),
        (Decimal("0.125"), 2, "0.13"),
        (Decimal("0.0005"), 6, "0.000500"),
        (Decimal("-1.005"), 2, "-1.01"),
        (Decimal("1234567.891"), 2, "1234567.89"),
        (Decimal("12"), 0, "12"),
        (7, 2, "7.00"),
        (0.1, 3, "0.100"),
    ],
)
def test_to_fixed_half_up(value, places, expected):
    print(f"[to_fixed] {value!r}, {places} -> {expected}")
    assert to_fixed(value, places) == expected


def test_to_fixed_no_negative_zero():
    print("[to_fixed] -0.001 at 2 dp -> '0.00' (no '-0.00')")
    assert to_fixed(Decimal("-0.001"), 2) == "0.00"
    assert to_fixed(Decimal("-0"), 2) == "0.00"


def test_to_fixed_large_value_keeps_all_integer_digits():
    big = Decimal(2 ** 79)
    assert to_fixed(big, 2) == f"{2 ** 79}.00"


@pytest.mark.parametrize("bad", ["1", Decimal("NaN"), Decimal("Infinity"), None, True])
def test_to_fixed_rejects_bad_input(bad):
    with pytest.raises(FormatError):
        to_fixed(bad, 2)


def test_to_fixed_rejects_negative_places():
    with pytest.raises(FormatError):
        to_fixed(Decimal("1"), -1)


# -----------------------------
# to_exponential
# -----------------------------

@pytest.mark.parametrize(
    "value,digits,expected",
    [
        (Decimal("0.008"), 2, "8.00e-3"),
        (Decimal("0.00000025"), 6, "2.500000e-7"),
        (Decimal("0"), 2, "0.00e+0"),
        (Decimal("15000"), 2, "1.50e+4"),
        (Decimal("0.0099999"), 2, "1.00e-2"),
        (Decimal("-0.005"), 2, "-5.00e-3"),
        (Decimal("3"), 0, "3e+0"),
    ],
)
def test_to_exponential(value, digits, expected):
    print(f"[to_exponential] {value} , {digits} -> {expected}")
    assert to_exponential(value, digits) == expected


def test_to_exponential_rejects_text():
    with pytest.raises(FormatError):
        to_exponential("0.008", 2)


# -----------------------------
# parse_number
# -----------------------------

@pytest.mark.parametrize(
    "text,expected",
    [
        ("1.50K", Decimal("1500")),
        ("2.50M", Decimal("2500000")),
        ("2.50m", Decimal("2500000")),
        ("8.00e-3", Decimal("0.008")),
        ("  0.80 ", Decimal("0.8")),
        ("-12.5", Decimal("-12.5")),
    ],
)
def test_parse_number(text, expected):
    print(f"[parse_number] {text!r} -> {expected}")
    assert parse_number(text) == expected


@pytest.mark.parametrize("bad", ["", "abc", "K", "1.5X", "inf", "nan"])
def test_parse_number_rejects_malformed(bad):
    with pytest.raises(FormatError):
        parse_number(bad)


def test_parse_number_rejects_non_text():
    with pytest.raises(FormatError):
        parse_number(1.5)  # type: ignore[arg-type]
