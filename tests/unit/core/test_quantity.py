"""Unit tests for fixed-point quantity helpers."""

from __future__ import annotations

from decimal import Decimal

from core.quantity import (
    ZERO,
    parse_quantity,
    quantity_delta,
    quantity_to_json,
    quantity_to_text,
    round_quantity,
    sum_quantities,
)


def test_round_quantity_removes_float_drift() -> None:
    """Near-integral binary noise should collapse to three places."""
    assert round_quantity(Decimal("13.9199999")) == Decimal("13.920")


def test_round_quantity_rounds_half_up() -> None:
    """Ties should round away from zero."""
    assert round_quantity(Decimal("0.0005")) == Decimal("0.001")


def test_round_quantity_normalizes_negative_zero() -> None:
    """Negative zero should render like zero."""
    assert str(round_quantity(Decimal("-0.0001"))) == "0.000"


def test_parse_quantity_strips_grouping_separators() -> None:
    """Thousands separators should be ignored."""
    assert parse_quantity(" 1,250.5 ") == Decimal("1250.500")


def test_parse_quantity_treats_empty_as_zero() -> None:
    """An empty quantity cell counts as zero."""
    assert parse_quantity("  ") == ZERO


def test_parse_quantity_rejects_garbage() -> None:
    """Unparseable text should return None."""
    assert parse_quantity("lots") is None


def test_parse_quantity_rejects_non_finite() -> None:
    """Infinity and NaN are not quantities."""
    assert parse_quantity("Infinity") is None and parse_quantity("NaN") is None


def test_sum_quantities_rounds_total() -> None:
    """Sums should stay exact at three places."""
    total = sum_quantities([Decimal("0.1"), Decimal("0.2")])

    assert total == Decimal("0.300")


def test_quantity_to_json_writes_integral_values_as_int() -> None:
    """Integral quantities should serialize without a fraction."""
    assert isinstance(quantity_to_json(Decimal("10.000")), int)


def test_quantity_to_json_keeps_exact_fraction() -> None:
    """Fractional quantities should stay exact decimals without trailing zeros."""
    encoded = quantity_to_json(Decimal("12345678901234.567"))

    assert isinstance(encoded, Decimal) and str(encoded) == "12345678901234.567"


def test_quantity_to_json_strips_trailing_zeros() -> None:
    """Trailing fractional zeros should not reach the artifact."""
    assert str(quantity_to_json(Decimal("13.920"))) == "13.92"


def test_quantity_to_text_has_three_places() -> None:
    """Hash text should always carry three fractional digits."""
    assert quantity_to_text(Decimal("5")) == "5.000"


def test_parse_quantity_rejects_values_without_room_for_fraction() -> None:
    """Values too long to hold three fractional digits are unparseable."""
    assert parse_quantity("100000000000000000000000000") is None


def test_parse_quantity_rejects_huge_exponent() -> None:
    """Exponent notation beyond the digit limit is unparseable."""
    assert parse_quantity("1e400") is None


def test_sum_quantities_stays_exact_for_large_values() -> None:
    """Totals of maximal quantities should not lose digits."""
    largest = Decimal("9" * 25 + ".999")

    total = sum_quantities([largest, largest])

    assert total == Decimal("1" + "9" * 25 + ".998")


def test_quantity_delta_stays_exact_for_large_values() -> None:
    """Deltas between large quantities should keep all fractional digits."""
    delta = quantity_delta(Decimal("-" + "9" * 25 + ".999"), Decimal("9" * 25 + ".999"))

    assert delta == Decimal("-1" + "9" * 25 + ".998")
