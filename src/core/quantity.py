"""Fixed-point quantity arithmetic.

Quantities are ``Decimal`` values rounded to three fractional digits
with ROUND_HALF_UP. Every read, comparison, hash, and write goes
through ``round_quantity`` so binary float drift never reaches output.

A parsed quantity holds at most ``QUANTITY_MAX_DIGITS`` significant
digits. Sums and deltas run in a wider context so they stay exact for
any accepted input.
"""

from __future__ import annotations

from decimal import Context, Decimal, InvalidOperation
from typing import Iterable

from core.constants import (
    GROUPING_SEPARATOR,
    QUANTITY_ARITHMETIC_DIGITS,
    QUANTITY_EXPONENT,
    QUANTITY_MAX_DIGITS,
    QUANTITY_ROUNDING,
)

ZERO = Decimal(0).quantize(QUANTITY_EXPONENT)

_PARSE_CONTEXT = Context(prec=QUANTITY_MAX_DIGITS, rounding=QUANTITY_ROUNDING)
_ARITHMETIC_CONTEXT = Context(prec=QUANTITY_ARITHMETIC_DIGITS, rounding=QUANTITY_ROUNDING)


def round_quantity(value: Decimal | int | str) -> Decimal:
    """Round a quantity to the canonical three fractional digits.

    Args:
        value: Decimal, int, or numeric string.

    Returns:
        Quantized decimal with exactly three fractional digits.

    Raises:
        decimal.InvalidOperation: If the value is non-finite or too large
            to hold three fractional digits.
    """
    return _quantize(Decimal(value), _ARITHMETIC_CONTEXT)


def parse_quantity(raw_value: str | None) -> Decimal | None:
    """Parse a raw quantity cell.

    Grouping separators are stripped first. An empty cell counts as zero.

    Args:
        raw_value: Raw cell text.

    Returns:
        Rounded quantity, or None when the value is unparseable, non-finite,
        or needs more than ``QUANTITY_MAX_DIGITS`` digits.
    """
    if raw_value is None or not raw_value.strip():
        return ZERO
    cleaned = raw_value.strip().replace(GROUPING_SEPARATOR, "")
    try:
        parsed = Decimal(cleaned)
        if not parsed.is_finite():
            return None
        return _quantize(parsed, _PARSE_CONTEXT)
    except InvalidOperation:
        return None


def sum_quantities(values: Iterable[Decimal]) -> Decimal:
    """Sum quantities exactly and round the total once."""
    total = Decimal(0)
    for value in values:
        total = _ARITHMETIC_CONTEXT.add(total, value)
    return round_quantity(total)


def quantity_delta(current: Decimal, previous: Decimal) -> Decimal:
    """Return the rounded difference ``current - previous``."""
    return round_quantity(_ARITHMETIC_CONTEXT.subtract(current, previous))


def quantity_to_json(value: Decimal) -> int | Decimal:
    """Convert a quantity into a JSON number value.

    Integral values become ints so output reads ``10`` rather than ``10.000``.
    Fractional values stay exact decimals with trailing zeros stripped; the
    artifact writer emits them as bare JSON numbers.

    Args:
        value: Quantity to encode.

    Returns:
        Int or exact decimal.
    """
    rounded = round_quantity(value)
    if rounded == rounded.to_integral_value(context=_ARITHMETIC_CONTEXT):
        return int(rounded)
    return rounded.normalize(context=_ARITHMETIC_CONTEXT)


def quantity_to_text(value: Decimal) -> str:
    """Render a quantity as a fixed three-digit string for hashing."""
    return format(round_quantity(value), "f")


def _quantize(value: Decimal, context: Context) -> Decimal:
    rounded = value.quantize(QUANTITY_EXPONENT, rounding=QUANTITY_ROUNDING, context=context)
    # negative zero would hash differently from zero
    if rounded.is_zero():
        return ZERO
    return rounded
