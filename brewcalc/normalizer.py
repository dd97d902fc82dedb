"""
Unit normalization for user-entered numbers.

Editors hand us whatever the user typed: "5,5", " 12.0 ", "" or None.
Everything is turned into a float here, clamped into its valid range, and
rendered back to text with field-appropriate precision.

Usage:
    from brewcalc.normalizer import parse_decimal, format_decimal

    parse_decimal("5,5")          # 5.5
    parse_decimal("abc")          # 0.0
    format_decimal(5.6000000001, 2)  # "5.60"
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

# Display precision (fractional digits) per draft field.
FIELD_PRECISION = {
    "batch_volume_liters": 1,
    "efficiency_percent": 0,
    "original_gravity_plato": 1,
    "final_gravity_plato": 1,
    "abv_percent": 1,
    "color_ebc": 0,
    "ibu": 0,
    "mash_water_liters": 1,
    "sparge_water_liters": 1,
    "attenuation_percent": 0,
}

DEFAULT_PRECISION = 2

# Digits with at most one decimal separator, optionally signed.
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+(?:[.,]\d*)?|[.,]\d+)$")


def parse_optional(raw) -> float | None:
    """
    Parse a number, keeping "no value" apart from zero.

    None and blank strings return None; anything else is parsed with
    parse_decimal().
    """
    if raw is None:
        return None
    if isinstance(raw, str) and not raw.strip():
        return None
    return parse_decimal(raw)


def parse_decimal(raw) -> float:
    """
    Parse user input into a float.

    Both "." and "," are accepted as decimal separator. Text must be digits
    with at most one separator; exponents, digit grouping and anything else
    unparsable returns 0.0, as does non-finite input. Never raises.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0

    if isinstance(raw, (int, float, Decimal)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not _DECIMAL_RE.match(text):
            return 0.0
        value = float(text.replace(",", "."))

    if not math.isfinite(value):
        return 0.0
    return value


def clamp_non_negative(value):
    """Floor a value at zero. None passes through."""
    if value is None:
        return None
    return max(0.0, float(value))


def clamp_percent(value):
    """Clamp a percentage into [0, 100]. None passes through."""
    if value is None:
        return None
    return min(100.0, max(0.0, float(value)))


def format_decimal(value, precision: int) -> str:
    """
    Round half-up to `precision` fractional digits.

    Goes through the shortest repr of the float, so binary artifacts such
    as 5.6000000001 never leak into the output, and never uses exponent
    notation.
    """
    precision = max(0, int(precision))
    try:
        number = Decimal(repr(float(value)))
    except (TypeError, ValueError, InvalidOperation):
        number = Decimal("0")
    if not number.is_finite():
        number = Decimal("0")

    quantum = Decimal(1).scaleb(-precision)
    try:
        with localcontext() as ctx:
            ctx.prec = 60
            rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Too many digits to quantize; such values are never fractional.
        return f"{number:f}"
    if rounded.is_zero():
        rounded = abs(rounded)
    return f"{rounded:f}"


def format_field(field: str, value) -> str:
    """Format a draft field value for display. None renders as ""."""
    if value is None:
        return ""
    return format_decimal(value, FIELD_PRECISION.get(str(field), DEFAULT_PRECISION))
