"""
Brewcalc Settings.

Supports two formats (dict takes priority):

    # Option 1: Dict
    BREWCALC = {
        "GRAIN_ABSORPTION": 0.8,
        "PROCESS_LOSS": 0,
    }

    # Option 2: Flat
    BREWCALC_GRAIN_ABSORPTION = 0.8
    BREWCALC_PROCESS_LOSS = 0

All settings have sensible defaults, so the engine also works as a plain
library with Django settings left unconfigured.

Calibration constants (units in brackets):
    EXTRACT_YIELD     [°P·L/kg]  average extract potential of the grain bill
    ABV_FACTOR        [%/°P]     alcohol per degree of apparent extract loss
    GRAIN_ABSORPTION  [L/kg]     water retained by spent grain
    PROCESS_LOSS      [L]        boil-off plus trub loss per batch
    HOP_FORM_FACTOR   [-]        utilization bonus for pellet hops
    MASH_THICKNESS    [L/kg]     default water-to-grist ratio for planning
"""

from django.conf import settings

from brewcalc.exceptions import BrewCalcError


# ── Defaults ──

DEFAULTS = {
    "EXTRACT_YIELD": 75.0,
    "ABV_FACTOR": 0.525,
    "GRAIN_ABSORPTION": 0.96,
    "PROCESS_LOSS": 4.0,
    "HOP_FORM_FACTOR": 1.1,
    "MASH_THICKNESS": 3.5,
    "EMIT_SIGNALS": True,
}

CALIBRATION_KEYS = (
    "EXTRACT_YIELD",
    "ABV_FACTOR",
    "GRAIN_ABSORPTION",
    "PROCESS_LOSS",
    "HOP_FORM_FACTOR",
    "MASH_THICKNESS",
)


# ── Accessors ──

_sentinel = object()


def get_setting(name, default=_sentinel):
    """
    Get a brewcalc setting.

    Looks up in order:
    1. BREWCALC dict (e.g. BREWCALC = {"ABV_FACTOR": 0.52})
    2. Flat setting (e.g. BREWCALC_ABV_FACTOR = 0.52)
    3. DEFAULTS
    """
    if settings.configured:
        brewcalc_dict = getattr(settings, "BREWCALC", {})
        if name in brewcalc_dict:
            return brewcalc_dict[name]

        flat_value = getattr(settings, f"BREWCALC_{name}", _sentinel)
        if flat_value is not _sentinel:
            return flat_value

    if default is not _sentinel:
        return default

    return DEFAULTS.get(name)


def get_calibration(name: str) -> float:
    """
    Return a calibration constant as float.

    Raises BrewCalcError('INVALID_SETTING') for values that are not
    non-negative numbers, so a typo in settings fails loudly instead of
    skewing every recipe.
    """
    if name not in CALIBRATION_KEYS:
        raise BrewCalcError("INVALID_SETTING", name=name, reason="unknown")

    value = get_setting(name)
    if isinstance(value, bool):
        raise BrewCalcError("INVALID_SETTING", name=name, value=value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BrewCalcError("INVALID_SETTING", name=name, value=value)

    if number != number or number < 0:
        raise BrewCalcError("INVALID_SETTING", name=name, value=value)
    return number


def signals_enabled() -> bool:
    """Return True if draft_settled should be sent after each pass."""
    return bool(get_setting("EMIT_SIGNALS"))
