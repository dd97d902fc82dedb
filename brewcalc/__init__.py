"""
Django Brewcalc - Recipe parameter propagation engine.

Keeps a brewing recipe's measurements (gravity, alcohol, color,
bitterness, batch volume) consistent with its ingredient bill and
process parameters.

Usage:
    from brewcalc import brew, RecipeDraft, MaltLine, HopLine

    draft = RecipeDraft(batch_volume_liters=20, efficiency_percent=75)
    draft.malts = [MaltLine("Pilsner", 5.0, color_ebc=3.5)]
    draft.hops = [HopLine("Magnum", 30, alpha_acid_percent=12, boil_time_minutes=60)]

    draft = brew.propagate(draft, {"malts", "hops"})
    print(draft.original_gravity_plato, draft.ibu)

    explanation = brew.explain("ibu", draft)
    print(explanation.formula_name)  # Tinseth

Nothing here touches the database; Django provides settings, signals and
template filters.
"""

from brewcalc.exceptions import BrewCalcError


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in ("brew", "Brew"):
        from brewcalc.service import Brew

        return Brew
    if name in ("RecipeDraft", "DraftField", "MaltLine", "HopLine", "YeastLine", "BoilUsage"):
        from brewcalc import models

        return getattr(models, name)
    if name in ("propagate", "apply_edit", "explain"):
        from brewcalc import services

        return getattr(services, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "brew",
    "Brew",
    "BrewCalcError",
    "RecipeDraft",
    "DraftField",
    "MaltLine",
    "HopLine",
    "YeastLine",
    "BoilUsage",
    "propagate",
    "apply_edit",
    "explain",
]
__version__ = "0.1.0"
