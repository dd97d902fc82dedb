"""
Ingredient line items: malts, hops and yeasts.

Three distinct record types instead of a generic dict, so formulas can
rely on typed attributes and match exhaustively on BoilUsage.

Lines are immutable. Editing a line means replacing it in the draft's
list, which is also how the editor reports "malts changed".
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from django.db import models
from django.utils.translation import gettext_lazy as _

from brewcalc.normalizer import (
    clamp_non_negative,
    clamp_percent,
    parse_decimal,
    parse_optional,
)


class BoilUsage(models.TextChoices):
    """When a hop addition enters the process."""

    BOIL = "boil", _("Kochen")
    FIRST_WORT = "first_wort", _("Vorderwürzehopfung")
    WHIRLPOOL = "whirlpool", _("Whirlpool")
    MASH = "mash", _("Maische")
    DRY_HOP = "dry_hop", _("Hopfenstopfen")

    @classmethod
    def parse(cls, raw) -> "BoilUsage":
        """
        Map an editor label to a usage.

        Accepts values ("dry_hop") and the labels editors store
        ("Dry Hop", "First Wort"). Unknown or empty labels mean BOIL.
        """
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().lower().replace("-", "_").replace(" ", "_")
        key = _USAGE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.BOIL

    @property
    def isomerizes(self) -> bool:
        """True if the addition sees a rolling boil."""
        return self in (BoilUsage.BOIL, BoilUsage.FIRST_WORT)


_USAGE_ALIASES = {
    "dryhop": "dry_hop",
    "dry_hopping": "dry_hop",
    "firstwort": "first_wort",
    "fwh": "first_wort",
    "hopstand": "whirlpool",
    "aroma": "whirlpool",
}


@dataclass(frozen=True)
class MaltLine:
    """A grain bill entry. Mass in kg, color in EBC."""

    name: str
    mass_kg: float
    color_ebc: float | None = None

    def normalized(self) -> MaltLine:
        return replace(
            self,
            mass_kg=clamp_non_negative(parse_decimal(self.mass_kg)),
            color_ebc=clamp_non_negative(parse_optional(self.color_ebc)),
        )

    def to_dict(self) -> dict:
        return {"name": self.name, "mass_kg": self.mass_kg, "color_ebc": self.color_ebc}

    @classmethod
    def from_dict(cls, data: dict) -> MaltLine:
        """
        Build from an editor record.

        Accepts "mass_kg", "massKg" or the editor's "amount"; an "amount"
        in grams or pounds (per "unit") is converted to kg.
        """
        if "mass_kg" in data or "massKg" in data:
            mass = parse_decimal(data.get("mass_kg", data.get("massKg")))
        else:
            mass = parse_decimal(data.get("amount")) * _MASS_TO_KG.get(
                str(data.get("unit") or "kg").strip().lower(), 1.0
            )
        color = parse_optional(
            data.get("color_ebc", data.get("colorEBC", data.get("color")))
        )
        return cls(name=str(data.get("name") or ""), mass_kg=mass, color_ebc=color).normalized()


_MASS_TO_KG = {
    "kg": 1.0,
    "g": 0.001,
    "gramm": 0.001,
    "grams": 0.001,
    "lb": 0.453592,
    "lbs": 0.453592,
    "oz": 0.0283495,
}


@dataclass(frozen=True)
class HopLine:
    """A hop addition. Mass in grams, boil time in minutes."""

    name: str
    mass_grams: float
    alpha_acid_percent: float | None = None
    boil_time_minutes: float | None = None
    usage: BoilUsage = BoilUsage.BOIL

    def normalized(self) -> HopLine:
        return replace(
            self,
            mass_grams=clamp_non_negative(parse_decimal(self.mass_grams)),
            alpha_acid_percent=clamp_percent(parse_optional(self.alpha_acid_percent)),
            boil_time_minutes=clamp_non_negative(parse_optional(self.boil_time_minutes)),
            usage=BoilUsage.parse(self.usage),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "mass_grams": self.mass_grams,
            "alpha_acid_percent": self.alpha_acid_percent,
            "boil_time_minutes": self.boil_time_minutes,
            "usage": self.usage.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> HopLine:
        mass = data.get("mass_grams", data.get("massGrams", data.get("amount")))
        alpha = data.get("alpha_acid_percent", data.get("alphaAcidPercent", data.get("alpha")))
        time = data.get("boil_time_minutes", data.get("boilTimeMinutes", data.get("time")))
        return cls(
            name=str(data.get("name") or ""),
            mass_grams=parse_decimal(mass),
            alpha_acid_percent=parse_optional(alpha),
            boil_time_minutes=parse_optional(time),
            usage=BoilUsage.parse(data.get("usage")),
        ).normalized()


@dataclass(frozen=True)
class YeastLine:
    """A yeast strain with its apparent attenuation."""

    name: str
    attenuation_percent: float | None = None

    def normalized(self) -> YeastLine:
        return replace(
            self,
            attenuation_percent=clamp_percent(parse_optional(self.attenuation_percent)),
        )

    def to_dict(self) -> dict:
        return {"name": self.name, "attenuation_percent": self.attenuation_percent}

    @classmethod
    def from_dict(cls, data: dict) -> YeastLine:
        attenuation = data.get(
            "attenuation_percent", data.get("attenuationPercent", data.get("attenuation"))
        )
        return cls(
            name=str(data.get("name") or ""),
            attenuation_percent=parse_optional(attenuation),
        ).normalized()


def coerce_lines(line_type, raw) -> list:
    """
    Turn stored line data into a list of line_type.

    Accepts a list of line objects, editor dicts or bare names, and also a
    single dict or name (older recipes keep one yeast as "US-05").
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, (dict, str, line_type)):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        return []

    lines = []
    for item in raw:
        if isinstance(item, line_type):
            lines.append(item)
        elif isinstance(item, dict):
            lines.append(line_type.from_dict(item))
        elif isinstance(item, str):
            lines.append(line_type.from_dict({"name": item}))
    return lines
