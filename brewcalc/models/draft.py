"""
RecipeDraft: the working numeric profile of one recipe.

The editor owns one draft per open recipe and hands it to the propagation
service together with the fields the user touched. Persistence is not
handled here; use to_dict()/from_dict() at that boundary.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace

from django.db import models
from django.utils.translation import gettext_lazy as _

from brewcalc.exceptions import BrewCalcError
from brewcalc.models.ingredients import HopLine, MaltLine, YeastLine, coerce_lines
from brewcalc.normalizer import clamp_non_negative, clamp_percent, parse_optional

logger = logging.getLogger(__name__)


class DraftField(models.TextChoices):
    """Every field of a RecipeDraft, by attribute name."""

    BATCH_VOLUME = "batch_volume_liters", _("Ausschlagwürze (L)")
    EFFICIENCY = "efficiency_percent", _("Sudhausausbeute (%)")
    ORIGINAL_GRAVITY = "original_gravity_plato", _("Stammwürze (°P)")
    FINAL_GRAVITY = "final_gravity_plato", _("Restextrakt (°P)")
    ABV = "abv_percent", _("Alkohol (% vol)")
    COLOR = "color_ebc", _("Farbe (EBC)")
    IBU = "ibu", _("Bittere (IBU)")
    MASH_WATER = "mash_water_liters", _("Hauptguss (L)")
    SPARGE_WATER = "sparge_water_liters", _("Nachguss (L)")
    ATTENUATION = "attenuation_percent", _("Vergärungsgrad (%)")
    MALTS = "malts", _("Malze")
    HOPS = "hops", _("Hopfen")
    YEASTS = "yeasts", _("Hefen")

    @classmethod
    def resolve(cls, name) -> "DraftField":
        """
        Return the DraftField for a value or camelCase alias.

        Raises BrewCalcError('UNKNOWN_FIELD') for anything else.
        """
        if isinstance(name, cls):
            return name
        key = str(name)
        key = _CAMEL_ALIASES.get(key, _camel_to_snake(key))
        try:
            return cls(key)
        except ValueError:
            raise BrewCalcError("UNKNOWN_FIELD", field=name)


PERCENT_FIELDS = frozenset({DraftField.EFFICIENCY, DraftField.ATTENUATION})

LIST_FIELDS = frozenset({DraftField.MALTS, DraftField.HOPS, DraftField.YEASTS})

SCALAR_FIELDS = tuple(f for f in DraftField if f not in LIST_FIELDS)

# The editor's camelCase names where they differ from a plain conversion.
_CAMEL_ALIASES = {
    "colorEBC": "color_ebc",
    "IBU": "ibu",
}


# Keys used by older stored recipes. Only snapshot loading reads these;
# they are not valid field names for get/set/apply_edit.
_SNAPSHOT_ALIASES = {
    "batch_size_liters": "batch_volume_liters",
    "efficiency": "efficiency_percent",
    "og": "original_gravity_plato",
    "fg": "final_gravity_plato",
    "abv": "abv_percent",
    "color": "color_ebc",
    "attenuation": "attenuation_percent",
    "yeast": "yeasts",
}


def _camel_to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


@dataclass
class RecipeDraft:
    """
    Mutable numeric profile of a recipe.

    Any field may be None ("not set"). Derived fields (gravity, ABV,
    color, IBU, batch volume from water) are kept consistent by
    brewcalc.services.propagation.
    """

    batch_volume_liters: float | None = None
    efficiency_percent: float | None = None
    original_gravity_plato: float | None = None
    final_gravity_plato: float | None = None
    abv_percent: float | None = None
    color_ebc: float | None = None
    ibu: float | None = None
    mash_water_liters: float | None = None
    sparge_water_liters: float | None = None
    attenuation_percent: float | None = None
    malts: list[MaltLine] = field(default_factory=list)
    hops: list[HopLine] = field(default_factory=list)
    yeasts: list[YeastLine] = field(default_factory=list)

    def get(self, name):
        return getattr(self, DraftField.resolve(name).value)

    def set(self, name, value) -> None:
        setattr(self, DraftField.resolve(name).value, value)

    def copy(self) -> RecipeDraft:
        """Return an independent copy (line items are immutable)."""
        return replace(
            self,
            malts=list(self.malts),
            hops=list(self.hops),
            yeasts=list(self.yeasts),
        )

    def normalized(self) -> RecipeDraft:
        """
        Return a copy with every value inside its valid range.

        Masses and volumes are floored at zero, percentages clamped to
        [0, 100], and FG is capped at OG.
        """
        draft = self.copy()
        for f in SCALAR_FIELDS:
            value = getattr(draft, f.value)
            if f in PERCENT_FIELDS:
                setattr(draft, f.value, clamp_percent(value))
            else:
                setattr(draft, f.value, clamp_non_negative(value))

        draft.malts = [line.normalized() for line in draft.malts]
        draft.hops = [line.normalized() for line in draft.hops]
        draft.yeasts = [line.normalized() for line in draft.yeasts]
        draft.cap_final_gravity()
        return draft

    def cap_final_gravity(self) -> bool:
        """Cap FG at OG. Returns True if FG was changed."""
        og = self.original_gravity_plato
        fg = self.final_gravity_plato
        if og is None or fg is None or fg <= og:
            return False
        logger.warning(f"Final gravity {fg} above original gravity {og}, capping to OG")
        self.final_gravity_plato = og
        return True

    def to_dict(self) -> dict:
        data = {f.value: getattr(self, f.value) for f in SCALAR_FIELDS}
        data["malts"] = [line.to_dict() for line in self.malts]
        data["hops"] = [line.to_dict() for line in self.hops]
        data["yeasts"] = [line.to_dict() for line in self.yeasts]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> RecipeDraft:
        """
        Build a draft from an editor snapshot.

        Keys may be snake_case, camelCase or the short keys of older
        recipes ("og", "batch_size_liters", "yeast"); values may be numbers
        or user-entered text ("5,5"). A current key wins over an older alias
        of the same field. Unknown keys are ignored.
        """
        values = {}
        legacy = {}
        for key, raw in (data or {}).items():
            if key in _SNAPSHOT_ALIASES:
                legacy.setdefault(_SNAPSHOT_ALIASES[key], raw)
                continue
            try:
                name = DraftField.resolve(key).value
            except BrewCalcError:
                continue
            values.setdefault(name, raw)
        for name, raw in legacy.items():
            values.setdefault(name, raw)

        draft = cls(
            **{
                f.value: parse_optional(values.get(f.value))
                for f in SCALAR_FIELDS
            },
            malts=coerce_lines(MaltLine, values.get("malts")),
            hops=coerce_lines(HopLine, values.get("hops")),
            yeasts=coerce_lines(YeastLine, values.get("yeasts")),
        )
        return draft.normalized()
