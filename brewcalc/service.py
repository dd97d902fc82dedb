"""
Brewcalc Service - Thin wrapper over services.

Usage:
    from brewcalc import brew, RecipeDraft, MaltLine

    draft = RecipeDraft(batch_volume_liters=20, efficiency_percent=75)
    result = brew.edit(draft, "malts", [MaltLine("Pilsner", 5.0, 3.5)])
    draft = result.draft

    brew.explain("original_gravity_plato", draft).result
    brew.display_color(draft.color_ebc)
"""

from brewcalc.formulas import ebc_to_display_color, water_profile
from brewcalc.models import RecipeDraft
from brewcalc.services.inspector import explain
from brewcalc.services.propagation import apply_edit, propagate


class Brew:
    """
    Main API for Brewcalc (thin wrapper).

    Stateless: every call takes the draft it works on.
    """

    @classmethod
    def propagate(cls, draft: RecipeDraft, changed_fields) -> RecipeDraft:
        """Settle a draft after the editor reports changed fields."""
        return propagate(draft, changed_fields)

    @classmethod
    def edit(cls, draft: RecipeDraft, field, raw):
        """Apply one user edit (raw text or ingredient list) and settle."""
        return apply_edit(draft, field, raw)

    @classmethod
    def explain(cls, field, draft: RecipeDraft):
        return explain(field, draft)

    @classmethod
    def load(cls, data: dict) -> RecipeDraft:
        """
        Build a draft from a stored snapshot and settle every derived field.

        Stored measurements that still match their inputs within the dead
        zone are kept as they are.
        """
        draft = RecipeDraft.from_dict(data)
        return propagate(draft, {"malts", "hops", "yeasts"})

    @classmethod
    def display_color(cls, ebc) -> str:
        return ebc_to_display_color(ebc)

    @classmethod
    def plan_water(cls, draft: RecipeDraft, mash_thickness=None):
        """Mash/sparge split needed to reach the draft's batch volume."""
        view = draft.normalized()
        return water_profile(view.batch_volume_liters, view.malts, mash_thickness)
