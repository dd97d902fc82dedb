"""
Parameter propagation.

Keeps derived measurements consistent with the ingredient bill and the
process parameters. The editor reports which fields the user touched;
a settling pass then runs two ordered phases, once each:

1. Water phase: mash/sparge water or malts changed
   → batch volume from the water balance.
2. Derived phase: anything feeding the measurements changed
   → OG, attenuation, FG, ABV, color, IBU (in that order, each step
   reading the values written by the steps before it).

There is no loop. A recomputed value within the field's dead zone is not
written, so a second pass over an unchanged draft writes nothing.

Usage:
    from brewcalc.services import propagate

    draft = propagate(draft, {"malts"})
"""

from __future__ import annotations

import logging

from django.db import models
from django.utils.translation import gettext_lazy as _

from brewcalc.conf import signals_enabled
from brewcalc.formulas import (
    EPSILON,
    abv_percent,
    batch_volume_from_water,
    color_ebc,
    final_gravity_plato,
    ibu,
    max_attenuation_percent,
    original_gravity_plato,
)
from brewcalc.models import DraftField, HopLine, MaltLine, RecipeDraft, YeastLine
from brewcalc.models.draft import LIST_FIELDS
from brewcalc.models.ingredients import coerce_lines
from brewcalc.normalizer import parse_optional
from brewcalc.results import FieldWrite, PropagationResult
from brewcalc.signals import draft_settled

logger = logging.getLogger(__name__)


class PropagationState(models.TextChoices):
    """Propagator lifecycle: IDLE → DIRTY → SETTLING → IDLE"""

    IDLE = "idle", _("Bereit")
    DIRTY = "dirty", _("Geändert")
    SETTLING = "settling", _("Wird berechnet")


# Batch volume itself is deliberately absent: a direct edit of the batch
# size must not be overwritten by its own water balance.
WATER_TRIGGERS = frozenset(
    {
        DraftField.MASH_WATER,
        DraftField.SPARGE_WATER,
        DraftField.MALTS,
    }
)

DERIVED_TRIGGERS = frozenset(
    {
        DraftField.BATCH_VOLUME,
        DraftField.ORIGINAL_GRAVITY,
        DraftField.FINAL_GRAVITY,
        DraftField.MALTS,
        DraftField.HOPS,
        DraftField.YEASTS,
        DraftField.EFFICIENCY,
        DraftField.ATTENUATION,
    }
)

_LINE_TYPES = {
    DraftField.MALTS: MaltLine,
    DraftField.HOPS: HopLine,
    DraftField.YEASTS: YeastLine,
}


class Propagator:
    """
    Runs settling passes for one editing session.

    One instance per open editor; it is not thread-safe and does not
    need to be, edits of a draft arrive one at a time.
    """

    def __init__(self):
        self.state = PropagationState.IDLE
        self.last_result: PropagationResult | None = None

    def mark_dirty(self, changed_fields) -> frozenset:
        """Record a change report. Unknown names raise UNKNOWN_FIELD."""
        if isinstance(changed_fields, str):
            changed_fields = [changed_fields]
        changed = frozenset(DraftField.resolve(f) for f in changed_fields)
        self.state = PropagationState.DIRTY
        return changed

    def settle(self, draft: RecipeDraft, changed_fields) -> PropagationResult:
        """
        Run one settling pass and return the updated copy of the draft.

        The caller's draft is not modified.
        """
        changed = self.mark_dirty(changed_fields)
        self.state = PropagationState.SETTLING
        try:
            working = draft.normalized()
            writes: list[FieldWrite] = []
            triggers = set(changed)

            if triggers & WATER_TRIGGERS and self._water_phase(working, writes):
                triggers.add(DraftField.BATCH_VOLUME)

            if triggers & DERIVED_TRIGGERS:
                self._derived_phase(working, writes)
        finally:
            self.state = PropagationState.IDLE

        result = PropagationResult(draft=working, changed_fields=changed, writes=writes)
        self.last_result = result

        if writes:
            logger.info(
                "Settled %s: wrote %s",
                sorted(f.value for f in changed),
                ", ".join(f"{w.field.value}={w.new:.4g}" for w in writes),
            )
        else:
            logger.debug("Settled %s: no writes", sorted(f.value for f in changed))

        self._notify(result)
        return result

    # ── Phases ──

    def _water_phase(self, draft: RecipeDraft, writes: list) -> bool:
        volume = batch_volume_from_water(
            draft.mash_water_liters, draft.sparge_water_liters, draft.malts
        )
        return self._write(draft, DraftField.BATCH_VOLUME, volume, writes)

    def _derived_phase(self, draft: RecipeDraft, writes: list) -> None:
        self._write(
            draft,
            DraftField.ORIGINAL_GRAVITY,
            original_gravity_plato(draft.malts, draft.batch_volume_liters, draft.efficiency_percent),
            writes,
        )
        self._write(
            draft,
            DraftField.ATTENUATION,
            max_attenuation_percent(draft.yeasts),
            writes,
        )
        self._write(
            draft,
            DraftField.FINAL_GRAVITY,
            final_gravity_plato(draft.original_gravity_plato, draft.attenuation_percent),
            writes,
        )

        # A lowered OG may leave a hand-entered FG above it.
        previous_fg = draft.final_gravity_plato
        if draft.cap_final_gravity():
            writes.append(
                FieldWrite(DraftField.FINAL_GRAVITY, previous_fg, draft.final_gravity_plato)
            )

        self._write(
            draft,
            DraftField.ABV,
            abv_percent(draft.original_gravity_plato, draft.final_gravity_plato),
            writes,
        )
        self._write(
            draft,
            DraftField.COLOR,
            color_ebc(draft.malts, draft.batch_volume_liters),
            writes,
        )
        self._write(
            draft,
            DraftField.IBU,
            ibu(draft.hops, draft.batch_volume_liters, draft.original_gravity_plato),
            writes,
        )

    def _write(self, draft: RecipeDraft, field: DraftField, value, writes: list) -> bool:
        """Store value unless it is undefined or inside the dead zone."""
        current = getattr(draft, field.value)
        if value is None:
            logger.debug("%s undefined, keeping %r", field.value, current)
            return False

        if current is not None and abs(value - current) <= EPSILON[field]:
            return False

        setattr(draft, field.value, value)
        writes.append(FieldWrite(field, current, value))
        return True

    def _notify(self, result: PropagationResult) -> None:
        if not signals_enabled():
            return

        responses = draft_settled.send_robust(
            sender=self.__class__,
            result=result,
            draft=result.draft,
            writes=result.writes,
        )
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.error(f"draft_settled receiver {receiver!r} failed: {response}")


def propagate(draft: RecipeDraft, changed_fields) -> RecipeDraft:
    """Run one settling pass and return the updated draft."""
    return Propagator().settle(draft, changed_fields).draft


def apply_edit(draft: RecipeDraft, field, raw, propagator: Propagator | None = None) -> PropagationResult:
    """
    Apply one user edit and settle.

    Scalar fields take the raw text the user typed ("5,5", "" to clear);
    invalid text counts as 0. Ingredient fields take a list of line items
    or editor dicts.

    Example:
        result = apply_edit(draft, "efficiency_percent", "72,5")
        draft = result.draft
    """
    field = DraftField.resolve(field)
    updated = draft.copy()

    if field in LIST_FIELDS:
        value = coerce_lines(_LINE_TYPES[field], raw)
    else:
        value = parse_optional(raw)

    updated.set(field, value)
    return (propagator or Propagator()).settle(updated, {field})
