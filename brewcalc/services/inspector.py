"""
Formula inspector.

Explains a derived field: which formula, which inputs, which
intermediate values. It calls the same *_details() functions the
propagation service uses, reading the draft without changing it.

Usage:
    from brewcalc.services import explain

    explanation = explain("ibu", draft)
    for hop in explanation.contributions:
        print(f"{hop['name']}: {hop['ibu']:.1f} IBU")
"""

from __future__ import annotations

from brewcalc import formulas
from brewcalc.exceptions import BrewCalcError
from brewcalc.models import DraftField, RecipeDraft
from brewcalc.results import Explanation, FormulaInput


def _grain_input(draft: RecipeDraft) -> FormulaInput:
    return FormulaInput("malts", formulas.total_grain_kg(draft.malts), "kg")


def _volume_input(draft: RecipeDraft) -> FormulaInput:
    return FormulaInput("batch_volume_liters", draft.batch_volume_liters, "L")


def _og_input(draft: RecipeDraft) -> FormulaInput:
    return FormulaInput("original_gravity_plato", draft.original_gravity_plato, "°P")


def _explain_original_gravity(draft):
    trace = formulas.original_gravity_details(
        draft.malts, draft.batch_volume_liters, draft.efficiency_percent
    )
    inputs = [
        _grain_input(draft),
        _volume_input(draft),
        FormulaInput("efficiency_percent", draft.efficiency_percent, "%"),
    ]
    return trace, inputs


def _explain_attenuation(draft):
    trace = formulas.max_attenuation_details(draft.yeasts)
    inputs = [FormulaInput("yeasts", [y.name for y in draft.yeasts])]
    return trace, inputs


def _explain_final_gravity(draft):
    trace = formulas.final_gravity_details(
        draft.original_gravity_plato, draft.attenuation_percent
    )
    inputs = [
        _og_input(draft),
        FormulaInput("attenuation_percent", draft.attenuation_percent, "%"),
    ]
    return trace, inputs


def _explain_abv(draft):
    trace = formulas.abv_details(draft.original_gravity_plato, draft.final_gravity_plato)
    inputs = [
        _og_input(draft),
        FormulaInput("final_gravity_plato", draft.final_gravity_plato, "°P"),
    ]
    return trace, inputs


def _explain_color(draft):
    trace = formulas.color_details(draft.malts, draft.batch_volume_liters)
    return trace, [_grain_input(draft), _volume_input(draft)]


def _explain_ibu(draft):
    trace = formulas.ibu_details(
        draft.hops, draft.batch_volume_liters, draft.original_gravity_plato
    )
    inputs = [
        FormulaInput("hops", sum(h.mass_grams for h in draft.hops), "g"),
        _volume_input(draft),
        _og_input(draft),
    ]
    return trace, inputs


def _explain_batch_volume(draft):
    trace = formulas.batch_volume_details(
        draft.mash_water_liters, draft.sparge_water_liters, draft.malts
    )
    inputs = [
        FormulaInput("mash_water_liters", draft.mash_water_liters, "L"),
        FormulaInput("sparge_water_liters", draft.sparge_water_liters, "L"),
        _grain_input(draft),
    ]
    return trace, inputs


EXPLAINERS = {
    DraftField.ORIGINAL_GRAVITY: _explain_original_gravity,
    DraftField.ATTENUATION: _explain_attenuation,
    DraftField.FINAL_GRAVITY: _explain_final_gravity,
    DraftField.ABV: _explain_abv,
    DraftField.COLOR: _explain_color,
    DraftField.IBU: _explain_ibu,
    DraftField.BATCH_VOLUME: _explain_batch_volume,
}


def explain(field, draft: RecipeDraft) -> Explanation:
    """
    Explain how `field` is derived from the current draft.

    Raises BrewCalcError('UNKNOWN_FIELD') for names outside the draft and
    BrewCalcError('NOT_EXPLAINABLE') for pure inputs such as hops.
    """
    field = DraftField.resolve(field)
    explainer = EXPLAINERS.get(field)
    if explainer is None:
        raise BrewCalcError("NOT_EXPLAINABLE", field=field.value)

    view = draft.normalized()
    trace, inputs = explainer(view)
    return Explanation(
        field=field,
        formula_name=trace.name,
        inputs_used=inputs,
        intermediate_values=list(trace.intermediates.items()),
        result=trace.result,
        stored_value=getattr(view, field.value),
        epsilon=formulas.EPSILON[field],
        contributions=list(trace.contributions),
    )
