"""
Tests for brewcalc.services.inspector.

The inspector must reproduce stored values with the same formulas the
propagation service uses, and must never change the draft.
"""

import pytest

from brewcalc.exceptions import BrewCalcError
from brewcalc.formulas import EPSILON
from brewcalc.models import BoilUsage, DraftField, HopLine, MaltLine, RecipeDraft, YeastLine
from brewcalc.services import explain, propagate

DERIVED = [
    DraftField.ORIGINAL_GRAVITY,
    DraftField.ATTENUATION,
    DraftField.FINAL_GRAVITY,
    DraftField.ABV,
    DraftField.COLOR,
    DraftField.IBU,
]


@pytest.fixture
def settled():
    draft = RecipeDraft(
        batch_volume_liters=20.0,
        efficiency_percent=72.0,
        mash_water_liters=16.0,
        sparge_water_liters=14.0,
        malts=[MaltLine("Pilsner", 4.0, color_ebc=3.5), MaltLine("Munich", 1.0, color_ebc=15.0)],
        hops=[
            HopLine("Magnum", 25.0, 13.0, 60.0),
            HopLine("Mosaic", 40.0, 12.0, 0.0, BoilUsage.DRY_HOP),
        ],
        yeasts=[YeastLine("US-05", 78.0)],
    )
    return propagate(draft, {"malts", "hops", "yeasts", "mash_water_liters"})


class TestExplain:
    """Tests for explain()."""

    @pytest.mark.parametrize("field", DERIVED)
    def test_reproduces_stored_value(self, settled, field):
        explanation = explain(field, settled)
        assert explanation.result == settled.get(field)
        assert explanation.stored_value == settled.get(field)
        assert explanation.is_consistent

    def test_batch_volume_from_water(self, settled):
        explanation = explain("batch_volume_liters", settled)
        assert explanation.formula_name == "Water balance"
        assert explanation.result == settled.batch_volume_liters
        names = [i.name for i in explanation.inputs_used]
        assert names == ["mash_water_liters", "sparge_water_liters", "malts"]

    def test_formula_names(self, settled):
        assert explain("original_gravity_plato", settled).formula_name == "Extract balance"
        assert explain("abv_percent", settled).formula_name == "Balling"
        assert explain("colorEBC", settled).formula_name == "Morey"
        assert explain("ibu", settled).formula_name == "Tinseth"

    def test_ibu_contributions_per_hop(self, settled):
        explanation = explain("ibu", settled)
        by_name = {c["name"]: c for c in explanation.contributions}
        assert by_name["Mosaic"]["ibu"] == 0.0
        assert by_name["Magnum"]["ibu"] == pytest.approx(explanation.result)
        intermediates = dict(explanation.intermediate_values)
        assert intermediates["hop_form_factor"] == 1.1
        assert 0 < intermediates["bigness_factor"] < 1.65

    def test_inputs_with_units(self, settled):
        explanation = explain("original_gravity_plato", settled)
        inputs = {i.name: (i.value, i.unit) for i in explanation.inputs_used}
        assert inputs == {
            "malts": (5.0, "kg"),
            "batch_volume_liters": (settled.batch_volume_liters, "L"),
            "efficiency_percent": (72.0, "%"),
        }

    def test_detects_stale_value(self, settled):
        stale = settled.copy()
        stale.ibu = 5.0
        explanation = explain("ibu", stale)
        assert not explanation.is_consistent
        assert explanation.stored_value == 5.0
        assert explanation.epsilon == EPSILON[DraftField.IBU]

    def test_undefined_result_is_consistent(self):
        explanation = explain("ibu", RecipeDraft(ibu=30.0))
        assert explanation.result is None
        assert explanation.is_consistent

    def test_read_only(self, settled):
        snapshot = settled.copy()
        for field in DERIVED:
            explain(field, settled)
        assert settled == snapshot

    def test_as_dict(self, settled):
        data = explain("final_gravity_plato", settled).as_dict()
        assert data["field"] == "final_gravity_plato"
        assert data["formula_name"] == "Apparent attenuation"
        assert data["inputs_used"][1] == {"name": "attenuation_percent", "value": 78.0, "unit": "%"}
        assert data["is_consistent"] is True

    def test_input_fields_not_explainable(self, settled):
        with pytest.raises(BrewCalcError) as exc:
            explain("hops", settled)
        assert exc.value.code == "NOT_EXPLAINABLE"

    def test_unknown_field(self, settled):
        with pytest.raises(BrewCalcError) as exc:
            explain("bitterness", settled)
        assert exc.value.code == "UNKNOWN_FIELD"
