"""
Tests for brewcalc.models (ingredient lines and RecipeDraft).
"""

import pytest

from brewcalc.exceptions import BrewCalcError
from brewcalc.models import (
    BoilUsage,
    DraftField,
    HopLine,
    MaltLine,
    RecipeDraft,
    YeastLine,
)


# ═══════════════════════════════════════════════════════════════════
# BoilUsage
# ═══════════════════════════════════════════════════════════════════


class TestBoilUsage:
    """Tests for BoilUsage.parse() and isomerizes."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("boil", BoilUsage.BOIL),
            ("Boil", BoilUsage.BOIL),
            ("Dry Hop", BoilUsage.DRY_HOP),
            ("dry-hop", BoilUsage.DRY_HOP),
            ("First Wort", BoilUsage.FIRST_WORT),
            ("FWH", BoilUsage.FIRST_WORT),
            ("Whirlpool", BoilUsage.WHIRLPOOL),
            ("Mash", BoilUsage.MASH),
            (BoilUsage.MASH, BoilUsage.MASH),
        ],
    )
    def test_parse_labels(self, raw, expected):
        assert BoilUsage.parse(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "unknown"])
    def test_unknown_defaults_to_boil(self, raw):
        assert BoilUsage.parse(raw) == BoilUsage.BOIL

    def test_only_boil_and_first_wort_isomerize(self):
        assert {u for u in BoilUsage if u.isomerizes} == {
            BoilUsage.BOIL,
            BoilUsage.FIRST_WORT,
        }


# ═══════════════════════════════════════════════════════════════════
# Lines
# ═══════════════════════════════════════════════════════════════════


class TestLines:
    """Tests for MaltLine, HopLine and YeastLine."""

    def test_malt_from_editor_record(self):
        malt = MaltLine.from_dict({"name": "Pilsner", "amount": "4,5", "unit": "kg", "color_ebc": "3,5"})
        assert malt == MaltLine("Pilsner", 4.5, 3.5)

    def test_malt_amount_in_grams(self):
        malt = MaltLine.from_dict({"name": "Carafa", "amount": "500", "unit": "g"})
        assert malt.mass_kg == pytest.approx(0.5)
        assert malt.color_ebc is None

    def test_malt_negative_mass_clamped(self):
        assert MaltLine.from_dict({"name": "x", "mass_kg": "-2"}).mass_kg == 0.0

    def test_malt_camel_case_mass(self):
        malt = MaltLine.from_dict({"name": "Pilsner", "massKg": 5, "colorEBC": 3.5})
        assert malt == MaltLine("Pilsner", 5.0, 3.5)

    def test_missing_mass_normalizes_to_zero(self):
        assert MaltLine("Pilsner", None).normalized().mass_kg == 0.0
        assert HopLine("Magnum", None, 12, 60).normalized().mass_grams == 0.0

    def test_text_values_normalize_to_numbers(self):
        hop = HopLine("Magnum", "30", "12,5", "60").normalized()
        assert (hop.mass_grams, hop.alpha_acid_percent, hop.boil_time_minutes) == (30.0, 12.5, 60.0)

    def test_hop_from_editor_record(self):
        hop = HopLine.from_dict(
            {"name": "Citra", "amount": "50", "alpha": "12,5", "time": "0", "usage": "Dry Hop"}
        )
        assert hop.mass_grams == 50.0
        assert hop.alpha_acid_percent == 12.5
        assert hop.boil_time_minutes == 0.0
        assert hop.usage == BoilUsage.DRY_HOP

    def test_hop_defaults(self):
        hop = HopLine.from_dict({"name": "Magnum", "amount": "20"})
        assert hop.usage == BoilUsage.BOIL
        assert hop.alpha_acid_percent is None
        assert hop.boil_time_minutes is None

    def test_hop_alpha_clamped(self):
        hop = HopLine("x", 10, alpha_acid_percent=120).normalized()
        assert hop.alpha_acid_percent == 100.0

    def test_yeast_attenuation_clamped(self):
        assert YeastLine("US-05", -5).normalized().attenuation_percent == 0.0
        assert YeastLine.from_dict({"name": "W-34/70", "attenuation": "83"}).attenuation_percent == 83.0

    def test_to_dict(self):
        hop = HopLine("Magnum", 30, 12, 60, BoilUsage.FIRST_WORT)
        assert hop.to_dict() == {
            "name": "Magnum",
            "mass_grams": 30,
            "alpha_acid_percent": 12,
            "boil_time_minutes": 60,
            "usage": "first_wort",
        }


# ═══════════════════════════════════════════════════════════════════
# DraftField
# ═══════════════════════════════════════════════════════════════════


class TestDraftField:
    """Tests for DraftField.resolve()."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("ibu", DraftField.IBU),
            ("IBU", DraftField.IBU),
            ("colorEBC", DraftField.COLOR),
            ("batchVolumeLiters", DraftField.BATCH_VOLUME),
            ("originalGravityPlato", DraftField.ORIGINAL_GRAVITY),
            ("efficiency_percent", DraftField.EFFICIENCY),
            (DraftField.MALTS, DraftField.MALTS),
        ],
    )
    def test_resolve(self, name, expected):
        assert DraftField.resolve(name) == expected

    def test_unknown_field_raises(self):
        with pytest.raises(BrewCalcError) as exc:
            DraftField.resolve("gravity")
        assert exc.value.code == "UNKNOWN_FIELD"
        assert exc.value.as_dict() == {
            "code": "UNKNOWN_FIELD",
            "message": "not a recipe draft field",
            "field": "gravity",
        }


# ═══════════════════════════════════════════════════════════════════
# RecipeDraft
# ═══════════════════════════════════════════════════════════════════


class TestRecipeDraft:
    """Tests for RecipeDraft."""

    def test_blank_draft(self):
        draft = RecipeDraft()
        assert draft.batch_volume_liters is None
        assert draft.malts == []

    def test_get_and_set_by_name(self):
        draft = RecipeDraft()
        draft.set("batchVolumeLiters", 20.0)
        assert draft.get(DraftField.BATCH_VOLUME) == 20.0

    def test_copy_is_independent(self):
        draft = RecipeDraft(malts=[MaltLine("Pilsner", 5)])
        clone = draft.copy()
        clone.malts.append(MaltLine("Munich", 1))
        clone.batch_volume_liters = 10
        assert len(draft.malts) == 1
        assert draft.batch_volume_liters is None

    def test_normalized_clamps_ranges(self):
        draft = RecipeDraft(
            batch_volume_liters=-3,
            efficiency_percent=120,
            attenuation_percent=-10,
            malts=[MaltLine("x", -1)],
        ).normalized()
        assert draft.batch_volume_liters == 0.0
        assert draft.efficiency_percent == 100.0
        assert draft.attenuation_percent == 0.0
        assert draft.malts[0].mass_kg == 0.0

    def test_normalized_caps_final_gravity(self):
        draft = RecipeDraft(original_gravity_plato=10, final_gravity_plato=12).normalized()
        assert draft.final_gravity_plato == 10

    def test_from_dict_with_editor_snapshot(self):
        draft = RecipeDraft.from_dict(
            {
                "batchVolumeLiters": "20",
                "efficiencyPercent": "72,5",
                "colorEBC": "",
                "style": "Pils",
                "malts": [{"name": "Pilsner", "amount": "5", "color_ebc": "3"}],
                "hops": [{"name": "Saaz", "amount": "40", "alpha": "3,5", "time": "60", "usage": "Boil"}],
                "yeasts": [{"name": "W-34/70", "attenuation": "83"}],
            }
        )
        assert draft.batch_volume_liters == 20.0
        assert draft.efficiency_percent == 72.5
        assert draft.color_ebc is None
        assert draft.malts == [MaltLine("Pilsner", 5.0, 3.0)]
        assert draft.hops[0].alpha_acid_percent == 3.5
        assert draft.yeasts == [YeastLine("W-34/70", 83.0)]

    def test_from_dict_with_older_recipe_keys(self):
        draft = RecipeDraft.from_dict(
            {
                "batch_size_liters": "20",
                "efficiency": "75",
                "og": "12,5",
                "fg": "2,5",
                "abv": "5,2",
                "color": "8",
                "attenuation": "80",
                "yeast": [{"name": "US-05", "attenuation": "81"}],
            }
        )
        assert draft.batch_volume_liters == 20.0
        assert draft.efficiency_percent == 75.0
        assert draft.original_gravity_plato == 12.5
        assert draft.final_gravity_plato == 2.5
        assert draft.abv_percent == 5.2
        assert draft.color_ebc == 8.0
        assert draft.attenuation_percent == 80.0
        assert draft.yeasts == [YeastLine("US-05", 81.0)]

    def test_from_dict_single_yeast_name(self):
        assert RecipeDraft.from_dict({"yeast": "US-05"}).yeasts == [YeastLine("US-05")]

    def test_from_dict_current_key_wins_over_older_alias(self):
        draft = RecipeDraft.from_dict({"og": "10", "originalGravityPlato": "12"})
        assert draft.original_gravity_plato == 12.0

    def test_older_keys_are_not_field_names(self):
        with pytest.raises(BrewCalcError):
            DraftField.resolve("og")

    def test_from_dict_skips_malformed_lines(self):
        draft = RecipeDraft.from_dict({"malts": [42, None, {"name": "Munich", "amount": "1"}], "hops": "x"})
        assert draft.malts == [MaltLine("Munich", 1.0)]
        assert draft.hops == [HopLine("x", 0.0)]

    def test_from_dict_garbage_is_zero(self):
        draft = RecipeDraft.from_dict({"ibu": "lots", "abvPercent": "-4"})
        assert draft.ibu == 0.0
        assert draft.abv_percent == 0.0

    def test_to_dict_round_trip(self):
        draft = RecipeDraft(
            batch_volume_liters=20.0,
            efficiency_percent=75.0,
            malts=[MaltLine("Pilsner", 5.0, 3.5)],
            hops=[HopLine("Magnum", 30.0, 12.0, 60.0)],
            yeasts=[YeastLine("US-05", 78.0)],
        )
        data = draft.to_dict()
        assert data["malts"] == [{"name": "Pilsner", "mass_kg": 5.0, "color_ebc": 3.5}]
        assert RecipeDraft.from_dict(data) == draft
