"""
Brewing formulas.

Every function here is pure and total: missing inputs or a batch volume
of zero give None ("undefined"), never an exception. Each derived value
has a *_details() variant returning a FormulaTrace with the intermediate
values; the plain function returns trace.result, so the inspector and
the propagation service always agree bit for bit.

Models used:
    Original gravity   extract balance (average malt potential)
    Final gravity      apparent attenuation
    ABV                Balling-style linear extract loss
    Color              Morey
    Bitterness         Tinseth
    Batch volume       water balance (absorption and process loss)

Calibration constants come from brewcalc.conf and can be tuned per
deployment; the fixed curve coefficients below are the published ones.
"""

from __future__ import annotations

import math

from brewcalc.conf import get_calibration
from brewcalc.models import BoilUsage, DraftField
from brewcalc.results import FormulaTrace, WaterPlan

# ── Unit conversions ──

LBS_PER_KG = 2.20462
GAL_PER_LITER = 0.264172
EBC_TO_SRM = 0.508

# ── Morey ──

MOREY_FACTOR = 1.4922
MOREY_EXPONENT = 0.6859

# ── Tinseth ──

TINSETH_BIGNESS_FACTOR = 1.65
TINSETH_BIGNESS_BASE = 0.000125
TINSETH_TIME_RATE = 0.04
TINSETH_TIME_CEILING = 4.15
# Boil gravity estimate: 1 °P ≈ 4 gravity points.
SG_PER_PLATO = 0.004

# Isomerization relative to a rolling boil.
USAGE_UTILIZATION = {
    BoilUsage.BOIL: 1.0,
    BoilUsage.FIRST_WORT: 1.0,
    BoilUsage.WHIRLPOOL: 0.0,
    BoilUsage.MASH: 0.0,
    BoilUsage.DRY_HOP: 0.0,
}

# Dead zone per derived field: a recomputed value closer than this to the
# stored one is not written.
EPSILON = {
    DraftField.ORIGINAL_GRAVITY: 0.002,
    DraftField.ATTENUATION: 0.1,
    DraftField.FINAL_GRAVITY: 0.002,
    DraftField.ABV: 0.1,
    DraftField.COLOR: 0.5,
    DraftField.IBU: 0.5,
    DraftField.BATCH_VOLUME: 0.5,
}

OG_FORMULA = "Extract balance"
ATTENUATION_FORMULA = "Maximum yeast attenuation"
FG_FORMULA = "Apparent attenuation"
ABV_FORMULA = "Balling"
COLOR_FORMULA = "Morey"
IBU_FORMULA = "Tinseth"
BATCH_VOLUME_FORMULA = "Water balance"


def _positive(value) -> bool:
    return value is not None and value > 0


# ══════════════════════════════════════════════════════════════
# CONVERSIONS
# ══════════════════════════════════════════════════════════════


def sg_to_plato(sg: float) -> float:
    """Specific gravity to °Plato (cubic fit)."""
    if sg <= 0:
        return 0.0
    return -616.868 + 1111.14 * sg - 630.272 * sg**2 + 135.997 * sg**3


def plato_to_sg(plato: float) -> float:
    """°Plato to specific gravity (Lincoln equation)."""
    return 1 + (plato / (258.6 - ((plato / 258.2) * 227.1)))


def ebc_to_srm(ebc: float) -> float:
    return ebc * EBC_TO_SRM


def srm_to_ebc(srm: float) -> float:
    return srm / EBC_TO_SRM


def total_grain_kg(malts) -> float:
    return sum(m.mass_kg for m in malts)


# ══════════════════════════════════════════════════════════════
# GRAVITY
# ══════════════════════════════════════════════════════════════


def original_gravity_details(malts, batch_volume_liters, efficiency_percent) -> FormulaTrace:
    """
    OG from the grain bill.

    extract [°P·L] = Σ mass_kg × EXTRACT_YIELD × efficiency / 100
    OG [°P]        = extract / batch volume

    Individual malt potential is not tracked; EXTRACT_YIELD is the
    average potential of a typical base malt.
    """
    if not _positive(batch_volume_liters) or efficiency_percent is None or not malts:
        return FormulaTrace(OG_FORMULA, None)

    extract_yield = get_calibration("EXTRACT_YIELD")
    efficiency = efficiency_percent / 100
    grain_kg = total_grain_kg(malts)
    extract = grain_kg * extract_yield * efficiency
    og = extract / batch_volume_liters

    contributions = [
        {
            "name": m.name,
            "mass_kg": m.mass_kg,
            "plato": m.mass_kg * extract_yield * efficiency / batch_volume_liters,
        }
        for m in malts
    ]
    return FormulaTrace(
        OG_FORMULA,
        og,
        intermediates={
            "total_grain_kg": grain_kg,
            "extract_yield": extract_yield,
            "efficiency": efficiency,
            "extract_plato_liters": extract,
            "specific_gravity": plato_to_sg(og),
        },
        contributions=contributions,
    )


def original_gravity_plato(malts, batch_volume_liters, efficiency_percent) -> float | None:
    return original_gravity_details(malts, batch_volume_liters, efficiency_percent).result


def max_attenuation_details(yeasts) -> FormulaTrace:
    """
    Highest attenuation among the yeasts.

    Blends are pitched for robustness; the most attenuative strain
    sets the floor of the final gravity.
    """
    specified = [y for y in yeasts if y.attenuation_percent is not None]
    if not specified:
        return FormulaTrace(ATTENUATION_FORMULA, None)

    best = max(specified, key=lambda y: y.attenuation_percent)
    return FormulaTrace(
        ATTENUATION_FORMULA,
        best.attenuation_percent,
        intermediates={"strain": best.name, "candidates": len(specified)},
        contributions=[
            {"name": y.name, "attenuation_percent": y.attenuation_percent}
            for y in specified
        ],
    )


def max_attenuation_percent(yeasts) -> float | None:
    return max_attenuation_details(yeasts).result


def final_gravity_details(original_gravity_plato, attenuation_percent) -> FormulaTrace:
    """FG [°P] = OG × (1 − attenuation / 100)"""
    if original_gravity_plato is None or attenuation_percent is None:
        return FormulaTrace(FG_FORMULA, None)

    remaining = 1 - attenuation_percent / 100
    fg = original_gravity_plato * remaining
    return FormulaTrace(
        FG_FORMULA,
        fg,
        intermediates={
            "remaining_extract_fraction": remaining,
            "specific_gravity": plato_to_sg(fg),
        },
    )


def final_gravity_plato(original_gravity_plato, attenuation_percent) -> float | None:
    return final_gravity_details(original_gravity_plato, attenuation_percent).result


def abv_details(original_gravity_plato, final_gravity_plato) -> FormulaTrace:
    """
    ABV [%] = (OG − FG) × ABV_FACTOR

    Linear approximation of Balling's relation between apparent extract
    loss and alcohol. Defined only while OG > FG.
    """
    og, fg = original_gravity_plato, final_gravity_plato
    if og is None or fg is None or og <= fg:
        return FormulaTrace(ABV_FORMULA, None)

    factor = get_calibration("ABV_FACTOR")
    extract_loss = og - fg
    return FormulaTrace(
        ABV_FORMULA,
        extract_loss * factor,
        intermediates={
            "extract_loss_plato": extract_loss,
            "abv_factor": factor,
            "apparent_attenuation_percent": extract_loss / og * 100,
            "og_sg": plato_to_sg(og),
            "fg_sg": plato_to_sg(fg),
        },
    )


def abv_percent(original_gravity_plato, final_gravity_plato) -> float | None:
    return abv_details(original_gravity_plato, final_gravity_plato).result


# ══════════════════════════════════════════════════════════════
# COLOR
# ══════════════════════════════════════════════════════════════


def color_details(malts, batch_volume_liters) -> FormulaTrace:
    """
    Batch color by Morey.

    MCU = Σ lb × °L / gal
    SRM = 1.4922 × MCU ^ 0.6859
    """
    colored = [m for m in malts if m.color_ebc is not None]
    if not _positive(batch_volume_liters) or not colored:
        return FormulaTrace(COLOR_FORMULA, None)

    volume_gal = batch_volume_liters * GAL_PER_LITER
    total_mcu = 0.0
    contributions = []
    for malt in colored:
        mcu = (malt.mass_kg * LBS_PER_KG) * ebc_to_srm(malt.color_ebc) / volume_gal
        total_mcu += mcu
        contributions.append(
            {"name": malt.name, "mass_kg": malt.mass_kg, "color_ebc": malt.color_ebc, "mcu": mcu}
        )

    srm = MOREY_FACTOR * total_mcu**MOREY_EXPONENT if total_mcu > 0 else 0.0
    return FormulaTrace(
        COLOR_FORMULA,
        srm_to_ebc(srm),
        intermediates={"volume_gal": volume_gal, "mcu": total_mcu, "srm": srm},
        contributions=contributions,
    )


def color_ebc(malts, batch_volume_liters) -> float | None:
    return color_details(malts, batch_volume_liters).result


def ebc_to_display_color(ebc) -> str:
    """Approximate beer color as "#rrggbb" for display."""
    if ebc is None:
        return "#ffffff"
    srm = ebc_to_srm(ebc)
    if srm <= 0:
        return "#ffffff"
    if srm > 40:
        return "#000000"

    r = min(255, max(0, 255 * 0.975**srm))
    g = min(255, max(0, 245 * 0.88**srm))
    b = min(255, max(0, 220 * 0.7**srm))
    return "#{:02x}{:02x}{:02x}".format(int(r), int(g), int(b))


# ══════════════════════════════════════════════════════════════
# BITTERNESS
# ══════════════════════════════════════════════════════════════


def bigness_factor(original_gravity_plato: float) -> float:
    """Tinseth gravity correction; falls as wort gravity rises."""
    boil_sg = 1 + original_gravity_plato * SG_PER_PLATO
    return TINSETH_BIGNESS_FACTOR * TINSETH_BIGNESS_BASE ** (boil_sg - 1)


def boil_time_factor(minutes: float) -> float:
    """Tinseth time curve, saturating towards 1 / 4.15."""
    return (1 - math.exp(-TINSETH_TIME_RATE * minutes)) / TINSETH_TIME_CEILING


def ibu_details(hops, batch_volume_liters, original_gravity_plato) -> FormulaTrace:
    """
    Bitterness by Tinseth.

    IBU = Σ grams × alpha / 100 × utilization × 1000 / liters

    Only BOIL and FIRST_WORT additions isomerize; dry hop, whirlpool and
    mash additions contribute zero.
    """
    if not _positive(batch_volume_liters) or original_gravity_plato is None or not hops:
        return FormulaTrace(IBU_FORMULA, None)

    bigness = bigness_factor(original_gravity_plato)
    form_factor = get_calibration("HOP_FORM_FACTOR")
    total = 0.0
    contributions = []
    for hop in hops:
        usage = BoilUsage.parse(hop.usage)
        usage_factor = USAGE_UTILIZATION[usage]
        minutes = hop.boil_time_minutes or 0.0
        alpha = hop.alpha_acid_percent or 0.0
        if usage_factor <= 0 or minutes <= 0 or alpha <= 0 or hop.mass_grams <= 0:
            contributions.append({"name": hop.name, "usage": usage.value, "ibu": 0.0})
            continue

        time_factor = boil_time_factor(minutes)
        utilization = bigness * time_factor * form_factor * usage_factor
        mg_alpha = hop.mass_grams * alpha / 100 * 1000
        ibu = utilization * mg_alpha / batch_volume_liters
        total += ibu
        contributions.append(
            {
                "name": hop.name,
                "usage": usage.value,
                "mg_alpha": mg_alpha,
                "boil_time_factor": time_factor,
                "utilization": utilization,
                "ibu": ibu,
            }
        )

    return FormulaTrace(
        IBU_FORMULA,
        total,
        intermediates={
            "boil_sg": 1 + original_gravity_plato * SG_PER_PLATO,
            "bigness_factor": bigness,
            "hop_form_factor": form_factor,
        },
        contributions=contributions,
    )


def ibu(hops, batch_volume_liters, original_gravity_plato) -> float | None:
    return ibu_details(hops, batch_volume_liters, original_gravity_plato).result


# ══════════════════════════════════════════════════════════════
# WATER
# ══════════════════════════════════════════════════════════════


def batch_volume_details(mash_water_liters, sparge_water_liters, malts) -> FormulaTrace:
    """
    Batch volume from the water actually used.

    batch = mash + sparge − grain_kg × GRAIN_ABSORPTION − PROCESS_LOSS
    """
    if mash_water_liters is None and sparge_water_liters is None:
        return FormulaTrace(BATCH_VOLUME_FORMULA, None)

    total_water = (mash_water_liters or 0.0) + (sparge_water_liters or 0.0)
    if total_water <= 0:
        return FormulaTrace(BATCH_VOLUME_FORMULA, None)

    grain_kg = total_grain_kg(malts)
    absorption = grain_kg * get_calibration("GRAIN_ABSORPTION")
    process_loss = get_calibration("PROCESS_LOSS")
    batch = total_water - absorption - process_loss

    return FormulaTrace(
        BATCH_VOLUME_FORMULA,
        batch if batch > 0 else None,
        intermediates={
            "total_water": total_water,
            "total_grain_kg": grain_kg,
            "grain_absorption": absorption,
            "pre_boil_volume": total_water - absorption,
            "process_loss": process_loss,
        },
    )


def batch_volume_from_water(mash_water_liters, sparge_water_liters, malts) -> float | None:
    return batch_volume_details(mash_water_liters, sparge_water_liters, malts).result


def water_profile(batch_volume_liters, malts, mash_thickness=None) -> WaterPlan | None:
    """
    Plan mash and sparge water for a target batch volume.

    Inverse of batch_volume_from_water(). When the mash alone would need
    more than the total (BIAB style), everything goes into the mash.
    """
    if not _positive(batch_volume_liters):
        return None

    if mash_thickness is None:
        mash_thickness = get_calibration("MASH_THICKNESS")
    grain_kg = total_grain_kg(malts)
    absorption = grain_kg * get_calibration("GRAIN_ABSORPTION")
    process_loss = get_calibration("PROCESS_LOSS")
    total_water = batch_volume_liters + absorption + process_loss

    mash = grain_kg * mash_thickness
    sparge = total_water - mash
    if sparge < 0:
        mash, sparge = total_water, 0.0

    return WaterPlan(
        mash_water_liters=mash,
        sparge_water_liters=sparge,
        total_water_liters=total_water,
        pre_boil_liters=total_water - absorption,
        grain_absorption_liters=absorption,
        process_loss_liters=process_loss,
    )


# ══════════════════════════════════════════════════════════════
# CARBONATION
# ══════════════════════════════════════════════════════════════


def residual_co2(temp_c: float) -> float:
    """
    CO2 volumes left in solution after fermentation at temp_c.

    Uses the common polynomial fit in °F.
    """
    temp_f = temp_c * 9 / 5 + 32
    return max(0.0, 3.0378 - 0.050062 * temp_f + 0.00026555 * temp_f**2)


def priming_sugar_grams(volume_liters, temp_c, target_co2) -> float | None:
    """
    Glucose needed to reach target_co2 volumes.

    1 volume CO2 in 1 L is about 1.96 g, produced by about 4 g glucose.
    """
    if not _positive(volume_liters) or temp_c is None or target_co2 is None:
        return None
    needed = target_co2 - residual_co2(temp_c)
    if needed <= 0:
        return 0.0
    return volume_liters * needed * 4
