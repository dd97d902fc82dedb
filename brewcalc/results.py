"""
Brewcalc Result Types.

Structured results for formulas, propagation passes and explanations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from brewcalc.models import DraftField, RecipeDraft


@dataclass(frozen=True)
class FormulaTrace:
    """
    Outcome of one formula evaluation.

    result is None when the formula is undefined for the given inputs.
    intermediates and contributions are what the inspector shows.
    """

    name: str
    result: float | None
    intermediates: dict[str, Any] = field(default_factory=dict)
    contributions: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_defined(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class WaterPlan:
    """Mash and sparge water needed for a target batch volume (liters)."""

    mash_water_liters: float
    sparge_water_liters: float
    total_water_liters: float
    pre_boil_liters: float
    grain_absorption_liters: float
    process_loss_liters: float


@dataclass(frozen=True)
class FieldWrite:
    """A value written by the scheduler."""

    field: DraftField
    old: float | None
    new: float

    @property
    def delta(self) -> float | None:
        if self.old is None:
            return None
        return self.new - self.old


@dataclass
class PropagationResult:
    """
    Result of one settling pass.

    draft is the updated copy; the caller's draft is left untouched.
    """

    draft: RecipeDraft
    changed_fields: frozenset
    writes: list[FieldWrite] = field(default_factory=list)

    @property
    def has_writes(self) -> bool:
        return len(self.writes) > 0

    @property
    def written_fields(self) -> list:
        return [w.field for w in self.writes]


@dataclass(frozen=True)
class FormulaInput:
    """One input consumed by a formula, with its unit for display."""

    name: str
    value: Any
    unit: str = ""


@dataclass(frozen=True)
class Explanation:
    """
    How a derived field is computed.

    result is recomputed with the same formula the scheduler uses;
    stored_value is what the draft currently holds.
    """

    field: DraftField
    formula_name: str
    inputs_used: list[FormulaInput]
    intermediate_values: list[tuple[str, Any]]
    result: float | None
    stored_value: float | None
    epsilon: float
    contributions: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        """True if the stored value equals the formula result within epsilon."""
        if self.result is None:
            return True
        if self.stored_value is None:
            return False
        return abs(self.result - self.stored_value) <= self.epsilon

    def as_dict(self) -> dict:
        return {
            "field": self.field.value,
            "formula_name": self.formula_name,
            "inputs_used": [
                {"name": i.name, "value": i.value, "unit": i.unit}
                for i in self.inputs_used
            ],
            "intermediate_values": [list(pair) for pair in self.intermediate_values],
            "result": self.result,
            "stored_value": self.stored_value,
            "contributions": self.contributions,
            "is_consistent": self.is_consistent,
        }
