"""
Brewcalc Services.

- propagation: settle a draft after an edit (propagate, apply_edit)
- inspector: explain how a derived field is computed
"""

from brewcalc.services.inspector import explain
from brewcalc.services.propagation import (
    PropagationState,
    Propagator,
    apply_edit,
    propagate,
)

__all__ = [
    "Propagator",
    "PropagationState",
    "propagate",
    "apply_edit",
    "explain",
]
