"""
Brewcalc Models.

Plain in-memory types (nothing here is stored in the database):
- RecipeDraft: numeric profile of one recipe being edited
- DraftField: names of every draft field
- MaltLine / HopLine / YeastLine: ingredient line items
- BoilUsage: when a hop addition enters the process
"""

from brewcalc.models.draft import DraftField, RecipeDraft
from brewcalc.models.ingredients import BoilUsage, HopLine, MaltLine, YeastLine

__all__ = [
    "RecipeDraft",
    "DraftField",
    "MaltLine",
    "HopLine",
    "YeastLine",
    "BoilUsage",
]
