"""
Brewcalc Signals.

The engine never talks to the editor directly. After every settling pass
it announces the result, so editors can re-render only what changed.

Signals:
    draft_settled: A propagation pass finished
"""

from django.dispatch import Signal

# Propagation pass finished
# Sent by Propagator.settle() unless BREWCALC["EMIT_SIGNALS"] is False
# Args: result (PropagationResult), draft, writes (list of FieldWrite)
draft_settled = Signal()

__all__ = ["draft_settled"]
