"""Pairing and aggregation over workflow events."""

from workflow_replay.engine.pairing import iter_unit_events, pair_events, paired_units
from workflow_replay.engine.summary import summarize_units

__all__ = [
    "iter_unit_events",
    "pair_events",
    "paired_units",
    "summarize_units",
]
