"""Group a flat event sequence into tool call/result pairs and single steps."""
from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from workflow_replay.models import (
    EventKind,
    PairedUnit,
    SingletonUnit,
    WorkflowEvent,
    WorkflowUnit,
)


def pair_events(events: Sequence[WorkflowEvent]) -> list[WorkflowUnit]:
    """Pair each tool call with the tool result that immediately follows it.

    Single left-to-right pass. Only direct neighbours pair: a tool call whose
    result arrives after any other event (for example interleaved parallel
    calls) stays a single step, and so does that result.
    """
    units: list[WorkflowUnit] = []
    i = 0
    count = len(events)
    while i < count:
        current = events[i]
        following = events[i + 1] if i + 1 < count else None
        if (
            current.kind is EventKind.INVOCATION
            and following is not None
            and following.kind is EventKind.OUTCOME
            and following.index == current.index + 1
        ):
            units.append(PairedUnit(invocation=current, outcome=following))
            i += 2
        else:
            units.append(SingletonUnit(event=current))
            i += 1
    return units


def paired_units(units: Iterable[WorkflowUnit]) -> list[PairedUnit]:
    return [unit for unit in units if isinstance(unit, PairedUnit)]


def iter_unit_events(units: Iterable[WorkflowUnit]) -> Iterator[WorkflowEvent]:
    for unit in units:
        yield from unit.events
