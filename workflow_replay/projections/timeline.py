"""Chronological timeline over paired and single units."""
from __future__ import annotations

from typing import Optional, Sequence, Union

from pydantic import BaseModel, Field

from workflow_replay.models import PairedUnit, WorkflowUnit
from workflow_replay.projections.state import ExpansionState
from workflow_replay.projections.steps import StepView, describe_event


class TimelineEntry(BaseModel):
    position: int  # 1-based, local to the filtered timeline
    unitId: str
    type: str
    steps: list[StepView] = Field(default_factory=list)


class TimelineView(BaseModel):
    search: str = ""
    entries: list[TimelineEntry] = Field(default_factory=list)
    visibleCount: int = 0
    totalCount: int = 0
    emptyMessage: Optional[str] = None


def unit_matches(unit: WorkflowUnit, needle: str) -> bool:
    """Case-insensitive substring match; ``needle`` must already be lowercase."""
    if isinstance(unit, PairedUnit):
        tool = unit.invocation.tool or ""
        return (
            needle in unit.invocation.content.lower()
            or needle in unit.outcome.content.lower()
            or needle in tool.lower()
        )
    return needle in unit.event.content.lower()


def filter_units(units: Sequence[WorkflowUnit], search: str = "") -> list[WorkflowUnit]:
    """Return the subset of ``units`` matching ``search``, in order.

    The returned list holds the same unit objects; nothing is copied.
    """
    if not search:
        return list(units)
    needle = search.lower()
    return [unit for unit in units if unit_matches(unit, needle)]


def render_timeline(
    units: Sequence[WorkflowUnit],
    search: str = "",
    expanded: Union[ExpansionState, frozenset[str], None] = None,
) -> TimelineView:
    if isinstance(expanded, ExpansionState):
        expanded_ids = expanded.expanded_ids
    else:
        expanded_ids = expanded or frozenset()

    visible = filter_units(units, search)
    entries = [
        TimelineEntry(
            position=position,
            unitId=unit.id,
            type=unit.type,
            steps=[describe_event(event, event.id in expanded_ids) for event in unit.events],
        )
        for position, unit in enumerate(visible, start=1)
    ]

    empty_message = None
    if not units:
        empty_message = "No workflow steps found"
    elif not visible:
        empty_message = "No steps match your filter"

    return TimelineView(
        search=search,
        entries=entries,
        visibleCount=len(visible),
        totalCount=len(units),
        emptyMessage=empty_message,
    )


class TimelineProjection:
    """Timeline state for one loaded session: search text and expanded steps."""

    def __init__(self, units: Sequence[WorkflowUnit]) -> None:
        self._units = tuple(units)
        self.search = ""
        self.expansion = ExpansionState()

    @property
    def units(self) -> tuple[WorkflowUnit, ...]:
        return self._units

    def set_search(self, search: str) -> None:
        self.search = search or ""

    def toggle(self, event_id: str) -> bool:
        return self.expansion.toggle(event_id)

    def visible_units(self) -> list[WorkflowUnit]:
        return filter_units(self._units, self.search)

    def view(self) -> TimelineView:
        return render_timeline(self._units, self.search, self.expansion)
