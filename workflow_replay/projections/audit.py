"""Tool-call audit table over paired tool calls and results."""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from workflow_replay.date_utils import format_time
from workflow_replay.display import PLACEHOLDER, OutcomeStatus, outcome_status, tool_icon
from workflow_replay.engine.pairing import paired_units
from workflow_replay.formatting import clip, duration_label, format_duration, pretty_json
from workflow_replay.models import PairedUnit, WorkflowUnit
from workflow_replay.projections.state import ExpansionState

ALL_TOOLS = "all"
DESCRIPTION_CHARS = 80


class StatusFilter(str, Enum):
    ALL = "all"
    SUCCESS = "success"
    FAILED = "failed"


class SortKey(str, Enum):
    POSITION = "position"
    TOOL = "tool"
    STATUS = "status"
    DURATION = "duration"
    TIME = "time"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class AuditStats(BaseModel):
    total: int = 0
    success: int = 0
    failed: int = 0
    totalDuration: int = 0
    totalDurationLabel: str = "0ms"


class AuditRow(BaseModel):
    id: str
    index: int
    tool: Optional[str] = None
    toolLabel: str = "Unknown"
    icon: str = ""
    description: str = ""
    status: OutcomeStatus = "unknown"
    durationLabel: str = PLACEHOLDER
    timeLabel: str = ""
    expanded: bool = False
    arguments: Optional[str] = None
    output: Optional[str] = None
    exitCode: Optional[int] = None


class AuditTableView(BaseModel):
    stats: AuditStats = Field(default_factory=AuditStats)
    toolNames: list[str] = Field(default_factory=list)
    search: str = ""
    toolFilter: str = ALL_TOOLS
    statusFilter: StatusFilter = StatusFilter.ALL
    sortBy: SortKey = SortKey.POSITION
    sortOrder: SortOrder = SortOrder.ASC
    rows: list[AuditRow] = Field(default_factory=list)
    visibleCount: int = 0
    emptyMessage: Optional[str] = None


def _duration(pair: PairedUnit) -> Optional[int]:
    metadata = pair.outcome.metadata
    return metadata.duration if metadata else None


def _exit_code(pair: PairedUnit) -> Optional[int]:
    metadata = pair.outcome.metadata
    return metadata.exitCode if metadata else None


def audit_stats(pairs: Sequence[PairedUnit]) -> AuditStats:
    """Headline counters over every pair, regardless of any active filter."""
    statuses = [outcome_status(pair.outcome) for pair in pairs]
    total_duration = sum(_duration(pair) or 0 for pair in pairs)
    return AuditStats(
        total=len(pairs),
        success=statuses.count("success"),
        failed=statuses.count("failed"),
        totalDuration=total_duration,
        totalDurationLabel=format_duration(total_duration),
    )


def tool_names(pairs: Iterable[PairedUnit]) -> list[str]:
    return sorted({pair.invocation.tool for pair in pairs if pair.invocation.tool})


def _matches_search(pair: PairedUnit, needle: str) -> bool:
    return (
        needle in pair.invocation.content.lower()
        or needle in pair.outcome.content.lower()
        or needle in (pair.invocation.tool or "").lower()
    )


def filter_pairs(
    pairs: Sequence[PairedUnit],
    search: str = "",
    tool: str = ALL_TOOLS,
    status: StatusFilter = StatusFilter.ALL,
) -> list[PairedUnit]:
    """Apply search, tool and status filters.

    Pairs whose result carries no exit code only appear under ``all``.
    """
    needle = search.lower()
    selected: list[PairedUnit] = []
    for pair in pairs:
        if needle and not _matches_search(pair, needle):
            continue
        if tool != ALL_TOOLS and pair.invocation.tool != tool:
            continue
        if status is not StatusFilter.ALL and outcome_status(pair.outcome) != status.value:
            continue
        selected.append(pair)
    return selected


_STATUS_RANK = {"success": 0, "failed": 1, "unknown": 2}

_SORT_KEYS: dict[SortKey, Callable[[PairedUnit], Any]] = {
    SortKey.POSITION: lambda pair: pair.invocation.index,
    SortKey.TOOL: lambda pair: (pair.invocation.tool or "").lower(),
    SortKey.STATUS: lambda pair: _STATUS_RANK[outcome_status(pair.outcome)],
    SortKey.TIME: lambda pair: pair.invocation.timestamp,
}


def sort_pairs(
    pairs: Sequence[PairedUnit],
    sort_by: SortKey = SortKey.POSITION,
    order: SortOrder = SortOrder.ASC,
) -> list[PairedUnit]:
    """Stable sort; pairs with no duration always sort after those with one."""
    descending = order is SortOrder.DESC
    if sort_by is SortKey.DURATION:
        known = [pair for pair in pairs if _duration(pair) is not None]
        unknown = [pair for pair in pairs if _duration(pair) is None]
        return sorted(known, key=lambda pair: _duration(pair) or 0, reverse=descending) + unknown
    return sorted(pairs, key=_SORT_KEYS[sort_by], reverse=descending)


def audit_row(pair: PairedUnit, expanded: bool = False) -> AuditRow:
    invocation = pair.invocation
    duration = _duration(pair)
    row = AuditRow(
        id=pair.id,
        index=invocation.index,
        tool=invocation.tool,
        toolLabel=invocation.tool or "Unknown",
        icon=tool_icon(invocation.tool),
        description=clip(invocation.content, DESCRIPTION_CHARS),
        status=outcome_status(pair.outcome),
        durationLabel=duration_label(duration),
        timeLabel=format_time(invocation.timestamp),
        expanded=expanded,
    )
    if not expanded:
        return row

    arguments = invocation.metadata.arguments if invocation.metadata else None
    if arguments:
        row.arguments = pretty_json(arguments)
    row.output = pair.outcome.content
    row.exitCode = _exit_code(pair)
    return row


class AuditTable:
    """Audit-table state for one loaded session.

    Only paired tool calls appear here. The stats block is computed from the
    full paired set when it is loaded and is not touched by filtering.
    """

    def __init__(self, units: Sequence[WorkflowUnit]) -> None:
        self.search = ""
        self.tool_filter = ALL_TOOLS
        self.status_filter = StatusFilter.ALL
        self.sort_by = SortKey.POSITION
        self.sort_order = SortOrder.ASC
        self.expansion = ExpansionState()
        self.set_units(units)

    def set_units(self, units: Sequence[WorkflowUnit]) -> None:
        self._pairs = tuple(paired_units(units))
        self._stats = audit_stats(self._pairs)
        self._tool_names = tool_names(self._pairs)

    @property
    def pairs(self) -> tuple[PairedUnit, ...]:
        return self._pairs

    @property
    def stats(self) -> AuditStats:
        return self._stats

    @property
    def available_tools(self) -> list[str]:
        return list(self._tool_names)

    def set_search(self, search: str) -> None:
        self.search = search or ""

    def set_tool_filter(self, tool: Optional[str]) -> None:
        self.tool_filter = tool or ALL_TOOLS

    def set_status_filter(self, status: StatusFilter | str) -> None:
        self.status_filter = StatusFilter(status)

    def set_sort(self, sort_by: SortKey | str, order: SortOrder | str = SortOrder.ASC) -> None:
        self.sort_by = SortKey(sort_by)
        self.sort_order = SortOrder(order)

    def toggle(self, pair_id: str) -> bool:
        return self.expansion.toggle(pair_id)

    def visible_pairs(self) -> list[PairedUnit]:
        filtered = filter_pairs(self._pairs, self.search, self.tool_filter, self.status_filter)
        return sort_pairs(filtered, self.sort_by, self.sort_order)

    def view(self) -> AuditTableView:
        visible = self.visible_pairs()
        rows = [audit_row(pair, self.expansion.is_expanded(pair.id)) for pair in visible]

        empty_message = None
        if not self._pairs:
            empty_message = "No tool calls in this workflow"
        elif not rows:
            empty_message = "No tool calls match your filters"

        return AuditTableView(
            stats=self._stats,
            toolNames=list(self._tool_names),
            search=self.search,
            toolFilter=self.tool_filter,
            statusFilter=self.status_filter,
            sortBy=self.sort_by,
            sortOrder=self.sort_order,
            rows=rows,
            visibleCount=len(rows),
            emptyMessage=empty_message,
        )
