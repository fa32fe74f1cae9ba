"""Thinking-block view: heuristic bullet summaries or the raw reasoning text."""
from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from workflow_replay.date_utils import format_time
from workflow_replay.engine.pairing import iter_unit_events
from workflow_replay.formatting import first_line
from workflow_replay.models import EventKind, WorkflowEvent, WorkflowUnit
from workflow_replay.projections.state import ExpansionState

MAX_POINTS = 5
MAX_FALLBACK_SENTENCES = 3
MIN_LINE_CHARS = 10
MAX_POINT_CHARS = 100
TRUNCATED_POINT_CHARS = 97
DETAILED_PREVIEW_CHARS = 200

_LEAD_PHRASE_PATTERN = re.compile(
    r"^(I (need|should|will|must|can|want|think|found|see|notice)|Let me|Now|First|Then|Next|Finally"
    r"|The |This |So |Actually|Okay|Looking|Check|Found|Got it|Ah|Hmm)",
    re.IGNORECASE,
)
_BULLET_PREFIX_PATTERN = re.compile(r"^[-•*]\s*")
_FILLER_PREFIX_PATTERN = re.compile(r"^(Okay,?\s*|Hmm,?\s*|Ah,?\s*|Actually,?\s*|So,?\s*)", re.IGNORECASE)
_SENTENCE_BREAK_PATTERN = re.compile(r"[.!?]+")
_BULLET_MARKERS = ("-", "•", "*")
_ARROW = "→"


class ViewMode(str, Enum):
    SUMMARY = "summary"
    DETAILED = "detailed"


def _truncate_point(point: str) -> str:
    if len(point) > MAX_POINT_CHARS:
        return point[:TRUNCATED_POINT_CHARS] + "..."
    return point


def _is_key_line(line: str) -> bool:
    return bool(
        _LEAD_PHRASE_PATTERN.match(line)
        or _ARROW in line
        or ":" in line
        or line.startswith(_BULLET_MARKERS)
    )


def _clean_point(line: str) -> str:
    point = _BULLET_PREFIX_PATTERN.sub("", line, count=1)
    point = _FILLER_PREFIX_PATTERN.sub("", point, count=1)
    return point.strip()


def extract_key_points(content: str) -> list[str]:
    """Pull up to five bullet points out of free-form reasoning text.

    Lines of at least ten characters qualify when they open with a lead
    phrase ("I need", "Let me", "Now", ...), contain an arrow or a colon, or
    start with a bullet marker. Qualifying lines lose their bullet marker and
    a leading filler word ("Okay,", "Hmm,", ...), are cut to 97 characters
    plus "..." when longer than 100, and are de-duplicated. When no line
    qualifies, the first three sentences longer than ten characters are used
    instead.
    """
    lines = [line for line in content.split("\n") if line.strip()]
    points: list[str] = []

    for line in lines:
        trimmed = line.strip()
        if len(trimmed) < MIN_LINE_CHARS:
            continue
        if not _is_key_line(trimmed):
            continue
        point = _truncate_point(_clean_point(trimmed))
        if len(point) >= MIN_LINE_CHARS and point not in points:
            points.append(point)

    if not points:
        sentences = [s for s in _SENTENCE_BREAK_PATTERN.split(content) if len(s.strip()) > MIN_LINE_CHARS]
        for sentence in sentences[:MAX_FALLBACK_SENTENCES]:
            points.append(_truncate_point(sentence.strip()))

    return points[:MAX_POINTS]


class ReasoningCard(BaseModel):
    id: str
    index: int
    position: int
    timeLabel: str = ""
    expanded: bool = False
    points: list[str] = Field(default_factory=list)
    preview: str = ""
    hasMore: bool = False
    content: Optional[str] = None


class ReasoningView(BaseModel):
    mode: ViewMode = ViewMode.SUMMARY
    search: str = ""
    expandAll: bool = False
    cards: list[ReasoningCard] = Field(default_factory=list)
    visibleCount: int = 0
    totalCount: int = 0
    emptyMessage: Optional[str] = None


def reasoning_events(events: Iterable[WorkflowEvent]) -> list[WorkflowEvent]:
    return [event for event in events if event.kind is EventKind.REASONING]


def filter_reasoning(events: Sequence[WorkflowEvent], search: str = "") -> list[WorkflowEvent]:
    if not search:
        return list(events)
    needle = search.lower()
    return [event for event in events if needle in event.content.lower()]


def _summary_card(event: WorkflowEvent, position: int, expanded: bool, points: list[str]) -> ReasoningCard:
    return ReasoningCard(
        id=event.id,
        index=event.index,
        position=position,
        timeLabel=format_time(event.timestamp),
        expanded=expanded,
        points=points,
        content=event.content if expanded else None,
    )


def _detailed_card(event: WorkflowEvent, position: int, expanded: bool) -> ReasoningCard:
    has_more = len(event.content) > DETAILED_PREVIEW_CHARS or "\n" in event.content
    return ReasoningCard(
        id=event.id,
        index=event.index,
        position=position,
        timeLabel=format_time(event.timestamp),
        expanded=expanded,
        preview=first_line(event.content, DETAILED_PREVIEW_CHARS),
        hasMore=has_more,
        content=event.content if expanded else None,
    )


def render_reasoning(
    events: Sequence[WorkflowEvent],
    search: str = "",
    mode: ViewMode = ViewMode.SUMMARY,
    expanded: Optional[ExpansionState] = None,
    expand_all: bool = False,
    key_points: Optional[dict[str, list[str]]] = None,
) -> ReasoningView:
    """Build the thinking view; ``events`` must already be reasoning events."""
    expansion = expanded or ExpansionState()
    cache = key_points if key_points is not None else {}
    visible = filter_reasoning(events, search)

    cards: list[ReasoningCard] = []
    for position, event in enumerate(visible, start=1):
        is_open = expansion.is_expanded(event.id)
        if mode is ViewMode.SUMMARY:
            if event.id not in cache:
                cache[event.id] = extract_key_points(event.content)
            cards.append(_summary_card(event, position, is_open, cache[event.id]))
        else:
            cards.append(_detailed_card(event, position, is_open))

    empty_message = None
    if not events:
        empty_message = "No thinking blocks in this workflow"
    elif not visible:
        empty_message = f'No thinking blocks match "{search}"'

    return ReasoningView(
        mode=mode,
        search=search,
        expandAll=expand_all,
        cards=cards,
        visibleCount=len(visible),
        totalCount=len(events),
        emptyMessage=empty_message,
    )


class ReasoningProjection:
    """Thinking-block state for one loaded session.

    Expand-all marks every visible block expanded and remembers that it did;
    a second toggle collapses everything. Individual toggles always win, so a
    block can be collapsed again while the others stay open.
    """

    def __init__(self, units: Sequence[WorkflowUnit]) -> None:
        self._events = tuple(reasoning_events(iter_unit_events(units)))
        self._key_points: dict[str, list[str]] = {}
        self.search = ""
        self.mode = ViewMode.SUMMARY
        self.expand_all = False
        self.expansion = ExpansionState()

    @property
    def events(self) -> tuple[WorkflowEvent, ...]:
        return self._events

    def set_search(self, search: str) -> None:
        self.search = search or ""

    def set_mode(self, mode: ViewMode | str) -> None:
        self.mode = ViewMode(mode)

    def toggle(self, event_id: str) -> bool:
        return self.expansion.toggle(event_id)

    def toggle_expand_all(self) -> bool:
        if self.expand_all:
            self.expansion.clear()
        else:
            self.expansion.expand(event.id for event in filter_reasoning(self._events, self.search))
        self.expand_all = not self.expand_all
        return self.expand_all

    def key_points(self, event_id: str) -> list[str]:
        if event_id not in self._key_points:
            event = next((e for e in self._events if e.id == event_id), None)
            if event is None:
                raise KeyError(event_id)
            self._key_points[event_id] = extract_key_points(event.content)
        return self._key_points[event_id]

    def view(self) -> ReasoningView:
        return render_reasoning(
            self._events,
            search=self.search,
            mode=self.mode,
            expanded=self.expansion,
            expand_all=self.expand_all,
            key_points=self._key_points,
        )
