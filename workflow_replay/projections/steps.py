"""Card-level presentation of a single workflow event."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from workflow_replay.date_utils import format_time
from workflow_replay.display import OutcomeStatus, event_icon, kind_style, outcome_status
from workflow_replay.formatting import first_line, format_duration, pretty_json
from workflow_replay.models import EventKind, WorkflowEvent

PREVIEW_CHARS = 150


class StepView(BaseModel):
    id: str
    index: int
    kind: EventKind
    label: str
    icon: str
    color: str
    tool: Optional[str] = None
    durationLabel: Optional[str] = None
    status: OutcomeStatus = "unknown"
    timeLabel: str = ""
    preview: str = ""
    expanded: bool = False
    contentLabel: str = "Content:"
    content: Optional[str] = None
    arguments: Optional[str] = None
    usageLabel: Optional[str] = None


def _usage_label(event: WorkflowEvent) -> Optional[str]:
    usage = event.metadata.usage if event.metadata else None
    if usage is None:
        return None
    parts = [f"Tokens: {usage.total or (usage.input + usage.output):,}"]
    if usage.cost:
        parts.append(f"Cost: ${usage.cost:.4f}")
    return " · ".join(parts)


def describe_event(event: WorkflowEvent, expanded: bool = False) -> StepView:
    style = kind_style(event.kind)
    metadata = event.metadata
    duration = metadata.duration if metadata else None

    view = StepView(
        id=event.id,
        index=event.index,
        kind=event.kind,
        label=style.label,
        icon=event_icon(event),
        color=style.color,
        tool=event.tool,
        durationLabel=format_duration(duration) if duration else None,
        status=outcome_status(event),
        timeLabel=format_time(event.timestamp),
        preview=first_line(event.content, PREVIEW_CHARS),
        expanded=expanded,
        contentLabel="Output:" if event.kind is EventKind.OUTCOME else "Content:",
    )
    if not expanded:
        return view

    view.content = event.content
    if metadata and metadata.arguments:
        view.arguments = pretty_json(metadata.arguments)
    view.usageLabel = _usage_label(event)
    return view
