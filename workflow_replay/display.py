"""Display lookup tables shared by the projections."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Optional

from workflow_replay.models import EventKind, WorkflowEvent

OutcomeStatus = Literal["success", "failed", "unknown"]


@dataclass(frozen=True)
class KindStyle:
    label: str
    icon: str
    color: str


KIND_STYLES: Mapping[EventKind, KindStyle] = {
    EventKind.REASONING: KindStyle(label="Thinking", icon="🧠", color="purple"),
    EventKind.INVOCATION: KindStyle(label="Tool Call", icon="💻", color="blue"),
    EventKind.OUTCOME: KindStyle(label="Result", icon="📄", color="cyan"),
    EventKind.TEXT: KindStyle(label="Response", icon="💬", color="slate"),
    EventKind.DECISION: KindStyle(label="Decision", icon="🧭", color="amber"),
    EventKind.SYSTEM: KindStyle(label="System", icon="⚙️", color="gray"),
}

TOOL_ICONS: dict[str, str] = {
    "read": "📖",
    "write": "📝",
    "edit": "✏️",
    "multiedit": "✏️",
    "bash": "$",
    "exec": "$",
    "process": "⚙️",
    "glob": "🔍",
    "grep": "🔍",
    "websearch": "🌐",
    "webfetch": "🌐",
    "web_search": "🌐",
    "web_fetch": "🌐",
    "browser": "🌐",
    "task": "🤖",
    "todowrite": "☑️",
}

# Border colors for raw transcript lines, keyed by the document's "type" field.
RAW_KIND_COLORS: dict[str, str] = {
    "session": "purple",
    "message": "blue",
    "model_change": "amber",
    "thinking_level_change": "cyan",
    "custom": "green",
    "user": "blue",
    "assistant": "blue",
    "system": "gray",
    "invalid": "red",
}
RAW_DEFAULT_COLOR = "slate"

STATUS_GLYPHS: Mapping[str, str] = {
    "success": "✓",
    "failed": "✗",
    "unknown": "-",
}

PLACEHOLDER = "-"


def _check_exhaustive() -> None:
    missing = [kind.value for kind in EventKind if kind not in KIND_STYLES]
    if missing:
        raise RuntimeError(f"KIND_STYLES is missing entries for: {', '.join(missing)}")


_check_exhaustive()


def kind_style(kind: EventKind) -> KindStyle:
    return KIND_STYLES[kind]


def event_icon(event: WorkflowEvent) -> str:
    """Tool calls use the tool's own icon when one is known."""
    style = KIND_STYLES[event.kind]
    if event.kind is EventKind.INVOCATION and event.tool:
        return tool_icon(event.tool)
    return style.icon


def tool_icon(tool: Optional[str]) -> str:
    # Keys are lowercase; tool names arrive in either casing.
    return TOOL_ICONS.get((tool or "").lower(), KIND_STYLES[EventKind.INVOCATION].icon)


def raw_kind_color(kind: str) -> str:
    return RAW_KIND_COLORS.get(kind, RAW_DEFAULT_COLOR)


def exit_code_status(exit_code: Optional[int]) -> OutcomeStatus:
    # An absent exit code is unknown, never an implicit success.
    if exit_code is None:
        return "unknown"
    return "success" if exit_code == 0 else "failed"


def outcome_status(event: Optional[WorkflowEvent]) -> OutcomeStatus:
    if event is None or event.metadata is None:
        return "unknown"
    return exit_code_status(event.metadata.exitCode)
