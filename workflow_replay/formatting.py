"""Human-readable labels for durations, sizes and previews."""
from __future__ import annotations

import json
import math
from typing import Any, Optional

from workflow_replay.display import PLACEHOLDER


def format_duration(ms: float) -> str:
    if ms < 1000:
        return f"{int(ms)}ms"
    seconds = ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = math.floor(seconds / 60)
    remaining = seconds % 60
    return f"{minutes}m {remaining:.0f}s"


def duration_label(ms: Optional[int]) -> str:
    # Zero and missing durations both render as the neutral placeholder.
    if not ms:
        return PLACEHOLDER
    return format_duration(ms)


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / 1024 / 1024:.1f} MB"


def first_line(text: str, limit: int) -> str:
    return (text or "").split("\n")[0][:limit]


def clip(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with '...'."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def short_id(session_id: str) -> str:
    return f"{session_id[:8]}..." if len(session_id) > 8 else session_id


def pretty_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)
