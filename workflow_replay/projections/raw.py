"""Line-level view of the untouched transcript, with search and export."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, Field

from workflow_replay.display import raw_kind_color
from workflow_replay.formatting import pretty_json

logger = logging.getLogger("replay.raw")

INVALID_KIND = "invalid"
UNKNOWN_KIND = "unknown"
EXPORT_MEDIA_TYPE = "application/x-jsonlines"


class RawLineView(BaseModel):
    index: int
    lineNumber: int
    raw: str
    formatted: str
    kind: str
    color: str


class RawTranscriptView(BaseModel):
    search: str = ""
    lines: list[RawLineView] = Field(default_factory=list)
    visibleCount: int = 0
    totalCount: int = 0
    emptyMessage: Optional[str] = None


def render_raw_line(index: int, line: str) -> RawLineView:
    """Pretty-print ``line`` when it parses as JSON, otherwise show it as-is."""
    try:
        parsed = json.loads(line)
    except (ValueError, RecursionError):
        return RawLineView(
            index=index,
            lineNumber=index + 1,
            raw=line,
            formatted=line,
            kind=INVALID_KIND,
            color=raw_kind_color(INVALID_KIND),
        )

    kind = UNKNOWN_KIND
    if isinstance(parsed, dict):
        raw_type = parsed.get("type")
        if isinstance(raw_type, str) and raw_type:
            kind = raw_type
    return RawLineView(
        index=index,
        lineNumber=index + 1,
        raw=line,
        formatted=pretty_json(parsed),
        kind=kind,
        color=raw_kind_color(kind),
    )


def line_matches(line: str, search: str) -> bool:
    if not search:
        return True
    return search.lower() in line.lower()


def export_text(lines: Sequence[str]) -> str:
    return "\n".join(lines)


def export_filename(session_id: Optional[str]) -> str:
    return f"{session_id or 'workflow'}-transcript.jsonl"


class RawViewer:
    """Raw-transcript state for one loaded session.

    Search only hides lines from the view; copy and download always carry
    every stored line.
    """

    def __init__(self, lines: Sequence[str], session_id: Optional[str] = None) -> None:
        self._lines = tuple(lines)
        self._rendered = tuple(render_raw_line(idx, line) for idx, line in enumerate(self._lines))
        self.session_id = session_id
        self.search = ""
        self.copied = False

    @property
    def lines(self) -> tuple[str, ...]:
        return self._lines

    def set_search(self, search: str) -> None:
        self.search = search or ""

    def visible_lines(self) -> list[RawLineView]:
        return [view for view in self._rendered if line_matches(view.raw, self.search)]

    def view(self) -> RawTranscriptView:
        visible = self.visible_lines()
        empty_message = "No lines match your search" if self._lines and not visible else None
        return RawTranscriptView(
            search=self.search,
            lines=visible,
            visibleCount=len(visible),
            totalCount=len(self._lines),
            emptyMessage=empty_message,
        )

    def export_text(self) -> str:
        return export_text(self._lines)

    def export_filename(self) -> str:
        return export_filename(self.session_id)

    def copy_to_clipboard(self, write: Callable[[str], object]) -> bool:
        """Hand the full transcript to ``write``; failures are logged, not raised."""
        try:
            write(self.export_text())
        except Exception as exc:
            logger.error(f"Failed to copy transcript {self.session_id or ''}: {exc}")
            self.copied = False
            return False
        self.copied = True
        return True

    def download(self, directory: Path) -> Path:
        """Write the full transcript into ``directory`` and return the file path."""
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / self.export_filename()
        with target.open("w", encoding="utf-8", errors="surrogateescape", newline="") as handle:
            handle.write(self.export_text())
        logger.info(f"Exported {len(self._lines)} transcript lines to {target}")
        return target
