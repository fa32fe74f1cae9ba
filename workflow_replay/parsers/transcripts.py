"""Parse JSONL session transcripts into replay artifacts."""
from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from workflow_replay import config
from workflow_replay.date_utils import elapsed_ms, file_modified_at, normalize_iso_date
from workflow_replay.engine.pairing import pair_events
from workflow_replay.engine.summary import summarize_units
from workflow_replay.models import (
    EventKind,
    EventMetadata,
    ReplayArtifact,
    TokenUsage,
    TranscriptInfo,
    WorkflowEvent,
)

logger = logging.getLogger("replay.parser")

_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]+$")
_TOOL_SUMMARY_KEYS = (
    "description",
    "command",
    "cmd",
    "file_path",
    "path",
    "pattern",
    "query",
    "url",
    "prompt",
)
_TOOL_SUMMARY_CHARS = 200
_MESSAGE_ENTRY_TYPES = {"assistant", "user", "message"}


def is_valid_session_id(session_id: str) -> bool:
    return bool(session_id) and bool(_SESSION_ID_PATTERN.match(session_id)) and ".." not in session_id


def split_raw_lines(text: str) -> list[str]:
    """Split file text into lines exactly as stored; only the final newline is dropped."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _coerce_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _timestamp_of(entry: dict[str, Any]) -> str:
    raw = entry.get("timestamp")
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return normalize_iso_date(raw)
    return ""


def _tool_result_to_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        chunks: list[str] = []
        for block in content:
            if isinstance(block, str):
                chunks.append(block)
            elif isinstance(block, dict):
                text = block.get("text")
                if isinstance(text, str) and text.strip():
                    chunks.append(text)
                elif isinstance(block.get("content"), str):
                    chunks.append(block["content"])
        return "\n".join(chunks)
    if content is None:
        return ""
    try:
        return json.dumps(content)
    except (TypeError, ValueError):
        return str(content)


def _describe_tool_call(name: str, arguments: dict[str, Any]) -> str:
    for key in _TOOL_SUMMARY_KEYS:
        value = arguments.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    if arguments:
        try:
            compact = json.dumps(arguments, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            compact = str(arguments)
        return compact[:_TOOL_SUMMARY_CHARS]
    return f"Called {name}"


def _usage_from(raw: Any) -> Optional[TokenUsage]:
    """Read Claude (input_tokens/output_tokens) or generic (input/output/cost) usage blocks."""
    if not isinstance(raw, dict):
        return None
    tokens_in = _coerce_int(raw.get("input_tokens", raw.get("input"))) or 0
    tokens_out = _coerce_int(raw.get("output_tokens", raw.get("output"))) or 0
    total = _coerce_int(raw.get("totalTokens", raw.get("total"))) or (tokens_in + tokens_out)

    cost: Optional[float] = None
    raw_cost = raw.get("cost")
    if isinstance(raw_cost, dict):
        raw_cost = raw_cost.get("total")
    if isinstance(raw_cost, (int, float)) and not isinstance(raw_cost, bool):
        cost = float(raw_cost)

    if not (tokens_in or tokens_out or total or cost):
        return None
    return TokenUsage(input=tokens_in, output=tokens_out, total=total, cost=cost)


def _explicit_exit_code(*sources: Any) -> Optional[int]:
    for source in sources:
        if not isinstance(source, dict):
            continue
        for key in ("exitCode", "exit_code", "returnCode", "code"):
            code = _coerce_int(source.get(key))
            if code is not None:
                return code
    return None


def _error_flag(source: dict[str, Any]) -> Optional[bool]:
    for key in ("is_error", "isError"):
        value = source.get(key)
        if isinstance(value, bool):
            return value
    return None


def parse_transcript_text(text: str, session_id: str = "") -> ReplayArtifact:
    """Build a replay artifact from raw JSONL text.

    Every line is kept in ``rawLines`` untouched. Lines that are not JSON
    objects, or whose entry type carries no workflow content, produce no
    events.
    """
    raw_lines = split_raw_lines(text)
    events: list[WorkflowEvent] = []

    tool_started_at_by_id: dict[str, str] = {}
    tool_name_by_id: dict[str, str] = {}
    invalid_lines = 0

    def append_event(kind: EventKind, content: str, timestamp: str, line_idx: int, **metadata: Any) -> None:
        fields = {key: value for key, value in metadata.items() if value is not None}
        events.append(
            WorkflowEvent(
                id=f"evt-{len(events)}",
                index=len(events),
                timestamp=timestamp,
                kind=kind,
                content=content,
                metadata=EventMetadata(sourceLine=line_idx, **fields),
            )
        )

    def append_tool_result(
        content: str,
        timestamp: str,
        line_idx: int,
        tool_call_id: str,
        tool_name: Optional[str],
        exit_code: Optional[int],
    ) -> None:
        started_at = tool_started_at_by_id.get(tool_call_id, "") if tool_call_id else ""
        append_event(
            EventKind.OUTCOME,
            content,
            timestamp,
            line_idx,
            tool=tool_name or tool_name_by_id.get(tool_call_id),
            toolCallId=tool_call_id or None,
            exitCode=exit_code,
            duration=elapsed_ms(started_at, timestamp) if started_at else None,
        )

    for line_idx, line in enumerate(raw_lines):
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
        except (ValueError, RecursionError):
            invalid_lines += 1
            continue
        if not isinstance(entry, dict):
            continue

        entry_type = str(entry.get("type") or "")
        timestamp = _timestamp_of(entry)

        if entry_type == "session":
            cwd = entry.get("cwd")
            label = f"Session started in {cwd}" if isinstance(cwd, str) and cwd else "Session started"
            append_event(EventKind.SYSTEM, label, timestamp, line_idx)
            continue

        if entry_type == "model_change":
            model = entry.get("modelId") or entry.get("model")
            provider = entry.get("provider")
            model_label = "/".join(str(part) for part in (provider, model) if part)
            append_event(
                EventKind.SYSTEM,
                f"Model changed to {model_label}" if model_label else "Model changed",
                timestamp,
                line_idx,
                model=str(model) if model else None,
                provider=str(provider) if provider else None,
            )
            continue

        if entry_type == "thinking_level_change":
            level = entry.get("thinkingLevel") or entry.get("level") or "default"
            append_event(EventKind.SYSTEM, f"Thinking level set to {level}", timestamp, line_idx)
            continue

        if entry_type == "system":
            content = entry.get("content")
            if not isinstance(content, str) or not content.strip():
                content = str(entry.get("subtype") or "system")
            append_event(EventKind.SYSTEM, content, timestamp, line_idx)
            continue

        if entry_type == "decision":
            content = entry.get("content")
            append_event(EventKind.DECISION, content if isinstance(content, str) else "", timestamp, line_idx)
            continue

        if entry_type not in _MESSAGE_ENTRY_TYPES:
            continue

        message = entry.get("message")
        if not isinstance(message, dict):
            continue

        role = str(message.get("role") or entry_type)
        model = message.get("model") if isinstance(message.get("model"), str) else None
        provider = message.get("provider") if isinstance(message.get("provider"), str) else None
        usage = _usage_from(message.get("usage"))
        content_blocks = message.get("content")

        # Message-level model/usage go on the first event the message produces.
        message_meta: dict[str, Any] = {"model": model, "provider": provider, "usage": usage}

        def take_message_meta() -> dict[str, Any]:
            nonlocal message_meta
            taken, message_meta = message_meta, {}
            return taken

        if role == "toolResult":
            tool_call_id = str(message.get("toolCallId") or "")
            is_error = _error_flag(message)
            exit_code = _explicit_exit_code(message.get("details"), message)
            if exit_code is None and is_error is not None:
                exit_code = 1 if is_error else 0
            append_tool_result(
                _tool_result_to_text(content_blocks),
                timestamp,
                line_idx,
                tool_call_id,
                message.get("toolName") if isinstance(message.get("toolName"), str) else None,
                exit_code,
            )
            continue

        if isinstance(content_blocks, str):
            if content_blocks.strip():
                append_event(EventKind.TEXT, content_blocks, timestamp, line_idx, role=role, **take_message_meta())
            continue

        if not isinstance(content_blocks, list):
            continue

        for block in content_blocks:
            if isinstance(block, str):
                if block.strip():
                    append_event(EventKind.TEXT, block, timestamp, line_idx, role=role, **take_message_meta())
                continue
            if not isinstance(block, dict):
                continue

            block_type = block.get("type")
            if block_type == "text":
                text_value = block.get("text", "")
                if isinstance(text_value, str) and text_value.strip():
                    append_event(EventKind.TEXT, text_value, timestamp, line_idx, role=role, **take_message_meta())
            elif block_type == "thinking":
                thinking = block.get("thinking", "")
                if isinstance(thinking, str) and thinking.strip():
                    append_event(EventKind.REASONING, thinking, timestamp, line_idx, **take_message_meta())
            elif block_type in ("tool_use", "toolCall"):
                tool_name = str(block.get("name") or "unknown")
                tool_id = block.get("id") if isinstance(block.get("id"), str) else ""
                arguments = block.get("input", block.get("arguments"))
                if not isinstance(arguments, dict):
                    arguments = {}
                if tool_id:
                    tool_started_at_by_id[tool_id] = timestamp
                    tool_name_by_id[tool_id] = tool_name
                append_event(
                    EventKind.INVOCATION,
                    _describe_tool_call(tool_name, arguments),
                    timestamp,
                    line_idx,
                    tool=tool_name,
                    arguments=arguments,
                    toolCallId=tool_id or None,
                    **take_message_meta(),
                )
            elif block_type == "tool_result":
                related_id = block.get("tool_use_id") if isinstance(block.get("tool_use_id"), str) else ""
                is_error = _error_flag(block)
                exit_code = _explicit_exit_code(entry.get("toolUseResult"))
                if exit_code is None and is_error is not None:
                    exit_code = 1 if is_error else 0
                append_tool_result(
                    _tool_result_to_text(block.get("content", "")),
                    timestamp,
                    line_idx,
                    related_id,
                    None,
                    exit_code,
                )

    if invalid_lines:
        logger.debug(f"Transcript {session_id or '<unnamed>'}: {invalid_lines} unparseable line(s) kept as raw text")

    summary = summarize_units(pair_events(events))
    return ReplayArtifact(sessionId=session_id, summary=summary, events=events, rawLines=raw_lines)


@lru_cache(maxsize=max(1, config.PARSE_CACHE_SIZE))
def _parse_cached(path_str: str, mtime_ns: int, size: int, session_id: str) -> ReplayArtifact:
    # newline="" keeps CR bytes; surrogateescape round-trips undecodable bytes on export.
    with open(path_str, encoding="utf-8", errors="surrogateescape", newline="") as handle:
        text = handle.read()
    return parse_transcript_text(text, session_id)


def parse_transcript_file(path: Path, session_id: Optional[str] = None) -> Optional[ReplayArtifact]:
    """Parse one transcript file; unreadable files log a warning and return None."""
    try:
        stats = path.stat()
        return _parse_cached(str(path), stats.st_mtime_ns, stats.st_size, session_id or path.stem)
    except OSError as exc:
        logger.warning(f"Failed to read transcript {path}: {exc}")
        return None


def clear_parse_cache() -> None:
    _parse_cached.cache_clear()


def _iter_transcript_files(directory: Path, recursive: bool) -> list[Path]:
    if not directory.exists():
        return []
    pattern = directory.rglob("*.jsonl") if recursive else directory.glob("*.jsonl")
    return [path for path in pattern if path.is_file()]


def _mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except OSError:
        return 0.0


def find_transcript(directory: Path, session_id: str, recursive: bool = True) -> Optional[Path]:
    """Locate ``<session_id>.jsonl`` under ``directory``; the newest match wins."""
    if not is_valid_session_id(session_id):
        return None
    direct = directory / f"{session_id}.jsonl"
    if direct.is_file():
        return direct
    if not recursive or not directory.exists():
        return None
    matches = [path for path in directory.rglob(f"{session_id}.jsonl") if path.is_file()]
    if not matches:
        return None
    return max(matches, key=_mtime)


def list_transcripts(directory: Path, limit: int = 50, recursive: bool = True) -> list[TranscriptInfo]:
    """List transcript files, most recently modified first."""
    transcripts: list[TranscriptInfo] = []
    files = sorted(
        (path for path in _iter_transcript_files(directory, recursive) if is_valid_session_id(path.stem)),
        key=_mtime,
        reverse=True,
    )
    for path in files[: max(0, limit)]:
        try:
            size = path.stat().st_size
        except OSError as exc:
            logger.warning(f"Skipping transcript {path}: {exc}")
            continue
        transcripts.append(
            TranscriptInfo(
                sessionId=path.stem,
                path=str(path),
                modifiedAt=file_modified_at(path),
                size=size,
            )
        )
    return transcripts
