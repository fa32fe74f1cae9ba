"""Shared timestamp normalization and display helpers."""
from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional


def _format_datetime_utc(value: datetime) -> str:
    dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse ISO strings (with or without a trailing Z) and epoch milliseconds."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value) / 1000.0, timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    try:
        parsed = datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def normalize_iso_date(value: Any) -> str:
    """Convert mixed timestamp inputs into comparable ISO strings."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    parsed = parse_timestamp(value)
    if parsed is None:
        return ""
    return _format_datetime_utc(parsed)


def elapsed_ms(started: Any, finished: Any) -> Optional[int]:
    start_dt = parse_timestamp(started)
    end_dt = parse_timestamp(finished)
    if start_dt is None or end_dt is None:
        return None
    delta = (end_dt - start_dt).total_seconds() * 1000.0
    if delta < 0:
        return None
    return int(round(delta))


def format_time(timestamp: str) -> str:
    """Render a wall-clock time; unparseable input is shown as-is."""
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return timestamp
    return parsed.strftime("%H:%M:%S")


def format_relative_time(value: str, now: Optional[datetime] = None) -> str:
    then = parse_timestamp(value)
    if then is None:
        return value
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    diff_mins = int((current - then).total_seconds() // 60)

    if diff_mins < 1:
        return "Just now"
    if diff_mins < 60:
        return f"{diff_mins}m ago"
    diff_hours = diff_mins // 60
    if diff_hours < 24:
        return f"{diff_hours}h ago"
    return f"{diff_hours // 24}d ago"


def file_modified_at(path: Path) -> str:
    """Return the normalized filesystem modification timestamp."""
    try:
        stats = path.stat()
    except OSError:
        return ""
    return _format_datetime_utc(datetime.fromtimestamp(float(stats.st_mtime), timezone.utc))
