"""Workflow Replay configuration."""
import os
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default

# Package root (workflow_replay/)
PACKAGE_ROOT = Path(__file__).resolve().parent

# Transcript sources (Claude Code keeps one JSONL file per session under projects/<hash>/)
TRANSCRIPTS_DIR = Path(os.getenv("REPLAY_TRANSCRIPTS_DIR", str(Path.home() / ".claude" / "projects"))).expanduser()
TRANSCRIPT_LIST_LIMIT = _env_int("REPLAY_TRANSCRIPT_LIST_LIMIT", 50)
TRANSCRIPT_RECURSIVE_SCAN = _env_bool("REPLAY_TRANSCRIPT_RECURSIVE_SCAN", True)
PARSE_CACHE_SIZE = _env_int("REPLAY_PARSE_CACHE_SIZE", 16)

# Client
API_BASE_URL = os.getenv("REPLAY_API_BASE_URL", "http://localhost:8000")
CLIENT_TIMEOUT_SECONDS = _env_int("REPLAY_CLIENT_TIMEOUT_SECONDS", 30)

# Logging
LOG_LEVEL = os.getenv("REPLAY_LOG_LEVEL", "INFO").upper()

# Server settings
HOST = os.getenv("REPLAY_HOST", "0.0.0.0")
PORT = _env_int("REPLAY_PORT", 8000)

# CORS
FRONTEND_ORIGIN = os.getenv("REPLAY_FRONTEND_ORIGIN", "http://localhost:3000")
