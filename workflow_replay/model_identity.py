"""Model identity parsing for the session header."""
from __future__ import annotations

import re


_VERSION_TOKEN_PATTERN = re.compile(r"^\d+$")
_DATE_SUFFIX_PATTERN = re.compile(r"(?:-\d{8}|-\d{4}-\d{2}-\d{2})+$")

_PROVIDER_LABELS = {
    "claude": "Claude",
    "anthropic": "Claude",
    "gpt": "OpenAI",
    "openai": "OpenAI",
    "o1": "OpenAI",
    "o3": "OpenAI",
    "gemini": "Gemini",
    "google": "Gemini",
}


def _title_case(value: str) -> str:
    return " ".join(part.capitalize() for part in (value or "").strip().split() if part.strip())


def _provider_label(token: str) -> str:
    lowered = (token or "").strip().lower()
    if lowered in _PROVIDER_LABELS:
        return _PROVIDER_LABELS[lowered]
    if lowered:
        return _title_case(lowered)
    return "Unknown"


def canonical_model_name(raw_model: str | None) -> str:
    """Return a model identifier without routing prefix or build/date suffix.

    Example:
      anthropic/claude-opus-4-5-20251101 -> claude-opus-4-5
    """
    raw = (raw_model or "").strip().lower()
    if not raw:
        return ""
    if "/" in raw:
        raw = raw.rsplit("/", 1)[-1]
    normalized = re.sub(r"[\s_]+", "-", raw)
    normalized = re.sub(r"-{2,}", "-", normalized).strip("-")
    stripped = _DATE_SUFFIX_PATTERN.sub("", normalized).strip("-")
    return stripped or normalized


def derive_model_identity(raw_model: str | None) -> dict[str, str]:
    """Derive provider/family/version labels from a raw model string."""
    canonical = canonical_model_name(raw_model)
    if not canonical:
        return {
            "modelDisplayName": "",
            "modelProvider": "",
            "modelFamily": "",
            "modelVersion": "",
        }

    parts = [part for part in canonical.split("-") if part]
    provider = _provider_label(parts[0])

    family = ""
    if len(parts) >= 2 and not _VERSION_TOKEN_PATTERN.match(parts[1]):
        family = _title_case(parts[1])

    numeric_tokens: list[str] = []
    for token in parts[1:]:
        if _VERSION_TOKEN_PATTERN.match(token):
            numeric_tokens.append(token)
            if len(numeric_tokens) >= 2:
                break
        elif numeric_tokens:
            break

    version_number = ".".join(numeric_tokens)
    model_version = " ".join(part for part in (family, version_number) if part)

    display_name = " ".join(part for part in (provider, model_version) if part).strip()
    return {
        "modelDisplayName": display_name or (raw_model or "").strip(),
        "modelProvider": provider,
        "modelFamily": family,
        "modelVersion": model_version,
    }
