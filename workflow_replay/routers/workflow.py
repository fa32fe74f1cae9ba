"""Workflow replay router: session artifacts, transcript listing and read-only views."""
from __future__ import annotations

import logging
from enum import Enum
from typing import TypeVar

from fastapi import APIRouter, HTTPException, Query, Response

from workflow_replay import config
from workflow_replay.engine.pairing import pair_events
from workflow_replay.models import ReplayArtifact, TranscriptInfo
from workflow_replay.parsers.transcripts import (
    find_transcript,
    is_valid_session_id,
    list_transcripts,
    parse_transcript_file,
)
from workflow_replay.projections.audit import (
    ALL_TOOLS,
    AuditTable,
    AuditTableView,
    SortKey,
    SortOrder,
    StatusFilter,
)
from workflow_replay.projections.raw import EXPORT_MEDIA_TYPE, RawTranscriptView, RawViewer
from workflow_replay.projections.reasoning import ReasoningProjection, ReasoningView, ViewMode
from workflow_replay.projections.timeline import TimelineView, render_timeline

logger = logging.getLogger("replay.router")

workflow_router = APIRouter(prefix="/workflow", tags=["workflow"])

_E = TypeVar("_E", bound=Enum)


def _parse_choice(enum_cls: type[_E], value: str, name: str) -> _E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise HTTPException(status_code=400, detail=f"Invalid {name} '{value}'; expected one of: {allowed}")


def _load_artifact(session_id: str) -> ReplayArtifact:
    if not is_valid_session_id(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")

    path = find_transcript(config.TRANSCRIPTS_DIR, session_id, recursive=config.TRANSCRIPT_RECURSIVE_SCAN)
    if path is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")

    artifact = parse_transcript_file(path, session_id)
    if artifact is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return artifact


@workflow_router.get("/transcripts", response_model=list[TranscriptInfo])
def get_transcripts():
    """List available session transcripts, newest first."""
    transcripts = list_transcripts(
        config.TRANSCRIPTS_DIR,
        limit=config.TRANSCRIPT_LIST_LIMIT,
        recursive=config.TRANSCRIPT_RECURSIVE_SCAN,
    )
    logger.debug(f"Listed {len(transcripts)} transcripts from {config.TRANSCRIPTS_DIR}")
    return transcripts


@workflow_router.get("/sessions/{session_id}", response_model=ReplayArtifact)
def get_workflow_session(session_id: str):
    """Return the full replay artifact for one session."""
    return _load_artifact(session_id)


@workflow_router.get("/sessions/{session_id}/export")
def export_workflow_session(session_id: str):
    """Download the untouched transcript lines."""
    artifact = _load_artifact(session_id)
    viewer = RawViewer(artifact.rawLines, artifact.sessionId)
    return Response(
        content=viewer.export_text().encode("utf-8", "surrogateescape"),
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{viewer.export_filename()}"'},
    )


@workflow_router.get("/sessions/{session_id}/timeline", response_model=TimelineView)
def get_workflow_timeline(session_id: str, search: str = Query("")):
    artifact = _load_artifact(session_id)
    return render_timeline(pair_events(artifact.events), search)


@workflow_router.get("/sessions/{session_id}/thinking", response_model=ReasoningView)
def get_workflow_thinking(
    session_id: str,
    search: str = Query(""),
    mode: str = Query(ViewMode.SUMMARY.value),
):
    view_mode = _parse_choice(ViewMode, mode, "mode")
    artifact = _load_artifact(session_id)
    projection = ReasoningProjection(pair_events(artifact.events))
    projection.set_search(search)
    projection.set_mode(view_mode)
    return projection.view()


@workflow_router.get("/sessions/{session_id}/tools", response_model=AuditTableView)
def get_workflow_tools(
    session_id: str,
    search: str = Query(""),
    tool: str = Query(ALL_TOOLS),
    status: str = Query(StatusFilter.ALL.value),
    sort_by: str = Query(SortKey.POSITION.value),
    sort_order: str = Query(SortOrder.ASC.value),
):
    status_filter = _parse_choice(StatusFilter, status, "status")
    sort_key = _parse_choice(SortKey, sort_by, "sort_by")
    order = _parse_choice(SortOrder, sort_order, "sort_order")

    artifact = _load_artifact(session_id)
    table = AuditTable(pair_events(artifact.events))
    table.set_search(search)
    table.set_tool_filter(tool)
    table.set_status_filter(status_filter)
    table.set_sort(sort_key, order)
    return table.view()


@workflow_router.get("/sessions/{session_id}/raw", response_model=RawTranscriptView)
def get_workflow_raw(session_id: str, search: str = Query("")):
    artifact = _load_artifact(session_id)
    viewer = RawViewer(artifact.rawLines, artifact.sessionId)
    viewer.set_search(search)
    return viewer.view()
