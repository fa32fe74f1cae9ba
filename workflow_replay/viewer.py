"""Session viewer: fetches an artifact and owns the four projections built from it."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from workflow_replay.client import WorkflowClient, WorkflowClientError
from workflow_replay.engine.pairing import pair_events
from workflow_replay.engine.summary import summarize_units
from workflow_replay.models import ReplayArtifact, SessionSummary, TranscriptInfo, WorkflowUnit
from workflow_replay.projections.audit import AuditTable
from workflow_replay.projections.raw import RawViewer
from workflow_replay.projections.reasoning import ReasoningProjection
from workflow_replay.projections.timeline import TimelineProjection

logger = logging.getLogger("replay.viewer")


class ViewerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SELECTOR = "selector"


class ActiveView(str, Enum):
    TIMELINE = "timeline"
    THINKING = "thinking"
    TOOLS = "tools"
    RAW = "raw"


class ReplayViewer:
    """Loads one session at a time.

    Each ``select`` call takes a new generation number. A response is applied
    only if no later ``select`` started and the selected id still matches, so
    a slow earlier fetch can never overwrite a newer session. Any fetch error
    drops the viewer back to the session selector.
    """

    def __init__(self, client: WorkflowClient, session_id: Optional[str] = None) -> None:
        self._client = client
        self._generation = 0
        self.session_id = session_id
        self.state = ViewerState.IDLE
        self.active_view = ActiveView.TIMELINE
        self.error: Optional[str] = None
        self.artifact: Optional[ReplayArtifact] = None
        self.units: list[WorkflowUnit] = []
        self.summary = SessionSummary()
        self.transcripts: list[TranscriptInfo] = []
        self.timeline: Optional[TimelineProjection] = None
        self.reasoning: Optional[ReasoningProjection] = None
        self.audit: Optional[AuditTable] = None
        self.raw: Optional[RawViewer] = None

    @property
    def generation(self) -> int:
        return self._generation

    async def open(self) -> None:
        """Load the initial session, or show the selector when none was given."""
        if self.session_id:
            await self.select(self.session_id)
        else:
            await self.show_selector()

    async def select(self, session_id: str) -> bool:
        """Fetch ``session_id``; returns True when its artifact was applied."""
        self._generation += 1
        generation = self._generation
        self.session_id = session_id
        self.state = ViewerState.LOADING
        self.error = None

        try:
            artifact = await self._client.get_session(session_id)
        except WorkflowClientError as exc:
            if not self._is_current(generation, session_id):
                logger.debug(f"Ignoring stale failure for session {session_id}: {exc}")
                return False
            logger.warning(f"Failed to load session {session_id}: {exc}")
            self.error = str(exc)
            await self._fall_back_to_selector(generation)
            return False

        if not self._is_current(generation, session_id):
            logger.debug(f"Discarding stale response for session {session_id} (generation {generation})")
            return False

        self._load(artifact)
        return True

    async def show_selector(self) -> None:
        self._generation += 1
        self.session_id = None
        await self._fall_back_to_selector(self._generation)

    def set_view(self, view: ActiveView | str) -> None:
        self.active_view = ActiveView(view)

    def _is_current(self, generation: int, session_id: str) -> bool:
        return generation == self._generation and self.session_id == session_id

    async def _fall_back_to_selector(self, generation: int) -> None:
        self._reset()
        self.state = ViewerState.SELECTOR
        try:
            transcripts = await self._client.list_transcripts()
        except WorkflowClientError as exc:
            logger.warning(f"Failed to list transcripts: {exc}")
            transcripts = []
        if generation != self._generation:
            return
        self.transcripts = transcripts

    def _reset(self) -> None:
        self.artifact = None
        self.units = []
        self.summary = SessionSummary()
        self.timeline = None
        self.reasoning = None
        self.audit = None
        self.raw = None

    def _load(self, artifact: ReplayArtifact) -> None:
        units = pair_events(artifact.events)
        self.artifact = artifact
        self.units = units
        self.summary = summarize_units(units)
        self.timeline = TimelineProjection(units)
        self.reasoning = ReasoningProjection(units)
        self.audit = AuditTable(units)
        self.raw = RawViewer(artifact.rawLines, artifact.sessionId or self.session_id)
        self.state = ViewerState.READY
        logger.info(
            f"Loaded session {self.session_id}: {len(artifact.events)} events, "
            f"{len(units)} units, {len(artifact.rawLines)} raw lines"
        )
