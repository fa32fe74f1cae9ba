"""Pydantic models matching the workflow viewer's TypeScript types."""
from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


# ── Event model ─────────────────────────────────────────────────────

class EventKind(str, Enum):
    REASONING = "thinking"
    INVOCATION = "tool_call"
    OUTCOME = "tool_result"
    TEXT = "text"
    DECISION = "decision"
    SYSTEM = "system"


class TokenUsage(BaseModel):
    input: int = 0
    output: int = 0
    total: int = 0
    cost: Optional[float] = None


class EventMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    tool: Optional[str] = None
    arguments: Optional[dict[str, Any]] = None
    duration: Optional[int] = None  # milliseconds
    exitCode: Optional[int] = None
    model: Optional[str] = None
    provider: Optional[str] = None
    usage: Optional[TokenUsage] = None
    toolCallId: Optional[str] = None
    sourceLine: Optional[int] = None  # index into ReplayArtifact.rawLines


class WorkflowEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    index: int = Field(ge=0)
    timestamp: str = ""
    kind: EventKind = Field(validation_alias=AliasChoices("kind", "type"))
    content: str = ""
    metadata: Optional[EventMetadata] = None

    @property
    def tool(self) -> Optional[str]:
        return self.metadata.tool if self.metadata else None


# ── Grouped units ───────────────────────────────────────────────────

class PairedUnit(BaseModel):
    """An invocation immediately followed by its outcome."""

    model_config = ConfigDict(frozen=True)

    type: Literal["pair"] = "pair"
    invocation: WorkflowEvent
    outcome: WorkflowEvent

    @model_validator(mode="after")
    def _check_adjacent(self) -> PairedUnit:
        if self.invocation.kind is not EventKind.INVOCATION:
            raise ValueError(f"pair head must be a tool call, got {self.invocation.kind.value}")
        if self.outcome.kind is not EventKind.OUTCOME:
            raise ValueError(f"pair tail must be a tool result, got {self.outcome.kind.value}")
        if self.outcome.index != self.invocation.index + 1:
            raise ValueError(
                f"pair must be adjacent: tool call #{self.invocation.index}, tool result #{self.outcome.index}"
            )
        return self

    @property
    def id(self) -> str:
        return self.invocation.id

    @property
    def events(self) -> tuple[WorkflowEvent, WorkflowEvent]:
        return (self.invocation, self.outcome)


class SingletonUnit(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["single"] = "single"
    event: WorkflowEvent

    @property
    def id(self) -> str:
        return self.event.id

    @property
    def events(self) -> tuple[WorkflowEvent]:
        return (self.event,)


WorkflowUnit = Union[PairedUnit, SingletonUnit]


# ── Session-level models ────────────────────────────────────────────

class SessionSummary(BaseModel):
    totalSteps: int = 0
    eventCount: int = 0
    thinkingBlocks: int = 0
    toolCalls: int = 0
    toolSuccesses: int = 0
    toolFailures: int = 0
    duration: int = 0  # milliseconds, summed over paired tool results
    kindCounts: dict[str, int] = Field(default_factory=dict)
    tokensIn: int = 0
    tokensOut: int = 0
    totalTokens: int = 0
    totalCost: float = 0.0
    model: Optional[str] = None
    provider: Optional[str] = None
    modelDisplayName: str = ""
    startedAt: Optional[str] = None
    endedAt: Optional[str] = None


class ReplayArtifact(BaseModel):
    """Everything fetched for one session. Replaced wholesale, never patched."""

    model_config = ConfigDict(frozen=True)

    sessionId: str = ""
    summary: SessionSummary = Field(default_factory=SessionSummary)
    events: list[WorkflowEvent] = Field(default_factory=list, validation_alias=AliasChoices("events", "steps"))
    rawLines: list[str] = Field(default_factory=list)


class TranscriptInfo(BaseModel):
    sessionId: str
    path: str
    modifiedAt: str = ""
    size: int = 0
