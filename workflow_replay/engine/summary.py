"""Reduce grouped units into session-level counters."""
from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from workflow_replay.display import outcome_status
from workflow_replay.engine.pairing import iter_unit_events, paired_units
from workflow_replay.model_identity import derive_model_identity
from workflow_replay.models import EventKind, SessionSummary, WorkflowEvent, WorkflowUnit


def _first_metadata_value(events: Sequence[WorkflowEvent], field: str) -> Optional[str]:
    for event in events:
        if event.metadata is None:
            continue
        value = getattr(event.metadata, field, None)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def summarize_units(units: Sequence[WorkflowUnit]) -> SessionSummary:
    """Derive the session summary from paired and single units.

    ``totalSteps`` counts units, so a paired tool call and result is one step.
    Tool calls and thinking blocks are counted per event, paired or not.
    """
    events = list(iter_unit_events(units))
    pairs = paired_units(units)
    kind_counts: Counter[str] = Counter(event.kind.value for event in events)

    duration = 0
    successes = 0
    failures = 0
    for pair in pairs:
        metadata = pair.outcome.metadata
        duration += (metadata.duration or 0) if metadata else 0
        status = outcome_status(pair.outcome)
        if status == "success":
            successes += 1
        elif status == "failed":
            failures += 1

    tokens_in = 0
    tokens_out = 0
    total_tokens = 0
    total_cost = 0.0
    for event in events:
        usage = event.metadata.usage if event.metadata else None
        if usage is None:
            continue
        tokens_in += usage.input
        tokens_out += usage.output
        total_tokens += usage.total or (usage.input + usage.output)
        total_cost += usage.cost or 0.0

    timestamps = [event.timestamp for event in events if event.timestamp]
    model = _first_metadata_value(events, "model")
    provider = _first_metadata_value(events, "provider")
    identity = derive_model_identity(model)

    return SessionSummary(
        totalSteps=len(units),
        eventCount=len(events),
        thinkingBlocks=kind_counts.get(EventKind.REASONING.value, 0),
        toolCalls=kind_counts.get(EventKind.INVOCATION.value, 0),
        toolSuccesses=successes,
        toolFailures=failures,
        duration=duration,
        kindCounts={kind.value: kind_counts.get(kind.value, 0) for kind in EventKind},
        tokensIn=tokens_in,
        tokensOut=tokens_out,
        totalTokens=total_tokens,
        totalCost=round(total_cost, 6),
        model=model,
        provider=provider,
        modelDisplayName=identity["modelDisplayName"],
        startedAt=timestamps[0] if timestamps else None,
        endedAt=timestamps[-1] if timestamps else None,
    )
