#!/usr/bin/env python3
"""Render a session transcript in one of the replay views.

Usage:
  python -m workflow_replay.scripts.replay_session ~/.claude/projects/demo/abc123.jsonl
  python -m workflow_replay.scripts.replay_session abc123.jsonl --view tools --status failed --sort-by duration
  python -m workflow_replay.scripts.replay_session --url http://localhost:8000 --session abc123 --view thinking
  python -m workflow_replay.scripts.replay_session abc123.jsonl --view raw --search error --json
  python -m workflow_replay.scripts.replay_session abc123.jsonl --export ./exports
  python -m workflow_replay.scripts.replay_session --list
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from workflow_replay import config
from workflow_replay.client import WorkflowClient, WorkflowClientError
from workflow_replay.engine.pairing import pair_events
from workflow_replay.engine.summary import summarize_units
from workflow_replay.date_utils import format_relative_time
from workflow_replay.display import STATUS_GLYPHS
from workflow_replay.formatting import format_duration, format_size, short_id
from workflow_replay.models import ReplayArtifact, SessionSummary, TranscriptInfo
from workflow_replay.parsers.transcripts import list_transcripts, parse_transcript_file
from workflow_replay.projections.audit import AuditTable, SortKey, SortOrder, StatusFilter
from workflow_replay.projections.raw import RawViewer
from workflow_replay.projections.reasoning import ReasoningProjection, ViewMode
from workflow_replay.projections.timeline import TimelineProjection

VIEWS = ("summary", "timeline", "thinking", "tools", "raw")


def _load_local(path: Path) -> ReplayArtifact:
    artifact = parse_transcript_file(path)
    if artifact is None:
        raise SystemExit(f"Cannot read transcript: {path}")
    return artifact


async def _load_remote(base_url: str, session_id: str) -> ReplayArtifact:
    async with WorkflowClient(base_url=base_url) as client:
        return await client.get_session(session_id)


async def _list_remote(base_url: str) -> list[TranscriptInfo]:
    async with WorkflowClient(base_url=base_url) as client:
        return await client.list_transcripts()


def _transcript_lines(transcripts: list[TranscriptInfo]) -> list[str]:
    if not transcripts:
        return ["No transcripts found"]
    return [
        f"{short_id(item.sessionId):<12} {format_size(item.size):>10}  {format_relative_time(item.modifiedAt)}"
        for item in transcripts
    ]


def _summary_lines(summary: SessionSummary) -> list[str]:
    model = summary.modelDisplayName or summary.model or "unknown"
    return [
        f"Steps:     {summary.totalSteps} ({summary.eventCount} events)",
        f"Thinking:  {summary.thinkingBlocks}",
        f"Tools:     {summary.toolCalls} ({summary.toolSuccesses} ok, {summary.toolFailures} failed)",
        f"Duration:  {format_duration(summary.duration)}",
        f"Model:     {model}" + (f" via {summary.provider}" if summary.provider else ""),
        f"Tokens:    {summary.totalTokens:,} (cost ${summary.totalCost:.4f})",
    ]


def _render(artifact: ReplayArtifact, args: argparse.Namespace) -> tuple[Any, list[str]]:
    """Return (json-able view, text lines) for the requested view."""
    units = pair_events(artifact.events)

    if args.view == "summary":
        summary = summarize_units(units)
        return summary.model_dump(), _summary_lines(summary)

    if args.view == "timeline":
        timeline = TimelineProjection(units)
        timeline.set_search(args.search)
        if args.expand_all:
            timeline.expansion.expand(event.id for unit in timeline.visible_units() for event in unit.events)
        view = timeline.view()
        lines = []
        for entry in view.entries:
            for step in entry.steps:
                meta = " ".join(part for part in (step.tool or "", step.durationLabel or "") if part)
                lines.append(f"{entry.position:>4}  {step.icon} {step.label:<12} {step.timeLabel:<8} {meta}".rstrip())
                lines.append(f"      {step.content if step.expanded else step.preview}")
        return view.model_dump(mode="json"), lines or [view.emptyMessage or ""]

    if args.view == "thinking":
        reasoning = ReasoningProjection(units)
        reasoning.set_search(args.search)
        reasoning.set_mode(args.mode)
        if args.expand_all:
            reasoning.toggle_expand_all()
        view = reasoning.view()
        lines = []
        for card in view.cards:
            lines.append(f"#{card.position} {card.timeLabel}")
            if card.expanded and card.content is not None:
                lines.extend(f"    {line}" for line in card.content.split("\n"))
            elif view.mode is ViewMode.SUMMARY:
                lines.extend(f"  • {point}" for point in card.points)
            else:
                lines.append(f"    {card.preview}" + (" ..." if card.hasMore else ""))
        return view.model_dump(mode="json"), lines or [view.emptyMessage or ""]

    if args.view == "tools":
        table = AuditTable(units)
        table.set_search(args.search)
        table.set_tool_filter(args.tool)
        table.set_status_filter(args.status)
        table.set_sort(args.sort_by, args.sort_order)
        if args.expand_all:
            table.expansion.expand(pair.id for pair in table.visible_pairs())
        view = table.view()
        stats = view.stats
        lines = [f"{stats.total} calls, {stats.success} ok, {stats.failed} failed, {stats.totalDurationLabel} total"]
        for row in view.rows:
            glyph = STATUS_GLYPHS[row.status]
            lines.append(f"{row.icon} {row.toolLabel:<12} {glyph} {row.durationLabel:>8}  {row.description}")
            if row.expanded:
                if row.arguments:
                    lines.extend(f"      {line}" for line in row.arguments.split("\n"))
                lines.append(f"      exit={row.exitCode if row.exitCode is not None else '-'}")
        if view.emptyMessage:
            lines.append(view.emptyMessage)
        return view.model_dump(mode="json"), lines

    raw = RawViewer(artifact.rawLines, artifact.sessionId)
    raw.set_search(args.search)
    view = raw.view()
    lines = [f"{line.lineNumber:>5} [{line.kind}] {line.raw}" for line in view.lines]
    return view.model_dump(mode="json"), lines or [view.emptyMessage or ""]


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay a session transcript.")
    parser.add_argument("path", nargs="?", help="Local transcript .jsonl file")
    parser.add_argument("--url", default=None, help=f"Replay API base URL (e.g. {config.API_BASE_URL})")
    parser.add_argument("--session", default=None, help="Session id to fetch from --url")
    parser.add_argument("--view", choices=VIEWS, default="summary")
    parser.add_argument("--search", default="")
    parser.add_argument("--mode", choices=[m.value for m in ViewMode], default=ViewMode.SUMMARY.value)
    parser.add_argument("--tool", default="all")
    parser.add_argument("--status", choices=[s.value for s in StatusFilter], default=StatusFilter.ALL.value)
    parser.add_argument("--sort-by", choices=[k.value for k in SortKey], default=SortKey.POSITION.value)
    parser.add_argument("--sort-order", choices=[o.value for o in SortOrder], default=SortOrder.ASC.value)
    parser.add_argument("--expand-all", action="store_true")
    parser.add_argument("--json", action="store_true", help="Emit the view as JSON")
    parser.add_argument("--export", type=Path, default=None, help="Write the full transcript into this directory")
    parser.add_argument("--list", action="store_true", help="List transcripts instead of rendering one")
    args = parser.parse_args()

    if args.list:
        if args.url:
            try:
                transcripts = asyncio.run(_list_remote(args.url))
            except WorkflowClientError as exc:
                print(f"Failed to list transcripts: {exc}", file=sys.stderr)
                return 1
        else:
            directory = Path(args.path).expanduser() if args.path else config.TRANSCRIPTS_DIR
            transcripts = list_transcripts(directory, limit=config.TRANSCRIPT_LIST_LIMIT)
        print("\n".join(_transcript_lines(transcripts)))
        return 0

    if args.url:
        if not args.session:
            parser.error("--session is required with --url")
        try:
            artifact = asyncio.run(_load_remote(args.url, args.session))
        except WorkflowClientError as exc:
            print(f"Failed to load session {args.session}: {exc}", file=sys.stderr)
            return 1
    elif args.path:
        artifact = _load_local(Path(args.path).expanduser())
    else:
        parser.error("provide a transcript path or --url/--session")

    if args.export:
        target = RawViewer(artifact.rawLines, artifact.sessionId).download(args.export)
        print(f"Exported {len(artifact.rawLines)} lines to {target}")
        return 0

    payload, lines = _render(artifact, args)
    if args.json:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print("\n".join(lines))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
