"""Read-only views over a loaded replay artifact."""

from workflow_replay.projections.audit import AuditTable, SortKey, SortOrder, StatusFilter
from workflow_replay.projections.raw import RawViewer
from workflow_replay.projections.reasoning import ReasoningProjection, ViewMode, extract_key_points
from workflow_replay.projections.timeline import TimelineProjection, filter_units

__all__ = [
    "AuditTable",
    "RawViewer",
    "ReasoningProjection",
    "SortKey",
    "SortOrder",
    "StatusFilter",
    "TimelineProjection",
    "ViewMode",
    "extract_key_points",
    "filter_units",
]
