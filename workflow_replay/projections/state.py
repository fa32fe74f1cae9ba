"""Per-projection expansion state."""
from __future__ import annotations

from typing import Iterable


class ExpansionState:
    """Expanded flags keyed by unit id, owned by a single projection.

    Ids that were never touched read as collapsed.
    """

    def __init__(self) -> None:
        self._expanded: dict[str, bool] = {}

    def is_expanded(self, item_id: str) -> bool:
        return self._expanded.get(item_id, False)

    def toggle(self, item_id: str) -> bool:
        expanded = not self.is_expanded(item_id)
        self._expanded[item_id] = expanded
        return expanded

    def set(self, item_id: str, expanded: bool) -> None:
        self._expanded[item_id] = expanded

    def expand(self, item_ids: Iterable[str]) -> None:
        for item_id in item_ids:
            self._expanded[item_id] = True

    def clear(self) -> None:
        self._expanded.clear()

    @property
    def expanded_ids(self) -> frozenset[str]:
        return frozenset(item_id for item_id, flag in self._expanded.items() if flag)

    def __len__(self) -> int:
        return len(self.expanded_ids)
