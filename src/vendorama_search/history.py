"""Back-navigation history of previous result sets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from .filters import FilterSet
from .models import Product, SearchMode


@dataclass(frozen=True)
class HistoryEntry:
    """Snapshot of everything needed to put a previous result set back on screen."""

    products: Tuple[Product, ...]
    query: str
    mode: SearchMode
    filters: FilterSet
    within_vendor_search: bool = False
    vendor_target_id: Optional[str] = None
    related_target_id: Optional[str] = None
    seen_ids: FrozenSet[str] = field(default_factory=frozenset)
    total_count: Optional[int] = None


class HistoryStack:
    """In-memory LIFO of history entries; lives only as long as the session."""

    def __init__(self) -> None:
        self._entries: List[HistoryEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_go_back(self) -> bool:
        return bool(self._entries)

    def push(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def pop(self) -> Optional[HistoryEntry]:
        if not self._entries:
            return None
        return self._entries.pop()

    def clear(self) -> None:
        self._entries.clear()
