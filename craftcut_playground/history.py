"""Snapshot-based undo/redo over a design's panels and settings.

One ``save`` happens at the start of every gesture, before the mutation, so
one undo step equals one human action. Selection and the viewport are not
part of the snapshot.

The cursor points at the most recent entry that has not been undone. When
undo starts from the newest entry, the live state is pushed first so that
redo can come back to it; that is why redo reads ``cursor + 2``.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import List, Tuple

from .document import Panel, PanelStore, Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    panels: Tuple[Panel, ...]
    settings: Settings


def _capture(store: PanelStore) -> HistoryEntry:
    return HistoryEntry(tuple(copy.deepcopy(store.panels)), copy.deepcopy(store.settings))


def _restore(store: PanelStore, entry: HistoryEntry) -> None:
    # Copy again so later edits never reach the recorded entry
    store.panels = list(copy.deepcopy(entry.panels))
    store.settings = copy.deepcopy(entry.settings)


class HistoryStore:
    def __init__(self, max_entries: int = 50) -> None:
        self.max_entries = max(1, int(max_entries))
        self._entries: List[HistoryEntry] = []
        self._cursor: int = -1

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._cursor >= 0

    @property
    def can_redo(self) -> bool:
        return self._cursor + 2 < len(self._entries)

    @property
    def undo_depth(self) -> int:
        """How many undo steps are currently available."""
        return self._cursor + 1

    def save(self, store: PanelStore) -> None:
        """Record the state as it is *before* the gesture about to run."""
        del self._entries[self._cursor + 1:]
        self._entries.append(_capture(store))
        self._cursor = len(self._entries) - 1
        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            del self._entries[:overflow]
            self._cursor -= overflow
        logger.debug("History saved (%d entries, cursor %d)", len(self._entries), self._cursor)

    def undo(self, store: PanelStore) -> bool:
        if self._cursor < 0:
            return False
        if self._cursor == len(self._entries) - 1:
            self._entries.append(_capture(store))
        _restore(store, self._entries[self._cursor])
        self._cursor -= 1
        return True

    def redo(self, store: PanelStore) -> bool:
        target = self._cursor + 2
        if target >= len(self._entries):
            return False
        _restore(store, self._entries[target])
        self._cursor += 1
        return True

    def drop_last(self) -> bool:
        """Forget the newest entry, used when a gesture is cancelled before it changed anything."""
        if self._cursor < 0 or self._cursor != len(self._entries) - 1:
            return False
        self._entries.pop()
        self._cursor -= 1
        return True

    def clear(self) -> None:
        self._entries = []
        self._cursor = -1
