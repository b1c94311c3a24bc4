"""Per-document memory of the last session's region anchors."""

from __future__ import annotations

from typing import Iterable, Optional
from weakref import WeakKeyDictionary

from multiedit.buffer import Buffer

from .models import HistorySnapshot


class HistoryStore:
    """Snapshots keyed weakly by buffer, so each lives as long as its document."""

    def __init__(self) -> None:
        self._snapshots: "WeakKeyDictionary[Buffer, HistorySnapshot]" = WeakKeyDictionary()

    def save(self, buffer: Buffer, starts: Iterable[int]) -> HistorySnapshot:
        snapshot = HistorySnapshot(starts=tuple(sorted(starts)))
        self._snapshots[buffer] = snapshot
        return snapshot

    def load(self, buffer: Buffer) -> Optional[HistorySnapshot]:
        return self._snapshots.get(buffer)

    def forget(self, buffer: Buffer) -> None:
        self._snapshots.pop(buffer, None)


__all__ = ["HistoryStore"]
