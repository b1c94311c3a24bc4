"""Point, selection and change tracking state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Selection = Tuple[int, int]  # (start, end) offsets, start <= end


@dataclass(slots=True)
class BufferState:
    """Mutable point + selection info tied to a BufferDocument version."""

    point: int = 0
    selection: Optional[Selection] = None
    active_register: str = '"'
    last_change_tick: int = 0

    def set_point(self, offset: int) -> None:
        self.point = offset

    def clear_selection(self) -> None:
        self.selection = None

    def set_selection(self, start: int, end: int) -> None:
        if start > end:
            start, end = end, start
        self.selection = (start, end)
