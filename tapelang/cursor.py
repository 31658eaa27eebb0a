from __future__ import annotations

from typing import List

from .instructions import Op
from .syntax import Direction


class CursorTracker:
    """Compile-time copy of the machine's cursor; every move is emitted through here."""

    def __init__(self, origin: int = 0) -> None:
        self.position = origin

    def move_to(self, target: int) -> List[Op]:
        delta = target - self.position
        self.position = target
        if delta > 0:
            return [Op.MOVE_RIGHT] * delta
        if delta < 0:
            return [Op.MOVE_LEFT] * (-delta)
        return []

    def shift(self, direction: Direction) -> List[Op]:
        return self.move_to(self.position + direction.step)


__all__ = ["CursorTracker"]
