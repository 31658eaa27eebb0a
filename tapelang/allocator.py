from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .config import MIN_SCRATCH_CELLS
from .errors import ScratchDisciplineError, ScratchExhaustion

logger = logging.getLogger(__name__)


class TapeAllocator:
    """Assigns tape offsets to variables and lends out scratch cells.

    The scratch pool occupies offsets ``0 .. scratch_capacity - 1`` and is used as a
    stack growing downward from the top of that range, so the shallowest scratch
    cells sit right next to the first variable.  Variables are laid out from
    ``scratch_capacity`` upward in first-reference order and never move or get reused.
    """

    def __init__(self, scratch_capacity: int = 16) -> None:
        if scratch_capacity < MIN_SCRATCH_CELLS:
            raise ValueError(f"scratch_capacity must be at least {MIN_SCRATCH_CELLS}")
        self.scratch_capacity = scratch_capacity
        self.variable_base = scratch_capacity
        self._offsets: Dict[str, int] = {}
        self._checked_out: List[int] = []
        self.high_water = 0

    # --- Variables ---

    def resolve(self, name: str) -> int:
        offset = self._offsets.get(name)
        if offset is None:
            offset = self.variable_base + len(self._offsets)
            self._offsets[name] = offset
            logger.debug("allocated variable %r at offset %d", name, offset)
        return offset

    @property
    def symbols(self) -> Dict[str, int]:
        return dict(self._offsets)

    @property
    def tape_size(self) -> int:
        return self.variable_base + len(self._offsets)

    # --- Scratch cells ---

    @property
    def scratch_depth(self) -> int:
        return len(self._checked_out)

    def peek_scratch(self) -> Optional[int]:
        if len(self._checked_out) >= self.scratch_capacity:
            return None
        return self.scratch_capacity - 1 - len(self._checked_out)

    def checkout_scratch(self) -> int:
        offset = self.peek_scratch()
        if offset is None:
            raise ScratchExhaustion(
                f"Nesting too deep: all {self.scratch_capacity} scratch cells are in use"
            )
        self._checked_out.append(offset)
        self.high_water = max(self.high_water, len(self._checked_out))
        logger.debug("checked out scratch cell %d (depth %d)", offset, len(self._checked_out))
        return offset

    def release_scratch(self, offset: int) -> None:
        if not self._checked_out or self._checked_out[-1] != offset:
            raise ScratchDisciplineError(
                f"Scratch cell {offset} released out of order (live: {self._checked_out})"
            )
        self._checked_out.pop()

    def live_scratch(self) -> List[int]:
        return list(self._checked_out)


__all__ = ["TapeAllocator"]
