from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .allocator import TapeAllocator
from .conditions import ConditionLowering
from .config import CompilerOptions
from .cursor import CursorTracker
from .errors import ScratchDisciplineError
from .instructions import MOVES, Op
from .statements import StatementLowering
from .syntax import Direction, Program

logger = logging.getLogger(__name__)


# === Shared per-run state ===


@dataclass
class CodeGenState:
    allocator: TapeAllocator
    cursor: CursorTracker
    output: List[Op] = field(default_factory=list)
    scaled_increments: bool = True

    def emit(self, *ops: Op) -> None:
        for op in ops:
            if op in MOVES:
                raise ValueError("cursor moves must go through the cursor tracker")
        self.output.extend(ops)

    def goto(self, cell: int) -> None:
        self.output.extend(self.cursor.move_to(cell))

    def shift(self, direction: Direction) -> None:
        self.output.extend(self.cursor.shift(direction))

    @contextmanager
    def loop(self, cell: int) -> Iterator[None]:
        """Emit ``[ body ]`` tested on ``cell``; the body must leave ``cell`` in a state that ends the loop."""
        self.goto(cell)
        self.emit(Op.LOOP_BEGIN)
        try:
            yield
        finally:
            self.goto(cell)
            self.emit(Op.LOOP_END)

    @contextmanager
    def scratch(self) -> Iterator[int]:
        # callers hand the cell back zeroed
        cell = self.allocator.checkout_scratch()
        try:
            yield cell
        finally:
            self.allocator.release_scratch(cell)

    def clear(self, cell: int) -> None:
        self.goto(cell)
        self.emit(Op.LOOP_BEGIN, Op.DECREMENT, Op.LOOP_END)

    def set_cell(self, cell: int, value: int) -> None:
        self.clear(cell)
        self.add(cell, value)

    def add(self, cell: int, amount: int) -> None:
        if amount == 0:
            return
        if self.scaled_increments and self._try_scaled_add(cell, amount):
            return
        self.add_linear(cell, amount)

    def copy(self, source: int, target: int) -> None:
        # target must start at zero; source is drained into target and temp, then restored from temp
        with self.scratch() as temp:
            with self.loop(source):
                self.add(source, -1)
                self.add(target, 1)
                self.add(temp, 1)
            with self.loop(temp):
                self.add(temp, -1)
                self.add(source, 1)

    def _try_scaled_add(self, cell: int, amount: int) -> bool:
        counter = self.allocator.peek_scratch()
        if counter is None or counter == cell:
            return False
        pattern = select_scaled_increment(abs(amount), abs(cell - counter))
        if pattern is None:
            return False
        loop_count, step, remainder = pattern
        op = Op.INCREMENT if amount > 0 else Op.DECREMENT
        with self.scratch() as counter:
            self.add_linear(counter, loop_count)
            with self.loop(counter):
                self.add_linear(counter, -1)
                self.goto(cell)
                self.emit(*[op] * step)
        self.goto(cell)
        self.emit(*[op] * remainder)
        return True

    def add_linear(self, cell: int, amount: int) -> None:
        self.goto(cell)
        if amount > 0:
            self.emit(*[Op.INCREMENT] * amount)
        elif amount < 0:
            self.emit(*[Op.DECREMENT] * (-amount))


MAX_SCALE_LOOPS = 16


def scaled_increment_cost(loop_count: int, step: int, remainder: int, distance: int) -> int:
    # instructions emitted, counting brackets and cursor trips
    return loop_count + step + remainder + 4 * distance + 5


def select_scaled_increment(magnitude: int, distance: int) -> Optional[Tuple[int, int, int]]:
    """Pick ``(loop_count, step, remainder)`` for adding ``magnitude`` with a counter ``distance`` cells away.

    Returns ``None`` when no factoring is cheaper than ``magnitude`` plain increments.
    """
    if magnitude <= 0 or distance <= 0:
        return None
    patterns = [
        (loop_count, magnitude // loop_count, magnitude % loop_count)
        for loop_count in range(2, min(MAX_SCALE_LOOPS, magnitude) + 1)
    ]
    if not patterns:
        return None
    best = min(patterns, key=lambda pattern: scaled_increment_cost(*pattern, distance))
    if scaled_increment_cost(*best, distance) >= magnitude:
        return None
    return best


# === Driver ===


@dataclass(frozen=True)
class GeneratedProgram:
    instructions: Tuple[Op, ...]
    symbols: Dict[str, int]
    final_position: int
    tape_size: int
    scratch_high_water: int


class CodeGenerator:
    def __init__(self, options: Optional[CompilerOptions] = None) -> None:
        self.options = options or CompilerOptions()

    def new_state(self) -> CodeGenState:
        return CodeGenState(
            allocator=TapeAllocator(self.options.scratch_capacity),
            cursor=CursorTracker(),
            scaled_increments=self.options.scaled_increments,
        )

    def generate(self, program: Program) -> List[Op]:
        return list(self.generate_program(program).instructions)

    def generate_program(self, program: Program) -> GeneratedProgram:
        state = self.new_state()
        lowering = StatementLowering(state, ConditionLowering(state))
        lowering.lower_block(program.statements)
        live = state.allocator.live_scratch()
        if live:
            raise ScratchDisciplineError(f"Scratch cells still checked out after generation: {live}")
        logger.debug(
            "generated %d instructions for %d top-level statements",
            len(state.output),
            len(program.statements),
        )
        return GeneratedProgram(
            instructions=tuple(state.output),
            symbols=state.allocator.symbols,
            final_position=state.cursor.position,
            tape_size=state.allocator.tape_size,
            scratch_high_water=state.allocator.high_water,
        )


__all__ = [
    "CodeGenState",
    "CodeGenerator",
    "GeneratedProgram",
    "select_scaled_increment",
]
