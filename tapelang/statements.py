from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from .errors import CompileError, MalformedAST
from .instructions import Op
from .syntax import Assign, Direction, If, Input, Move, Output, Statement, While

if TYPE_CHECKING:
    from .codegen import CodeGenState
    from .conditions import ConditionLowering

logger = logging.getLogger(__name__)


class StatementLowering:
    def __init__(self, state: CodeGenState, conditions: ConditionLowering) -> None:
        self.state = state
        self.conditions = conditions

    def lower_block(self, statements: Iterable[Statement]) -> None:
        for stmt in statements:
            self.lower(stmt)

    def lower(self, stmt: Statement) -> None:
        position = getattr(stmt, "position", None)
        logger.debug("lowering %s at %s", type(stmt).__name__, position)
        try:
            if isinstance(stmt, Assign):
                self._lower_assign(stmt)
            elif isinstance(stmt, Move):
                self._lower_move(stmt)
            elif isinstance(stmt, Input):
                self.state.goto(self.state.allocator.resolve(stmt.name))
                self.state.emit(Op.READ)
            elif isinstance(stmt, Output):
                self.state.goto(self.state.allocator.resolve(stmt.name))
                self.state.emit(Op.WRITE)
            elif isinstance(stmt, If):
                self._lower_if(stmt)
            elif isinstance(stmt, While):
                self._lower_while(stmt)
            else:
                raise MalformedAST(f"Unhandled statement type: {type(stmt).__name__}")
        except CompileError as exc:
            if exc.position is None:
                exc.position = position
            raise

    def _lower_assign(self, stmt: Assign) -> None:
        if not 0 <= stmt.value <= 255:
            raise MalformedAST(f"Assigned literal out of range 0-255: {stmt.value}")
        self.state.set_cell(self.state.allocator.resolve(stmt.name), stmt.value)

    def _lower_move(self, stmt: Move) -> None:
        try:
            direction = Direction(stmt.direction)
        except ValueError:
            raise MalformedAST(f"Unknown move direction {stmt.direction!r}") from None
        self.state.shift(direction)

    def _lower_if(self, stmt: If) -> None:
        state = self.state
        with state.scratch() as flag:
            self.conditions.lower(stmt.condition, flag)
            if stmt.else_body is None:
                with state.loop(flag):
                    state.add(flag, -1)
                    self.lower_block(stmt.then_body)
                return
            # the else guard is 1 until the then-branch runs and drops it
            with state.scratch() as otherwise:
                state.add(otherwise, 1)
                with state.loop(flag):
                    state.add(flag, -1)
                    state.add(otherwise, -1)
                    self.lower_block(stmt.then_body)
                with state.loop(otherwise):
                    state.add(otherwise, -1)
                    self.lower_block(stmt.else_body)

    def _lower_while(self, stmt: While) -> None:
        state = self.state
        with state.scratch() as flag:
            self.conditions.lower(stmt.condition, flag)
            with state.loop(flag):
                state.add(flag, -1)
                self.lower_block(stmt.body)
                self.conditions.lower(stmt.condition, flag)


__all__ = ["StatementLowering"]
