from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import MalformedAST
from .syntax import CompareOp, Comparison, Condition

if TYPE_CHECKING:
    from .codegen import CodeGenState

logger = logging.getLogger(__name__)


class ConditionLowering:
    """Lowers ``&&``-chained comparisons into a single 0/1 flag cell.

    Every lowering expects its flag to start at zero and leaves it at 1 when the
    condition holds, 0 otherwise.  Compared variables keep their values and every
    scratch cell used along the way is back at zero when the call returns.
    """

    def __init__(self, state: CodeGenState) -> None:
        self.state = state

    def lower(self, condition: Condition, flag: int) -> None:
        if not condition.comparisons:
            raise MalformedAST("Condition has no comparisons", condition.position)
        first, *rest = condition.comparisons
        self.lower_comparison(first, flag)
        # no short-circuit: comparisons only read variables
        for comparison in rest:
            with self.state.scratch() as veto:
                self.lower_comparison(comparison, veto, invert=True)
                with self.state.loop(veto):
                    self.state.add(veto, -1)
                    self.state.clear(flag)

    def lower_comparison(self, comparison: Comparison, flag: int, *, invert: bool = False) -> None:
        if not 0 <= comparison.value <= 255:
            raise MalformedAST(
                f"Comparison literal out of range 0-255: {comparison.value}", comparison.position
            )
        try:
            op = CompareOp(comparison.op)
        except ValueError:
            raise MalformedAST(
                f"Unknown comparison operator {comparison.op!r}", comparison.position
            ) from None
        state = self.state
        variable = state.allocator.resolve(comparison.name)
        holds_when_equal = (op is CompareOp.EQ) != invert
        logger.debug(
            "lowering %s %s %d into flag %d%s",
            comparison.name,
            op.value,
            comparison.value,
            flag,
            " (inverted)" if invert else "",
        )
        with state.scratch() as diff:
            state.copy(variable, diff)
            state.add(diff, -comparison.value)
            # diff is zero exactly when the variable equals the literal
            if holds_when_equal:
                state.add(flag, 1)
            with state.loop(diff):
                state.clear(diff)
                state.add(flag, -1 if holds_when_equal else 1)


__all__ = ["ConditionLowering"]
