from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence


class Op(str, Enum):
    MOVE_LEFT = "<"
    MOVE_RIGHT = ">"
    INCREMENT = "+"
    DECREMENT = "-"
    LOOP_BEGIN = "["
    LOOP_END = "]"
    READ = ","
    WRITE = "."


MOVES = (Op.MOVE_LEFT, Op.MOVE_RIGHT)

_SYMBOLS: Dict[str, Op] = {op.value: op for op in Op}


def render(ops: Iterable[Op], *, optimize: bool = True) -> str:
    code = "".join(op.value for op in ops)
    if optimize:
        return optimize_code(code)
    return code


def parse_code(code: str) -> List[Op]:
    return [_SYMBOLS[char] for char in code if char in _SYMBOLS]


# --- Peephole optimizer ---


def optimize_code(code: str) -> str:
    return _drop_dead_loops("".join(_net_runs(code)))


def _net_runs(code: str) -> List[str]:
    pieces: List[str] = []
    length = len(code)
    index = 0
    while index < length:
        command = code[index]
        if command in "+-" or command in "<>":
            up, down = ("+", "-") if command in "+-" else (">", "<")
            delta = 0
            while index < length and code[index] in (up, down):
                delta += 1 if code[index] == up else -1
                index += 1
            if delta > 0:
                pieces.append(up * delta)
            elif delta < 0:
                pieces.append(down * (-delta))
            continue
        pieces.append(command)
        index += 1
    return pieces


def _drop_dead_loops(code: str) -> str:
    """Remove loops that start right where another loop ended.

    A loop only exits on a zero cell, so a loop opened immediately after ``]``
    tests that same zero cell and its body never runs.
    """
    bracket_map = build_bracket_map(code)
    if bracket_map is None:
        return code

    kept: List[str] = []
    index = 0
    while index < len(code):
        if code[index] == "[" and kept and kept[-1] == "]":
            index = bracket_map[index] + 1
            continue
        kept.append(code[index])
        index += 1
    return "".join(kept)


def build_bracket_map(code: Sequence[str]) -> Optional[Dict[int, int]]:
    stack: List[int] = []
    mapping: Dict[int, int] = {}
    for pos, char in enumerate(code):
        if char == "[":
            stack.append(pos)
        elif char == "]":
            if not stack:
                return None
            mapping[stack.pop()] = pos
    if stack:
        return None
    return mapping


__all__ = [
    "Op",
    "MOVES",
    "render",
    "parse_code",
    "optimize_code",
    "build_bracket_map",
]
