from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class SourcePosition:
    line: int
    column: int


class Direction(str, Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def step(self) -> int:
        return -1 if self is Direction.LEFT else 1


class CompareOp(str, Enum):
    EQ = "=="
    NE = "!="


# === AST Nodes ===


@dataclass(frozen=True)
class Comparison:
    name: str
    op: CompareOp
    value: int
    position: Optional[SourcePosition] = field(default=None, compare=False)


@dataclass(frozen=True)
class Condition:
    """Comparisons joined by ``&&``; holds when every comparison holds."""

    comparisons: Tuple[Comparison, ...]
    position: Optional[SourcePosition] = field(default=None, compare=False)


class Statement:
    position: Optional[SourcePosition]


@dataclass(frozen=True)
class Assign(Statement):
    name: str
    value: int
    position: Optional[SourcePosition] = field(default=None, compare=False)


@dataclass(frozen=True)
class Move(Statement):
    direction: Direction
    position: Optional[SourcePosition] = field(default=None, compare=False)


@dataclass(frozen=True)
class Input(Statement):
    name: str
    position: Optional[SourcePosition] = field(default=None, compare=False)


@dataclass(frozen=True)
class Output(Statement):
    name: str
    position: Optional[SourcePosition] = field(default=None, compare=False)


@dataclass(frozen=True)
class If(Statement):
    condition: Condition
    then_body: Tuple[Statement, ...]
    else_body: Optional[Tuple[Statement, ...]] = None
    position: Optional[SourcePosition] = field(default=None, compare=False)


@dataclass(frozen=True)
class While(Statement):
    condition: Condition
    body: Tuple[Statement, ...]
    position: Optional[SourcePosition] = field(default=None, compare=False)


@dataclass(frozen=True)
class Program:
    statements: Tuple[Statement, ...]


__all__ = [
    "SourcePosition",
    "Direction",
    "CompareOp",
    "Comparison",
    "Condition",
    "Statement",
    "Assign",
    "Move",
    "Input",
    "Output",
    "If",
    "While",
    "Program",
]
