from __future__ import annotations

from typing import List, Optional

from .syntax import SourcePosition


class TapeLangError(Exception):
    def __init__(self, message: str, position: Optional[SourcePosition] = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (line {self.position.line}, column {self.position.column})"


class ParseError(TapeLangError):
    pass


class CompileError(TapeLangError):
    pass


class UnresolvedVariable(CompileError):
    pass


class ScratchExhaustion(CompileError):
    """Raised when nested conditions need more scratch cells than the pool holds."""


class ScratchDisciplineError(CompileError):
    """Raised when scratch cells are released out of stack order."""


class MalformedAST(CompileError):
    pass


def _source_excerpt(lines: List[str], line_no: int, column: int, *, context: int = 1) -> str:
    start = max(1, line_no - context)
    end = min(len(lines), line_no + context)
    out: List[str] = []
    for index in range(start, end + 1):
        prefix = ">" if index == line_no else " "
        out.append(f"{prefix} {index:4d} | {lines[index - 1]}")
        if index == line_no:
            out.append(" " * 9 + " " * max(0, column - 1) + "^")
    return "\n".join(out)


def describe_error(error: TapeLangError, source: str) -> str:
    kind = type(error).__name__
    position = error.position
    if position is None:
        return f"{kind}: {error.message}"
    lines = source.split("\n")
    header = f"{kind}: {error.message} (line {position.line}, column {position.column})"
    if not 1 <= position.line <= len(lines):
        return header
    return f"{header}\n{_source_excerpt(lines, position.line, position.column)}"


__all__ = [
    "TapeLangError",
    "ParseError",
    "CompileError",
    "UnresolvedVariable",
    "ScratchExhaustion",
    "ScratchDisciplineError",
    "MalformedAST",
    "describe_error",
]
