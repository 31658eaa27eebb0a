from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import ParseError
from .syntax import (
    Assign,
    CompareOp,
    Comparison,
    Condition,
    Direction,
    If,
    Input,
    Move,
    Output,
    Program,
    SourcePosition,
    Statement,
    While,
)

RESERVED_WORDS = frozenset(
    ["if", "else", "while", "input", "output", "move_right", "move_left", "next_cell", "prev_cell"]
)

_TOKEN_RE = re.compile(
    r"""
    (?P<comment>\#[^\n]*)
  | (?P<newline>\n)
  | (?P<space>[ \t\r]+)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<number>[0-9]+)
  | (?P<op>==|!=|&&|=|\{|\}|\(|\)|;)
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: SourcePosition


def tokenize(source: str) -> List[Token]:
    tokens: List[Token] = []
    line = 1
    line_start = 0
    index = 0
    while index < len(source):
        match = _TOKEN_RE.match(source, index)
        column = index - line_start + 1
        if match is None:
            raise ParseError(f"Invalid character {source[index]!r}", SourcePosition(line, column))
        kind = match.lastgroup
        text = match.group()
        index = match.end()
        if kind == "newline":
            line += 1
            line_start = index
            continue
        if kind in ("comment", "space"):
            continue
        if kind == "number" and index < len(source) and (source[index].isalpha() or source[index] == "_"):
            raise ParseError(f"Invalid token starting with '{text}'", SourcePosition(line, column))
        tokens.append(Token(kind=kind if kind != "op" else text, text=text, position=SourcePosition(line, column)))
    tokens.append(Token(kind="eof", text="", position=SourcePosition(line, index - line_start + 1)))
    return tokens


# === Parser ===


class Parser:
    def parse(self, source: str) -> Program:
        self.tokens = tokenize(source)
        self.pos = 0
        statements = self._parse_statements(inside_block=False)
        return Program(statements=statements)

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != "eof":
            self.pos += 1
        return token

    def _expect(self, kind: str, context: str) -> Token:
        token = self._peek()
        if token.kind != kind:
            found = token.text or "end of input"
            raise ParseError(f"Expected '{kind}' in {context}, found '{found}'", token.position)
        return self._advance()

    def _parse_statements(self, inside_block: bool) -> Tuple[Statement, ...]:
        statements: List[Statement] = []
        while True:
            token = self._peek()
            if token.kind == "eof":
                if inside_block:
                    raise ParseError("Missing closing '}'", token.position)
                return tuple(statements)
            if token.kind == "}":
                if not inside_block:
                    raise ParseError("Unexpected '}'", token.position)
                return tuple(statements)
            statements.append(self._parse_statement())
            if self._peek().kind == ";":
                self._advance()

    def _parse_statement(self) -> Statement:
        token = self._peek()
        if token.kind != "ident":
            found = token.text or "end of input"
            raise ParseError(f"Expected a statement, found '{found}'", token.position)
        if token.text == "if":
            return self._parse_if()
        if token.text == "while":
            return self._parse_while()
        if token.text in ("move_right", "move_left"):
            self._advance()
            direction = Direction.RIGHT if token.text == "move_right" else Direction.LEFT
            return Move(direction=direction, position=token.position)
        if token.text in ("input", "output"):
            return self._parse_io()
        if token.text in RESERVED_WORDS:
            raise ParseError(f"Unexpected keyword '{token.text}'", token.position)
        return self._parse_assign()

    def _parse_block(self, context: str) -> Tuple[Statement, ...]:
        self._expect("{", context)
        body = self._parse_statements(inside_block=True)
        self._expect("}", context)
        return body

    def _parse_if(self) -> If:
        keyword = self._advance()
        condition = self._parse_condition()
        then_body = self._parse_block("if statement")
        else_body: Optional[Tuple[Statement, ...]] = None
        next_token = self._peek()
        if next_token.kind == "ident" and next_token.text == "else":
            self._advance()
            else_body = self._parse_block("else branch")
        return If(condition=condition, then_body=then_body, else_body=else_body, position=keyword.position)

    def _parse_while(self) -> While:
        keyword = self._advance()
        condition = self._parse_condition()
        body = self._parse_block("while statement")
        return While(condition=condition, body=body, position=keyword.position)

    def _parse_io(self) -> Statement:
        keyword = self._advance()
        context = f"{keyword.text} statement"
        self._expect("(", context)
        name = self._parse_variable()
        self._expect(")", context)
        if keyword.text == "input":
            return Input(name=name, position=keyword.position)
        return Output(name=name, position=keyword.position)

    def _parse_assign(self) -> Assign:
        target = self._peek()
        name = self._parse_variable()
        self._expect("=", "assignment")
        value = self._parse_number("assignment")
        return Assign(name=name, value=value, position=target.position)

    def _parse_condition(self) -> Condition:
        start = self._peek().position
        comparisons = [self._parse_comparison()]
        while self._peek().kind == "&&":
            self._advance()
            comparisons.append(self._parse_comparison())
        return Condition(comparisons=tuple(comparisons), position=start)

    def _parse_comparison(self) -> Comparison:
        start = self._peek()
        name = self._parse_variable()
        op_token = self._peek()
        if op_token.kind not in ("==", "!="):
            found = op_token.text or "end of input"
            raise ParseError(f"Expected '==' or '!=' in condition, found '{found}'", op_token.position)
        self._advance()
        value = self._parse_number("condition")
        return Comparison(name=name, op=CompareOp(op_token.kind), value=value, position=start.position)

    def _parse_variable(self) -> str:
        token = self._peek()
        if token.kind != "ident":
            found = token.text or "end of input"
            raise ParseError(f"Expected variable name, found '{found}'", token.position)
        if token.text in RESERVED_WORDS:
            raise ParseError(f"'{token.text}' is a reserved word", token.position)
        self._advance()
        return token.text

    def _parse_number(self, context: str) -> int:
        token = self._peek()
        if token.kind != "number":
            found = token.text or "end of input"
            raise ParseError(f"Expected number in {context}, got '{found}'", token.position)
        digits = token.text.lstrip("0") or "0"
        # more than three significant digits is always above 255
        if len(digits) > 3 or int(digits) > 255:
            shown = digits if len(digits) <= 12 else f"{digits[:8]}... ({len(digits)} digits)"
            raise ParseError(f"Literal out of range 0-255: {shown}", token.position)
        self._advance()
        return int(digits)


def parse(source: str) -> Program:
    return Parser().parse(source)


__all__ = ["Parser", "Token", "tokenize", "parse", "RESERVED_WORDS"]
