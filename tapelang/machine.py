from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union

from .instructions import Op, build_bracket_map, parse_code


class StepLimitExceeded(RuntimeError):
    """Raised when execution exceeds the configured step budget."""


class TapeBoundsError(IndexError):
    pass


@dataclass
class TapeMachine:
    tape_length: int = 30000
    cell_max: int = 255

    tape: List[int] = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    steps: int = field(init=False, repr=False)
    output_values: List[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.tape = [0] * self.tape_length
        self.pointer = 0
        self.steps = 0
        self.output_values = []

    def run(
        self,
        code: Union[str, Sequence[Op]],
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
    ) -> str:
        self.reset()
        ops = parse_code(code) if isinstance(code, str) else code
        commands = "".join(op.value for op in ops)
        jump_map = self._build_jump_map(commands)
        input_iter = iter(list(input_data or []))
        modulus = self.cell_max + 1
        pc = 0
        length = len(commands)
        while pc < length:
            if max_steps is not None and self.steps >= max_steps:
                raise StepLimitExceeded("Program exceeded allowed step count")
            pc = self._execute(commands[pc], pc, jump_map, input_iter, modulus)
            self.steps += 1
        return "".join(chr(value) for value in self.output_values)

    def _execute(
        self,
        command: str,
        pc: int,
        jump_map: Dict[int, int],
        input_iter: Iterator[int],
        modulus: int,
    ) -> int:
        new_pc = pc + 1
        if command == ">":
            self.pointer += 1
            if self.pointer >= self.tape_length:
                raise TapeBoundsError("Pointer moved beyond the tape length.")
        elif command == "<":
            self.pointer -= 1
            if self.pointer < 0:
                raise TapeBoundsError("Pointer moved before start of tape.")
        elif command == "+":
            self.tape[self.pointer] = (self.tape[self.pointer] + 1) % modulus
        elif command == "-":
            self.tape[self.pointer] = (self.tape[self.pointer] - 1) % modulus
        elif command == ".":
            self.output_values.append(self.tape[self.pointer])
        elif command == ",":
            self.tape[self.pointer] = next(input_iter, 0) % modulus
        elif command == "[":
            if self.tape[self.pointer] == 0:
                new_pc = jump_map[pc] + 1
        elif command == "]":
            if self.tape[self.pointer] != 0:
                new_pc = jump_map[pc] + 1
        return new_pc

    def _build_jump_map(self, commands: str) -> Dict[int, int]:
        forward = build_bracket_map(commands)
        if forward is None:
            raise ValueError("Unbalanced brackets in program")
        jump_map = dict(forward)
        jump_map.update({end: start for start, end in forward.items()})
        return jump_map


__all__ = ["TapeMachine", "StepLimitExceeded", "TapeBoundsError"]
