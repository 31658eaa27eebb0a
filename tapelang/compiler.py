from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .codegen import CodeGenerator
from .config import CompilerOptions
from .errors import UnresolvedVariable
from .instructions import Op, render
from .parser import Parser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledProgram:
    code: str
    instructions: Tuple[Op, ...]
    symbols: Dict[str, int]
    tape_size: int
    scratch_high_water: int
    final_position: int

    def offset_of(self, name: str) -> int:
        if name not in self.symbols:
            raise UnresolvedVariable(f"Variable '{name}' is never referenced by the program")
        return self.symbols[name]


class TapeCompiler:
    def __init__(self, options: Optional[CompilerOptions] = None) -> None:
        self.options = options or CompilerOptions()
        self.parser = Parser()

    def compile(self, source: str) -> CompiledProgram:
        program = self.parser.parse(source)
        generated = CodeGenerator(self.options).generate_program(program)
        code = render(generated.instructions, optimize=self.options.optimize)
        logger.info(
            "compiled %d instructions (%d after rendering), tape extent %d, scratch high-water %d",
            len(generated.instructions),
            len(code),
            generated.tape_size,
            generated.scratch_high_water,
        )
        return CompiledProgram(
            code=code,
            instructions=generated.instructions,
            symbols=generated.symbols,
            tape_size=generated.tape_size,
            scratch_high_water=generated.scratch_high_water,
            final_position=generated.final_position,
        )

    def transpile(self, source: str) -> str:
        return self.compile(source).code


__all__ = ["CompiledProgram", "TapeCompiler"]
