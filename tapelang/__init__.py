from .codegen import CodeGenerator, GeneratedProgram
from .compiler import CompiledProgram, TapeCompiler
from .config import CompilerOptions
from .errors import (
    CompileError,
    MalformedAST,
    ParseError,
    ScratchDisciplineError,
    ScratchExhaustion,
    TapeLangError,
    UnresolvedVariable,
)
from .instructions import Op, render
from .machine import StepLimitExceeded, TapeBoundsError, TapeMachine
from .parser import Parser, parse

__all__ = [
    "CodeGenerator",
    "GeneratedProgram",
    "CompiledProgram",
    "TapeCompiler",
    "CompilerOptions",
    "TapeLangError",
    "ParseError",
    "CompileError",
    "UnresolvedVariable",
    "ScratchExhaustion",
    "ScratchDisciplineError",
    "MalformedAST",
    "Op",
    "render",
    "TapeMachine",
    "StepLimitExceeded",
    "TapeBoundsError",
    "Parser",
    "parse",
]
