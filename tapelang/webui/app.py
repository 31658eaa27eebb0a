from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from tapelang.compiler import TapeCompiler
from tapelang.config import MIN_SCRATCH_CELLS, CompilerOptions
from tapelang.errors import TapeLangError
from tapelang.machine import StepLimitExceeded, TapeBoundsError, TapeMachine

DEFAULT_MAX_STEPS = 1_000_000


def _error_detail(exc: TapeLangError) -> dict:
    position = exc.position
    return {
        "kind": type(exc).__name__,
        "message": exc.message,
        "line": position.line if position else None,
        "column": position.column if position else None,
    }


class CompileRequest(BaseModel):
    source: str
    scratch_cells: int = Field(default=CompilerOptions.scratch_capacity, ge=MIN_SCRATCH_CELLS)
    optimize: bool = True
    scaled_increments: bool = True

    def options(self) -> CompilerOptions:
        return CompilerOptions(
            scratch_capacity=self.scratch_cells,
            optimize=self.optimize,
            scaled_increments=self.scaled_increments,
        )


class CompileResponse(BaseModel):
    code: str
    instruction_count: int
    symbols: Dict[str, int]
    tape_size: int
    scratch_high_water: int


class RunRequest(BaseModel):
    code: str
    language: str = "tapelang"
    input: str = ""
    max_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=1)

    def input_values(self) -> List[int]:
        return [ord(ch) for ch in self.input]

    @field_validator("language")
    @classmethod
    def validate_language(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {"brainfuck", "tapelang"}:
            raise ValueError("language must be either 'brainfuck' or 'tapelang'")
        return normalized


class RunResponse(BaseModel):
    code: str
    output: str
    output_values: List[int]
    steps: int
    pointer: int


def create_app(compiler: Optional[TapeCompiler] = None) -> FastAPI:
    default_compiler = compiler or TapeCompiler()
    app = FastAPI(title="tapelang API", version="0.1.0")

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/compile", response_model=CompileResponse)
    def compile_source(payload: CompileRequest) -> CompileResponse:
        try:
            compiled = TapeCompiler(payload.options()).compile(payload.source)
        except TapeLangError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=_error_detail(exc),
            ) from exc
        return CompileResponse(
            code=compiled.code,
            instruction_count=len(compiled.instructions),
            symbols=compiled.symbols,
            tape_size=compiled.tape_size,
            scratch_high_water=compiled.scratch_high_water,
        )

    @app.post("/api/run", response_model=RunResponse)
    def run_program(payload: RunRequest) -> RunResponse:
        code = payload.code
        if payload.language == "tapelang":
            try:
                code = default_compiler.transpile(payload.code)
            except TapeLangError as exc:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=_error_detail(exc),
                ) from exc

        machine = TapeMachine()
        try:
            output = machine.run(
                code,
                input_data=payload.input_values(),
                max_steps=payload.max_steps,
            )
        except StepLimitExceeded as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        except (TapeBoundsError, ValueError) as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return RunResponse(
            code=code,
            output=output,
            output_values=list(machine.output_values),
            steps=machine.steps,
            pointer=machine.pointer,
        )

    return app


__all__ = ["create_app", "CompileRequest", "RunRequest"]
