from __future__ import annotations

from dataclasses import dataclass

MIN_SCRATCH_CELLS = 4


@dataclass(frozen=True)
class CompilerOptions:
    scratch_capacity: int = 16
    optimize: bool = True
    scaled_increments: bool = True

    def __post_init__(self) -> None:
        # a two-term condition holds four scratch cells at once
        if self.scratch_capacity < MIN_SCRATCH_CELLS:
            raise ValueError(f"scratch_capacity must be at least {MIN_SCRATCH_CELLS}")


__all__ = ["CompilerOptions", "MIN_SCRATCH_CELLS"]
