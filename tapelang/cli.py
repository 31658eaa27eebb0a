from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import CompilerOptions
from .compiler import TapeCompiler
from .errors import TapeLangError, describe_error
from .machine import StepLimitExceeded, TapeBoundsError, TapeMachine


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compile tapelang programs to Brainfuck")
    parser.add_argument("source", help="Path to tapelang source file")
    parser.add_argument(
        "-o",
        "--emit",
        help="Destination file for emitted Brainfuck (default: print to stdout)",
    )
    parser.add_argument(
        "--run",
        action="store_true",
        help="Execute the compiled program after compilation",
    )
    parser.add_argument(
        "--input",
        default="",
        help="Input string supplied to the program when running",
    )
    parser.add_argument("--max-steps", type=int, default=None, help="Step budget for --run")
    parser.add_argument(
        "--symbols",
        action="store_true",
        help="Print the variable-to-offset table to stderr",
    )
    parser.add_argument(
        "--scratch-cells",
        type=int,
        default=CompilerOptions.scratch_capacity,
        help="Size of the scratch cell pool (default: %(default)s)",
    )
    parser.add_argument("--no-optimize", action="store_true", help="Skip the peephole pass")
    parser.add_argument(
        "--no-scaled-increments",
        action="store_true",
        help="Always emit large literals as plain increments",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log code generation details")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    source_path = Path(args.source)
    if not source_path.is_file():
        print(f"Source file not found: {args.source}", file=sys.stderr)
        return 1
    source_text = source_path.read_text(encoding="utf-8")

    try:
        options = CompilerOptions(
            scratch_capacity=args.scratch_cells,
            optimize=not args.no_optimize,
            scaled_increments=not args.no_scaled_increments,
        )
    except ValueError as exc:
        print(f"Invalid options: {exc}", file=sys.stderr)
        return 1

    try:
        compiled = TapeCompiler(options).compile(source_text)
    except TapeLangError as exc:
        print(describe_error(exc, source_text), file=sys.stderr)
        return 1

    if args.symbols:
        for name, offset in compiled.symbols.items():
            print(f"{name} {offset}", file=sys.stderr)

    if args.emit:
        Path(args.emit).write_text(compiled.code, encoding="utf-8")
    elif not args.run:
        sys.stdout.write(compiled.code)
        if not compiled.code.endswith("\n"):
            sys.stdout.write("\n")

    if args.run:
        machine = TapeMachine()
        try:
            output = machine.run(compiled.code, input_data=[ord(ch) for ch in args.input], max_steps=args.max_steps)
        except (StepLimitExceeded, TapeBoundsError) as exc:
            print(f"Runtime error: {exc}", file=sys.stderr)
            return 1
        sys.stdout.write(output)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
