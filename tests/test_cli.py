from pathlib import Path
import tempfile
from contextlib import redirect_stderr, redirect_stdout
import io
import unittest

from tapelang import CompilerOptions, TapeCompiler
from tapelang.cli import main as cli_main


class CLITests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write_source(self, content: str, name: str = "program.tape") -> Path:
        path = self.tmp_path / name
        path.write_text(content.strip() + "\n", encoding="utf-8")
        return path

    def _invoke(self, *argv: str):
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            exit_code = cli_main(list(argv))
        return exit_code, stdout.getvalue(), stderr.getvalue()

    def test_cli_emits_brainfuck_file(self) -> None:
        source_path = self._write_source("x = 65\noutput(x)")
        output_path = self.tmp_path / "out.bf"
        exit_code = cli_main([str(source_path), "--emit", str(output_path)])
        self.assertEqual(exit_code, 0)
        emitted = output_path.read_text(encoding="utf-8")
        source_text = source_path.read_text(encoding="utf-8")
        self.assertEqual(emitted, TapeCompiler().transpile(source_text))

    def test_cli_prints_code_to_stdout(self) -> None:
        source_path = self._write_source("x = 1\noutput(x)")
        exit_code, stdout, _ = self._invoke(str(source_path))
        self.assertEqual(exit_code, 0)
        self.assertEqual(stdout.strip(), TapeCompiler().transpile("x = 1\noutput(x)"))

    def test_cli_run_outputs_program_result(self) -> None:
        source_path = self._write_source("x = 65\noutput(x)")
        exit_code, stdout, _ = self._invoke(str(source_path), "--run")
        self.assertEqual(exit_code, 0)
        self.assertEqual(stdout, "A")

    def test_cli_run_reads_input(self) -> None:
        source_path = self._write_source("input(c)\noutput(c)")
        exit_code, stdout, _ = self._invoke(str(source_path), "--run", "--input", "z")
        self.assertEqual(exit_code, 0)
        self.assertEqual(stdout, "z")

    def test_cli_symbols(self) -> None:
        source_path = self._write_source("a = 1\nb = 2")
        exit_code, _, stderr = self._invoke(str(source_path), "--symbols")
        self.assertEqual(exit_code, 0)
        self.assertIn("a 16\nb 17\n", stderr)

    def test_cli_missing_file_errors(self) -> None:
        exit_code, _, stderr = self._invoke("does_not_exist.tape")
        self.assertEqual(exit_code, 1)
        self.assertIn("Source file not found", stderr)

    def test_cli_reports_compile_errors(self) -> None:
        source_path = self._write_source("x = 1\ny = 300")
        exit_code, stdout, stderr = self._invoke(str(source_path))
        self.assertEqual(exit_code, 1)
        self.assertEqual(stdout, "")
        self.assertIn("ParseError", stderr)
        self.assertIn("line 2, column 5", stderr)

    def test_cli_rejects_small_scratch_pool(self) -> None:
        source_path = self._write_source("x = 1")
        exit_code, _, stderr = self._invoke(str(source_path), "--scratch-cells", "2")
        self.assertEqual(exit_code, 1)
        self.assertIn("Invalid options", stderr)

    def test_cli_no_optimize_emits_raw_instructions(self) -> None:
        source = "x = 1\nif x == 1 { output(x) } else { x = 0 }"
        source_path = self._write_source(source)
        exit_code, stdout, _ = self._invoke(str(source_path), "--no-optimize")
        self.assertEqual(exit_code, 0)
        compiled = TapeCompiler(CompilerOptions(optimize=False)).compile(source)
        self.assertEqual(stdout.strip(), "".join(op.value for op in compiled.instructions))

    def test_cli_no_scaled_increments(self) -> None:
        source_path = self._write_source("x = 200\noutput(x)")
        exit_code, stdout, _ = self._invoke(str(source_path))
        self.assertEqual(exit_code, 0)
        self.assertLess(stdout.count("+"), 100)
        exit_code, stdout, _ = self._invoke(str(source_path), "--no-scaled-increments")
        self.assertEqual(exit_code, 0)
        self.assertEqual(stdout.count("+"), 200)

    def test_cli_verbose_logs_compilation(self) -> None:
        source_path = self._write_source("x = 1\noutput(x)")
        with self.assertLogs("tapelang", level="DEBUG") as logs:
            exit_code, _, _ = self._invoke(str(source_path), "-v")
        self.assertEqual(exit_code, 0)
        self.assertTrue(any("allocated variable 'x'" in line for line in logs.output))
        self.assertTrue(any("compiled" in line for line in logs.output))

    def test_cli_tape_bounds_is_a_runtime_error(self) -> None:
        source_path = self._write_source("move_left")
        exit_code, stdout, stderr = self._invoke(str(source_path), "--run")
        self.assertEqual(exit_code, 1)
        self.assertEqual(stdout, "")
        self.assertIn("Runtime error", stderr)

    def test_cli_step_limit(self) -> None:
        source_path = self._write_source("x = 1\nwhile x == 1 { x = 1 }")
        exit_code, _, stderr = self._invoke(str(source_path), "--run", "--max-steps", "500")
        self.assertEqual(exit_code, 1)
        self.assertIn("Runtime error", stderr)


if __name__ == "__main__":
    unittest.main()
