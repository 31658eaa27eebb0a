import unittest

from tapelang import Op, StepLimitExceeded, TapeBoundsError, TapeMachine, render
from tapelang.instructions import build_bracket_map, optimize_code, parse_code


class TapeMachineTests(unittest.TestCase):
    def test_simple_output(self) -> None:
        machine = TapeMachine()
        program = "+" * 65 + "."
        output = machine.run(program, max_steps=1000)
        self.assertEqual(output, "A")
        self.assertEqual(machine.steps, 66)

    def test_runs_instruction_sequences(self) -> None:
        machine = TapeMachine()
        machine.run([Op.INCREMENT, Op.INCREMENT, Op.MOVE_RIGHT, Op.INCREMENT, Op.WRITE])
        self.assertEqual(machine.output_values, [1])
        self.assertEqual(machine.tape[:2], [2, 1])
        self.assertEqual(machine.pointer, 1)

    def test_cells_wrap_at_eight_bits(self) -> None:
        machine = TapeMachine()
        machine.run("-.+.")
        self.assertEqual(machine.output_values, [255, 0])

    def test_input_and_end_of_input(self) -> None:
        machine = TapeMachine()
        self.assertEqual(machine.run(",.,.", input_data=[66]), "B\x00")

    def test_step_limit_exceeded(self) -> None:
        machine = TapeMachine()
        with self.assertRaises(StepLimitExceeded):
            machine.run("+[]", max_steps=10)

    def test_pointer_bounds(self) -> None:
        with self.assertRaises(TapeBoundsError):
            TapeMachine().run("<")
        with self.assertRaises(TapeBoundsError):
            TapeMachine(tape_length=2).run(">>")

    def test_unbalanced_brackets(self) -> None:
        with self.assertRaises(ValueError):
            TapeMachine().run("[+")
        with self.assertRaises(ValueError):
            TapeMachine().run("+]")

    def test_text_ignores_non_instruction_characters(self) -> None:
        machine = TapeMachine()
        machine.run("+ add one\n. and print", max_steps=2)
        self.assertEqual(machine.output_values, [1])
        self.assertEqual(machine.steps, 2)

    def test_run_resets_state(self) -> None:
        machine = TapeMachine()
        machine.run("+++.")
        machine.run(".")
        self.assertEqual(machine.output_values, [0])


class OptimizerTests(unittest.TestCase):
    def test_collapses_duplicate_zero_loop(self) -> None:
        self.assertEqual(optimize_code("[-][-]"), "[-]")

    def test_collapses_duplicate_shift_loop(self) -> None:
        self.assertEqual(optimize_code("[-<+>][-<+>]"), "[-<+>]")

    def test_drops_any_loop_opened_right_after_another(self) -> None:
        self.assertEqual(optimize_code("[.][.]"), "[.]")
        self.assertEqual(optimize_code("[>][-<+>][+]"), "[>]")
        self.assertEqual(optimize_code("+[[-][.]]"), "+[[-]]")

    def test_keeps_loops_separated_by_other_instructions(self) -> None:
        self.assertEqual(optimize_code("[.]+[.]"), "[.]+[.]")
        self.assertEqual(optimize_code("[>]>[>]"), "[>]>[>]")

    def test_nets_out_opposite_runs(self) -> None:
        self.assertEqual(optimize_code("+-+"), "+")
        self.assertEqual(optimize_code("><"), "")
        self.assertEqual(optimize_code(">><-<+"), ">-<+")

    def test_render(self) -> None:
        ops = [Op.INCREMENT, Op.DECREMENT, Op.MOVE_RIGHT, Op.WRITE]
        self.assertEqual(render(ops), ">.")
        self.assertEqual(render(ops, optimize=False), "+->.")

    def test_parse_code_ignores_other_characters(self) -> None:
        self.assertEqual(parse_code("+ a\n."), [Op.INCREMENT, Op.WRITE])

    def test_bracket_map(self) -> None:
        self.assertEqual(build_bracket_map("[[]]"), {0: 3, 1: 2})
        self.assertIsNone(build_bracket_map("[[]"))
        self.assertIsNone(build_bracket_map("]["))


if __name__ == "__main__":
    unittest.main()
