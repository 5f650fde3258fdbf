"""
Test fixtures and helpers for the uBASIC test suite.

The key abstractions are:

- run_program(): Run a whole program and capture its output
- evaluate(): Evaluate a single expression against a fresh interpreter
- AssertProgram: Fluent API for checking program output and failures
"""

import io
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Type

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ubasic import Interpreter, BasicError
from ubasic.engine import Console
from ubasic.runtime import Value


@dataclass
class ExecutionResult:
    """Result of running a BASIC program."""
    output: str = ""
    interpreter: Optional[Interpreter] = None
    error: Optional[BasicError] = None


class Memory:
    """Host memory for PEEK/POKE tests."""

    def __init__(self):
        self.cells: Dict[int, int] = {}

    def peek(self, address: int) -> int:
        return self.cells.get(address, 0)

    def poke(self, address: int, value: int):
        self.cells[address] = value


def make_interpreter(source: str = "", inputs: Optional[List[str]] = None, **options) -> Interpreter:
    console = Console(io.StringIO(), io.StringIO("".join(inputs or [])))
    return Interpreter(source, console=console, **options)


def run_program(source: str, inputs: Optional[List[str]] = None, **options) -> ExecutionResult:
    """Run ``source`` to completion. BASIC errors are captured, not raised."""
    interp = make_interpreter(source, inputs, **options)
    result = ExecutionResult(interpreter=interp)
    try:
        interp.execute(max_steps=10000)
    except BasicError as e:
        result.error = e
    result.output = interp.console.output.getvalue()
    return result


def evaluate(text: str, relation: bool = False, **options) -> Value:
    """Evaluate the expression ``text`` and return its value."""
    interp = make_interpreter(**options)
    interp.tokenizer.init(text)
    if relation:
        return interp.evaluator.relation()
    return interp.evaluator.expr()


def eval_and_assert(text: str, expected, relation: bool = False):
    """Evaluate ``text`` and compare the raw result (int or bytes)."""
    value = evaluate(text, relation=relation)
    assert value.data == expected, f"{text}: expected {expected!r}, got {value.data!r}"


def eval_and_catch(text: str, error_type: Type[BasicError], relation: bool = False):
    """Evaluate ``text`` and expect ``error_type``."""
    with pytest.raises(error_type):
        evaluate(text, relation=relation)


class ProgramAssertion:
    """
    Fluent assertion helper for whole programs.

    Usage:
        AssertProgram('10 PRINT 1+2').outputs("3\\n")
        AssertProgram('10 PRINT 1/0').raises(DivisionByZero)
    """

    def __init__(self, *lines: str):
        self.source = "\n".join(lines)
        self.inputs: List[str] = []
        self.options = {}

    def with_input(self, *lines: str) -> 'ProgramAssertion':
        """Queue input lines (newlines are added)."""
        self.inputs.extend(line + "\n" for line in lines)
        return self

    def with_options(self, **options) -> 'ProgramAssertion':
        """Pass extra keyword arguments to the Interpreter."""
        self.options.update(options)
        return self

    def run(self) -> ExecutionResult:
        return run_program(self.source, self.inputs, **self.options)

    def outputs(self, expected: str) -> ExecutionResult:
        """Assert the program runs cleanly and prints exactly ``expected``."""
        result = self.run()
        assert result.error is None, f"Execution failed: {result.error}"
        assert result.output == expected, \
            f"Expected output {expected!r}, got {result.output!r}"
        return result

    def raises(self, error_type: Type[BasicError], line: Optional[int] = None) -> BasicError:
        """Assert the program stops with ``error_type`` (on ``line`` if given)."""
        result = self.run()
        assert isinstance(result.error, error_type), \
            f"Expected {error_type.__name__}, got {result.error!r}"
        if line is not None:
            assert result.error.line == line, \
                f"Expected error on line {line}, got {result.error.line}"
        return result.error


AssertProgram = ProgramAssertion
