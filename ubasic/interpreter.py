"""
Main uBASIC interpreter.

Owns all interpreter state and coordinates the tokenizer, expression
evaluator and statement executor. The host drives execution one line at a
time with :meth:`Interpreter.run` until :meth:`Interpreter.finished`.
"""

import random
import sys
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import BasicError, UndefinedLine
from .lexer import Tokenizer, TokenType
from .engine import Console, ExpressionEvaluator, StatementExecutor
from .runtime import StringArena, VariableStore, LineIndex, GosubStack, ForStack
from .runtime.arena import DEFAULT_ARENA_SIZE
from .runtime.stacks import DEFAULT_GOSUB_DEPTH, DEFAULT_FOR_DEPTH


PeekFunc = Callable[[int], int]
PokeFunc = Callable[[int, int], None]


@dataclass
class DataCursor:
    """Read position for DATA statements, moved by RESTORE."""
    position: int = 0
    needs_seek: bool = True


class Interpreter:
    """uBASIC interpreter instance.

    Every piece of mutable state lives here, so independent instances can
    run side by side. A single instance is not safe to share between threads
    without external locking.
    """

    def __init__(self, program: str = "", peek: Optional[PeekFunc] = None,
                 poke: Optional[PokeFunc] = None, console: Optional[Console] = None,
                 gosub_depth: int = DEFAULT_GOSUB_DEPTH, for_depth: int = DEFAULT_FOR_DEPTH,
                 arena_size: int = DEFAULT_ARENA_SIZE, verbose: bool = False):
        self.peek_function = peek
        self.poke_function = poke
        self.console = console if console is not None else Console()
        self.verbose = verbose

        self.tokenizer = Tokenizer()
        self.arena = StringArena(arena_size)
        self.variables = VariableStore()
        self.line_index = LineIndex()
        self.gosub_stack = GosubStack(gosub_depth)
        self.for_stack = ForStack(for_depth)
        self.random = random.Random()

        self.evaluator = ExpressionEvaluator(self)
        self.executor = StatementExecutor(self)

        self.init(program)

    def log(self, message: str):
        """Print log message if verbose mode is enabled."""
        if self.verbose:
            print(f"[ubasic] {message}", file=sys.stderr)

    def init(self, program: str):
        """Load ``program`` and reset all run state."""
        lines = [line for line in program.splitlines() if line.strip()]
        self.program = "\n".join(lines) + "\n" if lines else ""

        self.gosub_stack.clear()
        self.for_stack.clear()
        self.line_index.clear()
        self.variables.clear()
        self.arena.reset()
        self.console.reset_column()
        self.tokenizer.init(self.program)

        self.data = DataCursor()
        self.array_base = 0
        self.line_num = 0
        self.ended = False

    # ------------------------------------------------------------------
    # Token helpers shared by the evaluator and the executor

    def accept(self, token: TokenType) -> TokenType:
        """Consume ``token`` or fail with a syntax error. Returns the next token."""
        tok = self.tokenizer
        if tok.token() != token:
            tok.error(f"expected {token.name}, got {tok.token().name}")
        tok.next()
        return tok.token()

    def accept_either(self, token1: TokenType, token2: TokenType) -> TokenType:
        """Consume ``token2`` if present, otherwise require ``token1``."""
        t = self.tokenizer.token()
        if t == token2:
            self.accept(token2)
        else:
            self.accept(token1)
        return t

    # ------------------------------------------------------------------
    # Jumps

    def jump(self, line_number: Optional[int]):
        """Continue execution at ``line_number``.

        ``None`` stands for the position past the last line.

        Raises:
            UndefinedLine: if the program has no such line
        """
        if line_number is None:
            self.tokenizer.goto(len(self.program))
            return
        pos = self.line_index.find(line_number)
        if pos is not None:
            self.log(f"jump: going to line {line_number}")
            self.tokenizer.goto(pos)
        else:
            self.log(f"jump: scanning for unindexed line {line_number}")
            self._jump_slow(line_number)

    def _jump_slow(self, line_number: int):
        tok = self.tokenizer
        tok.goto(0)
        while not (tok.token() == TokenType.NUMBER and tok.num() == line_number):
            if tok.finished():
                raise UndefinedLine(f"Undefined line {line_number}")
            tok.newline()

    # ------------------------------------------------------------------
    # Run loop

    def line_statement(self):
        tok = self.tokenizer
        if tok.token() == TokenType.NUMBER:
            self.line_num = tok.num()
            self.log(f"----------- Line number {self.line_num} ---------")
            self.line_index.add(self.line_num, tok.pos())
        self.accept(TokenType.NUMBER)
        self.executor.statement()

    def run(self):
        """Execute exactly one program line.

        Raises:
            BasicError: on any error; the program cannot continue afterwards
        """
        if self.finished():
            self.log("program finished")
            return
        try:
            self.line_statement()
        except BasicError as e:
            if e.line is None and self.line_num:
                e.line = self.line_num
            self.ended = True
            raise

    def finished(self) -> bool:
        return self.ended or self.tokenizer.finished()

    def execute(self, max_steps: Optional[int] = None) -> int:
        """Run until the program finishes. Returns the number of lines executed."""
        steps = 0
        while not self.finished():
            if max_steps is not None and steps >= max_steps:
                self.log(f"stopping after {steps} lines")
                break
            self.run()
            steps += 1
        return steps


def main():
    """Command-line interface for the interpreter."""
    import argparse

    parser = argparse.ArgumentParser(
        description='uBASIC - Run a line-numbered BASIC program'
    )
    parser.add_argument('input', help='BASIC program file')
    parser.add_argument('--verbose', action='store_true',
                        help='Trace execution on stderr')
    parser.add_argument('--gosub-depth', type=int, default=DEFAULT_GOSUB_DEPTH,
                        help=f'Maximum GOSUB nesting (default: {DEFAULT_GOSUB_DEPTH})')
    parser.add_argument('--for-depth', type=int, default=DEFAULT_FOR_DEPTH,
                        help=f'Maximum tracked FOR nesting (default: {DEFAULT_FOR_DEPTH})')
    parser.add_argument('--arena-size', type=int, default=DEFAULT_ARENA_SIZE,
                        help=f'Temporary string space in bytes (default: {DEFAULT_ARENA_SIZE})')
    parser.add_argument('--max-steps', type=int, default=None,
                        help='Stop after this many lines')

    args = parser.parse_args()

    try:
        with open(args.input, 'r', encoding='utf-8') as f:
            source = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    interp = Interpreter(source, gosub_depth=args.gosub_depth, for_depth=args.for_depth,
                         arena_size=args.arena_size, verbose=args.verbose)
    try:
        interp.execute(args.max_steps)
    except BasicError as e:
        sys.stdout.flush()
        print(e, file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == '__main__':
    main()
