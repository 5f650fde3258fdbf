"""
Statement executor for uBASIC.

Each program line holds exactly one statement. The leading token selects the
handler; every handler consumes its statement up to and including the end of
line, or transfers control elsewhere with a jump.
"""

import os
import re
import time

from ..errors import InvalidAddress, InvalidBase, MismatchedNext
from ..lexer import TokenType, STRING_FUNCTIONS
from ..runtime.stacks import ForFrame
from ..runtime.values import Value, MAX_STRING_LENGTH, is_string_var


_LEADING_INT = re.compile(r'\s*([-+]?\d+)')


def parse_input_int(line: str) -> int:
    """Best-effort integer from a line of input; 0 when there is none."""
    match = _LEADING_INT.match(line)
    return int(match.group(1)) if match else 0


class StatementExecutor:
    """Dispatches and executes single BASIC statements."""

    def __init__(self, interp):
        self.interp = interp
        self._then_depth = 0  # > 0 while running the statement after THEN

        self.handlers = {
            TokenType.PRINT: self.print_statement,
            TokenType.IF: self.if_statement,
            TokenType.GO: self.go_statement,
            TokenType.RETURN: self.return_statement,
            TokenType.FOR: self.for_statement,
            TokenType.POKE: self.poke_statement,
            TokenType.NEXT: self.next_statement,
            TokenType.STOP: self.stop_statement,
            TokenType.REM: self.rem_statement,
            TokenType.DATA: self.data_statement,
            TokenType.RANDOMIZE: self.randomize_statement,
            TokenType.OPTION: self.option_statement,
            TokenType.INPUT: self.input_statement,
            TokenType.RESTORE: self.restore_statement,
            TokenType.LET: self.let_statement,
            TokenType.INTVAR: self.let_statement,
            TokenType.STRINGVAR: self.let_statement,
        }

    @property
    def tokenizer(self):
        return self.interp.tokenizer

    @property
    def evaluator(self):
        return self.interp.evaluator

    @property
    def console(self):
        return self.interp.console

    # ------------------------------------------------------------------
    # Statement boundaries

    def _at_end(self) -> bool:
        t = self.tokenizer.token()
        if t in (TokenType.CR, TokenType.ENDOFINPUT):
            return True
        return t == TokenType.ELSE and self._then_depth > 0

    def _end_statement(self):
        """Consume the end of the statement, leaving the cursor on the next line."""
        tok = self.tokenizer
        if tok.token() == TokenType.ELSE and self._then_depth > 0:
            # THEN branch done: skip the ELSE branch.
            while tok.token() not in (TokenType.CR, TokenType.ENDOFINPUT):
                tok.next()
        if tok.token() == TokenType.ENDOFINPUT:
            return
        self.interp.accept(TokenType.CR)

    def _next_line(self):
        """Line number the cursor is on, or None past the last line."""
        tok = self.tokenizer
        if tok.token() == TokenType.NUMBER:
            return tok.num()
        return None

    def statement(self):
        """Execute the statement under the cursor."""
        self.interp.arena.reset()
        t = self.tokenizer.token()
        handler = self.handlers.get(t)
        if handler is None:
            self.interp.log(f"statement(): not implemented {t.name}")
            self.tokenizer.error(f"unexpected {t.name} at start of statement")
        handler()

    # ------------------------------------------------------------------
    # Control flow

    def go_statement(self):
        interp = self.interp
        interp.accept(TokenType.GO)
        t = interp.accept_either(TokenType.TO, TokenType.SUB)
        line_number = self.evaluator.int_expr()
        self._end_statement()
        if t == TokenType.TO:
            interp.jump(line_number)
            return
        interp.gosub_stack.push(self._next_line())
        interp.log(f"gosub {line_number}, depth {len(interp.gosub_stack)}")
        interp.jump(line_number)

    def return_statement(self):
        interp = self.interp
        interp.accept(TokenType.RETURN)
        if interp.gosub_stack:
            interp.jump(interp.gosub_stack.pop())
        else:
            interp.log("return_statement: non-matching return")
            self._end_statement()

    def for_statement(self):
        interp = self.interp
        ev = self.evaluator
        interp.accept(TokenType.FOR)
        variable = ev.variable_ref(allow_string=False)
        interp.accept(TokenType.EQ)
        initial = ev.expr()
        ev.typecheck_int(initial)
        interp.variables.set(variable, initial)
        interp.accept(TokenType.TO)
        limit = ev.int_expr()
        step = 1
        if self.tokenizer.token() == TokenType.STEP:
            interp.accept(TokenType.STEP)
            step = ev.int_expr()
        self._end_statement()

        frame = ForFrame(self._next_line(), variable, limit, step)
        if interp.for_stack.push(frame):
            interp.log(f"for_statement: new for, var {variable} to {limit} step {step}")
        else:
            interp.log("for_statement: for stack depth exceeded")

    def next_statement(self):
        interp = self.interp
        interp.accept(TokenType.NEXT)
        variable = self.evaluator.variable_ref(allow_string=False)

        frame = interp.for_stack.top()
        if frame is None or frame.variable != variable:
            raise MismatchedNext()

        value = Value.integer(interp.variables.get(variable).data + frame.step)
        interp.variables.set(variable, value)
        if (frame.step >= 0 and value.data <= frame.limit) or \
                (frame.step < 0 and value.data >= frame.limit):
            interp.jump(frame.resume_line)
        else:
            interp.for_stack.pop()
            self._end_statement()

    def if_statement(self):
        interp = self.interp
        tok = self.tokenizer
        interp.accept(TokenType.IF)
        condition = self.evaluator.relation()
        interp.accept(TokenType.THEN)
        if condition.data:
            self._then_depth += 1
            try:
                self.statement()
            finally:
                self._then_depth -= 1
            return

        while tok.token() not in (TokenType.ELSE, TokenType.CR, TokenType.ENDOFINPUT):
            tok.next()
        if tok.token() == TokenType.ELSE:
            tok.next()
            self.statement()
        elif tok.token() == TokenType.CR:
            tok.next()

    def stop_statement(self):
        self.interp.accept(TokenType.STOP)
        self._end_statement()
        self.interp.ended = True

    # ------------------------------------------------------------------
    # Assignment and I/O

    def let_statement(self):
        interp = self.interp
        if self.tokenizer.token() == TokenType.LET:
            interp.accept(TokenType.LET)
        variable = self.evaluator.variable_ref()
        interp.accept(TokenType.EQ)
        value = self.evaluator.expr()
        interp.variables.set(variable, value)
        self._end_statement()

    def print_statement(self):
        tok = self.tokenizer
        console = self.console
        self.interp.accept(TokenType.PRINT)
        newline = True
        while not self._at_end():
            t = tok.token()
            if t == TokenType.STRING:
                # Literals go straight from the program text, not via the arena.
                tok.string_func(console.put_char)
                tok.next()
                newline = True
            elif t == TokenType.COMMA:
                console.put_tab()
                tok.next()
                newline = False
            elif t == TokenType.SEMICOLON:
                tok.next()
                newline = False
            elif t == TokenType.TAB:
                self.interp.accept(TokenType.TAB)
                console.tab_to(self.evaluator.bracketed_int_expr())
                newline = True
            else:
                value = self.evaluator.expr()
                if value.is_string:
                    console.put_bytes(value.data)
                else:
                    console.put_text(str(value.data))
                newline = True
        if newline:
            console.newline()
        self._end_statement()

    def input_statement(self):
        interp = self.interp
        tok = self.tokenizer
        console = self.console
        interp.accept(TokenType.INPUT)

        t = tok.token()
        if t == TokenType.STRING:
            tok.string_func(console.put_char)
            tok.next()
            interp.accept_either(TokenType.SEMICOLON, TokenType.COMMA)
        elif t in STRING_FUNCTIONS:
            console.put_bytes(self.evaluator.string_expr())
            interp.accept_either(TokenType.SEMICOLON, TokenType.COMMA)
        else:
            console.put_text("? ")

        while True:
            variable = self.evaluator.variable_ref()
            line = console.read_line()
            console.reset_column()
            if is_string_var(variable):
                if line.endswith('\n'):
                    line = line[:-1]
                data = line.encode('latin-1', errors='replace')[:MAX_STRING_LENGTH]
                value = Value.string(data)
            else:
                value = Value.integer(parse_input_int(line))
            interp.variables.set(variable, value)
            if self._at_end():
                break
            interp.accept_either(TokenType.COMMA, TokenType.SEMICOLON)
        self._end_statement()

    def poke_statement(self):
        interp = self.interp
        interp.accept(TokenType.POKE)
        address = self.evaluator.int_expr()
        interp.accept(TokenType.COMMA)
        value = self.evaluator.int_expr()
        self._end_statement()
        if interp.poke_function is None:
            raise InvalidAddress("No POKE hook")
        interp.poke_function(address, value)

    # ------------------------------------------------------------------
    # Everything else

    def rem_statement(self):
        self.interp.accept(TokenType.REM)
        self.tokenizer.newline()

    def data_statement(self):
        tok = self.tokenizer
        self.interp.accept(TokenType.DATA)
        while True:
            if tok.token() in (TokenType.STRING, TokenType.NUMBER):
                tok.next()
            else:
                tok.error("DATA items must be literals")
            if tok.token() != TokenType.COMMA:
                break
            tok.next()
        self._end_statement()

    def randomize_statement(self):
        interp = self.interp
        interp.accept(TokenType.RANDOMIZE)
        seed = 0
        if not self._at_end():
            seed = self.evaluator.int_expr()
        self._end_statement()
        if seed:
            interp.random.seed(seed)
        else:
            uid = os.getuid() if hasattr(os, 'getuid') else 0
            interp.random.seed(os.getpid() ^ uid ^ int(time.time()))

    def option_statement(self):
        interp = self.interp
        interp.accept(TokenType.OPTION)
        interp.accept(TokenType.BASE)
        base = self.evaluator.int_expr()
        self._end_statement()
        if base not in (0, 1):
            raise InvalidBase()
        interp.array_base = base

    def restore_statement(self):
        interp = self.interp
        tok = self.tokenizer
        interp.accept(TokenType.RESTORE)
        line_number = 0
        if not self._at_end():
            line_number = self.evaluator.int_expr()
        self._end_statement()
        if line_number:
            tok.push()
            interp.jump(line_number)
            interp.data.position = tok.pos()
            tok.pop()
        else:
            interp.data.position = 0
        interp.data.needs_seek = True
