"""
Program I/O for PRINT and INPUT.

Output goes through a character sink that keeps track of the output column so
that TAB() and tab stops line up; backspace and delete move the column back.
Input is read one line at a time.
"""

import sys
from typing import Optional, TextIO

from ..errors import InputExhausted


TAB_WIDTH = 8
BACKSPACE = 8
DELETE = 127


class Console:
    """Column-tracking character output plus line input."""

    def __init__(self, output: Optional[TextIO] = None, input: Optional[TextIO] = None):
        self.output = output if output is not None else sys.stdout
        self.input = input if input is not None else sys.stdin
        self.column = 0

    def _emit(self, text: str):
        self.output.write(text)

    def put_char(self, c: int):
        """Write one byte, expanding tabs to spaces."""
        if c == ord('\t'):
            self.put_char(ord(' '))
            while self.column % TAB_WIDTH:
                self.put_char(ord(' '))
            return
        self._emit(chr(c))
        if c in (BACKSPACE, DELETE) and self.column:
            self.column -= 1
        elif c in (ord('\r'), ord('\n')):
            self.column = 0
        else:
            self.column += 1

    def put_bytes(self, data: bytes):
        for c in data:
            self.put_char(c)

    def put_text(self, text: str):
        self.put_bytes(text.encode('latin-1', errors='replace'))

    def put_tab(self):
        """Write a literal tab character and move to the next tab stop."""
        self._emit('\t')
        self.column += TAB_WIDTH - self.column % TAB_WIDTH

    def tab_to(self, column: int):
        """Pad with spaces up to ``column``."""
        while self.column < column:
            self.put_char(ord(' '))

    def newline(self):
        self.put_char(ord('\n'))

    def reset_column(self):
        self.column = 0

    def read_line(self) -> str:
        """
        Read one line of input, including its newline if present.

        Raises:
            InputExhausted: at end of input
        """
        self.output.flush()
        line = self.input.readline()
        if not line:
            raise InputExhausted()
        return line
