"""
uBASIC error types.

Every error is fatal to the running program. The interpreter stamps the
line number that was executing onto the exception before it reaches the
host, so ``str(err)`` reads like the classic report: ``Line 30: Division by
zero error.``
"""

from typing import Optional


class BasicError(Exception):
    """Base class for all errors raised while running a BASIC program."""

    message = "Unknown"

    def __init__(self, message: Optional[str] = None, line: Optional[int] = None):
        if message is not None:
            self.message = message
        self.line = line
        super().__init__(self.message)

    def __str__(self):
        if self.line:
            return f"Line {self.line}: {self.message} error."
        return f"{self.message} error."


class BasicSyntaxError(BasicError):
    """Unexpected token or malformed source."""
    message = "Syntax"


class TypeMismatch(BasicError):
    """Operand or argument has the wrong type."""
    message = "Type mismatch"


class DivisionByZero(BasicError):
    message = "Division by zero"


class OutOfSpace(BasicError):
    """String longer than 255 bytes or temporary string space exhausted."""
    message = "Out of temporary space"


class StackExhausted(BasicError):
    """GOSUB nested deeper than the return stack allows."""
    message = "GOSUB stack exhausted"


class MismatchedNext(BasicError):
    message = "Mismatched NEXT"


class UndefinedLine(BasicError):
    """Jump target does not exist in the program."""
    message = "Undefined line"


class InvalidBase(BasicError):
    message = "Invalid base"


class InvalidVariable(BasicError):
    """Variable reference or array subscript out of range."""
    message = "Invalid variable"


class InvalidAddress(BasicError):
    """PEEK/POKE used without a host memory hook."""
    message = "Invalid address"


class InputExhausted(BasicError):
    """INPUT reached the end of the input stream."""
    message = "EOF"
