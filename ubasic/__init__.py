"""
uBASIC - A small line-numbered BASIC interpreter.

This package provides the execution engine for a tiny integer/string BASIC
dialect: a tokenizer, an expression evaluator, a statement executor and a
cooperative run loop that executes one program line per call.
"""

__version__ = "0.1.0"
__author__ = "uBASIC Project"

from .errors import BasicError
from .interpreter import Interpreter

__all__ = ['BasicError', 'Interpreter']
