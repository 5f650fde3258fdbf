"""uBASIC execution engine: expression evaluation, statements and console I/O."""

from .console import Console
from .expressions import ExpressionEvaluator
from .statements import StatementExecutor

__all__ = ['Console', 'ExpressionEvaluator', 'StatementExecutor']
