"""uBASIC runtime state: values, string space, variables, stacks and line index."""

from .values import Value, ValueType, EMPTY_STRING, MAX_STRING_LENGTH, STRING_FLAG
from .arena import StringArena
from .variables import VariableStore
from .line_index import LineIndex
from .stacks import GosubStack, ForStack, ForFrame, Overflow

__all__ = [
    'Value', 'ValueType', 'EMPTY_STRING', 'MAX_STRING_LENGTH', 'STRING_FLAG',
    'StringArena',
    'VariableStore',
    'LineIndex',
    'GosubStack', 'ForStack', 'ForFrame', 'Overflow',
]
