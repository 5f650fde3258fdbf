"""
Value model for uBASIC.

Values are either signed machine words or length-prefixed strings of at most
255 bytes. Variables are addressed by small integer references: one bit marks
a string variable, the remaining bits are the slot index.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


MAX_STRING_LENGTH = 255
EMPTY_STRING = b""

VARIABLE_LETTERS = 26
SLOTS_PER_LETTER = 11        # slot 0 is the scalar, 1..10 are array elements
ARRAY_SLOTS = SLOTS_PER_LETTER - 1
INTEGER_SLOTS = VARIABLE_LETTERS * SLOTS_PER_LETTER
STRING_SLOTS = VARIABLE_LETTERS

STRING_FLAG = 0x8000

WORD_BITS = 32
_WORD_MASK = (1 << WORD_BITS) - 1
_WORD_SIGN = 1 << (WORD_BITS - 1)


class ValueType(Enum):
    """Value tags. The values double as built-in signature codes."""
    INTEGER = 'I'
    STRING = 'S'


@dataclass
class Value:
    """A tagged uBASIC value."""
    type: ValueType
    data: Union[int, bytes]

    @classmethod
    def integer(cls, n: int) -> 'Value':
        return cls(ValueType.INTEGER, to_word(n))

    @classmethod
    def string(cls, data: bytes) -> 'Value':
        return cls(ValueType.STRING, data)

    @property
    def is_integer(self) -> bool:
        return self.type == ValueType.INTEGER

    @property
    def is_string(self) -> bool:
        return self.type == ValueType.STRING

    def __repr__(self):
        return f"Value({self.type.name}, {self.data!r})"


def to_word(n: int) -> int:
    """Wrap ``n`` to a signed machine word."""
    n &= _WORD_MASK
    return n - (1 << WORD_BITS) if n & _WORD_SIGN else n


def int_var(letter: int, slot: int = 0) -> int:
    """Reference to integer variable ``letter`` (0 = A), element ``slot``."""
    return letter * SLOTS_PER_LETTER + slot


def string_var(letter: int) -> int:
    """Reference to string variable ``letter`` (0 = A$)."""
    return STRING_FLAG | letter


def is_string_var(ref: int) -> bool:
    return bool(ref & STRING_FLAG)


def slot_of(ref: int) -> int:
    """Slot index of a reference, with the kind bit stripped."""
    return ref & ~STRING_FLAG


def var_name(ref: int) -> str:
    """Human readable name of a reference, for diagnostics."""
    if is_string_var(ref):
        return chr(ord('A') + slot_of(ref)) + '$'
    letter, slot = divmod(ref, SLOTS_PER_LETTER)
    name = chr(ord('A') + letter)
    return name if slot == 0 else f"{name}[{slot}]"
