"""
Variable and string storage.

Integer variables live in a flat table of 26 x 11 words. String variables
live in 26 slots, each owning its own copy of the bytes last assigned to it.
This store is the only place a string moves from temporary (arena) lifetime
to program lifetime.
"""

from typing import List

from ..errors import InvalidVariable, TypeMismatch
from .values import (
    Value, ValueType, EMPTY_STRING, INTEGER_SLOTS, STRING_SLOTS,
    is_string_var, slot_of,
)


class VariableStore:
    """Fixed-size slot tables for integer and string variables."""

    def __init__(self):
        self.integers: List[int] = [0] * INTEGER_SLOTS
        self.strings: List[bytes] = [EMPTY_STRING] * STRING_SLOTS

    def clear(self):
        """Reset every variable to 0 / the empty string."""
        self.integers = [0] * INTEGER_SLOTS
        self.strings = [EMPTY_STRING] * STRING_SLOTS

    def _check(self, ref: int):
        limit = STRING_SLOTS if is_string_var(ref) else INTEGER_SLOTS
        if not 0 <= slot_of(ref) < limit:
            raise InvalidVariable()

    def get(self, ref: int) -> Value:
        """Read a variable. Unassigned strings read as the empty string."""
        self._check(ref)
        if is_string_var(ref):
            return Value(ValueType.STRING, self.strings[slot_of(ref)])
        return Value(ValueType.INTEGER, self.integers[ref])

    def set(self, ref: int, value: Value):
        """
        Assign a variable.

        Raises:
            TypeMismatch: if the value's type does not match the variable kind
            InvalidVariable: if the reference is out of range
        """
        self._check(ref)
        if is_string_var(ref):
            if value.type != ValueType.STRING:
                raise TypeMismatch()
            # Own a private copy; the value may point into the arena.
            self.strings[slot_of(ref)] = bytes(value.data) if value.data else EMPTY_STRING
        else:
            if value.type != ValueType.INTEGER:
                raise TypeMismatch()
            self.integers[ref] = value.data
