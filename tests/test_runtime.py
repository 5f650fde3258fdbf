"""
Tests for the uBASIC runtime state.

These tests verify:
- Temporary string space accounting and limits
- Variable storage, type safety and copy semantics
- The line number index
- GOSUB and FOR stack overflow policies
"""

import io

import pytest

from ubasic.errors import InvalidVariable, OutOfSpace, StackExhausted, TypeMismatch
from ubasic.engine import Console
from ubasic.runtime import (
    StringArena, VariableStore, LineIndex, GosubStack, ForStack, ForFrame,
    Value, EMPTY_STRING,
)
from ubasic.runtime.values import int_var, string_var, var_name, to_word, INTEGER_SLOTS


class TestStringArena:
    """Tests for the temporary string arena."""

    def test_allocation_counts_length_prefix(self):
        arena = StringArena(16)
        buf = arena.allocate(5)
        assert len(buf) == 5
        assert arena.used == 6
        assert arena.available == 10

    def test_string_longer_than_255_is_rejected(self):
        arena = StringArena(1024)
        arena.allocate(255)
        with pytest.raises(OutOfSpace):
            arena.allocate(256)

    def test_capacity_is_enforced(self):
        arena = StringArena(10)
        arena.allocate(4)
        arena.allocate(4)
        with pytest.raises(OutOfSpace):
            arena.allocate(0)

    def test_reset_releases_everything(self):
        arena = StringArena(10)
        arena.allocate(9)
        arena.reset()
        assert arena.used == 0
        assert arena.copy(b"ABCDEFGHI") == b"ABCDEFGHI"


class TestVariableStore:
    """Tests for integer and string variable slots."""

    def test_unassigned_values(self):
        store = VariableStore()
        assert store.get(int_var(0)) == Value.integer(0)
        assert store.get(string_var(25)) == Value.string(EMPTY_STRING)

    def test_integer_round_trip(self):
        store = VariableStore()
        store.set(int_var(3, 4), Value.integer(-12))
        assert store.get(int_var(3, 4)).data == -12
        assert store.get(int_var(3)).data == 0

    def test_string_is_copied(self):
        store = VariableStore()
        buf = bytearray(b"HELLO")
        store.set(string_var(1), Value.string(buf))
        buf[0] = ord('J')
        assert store.get(string_var(1)).data == b"HELLO"

    def test_type_mismatch_leaves_store_unchanged(self):
        store = VariableStore()
        store.set(int_var(0), Value.integer(7))
        store.set(string_var(0), Value.string(b"X"))
        with pytest.raises(TypeMismatch):
            store.set(int_var(0), Value.string(b"Y"))
        with pytest.raises(TypeMismatch):
            store.set(string_var(0), Value.integer(1))
        assert store.get(int_var(0)).data == 7
        assert store.get(string_var(0)).data == b"X"

    def test_out_of_range_reference(self):
        store = VariableStore()
        with pytest.raises(InvalidVariable):
            store.get(INTEGER_SLOTS)
        with pytest.raises(InvalidVariable):
            store.set(string_var(26), Value.string(b""))

    def test_clear(self):
        store = VariableStore()
        store.set(int_var(0), Value.integer(1))
        store.set(string_var(0), Value.string(b"A"))
        store.clear()
        assert store.get(int_var(0)).data == 0
        assert store.get(string_var(0)).data == EMPTY_STRING


class TestValues:

    def test_word_wraps(self):
        assert to_word(2 ** 31) == -2 ** 31
        assert to_word(-1) == -1
        assert Value.integer(2 ** 32 + 5).data == 5

    def test_names(self):
        assert var_name(int_var(0)) == "A"
        assert var_name(int_var(1, 3)) == "B[3]"
        assert var_name(string_var(2)) == "C$"


class TestLineIndex:

    def test_add_and_find(self):
        index = LineIndex()
        assert index.find(10) is None
        index.add(10, 0)
        index.add(30, 25)
        assert index.find(30) == 25
        assert 10 in index
        assert len(index) == 2

    def test_first_entry_wins(self):
        index = LineIndex()
        index.add(10, 0)
        index.add(10, 99)
        assert index.find(10) == 0

    def test_first_seen_order(self):
        index = LineIndex()
        for line, pos in [(30, 20), (10, 0), (20, 10)]:
            index.add(line, pos)
        assert [line for line, _ in index] == [30, 10, 20]
        index.clear()
        assert len(index) == 0


class TestStacks:
    """The two stacks overflow differently."""

    def test_gosub_stack_fails_when_full(self):
        stack = GosubStack(10)
        for line in range(10):
            stack.push(line)
        with pytest.raises(StackExhausted):
            stack.push(99)
        assert len(stack) == 10
        assert stack.pop() == 9

    def test_gosub_stack_empty_pop(self):
        assert GosubStack().pop() is None

    def test_for_stack_drops_when_full(self):
        stack = ForStack(4)
        frames = [ForFrame(20, int_var(i), 10, 1) for i in range(5)]
        assert all(stack.push(f) for f in frames[:4])
        assert stack.push(frames[4]) is False
        assert len(stack) == 4
        assert stack.top() is frames[3]

    def test_configurable_depth(self):
        stack = GosubStack(2)
        stack.push(1)
        stack.push(2)
        with pytest.raises(StackExhausted):
            stack.push(3)


class TestConsole:
    """Tests for output column tracking."""

    def make_console(self):
        return Console(io.StringIO(), io.StringIO())

    def test_printable_bytes_advance_column(self):
        console = self.make_console()
        console.put_bytes(b"ABC")
        assert console.column == 3
        console.newline()
        assert console.column == 0

    def test_backspace_and_delete_move_back(self):
        console = self.make_console()
        console.put_bytes(b"AB\x08")
        assert console.column == 1
        console.put_bytes(b"\x7f")
        assert console.column == 0
        assert console.output.getvalue() == "AB\x08\x7f"

    def test_backspace_at_first_column_counts_as_character(self):
        console = self.make_console()
        console.put_bytes(b"\x08")
        assert console.column == 1

    def test_tab_stops(self):
        console = self.make_console()
        console.put_bytes(b"AB\t")
        assert console.column == 8
        assert console.output.getvalue() == "AB      "
        console.put_tab()
        assert console.column == 16
        console.tab_to(18)
        assert console.output.getvalue() == "AB      \t  "
