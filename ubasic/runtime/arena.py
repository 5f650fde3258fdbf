"""
Temporary string space.

Every string produced while evaluating a statement (literals, concatenations,
substrings) is carved out of one fixed-size arena. The arena is rewound at the
start of each statement, so anything that must outlive the statement has to be
copied into variable storage first.
"""

from ..errors import OutOfSpace
from .values import MAX_STRING_LENGTH


DEFAULT_ARENA_SIZE = 512


class StringArena:
    """Bump allocator for transient strings."""

    def __init__(self, capacity: int = DEFAULT_ARENA_SIZE):
        self.capacity = capacity
        self.used = 0  # bytes handed out since the last reset, length prefixes included

    @property
    def available(self) -> int:
        return self.capacity - self.used

    def allocate(self, length: int) -> bytearray:
        """
        Reserve a zero-filled string buffer of ``length`` bytes.

        Each allocation also consumes one byte for the length prefix.

        Raises:
            OutOfSpace: if the string is longer than 255 bytes or the arena
                cannot hold it
        """
        if length > MAX_STRING_LENGTH:
            raise OutOfSpace("String too long")
        if self.used + length + 1 > self.capacity:
            raise OutOfSpace("Out of temporary space")
        self.used += length + 1
        return bytearray(length)

    def copy(self, data: bytes) -> bytes:
        """Allocate a temporary holding a copy of ``data``."""
        buf = self.allocate(len(data))
        buf[:] = data
        return bytes(buf)

    def reset(self):
        """Release every temporary at once."""
        self.used = 0
