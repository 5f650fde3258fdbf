"""
Line number index.

Maps BASIC line numbers to tokenizer positions. Entries are added the first
time a line is reached by ordinary execution; a jump to a line that has never
been executed falls back to scanning the program text and does not add an
entry.
"""

from typing import Dict, Iterator, Optional, Tuple


class LineIndex:
    """Append-only line number -> source position cache."""

    def __init__(self):
        self._entries: Dict[int, int] = {}  # insertion order is first-seen order

    def add(self, line_number: int, pos: int):
        """Record where ``line_number`` starts. Existing entries are kept."""
        if line_number not in self._entries:
            self._entries[line_number] = pos

    def find(self, line_number: int) -> Optional[int]:
        """Source position of ``line_number``, or None if not indexed yet."""
        return self._entries.get(line_number)

    def clear(self):
        self._entries.clear()

    def __contains__(self, line_number: int) -> bool:
        return line_number in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self._entries.items())
