"""
Control flow stacks.

Both stacks have a fixed depth but react differently when full: GOSUB refuses
to nest deeper and stops the program, FOR simply stops tracking the new loop.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, List, Optional, TypeVar

from ..errors import StackExhausted


DEFAULT_GOSUB_DEPTH = 10
DEFAULT_FOR_DEPTH = 4

T = TypeVar('T')


class Overflow(Enum):
    """What a full stack does with one more push."""
    FAIL = auto()     # raise StackExhausted
    IGNORE = auto()   # drop the frame


@dataclass
class ForFrame:
    """Bookkeeping for one active FOR loop."""
    resume_line: Optional[int]   # line after the FOR; None when FOR is the last line
    variable: int
    limit: int
    step: int


class BoundedStack(Generic[T]):
    """A stack with a fixed maximum depth."""

    overflow = Overflow.FAIL

    def __init__(self, depth: int):
        self.depth = depth
        self.frames: List[T] = []

    def push(self, frame: T) -> bool:
        """Push ``frame``. Returns False if it was dropped."""
        if len(self.frames) >= self.depth:
            if self.overflow == Overflow.FAIL:
                raise StackExhausted()
            return False
        self.frames.append(frame)
        return True

    def pop(self) -> Optional[T]:
        """Pop the top frame, or None if the stack is empty."""
        if not self.frames:
            return None
        return self.frames.pop()

    def top(self) -> Optional[T]:
        return self.frames[-1] if self.frames else None

    def clear(self):
        self.frames = []

    def __len__(self) -> int:
        return len(self.frames)


class GosubStack(BoundedStack[Optional[int]]):
    """Return line numbers for GOSUB."""

    overflow = Overflow.FAIL

    def __init__(self, depth: int = DEFAULT_GOSUB_DEPTH):
        super().__init__(depth)


class ForStack(BoundedStack[ForFrame]):
    """Active FOR loops. Loops beyond the depth limit are not tracked."""

    overflow = Overflow.IGNORE

    def __init__(self, depth: int = DEFAULT_FOR_DEPTH):
        super().__init__(depth)
