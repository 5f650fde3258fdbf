"""
uBASIC Tokenizer - Scans BASIC program text one token at a time.

The interpreter never sees the whole token stream. It asks for the current
token, advances, and saves/restores opaque source positions to implement
jumps. Handles:
- Line numbers and integer literals
- String literals (no escapes, may not span lines)
- Single letter variables, A..Z and A$..Z$
- Keywords, matched as prefixes so that ``GOTO`` scans as ``GO`` ``TO``
- Operators, separators and end of line
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..errors import BasicSyntaxError
from ..runtime.values import string_var, int_var


class TokenType(Enum):
    """uBASIC token types."""
    ERROR = auto()
    ENDOFINPUT = auto()

    # Literals and variables
    NUMBER = auto()
    STRING = auto()
    INTVAR = auto()       # A
    STRINGVAR = auto()    # A$

    # Statement keywords
    LET = auto()
    PRINT = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()
    FOR = auto()
    TO = auto()
    STEP = auto()
    NEXT = auto()
    GO = auto()
    SUB = auto()
    RETURN = auto()
    REM = auto()
    POKE = auto()
    STOP = auto()
    DATA = auto()
    RANDOMIZE = auto()
    OPTION = auto()
    BASE = auto()
    INPUT = auto()
    RESTORE = auto()
    TAB = auto()

    # Numeric functions
    PEEK = auto()
    ABS = auto()
    INT = auto()
    SGN = auto()
    LEN = auto()
    CODE = auto()
    VAL = auto()
    RND = auto()

    # String functions
    LEFTSTR = auto()      # LEFT$
    RIGHTSTR = auto()     # RIGHT$
    MIDSTR = auto()       # MID$
    CHRSTR = auto()       # CHR$

    # Operators
    AND = auto()          # AND, &
    OR = auto()           # OR, |
    MOD = auto()          # MOD, %
    PLUS = auto()
    MINUS = auto()
    ASTR = auto()         # *
    SLASH = auto()        # /
    LT = auto()
    GT = auto()
    EQ = auto()
    NE = auto()           # <>
    LE = auto()           # <=
    GE = auto()           # >=

    # Separators
    COMMA = auto()
    SEMICOLON = auto()
    LEFTPAREN = auto()
    RIGHTPAREN = auto()
    CR = auto()


NUMERIC_FUNCTIONS = frozenset({
    TokenType.PEEK, TokenType.ABS, TokenType.INT, TokenType.SGN,
    TokenType.LEN, TokenType.CODE, TokenType.VAL, TokenType.RND,
})

STRING_FUNCTIONS = frozenset({
    TokenType.LEFTSTR, TokenType.RIGHTSTR, TokenType.MIDSTR, TokenType.CHRSTR,
})

# Order matters: the first keyword that prefixes the input wins.
KEYWORDS = [
    ("LET", TokenType.LET),
    ("PRINT", TokenType.PRINT),
    ("IF", TokenType.IF),
    ("THEN", TokenType.THEN),
    ("ELSE", TokenType.ELSE),
    ("FOR", TokenType.FOR),
    ("TO", TokenType.TO),
    ("STEP", TokenType.STEP),
    ("NEXT", TokenType.NEXT),
    ("GO", TokenType.GO),
    ("SUB", TokenType.SUB),
    ("RETURN", TokenType.RETURN),
    ("REM", TokenType.REM),
    ("PEEK", TokenType.PEEK),
    ("POKE", TokenType.POKE),
    ("STOP", TokenType.STOP),
    ("END", TokenType.STOP),
    ("DATA", TokenType.DATA),
    ("RANDOMIZE", TokenType.RANDOMIZE),
    ("RND", TokenType.RND),
    ("OPTION", TokenType.OPTION),
    ("BASE", TokenType.BASE),
    ("INPUT", TokenType.INPUT),
    ("INT", TokenType.INT),
    ("RESTORE", TokenType.RESTORE),
    ("TAB", TokenType.TAB),
    ("ABS", TokenType.ABS),
    ("SGN", TokenType.SGN),
    ("LEN", TokenType.LEN),
    ("LEFT$", TokenType.LEFTSTR),
    ("RIGHT$", TokenType.RIGHTSTR),
    ("MID$", TokenType.MIDSTR),
    ("CHR$", TokenType.CHRSTR),
    ("CODE", TokenType.CODE),
    ("VAL", TokenType.VAL),
    ("AND", TokenType.AND),
    ("OR", TokenType.OR),
    ("MOD", TokenType.MOD),
]

SINGLE_CHARS = {
    '\n': TokenType.CR,
    ',': TokenType.COMMA,
    ';': TokenType.SEMICOLON,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '&': TokenType.AND,
    '|': TokenType.OR,
    '*': TokenType.ASTR,
    '/': TokenType.SLASH,
    '%': TokenType.MOD,
    '(': TokenType.LEFTPAREN,
    ')': TokenType.RIGHTPAREN,
    '=': TokenType.EQ,
}


@dataclass
class Token:
    """The token under the cursor and its payload."""
    type: TokenType
    value: object
    pos: int
    end: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.pos})"


class Tokenizer:
    """Scans uBASIC source on demand.

    Positions handed out by :meth:`pos` are character offsets into the
    program text; they are only meaningful to :meth:`goto` on the same
    tokenizer.
    """

    def __init__(self, source: str = ""):
        self.source = source
        self.current: Token = Token(TokenType.ENDOFINPUT, None, 0, 0)
        self._saved: List[int] = []
        self.init(source)

    def init(self, source: str):
        """Start scanning ``source`` from the beginning."""
        self.source = source
        self._saved = []
        self.goto(0)

    def error(self, message: str):
        """Raise a syntax error with location information."""
        if self.current.type == TokenType.ERROR:
            message = self.current.value
        row = self.source.count('\n', 0, self.current.pos) + 1
        raise BasicSyntaxError(f"Syntax ({message}, text line {row})")

    def peek(self, pos: int) -> Optional[str]:
        """Character at ``pos``, or None past the end."""
        if pos < len(self.source):
            return self.source[pos]
        return None

    def _skip_whitespace(self, pos: int) -> int:
        while self.peek(pos) is not None and self.peek(pos) in ' \t\r':
            pos += 1
        return pos

    def _scan(self, pos: int) -> Token:
        """Scan a single token starting at ``pos``."""
        pos = self._skip_whitespace(pos)
        ch = self.peek(pos)

        if ch is None:
            return Token(TokenType.ENDOFINPUT, None, pos, pos)

        if ch.isdigit():
            end = pos
            while self.peek(end) is not None and self.peek(end).isdigit():
                end += 1
            return Token(TokenType.NUMBER, int(self.source[pos:end]), pos, end)

        if ch == '"':
            end = pos + 1
            while self.peek(end) is not None and self.peek(end) not in '"\n':
                end += 1
            if self.peek(end) != '"':
                return Token(TokenType.ERROR, "unterminated string", pos, end)
            text = self.source[pos + 1:end]
            return Token(TokenType.STRING, text.encode('latin-1', errors='replace'), pos, end + 1)

        if ch == '<':
            nxt = self.peek(pos + 1)
            if nxt == '=':
                return Token(TokenType.LE, None, pos, pos + 2)
            if nxt == '>':
                return Token(TokenType.NE, None, pos, pos + 2)
            return Token(TokenType.LT, None, pos, pos + 1)

        if ch == '>':
            if self.peek(pos + 1) == '=':
                return Token(TokenType.GE, None, pos, pos + 2)
            return Token(TokenType.GT, None, pos, pos + 1)

        if ch in SINGLE_CHARS:
            return Token(SINGLE_CHARS[ch], None, pos, pos + 1)

        upper = self.source[pos:pos + 10].upper()
        for word, token_type in KEYWORDS:
            if upper.startswith(word):
                return Token(token_type, None, pos, pos + len(word))

        if ch.isalpha() and ch.isascii():
            letter = ord(ch.upper()) - ord('A')
            if self.peek(pos + 1) == '$':
                return Token(TokenType.STRINGVAR, string_var(letter), pos, pos + 2)
            return Token(TokenType.INTVAR, int_var(letter), pos, pos + 1)

        return Token(TokenType.ERROR, f"unexpected character {ch!r}", pos, pos + 1)

    def _load(self, pos: int):
        # ERROR tokens only become fatal when the interpreter tries to accept one.
        self.current = self._scan(pos)

    def token(self) -> TokenType:
        """Type of the current token."""
        return self.current.type

    def next(self):
        """Advance to the next token. Sticks at end of input."""
        if self.finished():
            return
        self._load(self.current.end)

    def num(self) -> int:
        """Value of the current NUMBER token."""
        return self.current.value

    def string(self) -> bytes:
        """Contents of the current STRING token."""
        return self.current.value

    def variable_num(self) -> int:
        """Variable reference of the current INTVAR/STRINGVAR token."""
        return self.current.value

    def string_func(self, sink: Callable[[int], None]):
        """Push each byte of the current string literal through ``sink``."""
        for byte in self.current.value:
            sink(byte)

    def pos(self) -> int:
        """Source position of the current token."""
        return self.current.pos

    def goto(self, pos: int):
        """Reposition the scanner at ``pos`` (as returned by :meth:`pos`)."""
        self._load(pos)

    def push(self):
        """Save the current position."""
        self._saved.append(self.current.pos)

    def pop(self):
        """Return to the most recently saved position."""
        self.goto(self._saved.pop())

    def newline(self):
        """Skip the rest of the line, leaving the cursor on the next one."""
        end = self.source.find('\n', self.current.pos)
        if end < 0:
            self._load(len(self.source))
        else:
            self._load(end + 1)

    def finished(self) -> bool:
        return self.current.type == TokenType.ENDOFINPUT

    def tokenize(self) -> List[Token]:
        """Scan from the current position to end of input.

        Used by tests and tools; the interpreter pulls tokens one at a time.
        """
        tokens = [self.current]
        while not self.finished():
            self.next()
            tokens.append(self.current)
        return tokens
