"""
Expression evaluator for uBASIC.

A recursive descent parser that evaluates as it goes. Four precedence tiers,
all left associative:

    relation:  <  >  =  <>  <=  >=
    expr:      +  -  AND  OR
    term:      *  /  MOD
    factor:    literals, variables, (expr), unary minus, built-in functions

Integers are signed machine words. Strings are at most 255 bytes and every
string produced here lives in the interpreter's temporary string arena.
"""

from typing import Callable, Dict, List, Tuple

from ..errors import DivisionByZero, InvalidAddress, InvalidVariable, TypeMismatch
from ..lexer import TokenType, NUMERIC_FUNCTIONS, STRING_FUNCTIONS
from ..runtime.values import Value, ValueType, ARRAY_SLOTS


RELATIONS = frozenset({
    TokenType.LT, TokenType.GT, TokenType.EQ,
    TokenType.NE, TokenType.LE, TokenType.GE,
})


def trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def trunc_mod(a: int, b: int) -> int:
    """Remainder matching :func:`trunc_div`; takes the sign of ``a``."""
    return a - b * trunc_div(a, b)


def compare_strings(a: bytes, b: bytes) -> int:
    """
    Compare two strings byte by byte over the shorter length.

    On an equal shared prefix the longer string is the greater one.

    Returns:
        -1, 0 or 1
    """
    n = min(len(a), len(b))
    if a[:n] != b[:n]:
        return -1 if a[:n] < b[:n] else 1
    if len(a) > len(b):
        return 1
    if len(a) < len(b):
        return -1
    return 0


class ExpressionEvaluator:
    """Evaluates expressions straight off the interpreter's tokenizer."""

    def __init__(self, interp):
        self.interp = interp

    @property
    def tokenizer(self):
        return self.interp.tokenizer

    # ------------------------------------------------------------------
    # Type checks

    @staticmethod
    def typecheck_int(value: Value):
        if value.type != ValueType.INTEGER:
            raise TypeMismatch()

    @staticmethod
    def typecheck_string(value: Value):
        if value.type != ValueType.STRING:
            raise TypeMismatch()

    @staticmethod
    def typecheck_same(left: Value, right: Value):
        if left.type != right.type:
            raise TypeMismatch()

    # ------------------------------------------------------------------
    # Entry points

    def int_expr(self) -> int:
        value = self.expr()
        self.typecheck_int(value)
        return value.data

    def string_expr(self) -> bytes:
        value = self.expr()
        self.typecheck_string(value)
        return value.data

    def bracketed_expr(self) -> Value:
        self.interp.accept(TokenType.LEFTPAREN)
        value = self.expr()
        self.interp.accept(TokenType.RIGHTPAREN)
        return value

    def bracketed_int_expr(self) -> int:
        value = self.bracketed_expr()
        self.typecheck_int(value)
        return value.data

    def variable_ref(self, allow_string: bool = True) -> int:
        """
        Consume a variable, including an optional ``(subscript)``.

        Integer variables may be subscripted; element ``i`` lives in slot
        ``1 + i - base`` where base is set by OPTION BASE.
        """
        tok = self.tokenizer
        ref = tok.variable_num()
        if allow_string:
            kind = self.interp.accept_either(TokenType.INTVAR, TokenType.STRINGVAR)
        else:
            kind = tok.token()
            self.interp.accept(TokenType.INTVAR)

        if kind == TokenType.INTVAR and tok.token() == TokenType.LEFTPAREN:
            slot = self.bracketed_int_expr() - self.interp.array_base + 1
            if not 1 <= slot <= ARRAY_SLOTS:
                raise InvalidVariable("Subscript out of range")
            ref += slot
        return ref

    # ------------------------------------------------------------------
    # Precedence tiers

    def factor(self) -> Value:
        tok = self.tokenizer
        t = tok.token()

        if t == TokenType.STRING:
            value = Value.string(self.interp.arena.copy(tok.string()))
            self.interp.accept(TokenType.STRING)
            return value

        if t == TokenType.NUMBER:
            value = Value.integer(tok.num())
            self.interp.accept(TokenType.NUMBER)
            return value

        if t == TokenType.LEFTPAREN:
            return self.bracketed_expr()

        if t == TokenType.MINUS:
            self.interp.accept(TokenType.MINUS)
            value = self.factor()
            self.typecheck_int(value)
            return Value.integer(-value.data)

        if t in (TokenType.INTVAR, TokenType.STRINGVAR):
            return self.interp.variables.get(self.variable_ref())

        if t in NUMERIC_FUNCTIONS or t in STRING_FUNCTIONS:
            self.interp.accept(t)
            signature, handler = self.FUNCTIONS[t]
            args = self.function_args(signature)
            return handler(self, *[arg.data for arg in args])

        tok.error(f"unexpected {t.name} in expression")

    def term(self) -> Value:
        tok = self.tokenizer
        value = self.factor()
        op = tok.token()
        while op in (TokenType.ASTR, TokenType.SLASH, TokenType.MOD):
            tok.next()
            right = self.factor()
            self.typecheck_int(value)
            self.typecheck_int(right)
            if op == TokenType.ASTR:
                value = Value.integer(value.data * right.data)
            else:
                if right.data == 0:
                    raise DivisionByZero()
                if op == TokenType.SLASH:
                    value = Value.integer(trunc_div(value.data, right.data))
                else:
                    value = Value.integer(trunc_mod(value.data, right.data))
            op = tok.token()
        return value

    def expr(self) -> Value:
        tok = self.tokenizer
        value = self.term()
        op = tok.token()
        while op in (TokenType.PLUS, TokenType.MINUS, TokenType.AND, TokenType.OR):
            tok.next()
            right = self.term()
            if op != TokenType.PLUS:
                self.typecheck_int(value)
            self.typecheck_same(value, right)
            if op == TokenType.PLUS:
                if value.is_integer:
                    value = Value.integer(value.data + right.data)
                else:
                    value = Value.string(self.concat(value.data, right.data))
            elif op == TokenType.MINUS:
                value = Value.integer(value.data - right.data)
            elif op == TokenType.AND:
                value = Value.integer(value.data & right.data)
            else:
                value = Value.integer(value.data | right.data)
            op = tok.token()
        return value

    def relation(self) -> Value:
        """
        Comparison tier. Always yields an integer.

        ``A < B < C`` is not a range test: each operator compares the
        previous result (0 or 1) with the next operand.
        """
        tok = self.tokenizer
        value = self.expr()
        op = tok.token()
        while op in RELATIONS:
            tok.next()
            right = self.expr()
            self.typecheck_same(value, right)
            if value.is_integer:
                a, b = value.data, right.data
            else:
                a, b = compare_strings(value.data, right.data), 0
            if op == TokenType.LT:
                result = a < b
            elif op == TokenType.GT:
                result = a > b
            elif op == TokenType.EQ:
                result = a == b
            elif op == TokenType.LE:
                result = a <= b
            elif op == TokenType.GE:
                result = a >= b
            else:
                result = a != b
            value = Value.integer(int(result))
            op = tok.token()
        # A bare string has no truth value.
        self.typecheck_int(value)
        return value

    # ------------------------------------------------------------------
    # Strings

    def concat(self, left: bytes, right: bytes) -> bytes:
        buf = self.interp.arena.allocate(len(left) + len(right))
        buf[:len(left)] = left
        buf[len(left):] = right
        return bytes(buf)

    def string_cut(self, s: bytes, start: int, count: int) -> bytes:
        """``count`` bytes of ``s`` from 1-based ``start``, clamped to the string."""
        start = max(start, 1)
        count = max(count, 0)
        if start > len(s):
            return bytes(self.interp.arena.allocate(0))
        count = min(count, len(s) - (start - 1))
        return self.interp.arena.copy(s[start - 1:start - 1 + count])

    def string_cut_right(self, s: bytes, count: int) -> bytes:
        remaining = len(s) - count
        if remaining <= 0:
            # Asking for the whole string (or more) yields "".
            return bytes(self.interp.arena.allocate(0))
        return self.string_cut(s, remaining + 1, count)

    # ------------------------------------------------------------------
    # Built-in functions

    def function_args(self, signature: str) -> List[Value]:
        """Parse ``(arg, ...)`` checking each argument against ``signature``."""
        self.interp.accept(TokenType.LEFTPAREN)
        args = []
        for i, code in enumerate(signature):
            if i:
                self.interp.accept(TokenType.COMMA)
            value = self.expr()
            if value.type.value != code:
                raise TypeMismatch()
            args.append(value)
        self.interp.accept(TokenType.RIGHTPAREN)
        return args

    def _fn_peek(self, address: int) -> Value:
        if self.interp.peek_function is None:
            raise InvalidAddress("No PEEK hook")
        return Value.integer(self.interp.peek_function(address))

    def _fn_abs(self, n: int) -> Value:
        return Value.integer(abs(n))

    def _fn_int(self, n: int) -> Value:
        return Value.integer(n)

    def _fn_sgn(self, n: int) -> Value:
        return Value.integer((n > 0) - (n < 0))

    def _fn_len(self, s: bytes) -> Value:
        return Value.integer(len(s))

    def _fn_code(self, s: bytes) -> Value:
        return Value.integer(s[0] if s else 0)

    def _fn_val(self, s: bytes) -> Value:
        negative = s[:1] == b'-'
        digits = s[1:] if negative else s
        if not digits or not digits.isdigit():
            raise TypeMismatch()
        n = int(digits)
        return Value.integer(-n if negative else n)

    def _fn_rnd(self, n: int) -> Value:
        if n <= 0:
            return Value.integer(0)
        return Value.integer(self.interp.random.randrange(n))

    def _fn_left(self, s: bytes, n: int) -> Value:
        return Value.string(self.string_cut(s, 1, n))

    def _fn_right(self, s: bytes, n: int) -> Value:
        return Value.string(self.string_cut_right(s, n))

    def _fn_mid(self, s: bytes, start: int, n: int) -> Value:
        return Value.string(self.string_cut(s, start, n))

    def _fn_chr(self, code: int) -> Value:
        # Two bytes long; only the first is set.
        buf = self.interp.arena.allocate(2)
        buf[0] = code & 0xFF
        return Value.string(bytes(buf))

    FUNCTIONS: Dict[TokenType, Tuple[str, Callable]] = {
        TokenType.PEEK: ("I", _fn_peek),
        TokenType.ABS: ("I", _fn_abs),
        TokenType.INT: ("I", _fn_int),
        TokenType.SGN: ("I", _fn_sgn),
        TokenType.LEN: ("S", _fn_len),
        TokenType.CODE: ("S", _fn_code),
        TokenType.VAL: ("S", _fn_val),
        TokenType.RND: ("I", _fn_rnd),
        TokenType.LEFTSTR: ("SI", _fn_left),
        TokenType.RIGHTSTR: ("SI", _fn_right),
        TokenType.MIDSTR: ("SII", _fn_mid),
        TokenType.CHRSTR: ("I", _fn_chr),
    }
