"""uBASIC Tokenizer - Supplies tokens to the interpreter on demand."""

from .tokenizer import Tokenizer, Token, TokenType, NUMERIC_FUNCTIONS, STRING_FUNCTIONS

__all__ = ['Tokenizer', 'Token', 'TokenType', 'NUMERIC_FUNCTIONS', 'STRING_FUNCTIONS']
