"""
Token model for the manifest language.

Defines the closed set of token types, the reserved keywords and the token
factory that attaches line/column positions to every lexeme.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Token types in the manifest language."""

    # Brackets
    LBRACK = "LBRACK"
    RBRACK = "RBRACK"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"

    # Comparison operators
    EQUALS = "EQUALS"
    ISEQUAL = "ISEQUAL"
    GREATEREQUAL = "GREATEREQUAL"
    GREATERTHAN = "GREATERTHAN"
    LESSTHAN = "LESSTHAN"
    LESSEQUAL = "LESSEQUAL"
    NOTEQUAL = "NOTEQUAL"
    NOT = "NOT"
    MATCH = "MATCH"
    NOMATCH = "NOMATCH"

    # Punctuation
    COMMA = "COMMA"
    DOT = "DOT"
    COLON = "COLON"
    AT = "AT"
    SEMIC = "SEMIC"
    QMARK = "QMARK"
    BACKSLASH = "BACKSLASH"

    # Collectors
    LLCOLLECT = "LLCOLLECT"
    RRCOLLECT = "RRCOLLECT"
    LCOLLECT = "LCOLLECT"
    RCOLLECT = "RCOLLECT"

    # Arrows
    FARROW = "FARROW"
    PARROW = "PARROW"

    # Arithmetic operators
    APPENDS = "APPENDS"
    PLUS = "PLUS"
    MINUS = "MINUS"
    DIV = "DIV"
    TIMES = "TIMES"
    LSHIFT = "LSHIFT"
    RSHIFT = "RSHIFT"

    # Relationship (edge) operators
    IN_EDGE = "IN_EDGE"
    OUT_EDGE = "OUT_EDGE"
    IN_EDGE_SUB = "IN_EDGE_SUB"
    OUT_EDGE_SUB = "OUT_EDGE_SUB"

    # Literals
    NAME = "NAME"
    CLASSREF = "CLASSREF"
    NUMBER = "NUMBER"
    VARIABLE = "VARIABLE"
    REGEX = "REGEX"
    SSTRING = "SSTRING"

    # Double quoted string fragments
    STRING = "STRING"
    DQPRE = "DQPRE"
    DQMID = "DQMID"
    DQPOST = "DQPOST"
    UNENC_VARIABLE = "UNENC_VARIABLE"

    # Comments
    COMMENT = "COMMENT"
    MLCOMMENT = "MLCOMMENT"
    SLASH_COMMENT = "SLASH_COMMENT"

    # Formatting
    WHITESPACE = "WHITESPACE"
    INDENT = "INDENT"
    NEWLINE = "NEWLINE"

    # Keywords
    CASE = "CASE"
    CLASS = "CLASS"
    DEFAULT = "DEFAULT"
    DEFINE = "DEFINE"
    IMPORT = "IMPORT"
    IF = "IF"
    ELSIF = "ELSIF"
    ELSE = "ELSE"
    INHERITS = "INHERITS"
    NODE = "NODE"
    AND = "AND"
    OR = "OR"
    UNDEF = "UNDEF"
    TRUE = "TRUE"
    FALSE = "FALSE"
    IN = "IN"
    UNLESS = "UNLESS"


# Reserved words, matched case-sensitively against a whole NAME lexeme
KEYWORDS = {
    "case": TokenType.CASE,
    "class": TokenType.CLASS,
    "default": TokenType.DEFAULT,
    "define": TokenType.DEFINE,
    "import": TokenType.IMPORT,
    "if": TokenType.IF,
    "elsif": TokenType.ELSIF,
    "else": TokenType.ELSE,
    "inherits": TokenType.INHERITS,
    "node": TokenType.NODE,
    "and": TokenType.AND,
    "or": TokenType.OR,
    "undef": TokenType.UNDEF,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "in": TokenType.IN,
    "unless": TokenType.UNLESS,
}

FORMATTING_TOKENS = frozenset({TokenType.WHITESPACE, TokenType.INDENT, TokenType.NEWLINE})

COMMENT_TOKENS = frozenset({TokenType.COMMENT, TokenType.MLCOMMENT, TokenType.SLASH_COMMENT})


@dataclass(frozen=True)
class Token:
    """
    A single token in a manifest.

    Attributes:
        type: Type of token
        value: Semantic text of the lexeme (quotes, comment markers and
            the ``$`` sigil are not included)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, {self.line}:{self.column})"

    @property
    def is_formatting(self) -> bool:
        return self.type in FORMATTING_TOKENS

    @property
    def is_comment(self) -> bool:
        return self.type in COMMENT_TOKENS


def advance_position(text: str, line: int = 1, column: int = 1) -> tuple[int, int]:
    """
    Return the cursor position reached after consuming ``text`` from ``line:column``.

    Only ``\\n`` starts a new line; every other character, ``\\r`` included,
    occupies one column.
    """
    newlines = text.count("\n")
    if newlines:
        return line + newlines, len(text) - text.rfind("\n")
    return line, column + len(text)


def new_token(
    token_type: TokenType,
    value: str,
    preceding: str,
    line: int = 1,
    column: int = 1,
) -> Token:
    """
    Create a token positioned from the text consumed before it.

    The line is ``line`` plus the newlines in ``preceding``. Without a
    newline the column is ``column`` plus the length of ``preceding``; when
    ``preceding`` spans lines the column is the length of its final line
    (never less than 1). The lexer passes an empty ``preceding`` together with
    the exact line and column of the token.

    Args:
        token_type: Type of the new token
        value: Token value
        preceding: Text consumed before the token
        line: Line where ``preceding`` starts
        column: Column where ``preceding`` starts

    Returns:
        Positioned token
    """
    newlines = preceding.count("\n")
    if newlines:
        last_newline = preceding.rfind("\n")
        return Token(
            token_type,
            value,
            line + newlines,
            max(len(preceding) - last_newline - 1, 1),
        )
    return Token(token_type, value, line, column + len(preceding))


def code_tokens(tokens: Iterable[Token]) -> list[Token]:
    """Return ``tokens`` without formatting and comment tokens."""
    return [t for t in tokens if not (t.is_formatting or t.is_comment)]
