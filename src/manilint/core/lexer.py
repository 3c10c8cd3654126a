"""
Lexer/Tokenizer for the manifest language.

Converts raw manifest text into a flat stream of tokens with exact source
positions. Whitespace, newlines and comments are kept in the stream so that
checks and fixers can see the original layout.
"""

import logging
import re
from collections.abc import Callable
from pathlib import Path

from .errors import (
    LexError,
    UnexpectedCharacterError,
    UnterminatedCommentError,
    UnterminatedStringError,
    make_lex_error,
)
from .scanner import Scanner, get_string_segment
from .tokens import (
    KEYWORDS,
    Token,
    TokenType,
    advance_position,
    new_token,
)

logger = logging.getLogger(__name__)

# Operators and punctuation in match priority order: a literal always comes
# before any shorter literal that is a prefix of it.
OPERATORS: list[tuple[str, TokenType]] = [
    ("<<|", TokenType.LLCOLLECT),
    ("|>>", TokenType.RRCOLLECT),
    ("<|", TokenType.LCOLLECT),
    ("|>", TokenType.RCOLLECT),
    ("<<", TokenType.LSHIFT),
    (">>", TokenType.RSHIFT),
    ("<-", TokenType.OUT_EDGE),
    ("<~", TokenType.OUT_EDGE_SUB),
    ("<=", TokenType.LESSEQUAL),
    (">=", TokenType.GREATEREQUAL),
    ("->", TokenType.IN_EDGE),
    ("~>", TokenType.IN_EDGE_SUB),
    ("==", TokenType.ISEQUAL),
    ("=~", TokenType.MATCH),
    ("=>", TokenType.FARROW),
    ("!=", TokenType.NOTEQUAL),
    ("!~", TokenType.NOMATCH),
    ("+>", TokenType.PARROW),
    ("+=", TokenType.APPENDS),
    ("[", TokenType.LBRACK),
    ("]", TokenType.RBRACK),
    ("{", TokenType.LBRACE),
    ("}", TokenType.RBRACE),
    ("(", TokenType.LPAREN),
    (")", TokenType.RPAREN),
    ("=", TokenType.EQUALS),
    (">", TokenType.GREATERTHAN),
    ("<", TokenType.LESSTHAN),
    ("!", TokenType.NOT),
    (",", TokenType.COMMA),
    (".", TokenType.DOT),
    (":", TokenType.COLON),
    ("@", TokenType.AT),
    (";", TokenType.SEMIC),
    ("?", TokenType.QMARK),
    ("\\", TokenType.BACKSLASH),
    ("+", TokenType.PLUS),
    ("-", TokenType.MINUS),
    ("/", TokenType.DIV),
    ("*", TokenType.TIMES),
]

# A regex literal may only follow one of these (ignoring formatting/comments)
REGEX_PREV_TOKENS = frozenset(
    {
        TokenType.NODE,
        TokenType.LBRACE,
        TokenType.RBRACE,
        TokenType.MATCH,
        TokenType.NOMATCH,
        TokenType.COMMA,
    }
)

# Name segments may contain '-' but never end with it, so 'a->b' splits.
# Identifiers and numbers are ASCII only.
_CLASSREF_SEGMENT = r"[A-Z](?:[-\w]*\w)?"
_NAME_SEGMENT = r"[a-z0-9_](?:[-\w]*\w)?"
_VARIABLE_SEGMENT = r"\w(?:[-\w]*\w)?"

CLASSREF_RE = re.compile(rf"(?:::)?{_CLASSREF_SEGMENT}(?:::{_CLASSREF_SEGMENT})*", re.ASCII)
NAME_RE = re.compile(rf"(?:::)?{_NAME_SEGMENT}(?:::{_NAME_SEGMENT})*", re.ASCII)
NUMBER_RE = re.compile(r"(?:0[xX][0-9A-Fa-f]+|\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\b", re.ASCII)
VARIABLE_NAME_RE = re.compile(
    rf"(?:::)?{_VARIABLE_SEGMENT}(?:::{_VARIABLE_SEGMENT})*", re.ASCII
)
VARIABLE_RE = re.compile(rf"\$({VARIABLE_NAME_RE.pattern})", re.ASCII)
REGEX_RE = re.compile(r"/((?:[^/\\\n]|\\.)*)/")
WHITESPACE_RE = re.compile(r"(?:[ \t\f]|\r(?!\n))+")
NEWLINE_RE = re.compile(r"\r?\n")
COMMENT_RE = re.compile(r"#([^\r\n]*)")
SLASH_COMMENT_RE = re.compile(r"//([^\r\n]*)")

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_MLCOMMENT_DECORATION_RE = re.compile(r"^[ \t]*\*(?!/)[ \t]?")

_DQ_ESCAPES = {
    '"': '"',
    "'": "'",
    "\\": "\\",
    "$": "$",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "s": " ",
}


def unescape_single_quoted(text: str) -> str:
    """Collapse \\' to '; every other backslash sequence is kept as written."""
    return _ESCAPE_RE.sub(lambda m: "'" if m.group(1) == "'" else m.group(0), text)


def unescape_double_quoted(text: str) -> str:
    """Apply double quoted string escapes; unknown sequences are kept as written."""
    return _ESCAPE_RE.sub(lambda m: _DQ_ESCAPES.get(m.group(1), m.group(0)), text)


def clean_mlcomment(body: str) -> str:
    """Strip leading '*' decoration from continuation lines and trim the body."""
    lines = [line.rstrip("\r") for line in body.split("\n")]
    cleaned = lines[:1] + [_MLCOMMENT_DECORATION_RE.sub("", line) for line in lines[1:]]
    return "\n".join(cleaned).strip()


class Lexer:
    """
    Lexer for manifest source.

    Tries an ordered list of rules at every position; the first rule that
    matches produces the next token(s). Each instance performs one pass over
    one buffer.
    """

    def __init__(
        self,
        text: str,
        file: Path | None = None,
        line: int = 1,
        column: int = 1,
        nested: bool = False,
    ):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source file path (for error reporting)
            line: Line of the first character of ``text``
            column: Column of the first character of ``text``
            nested: True when ``text`` is a fragment of a larger source, such
                as the body of a ${...} interpolation; errors then carry no
                snippet of ``text``
        """
        self.text = text
        self.file = file
        self.scanner = Scanner(text)
        self.tokens: list[Token] = []
        # Position bookkeeping: offset where the current line starts in
        # ``text`` and the line/column of that offset.
        self.line = line
        self.line_start = 0
        self.line_column = column
        self.origin = (line, column)
        self.nested = nested
        self._rules: list[Callable[[], bool]] = [
            self._lex_newline,
            self._lex_whitespace,
            self._lex_mlcomment,
            self._lex_slash_comment,
            self._lex_comment,
            self._lex_single_quoted,
            self._lex_double_quoted,
            self._lex_variable,
            self._lex_regex,
            self._lex_classref,
            self._lex_number,
            self._lex_name,
            self._lex_operator,
        ]

    def position(self, offset: int | None = None) -> tuple[int, int]:
        """Line/column of ``offset`` (default: the cursor) on the current line."""
        if offset is None:
            offset = self.scanner.pos
        return self.line, self.line_column + offset - self.line_start

    def error(self, error_cls: type[LexError], message: str, offset: int) -> LexError:
        line, column = self.position(offset)
        source = None
        if not self.nested:
            # Pad so snippet line numbers and the marker match the origin
            origin_line, origin_column = self.origin
            source = "\n" * (origin_line - 1) + " " * (origin_column - 1) + self.text
        return make_lex_error(error_cls, message, line, column, file=self.file, source=source)

    def emit(self, token_type: TokenType, value: str, start: int, end: int) -> None:
        """Append a token for ``text[start:end]`` and move the cursor past it."""
        self.tokens.append(new_token(token_type, value, "", *self.position(start)))
        self.consume(start, end)

    def consume(self, start: int, end: int) -> None:
        """Move the cursor to ``end``, tracking any newlines in ``text[start:end]``."""
        lexeme = self.text[start:end]
        newlines = lexeme.count("\n")
        if newlines:
            self.line += newlines
            self.line_start = start + lexeme.rfind("\n") + 1
            self.line_column = 1
        self.scanner.pos = end

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens in source order

        Raises:
            LexError: If a string or comment is unterminated or no rule matches
        """
        logger.debug("Tokenising %d characters from %s", len(self.text), self.file or "<string>")

        while not self.scanner.eos:
            for rule in self._rules:
                if rule():
                    break
            else:
                ch = self.scanner.current_char()
                raise self.error(
                    UnexpectedCharacterError,
                    f"Unexpected character: {ch!r}",
                    self.scanner.pos,
                )

        logger.debug("Produced %d tokens from %s", len(self.tokens), self.file or "<string>")
        return self.tokens

    # ------------------------------------------------------------------
    # Rules. Each returns True when it consumed input.
    # ------------------------------------------------------------------

    def _lex_pattern(self, pattern: re.Pattern[str], token_type: TokenType, group: int = 0) -> bool:
        m = self.scanner.match(pattern)
        if m is None:
            return False
        self.emit(token_type, m.group(group), m.start(), m.end())
        return True

    def _lex_newline(self) -> bool:
        return self._lex_pattern(NEWLINE_RE, TokenType.NEWLINE)

    def _lex_whitespace(self) -> bool:
        m = self.scanner.match(WHITESPACE_RE)
        if m is None:
            return False
        if self.tokens and self.tokens[-1].type == TokenType.NEWLINE:
            token_type = TokenType.INDENT
        else:
            token_type = TokenType.WHITESPACE
        self.emit(token_type, m.group(0), m.start(), m.end())
        return True

    def _lex_mlcomment(self) -> bool:
        if not self.scanner.startswith("/*"):
            return False
        start = self.scanner.pos
        end = self.text.find("*/", start + 2)
        if end == -1:
            raise self.error(UnterminatedCommentError, "Unterminated /* comment", start)
        self.emit(TokenType.MLCOMMENT, clean_mlcomment(self.text[start + 2 : end]), start, end + 2)
        return True

    def _lex_slash_comment(self) -> bool:
        m = self.scanner.match(SLASH_COMMENT_RE)
        if m is None:
            return False
        self.emit(TokenType.SLASH_COMMENT, m.group(1).lstrip(), m.start(), m.end())
        return True

    def _lex_comment(self) -> bool:
        m = self.scanner.match(COMMENT_RE)
        if m is None:
            return False
        self.emit(TokenType.COMMENT, m.group(1).lstrip(), m.start(), m.end())
        return True

    def _lex_single_quoted(self) -> bool:
        if self.scanner.current_char() != "'":
            return False
        start = self.scanner.pos
        self.scanner.pos += 1
        segment = get_string_segment(self.scanner, "'")
        if not segment.found:
            raise self.error(UnterminatedStringError, "Unterminated string literal", start)
        self.emit(TokenType.SSTRING, unescape_single_quoted(segment.value), start, self.scanner.pos)
        return True

    def _lex_double_quoted(self) -> bool:
        if self.scanner.current_char() != '"':
            return False
        start = self.scanner.pos
        self.scanner.pos += 1
        segment = get_string_segment(self.scanner, '"')
        if not segment.found:
            raise self.error(UnterminatedStringError, "Unterminated string literal", start)
        line, column = self.position(start)
        self.tokens.extend(
            interpolate_string(segment.value, line=line, column=column, file=self.file)
        )
        self.consume(start, self.scanner.pos)
        return True

    def _lex_variable(self) -> bool:
        return self._lex_pattern(VARIABLE_RE, TokenType.VARIABLE, group=1)

    def _lex_regex(self) -> bool:
        if self.scanner.current_char() != "/" or not self._regex_allowed():
            return False
        return self._lex_pattern(REGEX_RE, TokenType.REGEX, group=1)

    def _regex_allowed(self) -> bool:
        for token in reversed(self.tokens):
            if token.is_formatting or token.is_comment:
                continue
            return token.type in REGEX_PREV_TOKENS
        return True

    def _lex_classref(self) -> bool:
        return self._lex_pattern(CLASSREF_RE, TokenType.CLASSREF)

    def _lex_number(self) -> bool:
        return self._lex_pattern(NUMBER_RE, TokenType.NUMBER)

    def _lex_name(self) -> bool:
        m = self.scanner.match(NAME_RE)
        if m is None:
            return False
        value = m.group(0)
        self.emit(KEYWORDS.get(value, TokenType.NAME), value, m.start(), m.end())
        return True

    def _lex_operator(self) -> bool:
        for literal, token_type in OPERATORS:
            if self.scanner.startswith(literal):
                start = self.scanner.pos
                self.emit(token_type, literal, start, start + len(literal))
                return True
        return False


def tokenise(
    code: str,
    file: Path | None = None,
    line: int = 1,
    column: int = 1,
) -> list[Token]:
    """
    Tokenise manifest source.

    Args:
        code: Source text
        file: Source file path, used only in error messages
        line: Line of the first character of ``code``
        column: Column of the first character of ``code``

    Returns:
        List of tokens

    Raises:
        LexError: On the first lexical error
    """
    return Lexer(code, file=file, line=line, column=column).tokenize()


tokenize = tokenise


def _find_interpolation_end(string: str, start: int) -> int | None:
    """Offset of the '}' closing a ${ whose body starts at ``start``."""
    depth = 1
    pos = start
    while pos < len(string):
        char = string[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "'":
            closing = Scanner(string, pos + 1)
            if not get_string_segment(closing, "'").found:
                return None
            pos = closing.pos
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    return None


def _tokenise_expression(
    expression: str,
    line: int,
    column: int,
    file: Path | None,
) -> list[Token]:
    """
    Tokenise the body of a ${...} interpolation.

    A body that starts with a bare variable name (``${foo}``, ``${::foo}``,
    ``${foo['key']}``) refers to that variable, so the name becomes a
    VARIABLE token rather than a NAME.
    """
    logger.debug("Tokenising interpolated expression %r at %d:%d", expression, line, column)
    m = VARIABLE_NAME_RE.match(expression)
    if m is None or m.group(0) in KEYWORDS or expression[m.end() :].lstrip().startswith("("):
        return Lexer(expression, file=file, line=line, column=column, nested=True).tokenize()

    name = m.group(0)
    tokens = [new_token(TokenType.VARIABLE, name, "", line, column)]
    rest_line, rest_column = advance_position(name, line, column)
    rest = Lexer(expression[m.end() :], file=file, line=rest_line, column=rest_column, nested=True)
    tokens.extend(rest.tokenize())
    return tokens


def interpolate_string(
    string: str,
    line: int = 1,
    column: int = 1,
    file: Path | None = None,
) -> list[Token]:
    """
    Split the body of a double quoted string into tokens.

    A body without interpolation becomes a single STRING token. Otherwise
    the literal runs become DQPRE, DQMID and DQPOST tokens around the
    interpolations: ``$name`` yields UNENC_VARIABLE and ``${expr}`` yields
    the tokens of ``expr``. A ``$`` starting neither form is literal text.

    Args:
        string: Raw text between the quotes, escapes untouched
        line: Line of the opening quote
        column: Column of the opening quote
        file: Source file path, used only in error messages

    Returns:
        List of tokens; the first starts at the opening quote

    Raises:
        UnterminatedStringError: If a ${ is never closed
        UnexpectedCharacterError: If ``string`` holds an unescaped '"'
    """
    scanner = Scanner(string + '"')
    tokens: list[Token] = []
    literal: list[str] = []
    literal_start: int | None = None  # None while still on the first fragment
    interpolated = False
    # Last located offset in ``string`` and its position; offsets passed to
    # locate() never decrease, so each character is measured once.
    located = (0, line, column + 1)

    def locate(offset: int) -> tuple[int, int]:
        nonlocal located
        start, at_line, at_column = located
        at_line, at_column = advance_position(string[start:offset], at_line, at_column)
        located = (offset, at_line, at_column)
        return at_line, at_column

    def fragment(token_type: TokenType) -> Token:
        value = unescape_double_quoted("".join(literal))
        if literal_start is None:
            return new_token(token_type, value, "", line, column)
        return new_token(token_type, value, "", *locate(literal_start))

    while True:
        segment = get_string_segment(scanner, '"$')
        if not segment.found:
            raise make_lex_error(
                UnterminatedStringError, "Unterminated string literal", line, column, file=file
            )
        literal.append(segment.value)

        if segment.terminator == '"':
            if not scanner.eos:
                quote_line, quote_column = locate(scanner.pos - 1)
                raise make_lex_error(
                    UnexpectedCharacterError,
                    "Unescaped '\"' in string body",
                    quote_line,
                    quote_column,
                    file=file,
                )
            tokens.append(fragment(TokenType.DQPOST if interpolated else TokenType.STRING))
            return tokens

        dollar = scanner.pos - 1
        if scanner.current_char() == "{":
            body_start = scanner.pos + 1
            end = _find_interpolation_end(string, body_start)
            if end is None:
                dollar_line, dollar_column = locate(dollar)
                raise make_lex_error(
                    UnterminatedStringError,
                    "Unterminated ${ interpolation",
                    dollar_line,
                    dollar_column,
                    file=file,
                )
            tokens.append(fragment(TokenType.DQMID if interpolated else TokenType.DQPRE))
            body_line, body_column = locate(body_start)
            tokens.extend(
                _tokenise_expression(string[body_start:end], body_line, body_column, file)
            )
            scanner.pos = end + 1
        else:
            name = scanner.scan(VARIABLE_NAME_RE)
            if name is None:
                literal.append("$")
                continue
            tokens.append(fragment(TokenType.DQMID if interpolated else TokenType.DQPRE))
            tokens.append(new_token(TokenType.UNENC_VARIABLE, name, "", *locate(dollar)))

        interpolated = True
        literal = []
        literal_start = scanner.pos
