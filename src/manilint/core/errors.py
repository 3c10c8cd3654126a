"""
Error types for manilint lexing and configuration.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ManilintError(Exception):
    """Base exception for all manilint errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class LexError(ManilintError):
    """
    Raised when manifest source cannot be split into tokens.

    The whole tokenising pass is aborted; no partial token stream is returned.
    """

    @property
    def line(self) -> int | None:
        return self.context.line if self.context else None

    @property
    def column(self) -> int | None:
        return self.context.column if self.context else None


class UnterminatedStringError(LexError):
    """
    Raised when a quoted string has no closing quote.

    Examples:
    - 'foo
    - "foo\\"
    - "${foo"
    """

    pass


class UnterminatedCommentError(LexError):
    """Raised when a /* comment has no matching */ before end of input."""

    pass


class UnexpectedCharacterError(LexError):
    """Raised when no token rule matches at the current position."""

    pass


class ConfigError(ManilintError):
    """
    Raised when manilint.toml cannot be loaded.

    Examples:
    - Invalid TOML syntax
    - Unknown output format
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file, if the text came from one
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source lines around the error location
    """

    file: Path | None
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "site.pp:10:5"
        """
        location = f"{self.file or '<string>'}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        # Snippet starts up to 2 lines before the error line
        start_line = max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


def extract_snippet(text: str, line: int) -> str:
    """Return up to 2 lines either side of ``line`` from ``text``."""
    lines = text.split("\n")
    start = max(1, line - 2)
    return "\n".join(lines[start - 1 : line + 2])


def make_lex_error(
    error_cls: type[LexError],
    message: str,
    line: int,
    column: int,
    file: Path | None = None,
    source: str | None = None,
) -> LexError:
    """
    Helper to create a LexError with context.

    Args:
        error_cls: LexError subclass to instantiate
        message: Error description
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        file: Optional source file path
        source: Optional full source text, used to build a snippet

    Returns:
        Error of type ``error_cls`` with context attached
    """
    snippet = extract_snippet(source, line) if source is not None else None
    context = ErrorContext(file=file, line=line, column=column, snippet=snippet)
    return error_cls(message, context)
