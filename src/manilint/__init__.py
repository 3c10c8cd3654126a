"""
manilint - style checker for configuration manifests.

This package holds the lexical front end: it turns manifest source into a
stream of positioned tokens for the checks to walk.
"""

from __future__ import annotations

from ._version import get_version

# Re-export commonly used types for convenience
from .core.errors import LexError, ManilintError
from .core.lexer import interpolate_string, tokenise
from .core.scanner import get_string_segment
from .core.tokens import Token, TokenType, new_token

__version__ = get_version()

__all__ = [
    "__version__",
    "LexError",
    "ManilintError",
    "Token",
    "TokenType",
    "get_string_segment",
    "interpolate_string",
    "new_token",
    "tokenise",
]
