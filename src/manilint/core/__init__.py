"""Core manilint functionality: tokens, segment scanner, lexer, errors, configuration."""

from .config import ManilintConfig, TokensConfig, find_config, load_config
from .errors import (
    ConfigError,
    ErrorContext,
    LexError,
    ManilintError,
    UnexpectedCharacterError,
    UnterminatedCommentError,
    UnterminatedStringError,
)
from .lexer import Lexer, interpolate_string, tokenise, tokenize
from .scanner import Scanner, Segment, get_string_segment
from .tokens import KEYWORDS, Token, TokenType, code_tokens, new_token
