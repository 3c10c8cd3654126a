"""
manilint.toml configuration.

Example::

    [tokens]
    format = "json"
    show_trivia = false
"""

import codecs
import logging
import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "manilint.toml"


class TokensConfig(BaseModel):
    """Settings for the token dump command."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    encoding: str = "utf-8"
    format: Literal["text", "json"] = "text"
    show_trivia: bool = True  # include whitespace, newline and comment tokens

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Validate that the encoding is known to the codec registry."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding '{v}'") from e
        return v


class ManilintConfig(BaseModel):
    """Root of manilint.toml."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tokens: TokensConfig = Field(default_factory=TokensConfig)


def find_config(start: Path) -> Path | None:
    """Look for manilint.toml in ``start`` and its parents."""
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None) -> ManilintConfig:
    """
    Load configuration from ``path``.

    Args:
        path: Path to a manilint.toml, or None

    Returns:
        Parsed configuration; defaults when ``path`` is None or missing

    Raises:
        ConfigError: If the file is not valid TOML or has invalid values
    """
    if path is None or not path.exists():
        return ManilintConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    try:
        config = ManilintConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.debug("Loaded configuration from %s", path)
    return config
