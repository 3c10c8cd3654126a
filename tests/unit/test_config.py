"""Tests for manilint.toml loading."""

from pathlib import Path

import pytest

from manilint.core.config import (
    CONFIG_FILENAME,
    ManilintConfig,
    TokensConfig,
    find_config,
    load_config,
)
from manilint.core.errors import ConfigError


def test_defaults_without_path():
    config = load_config(None)
    assert config == ManilintConfig()
    assert config.tokens.encoding == "utf-8"
    assert config.tokens.format == "text"
    assert config.tokens.show_trivia is True


def test_defaults_for_missing_file(tmp_path: Path):
    assert load_config(tmp_path / CONFIG_FILENAME) == ManilintConfig()


def test_load_tokens_section(tmp_path: Path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text('[tokens]\nformat = "json"\nshow_trivia = false\n')
    config = load_config(path)
    assert config.tokens == TokensConfig(format="json", show_trivia=False)


def test_unknown_tables_are_ignored(tmp_path: Path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text('[checks]\ndisable = ["80chars"]\n')
    assert load_config(path) == ManilintConfig()


def test_invalid_format_raises(tmp_path: Path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text('[tokens]\nformat = "xml"\n')
    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config(path)


def test_unknown_encoding_raises(tmp_path: Path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text('[tokens]\nencoding = "nope"\n')
    with pytest.raises(ConfigError, match="Unknown encoding 'nope'"):
        load_config(path)


def test_encoding_aliases_are_accepted(tmp_path: Path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text('[tokens]\nencoding = "latin-1"\n')
    assert load_config(path).tokens.encoding == "latin-1"


def test_unknown_tokens_key_raises(tmp_path: Path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text("[tokens]\ncolour = true\n")
    with pytest.raises(ConfigError):
        load_config(path)


def test_invalid_toml_raises(tmp_path: Path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text("[tokens\n")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(path)


def test_config_is_frozen():
    config = ManilintConfig()
    with pytest.raises(Exception):
        config.tokens = TokensConfig(format="json")  # type: ignore[misc]


def test_find_config_walks_up(tmp_path: Path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text("")
    nested = tmp_path / "modules" / "web" / "manifests"
    nested.mkdir(parents=True)
    assert find_config(nested) == path.resolve()


def test_find_config_returns_none(tmp_path: Path):
    nested = tmp_path / "a"
    nested.mkdir()
    assert find_config(nested) is None
