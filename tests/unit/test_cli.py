"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from manilint.cli import app


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


def test_version(cli_runner: CliRunner):
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "manilint version" in result.output


def test_tokens_text_output(cli_runner: CliRunner, tmp_path: Path):
    path = tmp_path / "init.pp"
    path.write_text("class foo {}\n")
    result = cli_runner.invoke(app, ["tokens", str(path)])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "1:1\tCLASS\t'class'"
    assert "1:6\tWHITESPACE\t' '" in lines
    assert "1:7\tNAME\t'foo'" in lines


def test_tokens_without_trivia(cli_runner: CliRunner, tmp_path: Path):
    path = tmp_path / "init.pp"
    path.write_text("class foo { } # done\n")
    result = cli_runner.invoke(app, ["tokens", "--no-trivia", str(path)])
    assert result.exit_code == 0
    kinds = [line.split("\t")[1] for line in result.output.splitlines()]
    assert kinds == ["CLASS", "NAME", "LBRACE", "RBRACE"]


def test_tokens_json_output(cli_runner: CliRunner, manifest_file: Path):
    result = cli_runner.invoke(app, ["tokens", "--format", "json", str(manifest_file)])
    assert result.exit_code == 0
    tokens = json.loads(result.output)
    assert tokens[0] == {"type": "COMMENT", "value": "Web server role", "line": 1, "column": 1}
    assert {"type": "CLASS", "value": "class", "line": 2, "column": 1} in tokens


def test_tokens_format_from_config(cli_runner: CliRunner, tmp_path: Path):
    (tmp_path / "manilint.toml").write_text('[tokens]\nformat = "json"\nshow_trivia = false\n')
    path = tmp_path / "init.pp"
    path.write_text("include foo\n")
    result = cli_runner.invoke(app, ["tokens", str(path)])
    assert result.exit_code == 0
    assert [t["value"] for t in json.loads(result.output)] == ["include", "foo"]


def test_tokens_unknown_format(cli_runner: CliRunner, tmp_path: Path):
    path = tmp_path / "init.pp"
    path.write_text("foo\n")
    result = cli_runner.invoke(app, ["tokens", "--format", "xml", str(path)])
    assert result.exit_code == 2


def test_tokens_lex_error(cli_runner: CliRunner, tmp_path: Path):
    path = tmp_path / "broken.pp"
    path.write_text("$x = 'unterminated\n")
    result = cli_runner.invoke(app, ["tokens", str(path)])
    assert result.exit_code == 1
    assert "Unterminated string literal" in result.output
    assert "broken.pp:1:6" in result.output


def test_tokens_bad_config(cli_runner: CliRunner, tmp_path: Path):
    config = tmp_path / "custom.toml"
    config.write_text("[tokens]\nformat = 1\n")
    path = tmp_path / "init.pp"
    path.write_text("foo\n")
    result = cli_runner.invoke(app, ["tokens", "--config", str(config), str(path)])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_tokens_missing_file(cli_runner: CliRunner, tmp_path: Path):
    result = cli_runner.invoke(app, ["tokens", str(tmp_path / "missing.pp")])
    assert result.exit_code != 0


def test_tokens_undecodable_file(cli_runner: CliRunner, tmp_path: Path):
    path = tmp_path / "latin1.pp"
    path.write_bytes(b"$x = '\xff\xfe'\n")
    result = cli_runner.invoke(app, ["tokens", str(path)])
    assert result.exit_code == 1
    assert "cannot decode" in result.output
    assert not isinstance(result.exception, UnicodeDecodeError)


def test_tokens_encoding_from_config(cli_runner: CliRunner, tmp_path: Path):
    (tmp_path / "manilint.toml").write_text('[tokens]\nencoding = "latin-1"\n')
    path = tmp_path / "latin1.pp"
    path.write_bytes(b"$x = '\xe9'\n")
    result = cli_runner.invoke(app, ["tokens", "--no-trivia", str(path)])
    assert result.exit_code == 0
    assert "1:6\tSSTRING\t'\xe9'" in result.output.splitlines()


def test_tokens_unknown_encoding_in_config(cli_runner: CliRunner, tmp_path: Path):
    (tmp_path / "manilint.toml").write_text('[tokens]\nencoding = "nope"\n')
    path = tmp_path / "init.pp"
    path.write_text("foo\n")
    result = cli_runner.invoke(app, ["tokens", str(path)])
    assert result.exit_code == 1
    assert "Unknown encoding 'nope'" in result.output
    assert not isinstance(result.exception, LookupError)
