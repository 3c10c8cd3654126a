"""
manilint CLI.

Developer commands for inspecting how manifests are tokenised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from manilint._version import get_version
from manilint.core.config import find_config, load_config
from manilint.core.errors import ConfigError, LexError
from manilint.core.lexer import tokenise
from manilint.core.tokens import Token, code_tokens

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="manilint - style checker for configuration manifests",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        typer.echo(f"manilint version {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """manilint CLI main callback for global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def format_token(token: Token) -> str:
    return f"{token.line}:{token.column}\t{token.type.value}\t{token.value!r}"


def token_to_dict(token: Token) -> dict[str, str | int]:
    return {
        "type": token.type.value,
        "value": token.value,
        "line": token.line,
        "column": token.column,
    }


@app.command("tokens")
def tokens_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Manifest to tokenise"),
    output_format: str | None = typer.Option(
        None, "--format", "-f", help="Output format: text or json (default from config)"
    ),
    no_trivia: bool = typer.Option(
        False, "--no-trivia", help="Hide whitespace, newline and comment tokens"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Path to manilint.toml (default: search upwards)"
    ),
) -> None:
    """Print the token stream of a manifest."""
    try:
        config = load_config(config_path or find_config(path.parent))
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    fmt = output_format or config.tokens.format
    if fmt not in ("text", "json"):
        typer.echo(f"Unknown format: {fmt}", err=True)
        raise typer.Exit(code=2)

    try:
        source = path.read_text(encoding=config.tokens.encoding)
    except (UnicodeDecodeError, LookupError) as e:
        logger.debug("Reading %s failed", path, exc_info=True)
        typer.echo(f"Error: cannot decode {path} as {config.tokens.encoding}: {e}", err=True)
        raise typer.Exit(code=1) from e

    try:
        tokens = tokenise(source, file=path)
    except LexError as e:
        logger.debug("Tokenising %s failed", path, exc_info=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    if no_trivia or not config.tokens.show_trivia:
        tokens = code_tokens(tokens)

    if fmt == "json":
        typer.echo(json.dumps([token_to_dict(t) for t in tokens], indent=2))
    else:
        for token in tokens:
            typer.echo(format_token(token))


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
