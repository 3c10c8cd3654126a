"""Installed version of manilint."""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Return the installed distribution version, or 0.0.0 when running from a checkout."""
    try:
        return version("manilint")
    except PackageNotFoundError:
        return "0.0.0"
