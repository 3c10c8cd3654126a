"""Shared pytest fixtures for manilint tests."""

from pathlib import Path

import pytest

SAMPLE_MANIFEST = """\
# Web server role
class web::server (
  $port = 80,
) inherits web::params {
  package { 'nginx':
    ensure => installed,
  }

  file { "/etc/nginx/sites/${name}.conf":
    ensure  => file,
    content => "listen $port;\\n",
    require => Package['nginx'],
  }

  Package['nginx'] -> Service['nginx']
}
"""


@pytest.fixture
def sample_manifest() -> str:
    """Return a small but realistic manifest."""
    return SAMPLE_MANIFEST


@pytest.fixture
def manifest_file(tmp_path: Path, sample_manifest: str) -> Path:
    """Write the sample manifest to a temporary file."""
    path = tmp_path / "init.pp"
    path.write_text(sample_manifest, encoding="utf-8")
    return path
