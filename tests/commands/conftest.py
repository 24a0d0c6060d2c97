"""Command-test fixtures: a workspace with the sample catalog loaded."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from basketctl.cli import cli


@pytest.fixture
def loaded_workspace(
    cli_runner: CliRunner, catalog_file: Path, _isolated_workspace: None
) -> Path:
    """CWD workspace with ``catalog.json`` loaded into the catalog backend."""
    result = cli_runner.invoke(cli, ["--sync", "catalog", "load", str(catalog_file)])
    assert result.exit_code == 0, result.output
    return catalog_file.parent
