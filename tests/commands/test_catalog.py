"""Tests for the catalog command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from basketctl.cli import cli


@pytest.mark.usefixtures("_isolated_workspace")
class TestCatalogLoad:
    def test_load(self, cli_runner: CliRunner, catalog_file: Path) -> None:
        result = cli_runner.invoke(cli, ["catalog", "load", str(catalog_file)])
        assert result.exit_code == 0
        assert "catalog_load" in result.output
        assert "products: 5" in result.output

    def test_load_json(self, cli_runner: CliRunner, catalog_file: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "catalog", "load", str(catalog_file)])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["data"]["discounts"] == 2

    def test_missing_file_rejected_by_click(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["catalog", "load", "nope.json"])
        assert result.exit_code == 2

    def test_invalid_json_exits_1(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{oops")
        result = cli_runner.invoke(cli, ["--json", "catalog", "load", str(bad)])
        assert result.exit_code == 1
        assert result.stdout == ""
        payload = json.loads(result.stderr)
        assert payload["error"]["code"] == "INVALID_CATALOG"
