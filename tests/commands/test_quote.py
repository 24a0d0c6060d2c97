"""Tests for the quote command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from basketctl.cli import cli


@pytest.mark.usefixtures("loaded_workspace")
class TestQuoteCommand:
    def test_weight_snapped(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["quote", "apples", "--qty", "4.7"])
        assert result.exit_code == 0
        assert "qty: 4.5 kg" in result.output
        assert "unit_price: $3.00" in result.output
        assert "line_total: $13.50" in result.output
        assert "5 kg+" in result.output

    def test_bulk_tier(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "quote", "apples", "--qty", "6"])
        data = json.loads(result.stdout)["data"]
        assert data["unit_price"] == 2.0
        assert data["line_total"] == 12.0

    def test_discount_saving(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["quote", "bread"])
        assert "saving: $2.00 (-20%)" in result.output

    def test_not_found(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["quote", "ghost"])
        assert result.exit_code == 1
        assert "ERROR" in result.stderr
