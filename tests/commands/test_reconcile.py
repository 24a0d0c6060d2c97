"""Tests for the reconcile and checkout commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from basketctl.cli import cli


def _restock(workspace: Path, cli_runner: CliRunner, **stock: int) -> None:
    """Reload the catalog with new stock counts for the given products."""
    catalog = json.loads((workspace / "catalog.json").read_text())
    for row in catalog["products"]:
        if row["id"] in stock:
            row["qty"] = stock[row["id"]]
    path = workspace / "restock.json"
    path.write_text(json.dumps(catalog))
    result = cli_runner.invoke(cli, ["catalog", "load", str(path)])
    assert result.exit_code == 0, result.output


class TestReconcileCommand:
    def test_nothing_to_do(self, cli_runner: CliRunner, loaded_workspace: Path) -> None:
        cli_runner.invoke(cli, ["cart", "add", "bread"])
        result = cli_runner.invoke(cli, ["reconcile"])
        assert result.exit_code == 0
        assert "checked: 1" in result.output
        assert "corrections: 0" in result.output

    def test_corrections_listed(self, cli_runner: CliRunner, loaded_workspace: Path) -> None:
        cli_runner.invoke(cli, ["cart", "add", "bread", "--qty", "5"])
        cli_runner.invoke(cli, ["cart", "add", "apples", "--qty", "2"])
        _restock(loaded_workspace, cli_runner, bread=2, apples=0)
        result = cli_runner.invoke(cli, ["--sync", "reconcile"])
        assert result.exit_code == 0
        assert "clamp bread: 5.0 -> 2.0" in result.output
        assert "remove apples: 2.0" in result.output
        assert "WARNING: Out of stock: removed from cart" in result.stderr

    def test_json(self, cli_runner: CliRunner, loaded_workspace: Path) -> None:
        cli_runner.invoke(cli, ["cart", "add", "bread", "--qty", "5"])
        _restock(loaded_workspace, cli_runner, bread=0)
        result = cli_runner.invoke(cli, ["--json", "reconcile"])
        data = json.loads(result.stdout)
        assert data["data"]["corrections"][0]["action"] == "remove"
        assert data["data"]["items"] == []


class TestCheckoutCommand:
    def test_empty_cart_fails(self, cli_runner: CliRunner, loaded_workspace: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "checkout"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "EMPTY_CART"

    def test_order_payload(self, cli_runner: CliRunner, loaded_workspace: Path) -> None:
        cli_runner.invoke(cli, ["cart", "add", "apples", "--qty", "6"])
        cli_runner.invoke(cli, ["cart", "add", "bread"])
        result = cli_runner.invoke(cli, ["--json", "checkout"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert [i["product_id"] for i in data["items"]] == ["apples", "bread"]
        assert data["subtotal"] == 20.0

    def test_text_output(self, cli_runner: CliRunner, loaded_workspace: Path) -> None:
        cli_runner.invoke(cli, ["cart", "add", "apples", "--qty", "6"])
        result = cli_runner.invoke(cli, ["checkout"])
        assert result.exit_code == 0
        assert "checkout" in result.output
        assert "$12.00" in result.output

    @pytest.mark.parametrize(
        ("flag", "expected_qty"), [("--reconcile", 2.0), ("--no-reconcile", 5.0)]
    )
    def test_reconcile_flag(
        self,
        cli_runner: CliRunner,
        loaded_workspace: Path,
        flag: str,
        expected_qty: float,
    ) -> None:
        cli_runner.invoke(cli, ["cart", "add", "bread", "--qty", "5"])
        _restock(loaded_workspace, cli_runner, bread=2)
        result = cli_runner.invoke(cli, ["--json", "checkout", flag])
        assert json.loads(result.stdout)["data"]["items"][0]["qty"] == expected_qty
