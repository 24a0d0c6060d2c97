"""Parametrized help tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from basketctl.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    ([], ["cart", "catalog", "checkout", "init", "quote", "reconcile"]),
    (["--help"], ["--json", "--quiet", "--sync", "--config"]),
    # -- cart group --
    (["cart", "--help"], ["show", "add", "set", "inc", "dec", "remove", "clear"]),
    (["cart", "add", "--help"], ["PRODUCT_ID", "--qty", "--variant"]),
    (["cart", "set", "--help"], ["PRODUCT_ID", "QTY"]),
    (["cart", "inc", "--help"], ["--variant"]),
    (["cart", "dec", "--help"], ["--variant"]),
    (["cart", "remove", "--help"], ["PRODUCT_ID"]),
    (["cart", "clear", "--help"], []),
    # -- catalog group --
    (["catalog", "--help"], ["load"]),
    (["catalog", "load", "--help"], ["FILE"]),
    # -- standalone commands --
    (["init", "--help"], ["--name", "--currency"]),
    (["quote", "--help"], ["PRODUCT_ID", "--qty"]),
    (["reconcile", "--help"], ["out-of-stock"]),
    (["checkout", "--help"], ["--reconcile", "--no-reconcile"]),
]


def _help_id(args_keywords: tuple[list[str], list[str]]) -> str:
    args, _ = args_keywords
    return "_".join(a for a in args if a != "--help") or "root"


@pytest.mark.parametrize(
    "args,expected_keywords",
    HELP_COMMANDS,
    ids=[_help_id(item) for item in HELP_COMMANDS],
)
@pytest.mark.usefixtures("_isolated_workspace")
def test_command_help(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in help output for {args}"


@pytest.mark.usefixtures("_isolated_workspace")
def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "basketctl" in result.output
