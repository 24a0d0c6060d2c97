"""Tests for BasketSettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from basketctl.config.settings import BasketSettings


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = BasketSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.state_dir == tmp_path / ".basketctl"
        assert settings.json_output is False
        assert settings.sync is False
        assert settings.stock.ttl_seconds == 30.0
        assert settings.cart.storage_key == "basket_cart"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = BasketSettings.from_cli(root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "basketctl.toml").write_text(
            '[store]\nname = "corner"\ncurrency_symbol = "EUR "\n[stock]\nfail_safe_qty = 1\n'
        )
        settings = BasketSettings.from_cli(root=tmp_path)
        assert settings.store.name == "corner"
        assert settings.store.currency_symbol == "EUR "
        assert settings.stock.fail_safe_qty == 1
        assert settings.stock.ttl_seconds == 30.0

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "shop.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[cart]\nstorage_key = "other_cart"\n')
        settings = BasketSettings.from_cli(config_path=str(custom), root=tmp_path)
        assert settings.cart.storage_key == "other_cart"
        assert settings.config_path == custom

    def test_root_from_toml_location(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "basketctl.toml").write_text("")
        deep = tmp_path / "sub" / "deep"
        deep.mkdir(parents=True)
        monkeypatch.chdir(deep)
        settings = BasketSettings.from_cli()
        assert settings.root == tmp_path

    def test_invalid_toml_raises_click_exception(self, tmp_path: Path) -> None:
        (tmp_path / "basketctl.toml").write_text("[store\nname = ")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            BasketSettings.from_cli(root=tmp_path)


class TestPriority:
    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = BasketSettings.from_cli(root=tmp_path, json_output=True, verbose=True)
        assert settings.json_output is True
        assert settings.verbose is True

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BASKETCTL_QUIET", "true")
        settings = BasketSettings.from_cli(root=tmp_path)
        assert settings.quiet is True

    def test_nested_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "basketctl.toml").write_text("[stock]\nttl_seconds = 10\n")
        monkeypatch.setenv("BASKETCTL_STOCK__TTL_SECONDS", "5")
        settings = BasketSettings.from_cli(root=tmp_path)
        assert settings.stock.ttl_seconds == 5.0
