"""InitService — create a storefront workspace.

Runs before any :class:`Storefront` exists, so it is a static entry point
rather than a :class:`BaseService` subclass.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from basketctl.config.discovery import CONFIG_FILENAME
from basketctl.infrastructure.database.engine import (
    CATALOG_DB_NAME,
    LOCAL_DB_NAME,
    init_backend_database,
    init_local_database,
)
from basketctl.services.result import ServiceResult

logger = logging.getLogger(__name__)

STATE_DIR_NAME = ".basketctl"


def render_config(name: str, currency_symbol: str) -> str:
    """Sparse ``basketctl.toml``: only values that differ from the defaults.

    Strings are written as JSON literals, which are valid TOML basic strings.
    """
    return (
        "# basketctl workspace configuration. Unlisted keys use built-in defaults.\n"
        "\n"
        "[store]\n"
        f"name = {json.dumps(name)}\n"
        f"currency_symbol = {json.dumps(currency_symbol)}\n"
        "\n"
        "[stock]\n"
        "# ttl_seconds = 30\n"
        "# fail_safe_qty = 0\n"
    )


class InitService:
    """Workspace initialization."""

    @staticmethod
    def init_workspace(
        path: Path,
        *,
        name: str | None = None,
        currency_symbol: str = "$",
    ) -> ServiceResult:
        """Create ``basketctl.toml`` (if missing) and the local databases.

        Idempotent: an existing config file is left untouched.
        """
        op = "init"
        path.mkdir(parents=True, exist_ok=True)
        config_path = path / CONFIG_FILENAME
        state_dir = path / STATE_DIR_NAME

        created_config = not config_path.exists()
        if created_config:
            config_path.write_text(
                render_config(name or path.name, currency_symbol), encoding="utf-8"
            )

        for engine in (init_local_database(state_dir), init_backend_database(state_dir)):
            engine.dispose()
        logger.info("Initialized workspace at %s", path)

        warnings = [] if created_config else [f"Kept existing {CONFIG_FILENAME}"]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "root": str(path),
                "config_path": str(config_path),
                "created_config": created_config,
                "local_db": str(state_dir / LOCAL_DB_NAME),
                "catalog_db": str(state_dir / CATALOG_DB_NAME),
            },
            warnings=warnings,
        )
