"""Config file discovery and loading.

Walk-up finder locates basketctl.toml, similar to how git finds .git/.
Supports BASKETCTL_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from basketctl.config.models import BasketConfig

CONFIG_FILENAME = "basketctl.toml"
CONFIG_ENV_VAR = "BASKETCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for basketctl.toml.

    Returns the path to the config file, or None if not found.
    Checks BASKETCTL_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> BasketConfig:
    """Load and validate config from a TOML file.

    Returns default BasketConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return BasketConfig()

    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    return BasketConfig.model_validate(data)
