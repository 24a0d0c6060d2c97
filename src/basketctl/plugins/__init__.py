"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins in ``.basketctl/plugins/``.
INVARIANT: Plugin failures are warnings, never errors.
"""

from basketctl.plugins.event_bus import EventBus
from basketctl.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
