"""Rich Console factory and theme for basketctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments (tests,
pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

BASKET_THEME = Theme(
    {
        "basket.ok": "bold green",
        "basket.error": "bold red",
        "basket.warning": "bold yellow",
        "basket.op": "bold cyan",
        "basket.key": "dim",
        "basket.id": "bold blue",
        "basket.money": "bold",
        "basket.saving": "green",
        "basket.struck": "dim strike",
    }
)

_ACTION_STYLES: dict[str, str] = {
    "remove": "basket.error",
    "clamp": "basket.warning",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=BASKET_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_action(action: str) -> str:
    """Rich style name for a stock correction action."""
    return _ACTION_STYLES.get(action, "")
