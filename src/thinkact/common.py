"""Console helpers shared by the event printer, the API launcher and the terminal client."""

from enum import Enum
from typing import Any

from thinkact.config import settings

_RESET = "\033[0m"


class AnsiColors(Enum):
    """ANSI color codes, one per kind of console output."""

    RED = "\033[91m"  # errors, cancelled turns
    GREEN = "\033[92m"  # tool results, final answers
    YELLOW = "\033[33m"  # observations, agent messages
    BLUE = "\033[94m"  # actions, prompts
    MAGENTA = "\033[95m"  # thoughts


def styled(text: str, color: AnsiColors) -> str:
    """
    Wrap *text* in *color*, or return it unchanged when ``COLOR_OUTPUT`` is off.

    Args:
        text: The text to color
        color: The color to use (AnsiColors enum)
    """
    if not settings.COLOR_OUTPUT:
        return text
    return f"{color.value}{text}{_RESET}"


def colored_print(text: str, color: AnsiColors, *args: Any, **kwargs: Any) -> None:
    """Print *text* through :func:`styled`; extra arguments are passed on to ``print``."""
    print(styled(text, color), *args, **kwargs)
