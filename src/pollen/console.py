from __future__ import annotations

import os
import sys
from typing import TextIO


_COLORS = {
    "bold": "\033[1m",
    "red": "\033[31m",
    "yellow": "\033[33m",
    "green": "\033[32m",
    "blue": "\033[34m",
    "reset": "\033[0m",
}
_active: dict[str, str] = {name: "" for name in _COLORS}

BANNER = """\
+##############################################+
| Welcome to Pollen!                           |
| The User Policy Editor                       |
+##############################################+
"""


def setup_colors(enabled: bool = True, stream: TextIO | None = None) -> None:
    stream = stream if stream is not None else sys.stdout
    use = enabled and stream.isatty() and os.environ.get("TERM", "") != "dumb"
    for name, code in _COLORS.items():
        _active[name] = code if use else ""


def _line(tag: str, color: str, msg: str) -> str:
    return f"{_active[color]}[{tag}]{_active['reset']} {msg}"


def info(msg: str) -> None:
    print(_line("i", "blue", msg))


def warn(msg: str) -> None:
    print(_line("!", "yellow", msg))


def success(msg: str) -> None:
    print(_line("✓", "green", msg))


def error(msg: str) -> None:
    print(_line("✗", "red", msg), file=sys.stderr)


def banner() -> None:
    print(BANNER)
