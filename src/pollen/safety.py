from __future__ import annotations

import os
from pathlib import Path
from typing import TextIO

from .errors import PrivilegeError


def require_root() -> None:
    if os.geteuid() != 0:
        raise PrivilegeError("Please run as root (e.g., 'sudo -i' then run it, or 'sudo pollen').")


def is_interactive(stdin: TextIO, stdout: TextIO) -> bool:
    return stdin.isatty() and stdout.isatty()


def probe_writable(directory: Path) -> None:
    # Raises the underlying OSError so callers can tell EROFS apart from EACCES.
    probe = directory / f".pollen_write_test.{os.getpid()}"
    probe.touch()
    probe.unlink()
