from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Protocol

from .errors import MountFailed


class Mounter(Protocol):
    def bind(self, source: Path, target: Path) -> None: ...


class SystemMounter:
    def __init__(self, binary: str = "mount") -> None:
        self.binary = binary

    def bind(self, source: Path, target: Path) -> None:
        cmd = [self.binary, "--bind", str(source), str(target)]
        try:
            cp = subprocess.run(cmd, check=False, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise MountFailed(f"required binary not found: {self.binary}") from exc
        if cp.returncode != 0:
            err = (cp.stderr or "").strip()
            raise MountFailed(f"Failed to bind-mount overlay onto {target}: {err or f'exit={cp.returncode}'}")


def is_mountpoint(path: Path) -> bool:
    cp = subprocess.run(["findmnt", "-n", "--mountpoint", str(path)], check=False, capture_output=True, text=True)
    return cp.returncode == 0 and bool(cp.stdout.strip())
