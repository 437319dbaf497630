import subprocess
from pathlib import Path

import pytest

from pollen import mounting
from pollen.errors import MountFailed
from pollen.mounting import SystemMounter


def test_bind_command_line(monkeypatch) -> None:
    seen: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        seen.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(mounting.subprocess, "run", fake_run)
    SystemMounter().bind(Path("/tmp/pollen-overlay/etc"), Path("/etc"))

    assert seen == [["mount", "--bind", "/tmp/pollen-overlay/etc", "/etc"]]


def test_bind_nonzero_exit(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 32, "", "mount: /etc: permission denied.")

    monkeypatch.setattr(mounting.subprocess, "run", fake_run)
    with pytest.raises(MountFailed, match="permission denied"):
        SystemMounter().bind(Path("/tmp/pollen-overlay/etc"), Path("/etc"))


def test_bind_missing_binary(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(mounting.subprocess, "run", fake_run)
    with pytest.raises(MountFailed, match="required binary not found"):
        SystemMounter().bind(Path("/tmp/pollen-overlay/etc"), Path("/etc"))
