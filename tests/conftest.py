from __future__ import annotations

from pathlib import Path

import pytest

from pollen.config import PollenConfig
from pollen.errors import FetchFailed


POLICY_BYTES = b'{"DeveloperToolsAvailability": 1, "IncognitoModeAvailability": 0}\n'


class FakeFetcher:
    def __init__(self, payload: bytes = POLICY_BYTES, fail: bool = False) -> None:
        self.payload = payload
        self.fail = fail
        self.calls: list[tuple[str, Path]] = []

    def fetch(self, url: str, dest: Path) -> None:
        self.calls.append((url, dest))
        if self.fail:
            # Simulate a transfer that died half way through.
            dest.write_bytes(self.payload[:5])
            raise FetchFailed("Could not resolve host")
        dest.write_bytes(self.payload)


class RecordingMounter:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[Path, Path]] = []

    def bind(self, source: Path, target: Path) -> None:
        self.calls.append((source, target))
        if self.error is not None:
            raise self.error


class FakeVerificationTool:
    def __init__(self, returncodes: dict[int, int] | None = None) -> None:
        self.returncodes = returncodes or {}
        self.calls: list[tuple[str, int]] = []

    def remove_verification(self, device: str, partition: int) -> int:
        self.calls.append((device, partition))
        return self.returncodes.get(partition, 0)


@pytest.fixture
def config(tmp_path: Path) -> PollenConfig:
    etc = tmp_path / "etc"
    etc.mkdir()
    (etc / "hostname").write_text("chromebook\n", encoding="utf-8")

    tool = tmp_path / "make_dev_ssd.sh"
    tool.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    tool.chmod(0o755)

    return PollenConfig(
        policy_file=tmp_path / "work" / "Policies.json",
        repo_url="https://policies.example.invalid/Policies.json",
        overlay_dir=tmp_path / "overlay",
        etc_dir=etc,
        vboot_tool=tool,
        device="/dev/mmcblk0",
        fallback_dir=tmp_path / "fallback",
    )


@pytest.fixture
def policy(config: PollenConfig) -> Path:
    config.policy_file.parent.mkdir(parents=True, exist_ok=True)
    config.policy_file.write_bytes(POLICY_BYTES)
    return config.policy_file


@pytest.fixture
def unwritable_audit(tmp_path: Path) -> Path:
    # A regular file where the log's directory should be.
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    return blocker / "audit.jsonl"
