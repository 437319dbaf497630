from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


DEFAULT_POLICY_FILE = Path("Policies.json")
DEFAULT_REPO_URL = "https://stanthecheeseman.github.io/t/Policies.json"
DEFAULT_OVERLAY_DIR = Path("/tmp/pollen-overlay")
DEFAULT_VBOOT_TOOL = Path("/usr/share/vboot/bin/make_dev_ssd.sh")
DEFAULT_DEVICE = "/dev/mmcblk0"

# Where Chrome looks for administrator-supplied policy, relative to /etc.
POLICY_SUBDIR = Path("opt/chrome/policies/managed")
POLICY_NAME = "policy.json"

# Kernel and root filesystem partitions the vboot tool rewrites.
ROOTFS_PARTITIONS = (2, 4)


@dataclass(frozen=True)
class PollenConfig:
    policy_file: Path = DEFAULT_POLICY_FILE
    repo_url: str = DEFAULT_REPO_URL
    overlay_dir: Path = DEFAULT_OVERLAY_DIR
    etc_dir: Path = Path("/etc")
    vboot_tool: Path = DEFAULT_VBOOT_TOOL
    device: str = DEFAULT_DEVICE
    partitions: tuple[int, ...] = ROOTFS_PARTITIONS
    fallback_dir: Path = Path("/tmp")
    assume_yes: bool = False
    update: bool = False
    verbose: bool = False
    color: bool = True
    audit_log: Path | None = None

    @property
    def overlay_etc(self) -> Path:
        return self.overlay_dir / "etc"

    @property
    def overlay_policy_path(self) -> Path:
        return self.overlay_etc / POLICY_SUBDIR / POLICY_NAME

    @property
    def policy_dest_dir(self) -> Path:
        return self.etc_dir / POLICY_SUBDIR
