from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Protocol

from .audit import write_audit_event
from .config import PollenConfig
from .console import info, success, warn
from .errors import ToolFailed, ToolNotFound
from .prompting import Prompter


class VerificationTool(Protocol):
    def remove_verification(self, device: str, partition: int) -> int: ...


class MakeDevSsdTool:
    def __init__(self, path: Path) -> None:
        self.path = path

    def remove_verification(self, device: str, partition: int) -> int:
        cmd = [str(self.path), "-i", device, "--remove_rootfs_verification", "--partitions", str(partition)]
        return subprocess.run(cmd, check=False).returncode


def tool_available(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def disable_verification(config: PollenConfig, prompter: Prompter, *, tool: VerificationTool | None = None) -> bool:
    warn("WARNING: This will disable RootFS verification on your device.")
    warn("Disabling RootFS can cause your Chromebook to soft-brick if you re-enter verified mode.")
    warn("It is HIGHLY recommended NOT to do this unless you know EXACTLY what you are doing.")
    if not tool_available(config.vboot_tool):
        raise ToolNotFound(
            f"vboot tool not found at '{config.vboot_tool}'. Are you on ChromeOS with developer tools installed?"
        )

    if not prompter.confirm("Are you absolutely sure you want to continue?"):
        info("Operation cancelled.")
        return False

    if tool is None:
        tool = MakeDevSsdTool(config.vboot_tool)

    info("Disabling RootFS...")
    for partition in config.partitions:
        rc = tool.remove_verification(config.device, partition)
        write_audit_event(
            config.audit_log,
            "vboot.remove_verification",
            device=config.device,
            partition=partition,
            returncode=rc,
            status="ok" if rc == 0 else "failed",
        )
        if rc != 0:
            raise ToolFailed(partition, rc)

    success("RootFS verification has been disabled.")
    return True
