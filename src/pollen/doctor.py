from __future__ import annotations

import os
import platform
import shutil
from dataclasses import dataclass

from .config import PollenConfig
from .mounting import is_mountpoint
from .vboot import tool_available


@dataclass
class Check:
    name: str
    ok: bool
    detail: str
    fix: str = ""


def _bin(name: str, fix: str = "") -> Check:
    path = shutil.which(name)
    return Check(
        name=f"bin:{name}",
        ok=path is not None,
        detail=path or "missing",
        fix=fix,
    )


def run_doctor(config: PollenConfig) -> list[Check]:
    checks: list[Check] = []

    checks.append(Check("platform", True, f"{platform.system()} {platform.release()} ({platform.machine()})"))
    euid = os.geteuid()
    checks.append(Check("root", euid == 0, f"euid={euid}", "re-run with sudo"))

    # Overlay + bind mount
    checks.append(_bin("mount", "sudo apt install -y mount"))
    checks.append(_bin("findmnt", "sudo apt install -y util-linux"))

    # Policy download; either one is enough
    curl = _bin("curl", "install curl or wget")
    wget = _bin("wget", "install curl or wget")
    checks.extend([curl, wget])
    checks.append(Check("transfer", curl.ok or wget.ok, "curl" if curl.ok else ("wget" if wget.ok else "missing")))

    vboot_ok = tool_available(config.vboot_tool)
    checks.append(
        Check(
            "vboot_tool",
            vboot_ok,
            str(config.vboot_tool) if vboot_ok else f"missing: {config.vboot_tool}",
            "only present on ChromeOS with developer tools; pass --vboot-tool",
        )
    )

    checks.append(
        Check(
            "policy_file",
            config.policy_file.is_file(),
            str(config.policy_file),
            "run with --fetch or pass --policy-file",
        )
    )
    checks.append(Check("etc_dir", config.etc_dir.is_dir(), str(config.etc_dir)))

    if shutil.which("findmnt") is not None:
        mounted = is_mountpoint(config.etc_dir)
        checks.append(Check("etc_mount", True, "bind-mounted (temporary policies active?)" if mounted else "not a separate mount"))

    return checks
