from __future__ import annotations

import errno
import os
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from .audit import write_audit_event
from .config import PollenConfig
from .console import info, success, warn
from .errors import FetchFailed, NoTransferToolAvailable, PolicyNotFound, ReadOnlyTarget
from .prompting import Prompter
from .safety import probe_writable


class Fetcher(Protocol):
    def fetch(self, url: str, dest: Path) -> None: ...


def _run_download(cmd: list[str]) -> None:
    try:
        cp = subprocess.run(cmd, check=False, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise FetchFailed(f"transfer tool not runnable: {cmd[0]}") from exc
    if cp.returncode != 0:
        err = (cp.stderr or "").strip()
        raise FetchFailed(err or f"{cmd[0]} exited with status {cp.returncode}")


class CurlFetcher:
    def __init__(self, binary: str = "curl") -> None:
        self.binary = binary

    def fetch(self, url: str, dest: Path) -> None:
        _run_download([self.binary, "-fsSL", url, "-o", str(dest)])


class WgetFetcher:
    def __init__(self, binary: str = "wget") -> None:
        self.binary = binary

    def fetch(self, url: str, dest: Path) -> None:
        _run_download([self.binary, "-qO", str(dest), url])


def select_fetcher() -> Fetcher:
    curl = shutil.which("curl")
    if curl is not None:
        return CurlFetcher(curl)
    wget = shutil.which("wget")
    if wget is not None:
        return WgetFetcher(wget)
    raise NoTransferToolAvailable("Neither curl nor wget is available.")


def prepare_download_target(config: PollenConfig) -> Path:
    directory = config.policy_file.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
        probe_writable(directory)
    except OSError as exc:
        if exc.errno != errno.EROFS:
            raise ReadOnlyTarget(f"Cannot write to '{directory}': {exc.strerror or exc}") from exc
        fallback = config.fallback_dir / config.policy_file.name
        warn(f"Target directory '{directory.resolve()}' is mounted read-only.")
        warn(f"Suggestion: cd {config.fallback_dir} and retry, or pass --policy-file {fallback}")
        info(f"Falling back to {config.fallback_dir} automatically for this run.")
        return fallback
    return config.policy_file


def fetch_policy(config: PollenConfig, fetcher: Fetcher | None = None) -> Path:
    if fetcher is None:
        fetcher = select_fetcher()
    target = prepare_download_target(config)
    target.parent.mkdir(parents=True, exist_ok=True)

    info(f"Fetching latest policies from {config.repo_url} ...")
    # Download beside the target and rename, so a failed transfer never leaves a truncated policy.
    partial = target.with_name(f".{target.name}.part")
    try:
        fetcher.fetch(config.repo_url, partial)
        os.replace(partial, target)
    except (FetchFailed, OSError) as exc:
        partial.unlink(missing_ok=True)
        write_audit_event(config.audit_log, "policy.fetch", url=config.repo_url, path=str(target), status="failed")
        raise FetchFailed(
            f"Failed to fetch policies ({exc}). Check your internet connection "
            f"or use --policy-file {config.fallback_dir / config.policy_file.name}"
        ) from exc

    write_audit_event(config.audit_log, "policy.fetch", url=config.repo_url, path=str(target), status="ok")
    success(f"{target.name} has been updated at: {target}")
    return target


def ensure_policy_present(config: PollenConfig, prompter: Prompter, fetcher: Fetcher | None = None) -> Path:
    if config.policy_file.is_file():
        return config.policy_file

    warn(f"'{config.policy_file}' not found in: {Path.cwd()}")
    if not prompter.confirm(f"Download the latest {config.policy_file.name} from the repository?"):
        raise PolicyNotFound(f"'{config.policy_file}' is required to apply policies.")
    return fetch_policy(config, fetcher)
