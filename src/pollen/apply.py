from __future__ import annotations

import shutil
from dataclasses import replace
from pathlib import Path

from .audit import write_audit_event
from .config import POLICY_NAME, PollenConfig
from .console import info, success, warn
from .errors import CopyFailed, MountFailed, WriteFailed
from .fetch import Fetcher, ensure_policy_present, fetch_policy
from .mounting import Mounter, SystemMounter
from .overlay import CopyReport, copy_tree
from .prompting import Prompter


def resolve_policy(config: PollenConfig, prompter: Prompter, fetcher: Fetcher | None = None) -> Path:
    if config.update:
        config = replace(config, policy_file=fetch_policy(config, fetcher))
    return ensure_policy_present(config, prompter, fetcher)


def _report_copy(report: CopyReport, verbose: bool) -> None:
    if not report.failures:
        return
    warn(f"Skipped {len(report.failures)} entries that could not be copied into the overlay.")
    if verbose:
        for failure in report.failures:
            warn(f"  {failure.path}: {failure.reason}")
    else:
        info("Re-run with --verbose to list them.")


def apply_temporary(
    config: PollenConfig,
    prompter: Prompter,
    *,
    fetcher: Fetcher | None = None,
    mounter: Mounter | None = None,
) -> Path:
    info("Applying policies temporarily (reverts on reboot)...")
    policy = resolve_policy(config, prompter, fetcher)

    info(f"Preparing overlay at {config.overlay_etc} ...")
    report = copy_tree(config.etc_dir, config.overlay_etc)
    _report_copy(report, config.verbose)

    target = config.overlay_policy_path
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(policy, target)
    except OSError as exc:
        raise CopyFailed(f"Failed to place policy in overlay at {target}: {exc.strerror or exc}") from exc

    if mounter is None:
        mounter = SystemMounter()
    try:
        mounter.bind(config.overlay_etc, config.etc_dir)
    except MountFailed:
        write_audit_event(config.audit_log, "apply.temporary", policy=str(policy), overlay=str(config.overlay_etc), status="failed")
        raise

    write_audit_event(
        config.audit_log,
        "apply.temporary",
        policy=str(policy),
        overlay=str(config.overlay_etc),
        skipped_entries=len(report.failures),
        status="ok",
    )
    success("Pollen has been successfully applied temporarily!")
    info("Changes will be reverted on reboot.")
    return target


def apply_permanent(config: PollenConfig, prompter: Prompter, *, fetcher: Fetcher | None = None) -> bool:
    warn("This option requires RootFS verification to be disabled.")
    warn("If it is not disabled, this will likely not work.")
    if not prompter.confirm("Do you want to continue?"):
        info("Operation cancelled.")
        return False

    policy = resolve_policy(config, prompter, fetcher)
    info("Applying policies permanently...")

    target = config.policy_dest_dir / POLICY_NAME
    try:
        config.policy_dest_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(policy, target)
    except OSError as exc:
        write_audit_event(config.audit_log, "apply.permanent", policy=str(policy), target=str(target), status="failed")
        raise WriteFailed(f"Failed to write {target}: {exc.strerror or exc}") from exc

    write_audit_event(config.audit_log, "apply.permanent", policy=str(policy), target=str(target), status="ok")
    success("Pollen has been successfully applied permanently!")
    return True
