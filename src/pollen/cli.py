from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Callable

from . import __version__
from .apply import apply_permanent, apply_temporary
from .config import (
    DEFAULT_DEVICE,
    DEFAULT_OVERLAY_DIR,
    DEFAULT_POLICY_FILE,
    DEFAULT_REPO_URL,
    DEFAULT_VBOOT_TOOL,
    PollenConfig,
)
from .audit import ensure_audit_log
from .console import banner, error, setup_colors
from .doctor import run_doctor
from .fetch import fetch_policy
from .menu import run_menu
from .prompting import Prompter, make_prompter
from .safety import is_interactive, require_root
from .vboot import disable_verification


EXAMPLES = """\
examples:
  interactive menu (run in a terminal):
    sudo pollen

  non-interactive:
    sudo pollen --temporary --update
    sudo pollen --permanent --update --yes
    sudo pollen --disable-rootfs --yes

notes:
  If no interactive terminal is available, pass an action and (when required) --yes.
  If saving Policies.json fails with "Read-only file system", pass --policy-file /tmp/Policies.json.
"""


def cmd_temporary(config: PollenConfig, prompter: Prompter) -> int:
    apply_temporary(config, prompter)
    return 0


def cmd_permanent(config: PollenConfig, prompter: Prompter) -> int:
    apply_permanent(config, prompter)
    return 0


def cmd_disable_rootfs(config: PollenConfig, prompter: Prompter) -> int:
    disable_verification(config, prompter)
    return 0


def cmd_fetch(config: PollenConfig, _: Prompter) -> int:
    fetch_policy(config)
    return 0


def cmd_menu(config: PollenConfig, prompter: Prompter) -> int:
    return run_menu(config, prompter)


ACTIONS: dict[str, Callable[[PollenConfig, Prompter], int]] = {
    "temp": cmd_temporary,
    "perm": cmd_permanent,
    "disable": cmd_disable_rootfs,
    "fetch": cmd_fetch,
}


def cmd_doctor(config: PollenConfig) -> int:
    checks = [c.__dict__ for c in run_doctor(config)]
    print(json.dumps(checks, indent=2, sort_keys=True))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pollen",
        description="User policy editor for Chrome/ChromeOS",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.set_defaults(action=None)
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    actions = p.add_argument_group("actions (choose one)").add_mutually_exclusive_group()
    actions.add_argument("-t", "--temporary", dest="action", action="store_const", const="temp", help="Apply policies temporarily (reverts on reboot)")
    actions.add_argument("-p", "--permanent", dest="action", action="store_const", const="perm", help="Apply policies permanently (requires RootFS disabled)")
    actions.add_argument("-d", "--disable-rootfs", dest="action", action="store_const", const="disable", help="Disable RootFS verification (DANGEROUS)")
    actions.add_argument("-f", "--fetch", dest="action", action="store_const", const="fetch", help="Fetch latest Policies.json from the repository")
    actions.add_argument("--doctor", dest="action", action="store_const", const="doctor", help="Environment/dependency diagnostics")

    mods = p.add_argument_group("modifiers")
    mods.add_argument("-u", "--update", action="store_true", help="Before applying, update Policies.json from --repo-url")
    mods.add_argument("-y", "--yes", dest="assume_yes", action="store_true", help='Assume "yes" to prompts (needed for non-interactive use)')
    mods.add_argument("-v", "--verbose", action="store_true", help="List every entry skipped while preparing the overlay")
    mods.add_argument("--policy-file", default=str(DEFAULT_POLICY_FILE), help="Path to Policies.json (default: %(default)s)")
    mods.add_argument("--repo-url", default=DEFAULT_REPO_URL, help="Repo URL for Policies.json (default: %(default)s)")
    mods.add_argument("--device", default=DEFAULT_DEVICE, help="Device for vboot tool (default: %(default)s)")
    mods.add_argument("--vboot-tool", default=str(DEFAULT_VBOOT_TOOL), help="Path to make_dev_ssd.sh (default: %(default)s)")
    mods.add_argument("--overlay-dir", default=str(DEFAULT_OVERLAY_DIR), help="Temporary overlay base (default: %(default)s)")
    mods.add_argument("--audit-log", help="Append a JSON line per state change to this file")
    mods.add_argument("--no-color", action="store_true", help="Disable colored output")

    return p


def build_config(args: argparse.Namespace) -> PollenConfig:
    return PollenConfig(
        policy_file=Path(args.policy_file),
        repo_url=args.repo_url,
        overlay_dir=Path(args.overlay_dir),
        vboot_tool=Path(args.vboot_tool),
        device=args.device,
        assume_yes=args.assume_yes,
        update=args.update,
        verbose=args.verbose,
        color=not args.no_color,
        audit_log=Path(args.audit_log) if args.audit_log else None,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = build_config(args)
    setup_colors(config.color)

    if args.action == "doctor":
        return cmd_doctor(config)

    try:
        require_root()
        ensure_audit_log(config.audit_log)
        prompter = make_prompter(config.assume_yes)

        if args.action is None:
            if not is_interactive(sys.stdin, sys.stdout):
                error("No interactive terminal detected.")
                print("\nTip: pass an action to use Pollen non-interactively, e.g. 'sudo pollen --temporary --update'.\n")
                parser.print_usage()
                return 2
            banner()
            return cmd_menu(config, prompter)

        banner()
        return ACTIONS[args.action](config, prompter)
    except KeyboardInterrupt:
        print()
        raise
    except Exception as exc:  # noqa: BLE001
        error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
