from __future__ import annotations

from dataclasses import replace

from .apply import apply_permanent, apply_temporary
from .config import PollenConfig
from .console import error, info
from .errors import AcquisitionError
from .fetch import Fetcher, fetch_policy
from .mounting import Mounter
from .prompting import Prompter
from .vboot import VerificationTool, disable_verification


MENU_TEXT = """
Please choose an option:
  1) Apply policies temporarily (reverts on reboot)
  2) Apply policies permanently (requires RootFS disabled)
  3) Disable RootFS verification (DANGEROUS, NOT RECOMMENDED)
  4) Fetch latest policies from repository
  5) Exit
"""

CHOICES = {"1", "2", "3", "4", "5"}


def prompt_choice(prompter: Prompter) -> str:
    while True:
        choice = prompter.ask("Enter your choice [1-5]: ").strip()
        if choice in CHOICES:
            return choice
        if not choice:
            print("No input provided. Please enter 1-5.", file=prompter.stdout)
        else:
            print("Invalid option. Please try again.", file=prompter.stdout)


def run_menu(
    config: PollenConfig,
    prompter: Prompter,
    *,
    fetcher: Fetcher | None = None,
    mounter: Mounter | None = None,
    tool: VerificationTool | None = None,
) -> int:
    while True:
        print(MENU_TEXT, file=prompter.stdout)
        choice = prompt_choice(prompter)
        print(file=prompter.stdout)

        if choice == "1":
            apply_temporary(config, prompter, fetcher=fetcher, mounter=mounter)
            return 0
        if choice == "2":
            apply_permanent(config, prompter, fetcher=fetcher)
            return 0
        if choice == "3":
            disable_verification(config, prompter, tool=tool)
            return 0
        if choice == "4":
            try:
                # Later choices use wherever the download landed (it may have fallen back to /tmp).
                config = replace(config, policy_file=fetch_policy(config, fetcher))
            except AcquisitionError as exc:
                error(str(exc))
            continue

        info("Exiting.")
        return 0
