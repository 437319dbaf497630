from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TextIO

from .console import info
from .errors import NoInteractiveTerminal
from .safety import is_interactive


class Prompter(ABC):
    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def ask(self, prompt: str) -> str:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise NoInteractiveTerminal("No input available (EOF). Exiting.")
        return line.rstrip("\r\n")

    @abstractmethod
    def confirm(self, question: str, default: bool = False) -> bool: ...


class TerminalPrompter(Prompter):
    def confirm(self, question: str, default: bool = False) -> bool:
        suffix = " (Y/n): " if default else " (y/N): "
        while True:
            answer = self.ask(question + suffix).strip().lower()
            if not answer:
                return default
            if answer in {"y", "yes"}:
                return True
            if answer in {"n", "no"}:
                return False
            print("Please enter 'y' or 'n'.", file=self.stdout)


class AutoConfirmPrompter(Prompter):
    def confirm(self, question: str, default: bool = False) -> bool:
        info(f"Auto-confirming due to --yes: {question}")
        return True


class NonInteractivePrompter(Prompter):
    def confirm(self, question: str, default: bool = False) -> bool:
        raise NoInteractiveTerminal("No TTY available to prompt. Re-run with --yes to confirm non-interactively.")


def make_prompter(assume_yes: bool, stdin: TextIO | None = None, stdout: TextIO | None = None) -> Prompter:
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    if assume_yes:
        return AutoConfirmPrompter(stdin, stdout)
    if is_interactive(stdin, stdout):
        return TerminalPrompter(stdin, stdout)
    return NonInteractivePrompter(stdin, stdout)
