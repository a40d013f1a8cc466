"""Input providers for the confirmation gate and the pull secret."""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from provisioner.domain.ports.services import InputProvider


class ConsoleInputProvider(InputProvider):
    """Interactive terminal: a typed answer, and a pasted secret ended by Ctrl+D."""

    def confirm(self, prompt: str) -> str:
        typer.echo(f"{prompt} ", nl=False)
        # EOF reads as an empty answer, which the gate treats as a refusal.
        return sys.stdin.readline()

    def read_secret(self, prompt: str) -> str:
        typer.echo(prompt, err=True)
        return sys.stdin.read()


class PresetInputProvider(InputProvider):
    """Answers supplied up front (``--yes``, ``--pull-secret-file``).

    Anything not preset is delegated to ``fallback``.
    """

    def __init__(
        self,
        fallback: InputProvider,
        assume_yes: bool = False,
        pull_secret_file: Path | None = None,
        affirmative_answer: str = "yes",
    ) -> None:
        self._fallback = fallback
        self._assume_yes = assume_yes
        self._pull_secret_file = pull_secret_file
        self._affirmative = affirmative_answer

    def confirm(self, prompt: str) -> str:
        if self._assume_yes:
            return self._affirmative
        return self._fallback.confirm(prompt)

    def read_secret(self, prompt: str) -> str:
        if self._pull_secret_file is not None:
            return self._pull_secret_file.read_text()
        return self._fallback.read_secret(prompt)


class StaticInputProvider(InputProvider):
    """Fixed answers; records every prompt it was shown."""

    def __init__(self, confirmation: str = "yes", secret: str = "") -> None:
        self.confirmation = confirmation
        self.secret = secret
        self.prompts: list[str] = []

    def confirm(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.confirmation

    def read_secret(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.secret
