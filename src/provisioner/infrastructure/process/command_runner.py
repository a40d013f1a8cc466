"""Synchronous subprocess runner for external binaries."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from pathlib import Path

import structlog

from provisioner.domain.exceptions import CommandError
from provisioner.domain.models.artifacts import CommandResult
from provisioner.domain.ports.services import CommandRunner


logger = structlog.get_logger(__name__)


def _merged_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
    # Extra variables are layered on a copy; the parent environment is never mutated.
    if env is None:
        return None
    merged = dict(os.environ)
    merged.update(env)
    return merged


class SubprocessCommandRunner(CommandRunner):
    """Runs commands with ``subprocess``; arguments are never passed through a shell."""

    def run(
        self,
        command: list[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        logger.debug("command_started", command=command[0], args=len(command) - 1)
        try:
            proc = subprocess.run(
                command,
                env=_merged_env(env),
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise CommandError(f"Cannot execute {command[0]}: {exc}") from exc

        result = CommandResult(
            command=command,
            return_code=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )
        if not result.succeeded:
            raise CommandError(
                f"{command[0]} exited with {proc.returncode}: {proc.stderr.strip()}",
                return_code=proc.returncode,
            )
        return result

    def run_attached(
        self,
        command: list[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> int:
        logger.debug("attached_command_started", command=command[0])
        try:
            return subprocess.call(command, env=_merged_env(env), cwd=cwd)
        except OSError as exc:
            raise CommandError(f"Cannot execute {command[0]}: {exc}") from exc
