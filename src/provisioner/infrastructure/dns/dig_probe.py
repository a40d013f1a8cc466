"""Nameserver probe backed by ``dig``."""

from __future__ import annotations

from provisioner.domain.exceptions import CommandError, NameserverProbeError
from provisioner.domain.ports.services import CommandRunner, NameserverProbe


class DigNameserverProbe(NameserverProbe):
    """``dig @<nameserver> <domain> NS +short``; one answer per output line."""

    def __init__(self, runner: CommandRunner, timeout_seconds: int = 5, tries: int = 2) -> None:
        self._runner = runner
        self._timeout = timeout_seconds
        self._tries = tries

    def query_ns(self, nameserver: str, domain: str) -> list[str]:
        command = [
            "dig", f"@{nameserver}", domain, "NS", "+short",
            f"+time={self._timeout}", f"+tries={self._tries}",
        ]
        try:
            result = self._runner.run(command)
        except CommandError as exc:
            raise NameserverProbeError(str(exc)) from exc
        return [
            line.strip().rstrip(".")
            for line in result.stdout.splitlines()
            if line.strip() and not line.startswith(";")
        ]
