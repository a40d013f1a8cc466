"""Service port interfaces (hexagonal architecture).

Every external collaborator of the workflow sits behind one of these ports
so that stages can be exercised against fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from provisioner.domain.models.artifacts import CommandResult
from provisioner.domain.models.cloud import CallerIdentity, CloudIdentity, DnsZone


class CredentialStore(ABC):
    """Port for the persistent provider credential profile."""

    @abstractmethod
    def write(self, identity: CloudIdentity) -> list[Path]:
        """Persist the credential and region/output profiles. Returns written files."""


class IdentityVerifier(ABC):
    """Port for the provider's read-only identity probe."""

    @abstractmethod
    def verify(self, identity: CloudIdentity) -> CallerIdentity:
        """Return the caller identity or raise IdentityProbeError."""


class DnsZoneGateway(ABC):
    """Port for hosted-zone list/create/get."""

    @abstractmethod
    def find_zone(self, identity: CloudIdentity, domain: str) -> DnsZone | None:
        """Find the public zone whose name matches ``domain`` exactly."""

    @abstractmethod
    def create_zone(
        self, identity: CloudIdentity, domain: str, caller_reference: str
    ) -> DnsZone:
        """Create a zone; ``caller_reference`` makes retries of the same request idempotent."""

    @abstractmethod
    def get_nameservers(self, identity: CloudIdentity, zone_id: str) -> list[str]:
        """Return the zone's delegation nameservers in provider order."""

    @abstractmethod
    def list_zones(self, identity: CloudIdentity) -> list[DnsZone]:
        """List every hosted zone in the account."""


class NameserverProbe(ABC):
    """Port for ad hoc DNS queries against a specific nameserver."""

    @abstractmethod
    def query_ns(self, nameserver: str, domain: str) -> list[str]:
        """Ask ``nameserver`` for the NS set of ``domain``."""


class ArtifactDownloader(ABC):
    """Port for fetching release archives."""

    @abstractmethod
    def download(self, url: str, destination: Path) -> Path:
        """Download ``url`` to ``destination`` or raise DownloadError."""


class CommandRunner(ABC):
    """Port for running external binaries."""

    @abstractmethod
    def run(
        self,
        command: list[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        """Run to completion capturing output; raise CommandError on a non-zero exit."""

    @abstractmethod
    def run_attached(
        self,
        command: list[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> int:
        """Run with the operator's terminal attached and return the exit status."""


class InputProvider(ABC):
    """Port for the two interactive prompts of the workflow."""

    @abstractmethod
    def confirm(self, prompt: str) -> str:
        """Return the operator's raw answer to a yes/no question."""

    @abstractmethod
    def read_secret(self, prompt: str) -> str:
        """Return a multi-line secret terminated by end-of-input."""


class OwnershipManager(ABC):
    """Port for handing files to the target operating-system user."""

    @abstractmethod
    def hand_over(self, path: Path, recursive: bool = False) -> None:
        """Make the target user the owner of ``path``."""


class EventPublisher(ABC):
    """Port for publishing workflow events."""

    @abstractmethod
    def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        """Publish an event."""

    @abstractmethod
    def publish_batch(self, events: list[tuple[str, dict[str, Any]]]) -> None:
        """Publish a batch of events."""
