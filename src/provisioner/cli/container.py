"""Composition root: wires adapters into the workflow for one CLI invocation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from provisioner.config import Settings
from provisioner.domain.ports.services import (
    ArtifactDownloader,
    CommandRunner,
    CredentialStore,
    DnsZoneGateway,
    EventPublisher,
    IdentityVerifier,
    InputProvider,
    NameserverProbe,
    OwnershipManager,
)
from provisioner.domain.services.credentials import CredentialConfigurator
from provisioner.domain.services.dns_zone import DnsZoneProvisioner
from provisioner.domain.services.installer import AccessConfigDeployer, ClusterInstallerDriver
from provisioner.domain.services.keys import KeyProvisioner
from provisioner.domain.services.manifest import ManifestGenerator
from provisioner.domain.services.tools import ToolAcquirer
from provisioner.domain.services.workflow_service import ProvisioningWorkflow
from provisioner.infrastructure.aws.credential_store import FileCredentialStore
from provisioner.infrastructure.aws.identity import StsIdentityVerifier
from provisioner.infrastructure.aws.route53 import Route53ZoneGateway
from provisioner.infrastructure.console.input_provider import (
    ConsoleInputProvider,
    PresetInputProvider,
)
from provisioner.infrastructure.dns.dig_probe import DigNameserverProbe
from provisioner.infrastructure.downloads.http_downloader import HttpArtifactDownloader
from provisioner.infrastructure.messaging.event_publisher import LoggingEventPublisher
from provisioner.infrastructure.process.command_runner import SubprocessCommandRunner
from provisioner.infrastructure.system.ownership import PosixOwnershipManager


class ServiceContainer:
    """Assembles every port adapter and stage component.

    Any adapter may be passed in explicitly; the rest default to the
    real implementations built from ``settings``.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        assume_yes: bool = False,
        pull_secret_file: Path | None = None,
        input_provider: InputProvider | None = None,
        ownership: OwnershipManager | None = None,
        command_runner: CommandRunner | None = None,
        downloader: ArtifactDownloader | None = None,
        credential_store: CredentialStore | None = None,
        identity_verifier: IdentityVerifier | None = None,
        zone_gateway: DnsZoneGateway | None = None,
        nameserver_probe: NameserverProbe | None = None,
        event_publisher: EventPublisher | None = None,
    ) -> None:
        self._settings = settings
        self._command_runner = command_runner or SubprocessCommandRunner()
        self._ownership = ownership or PosixOwnershipManager(settings.host.target_user)
        self._input_provider = PresetInputProvider(
            fallback=input_provider or ConsoleInputProvider(),
            assume_yes=assume_yes,
            pull_secret_file=pull_secret_file,
            affirmative_answer=settings.workflow.affirmative_answer,
        )
        self._downloader = downloader or HttpArtifactDownloader(
            timeout=settings.tools.download_timeout
        )
        self._credential_store = credential_store or FileCredentialStore(
            settings.aws_config_dir, self._ownership
        )
        self._identity_verifier = identity_verifier or StsIdentityVerifier()
        self._zone_gateway = zone_gateway or Route53ZoneGateway()
        self._nameserver_probe = nameserver_probe or DigNameserverProbe(self._command_runner)
        self._event_publisher = event_publisher or LoggingEventPublisher()
        self._workflow: ProvisioningWorkflow | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def event_publisher(self) -> EventPublisher:
        return self._event_publisher

    @property
    def workflow(self) -> ProvisioningWorkflow:
        if self._workflow is None:
            self._workflow = self._build_workflow()
        return self._workflow

    def _build_workflow(self) -> ProvisioningWorkflow:
        settings = self._settings
        return ProvisioningWorkflow(
            credentials=CredentialConfigurator(self._credential_store, self._identity_verifier),
            zones=DnsZoneProvisioner(
                self._zone_gateway,
                self._nameserver_probe,
                self._input_provider,
                nameservers_file=settings.workflow.nameservers_file,
                affirmative_answer=settings.workflow.affirmative_answer,
            ),
            tools=ToolAcquirer(
                self._downloader,
                self._command_runner,
                version=settings.tools.version,
                mirror_url=settings.tools.mirror_url,
                bin_dir=settings.tools.bin_dir,
                scratch_root=settings.tools.scratch_dir,
            ),
            keys=KeyProvisioner(
                self._command_runner,
                self._ownership,
                settings.ssh_dir,
                key_name=settings.host.ssh_key_name,
                key_type=settings.host.ssh_key_type,
            ),
            manifests=ManifestGenerator(self._input_provider, self._ownership, settings.topology),
            installer=ClusterInstallerDriver(self._command_runner),
            access=AccessConfigDeployer(self._ownership, settings.kube_dir),
            event_publisher=self._event_publisher,
        )


def apply_overrides(settings: Settings, **overrides: Any) -> Settings:
    """Return a copy of ``settings`` with CLI flag values applied.

    Keys are ``<group>__<field>``; ``None`` values are ignored.
    """
    updates: dict[str, dict[str, Any]] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        group, field = key.split("__", 1)
        updates.setdefault(group, {})[field] = value
    return settings.model_copy(update={
        group: getattr(settings, group).model_copy(update=values)
        for group, values in updates.items()
    })
