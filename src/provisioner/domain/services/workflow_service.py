"""Workflow Orchestrator: drives the DNS run and the install run through their state machines."""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import structlog
from pydantic import Field

from provisioner.domain.exceptions import ProvisioningError
from provisioner.domain.models.artifacts import (
    ClusterAccess,
    InstallationRun,
    InstallManifest,
    SshKeyPair,
    ToolSet,
)
from provisioner.domain.models.base import ValueObject
from provisioner.domain.models.cloud import (
    CallerIdentity,
    CloudIdentity,
    DnsZone,
    PropagationResult,
    ZoneProvisioning,
)
from provisioner.domain.models.workflow import Stage, StageResult, WorkflowKind, WorkflowRun
from provisioner.domain.ports.services import EventPublisher
from provisioner.domain.services.credentials import CredentialConfigurator
from provisioner.domain.services.dns_zone import DnsZoneProvisioner
from provisioner.domain.services.installer import AccessConfigDeployer, ClusterInstallerDriver
from provisioner.domain.services.keys import KeyProvisioner
from provisioner.domain.services.manifest import ManifestGenerator
from provisioner.domain.services.tools import ToolAcquirer


logger = structlog.get_logger(__name__)

T = TypeVar("T")


class DnsStageOutcome(ValueObject):
    """Everything stage A produced."""

    run: WorkflowRun
    caller: CallerIdentity
    provisioning: ZoneProvisioning
    nameservers_file: Path
    propagation: list[PropagationResult] = Field(default_factory=list)
    zones: list[DnsZone] = Field(default_factory=list)


class InstallOutcome(ValueObject):
    """Everything the install run produced, ending with the operator hand-off."""

    run: WorkflowRun
    caller: CallerIdentity
    zone: DnsZone
    tools: ToolSet
    keypair: SshKeyPair
    manifest: InstallManifest
    installation: InstallationRun
    access: ClusterAccess


class ProvisioningWorkflow:
    """Sequences the stage components for both runs.

    Each stage is announced on the run aggregate, executed, and recorded.
    The first ProvisioningError moves the run to FAILED, publishes the
    failure events and propagates; nothing after it executes.
    """

    def __init__(
        self,
        credentials: CredentialConfigurator,
        zones: DnsZoneProvisioner,
        tools: ToolAcquirer,
        keys: KeyProvisioner,
        manifests: ManifestGenerator,
        installer: ClusterInstallerDriver,
        access: AccessConfigDeployer,
        event_publisher: EventPublisher,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._credentials = credentials
        self._zones = zones
        self._event_publisher = event_publisher
        self._tools = tools
        self._keys = keys
        self._manifests = manifests
        self._installer = installer
        self._access = access
        self._clock = clock

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _publish_events(self, run: WorkflowRun) -> None:
        """Drain the run's pending events into the publisher."""
        for event in run.collect_events():
            self._event_publisher.publish(event.event_type, event.model_dump(mode="json"))

    def _execute(self, run: WorkflowRun, stage: Stage, action: Callable[[], T]) -> T:
        run.start_stage(stage)
        self._publish_events(run)
        logger.info("stage_started", run_id=run.id, stage=stage.value)

        started = self._clock()
        try:
            value = action()
        except ProvisioningError as exc:
            run.record(StageResult(
                stage=stage,
                success=False,
                error_type=type(exc).__name__,
                error_message=str(exc),
                duration_seconds=self._clock() - started,
            ))
            self._publish_events(run)
            logger.error(
                "stage_failed",
                run_id=run.id,
                stage=stage.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        state = run.record(StageResult(
            stage=stage, success=True, duration_seconds=self._clock() - started,
        ))
        self._publish_events(run)
        logger.info("stage_completed", run_id=run.id, stage=stage.value, state=state.value)
        return value

    # ------------------------------------------------------------------
    # Stage A
    # ------------------------------------------------------------------

    def run_dns_stage(self, identity: CloudIdentity, base_domain: str) -> DnsStageOutcome:
        """Credentials, create-or-discover the zone, confirmation gate, propagation check."""
        run = WorkflowRun(kind=WorkflowKind.DNS, base_domain=base_domain)
        logger.info("dns_run_started", run_id=run.id, base_domain=base_domain)

        caller = self._execute(
            run, Stage.CONFIGURE_CREDENTIALS, lambda: self._credentials.configure(identity)
        )

        def provision_and_confirm() -> ZoneProvisioning:
            provisioning = self._zones.provision(identity, base_domain)
            self._zones.confirm_delegation(provisioning.zone)
            return provisioning

        provisioning = self._execute(run, Stage.PROVISION_ZONE, provision_and_confirm)

        def check_and_report() -> tuple[list[PropagationResult], list[DnsZone]]:
            results = self._zones.check_propagation(provisioning.zone)
            return results, self._zones.list_zones(identity)

        propagation, zones = self._execute(run, Stage.CHECK_PROPAGATION, check_and_report)

        logger.info(
            "dns_run_completed",
            run_id=run.id,
            zone_id=provisioning.zone.zone_id,
            created=provisioning.created,
            answered=sum(1 for result in propagation if result.answered),
            probed=len(propagation),
        )
        return DnsStageOutcome(
            run=run,
            caller=caller,
            provisioning=provisioning,
            nameservers_file=self._zones.nameservers_file,
            propagation=propagation,
            zones=zones,
        )

    # ------------------------------------------------------------------
    # Stage B
    # ------------------------------------------------------------------

    def run_install(
        self,
        identity: CloudIdentity,
        *,
        cluster_name: str,
        base_domain: str,
        install_dir: Path,
    ) -> InstallOutcome:
        """Full install run; the zone precondition is checked before any provisioning work."""
        run = WorkflowRun(
            kind=WorkflowKind.INSTALL, base_domain=base_domain, cluster_name=cluster_name,
        )
        logger.info(
            "install_run_started",
            run_id=run.id,
            cluster_name=cluster_name,
            base_domain=base_domain,
            install_dir=str(install_dir),
        )

        caller = self._execute(
            run, Stage.CONFIGURE_CREDENTIALS, lambda: self._credentials.configure(identity)
        )
        zone = self._execute(
            run,
            Stage.VERIFY_ZONE_PRECONDITION,
            lambda: self._zones.require_zone(identity, base_domain),
        )
        tools = self._execute(run, Stage.ACQUIRE_TOOLS, self._tools.acquire)
        keypair = self._execute(run, Stage.PROVISION_KEY, self._keys.ensure_keypair)
        manifest = self._execute(
            run,
            Stage.GENERATE_MANIFEST,
            lambda: self._manifests.generate(
                install_dir,
                base_domain=base_domain,
                cluster_name=cluster_name,
                region=identity.region,
                public_key=keypair.public_key,
            ),
        )
        installation = self._execute(
            run,
            Stage.INSTALL_CLUSTER,
            lambda: self._installer.install(tools.installer, install_dir, identity),
        )
        access = self._execute(
            run,
            Stage.DEPLOY_ACCESS_CONFIG,
            lambda: self._access.deploy(
                installation, cluster_name=cluster_name, base_domain=base_domain,
            ),
        )

        logger.info(
            "install_run_completed",
            run_id=run.id,
            console_url=access.console_url,
            api_url=access.api_url,
        )
        return InstallOutcome(
            run=run,
            caller=caller,
            zone=zone,
            tools=tools,
            keypair=keypair,
            manifest=manifest,
            installation=installation,
            access=access,
        )
