"""DNS Zone Provisioner."""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

import structlog

from provisioner.domain.exceptions import (
    ConfirmationRefusedError,
    DnsGatewayError,
    NameserverProbeError,
    ResourceStateError,
    ZoneProvisioningError,
)
from provisioner.domain.models.cloud import (
    CloudIdentity,
    DnsZone,
    normalize_domain,
    PropagationResult,
    ZoneProvisioning,
)
from provisioner.domain.ports.services import DnsZoneGateway, InputProvider, NameserverProbe


logger = structlog.get_logger(__name__)


class DnsZoneProvisioner:
    """Create-or-discover the authoritative zone for the base domain.

    Discovery is tried first so that re-running never creates a second
    zone. The nameserver list is written to a side-channel file before the
    operator is asked to confirm the registrar delegation.
    """

    def __init__(
        self,
        gateway: DnsZoneGateway,
        probe: NameserverProbe,
        input_provider: InputProvider,
        nameservers_file: Path,
        affirmative_answer: str = "yes",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._gateway = gateway
        self._probe = probe
        self._input = input_provider
        self._nameservers_file = nameservers_file
        self._affirmative = affirmative_answer.strip().lower()
        self._clock = clock

    @property
    def nameservers_file(self) -> Path:
        return self._nameservers_file

    def provision(self, identity: CloudIdentity, base_domain: str) -> ZoneProvisioning:
        domain = normalize_domain(base_domain)
        logger.info("route53_zone_lookup", domain=domain)

        try:
            existing = self._gateway.find_zone(identity, domain)
            if existing is not None:
                logger.warning(
                    "hosted_zone_already_exists", domain=domain, zone_id=existing.zone_id
                )
                zone = existing.with_nameservers(
                    self._gateway.get_nameservers(identity, existing.zone_id)
                )
                result = ZoneProvisioning(zone=zone, created=False)
            else:
                caller_reference = str(int(self._clock()))
                created = self._gateway.create_zone(identity, domain, caller_reference)
                zone = created.with_nameservers(
                    self._gateway.get_nameservers(identity, created.zone_id)
                )
                logger.info("hosted_zone_created", domain=domain, zone_id=zone.zone_id)
                result = ZoneProvisioning(
                    zone=zone, created=True, caller_reference=caller_reference
                )
        except DnsGatewayError as exc:
            raise ZoneProvisioningError(f"Route53 request for {domain} failed: {exc}") from exc

        if not result.zone.nameservers:
            raise ZoneProvisioningError(f"Hosted zone {result.zone.zone_id} has no delegation set")

        try:
            self.write_nameservers(result.zone)
        except OSError as exc:
            raise ZoneProvisioningError(f"Could not write {self._nameservers_file}: {exc}") from exc
        logger.info(
            "update_registrar_nameservers",
            domain=domain,
            nameservers=list(result.zone.nameservers),
            file=str(self._nameservers_file),
        )
        return result

    def write_nameservers(self, zone: DnsZone) -> Path:
        """Persist the delegation set so it survives the process."""
        self._nameservers_file.parent.mkdir(parents=True, exist_ok=True)
        self._nameservers_file.write_text("\n".join(zone.nameservers) + "\n")
        return self._nameservers_file

    def confirm_delegation(self, zone: DnsZone) -> None:
        """Block until the operator acknowledges the registrar update.

        Anything but the affirmative answer halts the workflow.
        """
        answer = self._input.confirm(
            f"Have you updated the nameservers for {zone.domain} at your registrar? (yes/no)"
        )
        if answer.strip().lower() != self._affirmative:
            logger.error("delegation_not_confirmed", domain=zone.domain)
            raise ConfirmationRefusedError(
                "Please update the nameservers at your registrar before proceeding"
            )
        logger.info("delegation_confirmed", domain=zone.domain)

    def check_propagation(self, zone: DnsZone) -> list[PropagationResult]:
        """Best-effort NS query against every delegation nameserver.

        Informational only: propagation can lag behind the registrar update.
        """
        logger.info("dns_propagation_check_started", domain=zone.domain)
        results: list[PropagationResult] = []
        for nameserver in zone.nameservers:
            logger.info("checking_nameserver", nameserver=nameserver)
            try:
                answers = self._probe.query_ns(nameserver, zone.domain)
            except NameserverProbeError as exc:
                logger.warning("nameserver_probe_failed", nameserver=nameserver, error=str(exc))
                results.append(PropagationResult(nameserver=nameserver, error=str(exc)))
                continue

            if answers:
                logger.info("nameserver_answered", nameserver=nameserver, answers=answers)
            else:
                logger.warning("nameserver_no_answer_yet", nameserver=nameserver)
            results.append(PropagationResult(nameserver=nameserver, answers=answers))
        return results

    def require_zone(self, identity: CloudIdentity, base_domain: str) -> DnsZone:
        """Cross-run precondition: the zone created by the DNS run must exist."""
        domain = normalize_domain(base_domain)
        try:
            zone = self._gateway.find_zone(identity, domain)
        except DnsGatewayError as exc:
            raise ZoneProvisioningError(f"Route53 lookup for {domain} failed: {exc}") from exc
        if zone is None:
            logger.error("hosted_zone_missing", domain=domain)
            raise ResourceStateError(
                f"Route53 hosted zone for {domain} not found. Run the dns stage first."
            )
        logger.info("hosted_zone_found", domain=domain, zone_id=zone.zone_id)
        return zone

    def list_zones(self, identity: CloudIdentity) -> list[DnsZone]:
        """Account-wide zone report; informational, so a failed listing is not fatal."""
        try:
            return self._gateway.list_zones(identity)
        except DnsGatewayError as exc:
            logger.warning("hosted_zone_listing_failed", error=str(exc))
            return []
