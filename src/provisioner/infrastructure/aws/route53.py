"""Route 53 hosted-zone gateways."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from provisioner.domain.exceptions import DnsGatewayError
from provisioner.domain.models.base import generate_id
from provisioner.domain.models.cloud import (
    CloudIdentity,
    DnsZone,
    normalize_domain,
    normalize_zone_id,
)
from provisioner.domain.ports.services import DnsZoneGateway
from provisioner.infrastructure.aws.session import create_client


logger = structlog.get_logger(__name__)

ROUTE53_COMMENT = "Hosted zone for OpenShift cluster"


def _zone_from_response(hosted_zone: dict[str, Any]) -> DnsZone:
    return DnsZone(
        zone_id=normalize_zone_id(hosted_zone["Id"]),
        domain=normalize_domain(hosted_zone["Name"]),
        private=hosted_zone.get("Config", {}).get("PrivateZone", False),
    )


class Route53ZoneGateway(DnsZoneGateway):
    """boto3 implementation of the hosted-zone port."""

    def __init__(
        self, client_factory: Callable[[CloudIdentity, str], Any] = create_client
    ) -> None:
        self._client_factory = client_factory

    def _client(self, identity: CloudIdentity) -> Any:
        return self._client_factory(identity, "route53")

    def find_zone(self, identity: CloudIdentity, domain: str) -> DnsZone | None:
        wanted = normalize_domain(domain)
        # Private zones cannot be delegated from a registrar.
        for zone in self._list(identity, wanted):
            if zone.domain == wanted and not zone.private:
                return zone
        return None

    def create_zone(self, identity: CloudIdentity, domain: str, caller_reference: str) -> DnsZone:
        try:
            response = self._client(identity).create_hosted_zone(
                Name=normalize_domain(domain),
                CallerReference=caller_reference,
                HostedZoneConfig={"Comment": ROUTE53_COMMENT, "PrivateZone": False},
            )
        except (ClientError, BotoCoreError) as exc:
            raise DnsGatewayError(str(exc)) from exc

        zone = _zone_from_response(response["HostedZone"])
        nameservers = response.get("DelegationSet", {}).get("NameServers", [])
        logger.info("route53_zone_created", zone_id=zone.zone_id, domain=zone.domain)
        return zone.with_nameservers(nameservers)

    def get_nameservers(self, identity: CloudIdentity, zone_id: str) -> list[str]:
        try:
            response = self._client(identity).get_hosted_zone(Id=normalize_zone_id(zone_id))
        except (ClientError, BotoCoreError) as exc:
            raise DnsGatewayError(str(exc)) from exc
        return list(response.get("DelegationSet", {}).get("NameServers", []))

    def list_zones(self, identity: CloudIdentity) -> list[DnsZone]:
        return self._list(identity)

    def _list(self, identity: CloudIdentity, start_at: str | None = None) -> list[DnsZone]:
        zones: list[DnsZone] = []
        kwargs: dict[str, Any] = {"DNSName": start_at} if start_at else {}
        try:
            client = self._client(identity)
            while True:
                response = client.list_hosted_zones_by_name(**kwargs)
                zones.extend(_zone_from_response(item) for item in response.get("HostedZones", []))
                # Results are sorted by name; once past the wanted domain, stop.
                if start_at and zones and zones[-1].domain != normalize_domain(start_at):
                    break
                if not response.get("IsTruncated"):
                    break
                kwargs = {
                    "DNSName": response["NextDNSName"],
                    "HostedZoneId": response["NextHostedZoneId"],
                }
        except (ClientError, BotoCoreError) as exc:
            raise DnsGatewayError(str(exc)) from exc
        return zones


class InMemoryZoneGateway(DnsZoneGateway):
    """Hosted zones kept in a dict; assigns four nameservers like the real service."""

    def __init__(self) -> None:
        self._zones: dict[str, DnsZone] = {}
        self._references: dict[str, str] = {}
        self.create_calls = 0

    def find_zone(self, identity: CloudIdentity, domain: str) -> DnsZone | None:
        wanted = normalize_domain(domain)
        for zone in self._zones.values():
            if zone.domain == wanted and not zone.private:
                return zone
        return None

    def create_zone(self, identity: CloudIdentity, domain: str, caller_reference: str) -> DnsZone:
        self.create_calls += 1
        if caller_reference in self._references:
            return self._zones[self._references[caller_reference]]
        zone_id = "Z" + generate_id().replace("-", "")[:13].upper()
        suffix = len(self._zones) + 1
        zone = DnsZone(
            zone_id=zone_id,
            domain=normalize_domain(domain),
            nameservers=(
                f"ns-{suffix}.awsdns-01.org",
                f"ns-{suffix}.awsdns-02.co.uk",
                f"ns-{suffix}.awsdns-03.com",
                f"ns-{suffix}.awsdns-04.net",
            ),
        )
        self._zones[zone_id] = zone
        self._references[caller_reference] = zone_id
        return zone

    def get_nameservers(self, identity: CloudIdentity, zone_id: str) -> list[str]:
        zone = self._zones.get(normalize_zone_id(zone_id))
        if zone is None:
            raise DnsGatewayError(f"NoSuchHostedZone: {zone_id}")
        return list(zone.nameservers)

    def list_zones(self, identity: CloudIdentity) -> list[DnsZone]:
        return sorted(self._zones.values(), key=lambda zone: zone.domain)

    def add_zone(self, zone: DnsZone) -> None:
        self._zones[zone.zone_id] = zone
