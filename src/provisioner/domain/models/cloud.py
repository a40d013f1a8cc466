"""Cloud account domain models."""

from __future__ import annotations

from pydantic import Field, SecretStr

from provisioner.domain.models.base import ValueObject


class CloudIdentity(ValueObject):
    """Resolved credentials passed explicitly to every cloud-facing stage."""

    access_key_id: str
    secret_access_key: SecretStr
    region: str
    output_format: str = "json"
    profile: str = "default"

    def as_environment(self) -> dict[str, str]:
        """Environment mapping for child processes that talk to the provider."""
        return {
            "AWS_ACCESS_KEY_ID": self.access_key_id,
            "AWS_SECRET_ACCESS_KEY": self.secret_access_key.get_secret_value(),
            "AWS_DEFAULT_REGION": self.region,
            "AWS_REGION": self.region,
        }


class CallerIdentity(ValueObject):
    """Result of the read-only identity probe."""

    account: str
    arn: str
    user_id: str = ""


class DnsZone(ValueObject):
    """Authoritative hosted zone for a base domain."""

    zone_id: str
    domain: str
    nameservers: tuple[str, ...] = ()
    private: bool = False

    @property
    def fqdn(self) -> str:
        return normalize_domain(self.domain) + "."

    def with_nameservers(self, nameservers: list[str]) -> DnsZone:
        return self.model_copy(update={"nameservers": tuple(nameservers)})


class ZoneProvisioning(ValueObject):
    """Outcome of the create-or-discover step."""

    zone: DnsZone
    created: bool
    caller_reference: str | None = None


class PropagationResult(ValueObject):
    """Answer (or failure) of one nameserver for the base domain's NS set."""

    nameserver: str
    answers: list[str] = Field(default_factory=list)
    error: str = ""

    @property
    def answered(self) -> bool:
        return not self.error and bool(self.answers)


def normalize_domain(domain: str) -> str:
    """Lower-case a domain name and drop any trailing dot."""
    return domain.strip().rstrip(".").lower()


def normalize_zone_id(zone_id: str) -> str:
    """Strip the ``/hostedzone/`` prefix the provider puts on zone identifiers."""
    return zone_id.rsplit("/", 1)[-1]
