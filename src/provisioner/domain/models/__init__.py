"""Domain models package."""

from provisioner.domain.models.artifacts import (
    ClusterAccess,
    CommandResult,
    default_archives,
    InstallationRun,
    InstallManifest,
    SshKeyPair,
    ToolArchive,
    ToolSet,
)
from provisioner.domain.models.base import (
    AggregateRoot,
    DomainEvent,
    generate_id,
    utc_now,
    ValueObject,
)
from provisioner.domain.models.cloud import (
    CallerIdentity,
    CloudIdentity,
    DnsZone,
    normalize_domain,
    normalize_zone_id,
    PropagationResult,
    ZoneProvisioning,
)
from provisioner.domain.models.workflow import (
    advance,
    expected_stage,
    FINAL_STATES,
    InvalidStateTransitionError,
    Stage,
    StageResult,
    TRANSITIONS,
    WorkflowKind,
    WorkflowRun,
    WorkflowState,
)


__all__ = [
    "AggregateRoot",
    "CallerIdentity",
    "CloudIdentity",
    "ClusterAccess",
    "CommandResult",
    "DnsZone",
    "DomainEvent",
    "FINAL_STATES",
    "InstallManifest",
    "InstallationRun",
    "InvalidStateTransitionError",
    "PropagationResult",
    "SshKeyPair",
    "Stage",
    "StageResult",
    "TRANSITIONS",
    "ToolArchive",
    "ToolSet",
    "ValueObject",
    "WorkflowKind",
    "WorkflowRun",
    "WorkflowState",
    "ZoneProvisioning",
    "advance",
    "default_archives",
    "expected_stage",
    "generate_id",
    "normalize_domain",
    "normalize_zone_id",
    "utc_now",
]
