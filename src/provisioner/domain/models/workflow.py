"""Workflow run aggregate with its two stage state machines."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from provisioner.domain.events.workflow_events import (
    StageCompleted,
    StageFailed,
    StageStarted,
    WorkflowCompleted,
    WorkflowFailed,
)
from provisioner.domain.models.base import AggregateRoot, ValueObject


class WorkflowKind(str, Enum):
    """The two separate invocations that compose a full bootstrap."""

    DNS = "dns"
    INSTALL = "install"


class WorkflowState(str, Enum):
    """Postconditions reached by a run."""

    PENDING = "pending"
    CREDENTIALS_CONFIGURED = "credentials_configured"
    ZONE_CONFIRMED = "zone_confirmed"
    PROPAGATION_CHECKED = "propagation_checked"
    ZONE_PRECONDITION_VERIFIED = "zone_precondition_verified"
    TOOLS_INSTALLED = "tools_installed"
    KEY_READY = "key_ready"
    MANIFEST_GENERATED = "manifest_generated"
    INSTALLATION_COMPLETE = "installation_complete"
    ACCESS_CONFIG_DEPLOYED = "access_config_deployed"
    FAILED = "failed"


class Stage(str, Enum):
    """Units of work; each one moves a run to the next state or to FAILED."""

    CONFIGURE_CREDENTIALS = "configure_credentials"
    PROVISION_ZONE = "provision_zone"
    CHECK_PROPAGATION = "check_propagation"
    VERIFY_ZONE_PRECONDITION = "verify_zone_precondition"
    ACQUIRE_TOOLS = "acquire_tools"
    PROVISION_KEY = "provision_key"
    GENERATE_MANIFEST = "generate_manifest"
    INSTALL_CLUSTER = "install_cluster"
    DEPLOY_ACCESS_CONFIG = "deploy_access_config"


# state -> (stage allowed from that state, state reached on success)
DNS_TRANSITIONS: dict[WorkflowState, tuple[Stage, WorkflowState]] = {
    WorkflowState.PENDING: (Stage.CONFIGURE_CREDENTIALS, WorkflowState.CREDENTIALS_CONFIGURED),
    WorkflowState.CREDENTIALS_CONFIGURED: (Stage.PROVISION_ZONE, WorkflowState.ZONE_CONFIRMED),
    WorkflowState.ZONE_CONFIRMED: (Stage.CHECK_PROPAGATION, WorkflowState.PROPAGATION_CHECKED),
}

INSTALL_TRANSITIONS: dict[WorkflowState, tuple[Stage, WorkflowState]] = {
    WorkflowState.PENDING: (Stage.CONFIGURE_CREDENTIALS, WorkflowState.CREDENTIALS_CONFIGURED),
    WorkflowState.CREDENTIALS_CONFIGURED: (
        Stage.VERIFY_ZONE_PRECONDITION, WorkflowState.ZONE_PRECONDITION_VERIFIED,
    ),
    WorkflowState.ZONE_PRECONDITION_VERIFIED: (Stage.ACQUIRE_TOOLS, WorkflowState.TOOLS_INSTALLED),
    WorkflowState.TOOLS_INSTALLED: (Stage.PROVISION_KEY, WorkflowState.KEY_READY),
    WorkflowState.KEY_READY: (Stage.GENERATE_MANIFEST, WorkflowState.MANIFEST_GENERATED),
    WorkflowState.MANIFEST_GENERATED: (Stage.INSTALL_CLUSTER, WorkflowState.INSTALLATION_COMPLETE),
    WorkflowState.INSTALLATION_COMPLETE: (
        Stage.DEPLOY_ACCESS_CONFIG, WorkflowState.ACCESS_CONFIG_DEPLOYED,
    ),
}

TRANSITIONS: dict[WorkflowKind, dict[WorkflowState, tuple[Stage, WorkflowState]]] = {
    WorkflowKind.DNS: DNS_TRANSITIONS,
    WorkflowKind.INSTALL: INSTALL_TRANSITIONS,
}

FINAL_STATES: dict[WorkflowKind, WorkflowState] = {
    WorkflowKind.DNS: WorkflowState.PROPAGATION_CHECKED,
    WorkflowKind.INSTALL: WorkflowState.ACCESS_CONFIG_DEPLOYED,
}


class StageResult(ValueObject):
    """Result of executing a single stage."""

    stage: Stage
    success: bool
    error_type: str = ""
    error_message: str = ""
    duration_seconds: float = 0.0


def expected_stage(kind: WorkflowKind, state: WorkflowState) -> Stage | None:
    """The only stage allowed to run from ``state``; None once the run is terminal."""
    transition = TRANSITIONS[kind].get(state)
    return transition[0] if transition else None


def advance(kind: WorkflowKind, state: WorkflowState, result: StageResult) -> WorkflowState:
    """Pure transition function: (state, stage result) -> next state.

    A failed result always lands in FAILED. A result for any stage other
    than the one the current state allows is a programming error.
    """
    transition = TRANSITIONS[kind].get(state)
    if transition is None:
        raise InvalidStateTransitionError(
            f"{kind.value} run in state {state.value} accepts no further stages"
        )
    stage, next_state = transition
    if result.stage != stage:
        raise InvalidStateTransitionError(
            f"{kind.value} run in state {state.value} expects stage {stage.value}, "
            f"got {result.stage.value}"
        )
    return next_state if result.success else WorkflowState.FAILED


class WorkflowRun(AggregateRoot):
    """One invocation of either the DNS run or the install run."""

    kind: WorkflowKind
    state: WorkflowState = WorkflowState.PENDING
    base_domain: str
    cluster_name: str = ""
    stage_results: list[StageResult] = Field(default_factory=list)
    failed_stage: Stage | None = None
    error_message: str = ""

    @property
    def next_stage(self) -> Stage | None:
        return expected_stage(self.kind, self.state)

    def start_stage(self, stage: Stage) -> None:
        """Announce a stage; it must be the one the current state allows."""
        if stage != self.next_stage:
            expected = self.next_stage.value if self.next_stage else "none"
            raise InvalidStateTransitionError(
                f"Cannot start {stage.value} from {self.state.value}; expected {expected}"
            )
        self.add_event(StageStarted(stage=stage.value, run_id=self.id))

    def record(self, result: StageResult) -> WorkflowState:
        """Apply a stage result and emit the matching events."""
        self.state = advance(self.kind, self.state, result)
        self.stage_results.append(result)
        self.touch()

        if result.success:
            self.add_event(StageCompleted(
                stage=result.stage.value,
                state=self.state.value,
                duration_seconds=result.duration_seconds,
                run_id=self.id,
            ))
            if self.succeeded:
                self.add_event(WorkflowCompleted(
                    kind=self.kind.value, state=self.state.value, run_id=self.id,
                ))
        else:
            self.failed_stage = result.stage
            self.error_message = result.error_message
            self.add_event(StageFailed(
                stage=result.stage.value,
                error_type=result.error_type,
                error_message=result.error_message,
                run_id=self.id,
            ))
            self.add_event(WorkflowFailed(
                kind=self.kind.value,
                stage=result.stage.value,
                error_message=result.error_message,
                run_id=self.id,
            ))
        return self.state

    @property
    def succeeded(self) -> bool:
        return self.state == FINAL_STATES[self.kind]

    @property
    def is_terminal(self) -> bool:
        return self.succeeded or self.state == WorkflowState.FAILED

    @property
    def completed_stages(self) -> list[Stage]:
        return [r.stage for r in self.stage_results if r.success]


class InvalidStateTransitionError(Exception):
    """Raised when a stage is applied out of order."""
