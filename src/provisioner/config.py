"""Provisioning configuration using pydantic-settings."""

from __future__ import annotations

import getpass
import os
import pwd
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


def current_user() -> str:
    """Name of the effective user running the process."""
    try:
        return pwd.getpwuid(os.geteuid()).pw_name
    except KeyError:
        return getpass.getuser()


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class AwsSettings(BaseSettings):
    """Cloud credential and region configuration."""

    access_key_id: str | None = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    secret_access_key: SecretStr | None = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    region: str = Field(default="ap-south-1", alias="AWS_REGION")
    output_format: str = Field(default="json", alias="AWS_OUTPUT_FORMAT")
    profile: str = Field(default="default", alias="AWS_PROFILE_NAME")
    config_dir: Path | None = Field(default=None, alias="AWS_CONFIG_DIR")

    model_config = {"env_prefix": "AWS_", "extra": "ignore", "populate_by_name": True}


class ClusterSettings(BaseSettings):
    """Target cluster identity."""

    name: str = Field(default="ocp", alias="CLUSTER_NAME")
    base_domain: str = Field(default="ocplocal.in", alias="CLUSTER_BASE_DOMAIN")
    install_dir: Path | None = Field(default=None, alias="CLUSTER_INSTALL_DIR")

    model_config = {"env_prefix": "CLUSTER_", "extra": "ignore", "populate_by_name": True}


class TopologySettings(BaseSettings):
    """Fixed cluster topology rendered into the installation manifest."""

    architecture: str = Field(default="amd64", alias="TOPOLOGY_ARCHITECTURE")
    hyperthreading: str = Field(default="Enabled", alias="TOPOLOGY_HYPERTHREADING")
    control_plane_replicas: int = Field(default=1, alias="TOPOLOGY_CONTROL_PLANE_REPLICAS")
    control_plane_instance_type: str = Field(
        default="m5.2xlarge", alias="TOPOLOGY_CONTROL_PLANE_INSTANCE_TYPE"
    )
    worker_replicas: int = Field(default=0, alias="TOPOLOGY_WORKER_REPLICAS")
    worker_instance_type: str = Field(default="m5.2xlarge", alias="TOPOLOGY_WORKER_INSTANCE_TYPE")
    cluster_network_cidr: str = Field(default="10.128.0.0/14", alias="TOPOLOGY_CLUSTER_NETWORK_CIDR")
    cluster_network_host_prefix: int = Field(default=23, alias="TOPOLOGY_HOST_PREFIX")
    machine_network_cidr: str = Field(default="10.0.0.0/16", alias="TOPOLOGY_MACHINE_NETWORK_CIDR")
    service_network_cidr: str = Field(default="172.30.0.0/16", alias="TOPOLOGY_SERVICE_NETWORK_CIDR")
    network_type: str = Field(default="OVNKubernetes", alias="TOPOLOGY_NETWORK_TYPE")

    model_config = {"env_prefix": "TOPOLOGY_", "extra": "ignore", "populate_by_name": True}


class ToolSettings(BaseSettings):
    """Pinned installer and client binaries."""

    version: str = Field(default="4.14.9", alias="TOOLS_VERSION")
    mirror_url: str = Field(
        default="https://mirror.openshift.com/pub/openshift-v4/clients/ocp",
        alias="TOOLS_MIRROR_URL",
    )
    bin_dir: Path = Field(default=Path("/usr/local/bin"), alias="TOOLS_BIN_DIR")
    scratch_dir: Path | None = Field(default=None, alias="TOOLS_SCRATCH_DIR")
    download_timeout: float = Field(default=300.0, alias="TOOLS_DOWNLOAD_TIMEOUT")

    model_config = {"env_prefix": "TOOLS_", "extra": "ignore", "populate_by_name": True}


class HostSettings(BaseSettings):
    """The operating-system user that owns keys, manifests and kubeconfig."""

    target_user: str = Field(default_factory=current_user, alias="HOST_TARGET_USER")
    home_dir: Path | None = Field(default=None, alias="HOST_HOME_DIR")
    ssh_key_name: str = Field(default="ocp4-aws-key", alias="HOST_SSH_KEY_NAME")
    ssh_key_type: str = Field(default="ed25519", alias="HOST_SSH_KEY_TYPE")

    def resolved_home(self) -> Path:
        if self.home_dir is not None:
            return self.home_dir
        try:
            return Path(pwd.getpwnam(self.target_user).pw_dir)
        except KeyError:
            return Path.home()

    model_config = {"env_prefix": "HOST_", "extra": "ignore", "populate_by_name": True}


class WorkflowSettings(BaseSettings):
    """Operator interaction settings."""

    nameservers_file: Path = Field(default=Path("nameservers.txt"), alias="WORKFLOW_NAMESERVERS_FILE")
    affirmative_answer: str = Field(default="yes", alias="WORKFLOW_AFFIRMATIVE_ANSWER")

    model_config = {"env_prefix": "WORKFLOW_", "extra": "ignore", "populate_by_name": True}


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: LogFormat = Field(default=LogFormat.CONSOLE, alias="LOG_FORMAT")

    model_config = {"env_prefix": "OBS_", "extra": "ignore", "populate_by_name": True}


class Settings(BaseSettings):
    """Main provisioning settings."""

    aws: AwsSettings = Field(default_factory=AwsSettings)
    cluster: ClusterSettings = Field(default_factory=ClusterSettings)
    topology: TopologySettings = Field(default_factory=TopologySettings)
    tools: ToolSettings = Field(default_factory=ToolSettings)
    host: HostSettings = Field(default_factory=HostSettings)
    workflow: WorkflowSettings = Field(default_factory=WorkflowSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @property
    def aws_config_dir(self) -> Path:
        return self.aws.config_dir or self.host.resolved_home() / ".aws"

    @property
    def install_dir(self) -> Path:
        return self.cluster.install_dir or self.host.resolved_home() / "ocp-install"

    @property
    def ssh_dir(self) -> Path:
        return self.host.resolved_home() / ".ssh"

    @property
    def kube_dir(self) -> Path:
        return self.host.resolved_home() / ".kube"

    model_config = {"env_prefix": "OCP_PROVISIONER_", "extra": "ignore", "populate_by_name": True}


@lru_cache
def get_settings() -> Settings:
    """Get cached provisioning settings."""
    return Settings()
