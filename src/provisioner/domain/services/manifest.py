"""Manifest Generator."""

from __future__ import annotations

import hashlib
import json
import os
import shutil
from pathlib import Path
from typing import Any

import structlog
import yaml

from provisioner.config import TopologySettings
from provisioner.domain.exceptions import ManifestGenerationError
from provisioner.domain.models.artifacts import InstallManifest
from provisioner.domain.ports.services import InputProvider, OwnershipManager


logger = structlog.get_logger(__name__)

MANIFEST_NAME = "install-config.yaml"
BACKUP_SUFFIX = ".backup"
INSTALL_DIR_MODE = 0o700
MANIFEST_MODE = 0o600

PULL_SECRET_PROMPT = (
    "Please enter your Red Hat pull secret (paste and press Enter, then Ctrl+D):"
)


def build_install_config(
    topology: TopologySettings,
    *,
    base_domain: str,
    cluster_name: str,
    region: str,
    pull_secret: str,
    ssh_key: str,
) -> dict[str, Any]:
    """Fixed topology plus the five runtime values."""
    return {
        "apiVersion": "v1",
        "baseDomain": base_domain,
        "compute": [
            {
                "architecture": topology.architecture,
                "hyperthreading": topology.hyperthreading,
                "name": "worker",
                "platform": {"aws": {"type": topology.worker_instance_type}},
                "replicas": topology.worker_replicas,
            }
        ],
        "controlPlane": {
            "architecture": topology.architecture,
            "hyperthreading": topology.hyperthreading,
            "name": "master",
            "platform": {"aws": {"type": topology.control_plane_instance_type}},
            "replicas": topology.control_plane_replicas,
        },
        "metadata": {"name": cluster_name},
        "networking": {
            "clusterNetwork": [
                {
                    "cidr": topology.cluster_network_cidr,
                    "hostPrefix": topology.cluster_network_host_prefix,
                }
            ],
            "machineNetwork": [{"cidr": topology.machine_network_cidr}],
            "networkType": topology.network_type,
            "serviceNetwork": [topology.service_network_cidr],
        },
        "platform": {"aws": {"region": region}},
        "pullSecret": pull_secret,
        "sshKey": ssh_key,
    }


def render_install_config(document: dict[str, Any]) -> str:
    # No line folding: secrets must appear on a single line, unchanged.
    return yaml.safe_dump(
        document, sort_keys=False, default_flow_style=False, width=float("inf")
    )


class ManifestGenerator:
    """Render install-config.yaml and back it up before the installer consumes it."""

    def __init__(
        self,
        input_provider: InputProvider,
        ownership: OwnershipManager,
        topology: TopologySettings,
    ) -> None:
        self._input = input_provider
        self._ownership = ownership
        self._topology = topology

    def generate(
        self,
        install_dir: Path,
        *,
        base_domain: str,
        cluster_name: str,
        region: str,
        public_key: str,
    ) -> InstallManifest:
        logger.info("install_config_creation_started", install_dir=str(install_dir))
        try:
            install_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(install_dir, INSTALL_DIR_MODE)
            self._ownership.hand_over(install_dir)
        except OSError as exc:
            raise ManifestGenerationError(f"Cannot prepare {install_dir}: {exc}") from exc

        pull_secret = self._read_pull_secret()
        document = build_install_config(
            self._topology,
            base_domain=base_domain,
            cluster_name=cluster_name,
            region=region,
            pull_secret=pull_secret,
            ssh_key=public_key.strip(),
        )
        content = render_install_config(document).encode("utf-8")

        manifest_path = install_dir / MANIFEST_NAME
        backup_path = install_dir / (MANIFEST_NAME + BACKUP_SUFFIX)
        try:
            _write_private(manifest_path, content)
            shutil.copyfile(manifest_path, backup_path)
            os.chmod(backup_path, MANIFEST_MODE)
            written = manifest_path.read_bytes()
            backup = backup_path.read_bytes()
            self._ownership.hand_over(manifest_path)
            self._ownership.hand_over(backup_path)
        except OSError as exc:
            raise ManifestGenerationError(f"Cannot write {manifest_path}: {exc}") from exc

        if not written:
            raise ManifestGenerationError(f"{manifest_path} is empty")
        if written != backup:
            raise ManifestGenerationError(f"{backup_path} does not match {manifest_path}")

        logger.info(
            "install_config_creation_successful",
            path=str(manifest_path),
            backup=str(backup_path),
        )
        return InstallManifest(
            path=manifest_path,
            backup_path=backup_path,
            digest=hashlib.sha256(written).hexdigest(),
            size=len(written),
        )

    def _read_pull_secret(self) -> str:
        try:
            secret = self._input.read_secret(PULL_SECRET_PROMPT).strip()
        except OSError as exc:
            raise ManifestGenerationError(f"Cannot read the pull secret: {exc}") from exc
        if not secret:
            raise ManifestGenerationError("No pull secret was provided")
        try:
            json.loads(secret)
        except ValueError:
            logger.warning("pull_secret_not_json")
        return secret


def _write_private(path: Path, content: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, MANIFEST_MODE)
    with os.fdopen(fd, "wb") as handle:
        handle.write(content)
    os.chmod(path, MANIFEST_MODE)
