"""Cluster Installer Driver and credential-artifact extraction."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import structlog

from provisioner.domain.exceptions import AccessConfigError, CommandError, InstallerFailedError
from provisioner.domain.models.artifacts import ClusterAccess, InstallationRun
from provisioner.domain.models.cloud import CloudIdentity
from provisioner.domain.ports.services import CommandRunner, OwnershipManager


logger = structlog.get_logger(__name__)

KUBECONFIG_RELPATH = Path("auth") / "kubeconfig"
ADMIN_PASSWORD_RELPATH = Path("auth") / "kubeadmin-password"
KUBE_DIR_MODE = 0o700
KUBECONFIG_MODE = 0o600


class ClusterInstallerDriver:
    """Run ``openshift-install create cluster`` synchronously.

    Only the exit status is inspected. A failure is terminal: partial
    bootstrap cannot be resumed by blindly invoking the installer again.
    """

    def __init__(self, runner: CommandRunner, log_level: str = "info") -> None:
        self._runner = runner
        self._log_level = log_level

    def install(self, installer: Path, install_dir: Path, identity: CloudIdentity) -> InstallationRun:
        command = [
            str(installer),
            "create",
            "cluster",
            f"--dir={install_dir}",
            f"--log-level={self._log_level}",
        ]
        logger.info("cluster_installation_started", install_dir=str(install_dir))
        try:
            return_code = self._runner.run_attached(
                command, env=identity.as_environment(), cwd=install_dir
            )
        except CommandError as exc:
            raise InstallerFailedError(f"Could not start the installer: {exc}") from exc

        run = InstallationRun(
            install_dir=install_dir,
            return_code=return_code,
            kubeconfig_path=install_dir / KUBECONFIG_RELPATH,
            admin_password_path=install_dir / ADMIN_PASSWORD_RELPATH,
        )
        if not run.succeeded:
            logger.error("cluster_installation_failed", return_code=return_code)
            raise InstallerFailedError(f"Cluster installation failed with exit status {return_code}")

        missing = [
            str(path) for path in (run.kubeconfig_path, run.admin_password_path) if not path.is_file()
        ]
        if missing:
            raise InstallerFailedError(
                f"Installer exited 0 but did not produce: {', '.join(missing)}"
            )

        logger.info("cluster_installation_successful", install_dir=str(install_dir))
        return run


class AccessConfigDeployer:
    """Copy the installer's kubeconfig to the target user's per-user location."""

    def __init__(self, ownership: OwnershipManager, kube_dir: Path) -> None:
        self._ownership = ownership
        self._kube_dir = kube_dir

    def deploy(self, run: InstallationRun, *, cluster_name: str, base_domain: str) -> ClusterAccess:
        destination = self._kube_dir / "config"
        try:
            self._kube_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(self._kube_dir, KUBE_DIR_MODE)
            shutil.copyfile(run.kubeconfig_path, destination)
            os.chmod(destination, KUBECONFIG_MODE)
            self._ownership.hand_over(self._kube_dir, recursive=True)
            admin_password = run.admin_password_path.read_text().strip()
        except OSError as exc:
            raise AccessConfigError(f"Cannot deploy kubeconfig to {destination}: {exc}") from exc

        logger.info("kubeconfig_deployed", path=str(destination))
        return ClusterAccess.for_cluster(
            cluster_name=cluster_name,
            base_domain=base_domain,
            kubeconfig_path=destination,
            admin_password=admin_password,
        )
