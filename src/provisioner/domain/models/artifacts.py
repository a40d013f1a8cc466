"""Local artifacts produced and consumed by the install run."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from provisioner.domain.models.base import ValueObject


class CommandResult(ValueObject):
    """Captured outcome of an external binary invocation."""

    command: list[str]
    return_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.return_code == 0


class ToolArchive(ValueObject):
    """One versioned archive on the distribution mirror and the binaries it ships."""

    archive_name: str
    binaries: tuple[str, ...]

    def url(self, mirror_url: str, version: str) -> str:
        return f"{mirror_url.rstrip('/')}/{version}/{self.archive_name}"


def default_archives(version: str) -> tuple[ToolArchive, ...]:
    """Installer and client archives for a pinned release."""
    return (
        ToolArchive(
            archive_name=f"openshift-install-linux-{version}.tar.gz",
            binaries=("openshift-install",),
        ),
        ToolArchive(
            archive_name=f"openshift-client-linux-{version}.tar.gz",
            binaries=("oc", "kubectl"),
        ),
    )


class ToolSet(ValueObject):
    """Installed binaries for a pinned version."""

    version: str
    installer: Path
    binaries: dict[str, Path] = Field(default_factory=dict)
    version_reports: dict[str, str] = Field(default_factory=dict)

    def path_of(self, name: str) -> Path:
        return self.binaries[name]


class SshKeyPair(ValueObject):
    """Node access keypair under the target user's home."""

    private_key_path: Path
    public_key_path: Path
    public_key: str
    generated: bool = False


class InstallManifest(ValueObject):
    """install-config.yaml plus its verbatim backup."""

    path: Path
    backup_path: Path
    digest: str
    size: int


class InstallationRun(ValueObject):
    """Terminal result of the installer process."""

    install_dir: Path
    return_code: int
    kubeconfig_path: Path
    admin_password_path: Path

    @property
    def succeeded(self) -> bool:
        return self.return_code == 0


class ClusterAccess(ValueObject):
    """Hand-off information printed once the install run succeeds."""

    console_url: str
    api_url: str
    kubeconfig_path: Path
    admin_username: str = "kubeadmin"
    admin_password: str = Field(default="", repr=False)

    @classmethod
    def for_cluster(
        cls,
        cluster_name: str,
        base_domain: str,
        kubeconfig_path: Path,
        admin_password: str,
    ) -> ClusterAccess:
        return cls(
            console_url=f"https://console-openshift-console.apps.{cluster_name}.{base_domain}",
            api_url=f"https://api.{cluster_name}.{base_domain}:6443",
            kubeconfig_path=kubeconfig_path,
            admin_password=admin_password,
        )
