"""Key Provisioner."""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from provisioner.domain.exceptions import CommandError, KeyProvisioningError
from provisioner.domain.models.artifacts import SshKeyPair
from provisioner.domain.ports.services import CommandRunner, OwnershipManager


logger = structlog.get_logger(__name__)

SSH_DIR_MODE = 0o700
PRIVATE_KEY_MODE = 0o600
PUBLIC_KEY_MODE = 0o644


class KeyProvisioner:
    """Ensure a passphrase-less node access keypair exists.

    An existing private key is never regenerated, which also reuses a key
    left behind by an aborted earlier run.
    """

    def __init__(
        self,
        runner: CommandRunner,
        ownership: OwnershipManager,
        ssh_dir: Path,
        key_name: str = "ocp4-aws-key",
        key_type: str = "ed25519",
    ) -> None:
        self._runner = runner
        self._ownership = ownership
        self._ssh_dir = ssh_dir
        self._key_type = key_type
        self._private_key = ssh_dir / key_name
        self._public_key = ssh_dir / f"{key_name}.pub"

    def ensure_keypair(self) -> SshKeyPair:
        try:
            self._ssh_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(self._ssh_dir, SSH_DIR_MODE)
        except OSError as exc:
            raise KeyProvisioningError(f"Cannot prepare {self._ssh_dir}: {exc}") from exc

        generated = False
        if self._private_key.exists():
            logger.info("ssh_key_exists", path=str(self._private_key))
            if not self._public_key.exists():
                self._derive_public_key()
        else:
            self._generate()
            generated = True

        try:
            os.chmod(self._private_key, PRIVATE_KEY_MODE)
            os.chmod(self._public_key, PUBLIC_KEY_MODE)
            self._ownership.hand_over(self._ssh_dir, recursive=True)
            public_key = self._public_key.read_text().strip()
        except OSError as exc:
            raise KeyProvisioningError(f"Cannot secure SSH key material: {exc}") from exc

        if not public_key:
            raise KeyProvisioningError(f"{self._public_key} is empty")

        return SshKeyPair(
            private_key_path=self._private_key,
            public_key_path=self._public_key,
            public_key=public_key,
            generated=generated,
        )

    def _generate(self) -> None:
        logger.info("generating_ssh_key", path=str(self._private_key), key_type=self._key_type)
        try:
            self._runner.run([
                "ssh-keygen", "-t", self._key_type, "-N", "", "-q",
                "-f", str(self._private_key),
            ])
        except CommandError as exc:
            raise KeyProvisioningError(f"SSH key generation failed: {exc}") from exc
        if not self._private_key.exists() or not self._public_key.exists():
            raise KeyProvisioningError(f"ssh-keygen did not produce {self._private_key}")
        logger.info("ssh_key_generation_successful", path=str(self._private_key))

    def _derive_public_key(self) -> None:
        logger.warning("ssh_public_key_missing", path=str(self._public_key))
        try:
            result = self._runner.run(["ssh-keygen", "-y", "-f", str(self._private_key)])
            self._public_key.write_text(result.stdout.strip() + "\n")
        except (CommandError, OSError) as exc:
            raise KeyProvisioningError(f"Cannot derive public key: {exc}") from exc
