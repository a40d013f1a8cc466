"""Unit tests for the Key Provisioner."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest
from conftest import DERIVED_PUBLIC_KEY, FakeCommandRunner, GENERATED_PUBLIC_KEY

from provisioner.domain.exceptions import KeyProvisioningError
from provisioner.domain.services.keys import KeyProvisioner
from provisioner.infrastructure.system.ownership import NullOwnershipManager


@pytest.fixture
def ssh_dir(tmp_path: Path) -> Path:
    return tmp_path / ".ssh"


def mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


class TestKeyProvisioner:
    def test_generates_when_absent(
        self, command_runner: FakeCommandRunner, ownership: NullOwnershipManager, ssh_dir: Path
    ) -> None:
        keypair = KeyProvisioner(command_runner, ownership, ssh_dir).ensure_keypair()

        assert keypair.generated
        assert keypair.public_key == GENERATED_PUBLIC_KEY
        assert keypair.private_key_path == ssh_dir / "ocp4-aws-key"
        assert command_runner.calls[0][:3] == ["ssh-keygen", "-t", "ed25519"]
        assert "-N" in command_runner.calls[0]
        assert mode(ssh_dir) == 0o700
        assert mode(keypair.private_key_path) == 0o600
        assert mode(keypair.public_key_path) == 0o644
        assert ownership.handed_over == [ssh_dir]

    def test_existing_key_untouched(
        self, command_runner: FakeCommandRunner, ownership: NullOwnershipManager, ssh_dir: Path
    ) -> None:
        ssh_dir.mkdir()
        private = ssh_dir / "ocp4-aws-key"
        private.write_bytes(b"existing private key bytes")
        (ssh_dir / "ocp4-aws-key.pub").write_text("ssh-ed25519 AAAAexisting\n")

        keypair = KeyProvisioner(command_runner, ownership, ssh_dir).ensure_keypair()

        assert not keypair.generated
        assert private.read_bytes() == b"existing private key bytes"
        assert keypair.public_key == "ssh-ed25519 AAAAexisting"
        assert command_runner.calls == []
        assert mode(private) == 0o600

    def test_idempotent_across_runs(
        self, command_runner: FakeCommandRunner, ownership: NullOwnershipManager, ssh_dir: Path
    ) -> None:
        provisioner = KeyProvisioner(command_runner, ownership, ssh_dir)
        first = provisioner.ensure_keypair()
        before = first.private_key_path.read_bytes()
        second = provisioner.ensure_keypair()

        assert second.private_key_path.read_bytes() == before
        assert not second.generated
        assert command_runner.programs().count("ssh-keygen") == 1

    def test_derives_missing_public_key(
        self, command_runner: FakeCommandRunner, ownership: NullOwnershipManager, ssh_dir: Path
    ) -> None:
        ssh_dir.mkdir()
        (ssh_dir / "ocp4-aws-key").write_bytes(b"existing private key bytes")

        keypair = KeyProvisioner(command_runner, ownership, ssh_dir).ensure_keypair()

        assert keypair.public_key == DERIVED_PUBLIC_KEY
        assert "-y" in command_runner.calls[0]
        assert (ssh_dir / "ocp4-aws-key").read_bytes() == b"existing private key bytes"

    def test_keygen_failure(
        self, command_runner: FakeCommandRunner, ownership: NullOwnershipManager, ssh_dir: Path
    ) -> None:
        command_runner.failing_programs = {"ssh-keygen": 1}
        with pytest.raises(KeyProvisioningError, match="generation failed"):
            KeyProvisioner(command_runner, ownership, ssh_dir).ensure_keypair()

    def test_custom_name_and_type(
        self, command_runner: FakeCommandRunner, ownership: NullOwnershipManager, ssh_dir: Path
    ) -> None:
        keypair = KeyProvisioner(
            command_runner, ownership, ssh_dir, key_name="lab", key_type="rsa"
        ).ensure_keypair()
        assert keypair.public_key_path == ssh_dir / "lab.pub"
        assert command_runner.calls[0][2] == "rsa"
