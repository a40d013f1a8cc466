"""Shared credentials/config files, as read by the AWS CLI and SDKs."""

from __future__ import annotations

import configparser
import os
from pathlib import Path

import structlog

from provisioner.domain.models.cloud import CloudIdentity
from provisioner.domain.ports.services import CredentialStore, OwnershipManager


logger = structlog.get_logger(__name__)

CONFIG_DIR_MODE = 0o700
CREDENTIAL_FILE_MODE = 0o600


class FileCredentialStore(CredentialStore):
    """Writes ``credentials`` and ``config`` under the target user's ``.aws`` directory.

    Existing profiles in either file are preserved; only the identity's
    profile section is replaced.
    """

    def __init__(self, config_dir: Path, ownership: OwnershipManager | None = None) -> None:
        self._config_dir = config_dir
        self._ownership = ownership

    @property
    def credentials_path(self) -> Path:
        return self._config_dir / "credentials"

    @property
    def config_path(self) -> Path:
        return self._config_dir / "config"

    def write(self, identity: CloudIdentity) -> list[Path]:
        self._config_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(self._config_dir, CONFIG_DIR_MODE)

        self._merge(self.credentials_path, identity.profile, {
            "aws_access_key_id": identity.access_key_id,
            "aws_secret_access_key": identity.secret_access_key.get_secret_value(),
        })
        # The config file names non-default profiles "profile <name>".
        config_section = (
            identity.profile if identity.profile == "default" else f"profile {identity.profile}"
        )
        self._merge(self.config_path, config_section, {
            "region": identity.region,
            "output": identity.output_format,
        })

        if self._ownership is not None:
            self._ownership.hand_over(self._config_dir, recursive=True)
        return [self.credentials_path, self.config_path]

    @staticmethod
    def _merge(path: Path, section: str, values: dict[str, str]) -> None:
        parser = configparser.ConfigParser(interpolation=None)
        if path.exists():
            parser.read(path)
        if parser.has_section(section):
            parser.remove_section(section)
        parser[section] = values

        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CREDENTIAL_FILE_MODE)
        with os.fdopen(fd, "w") as handle:
            parser.write(handle)
        os.chmod(path, CREDENTIAL_FILE_MODE)
        logger.debug("credential_file_written", path=str(path), section=section)
