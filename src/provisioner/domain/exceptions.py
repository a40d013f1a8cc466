"""Failure taxonomy for the provisioning workflow.

Every stage failure is fatal: the workflow records it, stops, and the CLI
exits with the ``exit_code`` of the raised category.
"""

from __future__ import annotations


class ProvisioningError(Exception):
    """Base class for fatal stage failures."""

    exit_code: int = 1


class AuthenticationError(ProvisioningError):
    """Credentials are missing, unusable, or rejected by the identity probe."""

    exit_code = 2


class ResourceStateError(ProvisioningError):
    """A required external resource (the hosted zone) does not exist."""

    exit_code = 3


class ConfirmationRefusedError(ProvisioningError):
    """The operator did not acknowledge the registrar delegation."""

    exit_code = 4


class ToolAcquisitionError(ProvisioningError):
    """Download, extraction, installation or version check of a binary failed."""

    exit_code = 5


class KeyProvisioningError(ProvisioningError):
    """The SSH keypair could not be created or read."""

    exit_code = 6


class ManifestGenerationError(ProvisioningError):
    """The installation manifest or its backup could not be produced."""

    exit_code = 7


class InstallerFailedError(ProvisioningError):
    """The installer binary exited non-zero or left no credential artifacts."""

    exit_code = 8


class AccessConfigError(ProvisioningError):
    """The cluster access config could not be handed to the target user."""

    exit_code = 9


class ZoneProvisioningError(ProvisioningError):
    """The DNS provider rejected a zone lookup or creation."""

    exit_code = 10


# Adapter-level errors, translated by domain services into the categories above.


class CommandError(Exception):
    """An external binary could not be started or exited with a failing code."""

    def __init__(self, message: str, return_code: int | None = None) -> None:
        super().__init__(message)
        self.return_code = return_code


class DownloadError(Exception):
    """An archive could not be fetched from the distribution mirror."""


class DnsGatewayError(Exception):
    """The DNS provider API returned an error."""


class IdentityProbeError(Exception):
    """The provider's identity endpoint rejected the credentials."""


class NameserverProbeError(Exception):
    """A delegation nameserver could not be queried."""
