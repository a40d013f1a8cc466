"""Credential Configurator."""

from __future__ import annotations

import configparser

import structlog

from provisioner.domain.exceptions import AuthenticationError, IdentityProbeError
from provisioner.domain.models.cloud import CallerIdentity, CloudIdentity
from provisioner.domain.ports.services import CredentialStore, IdentityVerifier


logger = structlog.get_logger(__name__)


def resolve_identity(
    access_key_id: str | None,
    secret_access_key: str | None,
    region: str,
    output_format: str = "json",
    profile: str = "default",
) -> CloudIdentity:
    """Build the explicit credential context, failing fast when a key is missing."""
    if not access_key_id or not secret_access_key:
        raise AuthenticationError(
            "AWS access key id and secret access key are required "
            "(set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY)"
        )
    if not region:
        raise AuthenticationError("An AWS region is required")
    return CloudIdentity(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        region=region,
        output_format=output_format,
        profile=profile,
    )


class CredentialConfigurator:
    """Persists the credential profile and proves it works.

    The identity probe is not retried: a rejected credential will not
    become valid on a second attempt.
    """

    def __init__(self, store: CredentialStore, verifier: IdentityVerifier) -> None:
        self._store = store
        self._verifier = verifier

    def configure(self, identity: CloudIdentity) -> CallerIdentity:
        logger.info("aws_configuration_started", region=identity.region, profile=identity.profile)
        try:
            written = self._store.write(identity)
        except (OSError, configparser.Error) as exc:
            raise AuthenticationError(f"Could not persist credential profile: {exc}") from exc
        logger.info("credential_profile_written", files=[str(p) for p in written])

        try:
            caller = self._verifier.verify(identity)
        except IdentityProbeError as exc:
            raise AuthenticationError(f"AWS authentication failed: {exc}") from exc

        logger.info("aws_authentication_successful", account=caller.account, arn=caller.arn)
        return caller
