"""STS identity probe."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from provisioner.domain.exceptions import IdentityProbeError
from provisioner.domain.models.cloud import CallerIdentity, CloudIdentity
from provisioner.domain.ports.services import IdentityVerifier
from provisioner.infrastructure.aws.session import create_client


logger = structlog.get_logger(__name__)


class StsIdentityVerifier(IdentityVerifier):
    """Calls ``sts:GetCallerIdentity``, which needs no IAM permissions."""

    def __init__(
        self, client_factory: Callable[[CloudIdentity, str], Any] = create_client
    ) -> None:
        self._client_factory = client_factory

    def verify(self, identity: CloudIdentity) -> CallerIdentity:
        try:
            response = self._client_factory(identity, "sts").get_caller_identity()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "Unknown")
            logger.error("sts_identity_rejected", error_code=code)
            raise IdentityProbeError(f"{code}: {exc}") from exc
        except BotoCoreError as exc:
            raise IdentityProbeError(str(exc)) from exc

        return CallerIdentity(
            account=response["Account"],
            arn=response["Arn"],
            user_id=response.get("UserId", ""),
        )
