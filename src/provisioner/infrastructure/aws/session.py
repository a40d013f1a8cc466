"""boto3 session factory bound to an explicit CloudIdentity."""

from __future__ import annotations

from typing import Any

import boto3

from provisioner.domain.models.cloud import CloudIdentity


def create_session(identity: CloudIdentity) -> boto3.session.Session:
    """Session built from the resolved credentials, never from ambient environment."""
    return boto3.session.Session(
        aws_access_key_id=identity.access_key_id,
        aws_secret_access_key=identity.secret_access_key.get_secret_value(),
        region_name=identity.region,
    )


def create_client(identity: CloudIdentity, service_name: str) -> Any:
    return create_session(identity).client(service_name)
