# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Validated connection settings for building signers."""

import os
from dataclasses import dataclass
from typing import Final, Self

from ._identity import AWSCredentialIdentity
from .endpoint import Endpoint
from .exceptions import InvalidConfigurationError
from .signers import SigV4Signer

_MIN_KEY_LENGTH: Final = 16
_MAX_KEY_LENGTH: Final = 128


@dataclass(kw_only=True, frozen=True)
class ServiceSigningPolicy:
    """Service-specific signing behavior, applied when creating a signer."""

    uri_escape_path: bool = True
    """Whether the request path is normalized and percent-encoded for signing."""

    apply_checksum: bool = True
    """Whether signed requests carry an ``x-amz-content-sha256`` header."""


DEFAULT_SIGNING_POLICY: Final = ServiceSigningPolicy()

S3_SIGNING_POLICY: Final = ServiceSigningPolicy(uri_escape_path=False)
"""S3 signs object keys exactly as sent."""


def _validate_key(label: str, value: str) -> None:
    if not value:
        raise InvalidConfigurationError(
            f"invalid AWS {label}; reason: should be a non empty string"
        )
    if not _MIN_KEY_LENGTH <= len(value) <= _MAX_KEY_LENGTH:
        raise InvalidConfigurationError(
            f"invalid AWS {label}; reason: size should be between "
            f"{_MIN_KEY_LENGTH} and {_MAX_KEY_LENGTH} characters, got {len(value)}"
        )


@dataclass(kw_only=True)
class AWSConfig:
    """AWS connection information.

    :param region: The AWS region to connect to, e.g. ``us-east-1``.
    :param access_key_id: The access key ID of the user or role.
    :param secret_access_key: The secret access key of the user or role.
    :param session_token: The token of temporary credentials, if any.
    :param endpoint: A custom endpoint, e.g. a local emulator. Services otherwise
        derive their regional endpoint.
    :raises InvalidConfigurationError: If any value is missing or malformed.
    """

    region: str
    access_key_id: str
    secret_access_key: str
    session_token: str | None = None
    endpoint: Endpoint | None = None

    def __post_init__(self) -> None:
        if not self.region:
            raise InvalidConfigurationError(
                "invalid AWS region; reason: should be a non empty string"
            )
        _validate_key("access key ID", self.access_key_id)
        _validate_key("secret access key", self.secret_access_key)
        if isinstance(self.endpoint, str):
            self.endpoint = Endpoint(self.endpoint)

    @classmethod
    def from_environment(cls) -> Self:
        """Read the configuration from the standard AWS environment variables.

        ``AWS_REGION``, ``AWS_ACCESS_KEY_ID`` and ``AWS_SECRET_ACCESS_KEY`` are
        required. ``AWS_SESSION_TOKEN`` and ``AWS_ENDPOINT_URL`` are optional.
        """
        region = os.getenv("AWS_REGION")
        access_key_id = os.getenv("AWS_ACCESS_KEY_ID")
        secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY")
        endpoint_url = os.getenv("AWS_ENDPOINT_URL")

        if region is None or access_key_id is None or secret_access_key is None:
            raise InvalidConfigurationError(
                "AWS_REGION, AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY are required"
            )

        return cls(
            region=region,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=os.getenv("AWS_SESSION_TOKEN") or None,
            endpoint=Endpoint(endpoint_url) if endpoint_url else None,
        )

    @property
    def credentials(self) -> AWSCredentialIdentity:
        return AWSCredentialIdentity(
            access_key_id=self.access_key_id,
            secret_access_key=self.secret_access_key,
            session_token=self.session_token,
        )

    def create_signer(
        self, service: str, *, policy: ServiceSigningPolicy = DEFAULT_SIGNING_POLICY
    ) -> SigV4Signer:
        """Build a signer for ``service`` in the configured region."""
        return SigV4Signer(
            service=service,
            region=self.region,
            credentials=self.credentials,
            uri_escape_path=policy.uri_escape_path,
            apply_checksum=policy.apply_checksum,
        )

    def __repr__(self) -> str:
        return (
            f"AWSConfig(region={self.region!r}, "
            f"access_key_id={self.access_key_id!r}, endpoint={self.endpoint!r})"
        )
