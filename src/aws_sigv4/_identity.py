# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass

from .exceptions import InvalidConfigurationError
from .interfaces.identity import AWSCredentialsIdentity


@dataclass(kw_only=True, frozen=True)
class AWSCredentialIdentity(AWSCredentialsIdentity):
    access_key_id: str
    secret_access_key: str
    session_token: str | None = None

    def __post_init__(self) -> None:
        if not self.access_key_id:
            raise InvalidConfigurationError(
                "invalid AWS access key ID; reason: should be a non empty string"
            )
        if not self.secret_access_key:
            raise InvalidConfigurationError(
                "invalid AWS secret access key; reason: should be a non empty string"
            )

    def __repr__(self) -> str:
        # Never render the secret or the session token.
        return f"AWSCredentialIdentity(access_key_id={self.access_key_id!r})"
