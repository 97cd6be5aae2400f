# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from enum import Enum
from typing import ClassVar


class ErrorKind(Enum):
    """Distinguishes the ways a signing call can fail."""

    INVALID_CONFIGURATION = "invalid_configuration"
    """Credentials or signer configuration were rejected at construction."""

    INVALID_SIGNATURE_REQUEST = "invalid_signature_request"
    """The caller asked for a signature AWS would refuse, e.g. an overlong TTL."""

    MALFORMED_HEADERS = "malformed_headers"
    """The request headers could not be interpreted. This is a programmer error."""


class AWSSDKWarning(UserWarning): ...


class BaseAWSSDKException(Exception):
    """Top-level exception to capture SDK-related errors."""

    kind: ClassVar[ErrorKind]


class InvalidConfigurationError(BaseAWSSDKException, ValueError):
    """Credentials or configuration values are missing or malformed."""

    kind = ErrorKind.INVALID_CONFIGURATION


class InvalidSignatureError(BaseAWSSDKException, ValueError):
    """The requested signature cannot be produced, e.g. presigned URLs that would
    outlive the seven day maximum enforced by AWS."""

    kind = ErrorKind.INVALID_SIGNATURE_REQUEST


class MalformedHeadersError(BaseAWSSDKException, TypeError):
    """Request headers are not a mapping, repeat a name, or leave nothing to sign."""

    kind = ErrorKind.MALFORMED_HEADERS
