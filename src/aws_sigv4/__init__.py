# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""AWS SigV4 provides stand-alone request signing and presigning for use with HTTP
tools such as AioHTTP, Curl, Requests, urllib3, etc."""

from ._http import Headers, HTTPRequest, SignedHTTPRequest
from ._identity import AWSCredentialIdentity
from .config import (
    DEFAULT_SIGNING_POLICY,
    S3_SIGNING_POLICY,
    AWSConfig,
    ServiceSigningPolicy,
)
from .endpoint import Endpoint
from .exceptions import (
    AWSSDKWarning,
    BaseAWSSDKException,
    ErrorKind,
    InvalidConfigurationError,
    InvalidSignatureError,
    MalformedHeadersError,
)
from .signers import PresignOptions, SigningOptions, SigV4Signer

__license__ = "Apache-2.0"
__version__ = "0.1.0"

__all__ = (
    "DEFAULT_SIGNING_POLICY",
    "S3_SIGNING_POLICY",
    "AWSConfig",
    "AWSCredentialIdentity",
    "AWSSDKWarning",
    "BaseAWSSDKException",
    "Endpoint",
    "ErrorKind",
    "HTTPRequest",
    "Headers",
    "InvalidConfigurationError",
    "InvalidSignatureError",
    "MalformedHeadersError",
    "PresignOptions",
    "ServiceSigningPolicy",
    "SigV4Signer",
    "SignedHTTPRequest",
    "SigningOptions",
)
