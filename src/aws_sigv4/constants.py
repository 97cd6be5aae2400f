# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Wire vocabulary of the AWS Signature Version 4 protocol."""

from typing import Final

# Query parameter names, as sent in presigned URLs.
AMZ_ALGORITHM_QUERY_PARAM: Final = "X-Amz-Algorithm"
AMZ_CREDENTIAL_QUERY_PARAM: Final = "X-Amz-Credential"
AMZ_DATE_QUERY_PARAM: Final = "X-Amz-Date"
AMZ_EXPIRES_QUERY_PARAM: Final = "X-Amz-Expires"
AMZ_SIGNATURE_QUERY_PARAM: Final = "X-Amz-Signature"
AMZ_SIGNED_HEADERS_QUERY_PARAM: Final = "X-Amz-SignedHeaders"
AMZ_TOKEN_QUERY_PARAM: Final = "X-Amz-Security-Token"

# Header names. Matching is case-insensitive, these are the canonical forms.
AMZ_CONTENT_SHA256_HEADER: Final = "x-amz-content-sha256"
AMZ_DATE_HEADER: Final = AMZ_DATE_QUERY_PARAM.lower()
AMZ_SIGNATURE_HEADER: Final = AMZ_SIGNATURE_QUERY_PARAM.lower()
AMZ_TOKEN_HEADER: Final = AMZ_TOKEN_QUERY_PARAM.lower()
AUTHORIZATION_HEADER: Final = "authorization"
DATE_HEADER: Final = "date"
HOST_HEADER: Final = "host"

AMZ_HEADER_PREFIX: Final = "x-amz-"

GENERATED_HEADERS: Final[frozenset[str]] = frozenset(
    (AUTHORIZATION_HEADER, AMZ_DATE_HEADER, DATE_HEADER)
)
"""Headers computed by the signer; caller supplied values are discarded."""

ALWAYS_UNSIGNABLE_HEADERS: Final[frozenset[str]] = frozenset(
    (
        "authorization",
        "cache-control",
        "connection",
        "expect",
        "from",
        "keep-alive",
        "max-forwards",
        "pragma",
        "referer",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "user-agent",
        "x-amzn-trace-id",
    )
)
"""Headers excluded from signing unless explicitly listed as signable."""

KEY_TYPE_IDENTIFIER: Final = "aws4_request"
SIGNING_ALGORITHM_IDENTIFIER: Final = "AWS4-HMAC-SHA256"
SIGV4_TIMESTAMP_FORMAT: Final = "%Y%m%dT%H%M%SZ"

UNSIGNED_PAYLOAD: Final = "UNSIGNED-PAYLOAD"
EMPTY_SHA256_HASH: Final = (
    "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
)

MAX_PRESIGNED_TTL: Final = 60 * 60 * 24 * 7
"""Seven days, the longest validity AWS accepts for a presigned URL."""

DEFAULT_PRESIGNED_TTL: Final = 3600

DEFAULT_PROTOCOL: Final = "https"
