# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Pure functions producing the canonical text forms hashed by Signature Version 4.

None of these functions read the clock or mutate their arguments.
"""

from collections.abc import Mapping, Set
from dataclasses import dataclass
from hashlib import sha256
from urllib.parse import quote, unquote

from ._http import Body, QueryValue
from .constants import (
    ALWAYS_UNSIGNABLE_HEADERS,
    AMZ_CONTENT_SHA256_HEADER,
    AMZ_SIGNATURE_HEADER,
    EMPTY_SHA256_HASH,
    UNSIGNED_PAYLOAD,
)
from .exceptions import MalformedHeadersError


@dataclass(kw_only=True, frozen=True)
class UriEscapePolicy:
    """How a request path is percent-encoded in the canonical request.

    Only two combinations are exercised against AWS: the default, applied to paths
    that are already encoded on the wire, and no escaping at all for S3. Other
    combinations are available but unverified.
    """

    double: bool = False
    """Percent-encode the normalized path a second time."""

    path: bool = True
    """Leave forward slashes unescaped."""


def uri_escape(value: str, *, path: bool = False) -> str:
    """Percent-encode every UTF-8 byte of ``value`` outside of ``A-Za-z0-9-._~``.

    :param value: The string to encode.
    :param path: Whether forward slashes are left unescaped.
    """
    return quote(value, safe="/" if path else "")


def normalize_path(path: str) -> str:
    """Remove empty and dot segments from ``path``.

    ``..`` removes the preceding segment but never climbs above the root. Leading
    and trailing slashes are kept when the input has them.
    """
    segments: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
        else:
            segments.append(segment)

    leading = "/" if path.startswith("/") else ""
    trailing = "/" if segments and path.endswith("/") else ""
    return f"{leading}{'/'.join(segments)}{trailing}"


def compute_canonical_uri(path: str, policy: UriEscapePolicy) -> str:
    """Normalize and percent-encode the path component of a request.

    :param path: The request path, everything between the host and ``?``.
    :param policy: The escaping to apply after normalization.
    """
    if path == "/":
        return path

    canonical = uri_escape(normalize_path(path), path=policy.path)
    if policy.double:
        canonical = uri_escape(canonical, path=policy.path)
    return canonical


def _serialize_pairs(query: Mapping[str, QueryValue], exclude: Set[str]) -> str:
    pairs: list[str] = []
    for key in sorted(query):
        if key.lower() in exclude:
            continue
        value = query[key]
        values = [value] if isinstance(value, str) else sorted(value)
        escaped_key = uri_escape(key)
        pairs.extend(f"{escaped_key}={uri_escape(val)}" for val in values)
    return "&".join(pairs)


def compute_canonical_querystring(query: Mapping[str, QueryValue] | None) -> str:
    """Serialize the query parameters in their canonical form.

    Keys are sorted, the values of a repeated key are sorted, and the
    ``X-Amz-Signature`` parameter is left out.
    """
    if not query:
        return ""
    return _serialize_pairs(query, exclude={AMZ_SIGNATURE_HEADER})


def serialize_query_parameters(query: Mapping[str, QueryValue] | None) -> str:
    """Serialize the query parameters for a URL, ordered as in the canonical form."""
    if not query:
        return ""
    return _serialize_pairs(query, exclude=frozenset())


def parse_query_string(qs: str) -> dict[str, QueryValue]:
    """Parse ``qs`` into a mapping suitable for :py:attr:`HTTPRequest.query`.

    Keys and values are percent-decoded. A key without ``=`` maps to the empty
    string and a repeated key maps to the list of its values, in order.
    """
    result: dict[str, QueryValue] = {}
    for part in qs.split("&"):
        if not part:
            continue
        key, _, value = part.partition("=")
        key, value = unquote(key), unquote(value)
        if key not in result:
            result[key] = value
            continue
        existing = result[key]
        if isinstance(existing, str):
            result[key] = [existing, value]
        else:
            existing.append(value)
    return result


def compute_canonical_headers(
    headers: Mapping[str, str | None],
    unsignable_headers: Set[str] = frozenset(),
    signable_headers: Set[str] = frozenset(),
) -> dict[str, str]:
    """Select and normalize the headers included in the signature.

    Header names are lower-cased and values have surrounding whitespace removed and
    inner runs of whitespace collapsed to a single space. Headers that are always
    unsignable, or listed in ``unsignable_headers``, are dropped unless they also
    appear in ``signable_headers``.

    :returns: The selected headers, sorted by name.
    """
    canonical: dict[str, str] = {}
    for name, value in headers.items():
        if value is None:
            continue
        canonical_name = name.lower()
        if (
            canonical_name in ALWAYS_UNSIGNABLE_HEADERS
            or canonical_name in unsignable_headers
        ) and canonical_name not in signable_headers:
            continue
        canonical[canonical_name] = " ".join(value.split())
    return dict(sorted(canonical.items()))


def format_canonical_headers(canonical_headers: Mapping[str, str]) -> str:
    return "".join(f"{name}:{value}\n" for name, value in canonical_headers.items())


def create_signed_headers(canonical_headers: Mapping[str, str]) -> str:
    """Join the names of the signed headers, sorted, with ``;``.

    :raises MalformedHeadersError: If there is no header to sign.
    """
    if not canonical_headers:
        raise MalformedHeadersError(
            "Headers should at least contain either the host (HTTP/1.1) or "
            ":authority (HTTP/2) header."
        )
    return ";".join(sorted(canonical_headers))


def compute_payload_hash(headers: Mapping[str, str], body: Body) -> str:
    """Hash the request payload.

    An explicit ``x-amz-content-sha256`` header takes precedence, which allows
    sending ``UNSIGNED-PAYLOAD`` or a precomputed checksum. Bodies that are not held
    in memory, such as streams, are not read and are reported as unsigned.
    """
    for name, value in headers.items():
        if name.lower() == AMZ_CONTENT_SHA256_HEADER and value:
            return value

    if body is None:
        return EMPTY_SHA256_HASH
    if isinstance(body, str):
        return sha256(body.encode("utf-8")).hexdigest()
    if isinstance(body, bytes | bytearray | memoryview):
        return sha256(body).hexdigest()
    return UNSIGNED_PAYLOAD


def create_canonical_request(
    *,
    method: str,
    canonical_uri: str,
    canonical_query: str,
    canonical_headers: Mapping[str, str],
    payload_hash: str,
) -> str:
    """The canonical request is a standardized string laying out the components used
    in the SigV4 signing algorithm. This is useful to quickly compare inputs to find
    signature mismatches and unintended variances.

    The SigV4 specification defines the canonical request to be:
        <HTTPMethod>\\n
        <CanonicalURI>\\n
        <CanonicalQueryString>\\n
        <CanonicalHeaders>\\n
        <SignedHeaders>\\n
        <HashedPayload>
    """
    return (
        f"{method.upper()}\n"
        f"{canonical_uri}\n"
        f"{canonical_query}\n"
        f"{format_canonical_headers(canonical_headers)}\n"
        f"{create_signed_headers(canonical_headers)}\n"
        f"{payload_hash}"
    )
