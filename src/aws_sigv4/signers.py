# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import datetime
import hmac
import logging
import warnings
from collections.abc import Iterable
from copy import deepcopy
from dataclasses import dataclass
from hashlib import sha256
from typing import Final, TypeAlias, TypedDict

from ._http import Headers, HTTPRequest, QueryValue, SignedHTTPRequest
from .canonical import (
    UriEscapePolicy,
    compute_canonical_headers,
    compute_canonical_querystring,
    compute_canonical_uri,
    compute_payload_hash,
    create_canonical_request,
    create_signed_headers,
    serialize_query_parameters,
)
from .constants import (
    AMZ_ALGORITHM_QUERY_PARAM,
    AMZ_CONTENT_SHA256_HEADER,
    AMZ_CREDENTIAL_QUERY_PARAM,
    AMZ_DATE_HEADER,
    AMZ_DATE_QUERY_PARAM,
    AMZ_EXPIRES_QUERY_PARAM,
    AMZ_HEADER_PREFIX,
    AMZ_SIGNATURE_QUERY_PARAM,
    AMZ_SIGNED_HEADERS_QUERY_PARAM,
    AMZ_TOKEN_HEADER,
    AMZ_TOKEN_QUERY_PARAM,
    AUTHORIZATION_HEADER,
    DEFAULT_PRESIGNED_TTL,
    GENERATED_HEADERS,
    HOST_HEADER,
    KEY_TYPE_IDENTIFIER,
    MAX_PRESIGNED_TTL,
    SIGNING_ALGORITHM_IDENTIFIER,
    SIGV4_TIMESTAMP_FORMAT,
)
from .endpoint import Endpoint
from .exceptions import (
    AWSSDKWarning,
    InvalidConfigurationError,
    InvalidSignatureError,
)
from .interfaces.identity import AWSCredentialsIdentity

logger: Final = logging.getLogger(__name__)

SigningDate: TypeAlias = datetime.datetime | int | float | str
"""A point in time: a datetime, seconds since the POSIX epoch, or a string holding
either seconds or an ISO-8601 timestamp."""

_PATH_ESCAPE_POLICY: Final = UriEscapePolicy(double=False, path=True)


class SigningOptions(TypedDict, total=False):
    """Per-call overrides for :py:meth:`SigV4Signer.sign`."""

    signing_date: SigningDate
    """When the request is signed. Defaults to the current time."""

    unsignable_headers: Iterable[str]
    """Header names to leave out of the signature."""

    signable_headers: Iterable[str]
    """Header names to sign even when they would otherwise be left out."""

    signing_service: str
    """Overrides the service name configured on the signer."""

    signing_region: str
    """Overrides the region configured on the signer."""


class PresignOptions(SigningOptions, total=False):
    """Per-call overrides for :py:meth:`SigV4Signer.presign`."""

    expires_in: int
    """Seconds the presigned URL remains valid. Defaults to one hour."""

    unhoistable_headers: Iterable[str]
    """``x-amz-*`` header names to keep as signed headers rather than moving them
    into the query string."""


@dataclass(kw_only=True, frozen=True)
class _ResolvedOptions:
    long_date: str
    short_date: str
    service: str
    region: str
    unsignable_headers: frozenset[str]
    signable_headers: frozenset[str]
    expires_in: int = DEFAULT_PRESIGNED_TTL
    unhoistable_headers: frozenset[str] = frozenset()


def _parse_date(when: str) -> datetime.datetime | float:
    try:
        return float(when)
    except ValueError:
        pass
    try:
        return datetime.datetime.fromisoformat(when)
    except ValueError:
        raise InvalidSignatureError(
            f"Received invalid signing date {when!r}. Expected seconds since the "
            "epoch or an ISO-8601 timestamp."
        ) from None


def _to_utc(when: SigningDate, stacklevel: int) -> datetime.datetime:
    if isinstance(when, str):
        when = _parse_date(when)
    if isinstance(when, datetime.datetime):
        if when.tzinfo is None:
            warnings.warn(
                f"Received a naive signing date {when.isoformat()}, which will be "
                "treated as UTC. Pass a timezone-aware datetime to remove "
                "this warning.",
                AWSSDKWarning,
                stacklevel=stacklevel,
            )
            return when.replace(tzinfo=datetime.UTC)
        return when.astimezone(datetime.UTC)
    return datetime.datetime.fromtimestamp(when, datetime.UTC)


def _format_date(when: SigningDate, stacklevel: int) -> tuple[str, str]:
    long_date = _to_utc(when, stacklevel + 1).strftime(SIGV4_TIMESTAMP_FORMAT)
    return long_date, long_date[:8]


def format_date(when: SigningDate) -> tuple[str, str]:
    """Format a signing date as the SigV4 long date and short date.

    :param when: A datetime, seconds since the POSIX epoch, or a string holding
        either seconds or an ISO-8601 timestamp. Naive datetimes are treated as
        UTC.
    :returns: ``(YYYYMMDDTHHMMSSZ, YYYYMMDD)``, both in UTC.
    :raises InvalidSignatureError: If a string date cannot be parsed.
    """
    return _format_date(when, stacklevel=3)


def create_credential_scope(short_date: str, region: str, service: str) -> str:
    # Scope format: <YYYYMMDD>/<AWS Region>/<AWS Service>/aws4_request
    return f"{short_date}/{region}/{service}/{KEY_TYPE_IDENTIFIER}"


def _hmac(key: bytes, value: str) -> bytes:
    return hmac.new(key=key, msg=value.encode(), digestmod=sha256).digest()


def derive_signing_key(
    secret_access_key: str, short_date: str, region: str, service: str
) -> bytes:
    """Derive the key scoped to a single day, region and service.

    In SigV4 the secret is never used directly. The date, region, service and key
    type identifier are individually hashed, each keyed with the previous result.
    """

    # Components of Signing Key Calculation
    #
    # DateKey              = HMAC-SHA256("AWS4"+"<SecretAccessKey>", "<YYYYMMDD>")
    # DateRegionKey        = HMAC-SHA256(<DateKey>, "<aws-region>")
    # DateRegionServiceKey = HMAC-SHA256(<DateRegionKey>, "<aws-service>")
    # SigningKey = HMAC-SHA256(<DateRegionServiceKey>, "aws4_request")
    k_date = _hmac(f"AWS4{secret_access_key}".encode(), short_date)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, KEY_TYPE_IDENTIFIER)


def create_string_to_sign(
    long_date: str, credential_scope: str, canonical_request: str
) -> str:
    """The string to sign is the second step of our signing algorithm which
    concatenates the formal identifier of our signing algorithm, the signing
    DateTime, the scope of our credentials, and a hash of our previously generated
    canonical request. This is another checkpoint that can be used to ensure we're
    constructing our signature as intended.

    The SigV4 specification defines the string to sign as:
        Algorithm \\n
        RequestDateTime \\n
        CredentialScope  \\n
        HashedCanonicalRequest
    """
    return (
        f"{SIGNING_ALGORITHM_IDENTIFIER}\n"
        f"{long_date}\n"
        f"{credential_scope}\n"
        f"{sha256(canonical_request.encode()).hexdigest()}"
    )


def calculate_signature(signing_key: bytes, string_to_sign: str) -> str:
    return _hmac(signing_key, string_to_sign).hex()


def _compose_url(endpoint: Endpoint, path: str, query: dict[str, QueryValue]) -> str:
    url = endpoint.href
    if not url.endswith("/") and not path.startswith("/"):
        url += "/"
    url += path
    if serialized := serialize_query_parameters(query):
        url += f"?{serialized}"
    return url


class SigV4Signer:
    """Request signer for applying the AWS Signature Version 4 algorithm.

    A signer holds no state beyond its configuration and may be shared across
    threads for the lifetime of the client that owns it.
    """

    def __init__(
        self,
        *,
        service: str,
        region: str,
        credentials: AWSCredentialsIdentity,
        uri_escape_path: bool = True,
        apply_checksum: bool = True,
    ):
        """Construct a SigV4Signer.

        :param service: The signing name of the target service, e.g. ``sqs``.
        :param region: The region requests are scoped to, e.g. ``us-east-1``.
        :param credentials: The AWS identity signing requests.
        :param uri_escape_path: Whether to normalize and percent-encode the path in
            the canonical request. Every service except S3 expects this.
        :param apply_checksum: Whether :py:meth:`sign` adds an
            ``x-amz-content-sha256`` header with the payload hash.
        :raises InvalidConfigurationError: If ``credentials`` is not an AWS
            credentials identity.
        """
        if not isinstance(credentials, AWSCredentialsIdentity):  # pyright: ignore
            raise InvalidConfigurationError(
                "Received unexpected value for credentials parameter. Expected "
                f"AWSCredentialIdentity but received {type(credentials)}."
            )
        self._service = service
        self._region = region
        self._credentials = credentials
        self._uri_escape_path = uri_escape_path
        self._apply_checksum = apply_checksum

    @property
    def service(self) -> str:
        return self._service

    @property
    def region(self) -> str:
        return self._region

    @property
    def credentials(self) -> AWSCredentialsIdentity:
        return self._credentials

    @property
    def uri_escape_path(self) -> bool:
        return self._uri_escape_path

    @property
    def apply_checksum(self) -> bool:
        return self._apply_checksum

    def sign(
        self, request: HTTPRequest, options: SigningOptions | None = None
    ) -> SignedHTTPRequest:
        """Sign ``request`` with an ``Authorization`` header.

        The request is updated in place with the ``host``, ``x-amz-date``,
        ``x-amz-security-token``, ``x-amz-content-sha256`` and ``authorization``
        headers that are needed to send it.

        :param request: The request to sign.
        :param options: Per-call overrides of the signing date, header selection,
            service and region.
        :returns: The signed request along with the URL to send it to.
        """
        resolved = self._resolve_options(options or {})
        headers = request.headers

        if HOST_HEADER not in headers:
            headers[HOST_HEADER] = request.endpoint.hostname
        for name in GENERATED_HEADERS:
            headers.pop(name, None)
        headers[AMZ_DATE_HEADER] = resolved.long_date
        if self._credentials.session_token:
            headers[AMZ_TOKEN_HEADER] = self._credentials.session_token

        if isinstance(request.body, memoryview):
            request.body = bytes(request.body)
        elif request.body is None:
            request.body = ""

        _discard_empty_checksum(headers)
        payload_hash = compute_payload_hash(headers, request.body)
        if self._apply_checksum and AMZ_CONTENT_SHA256_HEADER not in headers:
            headers[AMZ_CONTENT_SHA256_HEADER] = payload_hash

        canonical_headers = compute_canonical_headers(
            headers, resolved.unsignable_headers, resolved.signable_headers
        )
        signature = self._signature(
            request=request,
            query=request.query,
            canonical_headers=canonical_headers,
            payload_hash=payload_hash,
            resolved=resolved,
        )

        scope = create_credential_scope(
            resolved.short_date, resolved.region, resolved.service
        )
        headers[AUTHORIZATION_HEADER] = self.generate_authorization_header(
            credential=f"{self._credentials.access_key_id}/{scope}",
            signed_headers=create_signed_headers(canonical_headers),
            signature=signature,
        )

        return SignedHTTPRequest.from_request(
            request,
            url=_compose_url(request.endpoint, request.path, request.query),
        )

    def presign(
        self, request: HTTPRequest, options: PresignOptions | None = None
    ) -> SignedHTTPRequest:
        """Sign a copy of ``request`` with query string parameters.

        ``x-amz-*`` headers are moved into the query string unless listed in
        ``unhoistable_headers``, so that the resulting URL can be used without any
        headers besides ``host``. ``request`` itself is not modified.

        :param request: The request to presign.
        :param options: Per-call overrides, including the validity of the URL.
        :returns: A signed copy of the request along with the presigned URL.
        :raises InvalidSignatureError: If ``expires_in`` is not between one second
            and seven days.
        """
        options = options or {}
        expires_in = options.get("expires_in", DEFAULT_PRESIGNED_TTL)
        if not 0 < expires_in <= MAX_PRESIGNED_TTL:
            raise InvalidSignatureError(
                "Signature version 4 presigned URLs must have an expiration date "
                f"less than one week in the future. Received {expires_in} seconds."
            )
        resolved = self._resolve_options(options)

        presigned = deepcopy(request)
        _discard_empty_checksum(presigned.headers)
        self._hoist_headers(presigned, resolved.unhoistable_headers)
        if HOST_HEADER not in presigned.headers:
            presigned.headers[HOST_HEADER] = presigned.endpoint.hostname

        query = presigned.query
        if self._credentials.session_token:
            query[AMZ_TOKEN_QUERY_PARAM] = self._credentials.session_token
        scope = create_credential_scope(
            resolved.short_date, resolved.region, resolved.service
        )
        query[AMZ_ALGORITHM_QUERY_PARAM] = SIGNING_ALGORITHM_IDENTIFIER
        query[AMZ_CREDENTIAL_QUERY_PARAM] = (
            f"{self._credentials.access_key_id}/{scope}"
        )
        query[AMZ_DATE_QUERY_PARAM] = resolved.long_date
        query[AMZ_EXPIRES_QUERY_PARAM] = str(resolved.expires_in)

        canonical_headers = compute_canonical_headers(
            presigned.headers, resolved.unsignable_headers, resolved.signable_headers
        )
        query[AMZ_SIGNED_HEADERS_QUERY_PARAM] = create_signed_headers(
            canonical_headers
        )

        query[AMZ_SIGNATURE_QUERY_PARAM] = self._signature(
            request=presigned,
            query=query,
            canonical_headers=canonical_headers,
            payload_hash=compute_payload_hash(request.headers, request.body),
            resolved=resolved,
        )

        return SignedHTTPRequest.from_request(
            presigned,
            url=_compose_url(presigned.endpoint, presigned.path, query),
        )

    def generate_authorization_header(
        self, *, credential: str, signed_headers: str, signature: str
    ) -> str:
        """Generate the value of the ``Authorization`` header.

        :param credential:
            Credential scope string for generating the Authorization header.
            Defined as:
                <access_key>/<date>/<region>/<service>/<request_type>
        :param signed_headers:
            The ``;`` separated names of the headers used in signing.
        :param signature:
            Final hash of the SigV4 signing algorithm generated from the
            canonical request and string to sign.
        """
        return (
            f"{SIGNING_ALGORITHM_IDENTIFIER} Credential={credential}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )

    def _signature(
        self,
        *,
        request: HTTPRequest,
        query: dict[str, QueryValue],
        canonical_headers: dict[str, str],
        payload_hash: str,
        resolved: _ResolvedOptions,
    ) -> str:
        path = request.path or "/"
        if self._uri_escape_path:
            path = compute_canonical_uri(path, _PATH_ESCAPE_POLICY)

        canonical_request = create_canonical_request(
            method=request.method,
            canonical_uri=path,
            canonical_query=compute_canonical_querystring(query),
            canonical_headers=canonical_headers,
            payload_hash=payload_hash,
        )
        logger.debug("Canonical request:\n%s", canonical_request)

        scope = create_credential_scope(
            resolved.short_date, resolved.region, resolved.service
        )
        string_to_sign = create_string_to_sign(
            resolved.long_date, scope, canonical_request
        )
        logger.debug("String to sign:\n%s", string_to_sign)

        signing_key = derive_signing_key(
            self._credentials.secret_access_key,
            resolved.short_date,
            resolved.region,
            resolved.service,
        )
        return calculate_signature(signing_key, string_to_sign)

    def _hoist_headers(
        self, request: HTTPRequest, unhoistable_headers: frozenset[str]
    ) -> None:
        for name in list(request.headers):
            normalized = name.lower()
            if (
                normalized.startswith(AMZ_HEADER_PREFIX)
                and normalized not in unhoistable_headers
            ):
                logger.debug("Moving header %s into the query string.", name)
                request.query[name] = request.headers.pop(name)

    def _resolve_options(
        self, options: SigningOptions | PresignOptions
    ) -> _ResolvedOptions:
        if "signing_date" in options:
            signing_date = options["signing_date"]
        else:
            signing_date = datetime.datetime.now(datetime.UTC)
        # Attribute naive-date warnings to the caller of sign or presign.
        long_date, short_date = _format_date(signing_date, stacklevel=4)

        return _ResolvedOptions(
            long_date=long_date,
            short_date=short_date,
            service=options.get("signing_service", self._service),
            region=options.get("signing_region", self._region),
            unsignable_headers=_lower_all(options.get("unsignable_headers", ())),
            signable_headers=_lower_all(options.get("signable_headers", ())),
            expires_in=options.get("expires_in", DEFAULT_PRESIGNED_TTL),
            unhoistable_headers=_lower_all(options.get("unhoistable_headers", ())),
        )


def _lower_all(names: Iterable[str]) -> frozenset[str]:
    return frozenset(name.lower() for name in names)


def _discard_empty_checksum(headers: Headers) -> None:
    # An empty value is not a payload hash; the computed hash replaces it.
    if headers.get(AMZ_CONTENT_SHA256_HEADER) == "":
        del headers[AMZ_CONTENT_SHA256_HEADER]
