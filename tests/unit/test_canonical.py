# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import pytest
from aws_sigv4 import Headers, MalformedHeadersError
from aws_sigv4._http import QueryValue
from aws_sigv4.canonical import (
    UriEscapePolicy,
    compute_canonical_headers,
    compute_canonical_querystring,
    compute_canonical_uri,
    compute_payload_hash,
    create_canonical_request,
    create_signed_headers,
    format_canonical_headers,
    normalize_path,
    parse_query_string,
    serialize_query_parameters,
    uri_escape,
)
from aws_sigv4.constants import EMPTY_SHA256_HASH, UNSIGNED_PAYLOAD

SINGLE = UriEscapePolicy(double=False, path=True)
DOUBLE = UriEscapePolicy(double=True, path=True)


@pytest.mark.parametrize(
    "value,path,expected",
    [
        ("abcXYZ019-._~", False, "abcXYZ019-._~"),
        ("a b", False, "a%20b"),
        ("a/b", False, "a%2Fb"),
        ("a/b", True, "a/b"),
        ("key=value&x", False, "key%3Dvalue%26x"),
        ("ሴ", False, "%E1%88%B4"),
        ("*+!", False, "%2A%2B%21"),
    ],
)
def test_uri_escape(value: str, path: bool, expected: str) -> None:
    assert uri_escape(value, path=path) == expected


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/", "/"),
        ("", ""),
        ("/foo/bar", "/foo/bar"),
        ("/foo/bar/", "/foo/bar/"),
        ("//foo//bar", "/foo/bar"),
        ("/./foo/./bar", "/foo/bar"),
        ("/abc/../foo", "/foo"),
        ("/../../foo", "/foo"),
        ("/foo/..", "/"),
        ("//", "/"),
        ("foo/bar", "foo/bar"),
    ],
)
def test_normalize_path(path: str, expected: str) -> None:
    assert normalize_path(path) == expected


@pytest.mark.parametrize(
    "path,policy,expected",
    [
        ("/", DOUBLE, "/"),
        ("/documents and settings", SINGLE, "/documents%20and%20settings"),
        ("/documents and settings", DOUBLE, "/documents%2520and%2520settings"),
        ("/foo%3Dbar", SINGLE, "/foo%253Dbar"),
        ("/abc/../foo%3Dbar", SINGLE, "/foo%253Dbar"),
        ("//foo%3Dbar", SINGLE, "/foo%253Dbar"),
        ("/a/b", UriEscapePolicy(path=False), "%2Fa%2Fb"),
        ("/ሴ", SINGLE, "/%E1%88%B4"),
    ],
)
def test_compute_canonical_uri(
    path: str, policy: UriEscapePolicy, expected: str
) -> None:
    assert compute_canonical_uri(path, policy) == expected


@pytest.mark.parametrize(
    "query,expected",
    [
        (None, ""),
        ({}, ""),
        (
            {"Version": "2010-05-08", "Action": "ListUsers"},
            "Action=ListUsers&Version=2010-05-08",
        ),
        ({"Param1": ["value2", "value1"]}, "Param1=value1&Param1=value2"),
        ({"Param1": ["value1", "Value1"]}, "Param1=Value1&Param1=value1"),
        ({"a b": "c/d"}, "a%20b=c%2Fd"),
        ({"empty": ""}, "empty="),
        (
            {"X-Amz-Signature": "abc", "x-amz-signature": "def", "foo": "bar"},
            "foo=bar",
        ),
    ],
)
def test_compute_canonical_querystring(
    query: dict[str, QueryValue] | None, expected: str
) -> None:
    assert compute_canonical_querystring(query) == expected


def test_serialize_query_parameters_keeps_signature() -> None:
    query: dict[str, QueryValue] = {
        "X-Amz-SignedHeaders": "host",
        "X-Amz-Signature": "abc",
        "X-Amz-Credential": "foo/20000101/us-bar-1/foo/aws4_request",
    }
    assert serialize_query_parameters(query) == (
        "X-Amz-Credential=foo%2F20000101%2Fus-bar-1%2Ffoo%2Faws4_request"
        "&X-Amz-Signature=abc&X-Amz-SignedHeaders=host"
    )
    assert serialize_query_parameters({}) == ""


@pytest.mark.parametrize(
    "qs,expected",
    [
        ("", {}),
        ("a=b", {"a": "b"}),
        ("a=b&c", {"a": "b", "c": ""}),
        ("a=1&a=2&a=3", {"a": ["1", "2", "3"]}),
        ("a%20b=c%2Fd", {"a b": "c/d"}),
        ("a=b&&c=d", {"a": "b", "c": "d"}),
    ],
)
def test_parse_query_string(qs: str, expected: dict[str, QueryValue]) -> None:
    assert parse_query_string(qs) == expected


class TestCanonicalHeaders:
    def test_names_are_lowered_and_sorted(self) -> None:
        headers = Headers({"X-Amz-Date": "20000101T000000Z", "Host": "example.com"})
        assert list(compute_canonical_headers(headers).items()) == [
            ("host", "example.com"),
            ("x-amz-date", "20000101T000000Z"),
        ]

    def test_values_are_trimmed_and_collapsed(self) -> None:
        headers = {"host": "example.com", "my-header": "  a   b \t c  "}
        assert compute_canonical_headers(headers)["my-header"] == "a b c"

    def test_none_values_are_skipped(self) -> None:
        headers = {"host": "example.com", "foo": None}
        assert compute_canonical_headers(headers) == {"host": "example.com"}

    def test_always_unsignable_headers_are_dropped(self) -> None:
        headers = {
            "host": "example.com",
            "User-Agent": "test",
            "authorization": "x",
            "X-Amzn-Trace-Id": "y",
        }
        assert compute_canonical_headers(headers) == {"host": "example.com"}

    def test_unsignable_and_signable_overrides(self) -> None:
        headers = {"host": "example.com", "foo": "bar", "user-agent": "baz"}
        assert compute_canonical_headers(headers, {"foo"}) == {"host": "example.com"}
        assert compute_canonical_headers(headers, {"foo"}, {"foo", "user-agent"}) == {
            "foo": "bar",
            "host": "example.com",
            "user-agent": "baz",
        }

    def test_format(self) -> None:
        canonical = {"host": "example.com", "x-amz-date": "20150830T123600Z"}
        assert format_canonical_headers(canonical) == (
            "host:example.com\nx-amz-date:20150830T123600Z\n"
        )
        assert create_signed_headers(canonical) == "host;x-amz-date"

    def test_nothing_to_sign(self) -> None:
        with pytest.raises(MalformedHeadersError):
            create_signed_headers({})


@pytest.mark.parametrize(
    "headers,body,expected",
    [
        ({}, None, EMPTY_SHA256_HASH),
        ({}, "", EMPTY_SHA256_HASH),
        ({}, b"", EMPTY_SHA256_HASH),
        (
            {},
            "hello world!",
            "7509e5bda0c762d2bac7f90d758b5b2263fa01ccbc542ab5e3df163be08e6ca9",
        ),
        (
            {},
            b"hello",
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824",
        ),
        (
            {},
            bytearray(b"hello"),
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824",
        ),
        (
            {},
            memoryview(b"hello"),
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824",
        ),
        ({}, iter([b"hello"]), UNSIGNED_PAYLOAD),
        ({"X-Amz-Content-Sha256": UNSIGNED_PAYLOAD}, "hello", UNSIGNED_PAYLOAD),
        ({"x-amz-content-sha256": "abc"}, None, "abc"),
    ],
)
def test_compute_payload_hash(
    headers: dict[str, str], body: object, expected: str
) -> None:
    assert compute_payload_hash(headers, body) == expected  # type: ignore[arg-type]


def test_create_canonical_request() -> None:
    canonical_request = create_canonical_request(
        method="get",
        canonical_uri="/",
        canonical_query="Action=ListUsers&Version=2010-05-08",
        canonical_headers={
            "host": "iam.amazonaws.com",
            "x-amz-date": "20150830T123600Z",
        },
        payload_hash=EMPTY_SHA256_HASH,
    )
    assert canonical_request == (
        "GET\n"
        "/\n"
        "Action=ListUsers&Version=2010-05-08\n"
        "host:iam.amazonaws.com\n"
        "x-amz-date:20150830T123600Z\n"
        "\n"
        "host;x-amz-date\n"
        f"{EMPTY_SHA256_HASH}"
    )
