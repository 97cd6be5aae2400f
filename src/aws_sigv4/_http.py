# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections import Counter, OrderedDict
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from copy import deepcopy
from dataclasses import dataclass, field, fields
from typing import Self, TypeAlias

from .endpoint import Endpoint
from .exceptions import MalformedHeadersError

QueryValue: TypeAlias = str | list[str]
"""A single query value, or the ordered values of a repeated key."""

Body: TypeAlias = str | bytes | bytearray | memoryview | Iterable[bytes] | None
"""Request payload. Streaming bodies cannot be hashed and are signed unsigned."""


class Headers(MutableMapping[str, str]):
    """Collection of HTTP header values mapped by case-insensitive name.

    The most recently assigned spelling of each name is preserved for transmission,
    while lookups, assignment and deletion treat case-variance as equivalent.
    """

    def __init__(
        self, initial: Mapping[str, str] | Iterable[tuple[str, str]] | None = None
    ):
        """Construct a Headers collection.

        :param initial: A mapping or an iterable of ``(name, value)`` pairs. Names
            must be unique after normalization.
        :raises MalformedHeadersError: If ``initial`` repeats a normalized name.
        """
        if initial is None:
            pairs: list[tuple[str, str]] = []
        elif isinstance(initial, Mapping):
            pairs = list(initial.items())  # type: ignore[arg-type]
        else:
            pairs = list(initial)

        fname_counter = Counter(self._normalize_field_name(name) for name, _ in pairs)
        non_unique_names = [name for name, num in fname_counter.items() if num > 1]
        if non_unique_names:
            raise MalformedHeadersError(
                "Header names must be unique. The following normalized header "
                f"names appear more than once: {', '.join(non_unique_names)}."
            )
        self.entries: OrderedDict[str, tuple[str, str]] = OrderedDict(
            (self._normalize_field_name(name), (name, value)) for name, value in pairs
        )

    def __setitem__(self, name: str, value: str) -> None:
        """Set or override the value for a header name."""
        self.entries[self._normalize_field_name(name)] = (name, value)

    def __getitem__(self, name: str) -> str:
        return self.entries[self._normalize_field_name(name)][1]

    def __delitem__(self, name: str) -> None:
        del self.entries[self._normalize_field_name(name)]

    def __iter__(self) -> Iterator[str]:
        for name, _ in self.entries.values():
            yield name

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self._normalize_field_name(key) in self.entries

    def _normalize_field_name(self, name: str) -> str:
        """Normalize header names for use as key in ``entries``."""
        return name.lower()

    def copy(self) -> Headers:
        return Headers(self.entries.values())

    def __eq__(self, other: object) -> bool:
        """Names are compared case-insensitively, values exactly."""
        if not isinstance(other, Mapping):
            return NotImplemented
        theirs = {str(name).lower(): value for name, value in other.items()}  # type: ignore[misc]
        return {key: value for key, (_, value) in self.entries.items()} == theirs

    def __repr__(self) -> str:
        return f"Headers({dict(self.entries.values())})"


@dataclass(kw_only=True)
class HTTPRequest:
    """Description of an HTTP request to be signed.

    ``endpoint`` accepts a URL string, which is parsed into an :py:class:`Endpoint`.
    ``headers`` accepts any mapping, which is converted into :py:class:`Headers`.
    """

    method: str
    endpoint: Endpoint
    path: str = "/"
    query: dict[str, QueryValue] = field(default_factory=dict)
    headers: Headers = field(default_factory=Headers)
    body: Body = None

    def __post_init__(self) -> None:
        if isinstance(self.endpoint, str):
            self.endpoint = Endpoint(self.endpoint)
        if self.query is None:  # pyright: ignore[reportUnnecessaryComparison]
            self.query = {}
        if not isinstance(self.headers, Headers):
            if not isinstance(self.headers, Mapping):
                raise MalformedHeadersError(
                    "Received unexpected value for headers. Expected a mapping of "
                    f"header names to values but received {type(self.headers)}."
                )
            self.headers = Headers(self.headers)

    def __deepcopy__(self, memo: dict[int, object] | None = None) -> Self:
        if memo is None:
            memo = {}

        if id(self) in memo:
            return memo[id(self)]  # type: ignore[return-value]

        # the body can't be copied because it may be a stream
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(
            endpoint=self.endpoint.copy(),
            query=deepcopy(self.query, memo),
            headers=self.headers.copy(),
        )
        new_instance = self.__class__(**values)
        memo[id(self)] = new_instance
        return new_instance


@dataclass(kw_only=True)
class SignedHTTPRequest(HTTPRequest):
    """A signed request together with the fully composed URL to dispatch it to."""

    url: str

    @classmethod
    def from_request(cls, request: HTTPRequest, *, url: str) -> SignedHTTPRequest:
        """Wrap ``request`` without copying its headers, query or body."""
        return cls(
            method=request.method,
            endpoint=request.endpoint,
            path=request.path,
            query=request.query,
            headers=request.headers,
            body=request.body,
            url=url,
        )
