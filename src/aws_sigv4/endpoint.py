# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import logging
from typing import Final

from .constants import DEFAULT_PROTOCOL

logger: Final = logging.getLogger(__name__)

_SCHEMES: Final = ("http://", "https://")


def _split_url(url: str) -> tuple[str, str, int | None]:
    """Split a URL into protocol, hostname and port.

    Anything after the first ``/`` of the authority is ignored. Parsing never fails:
    a missing scheme defaults to ``https`` and a non-numeric port is dropped.
    """
    protocol = DEFAULT_PROTOCOL
    for scheme in _SCHEMES:
        if url.startswith(scheme):
            protocol = scheme[:-3]
            url = url[len(scheme) :]
            break

    authority = url.split("/", 1)[0]
    hostname, _, port = authority.partition(":")
    return protocol, hostname, _parse_port(port)


def _parse_port(port: str) -> int | None:
    if not port:
        return None
    try:
        return int(port)
    except ValueError:
        logger.debug("Ignoring invalid port %r in endpoint.", port)
        return None


class Endpoint:
    """An AWS service endpoint, for example ``https://sqs.us-east-1.amazonaws.com``.

    Endpoints are mutable so that a client may derive a per-call endpoint, such as
    a virtual-hosted S3 bucket name, from a :py:meth:`copy` of its shared one.
    """

    def __init__(self, url: str):
        """Construct an Endpoint.

        :param url: A URL of the form ``[{scheme}://]{hostname}[:{port}][/...]``.
            ``https`` is assumed when the scheme is omitted.
        """
        self._protocol, self._hostname, self._port = _split_url(url)

    @property
    def protocol(self) -> str:
        """For example ``http`` or ``https``."""
        return self._protocol

    @protocol.setter
    def protocol(self, value: str) -> None:
        self._protocol = value

    @property
    def hostname(self) -> str:
        """The hostname without the port."""
        return self._hostname

    @hostname.setter
    def hostname(self, value: str) -> None:
        self._hostname = value

    @property
    def port(self) -> int | None:
        """An explicit port number, if one was given."""
        return self._port

    @port.setter
    def port(self, value: int | None) -> None:
        self._port = value

    @property
    def host(self) -> str:
        """The hostname, followed by ``:{port}`` when a port is set."""
        if self._port is not None:
            return f"{self._hostname}:{self._port}"
        return self._hostname

    @host.setter
    def host(self, value: str) -> None:
        hostname, _, port = value.partition(":")
        self._hostname = hostname
        self._port = _parse_port(port)

    @property
    def href(self) -> str:
        """The full URL of the endpoint, ``{protocol}://{host}``."""
        return f"{self._protocol}://{self.host}"

    @href.setter
    def href(self, value: str) -> None:
        self._protocol, self._hostname, self._port = _split_url(value)

    def copy(self) -> "Endpoint":
        """Create an independent Endpoint with identical fields."""
        copied = Endpoint.__new__(Endpoint)
        copied._protocol = self._protocol
        copied._hostname = self._hostname
        copied._port = self._port
        return copied

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Endpoint):
            return False
        return (
            self._protocol == other._protocol
            and self._hostname == other._hostname
            and self._port == other._port
        )

    def __repr__(self) -> str:
        return f"Endpoint({self.href!r})"
