"""
Transports that fetch an introspection document for a token.

``HttpTransport`` performs ``GET <endpoint>?token=<token>`` against the
authorization server. ``FileTransport`` reads ``<endpoint><token>.json``
from a ``file://`` directory so tests and local development can run
against fixture files without a network dependency. ``transport_for``
picks one by the endpoint's URI scheme.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlencode, urlsplit

import requests

logger = logging.getLogger(__name__)

FILE_SCHEME = "file://"


class TransportError(Exception):
    """The introspection endpoint could not be reached or read."""


@dataclass(frozen=True)
class TransportResponse:
    body: bytes
    status_code: int | None = None
    """HTTP status; None for file-backed lookups, which have no status."""


class IntrospectionTransport(Protocol):
    def fetch(self, token: str) -> TransportResponse: ...


def is_file_endpoint(endpoint: str) -> bool:
    return endpoint.startswith(FILE_SCHEME)


def build_introspection_url(endpoint: str, token: str) -> str:
    separator = "&" if "?" in endpoint else "?"
    return f"{endpoint}{separator}{urlencode({'token': token})}"


class HttpTransport:
    """
    Network transport using ``requests``.

    Certificate and hostname verification are always on; redirects are not
    followed, so a redirecting endpoint shows up as a non-200 status.
    """

    def __init__(self, endpoint: str, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._session = session

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def fetch(self, token: str) -> TransportResponse:
        url = build_introspection_url(self._endpoint, token)
        get = self._session.get if self._session is not None else requests.get
        try:
            resp = get(
                url,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
                verify=True,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            logger.warning("Introspection request failed: %s", type(e).__name__)
            raise TransportError(_describe(e)) from e
        logger.debug("Introspection endpoint returned status=%s", resp.status_code)
        return TransportResponse(body=resp.content, status_code=resp.status_code)


class FileTransport:
    """Fixture transport: the endpoint is a ``file://`` directory prefix."""

    def __init__(self, endpoint: str) -> None:
        if not is_file_endpoint(endpoint):
            raise ValueError(f"not a file endpoint: {endpoint!r}")
        self._endpoint = endpoint

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def path_for(self, token: str) -> Path:
        # Plain concatenation: the endpoint is a prefix, not necessarily a directory.
        parts = urlsplit(f"{self._endpoint}{token}.json")
        host = "" if parts.netloc in ("", "localhost") else parts.netloc
        return Path(unquote(host + parts.path))

    def fetch(self, token: str) -> TransportResponse:
        path = self.path_for(token)
        try:
            body = path.read_bytes()
        except OSError as e:
            logger.warning("Introspection fixture unreadable: %s", type(e).__name__)
            raise TransportError(e.strerror or type(e).__name__) from e
        return TransportResponse(body=body)


def transport_for(endpoint: str, timeout: float = 10.0) -> IntrospectionTransport:
    if is_file_endpoint(endpoint):
        return FileTransport(endpoint)
    return HttpTransport(endpoint, timeout=timeout)


def _describe(exc: requests.RequestException) -> str:
    # requests puts the full URL, token included, in its messages.
    if isinstance(exc, requests.exceptions.SSLError):
        reason = "certificate verification failed"
    elif isinstance(exc, requests.Timeout):
        reason = "timed out"
    elif isinstance(exc, requests.ConnectionError):
        reason = "could not connect"
    else:
        reason = "request failed"
    return f"{reason}: {type(exc).__name__}"
