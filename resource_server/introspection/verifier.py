"""
Verify bearer tokens against a remote token introspection endpoint.

Background:
    The resource server cannot check an opaque access token by itself. For
    every request it asks the authorization server's introspection endpoint
    (RFC 7662) whether the token is active and what it grants. Nothing is
    cached: each call re-verifies remotely, and each failure is terminal for
    the current request (no retries).

    ``verify`` returns either a ``TokenIntrospection`` or a
    ``VerificationError``; the hosting layer matches on the type and turns
    the error into the 4xx/5xx response described by RFC 6750.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Union

from .config import ResourceServerConfig
from .errors import ErrorKind, VerificationError
from .locator import check_b64token, locate_token
from .result import TokenIntrospection
from .transport import IntrospectionTransport, TransportError, transport_for

logger = logging.getLogger(__name__)

VerificationResult = Union[TokenIntrospection, VerificationError]


class RemoteResourceServer:
    """
    Bearer token verifier backed by token introspection.

    Safe to share between threads: holds only read-only configuration.
    ``transport`` overrides the scheme-selected transport (tests).
    """

    def __init__(
        self,
        config: ResourceServerConfig | Mapping[str, object],
        transport: IntrospectionTransport | None = None,
    ) -> None:
        if not isinstance(config, ResourceServerConfig):
            config = ResourceServerConfig.from_mapping(config)
        self._config = config
        self._transport = transport

    @property
    def config(self) -> ResourceServerConfig:
        return self._config

    @property
    def realm(self) -> str:
        return self._config.realm

    def verify_request(self, headers: Mapping[str, str], query: Mapping[str, str]) -> VerificationResult:
        """Locate the bearer token in ``headers``/``query`` and verify it."""
        try:
            token = locate_token(headers, query)
        except VerificationError as e:
            return e
        return self.verify(token)

    def verify(self, token: str) -> VerificationResult:
        """
        Verify ``token`` with the introspection endpoint.

        Returns a ``TokenIntrospection`` for an active token, otherwise the
        ``VerificationError`` describing why verification failed.
        """
        try:
            return self._introspect(token)
        except VerificationError as e:
            logger.info("Token verification failed kind=%s", e.kind.value)
            return e

    def verify_or_raise(self, token: str) -> TokenIntrospection:
        """Like ``verify`` but raises the ``VerificationError``."""
        result = self.verify(token)
        if isinstance(result, VerificationError):
            raise result
        return result

    def _transport_for(self, endpoint: str) -> IntrospectionTransport:
        if self._transport is not None:
            return self._transport
        return transport_for(endpoint, timeout=self._config.timeout_seconds)

    def _introspect(self, token: str) -> TokenIntrospection:
        check_b64token(token)

        endpoint = self._config.introspection_endpoint
        if not endpoint:
            raise VerificationError(
                ErrorKind.INTERNAL_SERVER_ERROR,
                "missing configuration parameter (introspectionEndpoint)",
            )

        try:
            resp = self._transport_for(endpoint).fetch(token)
        except TransportError as e:
            raise VerificationError(
                ErrorKind.INTERNAL_SERVER_ERROR,
                f"unable to contact introspection endpoint ({e})",
            ) from e

        # File-backed lookups have no status to check.
        if resp.status_code is not None and resp.status_code != 200:
            logger.warning("Introspection endpoint returned status=%s", resp.status_code)
            raise VerificationError(
                ErrorKind.INTERNAL_SERVER_ERROR,
                "malformed request to introspection endpoint",
            )

        try:
            data = json.loads(resp.body)
        except (ValueError, UnicodeDecodeError) as e:
            raise VerificationError(
                ErrorKind.INTERNAL_SERVER_ERROR,
                "unable to decode response from introspection endpoint",
            ) from e

        introspection = TokenIntrospection.from_response(data)
        logger.debug("Token active client_id=%s sub=%s", introspection.client_id, introspection.sub)
        return introspection
