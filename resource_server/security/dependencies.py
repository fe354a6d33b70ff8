from __future__ import annotations

import logging

from fastapi import Depends, Request

from resource_server.introspection import (
    ErrorKind,
    RemoteResourceServer,
    TokenIntrospection,
    VerificationError,
)
from resource_server.security.config import SecurityConfig

logger = logging.getLogger(__name__)


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_resource_server(request: Request) -> RemoteResourceServer:
    server = getattr(request.app.state, "resource_server", None)
    if server is None:
        raise RuntimeError("Resource server not configured. Did app startup run?")
    return server


def get_token(request: Request) -> TokenIntrospection:
    """Verified token of the current request, for use in route handlers."""
    token = getattr(request.state, "token", None)
    if token is None:
        # Route is public in config but the handler needs a token.
        raise VerificationError(ErrorKind.NO_TOKEN, "missing token")
    return token


def enforce_token(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    server: RemoteResourceServer = Depends(get_resource_server),
) -> None:
    """
    Global security dependency (configuration-driven).

    Hands the raw headers and query parameters to the verifier, then
    checks the scopes / entitlements the route asks for. Any failure is
    raised as a ``VerificationError`` with the configured realm bound and
    becomes the terminal response via the application's exception handler.
    Runs synchronously, so FastAPI keeps the introspection round trip off
    the event loop.
    """

    path = request.url.path
    method = request.method.upper()

    rule = config.match(path, method)

    # Optional decorator metadata.
    endpoint = request.scope.get("endpoint")
    decorator_scopes = set(getattr(endpoint, "__security_required_scopes__", set())) if endpoint else set()
    decorator_entitlements = (
        set(getattr(endpoint, "__security_required_entitlements__", set())) if endpoint else set()
    )

    auth_required = rule.auth_required or bool(decorator_scopes) or bool(decorator_entitlements)
    if not auth_required:
        return

    result = server.verify_request(request.headers, request.query_params)
    if isinstance(result, VerificationError):
        raise result.bind_realm(server.realm)

    required_scopes = set(rule.scopes) | decorator_scopes
    if required_scopes and not result.has_any_scope(required_scopes):
        logger.info("Insufficient scope path=%s method=%s required=%s", path, method, sorted(required_scopes))
        raise VerificationError(
            ErrorKind.INSUFFICIENT_SCOPE, "no permission for this call with granted scope"
        ).bind_realm(server.realm)

    required_entitlements = set(rule.entitlements) | decorator_entitlements
    if required_entitlements and not result.has_any_entitlement(required_entitlements):
        logger.info(
            "Insufficient entitlement path=%s method=%s required=%s", path, method, sorted(required_entitlements)
        )
        raise VerificationError(
            ErrorKind.INSUFFICIENT_SCOPE, "no permission for this call with granted entitlement"
        ).bind_realm(server.realm)

    request.state.token = result
