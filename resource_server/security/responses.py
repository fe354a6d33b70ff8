from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from resource_server.introspection import DEFAULT_REALM, VerificationError

logger = logging.getLogger(__name__)


def error_response(error: VerificationError) -> JSONResponse:
    """
    Terminal RFC 6750 response for a verification failure.

    Status from the error kind, ``WWW-Authenticate`` challenge (omitted for
    500s) and ``{"error": ..., "error_description": ...}`` body.
    """
    return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=error.headers)


async def verification_error_handler(request: Request, exc: VerificationError) -> JSONResponse:
    """
    Application exception handler for ``VerificationError``.

    Covers failures raised by the security dependency and by route handlers
    calling ``require_scope`` / ``require_entitlement``.
    """
    if not exc.realm_bound:
        exc.bind_realm(getattr(request.app.state, "realm", DEFAULT_REALM))

    if exc.status_code >= 500:
        logger.error(
            "Token verification error path=%s method=%s description=%s",
            request.url.path,
            request.method,
            exc.description,
        )
    else:
        logger.info(
            "Request rejected kind=%s status=%s path=%s method=%s",
            exc.kind.value,
            exc.status_code,
            request.url.path,
            request.method,
        )
    return error_response(exc)
