"""
Locate the bearer token in a request (RFC 6750 section 2).

Two methods are supported: the ``Authorization`` request header (or the
``X-Authorization`` variant some proxies require) with the ``Bearer``
scheme, and the ``access_token`` URI query parameter. A request must use
exactly one of them.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from .errors import ErrorKind, VerificationError

logger = logging.getLogger(__name__)

# Searched in this order; first header present wins.
AUTHORIZATION_HEADERS = ("X-Authorization", "Authorization")
BEARER_PREFIX = "Bearer "
QUERY_PARAMETER = "access_token"

# b64token = 1*( ALPHA / DIGIT / "-" / "." / "_" / "~" / "+" / "/" ) *"="
_B64TOKEN_RE = re.compile(r"^[A-Za-z0-9\-._~+/]+=*$")


def _authorization_header(headers: Mapping[str, str]) -> str | None:
    """Value of the first authorization header present, matching names case-insensitively."""
    lowered: dict[str, str] = {}
    for key in headers.keys():
        lowered.setdefault(str(key).lower(), key)
    for name in AUTHORIZATION_HEADERS:
        key = lowered.get(name.lower())
        if key is not None:
            return headers[key]
    return None


def token_from_headers(headers: Mapping[str, str]) -> str | None:
    raw = _authorization_header(headers)
    if raw is None or not raw.startswith(BEARER_PREFIX):
        # Some other scheme (Basic, ...) is not a bearer-token carrier.
        return None
    token = raw[len(BEARER_PREFIX) :]
    # "Bearer " with nothing after it carries no token, like an empty access_token.
    return token if token.strip() else None


def token_from_query(query: Mapping[str, str]) -> str | None:
    value = query.get(QUERY_PARAMETER)
    return value if value else None


def locate_token(headers: Mapping[str, str], query: Mapping[str, str]) -> str:
    """
    Return the single bearer token carried by the request.

    The token is returned as found; its syntax is checked separately by
    ``check_b64token``.

    Raises VerificationError: ``no_token`` when neither method is used,
    ``invalid_request`` when both are.
    """
    header_token = token_from_headers(headers)
    query_token = token_from_query(query)

    if header_token is None and query_token is None:
        logger.debug("No bearer token in request")
        raise VerificationError(ErrorKind.NO_TOKEN, "missing token")
    if header_token is not None and query_token is not None:
        logger.info("Bearer token supplied in both header and query")
        raise VerificationError(
            ErrorKind.INVALID_REQUEST, "more than one method for including an access token used"
        )
    return header_token if header_token is not None else query_token


def check_b64token(token: str) -> None:
    """Raise ``invalid_token`` unless ``token`` matches the b64token grammar."""
    if not isinstance(token, str) or _B64TOKEN_RE.fullmatch(token) is None:
        raise VerificationError(ErrorKind.INVALID_TOKEN, "the access token is not a valid b64token")
