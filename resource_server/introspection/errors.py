"""
Bearer token error taxonomy (RFC 6750 section 3.1).

Each failure carries a kind, a human-readable description and a realm.
The kind is fixed at construction and determines the HTTP status code;
the realm may be bound once more by the outermost caller before the
``WWW-Authenticate`` challenge and JSON body are rendered.
"""

from __future__ import annotations

import json
from enum import Enum

DEFAULT_REALM = "Resource Server"


class ErrorKind(str, Enum):
    NO_TOKEN = "no_token"
    INVALID_REQUEST = "invalid_request"
    INVALID_TOKEN = "invalid_token"
    INSUFFICIENT_SCOPE = "insufficient_scope"
    # Reserved; handled exactly like insufficient_scope.
    INSUFFICIENT_ENTITLEMENT = "insufficient_entitlement"
    INTERNAL_SERVER_ERROR = "internal_server_error"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.NO_TOKEN: 401,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.INSUFFICIENT_SCOPE: 403,
    ErrorKind.INSUFFICIENT_ENTITLEMENT: 403,
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.INTERNAL_SERVER_ERROR: 500,
}


class VerificationError(Exception):
    """
    A bearer token verification failure.

    Returned by the verifier as a typed failure result, and raised by
    ``TokenIntrospection.require_scope`` / ``require_entitlement``.
    Do not put the token value in the description.
    """

    def __init__(self, kind: ErrorKind | str, description: str) -> None:
        self._kind = ErrorKind(kind)
        self._description = description
        self._realm: str | None = None
        super().__init__(f"{self._kind.value}: {description}")

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def description(self) -> str:
        return self._description

    @property
    def status_code(self) -> int:
        return self._kind.status_code

    @property
    def realm(self) -> str:
        return self._realm if self._realm is not None else DEFAULT_REALM

    @property
    def realm_bound(self) -> bool:
        return self._realm is not None

    def bind_realm(self, realm: str | None) -> VerificationError:
        """
        Bind the protection space reported in the challenge.

        Can be done once; an empty or non-string realm falls back to the
        default. Returns ``self`` so callers can ``raise err.bind_realm(...)``.
        """
        if self._realm is not None:
            raise RuntimeError("realm already bound for this error")
        self._realm = realm if isinstance(realm, str) and realm else DEFAULT_REALM
        return self

    @property
    def authenticate_header(self) -> str | None:
        """``WWW-Authenticate`` value, or None for server errors."""
        if self.status_code == 500:
            return None
        if self._kind is ErrorKind.NO_TOKEN:
            # The client did not know authentication was required; no error fields.
            return f'Bearer realm="{self.realm}"'
        return (
            f'Bearer realm="{self.realm}",'
            f'error="{self._kind.value}",'
            f'error_description="{self._description}"'
        )

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        challenge = self.authenticate_header
        if challenge is not None:
            headers["WWW-Authenticate"] = challenge
        return headers

    def to_dict(self) -> dict[str, str]:
        return {"error": self._kind.value, "error_description": self._description}

    @property
    def content(self) -> str:
        """JSON response body."""
        return json.dumps(self.to_dict())

    def __repr__(self) -> str:
        return f"VerificationError(kind={self._kind.value!r}, description={self._description!r})"
