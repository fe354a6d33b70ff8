"""Typed, immutable view over an RFC 7662 introspection response."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt
from pydantic import ValidationError as PydanticValidationError

from .errors import ErrorKind, VerificationError

MALFORMED_RESPONSE = "malformed response from introspection endpoint"
TOKEN_NOT_ACTIVE = "the token is not active"


class IntrospectionResponse(BaseModel):
    """
    Schema of the introspection endpoint's JSON object (RFC 7662 section 2.2).

    Only ``active`` is required. ``exp``/``iat`` are also accepted under the
    older ``expires_at``/``issued_at`` names, and the proprietary
    ``x-entitlement`` claim is exposed as ``entitlement``. Unknown members
    are kept.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    active: StrictBool
    scope: str | None = None
    client_id: str | None = None
    username: str | None = None
    token_type: str | None = None
    exp: StrictInt | StrictFloat | None = Field(default=None, validation_alias=AliasChoices("exp", "expires_at"))
    iat: StrictInt | StrictFloat | None = Field(default=None, validation_alias=AliasChoices("iat", "issued_at"))
    nbf: StrictInt | StrictFloat | None = None
    sub: str | None = None
    aud: str | tuple[str, ...] | None = None
    iss: str | None = None
    jti: str | None = None
    entitlement: str | None = Field(default=None, validation_alias="x-entitlement")


def _split(value: str | None) -> frozenset[str]:
    # RFC 6749 section 3.3: space-delimited, case-sensitive strings.
    if not value:
        return frozenset()
    return frozenset(item for item in value.split(" ") if item)


def _freeze(value: Any) -> Any:
    """Read-only copy of a decoded JSON value: objects become mapping proxies, arrays tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


@dataclass(frozen=True)
class TokenIntrospection:
    """
    Result of a successful verification: the token is active.

    Never constructed for an inactive token; use ``from_response`` to go
    from a decoded JSON document to an instance.
    """

    response: IntrospectionResponse
    claims: Mapping[str, Any]

    @classmethod
    def from_response(cls, data: Any) -> TokenIntrospection:
        """
        Validate a decoded introspection document.

        Raises VerificationError: ``internal_server_error`` when the document
        is not an object, lacks a boolean ``active`` or has a mistyped member;
        ``invalid_token`` when ``active`` is false.
        """
        if not isinstance(data, Mapping) or not isinstance(data.get("active"), bool):
            raise VerificationError(ErrorKind.INTERNAL_SERVER_ERROR, MALFORMED_RESPONSE)
        if not data["active"]:
            raise VerificationError(ErrorKind.INVALID_TOKEN, TOKEN_NOT_ACTIVE)
        try:
            response = IntrospectionResponse.model_validate(dict(data))
        except PydanticValidationError as e:
            raise VerificationError(ErrorKind.INTERNAL_SERVER_ERROR, MALFORMED_RESPONSE) from e
        return cls(response=response, claims=_freeze(data))

    # ---- RFC 7662 members -----------------------------------------------------------

    @property
    def active(self) -> bool:
        return self.response.active

    @property
    def expires_at(self) -> int | float | None:
        """Seconds since the epoch when the token expires."""
        return self.response.exp

    @property
    def issued_at(self) -> int | float | None:
        """Seconds since the epoch when the token was issued."""
        return self.response.iat

    @property
    def not_before(self) -> int | float | None:
        return self.response.nbf

    @property
    def scope(self) -> str | None:
        return self.response.scope

    @property
    def client_id(self) -> str | None:
        return self.response.client_id

    @property
    def username(self) -> str | None:
        return self.response.username

    @property
    def token_type(self) -> str | None:
        return self.response.token_type

    @property
    def sub(self) -> str | None:
        """Local identifier of the resource owner who authorized the token."""
        return self.response.sub

    @property
    def resource_owner_id(self) -> str | None:
        return self.sub

    @property
    def aud(self) -> str | tuple[str, ...] | None:
        return self.response.aud

    @property
    def iss(self) -> str | None:
        return self.response.iss

    @property
    def jti(self) -> str | None:
        return self.response.jti

    def claim(self, name: str, default: Any = None) -> Any:
        """Any member of the response by its JSON name, including unknown ones."""
        return self.claims.get(name, default)

    # ---- Scope ---------------------------------------------------------------------

    @property
    def scopes(self) -> frozenset[str]:
        return _split(self.response.scope)

    def has_scope(self, scope: str) -> bool:
        return scope in self.scopes

    def has_any_scope(self, scopes: Iterable[str]) -> bool:
        """True when at least one of ``scopes`` was granted."""
        return not self.scopes.isdisjoint(scopes)

    def require_scope(self, scope: str) -> None:
        if not self.has_scope(scope):
            raise VerificationError(
                ErrorKind.INSUFFICIENT_SCOPE, "no permission for this call with granted scope"
            )

    # ---- Proprietary x-entitlement ---------------------------------------------------

    @property
    def entitlement(self) -> str | None:
        return self.response.entitlement

    @property
    def entitlements(self) -> frozenset[str]:
        return _split(self.response.entitlement)

    def has_entitlement(self, entitlement: str) -> bool:
        return entitlement in self.entitlements

    def has_any_entitlement(self, entitlements: Iterable[str]) -> bool:
        return not self.entitlements.isdisjoint(entitlements)

    def require_entitlement(self, entitlement: str) -> None:
        # Same HTTP handling as a missing scope.
        if not self.has_entitlement(entitlement):
            raise VerificationError(
                ErrorKind.INSUFFICIENT_SCOPE, "no permission for this call with granted entitlement"
            )

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "active": self.active,
            "sub": self.sub,
            "client_id": self.client_id,
            "scopes": sorted(self.scopes),
            "entitlements": sorted(self.entitlements),
            "expires_at": self.expires_at,
            "issued_at": self.issued_at,
            "aud": list(self.aud) if isinstance(self.aud, tuple) else self.aud,
        }
