from __future__ import annotations

from pydantic import BaseModel


class TokenInfoOut(BaseModel):
    active: bool
    sub: str | None = None
    client_id: str | None = None
    scopes: list[str]
    entitlements: list[str]
    expires_at: int | float | None = None
    issued_at: int | float | None = None
    aud: str | list[str] | None = None


class ErrorOut(BaseModel):
    """RFC 6750 error body."""

    error: str
    error_description: str
