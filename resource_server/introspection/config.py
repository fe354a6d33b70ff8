"""Resource server configuration. Read-only and shared by all verification calls."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import DEFAULT_REALM

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ResourceServerConfig:
    """
    Remote resource server configuration.

    introspection_endpoint:
        ``http(s)://`` URL of the RFC 7662 endpoint, or a ``file://`` prefix
        under which ``<token>.json`` fixture files are looked up. Required
        for verification; a missing value is reported as a server error.
    realm:
        Protection space in the ``WWW-Authenticate`` challenge.
    timeout_seconds:
        Bound on the introspection round trip.
    """

    introspection_endpoint: str | None
    realm: str = DEFAULT_REALM
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> ResourceServerConfig:
        """Build from a mapping with ``introspectionEndpoint`` and optional ``realm``/``timeout`` keys."""
        endpoint = values.get("introspectionEndpoint")
        timeout = values.get("timeout")
        return cls(
            introspection_endpoint=_strip_or_none(endpoint),
            realm=_strip_or_none(values.get("realm")) or DEFAULT_REALM,
            timeout_seconds=float(timeout) if timeout is not None else DEFAULT_TIMEOUT_SECONDS,
        )


def _strip_or_none(s: Any) -> str | None:
    if not isinstance(s, str):
        return None
    t = s.strip()
    return t if t else None
