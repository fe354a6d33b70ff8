"""
Standalone bearer token verification against an RFC 7662 introspection endpoint.

This package has no dependency on the web framework (resource_server.security
and friends). Pass raw header and query mappings to
RemoteResourceServer.verify_request() and get back either a TokenIntrospection
or a VerificationError.
"""

from .config import ResourceServerConfig
from .errors import DEFAULT_REALM, ErrorKind, VerificationError
from .locator import check_b64token, locate_token
from .result import IntrospectionResponse, TokenIntrospection
from .transport import FileTransport, HttpTransport, TransportError, transport_for
from .verifier import RemoteResourceServer, VerificationResult

__all__ = [
    "DEFAULT_REALM",
    "ErrorKind",
    "FileTransport",
    "HttpTransport",
    "IntrospectionResponse",
    "RemoteResourceServer",
    "ResourceServerConfig",
    "TokenIntrospection",
    "TransportError",
    "VerificationError",
    "VerificationResult",
    "check_b64token",
    "locate_token",
    "transport_for",
]
