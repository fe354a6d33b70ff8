"""
Pytest fixtures for the test suite.

Introspection responses are served from JSON fixture files through a
``file://`` endpoint, so no test needs network access. Network transport
tests patch ``requests.get`` instead.
"""
from __future__ import annotations

import json

import pytest

from resource_server.introspection import RemoteResourceServer, ResourceServerConfig


FIXTURES = {
    "alice-token": {"active": True, "scope": "read write", "sub": "alice", "client_id": "web-app"},
    "reader-token": {"active": True, "scope": "read", "sub": "bob"},
    "writer-token": {"active": True, "scope": "write delete", "sub": "carol", "x-entitlement": "reports export"},
    "profile-token": {"active": True, "scope": "profile", "sub": "dave"},
    "inactive-token": {"active": False},
    "no-active-token": {"scope": "read"},
    "string-active-token": {"active": "true"},
}


@pytest.fixture
def fixture_dir(tmp_path):
    """Directory of ``<token>.json`` introspection responses."""
    for token, body in FIXTURES.items():
        (tmp_path / f"{token}.json").write_text(json.dumps(body), encoding="utf-8")
    (tmp_path / "garbage-token.json").write_text("<html>not json</html>", encoding="utf-8")
    (tmp_path / "list-token.json").write_text("[true]", encoding="utf-8")
    return tmp_path


@pytest.fixture
def file_endpoint(fixture_dir) -> str:
    return fixture_dir.as_uri() + "/"


@pytest.fixture
def server(file_endpoint) -> RemoteResourceServer:
    return RemoteResourceServer(ResourceServerConfig(introspection_endpoint=file_endpoint, realm="Test Realm"))
