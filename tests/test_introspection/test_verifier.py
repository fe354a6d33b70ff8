"""Tests for RemoteResourceServer against fixture files and a mocked endpoint."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from resource_server.introspection import (
    ErrorKind,
    RemoteResourceServer,
    ResourceServerConfig,
    TokenIntrospection,
    VerificationError,
)
from resource_server.introspection.transport import TransportResponse

ENDPOINT = "https://as.example.com/introspect"


def _http_server() -> RemoteResourceServer:
    return RemoteResourceServer({"introspectionEndpoint": ENDPOINT})


def _response(status: int, body: bytes) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.content = body
    return resp


def _assert_error(result, kind: ErrorKind, description: str | None = None) -> VerificationError:
    assert isinstance(result, VerificationError)
    assert result.kind is kind
    if description is not None:
        assert result.description == description
    return result


# ---- File-backed endpoint --------------------------------------------------------------


def test_verify_active_token(server):
    result = server.verify("alice-token")
    assert isinstance(result, TokenIntrospection)
    assert result.scopes == {"read", "write"}
    assert result.has_scope("read") is True
    assert result.has_scope("delete") is False
    assert result.sub == "alice"


def test_verify_inactive_token(server):
    _assert_error(server.verify("inactive-token"), ErrorKind.INVALID_TOKEN, "the token is not active")


@pytest.mark.parametrize("token", ["no-active-token", "string-active-token", "list-token"])
def test_verify_malformed_response(server, token):
    _assert_error(
        server.verify(token), ErrorKind.INTERNAL_SERVER_ERROR, "malformed response from introspection endpoint"
    )


def test_verify_non_json_response(server):
    _assert_error(
        server.verify("garbage-token"),
        ErrorKind.INTERNAL_SERVER_ERROR,
        "unable to decode response from introspection endpoint",
    )


def test_verify_missing_fixture(server):
    err = _assert_error(server.verify("unknown-token"), ErrorKind.INTERNAL_SERVER_ERROR)
    assert err.description.startswith("unable to contact introspection endpoint (")


def test_verify_request_header(server):
    result = server.verify_request({"Authorization": "Bearer alice-token"}, {})
    assert isinstance(result, TokenIntrospection)
    assert result.sub == "alice"


def test_verify_request_query(server):
    result = server.verify_request({}, {"access_token": "reader-token"})
    assert isinstance(result, TokenIntrospection)
    assert result.sub == "bob"


def test_verify_request_both_methods(server):
    result = server.verify_request({"Authorization": "Bearer alice-token"}, {"access_token": "reader-token"})
    _assert_error(result, ErrorKind.INVALID_REQUEST)


def test_verify_request_no_token(server):
    _assert_error(server.verify_request({}, {}), ErrorKind.NO_TOKEN, "missing token")


def test_verify_or_raise(server):
    assert server.verify_or_raise("alice-token").sub == "alice"
    with pytest.raises(VerificationError) as exc:
        server.verify_or_raise("inactive-token")
    assert exc.value.kind is ErrorKind.INVALID_TOKEN


def test_config_from_mapping(file_endpoint):
    server = RemoteResourceServer({"introspectionEndpoint": file_endpoint, "realm": "Files"})
    assert server.realm == "Files"
    assert isinstance(server.verify("alice-token"), TokenIntrospection)


def test_default_realm():
    assert RemoteResourceServer({"introspectionEndpoint": ENDPOINT}).realm == "Resource Server"


# ---- Syntax and configuration ------------------------------------------------------------


@pytest.mark.parametrize("token", ["has space", "user@host", ""])
def test_invalid_syntax_makes_no_remote_call(token):
    transport = MagicMock()
    server = RemoteResourceServer(ResourceServerConfig(introspection_endpoint=ENDPOINT), transport=transport)
    _assert_error(server.verify(token), ErrorKind.INVALID_TOKEN, "the access token is not a valid b64token")
    transport.fetch.assert_not_called()


def test_missing_endpoint_is_server_error():
    result = RemoteResourceServer({}).verify("abc")
    _assert_error(
        result, ErrorKind.INTERNAL_SERVER_ERROR, "missing configuration parameter (introspectionEndpoint)"
    )


def test_injected_transport():
    transport = MagicMock()
    transport.fetch.return_value = TransportResponse(body=b'{"active": true, "sub": "svc"}', status_code=200)
    server = RemoteResourceServer(ResourceServerConfig(introspection_endpoint=ENDPOINT), transport=transport)
    assert server.verify("abc").sub == "svc"
    transport.fetch.assert_called_once_with("abc")


# ---- Network endpoint (mocked) -----------------------------------------------------------


@patch("resource_server.introspection.transport.requests.get")
def test_http_active_token(mock_get):
    mock_get.return_value = _response(200, b'{"active": true, "scope": "read write", "sub": "alice"}')
    result = _http_server().verify("abc")
    assert isinstance(result, TokenIntrospection)
    assert result.scopes == {"read", "write"}
    assert mock_get.call_args[0][0] == ENDPOINT + "?token=abc"


@patch("resource_server.introspection.transport.requests.get")
def test_http_inactive_token(mock_get):
    mock_get.return_value = _response(200, b'{"active": false}')
    _assert_error(_http_server().verify("abc"), ErrorKind.INVALID_TOKEN, "the token is not active")


@pytest.mark.parametrize("status", [201, 302, 400, 401, 404, 500, 503])
@patch("resource_server.introspection.transport.requests.get")
def test_http_non_200(mock_get, status):
    mock_get.return_value = _response(status, b'{"active": true}')
    _assert_error(
        _http_server().verify("abc"),
        ErrorKind.INTERNAL_SERVER_ERROR,
        "malformed request to introspection endpoint",
    )


@patch("resource_server.introspection.transport.requests.get")
def test_http_non_json(mock_get):
    mock_get.return_value = _response(200, b"<html>oops</html>")
    _assert_error(
        _http_server().verify("abc"),
        ErrorKind.INTERNAL_SERVER_ERROR,
        "unable to decode response from introspection endpoint",
    )


@patch("resource_server.introspection.transport.requests.get")
def test_http_transport_failure(mock_get):
    mock_get.side_effect = requests.ConnectionError("refused")
    _assert_error(
        _http_server().verify("abc"),
        ErrorKind.INTERNAL_SERVER_ERROR,
        "unable to contact introspection endpoint (could not connect: ConnectionError)",
    )
    assert mock_get.call_count == 1  # no retries


@patch("resource_server.introspection.transport.requests.get")
def test_every_call_goes_to_the_endpoint(mock_get):
    mock_get.return_value = _response(200, b'{"active": true}')
    server = _http_server()
    server.verify("abc")
    server.verify("abc")
    assert mock_get.call_count == 2
