"""Tests for environment-driven settings."""

from resource_server.settings import Settings


def test_settings_from_environ(monkeypatch):
    monkeypatch.setenv("RS_INTROSPECTION_ENDPOINT", " https://as.example.com/introspect ")
    monkeypatch.setenv("RS_REALM", "Payroll API")
    monkeypatch.setenv("RS_TIMEOUT_SECONDS", "2.5")
    cfg = Settings().resource_server_config()
    assert cfg.introspection_endpoint == "https://as.example.com/introspect"
    assert cfg.realm == "Payroll API"
    assert cfg.timeout_seconds == 2.5


def test_settings_defaults(monkeypatch):
    for name in ("RS_INTROSPECTION_ENDPOINT", "RS_REALM", "RS_TIMEOUT_SECONDS", "RS_SECURITY_CONFIG_PATH"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    cfg = settings.resource_server_config()
    assert cfg.introspection_endpoint is None
    assert cfg.realm == "Resource Server"
    assert cfg.timeout_seconds == 10.0
    assert settings.resolved_security_config_path().name == "security_config.yaml"


def test_blank_realm_falls_back_to_default():
    assert Settings(realm="  ").resource_server_config().realm == "Resource Server"
