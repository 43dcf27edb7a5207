"""
Unit tests for core models.

These tests verify the data models without external dependencies.
"""

import pytest

from sailor.core.exceptions import (
    InvalidResourceError,
    SailorConfigError,
    MissingAccessKeyError,
    MissingAddressError,
    MissingAppError,
    MissingConnectionFieldError,
    MissingNamespaceError,
    MissingSecretKeyError,
)
from sailor.core.models import (
    DEFAULT_MOUNT_PATH,
    DEFAULT_POLL_INTERVAL,
    ConnectionContext,
    FetchStrategy,
    ResourceDeclaration,
    ResourceKind,
    WatchRegistration,
    parse_socket_timeout,
)


class TestConnectionContext:
    """Tests for ConnectionContext validation."""

    def test_validation_precedence(self):
        """Missing fields are reported one at a time in a fixed order."""
        fields = {}
        expected = [
            ("address", "addr", MissingAddressError),
            ("namespace", "ns", MissingNamespaceError),
            ("app", "app", MissingAppError),
            ("access_key", "ak", MissingAccessKeyError),
            ("secret_key", "sk", MissingSecretKeyError),
        ]

        for field_name, value, error in expected:
            context = ConnectionContext(
                address=fields.get("address", ""),
                namespace=fields.get("namespace", ""),
                app=fields.get("app", ""),
                access_key=fields.get("access_key", ""),
                secret_key=fields.get("secret_key", ""),
            )
            with pytest.raises(error):
                context.validate()
            fields[field_name] = value

        ConnectionContext(**fields).validate()

    def test_missing_field_error_names_field(self):
        with pytest.raises(MissingConnectionFieldError) as exc_info:
            ConnectionContext(address="a", namespace="", app="x", access_key="k", secret_key="s").validate()

        assert exc_info.value.field_name == "namespace"
        assert exc_info.value.env_var == "SAILOR_NS"
        assert "SAILOR_NS" in str(exc_info.value)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SAILOR_URL", "http://sailor:7766")
        monkeypatch.setenv("SAILOR_NS", "payments")
        monkeypatch.setenv("SAILOR_APP", "ledger")
        monkeypatch.setenv("SAILOR_ACCESS_KEY", "ak")
        monkeypatch.setenv("SAILOR_SECRET_KEY", "sk")
        monkeypatch.setenv("SAILOR_SOCKET_TIMEOUT", "2.5")

        context = ConnectionContext.from_env()

        assert context.address == "http://sailor:7766"
        assert context.namespace == "payments"
        assert context.app == "ledger"
        assert context.socket_timeout == 2.5

    def test_from_env_missing_app(self, monkeypatch):
        monkeypatch.setenv("SAILOR_URL", "http://sailor:7766")
        monkeypatch.setenv("SAILOR_NS", "payments")

        with pytest.raises(MissingAppError):
            ConnectionContext.from_env()

    def test_from_env_bad_timeout(self, monkeypatch):
        for name, value in (("SAILOR_URL", "http://sailor:7766"), ("SAILOR_NS", "payments"),
                            ("SAILOR_APP", "ledger"), ("SAILOR_ACCESS_KEY", "ak"),
                            ("SAILOR_SECRET_KEY", "sk"), ("SAILOR_SOCKET_TIMEOUT", "soon")):
            monkeypatch.setenv(name, value)

        with pytest.raises(SailorConfigError):
            ConnectionContext.from_env()

    def test_parse_socket_timeout(self):
        assert parse_socket_timeout(None) == 30.0
        assert parse_socket_timeout("") == 30.0
        assert parse_socket_timeout("4") == 4.0
        for bad in ("soon", "-1", 0, [1]):
            with pytest.raises(SailorConfigError):
                parse_socket_timeout(bad)

    def test_secret_key_not_in_repr(self):
        context = ConnectionContext("a", "n", "app", "ak", "very-secret")
        assert "very-secret" not in repr(context)


class TestResourceDeclaration:
    """Tests for ResourceDeclaration."""

    def test_defaults(self):
        declaration = ResourceDeclaration(kind=ResourceKind.CONFIG)

        assert declaration.path == DEFAULT_MOUNT_PATH
        assert declaration.strategy == FetchStrategy.MOUNTED_PATH
        assert declaration.poll_interval == DEFAULT_POLL_INTERVAL
        assert declaration.once is False
        assert declaration.fallback_enabled is True

    def test_misc_requires_name(self):
        with pytest.raises(InvalidResourceError):
            ResourceDeclaration(kind=ResourceKind.MISC).validate()

    def test_zero_interval_uses_default(self):
        declaration = ResourceDeclaration(
            kind=ResourceKind.CONFIG,
            strategy=FetchStrategy.REMOTE_PULL,
            poll_interval=0,
        )
        assert declaration.effective_poll_interval == DEFAULT_POLL_INTERVAL

    def test_describe(self):
        assert ResourceDeclaration(kind=ResourceKind.SECRET).describe() == "secret"
        assert ResourceDeclaration(kind=ResourceKind.MISC, name="banner").describe() == "misc:banner"


class TestWatchRegistration:

    def test_path_parts(self):
        registration = WatchRegistration(
            resource_name="",
            kind=ResourceKind.CONFIG,
            filesystem_path="/etc/sailor/app-config",
        )
        assert registration.file_name == "app-config"
        assert registration.directory == "/etc/sailor"
