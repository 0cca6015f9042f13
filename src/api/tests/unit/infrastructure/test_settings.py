"""Unit tests for infrastructure settings."""

import pytest
from pydantic import SecretStr, ValidationError

from infrastructure.settings import DatabaseSettings, MatrixSettings, Settings


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        """Should have sensible pool defaults."""
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        """Should validate max >= min."""
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        assert "pool_max_connections" in str(exc_info.value)

    def test_pool_min_must_be_positive(self):
        """Pool min connections must be >= 1."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_min_connections=0)

    def test_reads_prefixed_environment(self, monkeypatch):
        """Should load values from ROOMS_DB_* variables."""
        monkeypatch.setenv("ROOMS_DB_HOST", "db.internal")
        monkeypatch.setenv("ROOMS_DB_PORT", "6543")

        settings = DatabaseSettings()

        assert settings.host == "db.internal"
        assert settings.port == 6543

    def test_connection_string_hides_password(self, mock_db_settings):
        """Connection string is safe to log."""
        assert "testpass" not in mock_db_settings.connection_string
        assert mock_db_settings.connection_string == (
            "postgresql://testuser@testhost:5432/testdb"
        )


class TestMatrixSettings:
    """Tests for Matrix homeserver settings."""

    def test_requires_a_credential(self, monkeypatch):
        """Should reject settings without appservice token or password."""
        monkeypatch.delenv("ROOMS_MATRIX_APPSERVICE_TOKEN", raising=False)
        monkeypatch.delenv("ROOMS_MATRIX_AUTOMATION_PASSWORD", raising=False)

        with pytest.raises(ValidationError) as exc_info:
            MatrixSettings()

        assert "appservice_token" in str(exc_info.value)

    def test_accepts_appservice_token(self):
        """An appservice token alone is enough."""
        settings = MatrixSettings(appservice_token=SecretStr("as-token"))
        assert settings.appservice_token.get_secret_value() == "as-token"
        assert settings.automation_password is None

    def test_reads_prefixed_environment(self, monkeypatch):
        """Should load values from ROOMS_MATRIX_* variables."""
        monkeypatch.setenv("ROOMS_MATRIX_SERVER_NAME", "chat.example.org")
        monkeypatch.setenv("ROOMS_MATRIX_AUTOMATION_PASSWORD", "secret")

        settings = MatrixSettings()

        assert settings.server_name == "chat.example.org"
        assert settings.automation_password.get_secret_value() == "secret"

    def test_timeout_must_be_positive(self):
        """Request timeout must be greater than zero."""
        with pytest.raises(ValidationError):
            MatrixSettings(
                automation_password=SecretStr("x"), request_timeout_seconds=0
            )


class TestSettings:
    """Tests for the aggregate settings."""

    def test_defaults(self):
        """Should provide application defaults."""
        settings = Settings()
        assert settings.app_name == "Room Reconciler"
        assert settings.log_level == "INFO"
