"""Unit test fixtures with mocked dependencies."""

import pytest
from pydantic import SecretStr

from chat.domain.value_objects import EntityRef, TenantId, UserId


@pytest.fixture
def mock_db_settings():
    """Provide test database settings."""
    from infrastructure.settings import DatabaseSettings

    return DatabaseSettings(
        host="testhost",
        port=5432,
        database="testdb",
        username="testuser",
        password=SecretStr("testpass"),
    )


@pytest.fixture
def mock_matrix_settings():
    """Provide test Matrix settings."""
    from infrastructure.settings import MatrixSettings

    return MatrixSettings(
        homeserver_url="https://matrix.test",
        server_name="matrix.test",
        automation_user="room-bot",
        automation_password=SecretStr("bot-password"),
    )


@pytest.fixture
def tenant_id() -> TenantId:
    return TenantId(value="tenant-a")


@pytest.fixture
def event_ref() -> EntityRef:
    return EntityRef.event("evt-42")


@pytest.fixture
def group_ref() -> EntityRef:
    return EntityRef.group("hikers")


@pytest.fixture
def user_id() -> UserId:
    return UserId(value="alice")
