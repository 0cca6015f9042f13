"""Composition helpers for the chat room bounded context.

Wires settings into adapters and adapters into services. Process-wide
objects (the homeserver client, the automation authenticator and session)
are cached; everything bound to a database session is built per unit of work.

The entity, user and role directories belong to the host application and
are passed in by the caller.
"""

from __future__ import annotations

from functools import lru_cache

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from chat.application.automation_session import AutomationIdentitySession
from chat.application.membership_event_handler import MembershipEventHandler
from chat.application.services import RoomReconciliationService, UserRoomSyncService
from chat.application.value_objects import ReconciliationConfig
from chat.infrastructure.matrix import MatrixAutomationAuthenticator, MatrixRoomClient
from chat.infrastructure.room_repository import RoomRepository
from chat.ports.directories import IEntityDirectory, IRoleDirectory, IUserDirectory
from infrastructure.settings import get_matrix_settings


@lru_cache
def get_reconciliation_config() -> ReconciliationConfig:
    """Get cached reconciliation configuration from Matrix settings."""
    return ReconciliationConfig(server_name=get_matrix_settings().server_name)


@lru_cache
def get_matrix_http_client() -> httpx.AsyncClient:
    """Get the application-scoped homeserver HTTP client (singleton)."""
    settings = get_matrix_settings()
    return httpx.AsyncClient(
        base_url=settings.homeserver_url,
        timeout=settings.request_timeout_seconds,
    )


@lru_cache
def get_matrix_authenticator() -> MatrixAutomationAuthenticator:
    """Get the automation authenticator (singleton, caches tokens per tenant)."""
    settings = get_matrix_settings()
    return MatrixAutomationAuthenticator(
        http_client=get_matrix_http_client(),
        automation_user=settings.automation_user,
        server_name=settings.server_name,
        appservice_token=(
            settings.appservice_token.get_secret_value()
            if settings.appservice_token
            else None
        ),
        password=(
            settings.automation_password.get_secret_value()
            if settings.automation_password
            else None
        ),
    )


@lru_cache
def get_automation_session() -> AutomationIdentitySession:
    """Get the automation identity session (singleton, holds per-tenant locks)."""
    return AutomationIdentitySession(authenticator=get_matrix_authenticator())


@lru_cache
def get_matrix_room_client() -> MatrixRoomClient:
    """Get the Matrix room client (singleton)."""
    return MatrixRoomClient(
        http_client=get_matrix_http_client(),
        authenticator=get_matrix_authenticator(),
    )


def build_reconciliation_service(
    session: AsyncSession,
    entity_directory: IEntityDirectory,
    user_directory: IUserDirectory,
    role_directory: IRoleDirectory,
) -> RoomReconciliationService:
    """Build a reconciliation service bound to a database session.

    Args:
        session: Session of the caller's unit of work
        entity_directory: Host application's event/group lookup
        user_directory: Host application's user lookup
        role_directory: Host application's role lookup

    Returns:
        RoomReconciliationService instance
    """
    return RoomReconciliationService(
        room_repository=RoomRepository(session=session),
        registry_transaction=session,
        entity_directory=entity_directory,
        user_directory=user_directory,
        role_directory=role_directory,
        remote_client=get_matrix_room_client(),
        automation_session=get_automation_session(),
        config=get_reconciliation_config(),
    )


def build_membership_event_handler(
    session: AsyncSession,
    entity_directory: IEntityDirectory,
    user_directory: IUserDirectory,
    role_directory: IRoleDirectory,
) -> MembershipEventHandler:
    """Build a membership event handler bound to a database session."""
    reconciliation = build_reconciliation_service(
        session, entity_directory, user_directory, role_directory
    )
    user_room_sync = UserRoomSyncService(
        reconciliation=reconciliation,
        user_directory=user_directory,
        role_directory=role_directory,
        config=get_reconciliation_config(),
    )
    return MembershipEventHandler(
        reconciliation=reconciliation,
        user_room_sync=user_room_sync,
    )


async def close_matrix_client() -> None:
    """Close the homeserver HTTP client. Should be called on shutdown."""
    if get_matrix_http_client.cache_info().currsize:
        await get_matrix_http_client().aclose()
        get_matrix_room_client.cache_clear()
        get_automation_session.cache_clear()
        get_matrix_authenticator.cache_clear()
        get_matrix_http_client.cache_clear()
