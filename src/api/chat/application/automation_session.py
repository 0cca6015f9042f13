"""Authenticated session for the automation identity.

Every administrative room operation runs as the automation identity, which
holds the highest privilege level in every room it creates. Authentication is
cached per tenant by the authenticator; this session only decides when to
trigger it and serializes concurrent triggers.
"""

from __future__ import annotations

import asyncio

from chat.application.observability import (
    AutomationSessionProbe,
    DefaultAutomationSessionProbe,
)
from chat.domain.value_objects import TenantId
from chat.ports.exceptions import AutomationAuthenticationError
from chat.ports.remote import IAutomationAuthenticator


class AutomationIdentitySession:
    """Ensures the automation identity is authenticated before remote calls."""

    def __init__(
        self,
        authenticator: IAutomationAuthenticator,
        probe: AutomationSessionProbe | None = None,
    ):
        self._authenticator = authenticator
        self._probe = probe or DefaultAutomationSessionProbe()
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, tenant_id: TenantId) -> asyncio.Lock:
        lock = self._locks.get(tenant_id.value)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[tenant_id.value] = lock
        return lock

    async def ensure_authenticated(self, tenant_id: TenantId) -> None:
        """Authenticate the automation identity for a tenant if needed.

        Concurrent callers for the same tenant wait on a single login.

        Raises:
            AutomationAuthenticationError: If authentication fails
        """
        if self._authenticator.is_authenticated(tenant_id):
            return

        async with self._lock_for(tenant_id):
            # Double-check after acquiring lock
            if self._authenticator.is_authenticated(tenant_id):
                return

            try:
                await self._authenticator.authenticate(tenant_id)
            except Exception as e:
                self._probe.automation_authentication_failed(
                    tenant_id=tenant_id.value,
                    error=str(e),
                )
                raise AutomationAuthenticationError(
                    tenant_id=tenant_id.value, reason=str(e)
                ) from e

            self._probe.automation_authenticated(
                tenant_id=tenant_id.value,
                identity=self._authenticator.identity(tenant_id),
            )

    async def current_identity(self, tenant_id: TenantId) -> str:
        """Return the automation identity's remote user id for a tenant.

        Raises:
            AutomationAuthenticationError: If authentication fails
        """
        await self.ensure_authenticated(tenant_id)
        return self._authenticator.identity(tenant_id)
