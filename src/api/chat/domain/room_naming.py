"""Deterministic room names and aliases.

The same entity always yields the same name, including across recreation,
so a room can be traced back to its entity from the backend alone.

Format:
    name:  {entity_type}-{slug}-{tenant}
    alias: #{entity_type}-{slug}-{tenant}:{server_name}
"""

from __future__ import annotations

from dataclasses import dataclass

from chat.domain.value_objects import EntityRef, EntityType, TenantId


@dataclass(frozen=True)
class RoomAliasInfo:
    """Entity information recovered from a room alias."""

    entity: EntityRef
    tenant_id: TenantId
    room_alias: str


def room_name(entity: EntityRef, tenant_id: TenantId) -> str:
    """Build the room name for an entity in a tenant."""
    return f"{entity.entity_type.value}-{entity.slug}-{tenant_id.value}"


def room_alias(entity: EntityRef, tenant_id: TenantId, server_name: str) -> str:
    """Build the fully qualified room alias for an entity."""
    return f"#{room_name(entity, tenant_id)}:{server_name}"


def parse_room_alias(
    alias: str,
    server_name: str | None = None,
    tenant_id: TenantId | None = None,
) -> RoomAliasInfo | None:
    """Recover the entity and tenant encoded in a room alias.

    Slugs may contain dashes, so the tenant is taken as the last dash-separated
    segment unless the caller already knows the tenant, in which case the
    localpart must end with it.

    Args:
        alias: Alias with or without the leading "#"
        server_name: If given, aliases from other servers are rejected
        tenant_id: If given, the known tenant suffix to strip

    Returns:
        RoomAliasInfo, or None if the alias does not follow the format
    """
    bare = alias[1:] if alias.startswith("#") else alias
    localpart, sep, server = bare.partition(":")
    if not sep or not localpart or not server:
        return None
    if server_name is not None and server != server_name:
        return None

    type_part, sep, remainder = localpart.partition("-")
    if not sep:
        return None
    try:
        entity_type = EntityType(type_part)
    except ValueError:
        return None

    if tenant_id is not None:
        suffix = f"-{tenant_id.value}"
        if not remainder.endswith(suffix):
            return None
        slug = remainder[: -len(suffix)]
        tenant = tenant_id
    else:
        slug, sep, tenant_value = remainder.rpartition("-")
        if not sep or not tenant_value:
            return None
        tenant = TenantId(tenant_value)

    if not slug:
        return None

    return RoomAliasInfo(
        entity=EntityRef(entity_type=entity_type, slug=slug),
        tenant_id=tenant,
        room_alias=f"#{bare}",
    )
