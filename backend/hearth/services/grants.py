import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import GrantMessages
from hearth.models.permission import (
    CreatorRightsRevocation,
    EntityPermissionGrant,
    GrantEntityType,
    PermissionRole,
    SubjectType,
)
from hearth.services import access, permissions
from hearth.services.access import ResourceType

logger = logging.getLogger(__name__)

_RESOURCE_FOR_ENTITY = {
    GrantEntityType.track: ResourceType.track,
    GrantEntityType.space: ResourceType.space,
}


async def _require_entity_owner(
    session: AsyncSession,
    *,
    entity_type: GrantEntityType,
    entity_id: UUID,
    profile_id: UUID,
) -> None:
    allowed = await access.can_access(
        session,
        profile_id=profile_id,
        resource_type=_RESOURCE_FOR_ENTITY[entity_type],
        resource_id=entity_id,
        capability=PermissionRole.owner,
    )
    if not allowed:
        raise PermissionError(GrantMessages.OWNER_REQUIRED)


async def get_active_grant(
    session: AsyncSession,
    *,
    entity_type: GrantEntityType,
    entity_id: UUID,
    subject_type: SubjectType,
    subject_id: UUID,
) -> EntityPermissionGrant | None:
    stmt = permissions.active_grants_statement(entity_type, entity_id).where(
        EntityPermissionGrant.subject_type == subject_type,
        EntityPermissionGrant.subject_id == subject_id,
    )
    result = await session.exec(stmt)
    return result.one_or_none()


async def grant_entity_permission(
    session: AsyncSession,
    *,
    entity_type: GrantEntityType,
    entity_id: UUID,
    subject_type: SubjectType,
    subject_id: UUID,
    permission_role: PermissionRole,
    granted_by: UUID,
) -> EntityPermissionGrant:
    """Create or update the subject's active grant on the entity.

    The granter must own the entity. ``owner`` itself cannot be granted.
    """
    if permission_role not in permissions.GRANTABLE_ROLES:
        raise ValueError(GrantMessages.OWNER_NOT_GRANTABLE)
    await _require_entity_owner(
        session, entity_type=entity_type, entity_id=entity_id, profile_id=granted_by
    )

    grant = await get_active_grant(
        session,
        entity_type=entity_type,
        entity_id=entity_id,
        subject_type=subject_type,
        subject_id=subject_id,
    )
    if grant is None:
        grant = EntityPermissionGrant(
            entity_type=entity_type,
            entity_id=entity_id,
            subject_type=subject_type,
            subject_id=subject_id,
        )
    grant.permission_role = permission_role
    grant.granted_by = granted_by
    session.add(grant)
    await session.flush()
    logger.info(
        "Granted %s on %s %s to %s %s",
        permission_role.value,
        entity_type.value,
        entity_id,
        subject_type.value,
        subject_id,
    )
    return grant


async def revoke_grant(
    session: AsyncSession,
    *,
    grant_id: UUID,
    revoked_by: UUID,
) -> EntityPermissionGrant:
    grant = await session.get(EntityPermissionGrant, grant_id)
    if not grant:
        raise ValueError(GrantMessages.NOT_FOUND)
    await _require_entity_owner(
        session, entity_type=grant.entity_type, entity_id=grant.entity_id, profile_id=revoked_by
    )
    if grant.revoked_at is None:
        grant.revoked_at = datetime.now(timezone.utc)
        session.add(grant)
        await session.flush()
        logger.info("Revoked grant %s", grant.id)
    return grant


async def list_active_grants(
    session: AsyncSession,
    *,
    entity_type: GrantEntityType,
    entity_id: UUID,
    profile_id: UUID,
) -> list[EntityPermissionGrant]:
    await _require_entity_owner(
        session, entity_type=entity_type, entity_id=entity_id, profile_id=profile_id
    )
    stmt = permissions.active_grants_statement(entity_type, entity_id).order_by(
        EntityPermissionGrant.created_at
    )
    result = await session.exec(stmt)
    return list(result.all())


async def revoke_creator_rights(
    session: AsyncSession,
    *,
    entity_type: GrantEntityType,
    entity_id: UUID,
    creator_profile_id: UUID,
    revoked_by: UUID,
) -> CreatorRightsRevocation:
    await _require_entity_owner(
        session, entity_type=entity_type, entity_id=entity_id, profile_id=revoked_by
    )
    stmt = select(CreatorRightsRevocation).where(
        CreatorRightsRevocation.entity_type == entity_type,
        CreatorRightsRevocation.entity_id == entity_id,
        CreatorRightsRevocation.creator_profile_id == creator_profile_id,
    )
    result = await session.exec(stmt)
    revocation = result.one_or_none()
    if revocation:
        return revocation
    revocation = CreatorRightsRevocation(
        entity_type=entity_type,
        entity_id=entity_id,
        creator_profile_id=creator_profile_id,
        revoked_by=revoked_by,
    )
    session.add(revocation)
    await session.flush()
    return revocation


async def restore_creator_rights(
    session: AsyncSession,
    *,
    entity_type: GrantEntityType,
    entity_id: UUID,
    creator_profile_id: UUID,
    restored_by: UUID,
) -> bool:
    await _require_entity_owner(
        session, entity_type=entity_type, entity_id=entity_id, profile_id=restored_by
    )
    stmt = select(CreatorRightsRevocation).where(
        CreatorRightsRevocation.entity_type == entity_type,
        CreatorRightsRevocation.entity_id == entity_id,
        CreatorRightsRevocation.creator_profile_id == creator_profile_id,
    )
    result = await session.exec(stmt)
    revocation = result.one_or_none()
    if not revocation:
        return False
    await session.delete(revocation)
    await session.flush()
    return True
