"""Discretionary Access Control (DAC): role math and entity permission grants.

Membership in a container (space, household, project) comes from ``rls.py``.
This module layers the discretionary pieces on top of it:

  - Role ordering: ``owner > editor > commenter > viewer``
  - Entity grants: ``EntityPermissionGrant`` rows for a user or a team group.
    Revoked grants (``revoked_at`` set) never count.
  - Creator rights: a track's creator holds ``editor`` unless a
    ``CreatorRightsRevocation`` row exists for that creator and entity.
  - Access enforcement: ``require_role`` raises 403.

Effective track role = MAX(project role, creator right, active grants). The
creator right counts only for project members and is capped at the project
role. Grants are capped the same way when
``ENTITY_GRANTS_RESPECT_PROJECT_CEILING`` is set.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable
from uuid import UUID

from fastapi import HTTPException, status
from sqlmodel import and_, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.config import settings
from hearth.core.messages import AccessMessages
from hearth.models.permission import (
    CreatorRightsRevocation,
    EntityPermissionGrant,
    GrantEntityType,
    PermissionRole,
    SubjectType,
)
from hearth.models.project import Track
from hearth.services import rls

logger = logging.getLogger(__name__)


PERMISSION_LEVEL_ORDER: dict[PermissionRole, int] = {
    PermissionRole.viewer: 0,
    PermissionRole.commenter: 1,
    PermissionRole.editor: 2,
    PermissionRole.owner: 3,
}

GRANTABLE_ROLES: frozenset[PermissionRole] = frozenset(
    {PermissionRole.viewer, PermissionRole.commenter, PermissionRole.editor}
)


# ---------------------------------------------------------------------------
# Role math
# ---------------------------------------------------------------------------

def highest_role(roles: Iterable[PermissionRole | None]) -> PermissionRole | None:
    present = [role for role in roles if role is not None]
    if not present:
        return None
    return max(present, key=PERMISSION_LEVEL_ORDER.__getitem__)


def cap_role(role: PermissionRole | None, ceiling: PermissionRole | None) -> PermissionRole | None:
    """Clamp ``role`` to ``ceiling``; no ceiling means no access at all."""
    if role is None or ceiling is None:
        return None
    if PERMISSION_LEVEL_ORDER[role] > PERMISSION_LEVEL_ORDER[ceiling]:
        return ceiling
    return role


def role_satisfies(held: PermissionRole | None, required: PermissionRole) -> bool:
    """True when ``held`` is at least ``required``. A missing role never satisfies."""
    if held is None:
        return False
    return PERMISSION_LEVEL_ORDER[held] >= PERMISSION_LEVEL_ORDER[required]


def require_role(
    held: PermissionRole | None,
    required: PermissionRole,
) -> None:
    """Raise HTTPException(403) unless ``held`` satisfies ``required``."""
    if held is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=AccessMessages.NO_ACCESS,
        )
    if not role_satisfies(held, required):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=AccessMessages.CAPABILITY_REQUIRED,
        )


# ---------------------------------------------------------------------------
# Grants and creator rights
# ---------------------------------------------------------------------------

def active_grants_statement(entity_type: GrantEntityType, entity_id: UUID):
    return select(EntityPermissionGrant).where(
        EntityPermissionGrant.entity_type == entity_type,
        EntityPermissionGrant.entity_id == entity_id,
        EntityPermissionGrant.revoked_at.is_(None),
    )


async def granted_roles(
    session: AsyncSession,
    *,
    entity_type: GrantEntityType,
    entity_id: UUID,
    profile_id: UUID,
) -> list[PermissionRole]:
    """Roles from active grants made to the profile directly or to its groups."""
    group_ids = await rls.get_group_ids_for_profile(session, profile_id=profile_id)
    subject_clause = and_(
        EntityPermissionGrant.subject_type == SubjectType.user,
        EntityPermissionGrant.subject_id == profile_id,
    )
    if group_ids:
        subject_clause = or_(
            subject_clause,
            and_(
                EntityPermissionGrant.subject_type == SubjectType.group,
                EntityPermissionGrant.subject_id.in_(group_ids),
            ),
        )
    stmt = active_grants_statement(entity_type, entity_id).where(subject_clause)
    result = await session.exec(stmt)
    return [grant.permission_role for grant in result.all()]


async def creator_rights_revoked(
    session: AsyncSession,
    *,
    entity_type: GrantEntityType,
    entity_id: UUID,
    creator_profile_id: UUID,
) -> bool:
    stmt = select(CreatorRightsRevocation.id).where(
        CreatorRightsRevocation.entity_type == entity_type,
        CreatorRightsRevocation.entity_id == entity_id,
        CreatorRightsRevocation.creator_profile_id == creator_profile_id,
    )
    result = await session.exec(stmt)
    return result.first() is not None


async def creator_role(
    session: AsyncSession,
    *,
    entity_type: GrantEntityType,
    entity_id: UUID,
    created_by: UUID | None,
    profile_id: UUID,
) -> PermissionRole | None:
    if not settings.ENABLE_CREATOR_RIGHTS or created_by is None or created_by != profile_id:
        return None
    if await creator_rights_revoked(
        session,
        entity_type=entity_type,
        entity_id=entity_id,
        creator_profile_id=profile_id,
    ):
        return None
    return PermissionRole.editor


# ---------------------------------------------------------------------------
# Entity resolution
# ---------------------------------------------------------------------------

@dataclass
class EntityPermissionResolution:
    role: PermissionRole | None
    project_role: PermissionRole | None = None
    creator_role: PermissionRole | None = None
    grant_roles: list[PermissionRole] = field(default_factory=list)
    ceiling_applied: bool = False

    @property
    def can_view(self) -> bool:
        return role_satisfies(self.role, PermissionRole.viewer)

    @property
    def can_comment(self) -> bool:
        return role_satisfies(self.role, PermissionRole.commenter)

    @property
    def can_edit(self) -> bool:
        return role_satisfies(self.role, PermissionRole.editor)

    @property
    def can_manage(self) -> bool:
        return role_satisfies(self.role, PermissionRole.owner)


async def resolve_track_permissions(
    session: AsyncSession,
    *,
    track: Track,
    profile_id: UUID,
) -> EntityPermissionResolution:
    """Resolve every source of access to ``track`` for ``profile_id``."""
    project_role = await rls.get_project_role(
        session, project_id=track.project_id, profile_id=profile_id
    )
    creator = await creator_role(
        session,
        entity_type=GrantEntityType.track,
        entity_id=track.id,
        created_by=track.created_by,
        profile_id=profile_id,
    )
    grants: list[PermissionRole] = []
    if settings.ENABLE_ENTITY_GRANTS:
        grants = await granted_roles(
            session,
            entity_type=GrantEntityType.track,
            entity_id=track.id,
            profile_id=profile_id,
        )

    # Creator rights never outlive project membership or exceed the project role.
    creator_capped = cap_role(creator, project_role)
    ceiling_applied = creator_capped != creator
    role = highest_role([project_role, creator_capped, *grants])
    if settings.ENTITY_GRANTS_RESPECT_PROJECT_CEILING:
        capped = cap_role(role, project_role)
        ceiling_applied = ceiling_applied or capped != role
        role = capped

    logger.debug(
        "Resolved track %s for profile %s: role=%s project=%s creator=%s grants=%s",
        track.id,
        profile_id,
        role,
        project_role,
        creator,
        grants,
    )
    return EntityPermissionResolution(
        role=role,
        project_role=project_role,
        creator_role=creator,
        grant_roles=grants,
        ceiling_applied=ceiling_applied,
    )
