"""Container membership checks for spaces, households and projects.

This module reproduces the membership rules the database used to enforce
through row-level security helper functions:

  1. Personal spaces: only the owner. ``spaces.owner_id`` is authoritative;
     legacy rows without it fall back to an active ``owner`` row in
     ``space_members``.
  2. Shared spaces: an ``active`` ``space_members`` row. ``pending`` and
     ``left`` rows are the same as no row.
  3. Households: an ``active`` ``household_members`` row.
  4. Projects: a non-archived ``project_users`` row.

Every lookup returns the caller's role mapped onto ``PermissionRole`` or
``None``. A missing row is always ``None`` (deny), never an error.

Role math and entity-level grants live in ``permissions.py``; the generic
dispatch over resource types lives in ``access.py``.
"""

from __future__ import annotations

from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.models.household import HouseholdMember
from hearth.models.permission import PermissionRole
from hearth.models.project import ProjectUser, ProjectUserRole
from hearth.models.space import MemberRole, MembershipStatus, Space, SpaceMember, SpaceType
from hearth.models.team import TeamGroup, TeamGroupMember


_MEMBER_ROLE_MAP: dict[MemberRole, PermissionRole] = {
    MemberRole.owner: PermissionRole.owner,
    MemberRole.member: PermissionRole.editor,
}

_PROJECT_ROLE_MAP: dict[ProjectUserRole, PermissionRole] = {
    ProjectUserRole.owner: PermissionRole.owner,
    ProjectUserRole.editor: PermissionRole.editor,
    ProjectUserRole.viewer: PermissionRole.viewer,
}


def membership_role_to_permission(role: MemberRole) -> PermissionRole:
    """Space and household owners are ``owner``; plain members are ``editor``."""
    return _MEMBER_ROLE_MAP[role]


def project_role_to_permission(role: ProjectUserRole) -> PermissionRole:
    return _PROJECT_ROLE_MAP[role]


# ---------------------------------------------------------------------------
# Spaces
# ---------------------------------------------------------------------------

async def get_space_membership(
    session: AsyncSession,
    *,
    space_id: UUID,
    profile_id: UUID,
) -> SpaceMember | None:
    stmt = select(SpaceMember).where(
        SpaceMember.space_id == space_id,
        SpaceMember.profile_id == profile_id,
    )
    result = await session.exec(stmt)
    return result.one_or_none()


async def get_space_role(
    session: AsyncSession,
    *,
    space: Space,
    profile_id: UUID,
) -> PermissionRole | None:
    """Role the profile holds on ``space`` through ownership or membership."""
    if space.space_type == SpaceType.personal:
        if space.owner_id is not None:
            return PermissionRole.owner if space.owner_id == profile_id else None
        membership = await get_space_membership(session, space_id=space.id, profile_id=profile_id)
        if (
            membership
            and membership.role == MemberRole.owner
            and membership.status == MembershipStatus.active
        ):
            return PermissionRole.owner
        return None

    if space.owner_id is not None and space.owner_id == profile_id:
        return PermissionRole.owner
    membership = await get_space_membership(session, space_id=space.id, profile_id=profile_id)
    if not membership or membership.status != MembershipStatus.active:
        return None
    return membership_role_to_permission(membership.role)


async def user_can_access_space(
    session: AsyncSession,
    *,
    space_id: UUID | None,
    profile_id: UUID | None,
) -> bool:
    if space_id is None or profile_id is None:
        return False
    space = await session.get(Space, space_id)
    if space is None or space.archived_at is not None:
        return False
    return await get_space_role(session, space=space, profile_id=profile_id) is not None


# ---------------------------------------------------------------------------
# Households
# ---------------------------------------------------------------------------

async def get_household_membership(
    session: AsyncSession,
    *,
    household_id: UUID,
    profile_id: UUID,
) -> HouseholdMember | None:
    stmt = select(HouseholdMember).where(
        HouseholdMember.household_id == household_id,
        HouseholdMember.profile_id == profile_id,
    )
    result = await session.exec(stmt)
    return result.one_or_none()


async def get_household_role(
    session: AsyncSession,
    *,
    household_id: UUID,
    profile_id: UUID,
) -> PermissionRole | None:
    membership = await get_household_membership(
        session, household_id=household_id, profile_id=profile_id
    )
    if not membership or membership.status != MembershipStatus.active:
        return None
    return membership_role_to_permission(membership.role)


async def is_household_member(
    session: AsyncSession,
    *,
    household_id: UUID | None,
    profile_id: UUID | None,
) -> bool:
    if household_id is None or profile_id is None:
        return False
    role = await get_household_role(session, household_id=household_id, profile_id=profile_id)
    return role is not None


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

async def get_project_membership(
    session: AsyncSession,
    *,
    project_id: UUID,
    profile_id: UUID,
) -> ProjectUser | None:
    stmt = select(ProjectUser).where(
        ProjectUser.project_id == project_id,
        ProjectUser.profile_id == profile_id,
        ProjectUser.archived_at.is_(None),
    )
    result = await session.exec(stmt)
    return result.one_or_none()


async def get_project_role(
    session: AsyncSession,
    *,
    project_id: UUID,
    profile_id: UUID,
) -> PermissionRole | None:
    membership = await get_project_membership(session, project_id=project_id, profile_id=profile_id)
    if not membership:
        return None
    return project_role_to_permission(membership.role)


# ---------------------------------------------------------------------------
# Team groups
# ---------------------------------------------------------------------------

async def get_group_ids_for_profile(
    session: AsyncSession,
    *,
    profile_id: UUID,
) -> list[UUID]:
    """Groups the profile belongs to, skipping archived groups."""
    stmt = (
        select(TeamGroupMember.group_id)
        .join(TeamGroup, TeamGroup.id == TeamGroupMember.group_id)
        .where(
            TeamGroupMember.profile_id == profile_id,
            TeamGroup.archived_at.is_(None),
        )
    )
    result = await session.exec(stmt)
    return list(result.all())
