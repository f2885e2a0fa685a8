"""Entity Resolver: auth identity to profile and memberships.

``profiles.id`` is the only principal identifier used past this module.
The auth-subsystem ``user_id`` is consulted here, once per request, to find
the caller's profile; nothing downstream accepts or compares auth ids.
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlmodel import and_, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import PrincipalMessages
from hearth.models.household import Household, HouseholdMember
from hearth.models.profile import Profile
from hearth.models.project import MasterProject, ProjectUser
from hearth.models.space import MemberRole, MembershipStatus, Space, SpaceMember, SpaceType
from hearth.services import rls

logger = logging.getLogger(__name__)


class ImpersonationError(PermissionError):
    """A principal tried to act on another principal's privileged state."""


@dataclass
class PrincipalContext:
    profile_id: UUID
    user_id: UUID
    household_ids: set[UUID] = field(default_factory=set)
    space_ids: set[UUID] = field(default_factory=set)
    project_ids: set[UUID] = field(default_factory=set)
    group_ids: set[UUID] = field(default_factory=set)


async def get_profile_by_user_id(session: AsyncSession, *, user_id: UUID) -> Profile | None:
    stmt = select(Profile).where(Profile.user_id == user_id)
    result = await session.exec(stmt)
    return result.one_or_none()


async def resolve_profile_id(session: AsyncSession, *, user_id: UUID | None) -> UUID | None:
    """Map an auth user id to its profile id, or ``None`` when unknown."""
    if user_id is None:
        return None
    profile = await get_profile_by_user_id(session, user_id=user_id)
    return profile.id if profile else None


async def get_profile(session: AsyncSession, *, profile_id: UUID) -> Profile | None:
    return await session.get(Profile, profile_id)


async def get_or_create_profile(
    session: AsyncSession,
    *,
    user_id: UUID,
    display_name: str | None = None,
) -> Profile:
    profile = await get_profile_by_user_id(session, user_id=user_id)
    if profile:
        return profile
    profile = Profile(user_id=user_id, display_name=display_name)
    session.add(profile)
    await session.flush()
    logger.info("Created profile %s for auth user %s", profile.id, user_id)
    return profile


def assert_same_principal(
    acting_profile_id: UUID,
    target_profile_id: UUID,
    *,
    detail: str = PrincipalMessages.IMPERSONATION,
) -> None:
    """Raise ``ImpersonationError`` unless both ids name the same profile."""
    if acting_profile_id != target_profile_id:
        logger.warning(
            "Profile %s attempted to act on behalf of profile %s",
            acting_profile_id,
            target_profile_id,
        )
        raise ImpersonationError(detail)


# ---------------------------------------------------------------------------
# Membership resolution
# ---------------------------------------------------------------------------

async def active_household_ids(session: AsyncSession, *, profile_id: UUID) -> set[UUID]:
    stmt = (
        select(HouseholdMember.household_id)
        .join(Household, Household.id == HouseholdMember.household_id)
        .where(
            HouseholdMember.profile_id == profile_id,
            HouseholdMember.status == MembershipStatus.active,
            Household.archived_at.is_(None),
        )
    )
    result = await session.exec(stmt)
    return set(result.all())


async def accessible_space_ids(session: AsyncSession, *, profile_id: UUID) -> set[UUID]:
    """Personal spaces the profile owns plus shared spaces it owns or actively belongs to."""
    owned_stmt = select(Space.id).where(
        Space.space_type == SpaceType.personal,
        Space.archived_at.is_(None),
        or_(
            Space.owner_id == profile_id,
            and_(
                Space.owner_id.is_(None),
                Space.id.in_(
                    select(SpaceMember.space_id).where(
                        SpaceMember.profile_id == profile_id,
                        SpaceMember.role == MemberRole.owner,
                        SpaceMember.status == MembershipStatus.active,
                    )
                ),
            ),
        ),
    )
    shared_stmt = select(Space.id).where(
        Space.space_type == SpaceType.shared,
        Space.archived_at.is_(None),
        or_(
            Space.owner_id == profile_id,
            Space.id.in_(
                select(SpaceMember.space_id).where(
                    SpaceMember.profile_id == profile_id,
                    SpaceMember.status == MembershipStatus.active,
                )
            ),
        ),
    )
    owned = await session.exec(owned_stmt)
    shared = await session.exec(shared_stmt)
    return set(owned.all()) | set(shared.all())


async def active_project_ids(session: AsyncSession, *, profile_id: UUID) -> set[UUID]:
    stmt = (
        select(ProjectUser.project_id)
        .join(MasterProject, MasterProject.id == ProjectUser.project_id)
        .where(
            ProjectUser.profile_id == profile_id,
            ProjectUser.archived_at.is_(None),
            MasterProject.archived_at.is_(None),
        )
    )
    result = await session.exec(stmt)
    return set(result.all())


async def active_group_ids(session: AsyncSession, *, profile_id: UUID) -> set[UUID]:
    return set(await rls.get_group_ids_for_profile(session, profile_id=profile_id))


async def resolve_principal(session: AsyncSession, *, profile: Profile) -> PrincipalContext:
    """Collect every container the profile currently belongs to."""
    return PrincipalContext(
        profile_id=profile.id,
        user_id=profile.user_id,
        household_ids=await active_household_ids(session, profile_id=profile.id),
        space_ids=await accessible_space_ids(session, profile_id=profile.id),
        project_ids=await active_project_ids(session, profile_id=profile.id),
        group_ids=await active_group_ids(session, profile_id=profile.id),
    )
