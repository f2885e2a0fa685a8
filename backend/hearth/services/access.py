"""Access Evaluator: decide whether a profile may act on a resource.

``can_access`` is the single entry point. It loads the resource, works out
its owning container and asks ``rls.py`` / ``permissions.py`` for the role
the profile holds there. It never raises for a missing row: unknown
resources, missing memberships and null ids all deny.

Soft-deleted resources (``deleted_at`` / ``archived_at`` on the row or on an
ancestor container) deny every capability. A recovery view
(``allow_deleted=True``) lets an ``owner`` through.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable
from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.config import settings
from hearth.models.activity import CollaborationActivity
from hearth.models.household import Household
from hearth.models.intervention import Intervention, InterventionLifecycleEvent, InterventionStatus
from hearth.models.mindmesh import MindmeshContainer, MindmeshWorkspace
from hearth.models.permission import GrantEntityType, PermissionRole
from hearth.models.profile import Profile
from hearth.models.project import MasterProject, Track
from hearth.models.safe_mode import SafeModeState
from hearth.models.space import Space, SpaceType
from hearth.services import permissions, rls

logger = logging.getLogger(__name__)


class ResourceType(str, Enum):
    profile = "profile"
    space = "space"
    household = "household"
    project = "project"
    track = "track"
    mindmesh_workspace = "mindmesh_workspace"
    mindmesh_container = "mindmesh_container"
    collaboration_activity = "collaboration_activity"
    intervention = "intervention"
    intervention_lifecycle_event = "intervention_lifecycle_event"
    safe_mode_state = "safe_mode_state"


@dataclass(frozen=True)
class AccessDecision:
    """Role held on a resource and whether the resource is soft-deleted."""

    role: PermissionRole | None
    deleted: bool = False
    found: bool = True


_NOT_FOUND = AccessDecision(role=None, found=False)


# ---------------------------------------------------------------------------
# Per-type resolvers
# ---------------------------------------------------------------------------

async def _resolve_profile(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    profile = await session.get(Profile, resource_id)
    if profile is None:
        return _NOT_FOUND
    return AccessDecision(role=PermissionRole.owner if profile.id == profile_id else None)


async def _resolve_space(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    space = await session.get(Space, resource_id)
    if space is None:
        return _NOT_FOUND
    role = await rls.get_space_role(session, space=space, profile_id=profile_id)
    if space.space_type == SpaceType.shared and settings.ENABLE_ENTITY_GRANTS:
        grants = await permissions.granted_roles(
            session,
            entity_type=GrantEntityType.space,
            entity_id=space.id,
            profile_id=profile_id,
        )
        role = permissions.highest_role([role, *grants])
    return AccessDecision(role=role, deleted=space.archived_at is not None)


async def _resolve_household(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    household = await session.get(Household, resource_id)
    if household is None:
        return _NOT_FOUND
    role = await rls.get_household_role(session, household_id=household.id, profile_id=profile_id)
    return AccessDecision(role=role, deleted=household.archived_at is not None)


async def _project_decision(session: AsyncSession, project_id: UUID, profile_id: UUID) -> AccessDecision:
    project = await session.get(MasterProject, project_id)
    if project is None:
        return _NOT_FOUND
    role = await rls.get_project_role(session, project_id=project.id, profile_id=profile_id)
    return AccessDecision(role=role, deleted=project.archived_at is not None)


async def _resolve_project(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    return await _project_decision(session, resource_id, profile_id)


async def _resolve_track(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    track = await session.get(Track, resource_id)
    if track is None:
        return _NOT_FOUND
    project = await session.get(MasterProject, track.project_id)
    resolution = await permissions.resolve_track_permissions(session, track=track, profile_id=profile_id)
    deleted = track.deleted_at is not None or (project is not None and project.archived_at is not None)
    return AccessDecision(role=resolution.role, deleted=deleted)


async def _resolve_workspace(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    workspace = await session.get(MindmeshWorkspace, resource_id)
    if workspace is None:
        return _NOT_FOUND
    return await _project_decision(session, workspace.project_id, profile_id)


async def _resolve_container(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    container = await session.get(MindmeshContainer, resource_id)
    if container is None:
        return _NOT_FOUND
    return await _resolve_workspace(session, container.workspace_id, profile_id)


async def _resolve_activity(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    activity = await session.get(CollaborationActivity, resource_id)
    if activity is None:
        return _NOT_FOUND
    if activity.profile_id == profile_id:
        return AccessDecision(role=PermissionRole.owner)
    if activity.project_id is None:
        return AccessDecision(role=None)
    project = await _project_decision(session, activity.project_id, profile_id)
    # Project members can read each other's activity but never own it.
    role = permissions.cap_role(project.role, PermissionRole.viewer)
    return AccessDecision(role=role, deleted=project.deleted)


async def _resolve_intervention(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    intervention = await session.get(Intervention, resource_id)
    if intervention is None:
        return _NOT_FOUND
    deleted = intervention.deleted_at is not None or intervention.status == InterventionStatus.deleted
    role = PermissionRole.owner if intervention.profile_id == profile_id else None
    return AccessDecision(role=role, deleted=deleted)


async def _resolve_lifecycle_event(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    event = await session.get(InterventionLifecycleEvent, resource_id)
    if event is None:
        return _NOT_FOUND
    return AccessDecision(role=PermissionRole.owner if event.profile_id == profile_id else None)


async def _resolve_safe_mode(session: AsyncSession, resource_id: UUID, profile_id: UUID) -> AccessDecision:
    state = await session.get(SafeModeState, resource_id)
    if state is None:
        return _NOT_FOUND
    return AccessDecision(role=PermissionRole.owner if state.profile_id == profile_id else None)


Resolver = Callable[[AsyncSession, UUID, UUID], Awaitable[AccessDecision]]

RESOLVERS: dict[ResourceType, Resolver] = {
    ResourceType.profile: _resolve_profile,
    ResourceType.space: _resolve_space,
    ResourceType.household: _resolve_household,
    ResourceType.project: _resolve_project,
    ResourceType.track: _resolve_track,
    ResourceType.mindmesh_workspace: _resolve_workspace,
    ResourceType.mindmesh_container: _resolve_container,
    ResourceType.collaboration_activity: _resolve_activity,
    ResourceType.intervention: _resolve_intervention,
    ResourceType.intervention_lifecycle_event: _resolve_lifecycle_event,
    ResourceType.safe_mode_state: _resolve_safe_mode,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def evaluate(
    session: AsyncSession,
    *,
    profile_id: UUID | None,
    resource_type: ResourceType | str,
    resource_id: UUID | None,
) -> AccessDecision:
    """Resolve the raw decision without applying a capability threshold."""
    if profile_id is None or resource_id is None:
        return _NOT_FOUND
    try:
        resource_type = ResourceType(resource_type)
    except ValueError:
        return _NOT_FOUND
    resolver = RESOLVERS[resource_type]
    return await resolver(session, resource_id, profile_id)


async def get_role(
    session: AsyncSession,
    *,
    profile_id: UUID | None,
    resource_type: ResourceType | str,
    resource_id: UUID | None,
    allow_deleted: bool = False,
) -> PermissionRole | None:
    """Effective role after the soft-delete rule, or ``None``."""
    decision = await evaluate(
        session,
        profile_id=profile_id,
        resource_type=resource_type,
        resource_id=resource_id,
    )
    if decision.deleted:
        if not allow_deleted or decision.role != PermissionRole.owner:
            return None
    return decision.role


async def can_access(
    session: AsyncSession,
    *,
    profile_id: UUID | None,
    resource_type: ResourceType | str,
    resource_id: UUID | None,
    capability: PermissionRole | str = PermissionRole.viewer,
    allow_deleted: bool = False,
) -> bool:
    """Boolean access check. Never raises for missing rows."""
    role = await get_role(
        session,
        profile_id=profile_id,
        resource_type=resource_type,
        resource_id=resource_id,
        allow_deleted=allow_deleted,
    )
    allowed = permissions.role_satisfies(role, PermissionRole(capability))
    if not allowed:
        logger.info(
            "Denied %s on %s %s for profile %s (held=%s)",
            capability,
            resource_type,
            resource_id,
            profile_id,
            role,
        )
    return allowed


async def require_access(
    session: AsyncSession,
    *,
    profile_id: UUID,
    resource_type: ResourceType | str,
    resource_id: UUID,
    capability: PermissionRole | str = PermissionRole.viewer,
    allow_deleted: bool = False,
) -> PermissionRole:
    """Return the held role or raise HTTPException(403)."""
    role = await get_role(
        session,
        profile_id=profile_id,
        resource_type=resource_type,
        resource_id=resource_id,
        allow_deleted=allow_deleted,
    )
    permissions.require_role(role, PermissionRole(capability))
    return role  # type: ignore[return-value]

