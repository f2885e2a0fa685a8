from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from hearth.api.deps import CurrentProfileDep, SessionDep
from hearth.core.messages import AccessMessages
from hearth.models.permission import GrantEntityType
from hearth.schemas.access import (
    AccessCheckRequest,
    AccessCheckResponse,
    AuthorizeRequest,
    AuthorizeResponse,
    EntityPermissionsRead,
)
from hearth.services import access as access_service
from hearth.services import permissions as permissions_service
from hearth.services import policies as policies_service
from hearth.services import tracks as tracks_service
from hearth.services.access import ResourceType

router = APIRouter()


@router.post("/check", response_model=AccessCheckResponse)
async def check_access(
    check_in: AccessCheckRequest,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> AccessCheckResponse:
    role = await access_service.get_role(
        session,
        profile_id=current_profile.id,
        resource_type=check_in.resource_type,
        resource_id=check_in.resource_id,
        allow_deleted=check_in.allow_deleted,
    )
    allowed = permissions_service.role_satisfies(role, check_in.capability)
    return AccessCheckResponse(allowed=allowed, role=role)


@router.post("/authorize", response_model=AuthorizeResponse)
async def authorize_operation(
    authorize_in: AuthorizeRequest,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> AuthorizeResponse:
    allowed = await policies_service.authorize(
        session,
        profile_id=current_profile.id,
        resource_type=authorize_in.resource_type,
        operation=authorize_in.operation,
        resource_id=authorize_in.resource_id,
        scope_id=authorize_in.scope_id,
    )
    return AuthorizeResponse(allowed=allowed)


@router.get("/entities/{entity_type}/{entity_id}", response_model=EntityPermissionsRead)
async def read_entity_permissions(
    entity_type: GrantEntityType,
    entity_id: UUID,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> EntityPermissionsRead:
    if entity_type == GrantEntityType.track:
        await access_service.require_access(
            session,
            profile_id=current_profile.id,
            resource_type=ResourceType.track,
            resource_id=entity_id,
        )
        try:
            track = await tracks_service.get_track(session, entity_id)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        resolution = await permissions_service.resolve_track_permissions(
            session, track=track, profile_id=current_profile.id
        )
    else:
        role = await access_service.get_role(
            session,
            profile_id=current_profile.id,
            resource_type=ResourceType.space,
            resource_id=entity_id,
        )
        if role is None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=AccessMessages.NO_ACCESS)
        resolution = permissions_service.EntityPermissionResolution(role=role)

    return EntityPermissionsRead(
        entity_type=entity_type.value,
        entity_id=entity_id,
        role=resolution.role,
        can_view=resolution.can_view,
        can_comment=resolution.can_comment,
        can_edit=resolution.can_edit,
        can_manage=resolution.can_manage,
        project_role=resolution.project_role,
        creator_role=resolution.creator_role,
        grant_roles=resolution.grant_roles,
        ceiling_applied=resolution.ceiling_applied,
    )
