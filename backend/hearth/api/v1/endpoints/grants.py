from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, status

from hearth.api.deps import CurrentProfileDep, SessionDep
from hearth.models.permission import GrantEntityType
from hearth.schemas.grant import CreatorRightsChange, CreatorRightsStatus, GrantCreate, GrantRead
from hearth.services import grants as grants_service

router = APIRouter()


@router.post("/", response_model=GrantRead, status_code=status.HTTP_201_CREATED)
async def create_grant(
    grant_in: GrantCreate,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> GrantRead:
    try:
        grant = await grants_service.grant_entity_permission(
            session,
            entity_type=grant_in.entity_type,
            entity_id=grant_in.entity_id,
            subject_type=grant_in.subject_type,
            subject_id=grant_in.subject_id,
            permission_role=grant_in.permission_role,
            granted_by=current_profile.id,
        )
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    await session.commit()
    await session.refresh(grant)
    return GrantRead.model_validate(grant)


@router.get("/", response_model=List[GrantRead])
async def list_grants(
    entity_type: GrantEntityType,
    entity_id: UUID,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> List[GrantRead]:
    try:
        grants = await grants_service.list_active_grants(
            session,
            entity_type=entity_type,
            entity_id=entity_id,
            profile_id=current_profile.id,
        )
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return [GrantRead.model_validate(grant) for grant in grants]


@router.delete("/{grant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_grant(
    grant_id: UUID,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> Response:
    try:
        await grants_service.revoke_grant(session, grant_id=grant_id, revoked_by=current_profile.id)
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/creator-rights/revoke", response_model=CreatorRightsStatus)
async def revoke_creator_rights(
    change_in: CreatorRightsChange,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> CreatorRightsStatus:
    try:
        await grants_service.revoke_creator_rights(
            session,
            entity_type=change_in.entity_type,
            entity_id=change_in.entity_id,
            creator_profile_id=change_in.creator_profile_id,
            revoked_by=current_profile.id,
        )
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    await session.commit()
    return CreatorRightsStatus(**change_in.model_dump(), revoked=True)


@router.post("/creator-rights/restore", response_model=CreatorRightsStatus)
async def restore_creator_rights(
    change_in: CreatorRightsChange,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> CreatorRightsStatus:
    try:
        await grants_service.restore_creator_rights(
            session,
            entity_type=change_in.entity_type,
            entity_id=change_in.entity_id,
            creator_profile_id=change_in.creator_profile_id,
            restored_by=current_profile.id,
        )
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    await session.commit()
    return CreatorRightsStatus(**change_in.model_dump(), revoked=False)
