from typing import List, NoReturn, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from hearth.api.deps import CurrentProfileDep, SessionDep
from hearth.core.messages import InterventionMessages
from hearth.models.intervention import InterventionStatus
from hearth.schemas.intervention import (
    InterventionCreate,
    InterventionRead,
    InterventionUpdate,
    LifecycleEventRead,
)
from hearth.services import audit as audit_service
from hearth.services import interventions as interventions_service

router = APIRouter()


def _raise_for(exc: ValueError) -> NoReturn:
    if isinstance(exc, interventions_service.SafeModeActiveError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if str(exc) == InterventionMessages.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/", response_model=List[InterventionRead])
async def list_interventions(
    session: SessionDep,
    current_profile: CurrentProfileDep,
    status_filter: Optional[InterventionStatus] = Query(default=None, alias="status"),
) -> List[InterventionRead]:
    interventions = await interventions_service.list_interventions(
        session, profile_id=current_profile.id, status=status_filter
    )
    return [InterventionRead.model_validate(item) for item in interventions]


@router.post("/", response_model=InterventionRead, status_code=status.HTTP_201_CREATED)
async def create_intervention(
    intervention_in: InterventionCreate,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> InterventionRead:
    intervention = await interventions_service.create_intervention(
        session,
        profile_id=current_profile.id,
        intervention_key=intervention_in.intervention_key,
        why_text=intervention_in.why_text,
        user_parameters=intervention_in.user_parameters,
    )
    await session.commit()
    await session.refresh(intervention)
    return InterventionRead.model_validate(intervention)


@router.get("/events", response_model=List[LifecycleEventRead])
async def list_lifecycle_events(
    session: SessionDep,
    current_profile: CurrentProfileDep,
    intervention_id: Optional[UUID] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> List[LifecycleEventRead]:
    events = await audit_service.list_lifecycle_events(
        session,
        profile_id=current_profile.id,
        intervention_id=intervention_id,
        limit=limit,
        offset=offset,
    )
    return [LifecycleEventRead.model_validate(event) for event in events]


@router.patch("/{intervention_id}", response_model=InterventionRead)
async def update_intervention(
    intervention_id: UUID,
    intervention_in: InterventionUpdate,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> InterventionRead:
    try:
        intervention = await interventions_service.update_intervention(
            session,
            intervention_id=intervention_id,
            profile_id=current_profile.id,
            why_text=intervention_in.why_text,
            user_parameters=intervention_in.user_parameters,
        )
    except ValueError as exc:
        _raise_for(exc)
    await session.commit()
    await session.refresh(intervention)
    return InterventionRead.model_validate(intervention)


_TRANSITIONS = {
    "enable": interventions_service.enable_intervention,
    "pause": interventions_service.pause_intervention,
    "disable": interventions_service.disable_intervention,
}


@router.post("/{intervention_id}/{action}", response_model=InterventionRead)
async def transition_intervention(
    intervention_id: UUID,
    action: str,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> InterventionRead:
    transition = _TRANSITIONS.get(action)
    if transition is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown action")
    try:
        intervention = await transition(
            session, intervention_id=intervention_id, profile_id=current_profile.id
        )
    except ValueError as exc:
        _raise_for(exc)
    await session.commit()
    await session.refresh(intervention)
    return InterventionRead.model_validate(intervention)


@router.delete("/{intervention_id}", response_model=InterventionRead)
async def delete_intervention(
    intervention_id: UUID,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> InterventionRead:
    try:
        intervention = await interventions_service.delete_intervention(
            session, intervention_id=intervention_id, profile_id=current_profile.id
        )
    except ValueError as exc:
        _raise_for(exc)
    await session.commit()
    await session.refresh(intervention)
    return InterventionRead.model_validate(intervention)
