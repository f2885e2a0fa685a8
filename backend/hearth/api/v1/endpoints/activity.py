from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from hearth.api.deps import CurrentProfileDep, SessionDep
from hearth.schemas.activity import ActivityCreate, ActivityRead
from hearth.services import audit as audit_service
from hearth.services import policies as policies_service
from hearth.services.access import ResourceType
from hearth.services.policies import Operation

router = APIRouter()


@router.post("/", response_model=ActivityRead, status_code=status.HTTP_201_CREATED)
async def record_activity(
    activity_in: ActivityCreate,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> ActivityRead:
    if activity_in.project_id is not None:
        await policies_service.require_authorized(
            session,
            profile_id=current_profile.id,
            resource_type=ResourceType.collaboration_activity,
            operation=Operation.insert,
            scope_id=activity_in.project_id,
        )
    else:
        # Project-less activity lands on the caller's own trail.
        await policies_service.require_authorized(
            session,
            profile_id=current_profile.id,
            resource_type=ResourceType.profile,
            operation=Operation.update,
            resource_id=current_profile.id,
        )
    activity = await audit_service.record_collaboration_activity(
        session,
        profile_id=current_profile.id,
        project_id=activity_in.project_id,
        surface_type=activity_in.surface_type,
        entity_type=activity_in.entity_type,
        entity_id=activity_in.entity_id,
        activity_type=activity_in.activity_type,
        context_metadata=activity_in.context_metadata,
    )
    await session.commit()
    await session.refresh(activity)
    return ActivityRead.model_validate(activity)


@router.get("/", response_model=List[ActivityRead])
async def list_activity(
    session: SessionDep,
    current_profile: CurrentProfileDep,
    project_id: Optional[UUID] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> List[ActivityRead]:
    if project_id is not None:
        await policies_service.require_authorized(
            session,
            profile_id=current_profile.id,
            resource_type=ResourceType.project,
            operation=Operation.read,
            resource_id=project_id,
        )
        activities = await audit_service.list_collaboration_activity(
            session, project_id=project_id, limit=limit, offset=offset
        )
    else:
        activities = await audit_service.list_collaboration_activity(
            session, profile_id=current_profile.id, limit=limit, offset=offset
        )
    return [ActivityRead.model_validate(activity) for activity in activities]
