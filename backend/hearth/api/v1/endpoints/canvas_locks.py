from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, status

from hearth.api.deps import CurrentProfileDep, SessionDep
from hearth.models.permission import PermissionRole
from hearth.schemas.canvas_lock import CanvasLockAcquire, CanvasLockRead, CanvasLockStatus
from hearth.services import access as access_service
from hearth.services import canvas_locks as canvas_locks_service
from hearth.services.access import ResourceType

router = APIRouter()


@router.get("/workspaces/{workspace_id}/lock", response_model=CanvasLockStatus)
async def read_canvas_lock(
    workspace_id: UUID,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> CanvasLockStatus:
    await access_service.require_access(
        session,
        profile_id=current_profile.id,
        resource_type=ResourceType.mindmesh_workspace,
        resource_id=workspace_id,
    )
    lock = await canvas_locks_service.get_active_lock(session, workspace_id=workspace_id)
    if lock is None:
        return CanvasLockStatus(locked=False)
    return CanvasLockStatus(
        locked=True,
        lock=CanvasLockRead.model_validate(lock),
        held_by_me=lock.profile_id == current_profile.id,
    )


@router.post("/workspaces/{workspace_id}/lock", response_model=CanvasLockRead)
async def acquire_canvas_lock(
    workspace_id: UUID,
    lock_in: CanvasLockAcquire,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> CanvasLockRead:
    await access_service.require_access(
        session,
        profile_id=current_profile.id,
        resource_type=ResourceType.mindmesh_workspace,
        resource_id=workspace_id,
        capability=PermissionRole.editor,
    )
    try:
        lock = await canvas_locks_service.acquire_canvas_lock(
            session,
            workspace_id=workspace_id,
            profile_id=current_profile.id,
            duration_seconds=lock_in.duration_seconds,
        )
    except canvas_locks_service.CanvasLockedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    await session.commit()
    await session.refresh(lock)
    return CanvasLockRead.model_validate(lock)


@router.delete("/workspaces/{workspace_id}/lock", status_code=status.HTTP_204_NO_CONTENT)
async def release_canvas_lock(
    workspace_id: UUID,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> Response:
    released = await canvas_locks_service.release_canvas_lock(
        session, workspace_id=workspace_id, profile_id=current_profile.id
    )
    if released:
        await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
