from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from hearth.api.deps import CurrentProfileDep, SessionDep
from hearth.schemas.track import TrackConvert, TrackRead
from hearth.services import tracks as tracks_service

router = APIRouter()


@router.post("/{track_id}/convert", response_model=TrackRead)
async def convert_track(
    track_id: UUID,
    convert_in: TrackConvert,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> TrackRead:
    try:
        track = await tracks_service.convert_track(
            session,
            track_id=track_id,
            target=convert_in.target,
            profile_id=current_profile.id,
        )
    except tracks_service.InvalidTrackTransition as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    await session.commit()
    await session.refresh(track)
    return TrackRead.model_validate(track)
