import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import TrackMessages
from hearth.models.activity import ActivityType, SurfaceType
from hearth.models.permission import PermissionRole
from hearth.models.project import Track, TrackCategory
from hearth.services import access, audit
from hearth.services.access import ResourceType

logger = logging.getLogger(__name__)


class InvalidTrackTransition(ValueError):
    def __init__(self, current: TrackCategory, target: TrackCategory) -> None:
        super().__init__(TrackMessages.INVALID_TRANSITION.format(current=current.value, target=target.value))
        self.current = current
        self.target = target


ALLOWED_TRANSITIONS: dict[TrackCategory, frozenset[TrackCategory]] = {
    TrackCategory.main: frozenset({TrackCategory.side_project, TrackCategory.offshoot_idea}),
    TrackCategory.side_project: frozenset({TrackCategory.offshoot_idea}),
    TrackCategory.offshoot_idea: frozenset(),
}

_SURFACE_FOR_CATEGORY = {
    TrackCategory.main: SurfaceType.track,
    TrackCategory.side_project: SurfaceType.side_project,
    TrackCategory.offshoot_idea: SurfaceType.offshoot_idea,
}


def validate_transition(current: TrackCategory, target: TrackCategory) -> None:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTrackTransition(current, target)


async def get_track(session: AsyncSession, track_id: UUID, *, include_deleted: bool = False) -> Track:
    stmt = audit.exclude_soft_deleted(
        select(Track).where(Track.id == track_id), Track, include_deleted=include_deleted
    )
    result = await session.exec(stmt)
    track = result.one_or_none()
    if not track:
        raise ValueError(TrackMessages.NOT_FOUND)
    return track


async def get_descendants(session: AsyncSession, track: Track) -> list[Track]:
    """Every live track below ``track``, breadth first."""
    descendants: list[Track] = []
    frontier = [track.id]
    seen = {track.id}
    while frontier:
        stmt = audit.exclude_soft_deleted(
            select(Track).where(Track.parent_track_id.in_(frontier)), Track
        )
        result = await session.exec(stmt)
        children = [child for child in result.all() if child.id not in seen]
        seen.update(child.id for child in children)
        descendants.extend(children)
        frontier = [child.id for child in children]
    return descendants


async def convert_track(
    session: AsyncSession,
    *,
    track_id: UUID,
    target: TrackCategory,
    profile_id: UUID,
) -> Track:
    """Move a track to ``target`` after validating the transition.

    Requires ``editor`` on the track. Converting to ``side_project`` carries
    the whole subtree along; both targets drop the track from the roadmap.
    """
    await access.require_access(
        session,
        profile_id=profile_id,
        resource_type=ResourceType.track,
        resource_id=track_id,
        capability=PermissionRole.editor,
    )
    track = await get_track(session, track_id)
    previous = track.category
    validate_transition(previous, target)

    now = datetime.now(timezone.utc)
    affected = [track]
    if target == TrackCategory.side_project:
        affected.extend(await get_descendants(session, track))
    for row in affected:
        row.category = target
        row.include_in_roadmap = False
        row.updated_at = now
        session.add(row)

    await audit.record_collaboration_activity(
        session,
        profile_id=profile_id,
        project_id=track.project_id,
        surface_type=_SURFACE_FOR_CATEGORY[target],
        entity_type="track",
        entity_id=track.id,
        activity_type=ActivityType.converted,
        context_metadata={
            "from_category": previous.value,
            "to_category": target.value,
            "cascaded_track_ids": [str(row.id) for row in affected[1:]],
        },
    )
    logger.info(
        "Converted track %s from %s to %s (%d descendants)",
        track.id,
        previous.value,
        target.value,
        len(affected) - 1,
    )
    return track


async def convert_to_side_project(session: AsyncSession, *, track_id: UUID, profile_id: UUID) -> Track:
    return await convert_track(
        session, track_id=track_id, target=TrackCategory.side_project, profile_id=profile_id
    )


async def convert_to_offshoot(session: AsyncSession, *, track_id: UUID, profile_id: UUID) -> Track:
    return await convert_track(
        session, track_id=track_id, target=TrackCategory.offshoot_idea, profile_id=profile_id
    )
