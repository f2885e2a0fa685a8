"""Append-only audit rows and soft-delete helpers."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlmodel import delete, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import AuditMessages
from hearth.models.activity import ActivityType, CollaborationActivity, SurfaceType
from hearth.models.intervention import InterventionLifecycleEvent, LifecycleEventType
from hearth.models.profile import Profile
from hearth.models.project import Track
from hearth.services import audit
from hearth.services.audit import AppendOnlyViolation
from hearth.testing import create_profile, create_project, create_track


async def _record_activity(session: AsyncSession, profile_id, project_id=None) -> CollaborationActivity:
    activity = await audit.record_collaboration_activity(
        session,
        profile_id=profile_id,
        project_id=project_id,
        surface_type=SurfaceType.track,
        entity_type="track",
        entity_id=uuid4(),
        activity_type=ActivityType.updated,
        context_metadata={"field": "title"},
    )
    await session.commit()
    return activity


# ---------------------------------------------------------------------------
# Soft delete
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_soft_delete_column_lookup():
    assert audit.soft_delete_column(Track) == "deleted_at"
    assert audit.soft_delete_column(Profile) is None


@pytest.mark.unit
def test_mark_soft_deleted_keeps_first_timestamp():
    first = datetime(2024, 1, 1, tzinfo=timezone.utc)
    track = Track(project_id=uuid4(), title="Roadmap", deleted_at=first)
    audit.mark_soft_deleted(track)
    assert track.deleted_at == first
    assert audit.is_soft_deleted(track)


@pytest.mark.unit
def test_mark_soft_deleted_rejects_models_without_column():
    with pytest.raises(ValueError):
        audit.mark_soft_deleted(Profile(user_id=uuid4()))


@pytest.mark.unit
def test_exclude_soft_deleted_adds_filter():
    stmt = audit.exclude_soft_deleted(select(Track), Track)
    assert "deleted_at IS NULL" in str(stmt)

    recovery = audit.exclude_soft_deleted(select(Track), Track, include_deleted=True)
    assert recovery.whereclause is None


@pytest.mark.service
async def test_exclude_soft_deleted_hides_rows(session: AsyncSession):
    project = await create_project(session)
    live = await create_track(session, project=project)
    await create_track(session, project=project, deleted_at=datetime.now(timezone.utc))

    stmt = audit.exclude_soft_deleted(select(Track).where(Track.project_id == project.id), Track)
    result = await session.exec(stmt)
    assert [track.id for track in result.all()] == [live.id]


# ---------------------------------------------------------------------------
# Append-only guard
# ---------------------------------------------------------------------------


@pytest.mark.service
async def test_activity_cannot_be_updated(session: AsyncSession):
    profile = await create_profile(session)
    activity = await _record_activity(session, profile.id)

    activity.activity_type = ActivityType.archived
    session.add(activity)
    with pytest.raises(AppendOnlyViolation) as exc_info:
        await session.flush()
    await session.rollback()

    assert exc_info.value.operation == "UPDATE"
    assert exc_info.value.table_name == CollaborationActivity.__tablename__


@pytest.mark.service
async def test_activity_cannot_be_deleted(session: AsyncSession):
    profile = await create_profile(session)
    activity = await _record_activity(session, profile.id)

    await session.delete(activity)
    with pytest.raises(AppendOnlyViolation):
        await session.flush()
    await session.rollback()


@pytest.mark.service
async def test_bulk_mutation_of_lifecycle_events_rejected(session: AsyncSession):
    profile = await create_profile(session)
    await audit.record_lifecycle_event(
        session,
        profile_id=profile.id,
        event_type=LifecycleEventType.intervention_created,
    )
    await session.commit()

    with pytest.raises(AppendOnlyViolation):
        await session.exec(
            update(InterventionLifecycleEvent)
            .where(InterventionLifecycleEvent.profile_id == profile.id)
            .values(meta={"tampered": True})
        )
    with pytest.raises(AppendOnlyViolation):
        await session.exec(delete(InterventionLifecycleEvent))
    await session.rollback()

    events = await audit.list_lifecycle_events(session, profile_id=profile.id)
    assert len(events) == 1
    assert events[0].meta == {}


@pytest.mark.unit
def test_append_only_violation_is_permission_error():
    error = AppendOnlyViolation("collaboration_activity", "DELETE")
    assert isinstance(error, PermissionError)
    assert str(error) == AuditMessages.APPEND_ONLY


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@pytest.mark.service
async def test_list_activity_filters(session: AsyncSession):
    author = await create_profile(session)
    other = await create_profile(session)
    project = await create_project(session, owner=author)
    await _record_activity(session, author.id, project.id)
    await _record_activity(session, other.id)

    by_project = await audit.list_collaboration_activity(session, project_id=project.id)
    by_other = await audit.list_collaboration_activity(session, profile_id=other.id)

    assert [activity.profile_id for activity in by_project] == [author.id]
    assert [activity.profile_id for activity in by_other] == [other.id]
    assert by_project[0].context_metadata == {"field": "title"}
