"""Soft-delete filtering and append-only audit writers."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.db.guards import APPEND_ONLY_MODELS, AppendOnlyViolation
from hearth.models.activity import ActivityType, CollaborationActivity, SurfaceType
from hearth.models.intervention import (
    InterventionLifecycleEvent,
    LifecycleActor,
    LifecycleEventType,
)

__all__ = [
    "APPEND_ONLY_MODELS",
    "AppendOnlyViolation",
    "exclude_soft_deleted",
    "is_soft_deleted",
    "list_collaboration_activity",
    "list_lifecycle_events",
    "mark_soft_deleted",
    "record_collaboration_activity",
    "record_lifecycle_event",
    "soft_delete_column",
]

logger = logging.getLogger(__name__)

SOFT_DELETE_COLUMNS = ("deleted_at", "archived_at")


def soft_delete_column(model: type[SQLModel]) -> str | None:
    """Name of the model's soft-delete column, if it has one."""
    for name in SOFT_DELETE_COLUMNS:
        if name in model.__table__.columns:  # type: ignore[attr-defined]
            return name
    return None


def exclude_soft_deleted(statement, model: type[SQLModel], *, include_deleted: bool = False):
    """Filter flagged rows out of ``statement``.

    ``include_deleted`` is the recovery view; callers must have checked the
    owner capability before asking for it.
    """
    column_name = soft_delete_column(model)
    if column_name is None or include_deleted:
        return statement
    return statement.where(getattr(model, column_name).is_(None))


def is_soft_deleted(row: SQLModel) -> bool:
    column_name = soft_delete_column(type(row))
    return column_name is not None and getattr(row, column_name) is not None


def mark_soft_deleted(row: SQLModel, *, now: datetime | None = None) -> SQLModel:
    column_name = soft_delete_column(type(row))
    if column_name is None:
        raise ValueError(f"{type(row).__name__} does not support soft delete")
    if getattr(row, column_name) is None:
        setattr(row, column_name, now or datetime.now(timezone.utc))
    return row


# ---------------------------------------------------------------------------
# Append-only writers
# ---------------------------------------------------------------------------

async def record_collaboration_activity(
    session: AsyncSession,
    *,
    profile_id: UUID,
    surface_type: SurfaceType,
    entity_type: str,
    entity_id: UUID,
    activity_type: ActivityType,
    project_id: UUID | None = None,
    context_metadata: dict[str, Any] | None = None,
) -> CollaborationActivity:
    activity = CollaborationActivity(
        profile_id=profile_id,
        project_id=project_id,
        surface_type=surface_type,
        entity_type=entity_type,
        entity_id=entity_id,
        activity_type=activity_type,
        context_metadata=context_metadata or {},
    )
    session.add(activity)
    await session.flush()
    logger.debug(
        "Recorded %s activity on %s %s by profile %s",
        activity_type.value,
        entity_type,
        entity_id,
        profile_id,
    )
    return activity


async def record_lifecycle_event(
    session: AsyncSession,
    *,
    profile_id: UUID,
    event_type: LifecycleEventType,
    intervention_id: UUID | None = None,
    actor: LifecycleActor = LifecycleActor.user,
    meta: dict[str, Any] | None = None,
) -> InterventionLifecycleEvent:
    event = InterventionLifecycleEvent(
        profile_id=profile_id,
        intervention_id=intervention_id,
        event_type=event_type,
        actor=actor,
        meta=meta or {},
    )
    session.add(event)
    await session.flush()
    return event


async def list_collaboration_activity(
    session: AsyncSession,
    *,
    profile_id: UUID | None = None,
    project_id: UUID | None = None,
    entity_id: UUID | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[CollaborationActivity]:
    stmt = select(CollaborationActivity)
    if profile_id is not None:
        stmt = stmt.where(CollaborationActivity.profile_id == profile_id)
    if project_id is not None:
        stmt = stmt.where(CollaborationActivity.project_id == project_id)
    if entity_id is not None:
        stmt = stmt.where(CollaborationActivity.entity_id == entity_id)
    stmt = stmt.order_by(CollaborationActivity.created_at.desc()).offset(offset).limit(limit)
    result = await session.exec(stmt)
    return list(result.all())


async def list_lifecycle_events(
    session: AsyncSession,
    *,
    profile_id: UUID,
    intervention_id: UUID | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[InterventionLifecycleEvent]:
    stmt = select(InterventionLifecycleEvent).where(
        InterventionLifecycleEvent.profile_id == profile_id
    )
    if intervention_id is not None:
        stmt = stmt.where(InterventionLifecycleEvent.intervention_id == intervention_id)
    stmt = stmt.order_by(InterventionLifecycleEvent.created_at.desc()).offset(offset).limit(limit)
    result = await session.exec(stmt)
    return list(result.all())
