import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import InterventionMessages
from hearth.models.intervention import (
    Intervention,
    InterventionKey,
    InterventionStatus,
    LifecycleEventType,
)
from hearth.services import audit, safe_mode

logger = logging.getLogger(__name__)


class SafeModeActiveError(ValueError):
    """Interventions cannot be enabled while Safe Mode is on."""


async def list_interventions(
    session: AsyncSession,
    *,
    profile_id: UUID,
    status: InterventionStatus | None = None,
    include_deleted: bool = False,
) -> list[Intervention]:
    stmt = select(Intervention).where(Intervention.profile_id == profile_id)
    stmt = audit.exclude_soft_deleted(stmt, Intervention, include_deleted=include_deleted)
    if status is not None:
        stmt = stmt.where(Intervention.status == status)
    stmt = stmt.order_by(Intervention.created_at)
    result = await session.exec(stmt)
    return list(result.all())


async def get_intervention(
    session: AsyncSession,
    *,
    intervention_id: UUID,
    profile_id: UUID,
) -> Intervention:
    """Load one of the profile's interventions; other profiles' rows are not found."""
    stmt = select(Intervention).where(
        Intervention.id == intervention_id,
        Intervention.profile_id == profile_id,
    )
    result = await session.exec(stmt)
    intervention = result.one_or_none()
    if not intervention:
        raise ValueError(InterventionMessages.NOT_FOUND)
    if intervention.status == InterventionStatus.deleted:
        raise ValueError(InterventionMessages.DELETED)
    return intervention


async def _log(session: AsyncSession, intervention: Intervention, event_type: LifecycleEventType, **meta: Any) -> None:
    await audit.record_lifecycle_event(
        session,
        profile_id=intervention.profile_id,
        intervention_id=intervention.id,
        event_type=event_type,
        meta=meta,
    )


async def create_intervention(
    session: AsyncSession,
    *,
    profile_id: UUID,
    intervention_key: InterventionKey,
    why_text: str | None = None,
    user_parameters: dict[str, Any] | None = None,
) -> Intervention:
    """New interventions start paused; the profile enables them explicitly."""
    now = datetime.now(timezone.utc)
    intervention = Intervention(
        profile_id=profile_id,
        intervention_key=intervention_key,
        status=InterventionStatus.paused,
        why_text=why_text,
        user_parameters=user_parameters or {},
        paused_at=now,
    )
    session.add(intervention)
    await session.flush()
    await _log(session, intervention, LifecycleEventType.intervention_created, key=intervention_key.value)
    return intervention


async def enable_intervention(
    session: AsyncSession,
    *,
    intervention_id: UUID,
    profile_id: UUID,
) -> Intervention:
    if await safe_mode.is_safe_mode_enabled(session, profile_id=profile_id):
        raise SafeModeActiveError(InterventionMessages.SAFE_MODE_ACTIVE)
    intervention = await get_intervention(session, intervention_id=intervention_id, profile_id=profile_id)
    now = datetime.now(timezone.utc)
    intervention.status = InterventionStatus.active
    intervention.enabled_at = now
    intervention.paused_by_safe_mode = False
    intervention.auto_resume_blocked = False
    intervention.last_modified_at = now
    session.add(intervention)
    await _log(session, intervention, LifecycleEventType.intervention_enabled)
    return intervention


async def pause_intervention(
    session: AsyncSession,
    *,
    intervention_id: UUID,
    profile_id: UUID,
) -> Intervention:
    intervention = await get_intervention(session, intervention_id=intervention_id, profile_id=profile_id)
    now = datetime.now(timezone.utc)
    intervention.status = InterventionStatus.paused
    intervention.paused_at = now
    intervention.last_modified_at = now
    session.add(intervention)
    await _log(session, intervention, LifecycleEventType.intervention_paused)
    return intervention


async def disable_intervention(
    session: AsyncSession,
    *,
    intervention_id: UUID,
    profile_id: UUID,
) -> Intervention:
    intervention = await get_intervention(session, intervention_id=intervention_id, profile_id=profile_id)
    now = datetime.now(timezone.utc)
    intervention.status = InterventionStatus.disabled
    intervention.disabled_at = now
    intervention.last_modified_at = now
    session.add(intervention)
    await _log(session, intervention, LifecycleEventType.intervention_disabled)
    return intervention


async def update_intervention(
    session: AsyncSession,
    *,
    intervention_id: UUID,
    profile_id: UUID,
    why_text: str | None = None,
    user_parameters: dict[str, Any] | None = None,
) -> Intervention:
    intervention = await get_intervention(session, intervention_id=intervention_id, profile_id=profile_id)
    changed: list[str] = []
    if why_text is not None:
        intervention.why_text = why_text
        changed.append("why_text")
    if user_parameters is not None:
        intervention.user_parameters = user_parameters
        changed.append("user_parameters")
    if not changed:
        return intervention
    intervention.last_modified_at = datetime.now(timezone.utc)
    session.add(intervention)
    await _log(session, intervention, LifecycleEventType.intervention_edited, fields=changed)
    return intervention


async def delete_intervention(
    session: AsyncSession,
    *,
    intervention_id: UUID,
    profile_id: UUID,
) -> Intervention:
    """Soft delete. The row and its history stay for the audit trail."""
    intervention = await get_intervention(session, intervention_id=intervention_id, profile_id=profile_id)
    now = datetime.now(timezone.utc)
    intervention.status = InterventionStatus.deleted
    audit.mark_soft_deleted(intervention, now=now)
    intervention.last_modified_at = now
    session.add(intervention)
    await _log(session, intervention, LifecycleEventType.intervention_deleted)
    logger.info("Deleted intervention %s for profile %s", intervention.id, profile_id)
    return intervention
