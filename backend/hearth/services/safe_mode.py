"""Safe Mode: the per-profile emergency brake.

Turning Safe Mode on hides every insight and pauses every active
intervention. Turning it off only lifts the insight block: paused
interventions stay paused with ``auto_resume_blocked`` set, so the profile
has to re-enable each one deliberately.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import SafeModeMessages
from hearth.models.intervention import (
    Intervention,
    InterventionStatus,
    LifecycleActor,
    LifecycleEventType,
)
from hearth.models.safe_mode import InsightDisplayConsent, SafeModeState, SignalKey
from hearth.services import audit
from hearth.services.principals import assert_same_principal

logger = logging.getLogger(__name__)


async def get_state(session: AsyncSession, *, profile_id: UUID) -> SafeModeState | None:
    stmt = select(SafeModeState).where(SafeModeState.profile_id == profile_id)
    result = await session.exec(stmt)
    return result.one_or_none()


async def is_safe_mode_enabled(session: AsyncSession, *, profile_id: UUID) -> bool:
    state = await get_state(session, profile_id=profile_id)
    return bool(state and state.is_enabled)


async def _pause_active_interventions(session: AsyncSession, *, profile_id: UUID, now: datetime) -> list[UUID]:
    stmt = select(Intervention).where(
        Intervention.profile_id == profile_id,
        Intervention.status == InterventionStatus.active,
    )
    result = await session.exec(stmt)
    paused: list[UUID] = []
    for intervention in result.all():
        intervention.status = InterventionStatus.paused
        intervention.paused_at = now
        intervention.paused_by_safe_mode = True
        intervention.auto_resume_blocked = True
        intervention.last_modified_at = now
        session.add(intervention)
        paused.append(intervention.id)
    return paused


async def _release_safe_mode_pauses(session: AsyncSession, *, profile_id: UUID, now: datetime) -> list[UUID]:
    stmt = select(Intervention).where(
        Intervention.profile_id == profile_id,
        Intervention.paused_by_safe_mode.is_(True),
    )
    result = await session.exec(stmt)
    released: list[UUID] = []
    for intervention in result.all():
        # Status stays paused; the profile resumes each intervention by hand.
        intervention.paused_by_safe_mode = False
        intervention.auto_resume_blocked = True
        intervention.last_modified_at = now
        session.add(intervention)
        released.append(intervention.id)
    return released


async def toggle_safe_mode(
    session: AsyncSession,
    *,
    acting_profile_id: UUID,
    profile_id: UUID,
    enable: bool,
    reason: str | None = None,
) -> SafeModeState:
    """Switch Safe Mode for ``profile_id``.

    Only the profile itself may toggle its Safe Mode; anything else raises
    ``ImpersonationError``. Repeating the current state is a no-op and does
    not bump ``activation_count``.
    """
    assert_same_principal(
        acting_profile_id, profile_id, detail=SafeModeMessages.CANNOT_TOGGLE_FOR_OTHERS
    )
    now = datetime.now(timezone.utc)
    state = await get_state(session, profile_id=profile_id)
    if state is None:
        state = SafeModeState(profile_id=profile_id)
        session.add(state)

    if state.is_enabled == enable:
        await session.flush()
        return state

    state.is_enabled = enable
    state.last_toggled_at = now
    state.updated_at = now
    if enable:
        state.enabled_at = now
        state.activation_reason = reason
        state.activation_count = (state.activation_count or 0) + 1
        affected = await _pause_active_interventions(session, profile_id=profile_id, now=now)
        event_type = LifecycleEventType.safe_mode_paused_interventions
    else:
        state.disabled_at = now
        affected = await _release_safe_mode_pauses(session, profile_id=profile_id, now=now)
        event_type = LifecycleEventType.safe_mode_unpaused_interventions
    session.add(state)

    await audit.record_lifecycle_event(
        session,
        profile_id=profile_id,
        event_type=event_type,
        actor=LifecycleActor.safe_mode,
        meta={
            "intervention_ids": [str(intervention_id) for intervention_id in affected],
            "count": len(affected),
            "reason": reason,
        },
    )
    logger.info(
        "Safe Mode %s for profile %s (%d interventions affected)",
        "enabled" if enable else "disabled",
        profile_id,
        len(affected),
    )
    return state


async def set_display_consent(
    session: AsyncSession,
    *,
    profile_id: UUID,
    signal_key: SignalKey,
    display_enabled: bool,
) -> InsightDisplayConsent:
    stmt = select(InsightDisplayConsent).where(
        InsightDisplayConsent.profile_id == profile_id,
        InsightDisplayConsent.signal_key == signal_key,
    )
    result = await session.exec(stmt)
    consent = result.one_or_none()
    now = datetime.now(timezone.utc)
    if consent is None:
        consent = InsightDisplayConsent(profile_id=profile_id, signal_key=signal_key)
    consent.display_enabled = display_enabled
    if display_enabled:
        consent.granted_at = now
        consent.revoked_at = None
    else:
        consent.revoked_at = now
    consent.updated_at = now
    session.add(consent)
    await session.flush()
    return consent


async def can_display_insight(
    session: AsyncSession,
    *,
    profile_id: UUID,
    signal_key: SignalKey,
) -> bool:
    """Safe Mode wins; otherwise display needs an explicit consent row."""
    if await is_safe_mode_enabled(session, profile_id=profile_id):
        return False
    stmt = select(InsightDisplayConsent.display_enabled).where(
        InsightDisplayConsent.profile_id == profile_id,
        InsightDisplayConsent.signal_key == signal_key,
    )
    result = await session.exec(stmt)
    return bool(result.first())
