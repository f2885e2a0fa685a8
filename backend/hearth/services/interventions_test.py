"""Intervention lifecycle transitions and their audit trail."""

from uuid import uuid4

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import InterventionMessages
from hearth.models.intervention import InterventionKey, InterventionStatus, LifecycleEventType
from hearth.services import audit, interventions, safe_mode
from hearth.services.interventions import SafeModeActiveError
from hearth.testing import create_profile


async def _create(session: AsyncSession, profile_id, key=InterventionKey.context_aware_prompt):
    intervention = await interventions.create_intervention(
        session,
        profile_id=profile_id,
        intervention_key=key,
        why_text="Keeps me on track",
    )
    await session.commit()
    return intervention


@pytest.mark.service
async def test_new_intervention_starts_paused(session: AsyncSession):
    profile = await create_profile(session)
    intervention = await _create(session, profile.id)

    assert intervention.status == InterventionStatus.paused
    events = await audit.list_lifecycle_events(session, profile_id=profile.id, intervention_id=intervention.id)
    assert [event.event_type for event in events] == [LifecycleEventType.intervention_created]


@pytest.mark.service
async def test_enable_pause_disable(session: AsyncSession):
    profile = await create_profile(session)
    intervention = await _create(session, profile.id)

    await interventions.enable_intervention(session, intervention_id=intervention.id, profile_id=profile.id)
    assert intervention.status == InterventionStatus.active
    assert intervention.enabled_at is not None

    await interventions.pause_intervention(session, intervention_id=intervention.id, profile_id=profile.id)
    assert intervention.status == InterventionStatus.paused

    await interventions.disable_intervention(session, intervention_id=intervention.id, profile_id=profile.id)
    await session.commit()
    assert intervention.status == InterventionStatus.disabled

    events = await audit.list_lifecycle_events(session, profile_id=profile.id, intervention_id=intervention.id)
    assert {event.event_type for event in events} == {
        LifecycleEventType.intervention_created,
        LifecycleEventType.intervention_enabled,
        LifecycleEventType.intervention_paused,
        LifecycleEventType.intervention_disabled,
    }


@pytest.mark.service
async def test_enable_rejected_during_safe_mode(session: AsyncSession):
    profile = await create_profile(session)
    intervention = await _create(session, profile.id)
    await safe_mode.toggle_safe_mode(session, acting_profile_id=profile.id, profile_id=profile.id, enable=True)
    await session.commit()

    with pytest.raises(SafeModeActiveError) as exc_info:
        await interventions.enable_intervention(session, intervention_id=intervention.id, profile_id=profile.id)
    assert str(exc_info.value) == InterventionMessages.SAFE_MODE_ACTIVE
    assert intervention.status == InterventionStatus.paused


@pytest.mark.service
async def test_enable_after_safe_mode_clears_block(session: AsyncSession):
    profile = await create_profile(session)
    intervention = await _create(session, profile.id)
    await interventions.enable_intervention(session, intervention_id=intervention.id, profile_id=profile.id)
    await safe_mode.toggle_safe_mode(session, acting_profile_id=profile.id, profile_id=profile.id, enable=True)
    await safe_mode.toggle_safe_mode(session, acting_profile_id=profile.id, profile_id=profile.id, enable=False)
    await session.commit()
    assert intervention.auto_resume_blocked

    await interventions.enable_intervention(session, intervention_id=intervention.id, profile_id=profile.id)
    await session.commit()

    assert intervention.status == InterventionStatus.active
    assert not intervention.auto_resume_blocked
    assert not intervention.paused_by_safe_mode


@pytest.mark.service
async def test_other_profiles_interventions_are_not_found(session: AsyncSession):
    owner = await create_profile(session)
    other = await create_profile(session)
    intervention = await _create(session, owner.id)

    with pytest.raises(ValueError, match=InterventionMessages.NOT_FOUND):
        await interventions.pause_intervention(session, intervention_id=intervention.id, profile_id=other.id)
    with pytest.raises(ValueError, match=InterventionMessages.NOT_FOUND):
        await interventions.get_intervention(session, intervention_id=uuid4(), profile_id=owner.id)


@pytest.mark.service
async def test_update_records_changed_fields(session: AsyncSession):
    profile = await create_profile(session)
    intervention = await _create(session, profile.id)

    await interventions.update_intervention(
        session,
        intervention_id=intervention.id,
        profile_id=profile.id,
        user_parameters={"minutes": 25},
    )
    await session.commit()

    assert intervention.user_parameters == {"minutes": 25}
    events = await audit.list_lifecycle_events(session, profile_id=profile.id, intervention_id=intervention.id)
    edited = [event for event in events if event.event_type == LifecycleEventType.intervention_edited]
    assert edited[0].meta == {"fields": ["user_parameters"]}


@pytest.mark.service
async def test_update_without_changes_records_nothing(session: AsyncSession):
    profile = await create_profile(session)
    intervention = await _create(session, profile.id)

    await interventions.update_intervention(session, intervention_id=intervention.id, profile_id=profile.id)

    events = await audit.list_lifecycle_events(session, profile_id=profile.id, intervention_id=intervention.id)
    assert len(events) == 1


@pytest.mark.service
async def test_delete_is_soft_and_hides_from_list(session: AsyncSession):
    profile = await create_profile(session)
    kept = await _create(session, profile.id)
    removed = await _create(session, profile.id, key=InterventionKey.commitment_witness)

    await interventions.delete_intervention(session, intervention_id=removed.id, profile_id=profile.id)
    await session.commit()

    assert removed.status == InterventionStatus.deleted
    assert removed.deleted_at is not None
    listed = await interventions.list_interventions(session, profile_id=profile.id)
    assert [item.id for item in listed] == [kept.id]
    with_deleted = await interventions.list_interventions(session, profile_id=profile.id, include_deleted=True)
    assert len(with_deleted) == 2

    with pytest.raises(ValueError, match=InterventionMessages.DELETED):
        await interventions.enable_intervention(session, intervention_id=removed.id, profile_id=profile.id)
