from fastapi import APIRouter, HTTPException, status

from hearth.api.deps import CurrentProfileDep, SessionDep
from hearth.models.safe_mode import SignalKey
from hearth.schemas.safe_mode import (
    InsightConsentRead,
    InsightConsentUpdate,
    InsightVisibility,
    SafeModeRead,
    SafeModeUpdate,
)
from hearth.services import safe_mode as safe_mode_service
from hearth.services.principals import ImpersonationError

router = APIRouter()


@router.get("/", response_model=SafeModeRead)
async def read_safe_mode(
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> SafeModeRead:
    state = await safe_mode_service.get_state(session, profile_id=current_profile.id)
    if state is None:
        return SafeModeRead(profile_id=current_profile.id)
    return SafeModeRead.model_validate(state)


@router.put("/", response_model=SafeModeRead)
async def update_safe_mode(
    update_in: SafeModeUpdate,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> SafeModeRead:
    try:
        state = await safe_mode_service.toggle_safe_mode(
            session,
            acting_profile_id=current_profile.id,
            profile_id=update_in.profile_id or current_profile.id,
            enable=update_in.enabled,
            reason=update_in.reason,
        )
    except ImpersonationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    await session.commit()
    await session.refresh(state)
    return SafeModeRead.model_validate(state)


@router.put("/consent/{signal_key}", response_model=InsightConsentRead)
async def update_insight_consent(
    signal_key: SignalKey,
    consent_in: InsightConsentUpdate,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> InsightConsentRead:
    consent = await safe_mode_service.set_display_consent(
        session,
        profile_id=current_profile.id,
        signal_key=signal_key,
        display_enabled=consent_in.display_enabled,
    )
    await session.commit()
    await session.refresh(consent)
    return InsightConsentRead.model_validate(consent)


@router.get("/insights/{signal_key}", response_model=InsightVisibility)
async def read_insight_visibility(
    signal_key: SignalKey,
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> InsightVisibility:
    can_display = await safe_mode_service.can_display_insight(
        session, profile_id=current_profile.id, signal_key=signal_key
    )
    return InsightVisibility(signal_key=signal_key, can_display=can_display)
