from fastapi import APIRouter

from hearth.api.deps import CurrentProfileDep, SessionDep
from hearth.schemas.principal import PrincipalRead
from hearth.services import principals as principals_service

router = APIRouter()


@router.get("/me", response_model=PrincipalRead)
async def read_current_principal(
    session: SessionDep,
    current_profile: CurrentProfileDep,
) -> PrincipalRead:
    context = await principals_service.resolve_principal(session, profile=current_profile)
    return PrincipalRead(
        profile_id=context.profile_id,
        user_id=context.user_id,
        display_name=current_profile.display_name,
        household_ids=sorted(context.household_ids, key=str),
        space_ids=sorted(context.space_ids, key=str),
        project_ids=sorted(context.project_ids, key=str),
        group_ids=sorted(context.group_ids, key=str),
    )
