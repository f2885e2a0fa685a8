from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.config import settings
from hearth.core.messages import PrincipalMessages
from hearth.core.security import decode_access_token
from hearth.db.session import get_session
from hearth.models.profile import Profile
from hearth.schemas.token import TokenPayload
from hearth.services import principals as principals_service

SessionDep = Annotated[AsyncSession, Depends(get_session)]

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token")


async def get_current_profile(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: SessionDep,
) -> Profile:
    """Resolve the bearer token to the caller's profile.

    This is the only place an auth user id is read; every handler below it
    works with ``profile.id``.
    """
    try:
        payload = decode_access_token(token)
        token_data = TokenPayload(**payload)
    except (JWTError, ValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=PrincipalMessages.INVALID_CREDENTIALS,
        ) from exc

    if not token_data.sub:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=PrincipalMessages.INVALID_TOKEN_PAYLOAD)
    try:
        user_id = UUID(token_data.sub)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=PrincipalMessages.INVALID_TOKEN_PAYLOAD,
        ) from exc

    profile = await principals_service.get_profile_by_user_id(session, user_id=user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=PrincipalMessages.PROFILE_NOT_FOUND)
    return profile


CurrentProfileDep = Annotated[Profile, Depends(get_current_profile)]
