from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class PrincipalRead(BaseModel):
    profile_id: UUID
    user_id: UUID
    display_name: Optional[str] = None
    household_ids: list[UUID] = []
    space_ids: list[UUID] = []
    project_ids: list[UUID] = []
    group_ids: list[UUID] = []
