from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from hearth.models.permission import GrantEntityType, PermissionRole, SubjectType


class GrantCreate(BaseModel):
    entity_type: GrantEntityType
    entity_id: UUID
    subject_type: SubjectType = SubjectType.user
    subject_id: UUID
    permission_role: PermissionRole = PermissionRole.viewer


class GrantRead(BaseModel):
    id: UUID
    entity_type: GrantEntityType
    entity_id: UUID
    subject_type: SubjectType
    subject_id: UUID
    permission_role: PermissionRole
    granted_by: Optional[UUID] = None
    created_at: datetime
    revoked_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CreatorRightsChange(BaseModel):
    entity_type: GrantEntityType
    entity_id: UUID
    creator_profile_id: UUID


class CreatorRightsStatus(CreatorRightsChange):
    revoked: bool
