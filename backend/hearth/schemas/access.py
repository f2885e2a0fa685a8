from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from hearth.models.permission import PermissionRole
from hearth.services.access import ResourceType
from hearth.services.policies import Operation


class AccessCheckRequest(BaseModel):
    resource_type: ResourceType
    resource_id: UUID
    capability: PermissionRole = PermissionRole.viewer
    allow_deleted: bool = False


class AccessCheckResponse(BaseModel):
    allowed: bool
    role: Optional[PermissionRole] = None


class AuthorizeRequest(BaseModel):
    resource_type: ResourceType
    operation: Operation
    resource_id: Optional[UUID] = None
    scope_id: Optional[UUID] = None


class AuthorizeResponse(BaseModel):
    allowed: bool


class EntityPermissionsRead(BaseModel):
    entity_type: str
    entity_id: UUID
    role: Optional[PermissionRole] = None
    can_view: bool
    can_comment: bool
    can_edit: bool
    can_manage: bool
    project_role: Optional[PermissionRole] = None
    creator_role: Optional[PermissionRole] = None
    grant_roles: list[PermissionRole] = []
    ceiling_applied: bool = False
