from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from hearth.models.intervention import (
    InterventionKey,
    InterventionStatus,
    LifecycleActor,
    LifecycleEventType,
)


class InterventionCreate(BaseModel):
    intervention_key: InterventionKey
    why_text: Optional[str] = Field(default=None, max_length=1000)
    user_parameters: dict[str, Any] = Field(default_factory=dict)


class InterventionUpdate(BaseModel):
    why_text: Optional[str] = Field(default=None, max_length=1000)
    user_parameters: Optional[dict[str, Any]] = None


class InterventionRead(BaseModel):
    id: UUID
    profile_id: UUID
    intervention_key: InterventionKey
    status: InterventionStatus
    why_text: Optional[str] = None
    user_parameters: dict[str, Any] = {}
    paused_by_safe_mode: bool
    auto_resume_blocked: bool
    enabled_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    disabled_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LifecycleEventRead(BaseModel):
    id: UUID
    profile_id: UUID
    intervention_id: Optional[UUID] = None
    event_type: LifecycleEventType
    actor: LifecycleActor
    meta: dict[str, Any] = {}
    created_at: datetime

    class Config:
        from_attributes = True
