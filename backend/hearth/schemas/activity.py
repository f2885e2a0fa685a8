from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hearth.models.activity import ActivityType, SurfaceType


class ActivityCreate(BaseModel):
    project_id: Optional[UUID] = None
    surface_type: SurfaceType
    entity_type: str = Field(min_length=1, max_length=64)
    entity_id: UUID
    activity_type: ActivityType
    context_metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("entity_type")
    @classmethod
    def normalize_entity_type(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Entity type is required")
        return normalized


class ActivityRead(BaseModel):
    id: UUID
    profile_id: UUID
    project_id: Optional[UUID] = None
    surface_type: SurfaceType
    entity_type: str
    entity_id: UUID
    activity_type: ActivityType
    context_metadata: dict[str, Any] = {}
    created_at: datetime

    class Config:
        from_attributes = True
