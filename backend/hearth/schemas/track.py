from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from hearth.models.project import TrackCategory


class TrackConvert(BaseModel):
    target: TrackCategory


class TrackRead(BaseModel):
    id: UUID
    project_id: UUID
    parent_track_id: Optional[UUID] = None
    title: str
    category: TrackCategory
    include_in_roadmap: bool
    created_by: Optional[UUID] = None
    deleted_at: Optional[datetime] = None
    updated_at: datetime

    class Config:
        from_attributes = True
