from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CanvasLockAcquire(BaseModel):
    duration_seconds: Optional[int] = Field(default=None, gt=0)


class CanvasLockRead(BaseModel):
    id: UUID
    workspace_id: UUID
    profile_id: UUID
    expires_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class CanvasLockStatus(BaseModel):
    locked: bool
    lock: Optional[CanvasLockRead] = None
    held_by_me: bool = False
