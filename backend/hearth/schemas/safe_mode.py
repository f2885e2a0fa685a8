from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from hearth.models.safe_mode import SignalKey


class SafeModeRead(BaseModel):
    profile_id: UUID
    is_enabled: bool = False
    enabled_at: Optional[datetime] = None
    disabled_at: Optional[datetime] = None
    activation_reason: Optional[str] = None
    activation_count: int = 0
    last_toggled_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SafeModeUpdate(BaseModel):
    enabled: bool
    reason: Optional[str] = Field(default=None, max_length=500)
    # Defaults to the caller. Present so that acting for someone else is an
    # explicit, rejected request rather than an impossible one.
    profile_id: Optional[UUID] = None


class InsightConsentUpdate(BaseModel):
    display_enabled: bool


class InsightConsentRead(BaseModel):
    signal_key: SignalKey
    display_enabled: bool = False
    granted_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InsightVisibility(BaseModel):
    signal_key: SignalKey
    can_display: bool
