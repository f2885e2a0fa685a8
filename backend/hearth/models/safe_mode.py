from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Enum as SQLEnum, Field, SQLModel


class SignalKey(str, Enum):
    session_boundaries = "session_boundaries"
    time_bins_activity_count = "time_bins_activity_count"
    activity_intervals = "activity_intervals"
    capture_coverage = "capture_coverage"


class SafeModeState(SQLModel, table=True):
    """Per-profile emergency brake. While enabled no insight is displayed."""

    __tablename__ = "safe_mode_state"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    profile_id: UUID = Field(foreign_key="profiles.id", nullable=False, unique=True, index=True)
    is_enabled: bool = Field(default=False, nullable=False)
    enabled_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    disabled_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    activation_reason: Optional[str] = Field(default=None)
    activation_count: int = Field(default=0, nullable=False)
    last_toggled_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class InsightDisplayConsent(SQLModel, table=True):
    __tablename__ = "insight_display_consent"
    __table_args__ = (
        UniqueConstraint("profile_id", "signal_key", name="uq_insight_display_consent"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    profile_id: UUID = Field(foreign_key="profiles.id", nullable=False, index=True)
    signal_key: SignalKey = Field(
        sa_column=Column(SQLEnum(SignalKey, name="signal_key"), nullable=False)
    )
    display_enabled: bool = Field(default=False, nullable=False)
    granted_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    revoked_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
