from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, Index
from sqlmodel import Enum as SQLEnum, Field, SQLModel


class InterventionKey(str, Enum):
    implementation_intention_reminder = "implementation_intention_reminder"
    context_aware_prompt = "context_aware_prompt"
    scheduled_reflection_prompt = "scheduled_reflection_prompt"
    simplified_view_mode = "simplified_view_mode"
    task_decomposition_assistant = "task_decomposition_assistant"
    focus_mode_suppression = "focus_mode_suppression"
    timeboxed_session = "timeboxed_session"
    project_scope_limiter = "project_scope_limiter"
    accountability_partnership = "accountability_partnership"
    commitment_witness = "commitment_witness"


class InterventionStatus(str, Enum):
    active = "active"
    paused = "paused"
    disabled = "disabled"
    deleted = "deleted"


class LifecycleEventType(str, Enum):
    intervention_created = "intervention_created"
    intervention_enabled = "intervention_enabled"
    intervention_paused = "intervention_paused"
    intervention_disabled = "intervention_disabled"
    intervention_deleted = "intervention_deleted"
    intervention_edited = "intervention_edited"
    safe_mode_paused_interventions = "safe_mode_paused_interventions"
    safe_mode_unpaused_interventions = "safe_mode_unpaused_interventions"


class LifecycleActor(str, Enum):
    user = "user"
    safe_mode = "safe_mode"


class Intervention(SQLModel, table=True):
    __tablename__ = "interventions"
    __table_args__ = (
        Index("ix_interventions_profile_status", "profile_id", "status"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    profile_id: UUID = Field(foreign_key="profiles.id", nullable=False)
    intervention_key: InterventionKey = Field(
        sa_column=Column(SQLEnum(InterventionKey, name="intervention_key"), nullable=False)
    )
    status: InterventionStatus = Field(
        default=InterventionStatus.paused,
        sa_column=Column(
            SQLEnum(InterventionStatus, name="intervention_status"),
            nullable=False,
            server_default=InterventionStatus.paused.value,
        ),
    )
    why_text: Optional[str] = Field(default=None)
    user_parameters: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False, default=dict),
    )
    paused_by_safe_mode: bool = Field(default=False, nullable=False)
    auto_resume_blocked: bool = Field(default=False, nullable=False)
    enabled_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    paused_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    disabled_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    deleted_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    last_modified_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class InterventionLifecycleEvent(SQLModel, table=True):
    """Append-only history of intervention state changes."""

    __tablename__ = "intervention_lifecycle_events"
    __table_args__ = (
        Index("ix_intervention_lifecycle_events_profile", "profile_id", "created_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    profile_id: UUID = Field(foreign_key="profiles.id", nullable=False)
    intervention_id: Optional[UUID] = Field(
        default=None, foreign_key="interventions.id", nullable=True, index=True
    )
    event_type: LifecycleEventType = Field(
        sa_column=Column(SQLEnum(LifecycleEventType, name="intervention_lifecycle_event_type"), nullable=False)
    )
    actor: LifecycleActor = Field(
        default=LifecycleActor.user,
        sa_column=Column(
            SQLEnum(LifecycleActor, name="intervention_lifecycle_actor"),
            nullable=False,
            server_default=LifecycleActor.user.value,
        ),
    )
    meta: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSON, nullable=False, default=dict),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
