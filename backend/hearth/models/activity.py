from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, Index
from sqlmodel import Enum as SQLEnum, Field, SQLModel


class SurfaceType(str, Enum):
    project = "project"
    track = "track"
    roadmap_item = "roadmap_item"
    execution_unit = "execution_unit"
    taskflow = "taskflow"
    mind_mesh = "mind_mesh"
    personal_bridge = "personal_bridge"
    side_project = "side_project"
    offshoot_idea = "offshoot_idea"


class ActivityType(str, Enum):
    created = "created"
    updated = "updated"
    commented = "commented"
    viewed = "viewed"
    linked = "linked"
    unlinked = "unlinked"
    status_changed = "status_changed"
    deadline_changed = "deadline_changed"
    assigned = "assigned"
    unassigned = "unassigned"
    shared = "shared"
    archived = "archived"
    restored = "restored"
    converted = "converted"
    synced = "synced"


class CollaborationActivity(SQLModel, table=True):
    """Append-only record of who touched what.

    Rows are inserted through ``hearth.services.audit`` and never changed;
    see ``hearth.db.guards`` for the enforcement.
    """

    __tablename__ = "collaboration_activity"
    __table_args__ = (
        Index("ix_collaboration_activity_profile", "profile_id", "created_at"),
        Index("ix_collaboration_activity_project", "project_id", "created_at"),
        Index("ix_collaboration_activity_entity", "entity_type", "entity_id", "created_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    profile_id: UUID = Field(foreign_key="profiles.id", nullable=False)
    project_id: Optional[UUID] = Field(default=None, foreign_key="master_projects.id", nullable=True)
    surface_type: SurfaceType = Field(
        sa_column=Column(SQLEnum(SurfaceType, name="collaboration_surface_type"), nullable=False)
    )
    entity_type: str = Field(nullable=False)
    entity_id: UUID = Field(nullable=False)
    activity_type: ActivityType = Field(
        sa_column=Column(SQLEnum(ActivityType, name="collaboration_activity_type"), nullable=False)
    )
    context_metadata: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False, default=dict),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
