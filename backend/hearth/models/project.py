from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Enum as SQLEnum, Field, SQLModel


class ProjectUserRole(str, Enum):
    owner = "owner"
    editor = "editor"
    viewer = "viewer"


class TrackCategory(str, Enum):
    main = "main"
    side_project = "side_project"
    offshoot_idea = "offshoot_idea"


class MasterProject(SQLModel, table=True):
    __tablename__ = "master_projects"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(nullable=False)
    owner_id: Optional[UUID] = Field(default=None, foreign_key="profiles.id", nullable=True)
    archived_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class ProjectUser(SQLModel, table=True):
    """Project membership. An archived row no longer grants anything."""

    __tablename__ = "project_users"
    __table_args__ = (
        UniqueConstraint("project_id", "profile_id", name="uq_project_user_profile"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="master_projects.id", nullable=False, index=True)
    profile_id: UUID = Field(foreign_key="profiles.id", nullable=False, index=True)
    role: ProjectUserRole = Field(
        default=ProjectUserRole.viewer,
        sa_column=Column(
            SQLEnum(ProjectUserRole, name="project_user_role"),
            nullable=False,
            server_default=ProjectUserRole.viewer.value,
        ),
    )
    archived_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class Track(SQLModel, table=True):
    __tablename__ = "tracks"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="master_projects.id", nullable=False, index=True)
    parent_track_id: Optional[UUID] = Field(
        default=None, foreign_key="tracks.id", nullable=True, index=True
    )
    title: str = Field(nullable=False)
    description: Optional[str] = Field(default=None)
    category: TrackCategory = Field(
        default=TrackCategory.main,
        sa_column=Column(
            SQLEnum(TrackCategory, name="track_category"),
            nullable=False,
            server_default=TrackCategory.main.value,
        ),
    )
    include_in_roadmap: bool = Field(default=True, nullable=False)
    ordering_index: int = Field(default=0, nullable=False)
    created_by: Optional[UUID] = Field(default=None, foreign_key="profiles.id", nullable=True)
    meta: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSON, nullable=False, default=dict),
    )
    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
