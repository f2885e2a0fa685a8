from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, Index, UniqueConstraint, text
from sqlmodel import Enum as SQLEnum, Field, SQLModel


class PermissionRole(str, Enum):
    viewer = "viewer"
    commenter = "commenter"
    editor = "editor"
    owner = "owner"


class GrantEntityType(str, Enum):
    track = "track"
    space = "space"


class SubjectType(str, Enum):
    user = "user"
    group = "group"


class EntityPermissionGrant(SQLModel, table=True):
    """Explicit role on one entity for a user or a team group.

    Rows are never deleted; revoking stamps ``revoked_at``.
    """

    __tablename__ = "entity_permission_grants"
    __table_args__ = (
        Index(
            "uq_entity_permission_grants_active",
            "entity_type",
            "entity_id",
            "subject_type",
            "subject_id",
            unique=True,
            postgresql_where=text("revoked_at IS NULL"),
            sqlite_where=text("revoked_at IS NULL"),
        ),
        Index("ix_entity_permission_grants_subject", "subject_type", "subject_id"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    entity_type: GrantEntityType = Field(
        sa_column=Column(SQLEnum(GrantEntityType, name="grant_entity_type"), nullable=False)
    )
    entity_id: UUID = Field(nullable=False, index=True)
    subject_type: SubjectType = Field(
        sa_column=Column(SQLEnum(SubjectType, name="grant_subject_type"), nullable=False)
    )
    subject_id: UUID = Field(nullable=False)
    permission_role: PermissionRole = Field(
        default=PermissionRole.viewer,
        sa_column=Column(
            SQLEnum(PermissionRole, name="permission_role"),
            nullable=False,
            server_default=PermissionRole.viewer.value,
        ),
    )
    granted_by: Optional[UUID] = Field(default=None, foreign_key="profiles.id", nullable=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    revoked_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )


class CreatorRightsRevocation(SQLModel, table=True):
    __tablename__ = "creator_rights_revocations"
    __table_args__ = (
        UniqueConstraint(
            "entity_type",
            "entity_id",
            "creator_profile_id",
            name="uq_creator_rights_revocation",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    entity_type: GrantEntityType = Field(
        sa_column=Column(SQLEnum(GrantEntityType, name="creator_rights_entity_type"), nullable=False)
    )
    entity_id: UUID = Field(nullable=False, index=True)
    creator_profile_id: UUID = Field(foreign_key="profiles.id", nullable=False)
    revoked_by: Optional[UUID] = Field(default=None, foreign_key="profiles.id", nullable=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
