from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime
from sqlmodel import Enum as SQLEnum, Field, Relationship, SQLModel


class SpaceType(str, Enum):
    personal = "personal"
    shared = "shared"


class MembershipStatus(str, Enum):
    pending = "pending"
    active = "active"
    left = "left"


class MemberRole(str, Enum):
    owner = "owner"
    member = "member"


class Space(SQLModel, table=True):
    __tablename__ = "spaces"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(nullable=False)
    space_type: SpaceType = Field(
        default=SpaceType.personal,
        sa_column=Column(
            SQLEnum(SpaceType, name="space_type"),
            nullable=False,
            server_default=SpaceType.personal.value,
        ),
    )
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

    members: List["SpaceMember"] = Relationship(
        back_populates="space",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class SpaceMember(SQLModel, table=True):
    __tablename__ = "space_members"

    space_id: UUID = Field(foreign_key="spaces.id", primary_key=True)
    profile_id: UUID = Field(foreign_key="profiles.id", primary_key=True)
    role: MemberRole = Field(
        default=MemberRole.member,
        sa_column=Column(
            SQLEnum(MemberRole, name="space_member_role"),
            nullable=False,
            server_default=MemberRole.member.value,
        ),
    )
    status: MembershipStatus = Field(
        default=MembershipStatus.pending,
        sa_column=Column(
            SQLEnum(MembershipStatus, name="space_member_status"),
            nullable=False,
            server_default=MembershipStatus.pending.value,
        ),
    )
    joined_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    space: Optional[Space] = Relationship(back_populates="members")
