from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime
from sqlmodel import Enum as SQLEnum, Field, SQLModel

from hearth.models.space import MembershipStatus


class TeamMemberRole(str, Enum):
    owner = "owner"
    admin = "admin"
    member = "member"
    viewer = "viewer"


class Team(SQLModel, table=True):
    __tablename__ = "teams"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(nullable=False)
    created_by: Optional[UUID] = Field(default=None, foreign_key="profiles.id", nullable=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class TeamMember(SQLModel, table=True):
    __tablename__ = "team_members"

    team_id: UUID = Field(foreign_key="teams.id", primary_key=True)
    profile_id: UUID = Field(foreign_key="profiles.id", primary_key=True)
    role: TeamMemberRole = Field(
        default=TeamMemberRole.member,
        sa_column=Column(
            SQLEnum(TeamMemberRole, name="team_member_role"),
            nullable=False,
            server_default=TeamMemberRole.member.value,
        ),
    )
    status: MembershipStatus = Field(
        default=MembershipStatus.active,
        sa_column=Column(
            SQLEnum(MembershipStatus, name="team_member_status"),
            nullable=False,
            server_default=MembershipStatus.active.value,
        ),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class TeamGroup(SQLModel, table=True):
    """A named subset of a team; the subject of ``group`` permission grants."""

    __tablename__ = "team_groups"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    team_id: UUID = Field(foreign_key="teams.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    archived_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class TeamGroupMember(SQLModel, table=True):
    __tablename__ = "team_group_members"

    group_id: UUID = Field(foreign_key="team_groups.id", primary_key=True)
    profile_id: UUID = Field(foreign_key="profiles.id", primary_key=True)
    added_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
