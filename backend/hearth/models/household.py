from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Enum as SQLEnum, Field, Relationship, SQLModel

from hearth.models.space import MemberRole, MembershipStatus


class Household(SQLModel, table=True):
    __tablename__ = "households"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(nullable=False)
    created_by: Optional[UUID] = Field(default=None, foreign_key="profiles.id", nullable=True)
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

    members: List["HouseholdMember"] = Relationship(
        back_populates="household",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class HouseholdMember(SQLModel, table=True):
    __tablename__ = "household_members"
    __table_args__ = (
        UniqueConstraint("household_id", "profile_id", name="uq_household_member_profile"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    profile_id: UUID = Field(foreign_key="profiles.id", nullable=False, index=True)
    role: MemberRole = Field(
        default=MemberRole.member,
        sa_column=Column(
            SQLEnum(MemberRole, name="household_member_role"),
            nullable=False,
            server_default=MemberRole.member.value,
        ),
    )
    status: MembershipStatus = Field(
        default=MembershipStatus.pending,
        sa_column=Column(
            SQLEnum(MembershipStatus, name="household_member_status"),
            nullable=False,
            server_default=MembershipStatus.pending.value,
        ),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    household: Optional[Household] = Relationship(back_populates="members")
