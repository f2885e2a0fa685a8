from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Index, UniqueConstraint, event, text
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import Enum as SQLEnum, Field, SQLModel


class PortType(str, Enum):
    free = "free"
    input = "input"
    output = "output"


class RelationshipType(str, Enum):
    expands = "expands"
    inspires = "inspires"
    depends_on = "depends_on"
    references = "references"
    hierarchy = "hierarchy"
    composition = "composition"
    generic = "generic"


class RelationshipDirection(str, Enum):
    forward = "forward"
    backward = "backward"
    bidirectional = "bidirectional"


class ReferenceEntityType(str, Enum):
    track = "track"
    roadmap_item = "roadmap_item"
    person = "person"
    widget = "widget"
    domain = "domain"
    project = "project"


class MindmeshWorkspace(SQLModel, table=True):
    __tablename__ = "mindmesh_workspaces"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(
        foreign_key="master_projects.id", nullable=False, unique=True, index=True
    )
    meta: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSON, nullable=False, default=dict),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class MindmeshContainer(SQLModel, table=True):
    __tablename__ = "mindmesh_containers"
    __table_args__ = (
        CheckConstraint(
            "title IS NOT NULL OR body IS NOT NULL",
            name="ck_mindmesh_container_has_content",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="mindmesh_workspaces.id", nullable=False, index=True)
    title: Optional[str] = Field(default=None)
    body: Optional[str] = Field(default=None)
    parent_container_id: Optional[UUID] = Field(
        default=None, foreign_key="mindmesh_containers.id", nullable=True
    )
    is_ghost: bool = Field(default=False, nullable=False)
    x_position: float = Field(default=0, nullable=False)
    y_position: float = Field(default=0, nullable=False)
    width: float = Field(default=300, nullable=False)
    height: float = Field(default=200, nullable=False)
    meta: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSON, nullable=False, default=dict),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class MindmeshContainerReference(SQLModel, table=True):
    """Links a container to an entity elsewhere in the product.

    At most one reference per (workspace, entity) may be primary; the partial
    unique index below is the backstop for the service-level swap.
    """

    __tablename__ = "mindmesh_container_references"
    __table_args__ = (
        UniqueConstraint(
            "container_id",
            "entity_type",
            "entity_id",
            name="uq_mindmesh_container_entity_reference",
        ),
        Index(
            "uq_mindmesh_reference_single_primary",
            "workspace_id",
            "entity_type",
            "entity_id",
            unique=True,
            postgresql_where=text("is_primary = true"),
            sqlite_where=text("is_primary = 1"),
        ),
        Index("ix_mindmesh_references_entity", "entity_type", "entity_id"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="mindmesh_workspaces.id", nullable=False)
    container_id: UUID = Field(foreign_key="mindmesh_containers.id", nullable=False, index=True)
    entity_type: ReferenceEntityType = Field(
        sa_column=Column(SQLEnum(ReferenceEntityType, name="mindmesh_entity_type"), nullable=False)
    )
    entity_id: UUID = Field(nullable=False)
    is_primary: bool = Field(default=False, nullable=False)
    meta: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSON, nullable=False, default=dict),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class MindmeshPort(SQLModel, table=True):
    __tablename__ = "mindmesh_ports"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    container_id: UUID = Field(foreign_key="mindmesh_containers.id", nullable=False, index=True)
    port_type: PortType = Field(
        default=PortType.free,
        sa_column=Column(
            SQLEnum(PortType, name="mindmesh_port_type"),
            nullable=False,
            server_default=PortType.free.value,
        ),
    )
    label: Optional[str] = Field(default=None)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class MindmeshNode(SQLModel, table=True):
    """An edge between two ports. Nodes never point at containers directly."""

    __tablename__ = "mindmesh_nodes"
    __table_args__ = (
        CheckConstraint("source_port_id != target_port_id", name="ck_mindmesh_node_different_ports"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="mindmesh_workspaces.id", nullable=False, index=True)
    source_port_id: UUID = Field(foreign_key="mindmesh_ports.id", nullable=False, index=True)
    target_port_id: UUID = Field(foreign_key="mindmesh_ports.id", nullable=False, index=True)
    relationship_type: RelationshipType = Field(
        default=RelationshipType.generic,
        sa_column=Column(
            SQLEnum(RelationshipType, name="mindmesh_relationship_type"),
            nullable=False,
            server_default=RelationshipType.generic.value,
        ),
    )
    relationship_direction: RelationshipDirection = Field(
        default=RelationshipDirection.forward,
        sa_column=Column(
            SQLEnum(RelationshipDirection, name="mindmesh_relationship_direction"),
            nullable=False,
            server_default=RelationshipDirection.forward.value,
        ),
    )
    auto_generated: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class MindmeshCanvasLock(SQLModel, table=True):
    __tablename__ = "mindmesh_canvas_locks"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(
        foreign_key="mindmesh_workspaces.id", nullable=False, unique=True, index=True
    )
    profile_id: UUID = Field(foreign_key="profiles.id", nullable=False, index=True)
    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


def _ensure_aware_timestamp(value: datetime | None) -> datetime | None:
    """Normalize timestamps to UTC when timezone info is missing."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@event.listens_for(MindmeshCanvasLock, "load")
@event.listens_for(MindmeshCanvasLock, "refresh")
def _normalize_canvas_lock_timestamps(target: MindmeshCanvasLock, *_args: object) -> None:
    """Keep lock expiry comparable against aware ``now()`` on every backend."""
    for key in ("expires_at", "created_at"):
        value = target.__dict__.get(key)
        if value is not None and value.tzinfo is None:
            set_committed_value(target, key, _ensure_aware_timestamp(value))
