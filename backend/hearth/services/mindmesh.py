"""Mind Mesh graph: containers, ports, nodes and container references.

Nodes connect ports, never containers. A reference ties a container to an
entity elsewhere in the product; per (workspace, entity_type, entity_id)
at most one reference is primary. Making a reference primary demotes the
current one first, inside the same flush sequence, so the partial unique
index never sees two primaries.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import MindMeshMessages
from hearth.models.mindmesh import (
    MindmeshContainer,
    MindmeshContainerReference,
    MindmeshNode,
    MindmeshPort,
    MindmeshWorkspace,
    PortType,
    ReferenceEntityType,
    RelationshipDirection,
    RelationshipType,
)

logger = logging.getLogger(__name__)

EDITABLE_CONTAINER_FIELDS = frozenset(
    {"title", "body", "parent_container_id", "x_position", "y_position", "width", "height"}
)


class GhostContainerError(ValueError):
    """Ghost containers mirror another container and cannot be edited."""


async def get_or_create_workspace(session: AsyncSession, *, project_id: UUID) -> MindmeshWorkspace:
    stmt = select(MindmeshWorkspace).where(MindmeshWorkspace.project_id == project_id)
    result = await session.exec(stmt)
    workspace = result.one_or_none()
    if workspace:
        return workspace
    workspace = MindmeshWorkspace(project_id=project_id)
    session.add(workspace)
    await session.flush()
    return workspace


async def get_container(session: AsyncSession, container_id: UUID) -> MindmeshContainer:
    container = await session.get(MindmeshContainer, container_id)
    if not container:
        raise ValueError(MindMeshMessages.CONTAINER_NOT_FOUND)
    return container


async def create_container(
    session: AsyncSession,
    *,
    workspace_id: UUID,
    title: str | None = None,
    body: str | None = None,
    parent_container_id: UUID | None = None,
    is_ghost: bool = False,
    x_position: float = 0,
    y_position: float = 0,
) -> MindmeshContainer:
    if not (title or body):
        raise ValueError(MindMeshMessages.CONTAINER_NEEDS_CONTENT)
    container = MindmeshContainer(
        workspace_id=workspace_id,
        title=title,
        body=body,
        parent_container_id=parent_container_id,
        is_ghost=is_ghost,
        x_position=x_position,
        y_position=y_position,
    )
    session.add(container)
    await session.flush()
    return container


async def update_container(
    session: AsyncSession,
    *,
    container_id: UUID,
    **changes: Any,
) -> MindmeshContainer:
    """Apply layout or content edits; the container is untouched if any check fails."""
    unknown = set(changes) - EDITABLE_CONTAINER_FIELDS
    if unknown:
        raise ValueError(MindMeshMessages.FIELD_NOT_EDITABLE.format(fields=", ".join(sorted(unknown))))
    container = await get_container(session, container_id)
    if container.is_ghost:
        raise GhostContainerError(MindMeshMessages.GHOST_READ_ONLY)
    title = changes.get("title", container.title)
    body = changes.get("body", container.body)
    if not (title or body):
        raise ValueError(MindMeshMessages.CONTAINER_NEEDS_CONTENT)
    for key, value in changes.items():
        setattr(container, key, value)
    container.updated_at = datetime.now(timezone.utc)
    session.add(container)
    await session.flush()
    return container


async def create_port(
    session: AsyncSession,
    *,
    container_id: UUID,
    port_type: PortType = PortType.free,
    label: str | None = None,
) -> MindmeshPort:
    await get_container(session, container_id)
    port = MindmeshPort(container_id=container_id, port_type=port_type, label=label)
    session.add(port)
    await session.flush()
    return port


async def _port_workspace_id(session: AsyncSession, port_id: UUID) -> UUID:
    stmt = (
        select(MindmeshContainer.workspace_id)
        .join(MindmeshPort, MindmeshPort.container_id == MindmeshContainer.id)
        .where(MindmeshPort.id == port_id)
    )
    result = await session.exec(stmt)
    workspace_id = result.one_or_none()
    if workspace_id is None:
        raise ValueError(MindMeshMessages.PORT_NOT_FOUND)
    return workspace_id


async def connect_ports(
    session: AsyncSession,
    *,
    workspace_id: UUID,
    source_port_id: UUID,
    target_port_id: UUID,
    relationship_type: RelationshipType = RelationshipType.generic,
    relationship_direction: RelationshipDirection = RelationshipDirection.forward,
    auto_generated: bool = False,
) -> MindmeshNode:
    if source_port_id == target_port_id:
        raise ValueError(MindMeshMessages.SAME_PORT)
    for port_id in (source_port_id, target_port_id):
        if await _port_workspace_id(session, port_id) != workspace_id:
            raise ValueError(MindMeshMessages.CROSS_WORKSPACE)
    node = MindmeshNode(
        workspace_id=workspace_id,
        source_port_id=source_port_id,
        target_port_id=target_port_id,
        relationship_type=relationship_type,
        relationship_direction=relationship_direction,
        auto_generated=auto_generated,
    )
    session.add(node)
    await session.flush()
    return node


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------

async def get_primary_reference(
    session: AsyncSession,
    *,
    workspace_id: UUID,
    entity_type: ReferenceEntityType,
    entity_id: UUID,
) -> MindmeshContainerReference | None:
    stmt = select(MindmeshContainerReference).where(
        MindmeshContainerReference.workspace_id == workspace_id,
        MindmeshContainerReference.entity_type == entity_type,
        MindmeshContainerReference.entity_id == entity_id,
        MindmeshContainerReference.is_primary.is_(True),
    )
    result = await session.exec(stmt)
    return result.one_or_none()


async def _unset_primary(
    session: AsyncSession,
    *,
    workspace_id: UUID,
    entity_type: ReferenceEntityType,
    entity_id: UUID,
    keep_id: UUID | None = None,
) -> None:
    stmt = (
        update(MindmeshContainerReference)
        .where(
            MindmeshContainerReference.workspace_id == workspace_id,
            MindmeshContainerReference.entity_type == entity_type,
            MindmeshContainerReference.entity_id == entity_id,
            MindmeshContainerReference.is_primary.is_(True),
        )
        .values(is_primary=False)
        .execution_options(synchronize_session="fetch")
    )
    if keep_id is not None:
        stmt = stmt.where(MindmeshContainerReference.id != keep_id)
    await session.exec(stmt)


async def add_reference(
    session: AsyncSession,
    *,
    container_id: UUID,
    entity_type: ReferenceEntityType,
    entity_id: UUID,
    is_primary: bool = False,
    meta: dict[str, Any] | None = None,
) -> MindmeshContainerReference:
    container = await get_container(session, container_id)
    if is_primary:
        await _unset_primary(
            session,
            workspace_id=container.workspace_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )
    reference = MindmeshContainerReference(
        workspace_id=container.workspace_id,
        container_id=container.id,
        entity_type=entity_type,
        entity_id=entity_id,
        is_primary=is_primary,
        meta=meta or {},
    )
    session.add(reference)
    await session.flush()
    return reference


async def set_primary_reference(session: AsyncSession, *, reference_id: UUID) -> MindmeshContainerReference:
    reference = await session.get(MindmeshContainerReference, reference_id)
    if not reference:
        raise ValueError(MindMeshMessages.REFERENCE_NOT_FOUND)
    if reference.is_primary:
        return reference
    await _unset_primary(
        session,
        workspace_id=reference.workspace_id,
        entity_type=reference.entity_type,
        entity_id=reference.entity_id,
        keep_id=reference.id,
    )
    reference.is_primary = True
    session.add(reference)
    await session.flush()
    logger.debug(
        "Reference %s is now primary for %s %s",
        reference.id,
        reference.entity_type.value,
        reference.entity_id,
    )
    return reference


async def list_references(
    session: AsyncSession,
    *,
    workspace_id: UUID,
    entity_type: ReferenceEntityType,
    entity_id: UUID,
) -> list[MindmeshContainerReference]:
    stmt = select(MindmeshContainerReference).where(
        MindmeshContainerReference.workspace_id == workspace_id,
        MindmeshContainerReference.entity_type == entity_type,
        MindmeshContainerReference.entity_id == entity_id,
    )
    result = await session.exec(stmt)
    return list(result.all())
