"""Policy Registry: which capability each operation on each resource needs.

One table replaces the per-table policy blocks. Each entry maps
``(ResourceType, Operation)`` to a ``PolicyRule``:

  - ``required`` is the minimum role; ``None`` means the operation is never
    permitted (append-only audit rows use this for update and delete).
  - ``scope`` names the parent resource type to check instead of the row
    itself. Inserts have no row yet, so they check the container the row
    is inserted into.

Pairs missing from the table are denied.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from fastapi import HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import AccessMessages
from hearth.models.permission import PermissionRole
from hearth.services import access
from hearth.services.access import ResourceType

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    read = "read"
    insert = "insert"
    update = "update"
    delete = "delete"


@dataclass(frozen=True)
class PolicyRule:
    required: PermissionRole | None
    scope: ResourceType | None = None

    @property
    def forbidden(self) -> bool:
        return self.required is None


FORBIDDEN = PolicyRule(required=None)

POLICY_REGISTRY: dict[tuple[ResourceType, Operation], PolicyRule] = {
    # Spaces: members read, owners manage.
    (ResourceType.space, Operation.read): PolicyRule(PermissionRole.viewer),
    (ResourceType.space, Operation.update): PolicyRule(PermissionRole.owner),
    (ResourceType.space, Operation.delete): PolicyRule(PermissionRole.owner),
    # Households
    (ResourceType.household, Operation.read): PolicyRule(PermissionRole.viewer),
    (ResourceType.household, Operation.update): PolicyRule(PermissionRole.owner),
    (ResourceType.household, Operation.delete): PolicyRule(PermissionRole.owner),
    # Projects and tracks: role-tiered.
    (ResourceType.project, Operation.read): PolicyRule(PermissionRole.viewer),
    (ResourceType.project, Operation.update): PolicyRule(PermissionRole.editor),
    (ResourceType.project, Operation.delete): PolicyRule(PermissionRole.owner),
    (ResourceType.track, Operation.read): PolicyRule(PermissionRole.viewer),
    (ResourceType.track, Operation.insert): PolicyRule(PermissionRole.editor, scope=ResourceType.project),
    (ResourceType.track, Operation.update): PolicyRule(PermissionRole.editor),
    (ResourceType.track, Operation.delete): PolicyRule(PermissionRole.editor),
    # Mind Mesh
    (ResourceType.mindmesh_workspace, Operation.read): PolicyRule(PermissionRole.viewer),
    (ResourceType.mindmesh_workspace, Operation.insert): PolicyRule(
        PermissionRole.editor, scope=ResourceType.project
    ),
    (ResourceType.mindmesh_workspace, Operation.update): PolicyRule(PermissionRole.editor),
    (ResourceType.mindmesh_container, Operation.read): PolicyRule(PermissionRole.viewer),
    (ResourceType.mindmesh_container, Operation.insert): PolicyRule(
        PermissionRole.editor, scope=ResourceType.mindmesh_workspace
    ),
    (ResourceType.mindmesh_container, Operation.update): PolicyRule(PermissionRole.editor),
    (ResourceType.mindmesh_container, Operation.delete): PolicyRule(PermissionRole.editor),
    # Audit tables: append-only.
    (ResourceType.collaboration_activity, Operation.read): PolicyRule(PermissionRole.viewer),
    (ResourceType.collaboration_activity, Operation.insert): PolicyRule(
        PermissionRole.viewer, scope=ResourceType.project
    ),
    (ResourceType.collaboration_activity, Operation.update): FORBIDDEN,
    (ResourceType.collaboration_activity, Operation.delete): FORBIDDEN,
    (ResourceType.intervention_lifecycle_event, Operation.read): PolicyRule(PermissionRole.owner),
    (ResourceType.intervention_lifecycle_event, Operation.insert): PolicyRule(
        PermissionRole.owner, scope=ResourceType.profile
    ),
    (ResourceType.intervention_lifecycle_event, Operation.update): FORBIDDEN,
    (ResourceType.intervention_lifecycle_event, Operation.delete): FORBIDDEN,
    # Owner-only personal state.
    (ResourceType.intervention, Operation.read): PolicyRule(PermissionRole.owner),
    (ResourceType.intervention, Operation.insert): PolicyRule(PermissionRole.owner, scope=ResourceType.profile),
    (ResourceType.intervention, Operation.update): PolicyRule(PermissionRole.owner),
    (ResourceType.intervention, Operation.delete): PolicyRule(PermissionRole.owner),
    (ResourceType.safe_mode_state, Operation.read): PolicyRule(PermissionRole.owner),
    (ResourceType.safe_mode_state, Operation.insert): PolicyRule(PermissionRole.owner, scope=ResourceType.profile),
    (ResourceType.safe_mode_state, Operation.update): PolicyRule(PermissionRole.owner),
    (ResourceType.profile, Operation.read): PolicyRule(PermissionRole.owner),
    (ResourceType.profile, Operation.update): PolicyRule(PermissionRole.owner),
}


def get_policy(resource_type: ResourceType | str, operation: Operation | str) -> PolicyRule | None:
    try:
        key = (ResourceType(resource_type), Operation(operation))
    except ValueError:
        return None
    return POLICY_REGISTRY.get(key)


def _target(rule: PolicyRule, resource_type: ResourceType, resource_id: UUID | None, scope_id: UUID | None):
    if rule.scope is not None:
        return rule.scope, scope_id
    return resource_type, resource_id


async def authorize(
    session: AsyncSession,
    *,
    profile_id: UUID | None,
    resource_type: ResourceType | str,
    operation: Operation | str,
    resource_id: UUID | None = None,
    scope_id: UUID | None = None,
) -> bool:
    """Look up the rule for the pair and dispatch to the Access Evaluator.

    ``resource_id`` identifies the row for read/update/delete; ``scope_id``
    identifies the parent for scoped rules such as inserts.
    """
    rule = get_policy(resource_type, operation)
    if rule is None or rule.forbidden:
        logger.info("No permitting policy for %s on %s", operation, resource_type)
        return False
    target_type, target_id = _target(rule, ResourceType(resource_type), resource_id, scope_id)
    return await access.can_access(
        session,
        profile_id=profile_id,
        resource_type=target_type,
        resource_id=target_id,
        capability=rule.required,  # type: ignore[arg-type]
    )


async def require_authorized(
    session: AsyncSession,
    *,
    profile_id: UUID,
    resource_type: ResourceType | str,
    operation: Operation | str,
    resource_id: UUID | None = None,
    scope_id: UUID | None = None,
) -> None:
    """Raise HTTPException(403) unless ``authorize`` allows the operation."""
    rule = get_policy(resource_type, operation)
    if rule is None or rule.forbidden:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=AccessMessages.OPERATION_FORBIDDEN,
        )
    allowed = await authorize(
        session,
        profile_id=profile_id,
        resource_type=resource_type,
        operation=operation,
        resource_id=resource_id,
        scope_id=scope_id,
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=AccessMessages.NO_ACCESS,
        )
