"""Policy Registry lookups and generic authorization dispatch."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi import HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import AccessMessages
from hearth.models.permission import PermissionRole
from hearth.models.project import ProjectUserRole
from hearth.services import policies
from hearth.services.access import ResourceType
from hearth.services.policies import FORBIDDEN, POLICY_REGISTRY, Operation, PolicyRule
from hearth.testing import create_profile, create_project, create_project_user, create_workspace


@pytest.mark.unit
@pytest.mark.parametrize(
    "resource_type",
    [ResourceType.collaboration_activity, ResourceType.intervention_lifecycle_event],
)
@pytest.mark.parametrize("operation", [Operation.update, Operation.delete])
def test_audit_rows_are_never_mutable(resource_type, operation):
    rule = policies.get_policy(resource_type, operation)
    assert rule is FORBIDDEN
    assert rule.forbidden


@pytest.mark.unit
def test_unregistered_pair_has_no_policy():
    assert policies.get_policy(ResourceType.safe_mode_state, Operation.delete) is None
    assert policies.get_policy("grocery_list", "read") is None


@pytest.mark.unit
def test_inserts_are_scoped_to_a_parent():
    for (resource_type, operation), rule in POLICY_REGISTRY.items():
        if operation == Operation.insert:
            assert rule.scope is not None, resource_type


@pytest.mark.unit
async def test_authorize_dispatches_scoped_rule_to_parent():
    scope_id = uuid4()
    profile_id = uuid4()
    with patch("hearth.services.policies.access.can_access", new=AsyncMock(return_value=True)) as can_access:
        allowed = await policies.authorize(
            AsyncMock(),
            profile_id=profile_id,
            resource_type=ResourceType.track,
            operation=Operation.insert,
            scope_id=scope_id,
        )

    assert allowed is True
    kwargs = can_access.await_args.kwargs
    assert kwargs["resource_type"] == ResourceType.project
    assert kwargs["resource_id"] == scope_id
    assert kwargs["capability"] == PermissionRole.editor


@pytest.mark.unit
async def test_authorize_forbidden_never_consults_evaluator():
    with patch("hearth.services.policies.access.can_access", new=AsyncMock(return_value=True)) as can_access:
        allowed = await policies.authorize(
            AsyncMock(),
            profile_id=uuid4(),
            resource_type=ResourceType.collaboration_activity,
            operation=Operation.update,
            resource_id=uuid4(),
        )

    assert allowed is False
    can_access.assert_not_awaited()


@pytest.mark.unit
async def test_require_authorized_forbidden_detail():
    with pytest.raises(HTTPException) as exc_info:
        await policies.require_authorized(
            AsyncMock(),
            profile_id=uuid4(),
            resource_type=ResourceType.intervention_lifecycle_event,
            operation=Operation.delete,
            resource_id=uuid4(),
        )
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == AccessMessages.OPERATION_FORBIDDEN


@pytest.mark.unit
def test_policy_rule_defaults():
    rule = PolicyRule(PermissionRole.viewer)
    assert rule.scope is None
    assert not rule.forbidden


@pytest.mark.service
async def test_container_insert_requires_editor_on_workspace(session: AsyncSession):
    project = await create_project(session)
    workspace = await create_workspace(session, project=project)
    viewer = await create_profile(session)
    editor = await create_profile(session)
    await create_project_user(session, project=project, profile=viewer, role=ProjectUserRole.viewer)
    await create_project_user(session, project=project, profile=editor, role=ProjectUserRole.editor)

    for profile, expected in ((viewer, False), (editor, True)):
        allowed = await policies.authorize(
            session,
            profile_id=profile.id,
            resource_type=ResourceType.mindmesh_container,
            operation=Operation.insert,
            scope_id=workspace.id,
        )
        assert allowed is expected


@pytest.mark.service
async def test_require_authorized_without_membership(session: AsyncSession):
    project = await create_project(session)
    stranger = await create_profile(session)

    with pytest.raises(HTTPException) as exc_info:
        await policies.require_authorized(
            session,
            profile_id=stranger.id,
            resource_type=ResourceType.project,
            operation=Operation.read,
            resource_id=project.id,
        )
    assert exc_info.value.detail == AccessMessages.NO_ACCESS
