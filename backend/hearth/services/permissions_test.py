"""Tests for role math and track permission resolution.

Tests cover:
- Generic helpers (highest_role, cap_role)
- Capability checks and the 403 raised by require_role
- Track resolution across project role, creator rights and grants
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi import HTTPException

from hearth.core.config import settings
from hearth.core.messages import AccessMessages
from hearth.models.permission import PermissionRole
from hearth.services.permissions import (
    EntityPermissionResolution,
    cap_role,
    creator_role,
    highest_role,
    require_role,
    resolve_track_permissions,
    role_satisfies,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_track(created_by=None) -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), project_id=uuid4(), created_by=created_by)


# ---------------------------------------------------------------------------
# Role math
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_highest_role_ignores_none():
    assert highest_role([None, PermissionRole.commenter, None]) == PermissionRole.commenter
    assert highest_role([]) is None


@pytest.mark.unit
def test_highest_role_picks_top_rank():
    roles = [PermissionRole.viewer, PermissionRole.owner, PermissionRole.editor]
    assert highest_role(roles) == PermissionRole.owner


@pytest.mark.unit
def test_cap_role_clamps_to_ceiling():
    assert cap_role(PermissionRole.editor, PermissionRole.viewer) == PermissionRole.viewer
    assert cap_role(PermissionRole.viewer, PermissionRole.owner) == PermissionRole.viewer


@pytest.mark.unit
def test_cap_role_without_ceiling_is_no_access():
    assert cap_role(PermissionRole.editor, None) is None


@pytest.mark.unit
@pytest.mark.parametrize(
    ("held", "required", "expected"),
    [
        (PermissionRole.owner, PermissionRole.editor, True),
        (PermissionRole.editor, PermissionRole.editor, True),
        (PermissionRole.commenter, PermissionRole.viewer, True),
        (PermissionRole.viewer, PermissionRole.commenter, False),
        (None, PermissionRole.viewer, False),
    ],
)
def test_role_satisfies(held, required, expected):
    assert role_satisfies(held, required) is expected


@pytest.mark.unit
def test_require_role_without_role_raises_no_access():
    with pytest.raises(HTTPException) as exc_info:
        require_role(None, PermissionRole.viewer)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == AccessMessages.NO_ACCESS


@pytest.mark.unit
def test_require_role_insufficient_raises_capability_required():
    with pytest.raises(HTTPException) as exc_info:
        require_role(PermissionRole.viewer, PermissionRole.editor)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == AccessMessages.CAPABILITY_REQUIRED


@pytest.mark.unit
def test_require_role_sufficient_passes():
    require_role(PermissionRole.owner, PermissionRole.editor)


@pytest.mark.unit
def test_resolution_flags_follow_role():
    resolution = EntityPermissionResolution(role=PermissionRole.commenter)
    assert resolution.can_view
    assert resolution.can_comment
    assert not resolution.can_edit
    assert not resolution.can_manage


@pytest.mark.unit
def test_resolution_without_role_has_no_flags():
    resolution = EntityPermissionResolution(role=None)
    assert not resolution.can_view


# ---------------------------------------------------------------------------
# Creator rights
# ---------------------------------------------------------------------------


@pytest.mark.unit
async def test_creator_role_for_non_creator_is_none():
    result = await creator_role(
        AsyncMock(),
        entity_type="track",
        entity_id=uuid4(),
        created_by=uuid4(),
        profile_id=uuid4(),
    )
    assert result is None


@pytest.mark.unit
async def test_creator_role_disabled_by_setting(monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_CREATOR_RIGHTS", False)
    profile_id = uuid4()
    result = await creator_role(
        AsyncMock(),
        entity_type="track",
        entity_id=uuid4(),
        created_by=profile_id,
        profile_id=profile_id,
    )
    assert result is None


@pytest.mark.unit
async def test_creator_role_is_editor_unless_revoked():
    profile_id = uuid4()
    with patch(
        "hearth.services.permissions.creator_rights_revoked",
        new=AsyncMock(return_value=False),
    ):
        result = await creator_role(
            AsyncMock(),
            entity_type="track",
            entity_id=uuid4(),
            created_by=profile_id,
            profile_id=profile_id,
        )
    assert result == PermissionRole.editor

    with patch(
        "hearth.services.permissions.creator_rights_revoked",
        new=AsyncMock(return_value=True),
    ):
        result = await creator_role(
            AsyncMock(),
            entity_type="track",
            entity_id=uuid4(),
            created_by=profile_id,
            profile_id=profile_id,
        )
    assert result is None


# ---------------------------------------------------------------------------
# Track resolution
# ---------------------------------------------------------------------------


def _patch_sources(project_role, grants):
    return (
        patch(
            "hearth.services.permissions.rls.get_project_role",
            new=AsyncMock(return_value=project_role),
        ),
        patch(
            "hearth.services.permissions.granted_roles",
            new=AsyncMock(return_value=grants),
        ),
    )


@pytest.mark.unit
async def test_resolve_track_takes_max_of_sources():
    project_patch, grants_patch = _patch_sources(PermissionRole.viewer, [PermissionRole.editor])
    with project_patch, grants_patch:
        resolution = await resolve_track_permissions(AsyncMock(), track=_make_track(), profile_id=uuid4())

    assert resolution.role == PermissionRole.editor
    assert resolution.project_role == PermissionRole.viewer
    assert resolution.grant_roles == [PermissionRole.editor]
    assert not resolution.ceiling_applied


@pytest.mark.unit
async def test_resolve_track_ceiling_caps_grants(monkeypatch):
    monkeypatch.setattr(settings, "ENTITY_GRANTS_RESPECT_PROJECT_CEILING", True)
    project_patch, grants_patch = _patch_sources(PermissionRole.viewer, [PermissionRole.editor])
    with project_patch, grants_patch:
        resolution = await resolve_track_permissions(AsyncMock(), track=_make_track(), profile_id=uuid4())

    assert resolution.role == PermissionRole.viewer
    assert resolution.ceiling_applied


@pytest.mark.unit
async def test_resolve_track_ceiling_denies_non_members(monkeypatch):
    monkeypatch.setattr(settings, "ENTITY_GRANTS_RESPECT_PROJECT_CEILING", True)
    project_patch, grants_patch = _patch_sources(None, [PermissionRole.commenter])
    with project_patch, grants_patch:
        resolution = await resolve_track_permissions(AsyncMock(), track=_make_track(), profile_id=uuid4())

    assert resolution.role is None
    assert not resolution.can_view


@pytest.mark.unit
async def test_resolve_track_grants_disabled(monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_ENTITY_GRANTS", False)
    project_patch, grants_patch = _patch_sources(None, [PermissionRole.editor])
    with project_patch, grants_patch:
        resolution = await resolve_track_permissions(AsyncMock(), track=_make_track(), profile_id=uuid4())

    assert resolution.role is None
    assert resolution.grant_roles == []


@pytest.mark.unit
@pytest.mark.parametrize(
    ("project_role", "expected_role", "ceiling_applied"),
    [
        (None, None, True),
        (PermissionRole.viewer, PermissionRole.viewer, True),
        (PermissionRole.editor, PermissionRole.editor, False),
    ],
)
async def test_resolve_track_creator_rights_follow_project_membership(
    project_role, expected_role, ceiling_applied
):
    creator_id = uuid4()
    project_patch, grants_patch = _patch_sources(project_role, [])
    revoked_patch = patch(
        "hearth.services.permissions.creator_rights_revoked",
        new=AsyncMock(return_value=False),
    )
    with project_patch, grants_patch, revoked_patch:
        resolution = await resolve_track_permissions(
            AsyncMock(), track=_make_track(created_by=creator_id), profile_id=creator_id
        )

    assert resolution.creator_role == PermissionRole.editor
    assert resolution.role == expected_role
    assert resolution.ceiling_applied is ceiling_applied
