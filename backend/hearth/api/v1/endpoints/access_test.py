"""
Integration tests for access endpoints.

Tests the API endpoints at /api/v1/access including:
- Capability checks
- Policy authorization
- Entity permission resolution
- Bearer token handling
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import PrincipalMessages
from hearth.core.security import create_access_token
from hearth.models.project import ProjectUserRole
from hearth.models.space import SpaceType
from hearth.testing import (
    create_profile,
    create_project,
    create_project_user,
    create_space,
    create_track,
    get_auth_headers,
)


@pytest.mark.integration
async def test_missing_token_is_rejected(client: AsyncClient):
    response = await client.post(
        "/api/v1/access/check",
        json={"resource_type": "project", "resource_id": str(uuid4())},
    )
    assert response.status_code == 401


@pytest.mark.integration
async def test_token_for_unknown_user_is_forbidden(client: AsyncClient):
    headers = {"Authorization": f"Bearer {create_access_token(str(uuid4()))}"}
    response = await client.get("/api/v1/principals/me", headers=headers)

    assert response.status_code == 403
    assert response.json()["detail"] == PrincipalMessages.PROFILE_NOT_FOUND


@pytest.mark.integration
async def test_garbage_token_is_forbidden(client: AsyncClient):
    headers = {"Authorization": "Bearer not-a-jwt"}
    response = await client.get("/api/v1/principals/me", headers=headers)

    assert response.status_code == 403
    assert response.json()["detail"] == PrincipalMessages.INVALID_CREDENTIALS


@pytest.mark.integration
async def test_check_personal_space(client: AsyncClient, session: AsyncSession):
    owner = await create_profile(session)
    other = await create_profile(session)
    space = await create_space(session, owner=owner, space_type=SpaceType.personal)
    payload = {"resource_type": "space", "resource_id": str(space.id), "capability": "owner"}

    response = await client.post("/api/v1/access/check", json=payload, headers=get_auth_headers(owner))
    assert response.status_code == 200
    assert response.json() == {"allowed": True, "role": "owner"}

    response = await client.post("/api/v1/access/check", json=payload, headers=get_auth_headers(other))
    assert response.status_code == 200
    assert response.json() == {"allowed": False, "role": None}


@pytest.mark.integration
async def test_authorize_audit_update_is_never_allowed(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)
    response = await client.post(
        "/api/v1/access/authorize",
        json={
            "resource_type": "collaboration_activity",
            "operation": "update",
            "resource_id": str(uuid4()),
        },
        headers=get_auth_headers(profile),
    )

    assert response.status_code == 200
    assert response.json() == {"allowed": False}


@pytest.mark.integration
async def test_authorize_track_insert_uses_project_scope(client: AsyncClient, session: AsyncSession):
    project = await create_project(session)
    editor = await create_profile(session)
    await create_project_user(session, project=project, profile=editor, role=ProjectUserRole.editor)

    response = await client.post(
        "/api/v1/access/authorize",
        json={"resource_type": "track", "operation": "insert", "scope_id": str(project.id)},
        headers=get_auth_headers(editor),
    )

    assert response.json() == {"allowed": True}


@pytest.mark.integration
async def test_entity_permissions_for_track(client: AsyncClient, session: AsyncSession):
    project = await create_project(session)
    viewer = await create_profile(session)
    await create_project_user(session, project=project, profile=viewer, role=ProjectUserRole.viewer)
    track = await create_track(session, project=project)

    response = await client.get(
        f"/api/v1/access/entities/track/{track.id}",
        headers=get_auth_headers(viewer),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "viewer"
    assert data["can_view"] is True
    assert data["can_edit"] is False
    assert data["project_role"] == "viewer"


@pytest.mark.integration
async def test_entity_permissions_without_access(client: AsyncClient, session: AsyncSession):
    project = await create_project(session)
    track = await create_track(session, project=project)
    stranger = await create_profile(session)

    response = await client.get(
        f"/api/v1/access/entities/track/{track.id}",
        headers=get_auth_headers(stranger),
    )

    assert response.status_code == 403


@pytest.mark.integration
async def test_principal_me(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session, display_name="Jordan")
    project = await create_project(session, owner=profile)

    response = await client.get("/api/v1/principals/me", headers=get_auth_headers(profile))

    assert response.status_code == 200
    data = response.json()
    assert data["profile_id"] == str(profile.id)
    assert data["display_name"] == "Jordan"
    assert data["project_ids"] == [str(project.id)]
