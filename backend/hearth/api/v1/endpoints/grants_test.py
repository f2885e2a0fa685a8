"""
Integration tests for permission grant endpoints.

Tests the API endpoints at /api/v1/grants including:
- Granting access to a track
- Listing active grants
- Revoking a grant and losing access
- Revoking and restoring creator rights
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import GrantMessages
from hearth.testing import (
    create_profile,
    create_project,
    create_project_user,
    create_track,
    get_auth_headers,
)


@pytest.mark.integration
async def test_grant_list_and_revoke(client: AsyncClient, session: AsyncSession):
    owner = await create_profile(session)
    project = await create_project(session, owner=owner)
    track = await create_track(session, project=project)
    guest = await create_profile(session)
    owner_headers = get_auth_headers(owner)
    check = {"resource_type": "track", "resource_id": str(track.id)}

    response = await client.post("/api/v1/access/check", json=check, headers=get_auth_headers(guest))
    assert response.json()["allowed"] is False

    response = await client.post(
        "/api/v1/grants/",
        json={
            "entity_type": "track",
            "entity_id": str(track.id),
            "subject_id": str(guest.id),
            "permission_role": "commenter",
        },
        headers=owner_headers,
    )
    assert response.status_code == 201
    grant_id = response.json()["id"]

    response = await client.get(
        "/api/v1/grants/",
        params={"entity_type": "track", "entity_id": str(track.id)},
        headers=owner_headers,
    )
    assert [grant["id"] for grant in response.json()] == [grant_id]

    response = await client.post("/api/v1/access/check", json=check, headers=get_auth_headers(guest))
    assert response.json() == {"allowed": True, "role": "commenter"}

    response = await client.delete(f"/api/v1/grants/{grant_id}", headers=owner_headers)
    assert response.status_code == 204

    response = await client.post("/api/v1/access/check", json=check, headers=get_auth_headers(guest))
    assert response.json()["allowed"] is False


@pytest.mark.integration
async def test_owner_role_cannot_be_granted(client: AsyncClient, session: AsyncSession):
    owner = await create_profile(session)
    project = await create_project(session, owner=owner)
    track = await create_track(session, project=project)

    response = await client.post(
        "/api/v1/grants/",
        json={
            "entity_type": "track",
            "entity_id": str(track.id),
            "subject_id": str(uuid4()),
            "permission_role": "owner",
        },
        headers=get_auth_headers(owner),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == GrantMessages.OWNER_NOT_GRANTABLE


@pytest.mark.integration
async def test_non_owner_cannot_grant(client: AsyncClient, session: AsyncSession):
    project = await create_project(session)
    track = await create_track(session, project=project)
    stranger = await create_profile(session)

    response = await client.post(
        "/api/v1/grants/",
        json={"entity_type": "track", "entity_id": str(track.id), "subject_id": str(stranger.id)},
        headers=get_auth_headers(stranger),
    )

    assert response.status_code == 403


@pytest.mark.integration
async def test_revoke_unknown_grant(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)
    response = await client.delete(f"/api/v1/grants/{uuid4()}", headers=get_auth_headers(profile))
    assert response.status_code == 404


@pytest.mark.integration
async def test_creator_rights_revoke_and_restore(client: AsyncClient, session: AsyncSession):
    owner = await create_profile(session)
    project = await create_project(session, owner=owner)
    creator = await create_profile(session)
    await create_project_user(session, project=project, profile=creator)
    track = await create_track(session, project=project, created_by=creator.id)
    owner_headers = get_auth_headers(owner)
    creator_headers = get_auth_headers(creator)
    entity_url = f"/api/v1/access/entities/track/{track.id}"
    change = {"entity_type": "track", "entity_id": str(track.id), "creator_profile_id": str(creator.id)}

    response = await client.get(entity_url, headers=creator_headers)
    assert response.json()["creator_role"] == "editor"
    assert response.json()["role"] == "viewer"
    assert response.json()["ceiling_applied"] is True

    response = await client.post("/api/v1/grants/creator-rights/revoke", json=change, headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["revoked"] is True

    response = await client.get(entity_url, headers=creator_headers)
    assert response.json()["creator_role"] is None
    assert response.json()["ceiling_applied"] is False

    response = await client.post("/api/v1/grants/creator-rights/restore", json=change, headers=owner_headers)
    assert response.json()["revoked"] is False

    response = await client.get(entity_url, headers=creator_headers)
    assert response.json()["creator_role"] == "editor"


@pytest.mark.integration
async def test_creator_cannot_restore_own_rights(client: AsyncClient, session: AsyncSession):
    project = await create_project(session)
    creator = await create_profile(session)
    await create_project_user(session, project=project, profile=creator)
    track = await create_track(session, project=project, created_by=creator.id)

    response = await client.post(
        "/api/v1/grants/creator-rights/restore",
        json={"entity_type": "track", "entity_id": str(track.id), "creator_profile_id": str(creator.id)},
        headers=get_auth_headers(creator),
    )

    assert response.status_code == 403
