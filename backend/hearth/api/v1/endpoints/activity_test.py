"""
Integration tests for collaboration activity endpoints.

Tests the API endpoints at /api/v1/activity including:
- Recording activity inside a project or on the caller's own trail
- Rejecting activity for projects the caller cannot see
- Listing own and project activity
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.models.project import ProjectUserRole
from hearth.testing import create_profile, create_project, create_project_user, get_auth_headers


def _activity_payload(project_id) -> dict:
    return {
        "project_id": str(project_id),
        "surface_type": "track",
        "entity_type": "track",
        "entity_id": str(uuid4()),
        "activity_type": "viewed",
        "context_metadata": {"source": "board"},
    }


@pytest.mark.integration
async def test_viewer_can_record_and_list(client: AsyncClient, session: AsyncSession):
    project = await create_project(session)
    viewer = await create_profile(session)
    await create_project_user(session, project=project, profile=viewer, role=ProjectUserRole.viewer)
    headers = get_auth_headers(viewer)

    response = await client.post("/api/v1/activity/", json=_activity_payload(project.id), headers=headers)
    assert response.status_code == 201
    assert response.json()["profile_id"] == str(viewer.id)

    response = await client.get("/api/v1/activity/", headers=headers)
    assert len(response.json()) == 1

    response = await client.get("/api/v1/activity/", params={"project_id": str(project.id)}, headers=headers)
    assert response.status_code == 200
    assert response.json()[0]["context_metadata"] == {"source": "board"}


@pytest.mark.integration
async def test_outsider_cannot_record_or_list(client: AsyncClient, session: AsyncSession):
    project = await create_project(session)
    outsider = await create_profile(session)
    headers = get_auth_headers(outsider)

    response = await client.post("/api/v1/activity/", json=_activity_payload(project.id), headers=headers)
    assert response.status_code == 403

    response = await client.get("/api/v1/activity/", params={"project_id": str(project.id)}, headers=headers)
    assert response.status_code == 403


@pytest.mark.integration
async def test_record_activity_without_project(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)
    headers = get_auth_headers(profile)
    payload = _activity_payload(None)
    payload.pop("project_id")

    response = await client.post("/api/v1/activity/", json=payload, headers=headers)
    assert response.status_code == 201
    body = response.json()
    assert body["project_id"] is None
    assert body["profile_id"] == str(profile.id)

    response = await client.get("/api/v1/activity/", headers=headers)
    assert [row["id"] for row in response.json()] == [body["id"]]
