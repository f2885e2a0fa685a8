"""
Integration tests for track conversion endpoints.

Tests the API endpoint at /api/v1/tracks/{id}/convert including:
- Valid conversions
- Invalid transitions
- Permission checks
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.models.project import TrackCategory
from hearth.testing import create_profile, create_project, create_track, get_auth_headers


@pytest.mark.integration
async def test_convert_to_side_project(client: AsyncClient, session: AsyncSession):
    owner = await create_profile(session)
    project = await create_project(session, owner=owner)
    track = await create_track(session, project=project)

    response = await client.post(
        f"/api/v1/tracks/{track.id}/convert",
        json={"target": "side_project"},
        headers=get_auth_headers(owner),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "side_project"
    assert data["include_in_roadmap"] is False


@pytest.mark.integration
async def test_invalid_transition_is_bad_request(client: AsyncClient, session: AsyncSession):
    owner = await create_profile(session)
    project = await create_project(session, owner=owner)
    track = await create_track(session, project=project, category=TrackCategory.offshoot_idea)

    response = await client.post(
        f"/api/v1/tracks/{track.id}/convert",
        json={"target": "main"},
        headers=get_auth_headers(owner),
    )

    assert response.status_code == 400


@pytest.mark.integration
async def test_unknown_track_is_forbidden(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)

    response = await client.post(
        f"/api/v1/tracks/{uuid4()}/convert",
        json={"target": "offshoot_idea"},
        headers=get_auth_headers(profile),
    )

    # Missing rows deny rather than reveal existence.
    assert response.status_code == 403
