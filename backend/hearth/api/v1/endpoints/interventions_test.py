"""
Integration tests for intervention endpoints.

Tests the API endpoints at /api/v1/interventions including:
- Creating and listing interventions
- Lifecycle transitions
- The Safe Mode block on enabling
- Soft deletion and the lifecycle event log
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import InterventionMessages
from hearth.testing import create_profile, get_auth_headers


async def _create(client: AsyncClient, headers: dict) -> dict:
    response = await client.post(
        "/api/v1/interventions/",
        json={"intervention_key": "focus_mode_suppression", "why_text": "Fewer pings"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.integration
async def test_create_enable_and_list(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)
    headers = get_auth_headers(profile)
    created = await _create(client, headers)
    assert created["status"] == "paused"

    response = await client.post(f"/api/v1/interventions/{created['id']}/enable", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "active"

    response = await client.get("/api/v1/interventions/", params={"status": "active"}, headers=headers)
    assert [item["id"] for item in response.json()] == [created["id"]]


@pytest.mark.integration
async def test_enable_blocked_by_safe_mode(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)
    headers = get_auth_headers(profile)
    created = await _create(client, headers)
    await client.put("/api/v1/safe-mode/", json={"enabled": True}, headers=headers)

    response = await client.post(f"/api/v1/interventions/{created['id']}/enable", headers=headers)

    assert response.status_code == 409
    assert response.json()["detail"] == InterventionMessages.SAFE_MODE_ACTIVE


@pytest.mark.integration
async def test_update_and_delete(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)
    headers = get_auth_headers(profile)
    created = await _create(client, headers)

    response = await client.patch(
        f"/api/v1/interventions/{created['id']}",
        json={"why_text": "Protect mornings"},
        headers=headers,
    )
    assert response.json()["why_text"] == "Protect mornings"

    response = await client.delete(f"/api/v1/interventions/{created['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "deleted"

    response = await client.get("/api/v1/interventions/", headers=headers)
    assert response.json() == []

    response = await client.get(
        "/api/v1/interventions/events",
        params={"intervention_id": created["id"]},
        headers=headers,
    )
    event_types = {event["event_type"] for event in response.json()}
    assert event_types == {"intervention_created", "intervention_edited", "intervention_deleted"}


@pytest.mark.integration
async def test_other_profiles_intervention_is_not_found(client: AsyncClient, session: AsyncSession):
    owner = await create_profile(session)
    other = await create_profile(session)
    created = await _create(client, get_auth_headers(owner))

    response = await client.post(
        f"/api/v1/interventions/{created['id']}/pause", headers=get_auth_headers(other)
    )
    assert response.status_code == 404

    response = await client.post(f"/api/v1/interventions/{uuid4()}/snooze", headers=get_auth_headers(owner))
    assert response.status_code == 404
