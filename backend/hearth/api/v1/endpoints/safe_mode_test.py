"""
Integration tests for Safe Mode endpoints.

Tests the API endpoints at /api/v1/safe-mode including:
- Reading the default state
- Toggling Safe Mode on and off
- Rejecting toggles on behalf of another profile
- Insight display consent
"""

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.messages import SafeModeMessages
from hearth.testing import create_profile, get_auth_headers


@pytest.mark.integration
async def test_read_default_state(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)

    response = await client.get("/api/v1/safe-mode/", headers=get_auth_headers(profile))

    assert response.status_code == 200
    data = response.json()
    assert data["is_enabled"] is False
    assert data["activation_count"] == 0


@pytest.mark.integration
async def test_toggle_round_trip(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)
    headers = get_auth_headers(profile)

    response = await client.put("/api/v1/safe-mode/", json={"enabled": True, "reason": "rest"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["is_enabled"] is True
    assert response.json()["activation_count"] == 1

    response = await client.put("/api/v1/safe-mode/", json={"enabled": False}, headers=headers)
    assert response.status_code == 200
    assert response.json()["is_enabled"] is False
    assert response.json()["activation_count"] == 1


@pytest.mark.integration
async def test_toggle_for_another_profile_is_forbidden(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)
    other = await create_profile(session)

    response = await client.put(
        "/api/v1/safe-mode/",
        json={"enabled": True, "profile_id": str(other.id)},
        headers=get_auth_headers(profile),
    )

    assert response.status_code == 403
    assert response.json()["detail"] == SafeModeMessages.CANNOT_TOGGLE_FOR_OTHERS


@pytest.mark.integration
async def test_insight_visible_only_with_consent_and_safe_mode_off(client: AsyncClient, session: AsyncSession):
    profile = await create_profile(session)
    headers = get_auth_headers(profile)

    response = await client.get("/api/v1/safe-mode/insights/session_boundaries", headers=headers)
    assert response.status_code == 200
    assert response.json()["can_display"] is False

    response = await client.put(
        "/api/v1/safe-mode/consent/session_boundaries",
        json={"display_enabled": True},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["display_enabled"] is True
    assert response.json()["granted_at"] is not None

    response = await client.get("/api/v1/safe-mode/insights/session_boundaries", headers=headers)
    assert response.json()["can_display"] is True

    await client.put("/api/v1/safe-mode/", json={"enabled": True}, headers=headers)
    response = await client.get("/api/v1/safe-mode/insights/session_boundaries", headers=headers)
    assert response.json()["can_display"] is False
