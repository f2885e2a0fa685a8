"""
Shared test utilities and factories.

Re-exports all factory functions for convenient imports:
    from hearth.testing import create_profile, create_project, get_auth_headers
"""

from hearth.testing.factories import (
    add_group_member,
    create_container,
    create_household,
    create_household_member,
    create_profile,
    create_project,
    create_project_user,
    create_space,
    create_space_member,
    create_team,
    create_team_group,
    create_track,
    create_workspace,
    get_auth_headers,
    get_auth_token,
)

__all__ = [
    "add_group_member",
    "create_container",
    "create_household",
    "create_household_member",
    "create_profile",
    "create_project",
    "create_project_user",
    "create_space",
    "create_space_member",
    "create_team",
    "create_team_group",
    "create_track",
    "create_workspace",
    "get_auth_headers",
    "get_auth_token",
]
