"""Import all models for Alembic or metadata creation."""

from hearth.models.activity import CollaborationActivity
from hearth.models.household import Household, HouseholdMember
from hearth.models.intervention import Intervention, InterventionLifecycleEvent
from hearth.models.mindmesh import (
    MindmeshCanvasLock,
    MindmeshContainer,
    MindmeshContainerReference,
    MindmeshNode,
    MindmeshPort,
    MindmeshWorkspace,
)
from hearth.models.permission import CreatorRightsRevocation, EntityPermissionGrant
from hearth.models.profile import Profile
from hearth.models.project import MasterProject, ProjectUser, Track
from hearth.models.safe_mode import InsightDisplayConsent, SafeModeState
from hearth.models.space import Space, SpaceMember
from hearth.models.team import Team, TeamGroup, TeamGroupMember, TeamMember

from hearth.db import guards  # noqa: F401  # registers append-only listeners

__all__ = [
    "Profile",
    "Space",
    "SpaceMember",
    "Household",
    "HouseholdMember",
    "Team",
    "TeamMember",
    "TeamGroup",
    "TeamGroupMember",
    "MasterProject",
    "ProjectUser",
    "Track",
    "EntityPermissionGrant",
    "CreatorRightsRevocation",
    "MindmeshWorkspace",
    "MindmeshContainer",
    "MindmeshContainerReference",
    "MindmeshPort",
    "MindmeshNode",
    "MindmeshCanvasLock",
    "CollaborationActivity",
    "Intervention",
    "InterventionLifecycleEvent",
    "SafeModeState",
    "InsightDisplayConsent",
]
