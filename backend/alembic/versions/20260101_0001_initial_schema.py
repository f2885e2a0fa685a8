"""Initial Hearth schema: principals, memberships, grants, Mind Mesh and audit.

Revision ID: 20260101_0001
Revises:
Create Date: 2026-01-01 00:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "20260101_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


MEMBERSHIP_STATUS = ("pending", "active", "left")
MEMBER_ROLE = ("owner", "member")
GRANT_ENTITY = ("track", "space")

ENUMS: dict[str, tuple[str, ...]] = {
    "space_type": ("personal", "shared"),
    "space_member_role": MEMBER_ROLE,
    "space_member_status": MEMBERSHIP_STATUS,
    "household_member_role": MEMBER_ROLE,
    "household_member_status": MEMBERSHIP_STATUS,
    "team_member_role": ("owner", "admin", "member", "viewer"),
    "team_member_status": MEMBERSHIP_STATUS,
    "project_user_role": ("owner", "editor", "viewer"),
    "track_category": ("main", "side_project", "offshoot_idea"),
    "grant_entity_type": GRANT_ENTITY,
    "grant_subject_type": ("user", "group"),
    "permission_role": ("viewer", "commenter", "editor", "owner"),
    "creator_rights_entity_type": GRANT_ENTITY,
    "mindmesh_entity_type": ("track", "roadmap_item", "person", "widget", "domain", "project"),
    "mindmesh_port_type": ("free", "input", "output"),
    "mindmesh_relationship_type": (
        "expands",
        "inspires",
        "depends_on",
        "references",
        "hierarchy",
        "composition",
        "generic",
    ),
    "mindmesh_relationship_direction": ("forward", "backward", "bidirectional"),
    "collaboration_surface_type": (
        "project",
        "track",
        "roadmap_item",
        "execution_unit",
        "taskflow",
        "mind_mesh",
        "personal_bridge",
        "side_project",
        "offshoot_idea",
    ),
    "collaboration_activity_type": (
        "created",
        "updated",
        "commented",
        "viewed",
        "linked",
        "unlinked",
        "status_changed",
        "deadline_changed",
        "assigned",
        "unassigned",
        "shared",
        "archived",
        "restored",
        "converted",
        "synced",
    ),
    "intervention_key": (
        "implementation_intention_reminder",
        "context_aware_prompt",
        "scheduled_reflection_prompt",
        "simplified_view_mode",
        "task_decomposition_assistant",
        "focus_mode_suppression",
        "timeboxed_session",
        "project_scope_limiter",
        "accountability_partnership",
        "commitment_witness",
    ),
    "intervention_status": ("active", "paused", "disabled", "deleted"),
    "intervention_lifecycle_event_type": (
        "intervention_created",
        "intervention_enabled",
        "intervention_paused",
        "intervention_disabled",
        "intervention_deleted",
        "intervention_edited",
        "safe_mode_paused_interventions",
        "safe_mode_unpaused_interventions",
    ),
    "intervention_lifecycle_actor": ("user", "safe_mode"),
    "signal_key": (
        "session_boundaries",
        "time_bins_activity_count",
        "activity_intervals",
        "capture_coverage",
    ),
}

APPEND_ONLY_TABLES = ("collaboration_activity", "intervention_lifecycle_events")


def _create_enum_if_not_exists(name: str, values: tuple[str, ...]) -> None:
    quoted_values = ", ".join(f"'{value}'" for value in values)
    op.execute(
        sa.text(
            f"""
            DO $$
            BEGIN
                IF NOT EXISTS (
                    SELECT 1 FROM pg_type WHERE typname = '{name}'
                ) THEN
                    CREATE TYPE {name} AS ENUM ({quoted_values});
                END IF;
            END;
            $$;
            """
        )
    )


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)]
    if updated:
        columns.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False))
    return columns


def _create_append_only_trigger(table_name: str) -> None:
    op.execute(
        f"""
        CREATE TRIGGER tr_{table_name}_append_only
        BEFORE UPDATE OR DELETE ON {table_name}
        FOR EACH ROW
        EXECUTE FUNCTION fn_reject_audit_mutation();
        """
    )


def upgrade() -> None:
    for enum_name, values in ENUMS.items():
        _create_enum_if_not_exists(enum_name, values)

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_profiles_user_id"), "profiles", ["user_id"], unique=True)

    # Spaces and households
    op.create_table(
        "spaces",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("space_type", _enum("space_type"), nullable=False, server_default="personal"),
        sa.Column("owner_id", sa.Uuid(), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "space_members",
        sa.Column("space_id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("role", _enum("space_member_role"), nullable=False, server_default="member"),
        sa.Column("status", _enum("space_member_status"), nullable=False, server_default="pending"),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["space_id"], ["spaces.id"]),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("space_id", "profile_id"),
    )

    op.create_table(
        "households",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "household_members",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("household_id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("role", _enum("household_member_role"), nullable=False, server_default="member"),
        sa.Column("status", _enum("household_member_status"), nullable=False, server_default="pending"),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["household_id"], ["households.id"]),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("household_id", "profile_id", name="uq_household_member_profile"),
    )
    op.create_index(op.f("ix_household_members_household_id"), "household_members", ["household_id"])
    op.create_index(op.f("ix_household_members_profile_id"), "household_members", ["profile_id"])

    # Teams and groups
    op.create_table(
        "teams",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["created_by"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "team_members",
        sa.Column("team_id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("role", _enum("team_member_role"), nullable=False, server_default="member"),
        sa.Column("status", _enum("team_member_status"), nullable=False, server_default="active"),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("team_id", "profile_id"),
    )
    op.create_table(
        "team_groups",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("team_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_team_groups_team_id"), "team_groups", ["team_id"])
    op.create_table(
        "team_group_members",
        sa.Column("group_id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["group_id"], ["team_groups.id"]),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("group_id", "profile_id"),
    )

    # Projects and tracks
    op.create_table(
        "master_projects",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "project_users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("role", _enum("project_user_role"), nullable=False, server_default="viewer"),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["project_id"], ["master_projects.id"]),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "profile_id", name="uq_project_user_profile"),
    )
    op.create_index(op.f("ix_project_users_project_id"), "project_users", ["project_id"])
    op.create_index(op.f("ix_project_users_profile_id"), "project_users", ["profile_id"])
    op.create_table(
        "tracks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("parent_track_id", sa.Uuid(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("category", _enum("track_category"), nullable=False, server_default="main"),
        sa.Column("include_in_roadmap", sa.Boolean(), nullable=False),
        sa.Column("ordering_index", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["master_projects.id"]),
        sa.ForeignKeyConstraint(["parent_track_id"], ["tracks.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_tracks_project_id"), "tracks", ["project_id"])
    op.create_index(op.f("ix_tracks_parent_track_id"), "tracks", ["parent_track_id"])

    # Entity permission grants
    op.create_table(
        "entity_permission_grants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", _enum("grant_entity_type"), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("subject_type", _enum("grant_subject_type"), nullable=False),
        sa.Column("subject_id", sa.Uuid(), nullable=False),
        sa.Column("permission_role", _enum("permission_role"), nullable=False, server_default="viewer"),
        sa.Column("granted_by", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["granted_by"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_entity_permission_grants_entity_id"), "entity_permission_grants", ["entity_id"])
    op.create_index(
        "ix_entity_permission_grants_subject",
        "entity_permission_grants",
        ["subject_type", "subject_id"],
    )
    op.create_index(
        "uq_entity_permission_grants_active",
        "entity_permission_grants",
        ["entity_type", "entity_id", "subject_type", "subject_id"],
        unique=True,
        postgresql_where=sa.text("revoked_at IS NULL"),
    )
    op.create_table(
        "creator_rights_revocations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", _enum("creator_rights_entity_type"), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("creator_profile_id", sa.Uuid(), nullable=False),
        sa.Column("revoked_by", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["creator_profile_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["revoked_by"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "entity_type",
            "entity_id",
            "creator_profile_id",
            name="uq_creator_rights_revocation",
        ),
    )
    op.create_index(op.f("ix_creator_rights_revocations_entity_id"), "creator_rights_revocations", ["entity_id"])

    # Mind Mesh
    op.create_table(
        "mindmesh_workspaces",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["master_projects.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_mindmesh_workspaces_project_id"), "mindmesh_workspaces", ["project_id"], unique=True)
    op.create_table(
        "mindmesh_containers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("body", sa.String(), nullable=True),
        sa.Column("parent_container_id", sa.Uuid(), nullable=True),
        sa.Column("is_ghost", sa.Boolean(), nullable=False),
        sa.Column("x_position", sa.Float(), nullable=False),
        sa.Column("y_position", sa.Float(), nullable=False),
        sa.Column("width", sa.Float(), nullable=False),
        sa.Column("height", sa.Float(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["workspace_id"], ["mindmesh_workspaces.id"]),
        sa.ForeignKeyConstraint(["parent_container_id"], ["mindmesh_containers.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("title IS NOT NULL OR body IS NOT NULL", name="ck_mindmesh_container_has_content"),
    )
    op.create_index(op.f("ix_mindmesh_containers_workspace_id"), "mindmesh_containers", ["workspace_id"])
    op.create_table(
        "mindmesh_container_references",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("container_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", _enum("mindmesh_entity_type"), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["workspace_id"], ["mindmesh_workspaces.id"]),
        sa.ForeignKeyConstraint(["container_id"], ["mindmesh_containers.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "container_id",
            "entity_type",
            "entity_id",
            name="uq_mindmesh_container_entity_reference",
        ),
    )
    op.create_index(
        op.f("ix_mindmesh_container_references_container_id"),
        "mindmesh_container_references",
        ["container_id"],
    )
    op.create_index(
        "ix_mindmesh_references_entity",
        "mindmesh_container_references",
        ["entity_type", "entity_id"],
    )
    op.create_index(
        "uq_mindmesh_reference_single_primary",
        "mindmesh_container_references",
        ["workspace_id", "entity_type", "entity_id"],
        unique=True,
        postgresql_where=sa.text("is_primary = true"),
    )
    op.create_table(
        "mindmesh_ports",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("container_id", sa.Uuid(), nullable=False),
        sa.Column("port_type", _enum("mindmesh_port_type"), nullable=False, server_default="free"),
        sa.Column("label", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["container_id"], ["mindmesh_containers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_mindmesh_ports_container_id"), "mindmesh_ports", ["container_id"])
    op.create_table(
        "mindmesh_nodes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("source_port_id", sa.Uuid(), nullable=False),
        sa.Column("target_port_id", sa.Uuid(), nullable=False),
        sa.Column(
            "relationship_type",
            _enum("mindmesh_relationship_type"),
            nullable=False,
            server_default="generic",
        ),
        sa.Column(
            "relationship_direction",
            _enum("mindmesh_relationship_direction"),
            nullable=False,
            server_default="forward",
        ),
        sa.Column("auto_generated", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["workspace_id"], ["mindmesh_workspaces.id"]),
        sa.ForeignKeyConstraint(["source_port_id"], ["mindmesh_ports.id"]),
        sa.ForeignKeyConstraint(["target_port_id"], ["mindmesh_ports.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("source_port_id != target_port_id", name="ck_mindmesh_node_different_ports"),
    )
    op.create_index(op.f("ix_mindmesh_nodes_workspace_id"), "mindmesh_nodes", ["workspace_id"])
    op.create_index(op.f("ix_mindmesh_nodes_source_port_id"), "mindmesh_nodes", ["source_port_id"])
    op.create_index(op.f("ix_mindmesh_nodes_target_port_id"), "mindmesh_nodes", ["target_port_id"])
    op.create_table(
        "mindmesh_canvas_locks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["workspace_id"], ["mindmesh_workspaces.id"]),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_mindmesh_canvas_locks_workspace_id"), "mindmesh_canvas_locks", ["workspace_id"], unique=True
    )
    op.create_index(op.f("ix_mindmesh_canvas_locks_profile_id"), "mindmesh_canvas_locks", ["profile_id"])
    op.create_index(op.f("ix_mindmesh_canvas_locks_expires_at"), "mindmesh_canvas_locks", ["expires_at"])

    # Audit and behavioural safety
    op.create_table(
        "collaboration_activity",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=True),
        sa.Column("surface_type", _enum("collaboration_surface_type"), nullable=False),
        sa.Column("entity_type", sa.String(), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("activity_type", _enum("collaboration_activity_type"), nullable=False),
        sa.Column("context_metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["project_id"], ["master_projects.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_collaboration_activity_profile", "collaboration_activity", ["profile_id", "created_at"])
    op.create_index("ix_collaboration_activity_project", "collaboration_activity", ["project_id", "created_at"])
    op.create_index(
        "ix_collaboration_activity_entity",
        "collaboration_activity",
        ["entity_type", "entity_id", "created_at"],
    )

    op.create_table(
        "interventions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("intervention_key", _enum("intervention_key"), nullable=False),
        sa.Column("status", _enum("intervention_status"), nullable=False, server_default="paused"),
        sa.Column("why_text", sa.String(), nullable=True),
        sa.Column("user_parameters", sa.JSON(), nullable=False),
        sa.Column("paused_by_safe_mode", sa.Boolean(), nullable=False),
        sa.Column("auto_resume_blocked", sa.Boolean(), nullable=False),
        sa.Column("enabled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paused_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("disabled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_modified_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_interventions_profile_status", "interventions", ["profile_id", "status"])
    op.create_table(
        "intervention_lifecycle_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("intervention_id", sa.Uuid(), nullable=True),
        sa.Column("event_type", _enum("intervention_lifecycle_event_type"), nullable=False),
        sa.Column("actor", _enum("intervention_lifecycle_actor"), nullable=False, server_default="user"),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["intervention_id"], ["interventions.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_intervention_lifecycle_events_intervention_id"),
        "intervention_lifecycle_events",
        ["intervention_id"],
    )
    op.create_index(
        "ix_intervention_lifecycle_events_profile",
        "intervention_lifecycle_events",
        ["profile_id", "created_at"],
    )

    op.create_table(
        "safe_mode_state",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), nullable=False),
        sa.Column("enabled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("disabled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("activation_reason", sa.String(), nullable=True),
        sa.Column("activation_count", sa.Integer(), nullable=False),
        sa.Column("last_toggled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_safe_mode_state_profile_id"), "safe_mode_state", ["profile_id"], unique=True)
    op.create_table(
        "insight_display_consent",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=False),
        sa.Column("signal_key", _enum("signal_key"), nullable=False),
        sa.Column("display_enabled", sa.Boolean(), nullable=False),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("profile_id", "signal_key", name="uq_insight_display_consent"),
    )
    op.create_index(op.f("ix_insight_display_consent_profile_id"), "insight_display_consent", ["profile_id"])

    # Audit rows can be inserted but never changed, even outside the ORM.
    op.execute(
        """
        CREATE OR REPLACE FUNCTION fn_reject_audit_mutation()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION '% on % is not allowed: audit rows are append-only', TG_OP, TG_TABLE_NAME
                USING ERRCODE = 'insufficient_privilege';
        END;
        $$ LANGUAGE plpgsql;
        """
    )
    for table_name in APPEND_ONLY_TABLES:
        _create_append_only_trigger(table_name)


def downgrade() -> None:
    for table_name in APPEND_ONLY_TABLES:
        op.execute(f"DROP TRIGGER IF EXISTS tr_{table_name}_append_only ON {table_name}")
    op.execute("DROP FUNCTION IF EXISTS fn_reject_audit_mutation()")

    for table_name in (
        "insight_display_consent",
        "safe_mode_state",
        "intervention_lifecycle_events",
        "interventions",
        "collaboration_activity",
        "mindmesh_canvas_locks",
        "mindmesh_nodes",
        "mindmesh_ports",
        "mindmesh_container_references",
        "mindmesh_containers",
        "mindmesh_workspaces",
        "creator_rights_revocations",
        "entity_permission_grants",
        "tracks",
        "project_users",
        "master_projects",
        "team_group_members",
        "team_groups",
        "team_members",
        "teams",
        "household_members",
        "households",
        "space_members",
        "spaces",
        "profiles",
    ):
        op.drop_table(table_name)

    for enum_name in reversed(list(ENUMS)):
        op.execute(sa.text(f"DROP TYPE IF EXISTS {enum_name} CASCADE"))
