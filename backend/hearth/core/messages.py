"""User-facing detail strings for HTTP errors.

Kept in one place so tests can assert on the exact detail a helper raises.
"""


class AccessMessages:
    NO_ACCESS = "You do not have access to this resource"
    CAPABILITY_REQUIRED = "Your role does not allow this action"
    OPERATION_FORBIDDEN = "This operation is not permitted"
    UNKNOWN_RESOURCE_TYPE = "Unknown resource type"


class PrincipalMessages:
    INVALID_CREDENTIALS = "Could not validate credentials"
    INVALID_TOKEN_PAYLOAD = "Invalid token payload"
    PROFILE_NOT_FOUND = "No profile exists for the authenticated user"
    IMPERSONATION = "Cannot act on behalf of another user"


class SafeModeMessages:
    CANNOT_TOGGLE_FOR_OTHERS = "Cannot toggle Safe Mode for other users"


class InterventionMessages:
    NOT_FOUND = "Intervention not found"
    SAFE_MODE_ACTIVE = "Interventions are paused while Safe Mode is active."
    DELETED = "Intervention has been deleted"


class AuditMessages:
    APPEND_ONLY = "Audit records are append-only and cannot be changed or removed"
    CONSTRAINT_VIOLATION = "The change conflicts with existing data"


class CanvasLockMessages:
    WORKSPACE_LOCKED = "Workspace is locked by another user"
    NO_ACTIVE_LOCK = "Workspace has no active lock - acquire lock before writing"
    LOCK_EXPIRED = "Workspace lock has expired - acquire new lock before writing"
    NOT_LOCK_HOLDER = "User does not hold workspace lock - only lock holder can write"
    INVALID_DURATION = "Lock duration must be positive"
    DURATION_TOO_LONG = "Lock duration exceeds the allowed maximum"


class GrantMessages:
    NOT_FOUND = "Permission grant not found"
    OWNER_NOT_GRANTABLE = "Owner access cannot be granted through a permission grant"
    OWNER_REQUIRED = "Only the entity owner can manage its permissions"


class TrackMessages:
    NOT_FOUND = "Track not found"
    INVALID_TRANSITION = "Track cannot move from {current} to {target}"


class MindMeshMessages:
    CONTAINER_NOT_FOUND = "Container not found"
    CONTAINER_NEEDS_CONTENT = "Containers must have a title or a body"
    GHOST_READ_ONLY = "Ghost containers are read-only"
    FIELD_NOT_EDITABLE = "Container fields cannot be edited: {fields}"
    PORT_NOT_FOUND = "Port not found"
    SAME_PORT = "A node must connect two different ports"
    CROSS_WORKSPACE = "Both ports must belong to containers in the node's workspace"
    REFERENCE_NOT_FOUND = "Container reference not found"
