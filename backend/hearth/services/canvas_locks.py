"""Per-workspace canvas lock.

One row per workspace (``UNIQUE (workspace_id)``). Expiry is evaluated at
read time: a row whose ``expires_at`` has passed is treated as absent and is
replaced by the next acquirer, so nothing has to sweep stale locks.
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.config import settings
from hearth.core.messages import CanvasLockMessages
from hearth.models.mindmesh import MindmeshCanvasLock

logger = logging.getLogger(__name__)


class CanvasLockErrorCode(str, Enum):
    NO_ACTIVE_LOCK = "NO_ACTIVE_LOCK"
    LOCK_EXPIRED = "LOCK_EXPIRED"
    NOT_LOCK_HOLDER = "NOT_LOCK_HOLDER"


_CODE_MESSAGES = {
    CanvasLockErrorCode.NO_ACTIVE_LOCK: CanvasLockMessages.NO_ACTIVE_LOCK,
    CanvasLockErrorCode.LOCK_EXPIRED: CanvasLockMessages.LOCK_EXPIRED,
    CanvasLockErrorCode.NOT_LOCK_HOLDER: CanvasLockMessages.NOT_LOCK_HOLDER,
}


class CanvasLockError(PermissionError):
    """The caller tried to write without holding a live lock."""

    def __init__(self, code: CanvasLockErrorCode) -> None:
        super().__init__(_CODE_MESSAGES[code])
        self.code = code


class CanvasLockedError(Exception):
    """Another profile holds a live lock on the workspace."""

    def __init__(self, lock: MindmeshCanvasLock | None = None) -> None:
        super().__init__(CanvasLockMessages.WORKSPACE_LOCKED)
        self.lock = lock


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(lock: MindmeshCanvasLock, *, now: datetime | None = None) -> bool:
    return _as_utc(lock.expires_at) <= (now or _now())


def _validate_duration(duration_seconds: int | None) -> int:
    if duration_seconds is None:
        return settings.CANVAS_LOCK_DEFAULT_SECONDS
    if duration_seconds <= 0:
        raise ValueError(CanvasLockMessages.INVALID_DURATION)
    if duration_seconds > settings.CANVAS_LOCK_MAX_SECONDS:
        raise ValueError(CanvasLockMessages.DURATION_TOO_LONG)
    return duration_seconds


async def _get_lock_row(session: AsyncSession, *, workspace_id: UUID) -> MindmeshCanvasLock | None:
    stmt = select(MindmeshCanvasLock).where(MindmeshCanvasLock.workspace_id == workspace_id)
    result = await session.exec(stmt)
    return result.one_or_none()


async def get_active_lock(session: AsyncSession, *, workspace_id: UUID) -> MindmeshCanvasLock | None:
    """The workspace's lock, or ``None`` when there is none or it has expired."""
    lock = await _get_lock_row(session, workspace_id=workspace_id)
    if lock is None or is_expired(lock):
        return None
    return lock


async def acquire_canvas_lock(
    session: AsyncSession,
    *,
    workspace_id: UUID,
    profile_id: UUID,
    duration_seconds: int | None = None,
) -> MindmeshCanvasLock:
    """Take or renew the workspace lock.

    Raises ``CanvasLockedError`` when another profile holds a live lock,
    including when a concurrent acquirer wins the insert race.
    """
    duration = _validate_duration(duration_seconds)
    now = _now()
    expires_at = now + timedelta(seconds=duration)

    lock = await _get_lock_row(session, workspace_id=workspace_id)
    if lock is not None:
        if lock.profile_id != profile_id and not is_expired(lock, now=now):
            logger.info(
                "Workspace %s lock request by %s refused; held by %s",
                workspace_id,
                profile_id,
                lock.profile_id,
            )
            raise CanvasLockedError(lock)
        # Renewal by the holder, or takeover of an expired lock.
        lock.profile_id = profile_id
        lock.expires_at = expires_at
        lock.created_at = now
        session.add(lock)
        await session.flush()
        return lock

    lock = MindmeshCanvasLock(workspace_id=workspace_id, profile_id=profile_id, expires_at=expires_at)
    session.add(lock)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        logger.info("Workspace %s lock insert lost a race for %s", workspace_id, profile_id)
        raise CanvasLockedError() from exc
    logger.debug("Workspace %s locked by %s until %s", workspace_id, profile_id, expires_at)
    return lock


async def release_canvas_lock(session: AsyncSession, *, workspace_id: UUID, profile_id: UUID) -> bool:
    """Delete the caller's own lock. Returns False when the caller holds none."""
    lock = await _get_lock_row(session, workspace_id=workspace_id)
    if lock is None or lock.profile_id != profile_id:
        return False
    await session.delete(lock)
    await session.flush()
    return True


async def assert_lock_held(session: AsyncSession, *, workspace_id: UUID, profile_id: UUID) -> MindmeshCanvasLock:
    """Return the caller's live lock or raise ``CanvasLockError`` with the reason."""
    lock = await _get_lock_row(session, workspace_id=workspace_id)
    if lock is None:
        raise CanvasLockError(CanvasLockErrorCode.NO_ACTIVE_LOCK)
    if is_expired(lock):
        raise CanvasLockError(CanvasLockErrorCode.LOCK_EXPIRED)
    if lock.profile_id != profile_id:
        raise CanvasLockError(CanvasLockErrorCode.NOT_LOCK_HOLDER)
    return lock
