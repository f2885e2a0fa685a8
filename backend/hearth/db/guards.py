"""Append-only enforcement for audit tables.

Two hooks cover both ORM write paths:

* mapper ``before_update`` / ``before_delete`` reject a flush that would
  change or remove a loaded audit row;
* a session ``do_orm_execute`` hook rejects bulk ``update()`` / ``delete()``
  statements aimed at an audit model.

The Postgres migration adds a trigger with the same rule for writers that
bypass the ORM.
"""

import logging

from sqlalchemy import event
from sqlalchemy.orm import ORMExecuteState, Session

from hearth.core.messages import AuditMessages
from hearth.models.activity import CollaborationActivity
from hearth.models.intervention import InterventionLifecycleEvent

logger = logging.getLogger(__name__)

APPEND_ONLY_MODELS: tuple[type, ...] = (CollaborationActivity, InterventionLifecycleEvent)


class AppendOnlyViolation(PermissionError):
    """Raised when code attempts to change or remove an audit row."""

    def __init__(self, table_name: str, operation: str) -> None:
        super().__init__(AuditMessages.APPEND_ONLY)
        self.table_name = table_name
        self.operation = operation


def _reject(operation: str):
    def listener(mapper, connection, target) -> None:  # noqa: ARG001
        table_name = mapper.local_table.name
        logger.warning("Rejected %s on append-only table %s", operation, table_name)
        raise AppendOnlyViolation(table_name, operation)

    return listener


for _model in APPEND_ONLY_MODELS:
    event.listen(_model, "before_update", _reject("UPDATE"))
    event.listen(_model, "before_delete", _reject("DELETE"))


@event.listens_for(Session, "do_orm_execute")
def _reject_bulk_audit_mutation(orm_execute_state: ORMExecuteState) -> None:
    if not (orm_execute_state.is_update or orm_execute_state.is_delete):
        return
    mapper = orm_execute_state.bind_mapper
    if mapper is None or mapper.class_ not in APPEND_ONLY_MODELS:
        return
    operation = "UPDATE" if orm_execute_state.is_update else "DELETE"
    table_name = mapper.local_table.name
    logger.warning("Rejected bulk %s on append-only table %s", operation, table_name)
    raise AppendOnlyViolation(table_name, operation)
