"""Alembic environment for the Hearth schema."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from logging.config import fileConfig
from pathlib import Path
import sys

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config
from sqlmodel import SQLModel

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from hearth.core.config import settings  # noqa: E402
from hearth.db import base  # noqa: F401,E402  # registers every table and the audit guards

VERSIONS_DIR = Path(__file__).parent / "versions"

config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

# hearth.db.session.run_migrations sets the URL itself and flags it.
if not config.attributes.get("url_configured"):
    config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

target_metadata = SQLModel.metadata


def _highest_sequence(versions_dir: Path) -> int:
    highest = 0
    for path in versions_dir.glob("*.py"):
        date_part, _, rest = path.stem.partition("_")
        sequence = rest[:4]
        if len(date_part) == 8 and date_part.isdigit() and sequence.isdigit():
            highest = max(highest, int(sequence))
    return highest


def _process_revision_directives(context, revision, directives):
    """Name new revisions YYYYMMDD_NNNN with a sequence shared across dates."""
    if not directives:
        return
    date_prefix = datetime.now(timezone.utc).strftime("%Y%m%d")
    directives[0].rev_id = f"{date_prefix}_{_highest_sequence(VERSIONS_DIR) + 1:04d}"


def _configure_options() -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": True,
        "process_revision_directives": _process_revision_directives,
    }


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    # Postgres enum types created in one revision must be committed before
    # a later revision can use them.
    context.configure(
        connection=connection,
        transaction_per_migration=True,
        **_configure_options(),
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
