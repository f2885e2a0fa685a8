import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from hearth.core.config import settings
from hearth.db import base  # noqa: F401  # ensure models are imported for metadata

ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "alembic"

engine = create_async_engine(settings.DATABASE_URL, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


def _get_alembic_config() -> Config:
    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    config.attributes["url_configured"] = True
    config.attributes["configure_logger"] = False
    return config


async def run_migrations() -> None:
    """Upgrade to head. env.py starts its own event loop, so run it in a thread."""
    await asyncio.to_thread(command.upgrade, _get_alembic_config(), "head")

