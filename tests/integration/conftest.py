"""PostgreSQL fixtures. Tests here are skipped when no database is reachable."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from goodgrid.config import get_settings
from goodgrid.database import close_db, get_engine, get_session, init_db
from goodgrid.db import models  # noqa: F401
from goodgrid.db.base import Base

TABLES = ["work_history", "user_achievements", "dungeons", "zones", "badges", "user_stats"]


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """A session on a freshly truncated schema."""
    settings = get_settings()
    await init_db(settings.database_url)
    try:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(text(f"TRUNCATE TABLE {', '.join(TABLES)} CASCADE"))  # noqa: S608
    except (OSError, SQLAlchemyError) as e:
        await close_db()
        pytest.skip(f"PostgreSQL not available: {e}")

    async for session in get_session():
        yield session
        break
    await close_db()
