"""
Health router - reports database reachability and migration state.
"""

import logging
from pathlib import Path
from typing import Optional

from alembic.config import Config
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_ROOT = Path(__file__).resolve().parents[2]


class HealthStatus(BaseModel):
    """Schema returned by the health endpoint."""

    api_ok: bool = True
    db_ok: bool
    migrations_current: bool
    db_revision: Optional[str] = None
    code_revision: Optional[str] = None


def code_revision(root: Path = PROJECT_ROOT) -> Optional[str]:
    """Newest migration shipped with the code, None if it cannot be read."""
    ini_path = root / "alembic.ini"
    if not ini_path.exists():
        return None

    config = Config(str(ini_path))
    config.set_main_option("script_location", str(root / "alembic"))
    try:
        return ScriptDirectory.from_config(config).get_current_head()
    except CommandError as exc:
        logger.warning("Could not read migration scripts: %s", exc)
        return None


async def db_revision(db: AsyncSession) -> Optional[str]:
    """Migration the database is stamped with; raises if the database is down."""
    await db.execute(text("SELECT 1"))
    try:
        async with db.begin_nested():
            result = await db.execute(text("SELECT version_num FROM alembic_version"))
            return result.scalar_one_or_none()
    except SQLAlchemyError:
        # Reachable but never migrated
        return None


@router.get("/health", response_model=HealthStatus)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check the database connection and whether migrations are up to date."""
    db_ok = True
    current = None
    try:
        current = await db_revision(db)
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Health check could not reach the database: %s", exc)
        db_ok = False

    head = code_revision()
    return HealthStatus(
        db_ok=db_ok,
        migrations_current=bool(current and current == head),
        db_revision=current,
        code_revision=head,
    )
