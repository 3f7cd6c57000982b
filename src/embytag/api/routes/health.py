"""Service status endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from embytag import __version__
from embytag.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check(db: AsyncSession = Depends(get_db)) -> dict[str, str]:
    """
    Report that the API is up and whether the database answers.

    The endpoint itself always returns 200; ``database`` is "unavailable"
    when a trivial query fails.
    """
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = "unavailable"
    return {"status": "ok", "version": __version__, "database": database}
