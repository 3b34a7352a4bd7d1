"""
Commit helpers shared by the services
A uniqueness or foreign-key rejection at commit time becomes Conflict;
any other store failure becomes UpstreamFailure.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.core.exceptions import Conflict, UpstreamFailure


async def commit_or_raise(
    db: AsyncSession,
    conflict_message: str,
    failure_message: str,
    context: Optional[str] = None,
) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"{context or 'commit'} rejected by constraint: {e.orig}")
        raise Conflict(conflict_message)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"{context or 'commit'} failed: {e}")
        raise UpstreamFailure(failure_message)


def like_pattern(term: str) -> str:
    """Substring pattern for ILIKE with %, _ and the escape char neutralised."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
