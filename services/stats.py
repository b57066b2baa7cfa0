# services/stats.py — dashboard aggregates over the whole books table
from asyncio import gather
from typing import Dict, List

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app_logger import get_logger
from errors import BackendError
from models import Book

logger = get_logger("stats")


async def _run(session_factory: sessionmaker, name: str, stmt):
    # One session per aggregate: an AsyncSession cannot serve concurrent queries.
    try:
        async with session_factory() as session:
            return await session.execute(stmt)
    except SQLAlchemyError as exc:
        logger.exception("Stats query %r failed", name)
        raise BackendError("Could not compute statistics.") from exc


async def total_books(session_factory: sessionmaker) -> int:
    result = await _run(session_factory, "totalBooks", select(func.count()).select_from(Book))
    return result.scalar_one()


async def total_value(session_factory: sessionmaker) -> float:
    stmt = select(func.coalesce(func.sum(Book.price * Book.quantity), 0))
    result = await _run(session_factory, "totalValue", stmt)
    return round(float(result.scalar_one()), 2)


async def genre_counts(session_factory: sessionmaker) -> List[Dict]:
    count = func.count(Book.id).label("count")
    stmt = (
        select(Book.genre, count)
        .where(Book.genre.is_not(None))
        .group_by(Book.genre)
        .order_by(desc(count))
    )
    result = await _run(session_factory, "genres", stmt)
    return [{"genre": genre, "count": n} for genre, n in result.all()]


async def recent_books(session_factory: sessionmaker, limit: int = 5) -> List[Book]:
    stmt = select(Book).order_by(Book.date_added.desc(), Book.id.desc()).limit(limit)
    result = await _run(session_factory, "recentBooks", stmt)
    return list(result.scalars().all())


async def compute_stats(session_factory: sessionmaker, recent_limit: int = 5) -> Dict:
    """Run the four aggregates concurrently and merge them.

    The merge waits for all of them; the first failure propagates and no
    partial result is returned.
    """
    books, value, genres, recent = await gather(
        total_books(session_factory),
        total_value(session_factory),
        genre_counts(session_factory),
        recent_books(session_factory, recent_limit),
    )
    return {
        "totalBooks": books,
        "totalValue": value,
        "genres": genres,
        "recentBooks": recent,
    }
