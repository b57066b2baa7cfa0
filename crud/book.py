# crud/book.py — single-record CRUD plus listing/export reads
from contextlib import asynccontextmanager
from typing import List, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app_logger import get_logger
from database import utcnow
from errors import BackendError, ConflictError, NotFoundError
from models import Book
from schemas import BookCreate
from services.book_query import ListParams, build_list_queries

logger = get_logger("crud.book")

NOT_FOUND_MESSAGE = "Book not found."
DUPLICATE_ISBN_MESSAGE = "Book with this ISBN already exists."


@asynccontextmanager
async def _storage(db: AsyncSession, action: str):
    """Roll back and re-raise SQLAlchemy failures as BackendError."""
    try:
        yield
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Storage failure while trying to %s", action)
        raise BackendError(f"Could not {action}.") from exc


async def _commit_guarding_isbn(db: AsyncSession):
    # The UNIQUE constraint on isbn is the authority; no pre-check query.
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if "isbn" in str(exc.orig).lower():
            raise ConflictError(DUPLICATE_ISBN_MESSAGE) from exc
        raise


async def list_books(db: AsyncSession, params: ListParams) -> Tuple[List[Book], int]:
    count_stmt, data_stmt = build_list_queries(params)
    async with _storage(db, "list books"):
        total = (await db.execute(count_stmt)).scalar_one()
        result = await db.execute(data_stmt)
        return list(result.scalars().all()), total


async def export_books(db: AsyncSession) -> List[Book]:
    async with _storage(db, "export books"):
        result = await db.execute(select(Book).order_by(Book.title, Book.id))
        return list(result.scalars().all())


async def get_book(db: AsyncSession, book_id: int) -> Book:
    async with _storage(db, "load book"):
        result = await db.execute(select(Book).where(Book.id == book_id))
        book = result.scalar_one_or_none()
    if book is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return book


async def create_book(db: AsyncSession, book_data: BookCreate) -> Book:
    now = utcnow()
    new_book = Book(**book_data.model_dump(), date_added=now, date_updated=now)
    async with _storage(db, "add book"):
        db.add(new_book)
        await _commit_guarding_isbn(db)
        await db.refresh(new_book)
    logger.info("Added book id=%s title=%r", new_book.id, new_book.title)
    return new_book


async def update_book(db: AsyncSession, book_id: int, book_data: BookCreate) -> Book:
    """Replace every mutable field of ``book_id`` and refresh date_updated.

    A new isbn that belongs to another record is a ConflictError, caught by
    the same constraint that guards inserts.
    """
    book = await get_book(db, book_id)
    for field, value in book_data.model_dump().items():
        setattr(book, field, value)
    book.date_updated = utcnow()
    async with _storage(db, "update book"):
        await _commit_guarding_isbn(db)
        await db.refresh(book)
    logger.info("Updated book id=%s", book_id)
    return book


async def delete_book(db: AsyncSession, book_id: int) -> None:
    async with _storage(db, "delete book"):
        result = await db.execute(delete(Book).where(Book.id == book_id))
        await db.commit()
    if result.rowcount == 0:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    logger.info("Deleted book id=%s", book_id)
