from datetime import datetime, timezone

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app_logger import get_logger
from config import settings

logger = get_logger("database")

DATABASE_URL = settings.DATABASE_URL
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_async_engine(DATABASE_URL, echo=settings.DB_ECHO, connect_args=_connect_args)
AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()

# Rows the original bookstore shipped with; inserted only into an empty table.
SAMPLE_BOOKS = [
    ("To Kill a Mockingbird", "Harper Lee", 14.99, "978-0-06-112008-4", "Fiction",
     "A gripping tale of racial injustice and childhood innocence.", 5),
    ("1984", "George Orwell", 13.99, "978-0-452-28423-4", "Dystopian Fiction",
     "A dystopian social science fiction novel and cautionary tale.", 3),
    ("Pride and Prejudice", "Jane Austen", 12.99, "978-0-14-143951-8", "Romance",
     "A romantic novel of manners set in Georgian England.", 4),
    ("The Great Gatsby", "F. Scott Fitzgerald", 15.99, "978-0-7432-7356-5", "Fiction",
     "A classic American novel set in the Jazz Age.", 2),
    ("Harry Potter and the Sorcerer's Stone", "J.K. Rowling", 16.99, "978-0-439-70818-8", "Fantasy",
     "The first book in the beloved Harry Potter series.", 10),
]


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite keeps no offset."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_sessionmaker() -> sessionmaker:
    return AsyncSessionLocal


async def get_db(session_factory: sessionmaker = Depends(get_sessionmaker)):
    async with session_factory() as session:
        yield session


async def seed_sample_data(session_factory: sessionmaker) -> int:
    from models import Book

    async with session_factory() as session:
        count = (await session.execute(select(func.count()).select_from(Book))).scalar_one()
        if count:
            return 0
        now = utcnow()
        session.add_all(
            Book(title=title, author=author, price=price, isbn=isbn, genre=genre,
                 description=description, quantity=quantity, date_added=now, date_updated=now)
            for title, author, price, isbn, genre, description, quantity in SAMPLE_BOOKS
        )
        await session.commit()
    logger.info("Sample data inserted (%d books).", len(SAMPLE_BOOKS))
    return len(SAMPLE_BOOKS)


async def init_db(bind: AsyncEngine = engine, seed: bool = settings.SEED_SAMPLE_DATA):
    import models  # noqa: F401  registers Book on Base.metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Books table ready.")
    if seed:
        await seed_sample_data(sessionmaker(bind, class_=AsyncSession, expire_on_commit=False))
