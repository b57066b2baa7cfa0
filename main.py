# main.py — bookstore inventory API
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

import schemas
from app_logger import get_logger, setup_logging
from config import settings
from crud.book import create_book, delete_book, export_books, get_book, list_books, update_book
from database import engine, get_db, get_sessionmaker, init_db
from errors import BookstoreError
from services.book_query import ListParams, total_pages
from services.stats import compute_stats

logger = get_logger("api")

EXPORT_FILENAME = "bookstore-export.json"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()
    logger.info("Bookstore API available at %s/books", settings.API_PREFIX)
    yield
    await engine.dispose()
    logger.info("Database connection closed.")


app = FastAPI(title="Bookstore", lifespan=lifespan)
router = APIRouter(prefix=settings.API_PREFIX, tags=["books"])


# ─────────────────────── ERRORS ───────────────────────
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(BookstoreError)
async def bookstore_error_handler(request: Request, exc: BookstoreError):
    if exc.status_code >= 500:
        return _error(exc.status_code, "Something went wrong!")
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _error(400, "Invalid request.")
    first = errors[0]
    message = str(first.get("msg", "Invalid request."))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    else:
        field = ".".join(str(part) for part in tuple(first.get("loc", ()))[1:])
        if field:
            message = f"{field}: {message}"
    return _error(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # 405 too: a path that exists under another method is still no route here
    if exc.status_code in (404, 405):
        return _error(404, "Route not found.")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Something went wrong!")


# ─────────────────────── ROUTES ───────────────────────
@router.get("/books", response_model=schemas.BookList)
async def list_books_route(
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_LIMIT,
    search: str = "",
    sort_by: str = Query("date_added", alias="sortBy"),
    sort_order: str = Query("DESC", alias="sortOrder"),
    genre: str = "",
    db: AsyncSession = Depends(get_db),
):
    params = ListParams(page=page, limit=limit, search=search,
                        sort_by=sort_by, sort_order=sort_order, genre=genre)
    books, total = await list_books(db, params)
    return schemas.BookList(
        books=[schemas.Book.model_validate(b) for b in books],
        pagination=schemas.Pagination(
            page=page, limit=limit, total=total, totalPages=total_pages(total, limit)
        ),
    )


@router.get("/books/{book_id}", response_model=schemas.Book)
async def get_book_route(book_id: int, db: AsyncSession = Depends(get_db)):
    return schemas.Book.model_validate(await get_book(db, book_id))


@router.post("/books", response_model=schemas.BookMessage, status_code=201)
async def create_book_route(book_data: schemas.BookCreate, db: AsyncSession = Depends(get_db)):
    book = await create_book(db, book_data)
    return schemas.BookMessage(message="Book added successfully.", book=schemas.Book.model_validate(book))


@router.put("/books/{book_id}", response_model=schemas.BookMessage)
async def update_book_route(
    book_id: int, book_data: schemas.BookCreate, db: AsyncSession = Depends(get_db)
):
    book = await update_book(db, book_id, book_data)
    return schemas.BookMessage(message="Book updated successfully.", book=schemas.Book.model_validate(book))


@router.delete("/books/{book_id}", response_model=schemas.Message)
async def delete_book_route(book_id: int, db: AsyncSession = Depends(get_db)):
    await delete_book(db, book_id)
    return schemas.Message(message="Book deleted successfully.")


@router.get("/stats", response_model=schemas.Stats)
async def stats_route(session_factory: sessionmaker = Depends(get_sessionmaker)):
    stats = await compute_stats(session_factory, settings.RECENT_BOOKS_LIMIT)
    stats["recentBooks"] = [schemas.Book.model_validate(b) for b in stats["recentBooks"]]
    return schemas.Stats(**stats)


@router.get("/export")
async def export_route(db: AsyncSession = Depends(get_db)):
    books = await export_books(db)
    payload = schemas.BookExport(
        exported_at=datetime.now(timezone.utc),
        total_books=len(books),
        books=[schemas.Book.model_validate(b) for b in books],
    )
    return JSONResponse(
        content=jsonable_encoder(payload),
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
