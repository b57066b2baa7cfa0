import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_TEXT_LENGTH = 255

REQUIRED_FIELDS_MESSAGE = "Title, author, and price are required fields."
PRICE_MESSAGE = "Price must be a positive number."
LENGTH_MESSAGE = f"Title and author must be less than {MAX_TEXT_LENGTH} characters."


def _blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def _positive_price(value) -> float:
    # bool is an int subclass; strings are rejected rather than coerced
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(PRICE_MESSAGE)
    try:
        price = float(value)
    except OverflowError:
        raise ValueError(PRICE_MESSAGE) from None
    if not math.isfinite(price) or price <= 0:
        raise ValueError(PRICE_MESSAGE)
    return price


class BookBase(BaseModel):
    title: str
    author: str
    price: float
    isbn: Optional[str] = None
    genre: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = Field(default=1, validate_default=True)

    @model_validator(mode="before")
    @classmethod
    def _check_book(cls, data):
        """Required fields first, then price, then lengths; first failure wins."""
        if not isinstance(data, dict):
            return data
        title, author, price = data.get("title"), data.get("author"), data.get("price")
        if _blank(title) or _blank(author) or price is None:
            raise ValueError(REQUIRED_FIELDS_MESSAGE)
        price = _positive_price(price)
        if len(title) > MAX_TEXT_LENGTH or len(author) > MAX_TEXT_LENGTH:
            raise ValueError(LENGTH_MESSAGE)
        return {**data, "price": price}

    @field_validator("isbn", "genre", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value or None

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, value):
        return 1 if value is None else value


class BookCreate(BookBase):
    """Full set of writable fields; used for both POST and PUT."""


class Book(BaseModel):
    id: int
    title: str
    author: str
    price: float
    isbn: Optional[str] = None
    genre: Optional[str] = None
    description: Optional[str] = None
    quantity: int
    date_added: datetime
    date_updated: datetime

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class BookList(BaseModel):
    books: List[Book]
    pagination: Pagination


class BookMessage(BaseModel):
    message: str
    book: Book


class Message(BaseModel):
    message: str


class GenreCount(BaseModel):
    genre: str
    count: int


class Stats(BaseModel):
    totalBooks: int
    totalValue: float
    genres: List[GenreCount]
    recentBooks: List[Book]


class BookExport(BaseModel):
    exported_at: datetime
    total_books: int
    books: List[Book]
