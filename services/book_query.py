"""
Listing query for the books endpoint.

Turns untrusted page/search/sort/genre parameters into two statements that
share one predicate list: a COUNT(*) for the pagination total and the page
of rows itself. Sort identifiers are looked up in a fixed whitelist; every
user-supplied value travels as a bound parameter.
"""
import math
from dataclasses import dataclass
from typing import Tuple

from sqlalchemy import Select, asc, desc, func, or_, select

from errors import ValidationError
from models import Book

SORT_FIELDS = {
    "title": Book.title,
    "author": Book.author,
    "price": Book.price,
    "date_added": Book.date_added,
    "genre": Book.genre,
    "quantity": Book.quantity,
}
SORT_ORDERS = {"ASC": asc, "DESC": desc}

INVALID_SORT_MESSAGE = "Invalid sort parameters."
INVALID_PAGE_MESSAGE = "Page and limit must be positive integers."

# Largest value SQLite (and most engines) bind as an INTEGER.
MAX_SQL_INT = 2**63 - 1


@dataclass
class ListParams:
    page: int = 1
    limit: int = 10
    search: str = ""
    sort_by: str = "date_added"
    sort_order: str = "DESC"
    genre: str = ""

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def _filters(params: ListParams) -> list:
    # icontains(autoescape=True) keeps '%' and '_' in user text literal
    clauses = []
    if params.search:
        clauses.append(or_(
            Book.title.icontains(params.search, autoescape=True),
            Book.author.icontains(params.search, autoescape=True),
            Book.isbn.icontains(params.search, autoescape=True),
        ))
    if params.genre:
        clauses.append(Book.genre.icontains(params.genre, autoescape=True))
    return clauses


def build_list_queries(params: ListParams) -> Tuple[Select, Select]:
    """Return ``(count_stmt, data_stmt)`` for ``params``.

    Raises
    ------
    ValidationError
        If the sort field or order is outside the whitelist, or the page
        window is not positive. Nothing is built in that case.
    """
    column = SORT_FIELDS.get(params.sort_by)
    direction = SORT_ORDERS.get((params.sort_order or "").upper())
    if column is None or direction is None:
        raise ValidationError(INVALID_SORT_MESSAGE)
    if params.page < 1 or params.limit < 1:
        raise ValidationError(INVALID_PAGE_MESSAGE)

    clauses = _filters(params)
    count_stmt = select(func.count()).select_from(Book).where(*clauses)
    data_stmt = (
        select(Book)
        .where(*clauses)
        .order_by(direction(column), direction(Book.id))
        .limit(min(params.limit, MAX_SQL_INT))
        .offset(min(params.offset, MAX_SQL_INT))
    )
    return count_stmt, data_stmt
