# tests/conftest.py
"""
Each test gets its own SQLite file under tmp_path. The app's session-factory
dependency is pointed at it and requests go through httpx's ASGI transport,
so lifespan (and the sample-data seed) never runs here.
"""
from __future__ import annotations

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from database import get_sessionmaker, init_db
from main import app


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine(tmp_path, anyio_backend):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookstore-test.db'}")
    await init_db(engine, seed=False)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def client(session_factory):
    app.dependency_overrides[get_sessionmaker] = lambda: session_factory
    # unhandled errors should come back as 500 responses, not raise in the test
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_book(**overrides) -> dict:
    book = {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "price": 12.5,
        "isbn": None,
        "genre": "Fantasy",
        "description": "There and back again.",
        "quantity": 3,
    }
    book.update(overrides)
    return book


@pytest.fixture
def book_payload():
    return make_book


@pytest.fixture
def add_book(client):
    async def _add(**overrides) -> dict:
        r = await client.post("/api/books", json=make_book(**overrides))
        assert r.status_code == 201, r.text
        return r.json()["book"]

    return _add
