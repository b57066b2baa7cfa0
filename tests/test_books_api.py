# tests/test_books_api.py — single-record CRUD through the HTTP surface
from datetime import datetime

import pytest

pytestmark = pytest.mark.anyio


async def test_create_then_read_back(client, book_payload):
    payload = book_payload(isbn="978-0-261-10295-4")
    r = await client.post("/api/books", json=payload)
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Book added successfully."
    created = body["book"]
    assert isinstance(created["id"], int)
    assert created["date_added"] == created["date_updated"]

    r = await client.get(f"/api/books/{created['id']}")
    assert r.status_code == 200
    fetched = r.json()
    for field, value in payload.items():
        assert fetched[field] == value
    assert fetched["date_added"] == created["date_added"]


async def test_quantity_defaults_to_one(client, book_payload):
    payload = book_payload()
    del payload["quantity"]
    r = await client.post("/api/books", json=payload)
    assert r.status_code == 201
    assert r.json()["book"]["quantity"] == 1


async def test_get_unknown_book_is_404(client):
    r = await client.get("/api/books/999")
    assert r.status_code == 404
    assert r.json() == {"error": "Book not found."}


async def test_duplicate_isbn_conflicts(client, add_book, book_payload):
    await add_book(isbn="978-0-14-143951-8")
    r = await client.post("/api/books", json=book_payload(title="Other", isbn="978-0-14-143951-8"))
    assert r.status_code == 409
    assert r.json() == {"error": "Book with this ISBN already exists."}

    r = await client.get("/api/books")
    assert r.json()["pagination"]["total"] == 1


async def test_missing_or_blank_isbn_never_conflicts(client, add_book):
    await add_book(isbn=None)
    await add_book(isbn=None)
    await add_book(isbn="")
    await add_book(isbn="   ")

    r = await client.get("/api/books")
    assert r.json()["pagination"]["total"] == 4
    assert all(b["isbn"] is None for b in r.json()["books"])


async def test_update_replaces_fields_and_refreshes_date_updated(client, add_book, book_payload):
    created = await add_book()
    replacement = book_payload(
        title="The Silmarillion", price=20, isbn="978-0-618-39111-3",
        genre="Mythopoeia", description=None, quantity=0,
    )
    r = await client.put(f"/api/books/{created['id']}", json=replacement)
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Book updated successfully."
    updated = body["book"]

    assert updated["id"] == created["id"]
    assert updated["title"] == "The Silmarillion"
    assert updated["price"] == 20
    assert updated["description"] is None
    assert updated["quantity"] == 0
    assert updated["date_added"] == created["date_added"]
    assert datetime.fromisoformat(updated["date_updated"]) > datetime.fromisoformat(created["date_updated"])


async def test_update_unknown_book_is_404(client, book_payload):
    r = await client.put("/api/books/42", json=book_payload())
    assert r.status_code == 404
    assert r.json() == {"error": "Book not found."}


async def test_update_validates_before_lookup(client, book_payload):
    r = await client.put("/api/books/42", json=book_payload(price=-1))
    assert r.status_code == 400
    assert r.json() == {"error": "Price must be a positive number."}


async def test_update_to_another_books_isbn_conflicts(client, add_book, book_payload):
    await add_book(title="First", isbn="111")
    second = await add_book(title="Second", isbn="222")

    r = await client.put(f"/api/books/{second['id']}", json=book_payload(title="Second", isbn="111"))
    assert r.status_code == 409

    # keeping its own isbn is not a conflict
    r = await client.put(f"/api/books/{second['id']}", json=book_payload(title="Second!", isbn="222"))
    assert r.status_code == 200
    assert r.json()["book"]["title"] == "Second!"


async def test_delete_twice(client, add_book):
    created = await add_book()
    r = await client.delete(f"/api/books/{created['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Book deleted successfully."}

    r = await client.delete(f"/api/books/{created['id']}")
    assert r.status_code == 404
    assert r.json() == {"error": "Book not found."}

    r = await client.get(f"/api/books/{created['id']}")
    assert r.status_code == 404


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"title": None}, "Title, author, and price are required fields."),
        ({"author": "   "}, "Title, author, and price are required fields."),
        ({"price": None}, "Title, author, and price are required fields."),
        ({"price": 0}, "Price must be a positive number."),
        ({"price": -3.5}, "Price must be a positive number."),
        ({"price": "12.99"}, "Price must be a positive number."),
        ({"price": True}, "Price must be a positive number."),
        ({"title": "x" * 256}, "Title and author must be less than 255 characters."),
        ({"author": "y" * 300}, "Title and author must be less than 255 characters."),
        ({"price": 10**400}, "Price must be a positive number."),
        ({"title": "x" * 300, "price": None}, "Title, author, and price are required fields."),
        ({"title": "x" * 300, "price": -1}, "Price must be a positive number."),
    ],
)
async def test_create_rejects_invalid_books(client, book_payload, overrides, message):
    r = await client.post("/api/books", json=book_payload(**overrides))
    assert r.status_code == 400
    assert r.json() == {"error": message}

    r = await client.get("/api/books")
    assert r.json()["pagination"]["total"] == 0


async def test_update_rejects_huge_integer_price(client, add_book, book_payload):
    created = await add_book()
    r = await client.put(f"/api/books/{created['id']}", json=book_payload(price=10**400))
    assert r.status_code == 400
    assert r.json() == {"error": "Price must be a positive number."}


async def test_title_at_length_limit_is_accepted(client, book_payload):
    r = await client.post("/api/books", json=book_payload(title="t" * 255))
    assert r.status_code == 201


async def test_malformed_json_body_is_400(client):
    r = await client.post(
        "/api/books", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert r.status_code == 400
    assert "error" in r.json()


async def test_unmatched_route_is_404(client):
    for path in ("/api/nothing-here", "/elsewhere"):
        r = await client.get(path)
        assert r.status_code == 404
        assert r.json() == {"error": "Route not found."}

    r = await client.patch("/api/books")
    assert r.status_code == 404
    assert r.json() == {"error": "Route not found."}
