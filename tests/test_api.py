import logging

from fastapi.testclient import TestClient

from api import create_app
from config import Settings
from library import Library


def test_get_books(client):
    response = client.get("/books")
    assert response.status_code == 200
    assert response.json() == [
        {"id": "1", "title": "The Great Gatsby", "author": "F. Scott Fitzgerald"},
        {"id": "2", "title": "1984", "author": "George Orwell"},
        {"id": "3", "title": "To Kill a Mockingbird", "author": "Harper Lee"},
    ]


def test_get_book(client):
    response = client.get("/books/2")
    assert response.status_code == 200
    assert response.json() == {"id": "2", "title": "1984", "author": "George Orwell"}


def test_get_book_not_found(client):
    response = client.get("/books/42")
    assert response.status_code == 404
    assert response.json() == {"message": "Book with ID 42 not found."}


def test_add_book(client):
    response = client.post("/books", json={"title": "Dune", "author": "Frank Herbert"})
    assert response.status_code == 201
    assert response.json() == {"id": "4", "title": "Dune", "author": "Frank Herbert"}
    assert len(client.get("/books").json()) == 4


def test_add_book_ignores_client_supplied_id(client):
    response = client.post("/books", json={"id": "100", "title": "Dune", "author": "Frank Herbert"})
    assert response.status_code == 201
    assert response.json()["id"] == "4"


def test_add_book_missing_fields(client):
    for payload in ({"title": "Only Title"}, {"author": "Only Author"}, {}, {"title": "", "author": "X"}):
        response = client.post("/books", json=payload)
        assert response.status_code == 400
        assert response.json() == {"message": "Title and author are required."}
    assert len(client.get("/books").json()) == 3


def test_add_book_without_body(client):
    response = client.post("/books")
    assert response.status_code == 400
    assert response.json() == {"message": "Title and author are required."}


def test_add_book_with_malformed_json(client):
    response = client.post("/books", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid request body."}
    assert len(client.get("/books").json()) == 3


def test_add_book_with_wrong_types(client):
    response = client.post("/books", json={"title": 123, "author": ["a"]})
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid request body."}


def test_update_book(client):
    response = client.put("/books/1", json={"title": "Gatsby", "author": "Fitzgerald"})
    assert response.status_code == 200
    assert response.json() == {"id": "1", "title": "Gatsby", "author": "Fitzgerald"}
    assert client.get("/books/1").json()["title"] == "Gatsby"


def test_update_book_partial(client):
    response = client.put("/books/2", json={"author": "Eric Blair"})
    assert response.status_code == 200
    assert response.json() == {"id": "2", "title": "1984", "author": "Eric Blair"}


def test_update_book_empty_string_keeps_value(client):
    response = client.put("/books/3", json={"title": "", "author": ""})
    assert response.status_code == 200
    assert response.json() == {"id": "3", "title": "To Kill a Mockingbird", "author": "Harper Lee"}


def test_update_book_without_body(client):
    response = client.put("/books/3")
    assert response.status_code == 200
    assert response.json()["title"] == "To Kill a Mockingbird"


def test_update_book_not_found(client):
    response = client.put("/books/99", json={"title": "Nope"})
    assert response.status_code == 404
    assert response.json() == {"message": "Book with ID 99 not found."}
    assert len(client.get("/books").json()) == 3


def test_delete_book(client):
    response = client.delete("/books/1")
    assert response.status_code == 204
    assert response.content == b""
    assert [b["id"] for b in client.get("/books").json()] == ["2", "3"]


def test_delete_book_twice(client):
    assert client.delete("/books/3").status_code == 204
    response = client.delete("/books/3")
    assert response.status_code == 404
    assert response.json() == {"message": "Book with ID 3 not found."}


def test_book_lifecycle_scenario(client):
    created = client.post("/books", json={"title": "Dune", "author": "Frank Herbert"})
    assert created.status_code == 201
    assert created.json()["id"] == "4"

    fetched = client.get("/books/4")
    assert fetched.status_code == 200
    assert fetched.json() == created.json()

    updated = client.put("/books/4", json={"author": "F. Herbert"})
    assert updated.status_code == 200
    assert updated.json() == {"id": "4", "title": "Dune", "author": "F. Herbert"}

    deleted = client.delete("/books/2")
    assert deleted.status_code == 204
    assert client.get("/books/2").status_code == 404


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["total_books"] == 3
    assert body["timestamp"]


def test_apps_do_not_share_state():
    first = TestClient(create_app(library=Library.with_seed_data()))
    second = TestClient(create_app(library=Library.with_seed_data()))

    first.delete("/books/1")
    assert len(first.get("/books").json()) == 2
    assert len(second.get("/books").json()) == 3


def test_seed_books_can_be_disabled():
    app = create_app(settings=Settings(seed_books=False))
    client = TestClient(app)
    assert client.get("/books").json() == []
    assert client.post("/books", json={"title": "First", "author": "Writer"}).json()["id"] == "1"


def test_update_book_with_wrong_types(client):
    response = client.put("/books/1", json={"title": 5})
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid request body."}
    assert client.get("/books/1").json()["title"] == "The Great Gatsby"


def test_add_book_with_array_body(client):
    response = client.post("/books", json=[{"title": "Dune", "author": "Frank Herbert"}])
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid request body."}


class BrokenLibrary(Library):
    def list_books(self):
        raise RuntimeError("store exploded")


def test_unexpected_error_returns_500():
    app = create_app(library=BrokenLibrary.with_seed_data())
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/books")
    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error."}
    # Other routes keep working
    assert client.get("/books/1").status_code == 200


def test_startup_banner_uses_app_settings(caplog):
    caplog.set_level(logging.INFO, logger="api")
    app = create_app(settings=Settings(api_host="0.0.0.0", api_port=4000))

    with TestClient(app):
        pass

    assert "Server is running on http://0.0.0.0:4000" in caplog.text
    assert "DELETE /books/:id" in caplog.text
