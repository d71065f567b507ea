from fastapi.testclient import TestClient


def test_admin_creates_book(client: TestClient, admin, create_book):
    book = create_book(
        admin["headers"],
        title="  Dune  ",
        author="Frank Herbert",
        isbn="9780441013593",
        image_url="https://covers.example.org/dune.jpg",
    )

    assert book["title"] == "Dune"
    assert book["status"] == "AVAILABLE"
    assert book["owner_id"] == admin["user"]["id"]
    assert book["owner_name"] == "Alice Owner"
    assert book["date_added"]
    assert book["borrower_name"] is None
    assert book["borrower_email"] is None


def test_blank_isbn_is_stored_as_null(admin, create_book):
    book = create_book(admin["headers"], isbn="   ")
    assert book["isbn"] is None


# Solo un ADMIN puede dar de alta libros
def test_user_cannot_create_book(client: TestClient, member):
    resp = client.post(
        "/api/books",
        json={"title": "Mine", "author": "Me"},
        headers=member["headers"],
    )
    assert resp.status_code == 403
    assert resp.json()["message"] == "Only administrators may add books"


def test_create_book_requires_title_and_author(client: TestClient, admin):
    resp = client.post(
        "/api/books",
        json={"title": "   ", "author": "Someone"},
        headers=admin["headers"],
    )
    assert resp.status_code == 400
    assert "title" in resp.json()["message"]


def test_list_books_filters_by_status_and_search(client: TestClient, admin, member, create_book):
    dune = create_book(admin["headers"], title="Dune", author="Frank Herbert", isbn="111")
    create_book(admin["headers"], title="Emma", author="Jane Austen", isbn="222")

    resp = client.post(
        f"/api/books/{dune['id']}/request",
        json={"borrower_name": "Bob Reader", "borrower_email": "bob@mail.com"},
        headers=member["headers"],
    )
    assert resp.status_code == 200, resp.text

    all_books = client.get("/api/books", headers=member["headers"]).json()
    assert [b["title"] for b in all_books] == ["Dune", "Emma"]

    available = client.get("/api/books?status=available", headers=member["headers"]).json()
    assert [b["title"] for b in available] == ["Emma"]

    pending = client.get("/api/books", params={"status": "PENDING"}, headers=member["headers"]).json()
    assert [b["title"] for b in pending] == ["Dune"]

    by_author = client.get("/api/books", params={"q": "austen"}, headers=member["headers"]).json()
    assert [b["title"] for b in by_author] == ["Emma"]

    by_isbn = client.get("/api/books", params={"q": "111"}, headers=member["headers"]).json()
    assert [b["title"] for b in by_isbn] == ["Dune"]

    by_owner = client.get("/api/books", params={"q": "alice"}, headers=member["headers"]).json()
    assert len(by_owner) == 2


def test_list_books_unknown_status(client: TestClient, admin):
    resp = client.get("/api/books?status=LOST", headers=admin["headers"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Unknown status: LOST"


def test_my_books_only_returns_owned(client: TestClient, admin, member, create_book):
    create_book(admin["headers"], title="Dune")

    mine_admin = client.get("/api/books/mine", headers=admin["headers"]).json()
    mine_member = client.get("/api/books/mine", headers=member["headers"]).json()

    assert [b["title"] for b in mine_admin] == ["Dune"]
    assert mine_member == []


def test_get_book_not_found(client: TestClient, admin):
    resp = client.get("/api/books/999", headers=admin["headers"])
    assert resp.status_code == 404
    assert resp.json()["message"] == "Book not found"


def test_owner_updates_book(client: TestClient, admin, create_book):
    book = create_book(admin["headers"])

    resp = client.put(
        f"/api/books/{book['id']}",
        json={"title": "Dune Messiah", "author": "Frank Herbert", "isbn": ""},
        headers=admin["headers"],
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["title"] == "Dune Messiah"
    assert data["isbn"] is None


# Un USER que no es dueño no puede editar ni borrar
def test_non_owner_cannot_update_or_delete(client: TestClient, admin, member, create_book):
    book = create_book(admin["headers"])

    resp = client.put(
        f"/api/books/{book['id']}",
        json={"title": "Hijacked", "author": "X"},
        headers=member["headers"],
    )
    assert resp.status_code == 403
    assert resp.json()["message"] == "You do not manage this book"

    resp = client.delete(f"/api/books/{book['id']}", headers=member["headers"])
    assert resp.status_code == 403


def test_delete_available_book(client: TestClient, admin, create_book):
    book = create_book(admin["headers"])

    resp = client.delete(f"/api/books/{book['id']}", headers=admin["headers"])
    assert resp.status_code == 204

    resp = client.get(f"/api/books/{book['id']}", headers=admin["headers"])
    assert resp.status_code == 404


def test_cannot_delete_pending_or_on_loan_book(client: TestClient, admin, member, create_book):
    book = create_book(admin["headers"])
    client.post(
        f"/api/books/{book['id']}/request",
        json={"borrower_name": "Bob Reader", "borrower_email": "bob@mail.com"},
        headers=member["headers"],
    )

    resp = client.delete(f"/api/books/{book['id']}", headers=admin["headers"])
    assert resp.status_code == 400
    assert "pending requests" in resp.json()["message"]

    client.post(f"/api/books/{book['id']}/approve", headers=admin["headers"])

    resp = client.delete(f"/api/books/{book['id']}", headers=admin["headers"])
    assert resp.status_code == 400
    assert "currently on loan" in resp.json()["message"]

    # El libro sigue existiendo
    resp = client.get(f"/api/books/{book['id']}", headers=admin["headers"])
    assert resp.status_code == 200
    assert resp.json()["status"] == "ON_LOAN"
