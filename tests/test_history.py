"""
Tests for Reading History Endpoints
"""

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from digiread.models import Book, History, User
from digiread.services.security import create_session_token

HISTORY_URL = "/api/v1/history"


def get_auth_header(user: User) -> dict:
    return {"Authorization": f"Bearer {create_session_token(user.id)}"}


def highlight(selection: str, fill: str = "#fde047") -> dict:
    return {"selection": selection, "fill": fill}


class TestUpdateHistory:
    """Tests for POST /api/v1/history"""

    def test_first_update_creates_history(
        self, client: TestClient, db_session: Session, sample_user: User, owned_book: Book
    ):
        response = client.post(
            HISTORY_URL,
            json={
                "book_id": owned_book.id,
                "last_location": "epubcfi(/6/4)",
                "highlights": [highlight("epubcfi(/6/4,/1:0,/1:9)")],
            },
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "History updated successfully"

        history = db_session.query(History).filter_by(reader_id=sample_user.id).one()
        assert history.last_location == "epubcfi(/6/4)"
        assert history.highlights == [highlight("epubcfi(/6/4,/1:0,/1:9)")]

    def test_highlights_are_appended(self, client: TestClient, sample_user: User, owned_book: Book):
        headers = get_auth_header(sample_user)
        client.post(
            HISTORY_URL,
            json={"book_id": owned_book.id, "highlights": [highlight("a")]},
            headers=headers,
        )
        client.post(
            HISTORY_URL,
            json={"book_id": owned_book.id, "last_location": "p2", "highlights": [highlight("b", "#f00")]},
            headers=headers,
        )

        response = client.get(f"{HISTORY_URL}/{owned_book.id}", headers=headers)

        data = response.json()
        assert data["last_location"] == "p2"
        assert data["highlights"] == [highlight("a"), highlight("b", "#f00")]

    def test_remove_highlight(self, client: TestClient, sample_user: User, owned_book: Book):
        headers = get_auth_header(sample_user)
        client.post(
            HISTORY_URL,
            json={"book_id": owned_book.id, "highlights": [highlight("a"), highlight("b")]},
            headers=headers,
        )

        client.post(
            HISTORY_URL,
            json={"book_id": owned_book.id, "highlights": [highlight("a")], "remove": True},
            headers=headers,
        )

        response = client.get(f"{HISTORY_URL}/{owned_book.id}", headers=headers)
        assert response.json()["highlights"] == [highlight("b")]

    def test_missing_location_keeps_previous(self, client: TestClient, sample_user: User, owned_book: Book):
        headers = get_auth_header(sample_user)
        client.post(HISTORY_URL, json={"book_id": owned_book.id, "last_location": "p9"}, headers=headers)
        client.post(HISTORY_URL, json={"book_id": owned_book.id, "highlights": [highlight("x")]}, headers=headers)

        response = client.get(f"{HISTORY_URL}/{owned_book.id}", headers=headers)
        assert response.json()["last_location"] == "p9"

    def test_book_not_purchased(self, client: TestClient, sample_user: User, sample_book: Book):
        response = client.post(
            HISTORY_URL,
            json={"book_id": sample_book.id, "last_location": "p1"},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestGetHistory:
    """Tests for GET /api/v1/history/{book_id}"""

    def test_no_history_yet(self, client: TestClient, sample_user: User, owned_book: Book):
        response = client.get(f"{HISTORY_URL}/{owned_book.id}", headers=get_auth_header(sample_user))

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "book_id": owned_book.id,
            "last_location": None,
            "highlights": [],
        }

    def test_requires_session(self, client: TestClient, owned_book: Book):
        response = client.get(f"{HISTORY_URL}/{owned_book.id}")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
