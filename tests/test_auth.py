"""
Tests for Magic-Link Authentication

Tests the passwordless flow:
- Link request (user creation, token replacement, mail)
- Link verification (single use, mismatch, malformed input, expiry)
- Credential exchange (cookie, invalid/expired credentials)
- End-to-end scenarios
"""

import json
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs, urlparse

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from digiread.models import User, VerificationToken
from digiread.services.security import create_session_token, hash_token

GENERATE_LINK_URL = "/api/v1/auth/generate-link"
VERIFY_URL = "/api/v1/auth/verify"
EXCHANGE_URL = "/api/v1/auth/exchange-token"
PROFILE_URL = "/api/v1/auth/profile"


def link_params(link: str) -> tuple[str, str]:
    """Extract (token, userId) from an emailed verification link."""
    query = parse_qs(urlparse(link).query)
    return query["token"][0], query["userId"][0]


def token_count(db: Session, user_id: int) -> int:
    stmt = select(func.count()).select_from(VerificationToken).where(
        VerificationToken.user_id == user_id
    )
    return db.execute(stmt).scalar()


class TestGenerateLink:
    """Tests for POST /api/v1/auth/generate-link"""

    def test_creates_user_and_sends_link(self, client: TestClient, db_session: Session, mailer):
        response = client.post(GENERATE_LINK_URL, json={"email": "fresh@example.com"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "message": "Please check your email for the verification link."
        }

        user = db_session.execute(
            select(User).where(User.email == "fresh@example.com")
        ).scalar_one()
        assert user.signed_up is False
        assert user.name is None

        assert len(mailer.sent) == 1
        mail = mailer.sent[0]
        assert mail["to"] == "fresh@example.com"
        assert mail["name"] == "fresh"  # local part of the address
        assert mail["link"].startswith("http://testserver/api/v1/auth/verify?")

        token, user_id = link_params(mail["link"])
        assert user_id == str(user.id)
        assert len(token) == 72

    def test_existing_user_gets_named_mail(self, client: TestClient, sample_user: User, mailer):
        response = client.post(GENERATE_LINK_URL, json={"email": sample_user.email})

        assert response.status_code == status.HTTP_200_OK
        assert mailer.sent[0]["name"] == "Jane Reader"

    def test_same_message_for_new_and_existing_users(self, client: TestClient, sample_user: User):
        known = client.post(GENERATE_LINK_URL, json={"email": sample_user.email})
        unknown = client.post(GENERATE_LINK_URL, json={"email": "stranger@example.com"})

        assert known.json() == unknown.json()

    def test_only_digest_is_stored(self, client: TestClient, db_session: Session, mailer):
        client.post(GENERATE_LINK_URL, json={"email": "digest@example.com"})
        token, user_id = link_params(mailer.last_link)

        record = db_session.execute(
            select(VerificationToken).where(VerificationToken.user_id == int(user_id))
        ).scalar_one()
        assert record.token_hash == hash_token(token)
        assert record.token_hash != token

    def test_requesting_twice_leaves_one_token(self, client: TestClient, db_session: Session, mailer):
        client.post(GENERATE_LINK_URL, json={"email": "twice@example.com"})
        client.post(GENERATE_LINK_URL, json={"email": "twice@example.com"})

        _, user_id = link_params(mailer.last_link)
        assert len(mailer.sent) == 2
        assert token_count(db_session, int(user_id)) == 1

        users = db_session.execute(
            select(func.count()).select_from(User).where(User.email == "twice@example.com")
        ).scalar()
        assert users == 1

    def test_invalid_email(self, client: TestClient, mailer):
        response = client.post(GENERATE_LINK_URL, json={"email": "not-an-email"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert mailer.sent == []

    def test_missing_email(self, client: TestClient):
        response = client.post(GENERATE_LINK_URL, json={})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestVerifyLink:
    """Tests for GET /api/v1/auth/verify"""

    def request_link(self, client: TestClient, mailer, email: str = "verify@example.com") -> tuple[str, str]:
        client.post(GENERATE_LINK_URL, json={"email": email})
        return link_params(mailer.last_link)

    def test_verify_returns_json_for_api_clients(self, client: TestClient, db_session: Session, mailer):
        token, user_id = self.request_link(client, mailer)

        response = client.get(VERIFY_URL, params={"token": token, "userId": user_id})

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("application/json")
        data = response.json()
        assert data["message"] == "Verification successful"
        assert data["token"].count(".") == 2
        assert data["profile"]["id"] == int(user_id)
        assert data["profile"]["email"] == "verify@example.com"
        assert data["profile"]["signed_up"] is True
        assert data["redirectUrl"].startswith("http://frontend.test/api/auth/success?")
        assert "redirect_url" not in data

    def test_verify_marks_user_signed_up_and_consumes_token(
        self, client: TestClient, db_session: Session, mailer
    ):
        token, user_id = self.request_link(client, mailer)

        client.get(VERIFY_URL, params={"token": token, "userId": user_id})

        user = db_session.get(User, int(user_id))
        db_session.refresh(user)
        assert user.signed_up is True
        assert token_count(db_session, int(user_id)) == 0

    def test_redirect_url_carries_token_and_profile(self, client: TestClient, mailer):
        token, user_id = self.request_link(client, mailer)

        data = client.get(VERIFY_URL, params={"token": token, "userId": user_id}).json()

        query = parse_qs(urlparse(data["redirectUrl"]).query)
        assert query["token"][0] == data["token"]
        assert json.loads(query["profile"][0]) == data["profile"]

    def test_verify_returns_html_for_browsers(self, client: TestClient, mailer):
        token, user_id = self.request_link(client, mailer)

        response = client.get(
            VERIFY_URL,
            params={"token": token, "userId": user_id},
            headers={"Accept": "text/html,application/xhtml+xml"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/html")
        assert "window.location.href" in response.text
        assert "<noscript>" in response.text
        assert "http://frontend.test/api/auth/success?token=" in response.text

    def test_second_verification_is_rejected(self, client: TestClient, mailer):
        token, user_id = self.request_link(client, mailer)

        first = client.get(VERIFY_URL, params={"token": token, "userId": user_id})
        second = client.get(VERIFY_URL, params={"token": token, "userId": user_id})

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_403_FORBIDDEN
        assert second.json()["detail"] == "Invalid request, token mismatch!"

    def test_wrong_token(self, client: TestClient, mailer):
        _, user_id = self.request_link(client, mailer)

        response = client.get(VERIFY_URL, params={"token": "f" * 72, "userId": user_id})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Invalid request, token mismatch!"

    def test_wrong_token_keeps_the_real_one_usable(self, client: TestClient, mailer):
        token, user_id = self.request_link(client, mailer)

        client.get(VERIFY_URL, params={"token": "0" * 72, "userId": user_id})
        response = client.get(VERIFY_URL, params={"token": token, "userId": user_id})

        assert response.status_code == status.HTTP_200_OK

    def test_nonexistent_user(self, client: TestClient):
        response = client.get(VERIFY_URL, params={"token": "a" * 72, "userId": "999999"})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Invalid request, token mismatch!"

    def test_token_of_another_user(self, client: TestClient, mailer):
        token, _ = self.request_link(client, mailer, "first@example.com")
        _, other_id = self.request_link(client, mailer, "second@example.com")

        response = client.get(VERIFY_URL, params={"token": token, "userId": other_id})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_missing_parameters(self, client: TestClient):
        response = client.get(VERIFY_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Invalid request!"

    def test_missing_user_id(self, client: TestClient):
        response = client.get(VERIFY_URL, params={"token": "a" * 72})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Invalid request!"

    def test_non_numeric_user_id(self, client: TestClient):
        response = client.get(VERIFY_URL, params={"token": "a" * 72, "userId": "abc"})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Invalid request!"

    def test_expired_token(self, client: TestClient, db_session: Session, mailer):
        token, user_id = self.request_link(client, mailer)

        record = db_session.execute(
            select(VerificationToken).where(VerificationToken.user_id == int(user_id))
        ).scalar_one()
        record.expires_at = datetime.now(UTC) - timedelta(minutes=1)
        db_session.commit()

        response = client.get(VERIFY_URL, params={"token": token, "userId": user_id})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_new_request_purges_expired_tokens(self, client: TestClient, db_session: Session, mailer):
        _, stale_id = self.request_link(client, mailer, "stale@example.com")
        record = db_session.execute(
            select(VerificationToken).where(VerificationToken.user_id == int(stale_id))
        ).scalar_one()
        record.expires_at = datetime.now(UTC) - timedelta(hours=1)
        db_session.commit()

        self.request_link(client, mailer, "someone-else@example.com")

        assert token_count(db_session, int(stale_id)) == 0

    def test_token_for_deleted_user(self, client: TestClient, db_session: Session, mailer):
        token, user_id = self.request_link(client, mailer)

        # SQLite does not enforce the foreign key, so the token outlives its user
        user = db_session.get(User, int(user_id))
        db_session.delete(user)
        db_session.commit()

        response = client.get(VERIFY_URL, params={"token": token, "userId": user_id})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "Something went wrong, user not found!"


class TestExchangeToken:
    """Tests for POST /api/v1/auth/exchange-token"""

    def test_exchange_sets_cookie(self, client: TestClient, sample_user: User):
        credential = create_session_token(sample_user.id)

        response = client.post(EXCHANGE_URL, json={"token": credential})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["message"] == "Token exchanged successfully"
        assert data["profile"]["id"] == sample_user.id
        assert data["profile"]["email"] == sample_user.email

        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"authToken={credential}")
        assert "HttpOnly" in cookie
        assert "Path=/" in cookie
        assert "SameSite=strict" in cookie
        assert f"Max-Age={15 * 24 * 60 * 60}" in cookie
        # development: not secure
        assert "Secure" not in cookie

    def test_missing_token(self, client: TestClient):
        response = client.post(EXCHANGE_URL, json={})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Token is required"

    def test_missing_body(self, client: TestClient):
        response = client.post(EXCHANGE_URL)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_non_string_token(self, client: TestClient):
        response = client.post(EXCHANGE_URL, json={"token": 12345})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_garbage_token(self, client: TestClient):
        response = client.post(EXCHANGE_URL, json={"token": "not-a-jwt"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid or expired token"
        assert "set-cookie" not in response.headers

    def test_expired_token(self, client: TestClient, sample_user: User):
        expired = create_session_token(sample_user.id, expires_delta=timedelta(seconds=-10))

        response = client.post(EXCHANGE_URL, json={"token": expired})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid or expired token"

    def test_unknown_user(self, client: TestClient):
        response = client.post(EXCHANGE_URL, json={"token": create_session_token(424242)})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "User not found"


class TestSignInScenarios:
    """End-to-end flows through all three steps."""

    def test_new_user_full_flow(self, client: TestClient, mailer):
        client.post(GENERATE_LINK_URL, json={"email": "journey@example.com"})
        token, user_id = link_params(mailer.last_link)

        verified = client.get(VERIFY_URL, params={"token": token, "userId": user_id}).json()
        assert verified["profile"]["signed_up"] is True

        exchanged = client.post(EXCHANGE_URL, json={"token": verified["token"]})
        assert exchanged.status_code == status.HTTP_200_OK
        assert exchanged.json()["profile"] == verified["profile"]
        assert client.cookies.get("authToken") == verified["token"]

        # The cookie alone now authenticates
        profile = client.get(PROFILE_URL)
        assert profile.status_code == status.HTTP_200_OK
        assert profile.json()["profile"] == verified["profile"]

    def test_superseded_link_is_rejected(self, client: TestClient, mailer):
        client.post(GENERATE_LINK_URL, json={"email": "again@example.com"})
        first_token, user_id = link_params(mailer.last_link)
        client.post(GENERATE_LINK_URL, json={"email": "again@example.com"})
        second_token, _ = link_params(mailer.last_link)

        stale = client.get(VERIFY_URL, params={"token": first_token, "userId": user_id})
        fresh = client.get(VERIFY_URL, params={"token": second_token, "userId": user_id})

        assert stale.status_code == status.HTTP_403_FORBIDDEN
        assert stale.json()["detail"] == "Invalid request, token mismatch!"
        assert fresh.status_code == status.HTTP_200_OK
