"""
Tests for Authentication Endpoints

- Registration: POST /api/v1/register
- Login: POST /api/v1/login
- Logout: POST /api/v1/logout

Coverage includes:
- Successful flows
- Validation messages
- Token lifecycle (issue, use, revoke)
"""

import re

from fastapi import status
from sqlalchemy import select

from library_api.models import PersonalAccessToken, User
from library_api.services.security import verify_password

TOKEN_PATTERN = re.compile(r"^\d+\|[0-9a-f]{40}$")


def login(client, email="john@example.com", password="password123"):
    return client.post("/api/v1/login", json={"email": email, "password": password})


class TestRegister:
    """Tests for POST /api/v1/register"""

    def test_register_success(self, client, db_session):
        """Registering John Doe returns the user without any password."""
        response = client.post(
            "/api/v1/register",
            json={
                "name": "John Doe",
                "email": "john@example.com",
                "password": "password123",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        user = response.json()["user"]
        assert user["name"] == "John Doe"
        assert user["email"] == "john@example.com"
        assert "id" in user
        assert "created_at" in user
        # Password should NEVER be in response
        assert "password" not in user
        assert "hashed_password" not in user

        stored = db_session.execute(
            select(User).where(User.email == "john@example.com")
        ).scalar_one()
        assert stored.hashed_password != "password123"
        assert verify_password("password123", stored.hashed_password)

    def test_register_does_not_log_in(self, client, db_session):
        """Registration issues no token."""
        client.post(
            "/api/v1/register",
            json={"name": "John Doe", "email": "john@example.com", "password": "password123"},
        )

        tokens = db_session.execute(select(PersonalAccessToken)).scalars().all()
        assert tokens == []

    def test_register_duplicate_email(self, client, sample_user):
        response = client.post(
            "/api/v1/register",
            json={"name": "Other John", "email": "john@example.com", "password": "password456"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json() == {
            "message": "The email has already been taken.",
            "errors": {"email": ["The email has already been taken."]},
        }

    def test_register_missing_fields(self, client):
        response = client.post("/api/v1/register", json={})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["message"] == "The name field is required. (and 2 more errors)"
        assert body["errors"] == {
            "name": ["The name field is required."],
            "email": ["The email field is required."],
            "password": ["The password field is required."],
        }

    def test_register_invalid_email(self, client):
        response = client.post(
            "/api/v1/register",
            json={"name": "John Doe", "email": "not-an-email", "password": "password123"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["errors"] == {
            "email": ["The email field must be a valid email address."]
        }

    def test_register_short_password(self, client):
        response = client.post(
            "/api/v1/register",
            json={"name": "John Doe", "email": "john@example.com", "password": "short"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["errors"] == {
            "password": ["The password field must be at least 8 characters."]
        }

    def test_register_password_not_trimmed(self, client, db_session):
        """Spaces are part of the password."""
        response = client.post(
            "/api/v1/register",
            json={"name": "John Doe", "email": "john@example.com", "password": "  pass12  "},
        )

        assert response.status_code == status.HTTP_201_CREATED
        stored = db_session.execute(select(User)).scalar_one()
        assert verify_password("  pass12  ", stored.hashed_password)
        assert not verify_password("pass12", stored.hashed_password)


class TestLogin:
    """Tests for POST /api/v1/login"""

    def test_login_success(self, client, sample_user):
        response = login(client)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["user"]["email"] == "john@example.com"
        assert data["user"]["name"] == "John Doe"
        assert TOKEN_PATTERN.match(data["token"])

    def test_login_stores_only_hash(self, client, db_session, sample_user):
        token = login(client).json()["token"]
        secret = token.split("|", 1)[1]

        record = db_session.execute(select(PersonalAccessToken)).scalar_one()
        assert record.token_hash != secret
        assert len(record.token_hash) == 64
        assert record.name == "api-token"
        assert record.user_id == sample_user.id

    def test_login_wrong_password(self, client, sample_user):
        response = login(client, password="wrong-password")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"message": "Invalid credentials"}

    def test_login_unknown_email(self, client, sample_user):
        """Unknown email and wrong password look the same."""
        response = login(client, email="nobody@example.com")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"message": "Invalid credentials"}

    def test_login_missing_fields(self, client):
        response = client.post("/api/v1/login", json={})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert set(response.json()["errors"]) == {"email", "password"}

    def test_login_non_string_password(self, client, sample_user):
        """A number in place of the password is a validation error, not a crash."""
        response = client.post(
            "/api/v1/login",
            json={"email": "john@example.com", "password": 12345678},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["errors"] == {
            "password": ["The password field must be a string."]
        }

    def test_login_twice_gives_two_valid_tokens(self, client, sample_user):
        first = login(client).json()["token"]
        second = login(client).json()["token"]

        assert first != second
        for token in (first, second):
            response = client.post(
                "/api/v1/logout", headers={"Authorization": f"Bearer {token}"}
            )
            assert response.status_code == status.HTTP_200_OK

    def test_token_grants_write_access(self, client, sample_user, book_payload):
        token = login(client).json()["token"]

        response = client.post(
            "/api/v1/books",
            json=book_payload,
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == status.HTTP_201_CREATED


class TestLogout:
    """Tests for POST /api/v1/logout"""

    def test_logout_success(self, client, auth_headers):
        response = client.post("/api/v1/logout", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Logged out"}

    def test_logout_revokes_token(self, client, auth_headers, book_payload):
        """A revoked token cannot be used again, anywhere."""
        client.post("/api/v1/logout", headers=auth_headers)

        response = client.post("/api/v1/logout", headers=auth_headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

        response = client.post("/api/v1/books", json=book_payload, headers=auth_headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_keeps_other_tokens(self, client, sample_user, auth_headers, book_payload):
        other_token = login(client).json()["token"]

        client.post("/api/v1/logout", headers=auth_headers)

        response = client.post(
            "/api/v1/books",
            json=book_payload,
            headers={"Authorization": f"Bearer {other_token}"},
        )
        assert response.status_code == status.HTTP_201_CREATED

    def test_logout_without_token(self, client):
        response = client.post("/api/v1/logout")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"message": "Unauthenticated."}

    def test_logout_with_other_scheme(self, client, auth_token):
        """Only the Bearer scheme is accepted."""
        response = client.post(
            "/api/v1/logout", headers={"Authorization": f"Basic {auth_token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
