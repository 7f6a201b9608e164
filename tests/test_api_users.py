"""
HTTP tests for registration, login, profile and password reset.
"""

import pytest

from adopt_core.services.users import INVALID_CREDENTIALS, RESET_REQUESTED

from conftest import TEST_PASSWORD, application_form, auth_headers

pytestmark = pytest.mark.integration


class TestRegister:
    """Test POST /users/register."""

    async def test_register(self, api_client):
        response = await api_client.post(
            "/users/register",
            json={"username": "cavyfan", "email": "CavyFan@Example.com", "password": "hunter22"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["token"]
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "cavyfan@example.com"
        assert body["user"]["role"] == "user"
        assert "password_hash" not in body["user"]

        me = await api_client.get(
            "/users/me", headers={"Authorization": f"Bearer {body['token']}"}
        )
        assert me.json()["username"] == "cavyfan"

    async def test_duplicate_email(self, api_client, session, user_factory):
        existing = await user_factory.create(session)
        await session.commit()

        response = await api_client.post(
            "/users/register",
            json={"username": "someone_else", "email": existing.email, "password": "hunter22"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_malformed_body(self, api_client):
        response = await api_client.post("/users/register", json={"username": "x"})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        fields = body["error"]["details"]["validation_errors"]
        assert "password" in fields


class TestLogin:
    """Test POST /users/login."""

    async def test_login(self, api_client, session, user_factory):
        user = await user_factory.create(session)
        await session.commit()

        response = await api_client.post(
            "/users/login", json={"email": user.email, "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(user.id)

    async def test_wrong_password(self, api_client, session, user_factory):
        user = await user_factory.create(session)
        await session.commit()

        response = await api_client.post(
            "/users/login", json={"email": user.email, "password": "not-the-one"}
        )

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": {
                "type": "AuthenticationException",
                "code": "AUTHENTICATION_ERROR",
                "message": INVALID_CREDENTIALS,
            },
        }


class TestProfile:
    """Test /users/me."""

    async def test_me_requires_token(self, api_client):
        response = await api_client.get("/users/me")

        assert response.status_code == 401

    async def test_update_me(self, api_client, session, settings, user_factory):
        user = await user_factory.create(session)
        await session.commit()

        response = await api_client.put(
            "/users/me",
            json={"username": "renamed_user", "profile_info": {"city": "Bath"}},
            headers=auth_headers(user, settings),
        )

        assert response.status_code == 200
        assert response.json()["username"] == "renamed_user"
        assert response.json()["profile_info"] == {"city": "Bath"}

    async def test_my_applications(
        self, api_client, session, settings, user_factory, rescue_factory, pet_factory
    ):
        user = await user_factory.create(session)
        rescue = await rescue_factory.create(session)
        pet = await pet_factory.create(session, rescue.id)
        await session.commit()
        headers = auth_headers(user, settings)

        submitted = await api_client.post(
            "/applications",
            json={"pet_id": str(pet.id), "form_data": application_form()},
            headers=headers,
        )
        assert submitted.status_code == 201

        response = await api_client.get("/users/me/applications", headers=headers)

        assert response.status_code == 200
        assert [a["id"] for a in response.json()["data"]] == [submitted.json()["id"]]


class TestPasswordReset:
    """Test the reset request and confirm endpoints."""

    async def test_reset_round_trip(self, api_client, session, user_factory):
        user = await user_factory.create(session)
        await session.commit()

        requested = await api_client.post(
            "/users/password-reset/request", json={"email": user.email}
        )
        assert requested.status_code == 200
        assert requested.json()["message"] == RESET_REQUESTED
        token = requested.json()["reset_token"]
        assert token

        confirmed = await api_client.post(
            "/users/password-reset/confirm",
            json={"email": user.email, "token": token, "new_password": "fresh-pass"},
        )
        assert confirmed.status_code == 200

        login = await api_client.post(
            "/users/login", json={"email": user.email, "password": "fresh-pass"}
        )
        assert login.status_code == 200

    async def test_unknown_email_gets_same_message(self, api_client):
        response = await api_client.post(
            "/users/password-reset/request", json={"email": "ghost@example.com"}
        )

        assert response.status_code == 200
        assert response.json()["message"] == RESET_REQUESTED
        assert response.json()["reset_token"] is None

    async def test_bad_token(self, api_client, session, user_factory):
        user = await user_factory.create(session)
        await session.commit()

        response = await api_client.post(
            "/users/password-reset/confirm",
            json={"email": user.email, "token": "guess", "new_password": "fresh-pass"},
        )

        assert response.status_code == 400
