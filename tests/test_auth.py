"""
Registration, login, token and password reset tests.
"""
from datetime import timedelta

import pytest

from marketplace.core.config import Settings
from marketplace.core.database import utcnow
from marketplace.core.errors import AuthenticationFailed
from marketplace.core.security import (
    TokenPayload,
    create_access_token,
    decode_access_token,
    generate_token,
    hash_password,
    verify_password,
)
from marketplace.models.user import User


REGISTRATION = {
    "email": "Jane@Example.com",
    "username": "jane_doe",
    "password": "Str0ng!Pass",
    "location": "Berlin",
}


def register(client, **overrides):
    return client.post("/api/auth/register", json={**REGISTRATION, **overrides})


class TestSecurityHelpers:
    def test_password_hash_round_trip(self, settings):
        hashed = hash_password("Str0ng!Pass", settings)
        assert hashed != "Str0ng!Pass"
        assert verify_password("Str0ng!Pass", hashed, settings)
        assert not verify_password("wrong", hashed, settings)

    def test_generated_tokens_are_unique_hex(self):
        first, second = generate_token(), generate_token()
        assert first != second
        assert len(first) == 64
        assert all(c in "0123456789abcdef" for c in first)

    def test_access_token_round_trip(self, settings):
        token = create_access_token(TokenPayload("u1", "u1@example.com", "u1"), settings)
        payload = decode_access_token(token, settings)
        assert payload == TokenPayload("u1", "u1@example.com", "u1")

    def test_expired_token(self, settings):
        expired = settings.model_copy(update={"jwt_expire_minutes": -1})
        token = create_access_token(TokenPayload("u1", "e", "n"), expired)
        with pytest.raises(AuthenticationFailed) as exc:
            decode_access_token(token, settings)
        assert exc.value.code == "TOKEN_EXPIRED"

    def test_wrong_secret(self, settings):
        other = Settings(jwt_secret="another-secret")
        token = create_access_token(TokenPayload("u1", "e", "n"), other)
        with pytest.raises(AuthenticationFailed) as exc:
            decode_access_token(token, settings)
        assert exc.value.code == "INVALID_TOKEN"

    def test_wrong_audience(self, settings):
        other = Settings(jwt_secret=settings.jwt_secret, jwt_audience="someone-else")
        token = create_access_token(TokenPayload("u1", "e", "n"), other)
        with pytest.raises(AuthenticationFailed):
            decode_access_token(token, settings)


class TestRegistration:
    def test_register_creates_unverified_user(self, client, db):
        response = register(client)
        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "jane@example.com"
        assert user["username"] == "jane_doe"
        assert user["emailVerified"] is False
        assert "passwordHash" not in user

        stored = db.query(User).filter(User.username == "jane_doe").one()
        assert stored.password_hash != REGISTRATION["password"]
        assert stored.email_verification_token

    def test_duplicate_email(self, client):
        register(client)
        response = register(client, username="someone_else", email="jane@example.com")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "EMAIL_TAKEN"

    def test_duplicate_username(self, client):
        register(client)
        response = register(client, email="other@example.com")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "USERNAME_TAKEN"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("email", "not-an-email"),
            ("username", "ab"),
            ("username", "has space"),
            ("password", "short1!"),
            ("password", "alllowercase1!"),
            ("password", "NoDigits!!"),
            ("password", "NoSpecial123"),
        ],
    )
    def test_invalid_fields(self, client, field, value):
        response = register(client, **{field: value})
        assert response.status_code == 422


class TestEmailVerification:
    def test_verify_then_login(self, client, db):
        register(client)
        token = db.query(User).filter(User.username == "jane_doe").one().email_verification_token

        response = client.get(f"/api/auth/verify-email/{token}")
        assert response.status_code == 200

        response = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "Str0ng!Pass"})
        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["user"]["emailVerified"] is True

        me = client.get("/api/users/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.json()["username"] == "jane_doe"

    def test_verify_twice(self, client, db):
        register(client)
        token = db.query(User).filter(User.username == "jane_doe").one().email_verification_token
        client.get(f"/api/auth/verify-email/{token}")
        # Token is cleared after use
        response = client.get(f"/api/auth/verify-email/{token}")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TOKEN"

    def test_expired_verification_token(self, client, db):
        register(client)
        user = db.query(User).filter(User.username == "jane_doe").one()
        user.email_verification_expires = utcnow() - timedelta(minutes=1)
        db.commit()

        response = client.get(f"/api/auth/verify-email/{user.email_verification_token}")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"

    def test_resend_replaces_token(self, client, db):
        register(client)
        old = db.query(User).filter(User.username == "jane_doe").one().email_verification_token

        response = client.post("/api/auth/resend-verification", json={"email": "jane@example.com"})
        assert response.status_code == 200

        db.expire_all()
        new = db.query(User).filter(User.username == "jane_doe").one().email_verification_token
        assert new and new != old

    def test_resend_for_verified_account(self, client, make_user):
        make_user("verified", verified=True)
        response = client.post("/api/auth/resend-verification", json={"email": "verified@example.com"})
        assert response.status_code == 409


class TestLogin:
    def test_unverified_user_cannot_login(self, client):
        register(client)
        response = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "Str0ng!Pass"})
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "EMAIL_NOT_VERIFIED"

    def test_wrong_password(self, client, make_user):
        make_user("bob")
        response = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "Wr0ng!Pass"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    def test_unknown_email(self, client):
        response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "Sup3r!Secret"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


class TestProtectedRoutes:
    def test_missing_header(self, client):
        response = client.get("/api/users/me")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "NO_TOKEN"

    def test_wrong_scheme(self, client):
        response = client.get("/api/users/me", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN_FORMAT"

    def test_garbage_token(self, client):
        response = client.get("/api/users/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN"

    def test_expired_token(self, client, settings, make_user):
        user = make_user("bob")
        expired = settings.model_copy(update={"jwt_expire_minutes": -1})
        token = create_access_token(TokenPayload(user.id, user.email, user.username), expired)
        response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


class TestPasswordReset:
    def test_reset_flow(self, client, db, make_user):
        user = make_user("bob")
        response = client.post("/api/auth/reset-password", json={"email": "bob@example.com"})
        assert response.status_code == 200

        db.expire_all()
        token = db.get(User, user.id).password_reset_token
        assert token

        response = client.post(f"/api/auth/reset-password/{token}", json={"password": "N3w!Password"})
        assert response.status_code == 200

        response = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "N3w!Password"})
        assert response.status_code == 200

        # Single use
        response = client.post(f"/api/auth/reset-password/{token}", json={"password": "An0ther!Pass"})
        assert response.status_code == 400

    def test_unknown_email_gets_same_answer(self, client):
        response = client.post("/api/auth/reset-password", json={"email": "nobody@example.com"})
        assert response.status_code == 200

    def test_expired_reset_token_is_cleared(self, client, db, make_user):
        user = make_user("bob")
        user.password_reset_token = "a" * 64
        user.password_reset_expires = utcnow() - timedelta(minutes=1)
        db.commit()

        response = client.post(f"/api/auth/reset-password/{'a' * 64}", json={"password": "N3w!Password"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"

        db.expire_all()
        assert db.get(User, user.id).password_reset_token is None
