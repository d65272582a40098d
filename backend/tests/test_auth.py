"""
Authentication tests.

Verifies:
- Login / logout / me
- Revoked and deactivated sessions are rejected
- Password strength rules
"""

import pytest

from gadgetdesk.services.auth_service import (
    create_user,
    hash_password,
    verify_password,
    validate_password_strength,
    PasswordValidationError,
)
from gadgetdesk.validation import ConflictError

from conftest import STAFF_PASSWORD, get_auth_token


class TestLogin:

    def test_login_returns_token(self, client, staff):
        resp = client.post("/api/auth/login", json={"username": "rina", "password": STAFF_PASSWORD})

        assert resp.status_code == 200
        body = resp.json
        assert len(body["token"]) == 64
        assert body["user"]["username"] == "rina"
        assert "password_hash" not in body["user"]

    def test_wrong_password(self, client, staff):
        resp = client.post("/api/auth/login", json={"username": "rina", "password": "Wrong123!"})
        assert resp.status_code == 401

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"username": "rina"})
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "body",
        [
            {"username": 123, "password": STAFF_PASSWORD},
            {"username": "rina", "password": ["Password123!"]},
            {"username": {"name": "rina"}, "password": STAFF_PASSWORD},
        ],
    )
    def test_non_string_credentials(self, client, staff, body):
        resp = client.post("/api/auth/login", json=body)
        assert resp.status_code == 400
        assert resp.json["ok"] is False

    def test_inactive_user_cannot_login(self, client, staff, db_session):
        staff.is_active = False
        db_session.commit()

        resp = client.post("/api/auth/login", json={"username": "rina", "password": STAFF_PASSWORD})
        assert resp.status_code == 401


class TestSession:

    def test_me(self, client, auth_headers):
        resp = client.get("/api/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["full_name"] == "Rina Kasir"

    def test_logout_revokes_token(self, client, auth_headers):
        assert client.post("/api/auth/logout", headers=auth_headers).status_code == 200
        assert client.get("/api/auth/me", headers=auth_headers).status_code == 401
        assert client.post("/api/auth/logout", headers=auth_headers).status_code == 401

    def test_deactivated_user_session_rejected(self, client, staff, db_session):
        token = get_auth_token(client, "rina", STAFF_PASSWORD)
        staff.is_active = False
        db_session.commit()

        resp = client.get("/api/units", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


class TestPasswords:

    @pytest.mark.parametrize(
        "password",
        ["Short1!", "alllower123!", "ALLUPPER123!", "NoDigits!!", "NoSpecial123"],
    )
    def test_weak_passwords(self, password):
        with pytest.raises(PasswordValidationError):
            validate_password_strength(password)

    def test_hash_roundtrip(self):
        hashed = hash_password("Password123!", rounds=4)
        assert verify_password("Password123!", hashed)
        assert not verify_password("Password124!", hashed)
        assert not verify_password("Password123!", "not-a-bcrypt-hash")

    def test_duplicate_username(self, staff):
        with pytest.raises(ConflictError):
            create_user("rina", "other@toko.local", STAFF_PASSWORD, rounds=4)

    def test_email_is_lowercased(self, db_session):
        user = create_user("andi", "Andi@Toko.Local", STAFF_PASSWORD, rounds=4)
        assert user.email == "andi@toko.local"
        assert user.display_name == "andi@toko.local"
