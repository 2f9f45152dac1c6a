"""
tests/test_auth.py
==================
Password login and the current-user endpoint.
"""
from voyage.auth.utils import get_password_hash, verify_password

LOGIN = "/api/v1/auth/login"


class TestPasswordHashing:

    def test_hash_verifies(self):
        hashed = get_password_hash("Secret123!")
        assert hashed != "Secret123!"
        assert verify_password("Secret123!", hashed)
        assert not verify_password("wrong", hashed)


class TestLogin:

    def test_login_and_me(self, api, make_user, agency):
        user = make_user(agency=agency, email="staff@agency.com", password=get_password_hash("Secret123!"))
        response = api.post(LOGIN, json={"email": "staff@agency.com", "password": "Secret123!"})
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["agency_id"] == agency.id

        me = api.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.json()["id"] == user.id

    def test_wrong_password(self, api, make_user):
        make_user(email="staff@agency.com", password=get_password_hash("Secret123!"))
        response = api.post(LOGIN, json={"email": "staff@agency.com", "password": "nope"})
        assert response.status_code == 401

    def test_invalid_token(self, api):
        response = api.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
