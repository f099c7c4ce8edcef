"""Tests for the auth blueprint and API authentication.

Covers:
- JSON login with valid / invalid credentials
- Deactivated account rejected
- Logout
- Session auth and Bearer auth on API routes
"""

from beauty_crm.models.audit import AuditEvent


def _login(client, email, password):
    return client.post("/auth/login", json={"email": email, "password": password})


class TestLogin:

    def test_login_success(self, client, seed_data):
        resp = _login(client, "sarah@beautycrm.test", "reppass123")
        assert resp.status_code == 200
        assert resp.get_json()["user"]["full_name"] == "Sarah Tan"
        assert AuditEvent.query.filter_by(action="user.logged_in").count() == 1

    def test_email_is_case_insensitive(self, client, seed_data):
        resp = _login(client, "  Sarah@BeautyCRM.test ", "reppass123")
        assert resp.status_code == 200

    def test_wrong_password(self, client, seed_data):
        resp = _login(client, "sarah@beautycrm.test", "nope")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid email or password."

    def test_unknown_user(self, client, seed_data):
        assert _login(client, "ghost@beautycrm.test", "reppass123").status_code == 401

    def test_missing_fields(self, client, seed_data):
        assert client.post("/auth/login", json={}).status_code == 400

    def test_deactivated_user(self, client, seed_data):
        resp = _login(client, "david@beautycrm.test", "reppass123")
        assert resp.status_code == 403


class TestApiAuth:

    def test_no_credentials(self, client, seed_data):
        resp = client.get("/api/prospects")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Unauthorized"

    def test_wrong_api_key(self, client, seed_data):
        resp = client.get("/api/prospects", headers={"Authorization": "Bearer wrong"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid API key"

    def test_bearer_token(self, client, seed_data, api_headers):
        assert client.get("/api/prospects", headers=api_headers).status_code == 200

    def test_session_after_login(self, client, seed_data):
        _login(client, "sarah@beautycrm.test", "reppass123")
        assert client.get("/api/merchants").status_code == 200

    def test_logout_ends_session(self, client, seed_data):
        _login(client, "sarah@beautycrm.test", "reppass123")
        assert client.post("/auth/logout").status_code == 200
        assert client.get("/api/merchants").status_code == 401
