"""End-to-end checks through the Flask test client."""


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def _refresh_cookie(response):
    for header in response.headers.getlist("Set-Cookie"):
        if header.startswith("refreshToken="):
            return header
    return None


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "ok"

    def test_root(self, client):
        assert client.get("/").status_code == 200

    def test_auth_routes_are_mounted_under_auth_prefix(self, app):
        rules = {rule.rule for rule in app.url_map.iter_rules()}
        for name in ("registration", "login", "refresh", "logout"):
            assert f"/api/v1/auth/{name}" in rules
            assert f"/api/v1/{name}" not in rules


class TestRegistration:
    def test_registration_returns_session_and_cookie(self, register):
        resp = register()
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["token_type"] == "bearer"
        assert body["expires_in"] == 1800
        assert body["access_token"]
        assert body["refresh_token"]
        assert body["user"]["username"] == "alice"
        assert body["user"]["email"] == "a@x.com"
        assert "password" not in body["user"]

        cookie = _refresh_cookie(resp)
        assert cookie is not None
        assert body["refresh_token"] in cookie
        assert "HttpOnly" in cookie

    def test_email_is_normalised(self, register):
        resp = register(email="  A@X.COM ")
        assert resp.status_code == 201
        assert resp.get_json()["user"]["email"] == "a@x.com"

    def test_duplicate_username_is_400(self, register):
        register()
        resp = register(email="other@x.com")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "BAD_REQUEST"

    def test_username_with_at_sign_is_400(self, register):
        resp = register(username="al@ice")
        assert resp.status_code == 400
        assert "username" in resp.get_json()["details"]

    def test_invalid_input_is_400(self, client):
        resp = client.post("/api/v1/auth/registration", json={"username": "bob", "email": "nope"})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "VALIDATION_ERROR"
        assert "email" in body["details"]
        assert "password" in body["details"]


class TestLogin:
    def test_login_with_username(self, client, register):
        register()
        resp = client.post("/api/v1/auth/login", json={"login": "alice", "password": "p1"})
        assert resp.status_code == 200
        assert resp.get_json()["user"]["username"] == "alice"
        assert _refresh_cookie(resp) is not None

    def test_wrong_password_and_unknown_account_look_the_same(self, client, register):
        register()
        wrong = client.post("/api/v1/auth/login", json={"login": "alice", "password": "wrong"})
        unknown = client.post("/api/v1/auth/login", json={"login": "nobody", "password": "p1"})
        assert wrong.status_code == unknown.status_code == 400
        assert wrong.get_json() == unknown.get_json()
        assert _refresh_cookie(wrong) is None

    def test_missing_fields_is_400(self, client):
        resp = client.post("/api/v1/auth/login", json={})
        assert resp.status_code == 400


class TestRefresh:
    def test_refresh_uses_cookie(self, client, register):
        first = register().get_json()
        resp = client.post("/api/v1/auth/refresh")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["refresh_token"] != first["refresh_token"]
        assert body["user"] == first["user"]

    def test_refresh_accepts_body_token(self, app, register):
        first = register().get_json()
        resp = app.test_client().post("/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]})
        assert resp.status_code == 200

    def test_body_token_wins_over_stale_cookie(self, app, client, register):
        first = register().get_json()
        # rotate through another client so the cookie held by `client` goes stale
        current = app.test_client().post(
            "/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]}
        ).get_json()

        resp = client.post("/api/v1/auth/refresh", json={"refresh_token": current["refresh_token"]})
        assert resp.status_code == 200
        assert resp.get_json()["user"] == first["user"]

    def test_refresh_without_token_is_401(self, app):
        resp = app.test_client().post("/api/v1/auth/refresh")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"

    def test_rotated_out_token_is_401(self, app, client, register):
        first = register().get_json()
        assert client.post("/api/v1/auth/refresh").status_code == 200

        replay = app.test_client().post("/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]})
        assert replay.status_code == 401


class TestLogout:
    def test_logout_clears_cookie_and_stored_token(self, app, client, register):
        first = register().get_json()
        resp = client.post("/api/v1/auth/logout")
        assert resp.status_code == 204
        assert _refresh_cookie(resp) is not None

        again = app.test_client().post("/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]})
        assert again.status_code == 401

    def test_logout_without_session_is_204(self, app):
        assert app.test_client().post("/api/v1/auth/logout").status_code == 204


class TestProtectedRoutes:
    def test_me_returns_identity(self, client, register):
        token = register().get_json()["access_token"]
        resp = client.get("/api/v1/users/me", headers=_bearer(token))
        assert resp.status_code == 200
        assert resp.get_json()["data"]["username"] == "alice"

    def test_me_requires_bearer_token(self, client):
        assert client.get("/api/v1/users/me").status_code == 401
        assert client.get("/api/v1/users/me", headers=_bearer("garbage")).status_code == 401
        assert client.get("/api/v1/users/me", headers={"Authorization": "Token abc"}).status_code == 401

    def test_refresh_token_is_not_a_bearer_token(self, client, register):
        token = register().get_json()["refresh_token"]
        assert client.get("/api/v1/users/me", headers=_bearer(token)).status_code == 401

    def test_access_token_valid_after_rotation(self, client, register):
        token = register().get_json()["access_token"]
        assert client.post("/api/v1/auth/refresh").status_code == 200
        assert client.get("/api/v1/users/me", headers=_bearer(token)).status_code == 200

    def test_list_users_is_paginated(self, client, register):
        token = register().get_json()["access_token"]
        register(username="bob", email="b@x.com")
        resp = client.get("/api/v1/users?limit=1", headers=_bearer(token))
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["meta"] == {"page": 1, "limit": 1, "total": 2}
        assert [u["username"] for u in body["data"]] == ["alice"]
        assert "password_hash" not in body["data"][0]

    def test_list_users_rejects_bad_pagination(self, client, register):
        token = register().get_json()["access_token"]
        resp = client.get("/api/v1/users?page=x", headers=_bearer(token))
        assert resp.status_code == 400


class TestErrors:
    def test_unexpected_error_is_generic_500(self, app, client, monkeypatch):
        def boom(login, password):
            raise RuntimeError("connection string with secret")

        monkeypatch.setattr(app.extensions["auth_service"], "login", boom)
        resp = client.post("/api/v1/auth/login", json={"login": "alice", "password": "p1"})
        assert resp.status_code == 500
        body = resp.get_json()
        assert body["message"] == "An unexpected error occurred"
        assert "secret" not in resp.get_data(as_text=True)

    def test_unknown_route_is_404(self, client):
        resp = client.get("/api/v1/nope")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "NOT_FOUND"
