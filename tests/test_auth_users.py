from futura_backend.extensions import db
from futura_backend.models import User


def _login(client, email, password="secret123"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_login_returns_token_with_role(client):
    resp = _login(client, "  Collection@Example.com ")
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["access_token"]
    assert data["user"]["role"] == "collection"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.get_json()["data"]["email"] == "collection@example.com"
    assert me.get_json()["data"]["last_login"] is not None


def test_login_rejects_bad_password(client):
    resp = _login(client, "admin@example.com", "wrong")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "invalid_credentials"


def test_login_requires_fields(client):
    assert client.post("/api/auth/login", json={"email": "admin@example.com"}).status_code == 400


def test_disabled_account_cannot_log_in(app, client):
    with app.app_context():
        user = User.query.filter_by(role="client").one()
        user.is_active = False
        db.session.commit()
    assert _login(client, "client@example.com").status_code == 403


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401


def test_roles_are_listed(client):
    names = [r["name"] for r in client.get("/api/roles").get_json()["data"]]
    assert names == ["admin", "customer service", "sales representative", "collection", "homeowner", "client"]


def test_admin_manages_users(client, admin_headers):
    created = client.post("/api/users", json={
        "email": "New.Agent@example.com", "password": "pw12345", "role": "Sales Representative",
        "full_name": "New Agent",
    }, headers=admin_headers)
    assert created.status_code == 201
    user = created.get_json()["data"]
    assert user["email"] == "new.agent@example.com"
    assert user["role"] == "sales representative"

    duplicate = client.post("/api/users", json={"email": "new.agent@example.com", "password": "x"},
                            headers=admin_headers)
    assert duplicate.status_code == 409

    bad_role = client.put(f"/api/users/{user['id']}", json={"role": "janitor"}, headers=admin_headers)
    assert bad_role.status_code == 400

    updated = client.put(f"/api/users/{user['id']}", json={"is_active": False}, headers=admin_headers)
    assert updated.get_json()["data"]["is_active"] is False

    sales = client.get("/api/users", query_string={"role": "sales representative"},
                       headers=admin_headers).get_json()["data"]
    assert {u["email"] for u in sales} == {"sales.representative@example.com", "new.agent@example.com"}

    gone = client.delete(f"/api/users/{user['id']}", headers=admin_headers)
    assert gone.status_code == 200
    assert client.delete(f"/api/users/{user['id']}", headers=admin_headers).status_code == 404


def test_users_are_admin_only(client, headers_for):
    assert client.get("/api/users", headers=headers_for("customer service")).status_code == 403


def test_health_and_unknown_route(client):
    assert client.get("/api/health").get_json()["status"] == "ok"
    missing = client.get("/api/nope")
    assert missing.status_code == 404
    assert missing.get_json() == {"success": False, "error": "not_found", "path": "/api/nope"}
