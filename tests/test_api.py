from conftest import ADMIN, USER1, USER2

NEW_USER = {"username": "charlie", "email": "Charlie@Example.com", "password": "Abcdef1!"}


def test_index_and_status(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "register" in r.json()["endpoints"]["auth"]

    r = client.get("/api/status")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "online"
    assert body["uptime"] >= 0


def test_unknown_route_returns_envelope(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Route not found"}


def test_register_then_profile(client):
    r = client.post("/api/auth/register", json=NEW_USER)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["user"]["username"] == "charlie"
    assert body["user"]["email"] == "charlie@example.com"
    assert body["user"]["role"] == "user"
    assert body["user"]["id"] == 4
    assert "password" not in body["user"]
    assert "passwordHash" not in body["user"]

    r = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200
    assert r.json()["user"]["id"] == 4


def test_register_ignores_requested_role(client):
    r = client.post("/api/auth/register", json=dict(NEW_USER, role="admin"))
    assert r.status_code == 201
    assert r.json()["user"]["role"] == "user"


def test_register_weak_password(client, users):
    r = client.post("/api/auth/register", json=dict(NEW_USER, password="abc"))
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert len(body["errors"]) == 4
    assert {e["field"] for e in body["errors"]} == {"password"}
    assert users.count() == 3


def test_register_list_password_is_rejected(client, users):
    r = client.post("/api/auth/register", json=dict(NEW_USER, password=["Abcdef1!"]))
    assert r.status_code == 400
    assert r.json()["errors"] == [
        {"field": "password", "message": "Password must be a string", "location": "body"}
    ]
    assert users.count() == 3


def test_register_duplicates_conflict(client):
    r = client.post("/api/auth/register", json=dict(NEW_USER, email="ADMIN@example.com"))
    assert r.status_code == 409

    r = client.post("/api/auth/register", json=dict(NEW_USER, username="user1"))
    assert r.status_code == 409
    assert r.json()["success"] is False


def test_login_flow(client):
    r = client.post("/api/auth/login", json={"email": USER1[0], "password": USER1[1]})
    assert r.status_code == 200
    body = r.json()
    assert body["token"]
    assert body["user"]["username"] == "user1"
    assert "password" not in body["user"]


def test_login_is_case_insensitive_on_email(client):
    r = client.post("/api/auth/login", json={"email": "USER1@example.com", "password": USER1[1]})
    assert r.status_code == 200


def test_login_errors(client):
    assert client.post("/api/auth/login", json={"email": USER1[0]}).status_code == 400
    assert client.post("/api/auth/login", json={"email": "", "password": "x"}).status_code == 400
    assert client.post("/api/auth/login", json={"email": {"a": 1}, "password": "x"}).status_code == 400

    r = client.post("/api/auth/login", json={"email": USER1[0], "password": "wrong"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"

    r = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
    assert r.status_code == 401


def test_new_login_retires_old_token(client, login):
    first = login(USER1)
    second = login(USER1)
    assert client.get("/api/auth/profile", headers={"Authorization": f"Bearer {first}"}).status_code == 401
    assert client.get("/api/auth/profile", headers={"Authorization": f"Bearer {second}"}).status_code == 200


def test_profile_requires_token(client):
    r = client.get("/api/auth/profile")
    assert r.status_code == 401
    assert r.json()["message"] == "No token provided"

    r = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token"

    r = client.get("/api/auth/profile", headers={"Authorization": "Basic abc"})
    assert r.status_code == 401


def test_token_of_deleted_user_is_rejected(client, users, login):
    token = login(USER2)
    users.delete(3)
    r = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_list_users_admin_only(client, auth_headers):
    r = client.get("/api/auth/users", headers=auth_headers(ADMIN))
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 3
    assert all("password" not in u and "passwordHash" not in u for u in body["users"])

    r = client.get("/api/auth/users", headers=auth_headers(USER1))
    assert r.status_code == 403
    assert r.json()["success"] is False

    assert client.get("/api/auth/users").status_code == 401
