def register_body(**overrides):
    body = {
        "name": "Asha",
        "email": "asha@ece.edu",
        "mobile_number": "9876543210",
        "semester": "5th",
        "password": "secret123",
        "confirm_password": "secret123",
    }
    body.update(overrides)
    return body


def test_register_validation(client):
    assert client.post("/api/v1/auth/register", json=register_body(confirm_password="other12")).status_code == 422
    assert client.post("/api/v1/auth/register", json=register_body(password="123", confirm_password="123")).status_code == 422
    assert client.post("/api/v1/auth/register", json=register_body(semester="9th")).status_code == 422
    assert client.post("/api/v1/auth/register", json=register_body(email="not-an-email")).status_code == 422


def test_register_twice(client):
    assert client.post("/api/v1/auth/register", json=register_body()).status_code == 200
    r = client.post("/api/v1/auth/register", json=register_body())
    assert r.status_code == 400
    assert "already registered" in r.json()["detail"]


def test_login_me_logout(client):
    client.post("/api/v1/auth/register", json=register_body())
    assert client.post("/api/v1/auth/login", json={"email": "asha@ece.edu", "password": "bad"}).status_code == 401

    r = client.post("/api/v1/auth/login", json={"email": "asha@ece.edu", "password": "secret123"})
    assert r.status_code == 200
    headers = {"Authorization": f"Bearer {r.json()['access_token']}"}

    me = client.get("/api/v1/auth/me", headers=headers).json()
    assert me["email"] == "asha@ece.edu"
    assert me["role"] == "student"
    assert me["semester"] == "5th"

    assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401


def test_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401
    assert client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_admin_login_rejects_students(client, student):
    r = client.post("/api/v1/auth/admin/login", json={"email": "student@ece.edu", "password": "secret123"})
    assert r.status_code == 403


def test_admin_routes_need_admin_role(client, student, admin):
    _, student_headers = student
    _, admin_headers = admin
    assert client.get("/api/v1/notifications/all", headers=student_headers).status_code == 403
    assert client.get("/api/v1/notifications/all", headers=admin_headers).status_code == 200


def test_deactivated_user_is_locked_out(client, student, admin):
    student_id, student_headers = student
    _, admin_headers = admin
    r = client.patch(f"/api/v1/profile/users/{student_id}/toggle", headers=admin_headers)
    assert r.json()["is_active"] is False

    assert client.get("/api/v1/profile/me", headers=student_headers).status_code == 403
    r = client.post("/api/v1/auth/login", json={"email": "student@ece.edu", "password": "secret123"})
    assert r.status_code == 403
