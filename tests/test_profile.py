import os

import config
from services.backend_client import BackendClient, BackendError


def test_get_and_update_profile(client, student):
    _, headers = student
    me = client.get("/api/v1/profile/me", headers=headers).json()
    assert me["college_email"] == "student@ece.edu"
    assert me["semester"] == "5th"

    r = client.put("/api/v1/profile/me", json={"name": "  New Name ", "semester": "6th"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["name"] == "New Name"
    assert r.json()["semester"] == "6th"

    assert client.put("/api/v1/profile/me", json={"semester": "0th"}, headers=headers).status_code == 400


def test_avatar_upload_replaces_previous(client, student):
    user_id, headers = student

    r = client.post("/api/v1/profile/me/avatar", files={"file": ("me.png", b"\x89PNG first", "image/png")}, headers=headers)
    assert r.status_code == 200, r.text
    first_url = r.json()["avatar_url"]
    assert f"/storage/avatars/{user_id}/" in first_url
    first_path = os.path.join(config.STORAGE_DIR, "avatars", first_url.split("/storage/avatars/")[1])
    assert os.path.isfile(first_path)

    r = client.post("/api/v1/profile/me/avatar", files={"file": ("me.jpg", b"\xff\xd8 second", "image/jpeg")}, headers=headers)
    second_url = r.json()["avatar_url"]
    assert second_url != first_url
    assert second_url.endswith(".jpg")
    assert not os.path.exists(first_path)


def test_avatar_rejects_non_images_and_big_files(client, student):
    _, headers = student
    r = client.post("/api/v1/profile/me/avatar", files={"file": ("cv.pdf", b"%PDF", "application/pdf")}, headers=headers)
    assert r.status_code == 400

    big = b"\x89PNG" + b"0" * (2 * 1024 * 1024)
    r = client.post("/api/v1/profile/me/avatar", files={"file": ("me.png", big, "image/png")}, headers=headers)
    assert r.status_code == 400
    assert "2MB" in r.json()["detail"]


def test_admin_user_list(client, student, admin):
    _, admin_headers = admin
    users = client.get("/api/v1/profile/users", headers=admin_headers).json()
    roles = {u["college_email"]: u["role"] for u in users}
    assert roles == {"student@ece.edu": "student", "admin@ece.edu": "admin"}


def test_admin_cannot_deactivate_self(client, admin):
    admin_id, admin_headers = admin
    assert client.patch(f"/api/v1/profile/users/{admin_id}/toggle", headers=admin_headers).status_code == 400
    assert client.patch("/api/v1/profile/users/9999/toggle", headers=admin_headers).status_code == 404


def test_failed_avatar_update_keeps_previous_avatar(client, student, monkeypatch):
    user_id, headers = student
    r = client.post("/api/v1/profile/me/avatar", files={"file": ("me.png", b"\x89PNG first", "image/png")}, headers=headers)
    first_url = r.json()["avatar_url"]
    avatar_dir = os.path.join(config.STORAGE_DIR, "avatars", str(user_id))

    def failing_update(self, table, id, patch):
        raise BackendError("database is down")

    monkeypatch.setattr(BackendClient, "update", failing_update)
    r = client.post("/api/v1/profile/me/avatar", files={"file": ("me.jpg", b"\xff\xd8 second", "image/jpeg")}, headers=headers)
    assert r.status_code == 500
    monkeypatch.undo()

    assert os.listdir(avatar_dir) == [first_url.rsplit("/", 1)[1]]
    assert client.get("/api/v1/profile/me", headers=headers).json()["avatar_url"] == first_url
