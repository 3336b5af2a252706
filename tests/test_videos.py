import uuid


def test_register_and_login(client):
    res = client.post("/api/users", json={"email": "New@Example.com", "password": "hunter22"})
    assert res.status_code == 201
    assert res.json()["email"] == "new@example.com"

    res = client.post("/api/login", json={"email": "new@example.com", "password": "hunter22"})
    assert res.status_code == 200
    token = res.json()["access_token"]

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "new@example.com"


def test_login_with_wrong_password(client):
    client.post("/api/users", json={"email": "a@example.com", "password": "hunter22"})

    res = client.post("/api/login", json={"email": "a@example.com", "password": "wrong-password"})

    assert res.status_code == 401


def test_duplicate_email_is_rejected(client):
    client.post("/api/users", json={"email": "a@example.com", "password": "hunter22"})

    res = client.post("/api/users", json={"email": "A@example.com", "password": "hunter22"})

    assert res.status_code == 400


def test_create_list_and_get_video(client, owner, auth_headers):
    headers = auth_headers(owner)
    res = client.post("/api/videos", json={"title": "  First clip ", "description": "demo"}, headers=headers)
    assert res.status_code == 201
    created = res.json()
    assert created["title"] == "First clip"
    assert created["user_id"] == owner.id
    assert created["video_url"] is None

    listed = client.get("/api/videos", headers=headers).json()
    assert [v["id"] for v in listed] == [created["id"]]

    got = client.get(f"/api/videos/{created['id']}", headers=headers)
    assert got.status_code == 200
    assert got.json()["description"] == "demo"


def test_get_video_of_another_user(client, video, other_user, auth_headers):
    res = client.get(f"/api/videos/{video.id}", headers=auth_headers(other_user))

    assert res.status_code == 401


def test_get_unknown_video(client, owner, auth_headers):
    res = client.get(f"/api/videos/{uuid.uuid4()}", headers=auth_headers(owner))

    assert res.status_code == 404


def test_videos_require_token(client):
    assert client.get("/api/videos").status_code == 401


def test_invalid_id_is_bad_request_before_token_check(client):
    res = client.get("/api/videos/not-a-uuid")

    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid ID"
