from conftest import register


def login_user(client, email="user@example.com", password="password123"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_register_then_login_and_me(client, mailer):
    # Register
    r = register(client, "User@Example.com", "job_seeker", name="Jane Doe")
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["role"] == "job_seeker"
    assert body["token_type"] == "bearer"
    assert mailer.subjects_to("user@example.com") == ["Welcome to JobMatch!"]

    # Duplicate register is a conflict, whatever the case of the email
    r2 = register(client, "user@example.com", "employer")
    assert r2.status_code == 400
    assert r2.json()["detail"] == "Email already registered"

    # Login
    r3 = login_user(client)
    assert r3.status_code == 200, r3.text
    token = r3.json()["access_token"]
    assert token

    # Access /me
    r4 = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r4.status_code == 200, r4.text
    me = r4.json()
    assert me["email"] == "user@example.com"
    assert me["full_name"] == "Jane Doe"


def test_register_validation_errors_are_flattened(client):
    r = client.post("/api/auth/register", json={"email": "nope", "password": "123", "role": "admin"})
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "Validation failed"
    fields = {e["field"] for e in body["errors"]}
    assert {"email", "password", "role"} <= fields


def test_login_wrong_password(client):
    register(client, "user@example.com", "job_seeker")
    r = login_user(client, password="wrong-password")
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401


def test_token_accepted_from_cookie(client):
    token = register(client, "user@example.com", "job_seeker").json()["access_token"]
    r = client.get("/api/auth/me", headers={"Cookie": f"access_token=Bearer {token}"})
    assert r.status_code == 200


def test_change_password(client):
    token = register(client, "user@example.com", "employer").json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    r = client.put("/api/auth/password", json={"current_password": "bad", "new_password": "newpass123"}, headers=headers)
    assert r.status_code == 401

    r = client.put(
        "/api/auth/password", json={"current_password": "password123", "new_password": "newpass123"}, headers=headers
    )
    assert r.status_code == 200
    assert login_user(client).status_code == 401
    assert login_user(client, password="newpass123").status_code == 200


def test_role_guard(client, employer):
    # employers cannot use seeker routes
    r = client.get("/api/js/applications", headers=employer)
    assert r.status_code == 403
