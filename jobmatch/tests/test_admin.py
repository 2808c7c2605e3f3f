import pytest

from jobmatch import crud


@pytest.fixture()
def admin(client, db_session):
    crud.create_admin(db_session, "root@jobmatch.com", "rootpass1")
    r = client.post("/api/admin/login", json={"email": "root@jobmatch.com", "password": "rootpass1"})
    assert r.status_code == 200, r.text
    assert r.json()["name"] == "Super Admin"
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def test_admin_login_rejects_bad_password(client, db_session):
    crud.create_admin(db_session, "root@jobmatch.com", "rootpass1")
    r = client.post("/api/admin/login", json={"email": "root@jobmatch.com", "password": "nope"})
    assert r.status_code == 401


def test_tokens_do_not_cross_realms(client, admin, seeker):
    assert client.get("/api/auth/me", headers=admin).status_code == 403
    assert client.get("/api/admin/users", headers=seeker).status_code == 403
    assert client.get("/api/admin/users").status_code == 401


def test_list_and_deactivate_users(client, admin, employer, seeker):
    page = client.get("/api/admin/users", headers=admin).json()
    assert page["pagination"]["total_items"] == 2

    employers = client.get("/api/admin/users", params={"role": "employer"}, headers=admin).json()
    assert [u["email"] for u in employers["data"]] == ["boss@acme.com"]
    assert employers["data"][0]["company"]["company_name"] == "Acme"
    found = client.get("/api/admin/users", params={"search": "jane"}, headers=admin).json()
    assert [u["email"] for u in found["data"]] == ["jane@example.com"]

    jane_id = found["data"][0]["id"]
    r = client.patch(f"/api/admin/users/{jane_id}/status", json={"is_active": False}, headers=admin)
    assert r.status_code == 200
    assert r.json()["is_active"] is False

    assert client.get("/api/auth/me", headers=seeker).status_code == 403
    login = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "password123"})
    assert login.status_code == 403

    assert client.patch("/api/admin/users/999/status", json={"is_active": True}, headers=admin).status_code == 404


def test_delete_employer_removes_company_and_jobs(client, admin, employer, seeker, job):
    client.post(f"/api/js/jobs/{job['id']}/apply", headers=seeker)
    boss = client.get("/api/admin/users", params={"role": "employer"}, headers=admin).json()["data"][0]

    assert client.delete(f"/api/admin/users/{boss['id']}", headers=admin).status_code == 200
    assert client.get(f"/api/js/companies/{job['company_id']}").status_code == 404
    assert client.get(f"/api/js/jobs/{job['id']}").status_code == 404
    assert client.get("/api/js/applications", headers=seeker).json()["data"] == []


def test_verify_company(client, admin, job):
    r = client.patch(f"/api/admin/company/{job['company_id']}/verify", json={"status": "verified"}, headers=admin)
    assert r.status_code == 200, r.text
    assert r.json()["is_verified"] is True
    assert r.json()["verified_at"] is not None

    r = client.patch(f"/api/admin/company/{job['company_id']}/verify", json={"status": "rejected"}, headers=admin)
    assert (r.json()["is_verified"], r.json()["verification_status"]) == (False, "rejected")
    assert client.patch("/api/admin/company/999/verify", json={"status": "verified"}, headers=admin).status_code == 404


def test_admin_deletes_job(client, admin, employer, job):
    assert client.delete(f"/api/admin/jobs/{job['id']}", headers=admin).status_code == 204
    assert client.get("/api/employer/profile", headers=employer).json()["total_jobs"] == 0
    assert client.delete(f"/api/admin/jobs/{job['id']}", headers=admin).status_code == 404


def test_reports_and_stats(client, admin, seeker, job):
    r = client.post(
        "/api/admin/reports",
        json={"target_type": "job", "target_id": job["id"], "reason": "Scam"},
        headers=seeker,
    )
    assert r.status_code == 201, r.text
    report = r.json()
    assert report["status"] == "pending"

    pending = client.get("/api/admin/reports", params={"status": "pending"}, headers=admin).json()
    assert [x["id"] for x in pending["data"]] == [report["id"]]

    stats = client.get("/api/admin/stats", headers=admin).json()
    assert stats["total_users"] == 2
    assert stats["pending_reports"] == 1
    assert stats["total_companies"] == 1

    r = client.patch(
        f"/api/admin/reports/{report['id']}",
        json={"status": "resolved", "action_taken": "Job removed"},
        headers=admin,
    )
    assert r.status_code == 200
    assert r.json()["reviewed_by_id"] is not None
    assert client.get("/api/admin/stats", headers=admin).json()["pending_reports"] == 0
