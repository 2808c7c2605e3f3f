from jobmatch import models
from conftest import auth_headers, post_job


# ---------- profile ----------

def test_profile_general_summary_skills_interests(client, seeker):
    r = client.patch("/api/js/profile/general", json={"phone": "0123", "gender": "female"}, headers=seeker)
    assert r.status_code == 200, r.text
    assert r.json()["phone"] == "0123"

    assert client.put("/api/js/profile/summary", json={"summary": "Pythonista"}, headers=seeker).json() == {
        "summary": "Pythonista"
    }
    client.put("/api/js/profile/skills", json={"skills": ["python", "sql"]}, headers=seeker)
    client.put("/api/js/profile/interests", json={"desired_locations": ["Hanoi"]}, headers=seeker)
    r = client.put("/api/js/profile/interests", json={"desired_job_titles": ["Engineer"]}, headers=seeker)
    assert r.json()["interests"] == {"desired_locations": ["Hanoi"], "desired_job_titles": ["Engineer"]}

    profile = client.get("/api/js/profile", headers=seeker).json()
    assert profile["general"]["first_name"] == "Jane"
    assert profile["general"]["gender"] == "female"
    assert profile["summary"] == "Pythonista"
    assert profile["skills"] == ["python", "sql"]


def test_profile_section_items(client, seeker):
    body = {"company_name": "Initech", "position": "Dev", "start_date": "2020-01-01T00:00:00"}
    r = client.post("/api/js/profile/experiences", json=body, headers=seeker)
    assert r.status_code == 201, r.text
    item = r.json()
    assert item["id"] and item["position"] == "Dev" and item["is_current"] is False

    r = client.put(f"/api/js/profile/experiences/{item['id']}", json={"position": "Lead"}, headers=seeker)
    assert r.status_code == 200
    assert r.json()["position"] == "Lead"
    assert r.json()["company_name"] == "Initech"

    assert client.get("/api/js/profile", headers=seeker).json()["experiences"] == [r.json()]

    assert client.delete(f"/api/js/profile/experiences/{item['id']}", headers=seeker).status_code == 200
    assert client.delete(f"/api/js/profile/experiences/{item['id']}", headers=seeker).status_code == 404
    assert client.get("/api/js/profile", headers=seeker).json()["experiences"] == []


def test_profile_section_validation(client, seeker):
    r = client.post("/api/js/profile/education", json={"degree": "BSc"}, headers=seeker)
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "school"

    assert client.post("/api/js/profile/hobbies", json={"title": "x"}, headers=seeker).status_code == 400
    assert client.put("/api/js/profile/awards/nope", json={"name": "x"}, headers=seeker).status_code == 404


def test_resume_upload_rename_delete(client, seeker, blob_store):
    files = {"resume": ("cv.pdf", b"%PDF-1.4", "application/pdf")}
    r = client.post("/api/js/resume", files=files, headers=seeker)
    assert r.status_code == 201, r.text
    resume = r.json()
    assert resume["name"] == "cv.pdf"
    assert (blob_store.root / resume["blob_id"]).exists()

    r = client.put(f"/api/js/resume/{resume['id']}", json={"name": "Main CV"}, headers=seeker)
    assert r.json()["name"] == "Main CV"
    assert [x["name"] for x in client.get("/api/js/resume", headers=seeker).json()] == ["Main CV"]

    assert client.delete(f"/api/js/resume/{resume['id']}", headers=seeker).status_code == 200
    assert not (blob_store.root / resume["blob_id"]).exists()
    assert client.get("/api/js/resume", headers=seeker).json() == []


def test_resume_rejects_images_and_oversize(client, seeker, monkeypatch):
    files = {"resume": ("me.png", b"png", "image/png")}
    assert client.post("/api/js/resume", files=files, headers=seeker).status_code == 400

    from jobmatch.config import settings

    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 4)
    files = {"resume": ("cv.pdf", b"%PDF-1.4", "application/pdf")}
    r = client.post("/api/js/resume", files=files, headers=seeker)
    assert r.status_code == 400
    assert r.json()["detail"].startswith("File size too large")


def test_apply_with_uploaded_resume(client, seeker, job):
    files = {"resume": ("cv.pdf", b"%PDF-1.4", "application/pdf")}
    resume = client.post("/api/js/resume", files=files, headers=seeker).json()
    r = client.post(f"/api/js/jobs/{job['id']}/apply", json={"resume_id": resume["id"]}, headers=seeker)
    assert r.status_code == 201, r.text
    assert r.json()["resume_id"] == resume["id"]


def test_avatar_upload(client, seeker):
    files = {"avatar": ("me.jpg", b"jpeg", "image/jpeg")}
    r = client.put("/api/js/profile/avatar", files=files, headers=seeker)
    assert r.status_code == 200, r.text
    assert r.json()["avatar_url"].startswith("/uploads/avatars/")


# ---------- jobs ----------

def test_search_is_public_and_only_lists_open_jobs(client, employer):
    post_job(client, employer, title="Python Developer", job_type="parttime", salary_min=500)
    post_job(client, employer, title="Go Developer", skills=["go"], city="Saigon")
    post_job(client, employer, title="Hidden Python", status="draft")

    r = client.get("/api/js/jobs/search", params={"keyword": "python"})
    assert r.status_code == 200
    assert [j["title"] for j in r.json()["data"]] == ["Python Developer"]

    assert client.get("/api/js/jobs/search", params={"location": "saigon"}).json()["pagination"]["total_items"] == 1
    assert client.get("/api/js/jobs/search", params={"job_type": "parttime"}).json()["pagination"]["total_items"] == 1
    assert client.get("/api/js/jobs/search", params={"salary_min": 100}).json()["pagination"]["total_items"] == 1
    assert client.get("/api/js/jobs/search", params={"limit": 500}).status_code == 400


def test_job_detail_counts_views(client, job):
    assert client.get(f"/api/js/jobs/{job['id']}").json()["total_views"] == 1
    assert client.get(f"/api/js/jobs/{job['id']}").json()["total_views"] == 2
    assert client.get("/api/js/jobs/999").status_code == 404


def test_recommended_jobs_follow_skills(client, employer, seeker):
    post_job(client, employer, title="Go Developer", skills=["go"], city="Saigon")
    post_job(client, employer, title="Rust Developer", skills=["rust"], city="Saigon")
    client.put("/api/js/profile/skills", json={"skills": ["rust"]}, headers=seeker)

    r = client.get("/api/js/jobs/recommended", headers=seeker)
    assert [j["title"] for j in r.json()["data"]] == ["Rust Developer"]


def test_saved_jobs(client, seeker, job):
    r = client.post("/api/js/jobs/saved", json={"job_id": job["id"]}, headers=seeker)
    assert r.status_code == 201, r.text
    saved = r.json()
    assert saved["job"]["title"] == "Backend Engineer"

    assert client.post("/api/js/jobs/saved", json={"job_id": job["id"]}, headers=seeker).status_code == 400
    assert client.post("/api/js/jobs/saved", json={"job_id": 999}, headers=seeker).status_code == 404
    assert client.get("/api/js/jobs/saved", headers=seeker).json()["pagination"]["total_items"] == 1

    assert client.delete(f"/api/js/jobs/saved/{saved['id']}", headers=seeker).status_code == 200
    assert client.delete(f"/api/js/jobs/saved/{saved['id']}", headers=seeker).status_code == 404


def test_my_applications(client, employer, seeker, job):
    closed = post_job(client, employer, title="Second")
    client.post(f"/api/js/jobs/{job['id']}/apply", headers=seeker)
    second = client.post(f"/api/js/jobs/{closed['id']}/apply", headers=seeker).json()
    client.delete(f"/api/js/applications/{second['id']}", headers=seeker)

    page = client.get("/api/js/applications", headers=seeker).json()
    assert page["pagination"]["total_items"] == 2
    withdrawn = client.get("/api/js/applications", params={"status": "withdrawn"}, headers=seeker).json()
    assert [a["job"]["title"] for a in withdrawn["data"]] == ["Second"]

    detail = client.get(f"/api/js/applications/{second['id']}", headers=seeker).json()
    assert detail["job"]["company"]["company_name"] == "Acme"
    other = auth_headers(client, "other@example.com", "job_seeker")
    assert client.get(f"/api/js/applications/{second['id']}", headers=other).status_code == 404


# ---------- companies ----------

def test_follow_and_unfollow_company(client, employer, seeker, job):
    company_id = job["company_id"]

    detail = client.get(f"/api/js/companies/{company_id}").json()
    assert detail["info"]["company_name"] == "Acme"
    assert [j["id"] for j in detail["jobs"]] == [job["id"]]

    assert client.post(f"/api/js/companies/{company_id}/follow", headers=seeker).status_code == 201
    assert client.post(f"/api/js/companies/{company_id}/follow", headers=seeker).status_code == 400
    assert client.get(f"/api/js/companies/{company_id}").json()["info"]["total_followers"] == 1

    following = client.get("/api/js/companies/following", headers=seeker).json()
    assert [f["company"]["id"] for f in following["data"]] == [company_id]

    assert client.delete(f"/api/js/companies/{company_id}/follow", headers=seeker).status_code == 200
    assert client.delete(f"/api/js/companies/{company_id}/follow", headers=seeker).status_code == 404
    assert client.get(f"/api/js/companies/{company_id}").json()["info"]["total_followers"] == 0

    assert client.post("/api/js/companies/999/follow", headers=seeker).status_code == 404


def test_search_companies(client, employer):
    r = client.get("/api/js/companies", params={"name": "acm"})
    assert [c["company_name"] for c in r.json()["data"]] == ["Acme"]
    assert client.get("/api/js/companies", params={"name": "zzz"}).json()["data"] == []


# ---------- notifications ----------

def test_notifications_read_flow(client, employer, seeker, job):
    application = client.post(f"/api/js/jobs/{job['id']}/apply", headers=seeker).json()
    for status in ("reviewing", "shortlisted"):
        client.patch(
            f"/api/employer/applications/{application['id']}/status", json={"status": status}, headers=employer
        )

    inbox = client.get("/api/js/notifications", headers=seeker).json()
    assert inbox["unread_count"] == 2
    first = inbox["data"][0]

    r = client.put(f"/api/js/notifications/{first['id']}/read", headers=seeker)
    assert r.json()["is_read"] is True and r.json()["read_at"]
    assert client.get("/api/js/notifications", headers=seeker).json()["unread_count"] == 1
    unread = client.get("/api/js/notifications", params={"is_read": False}, headers=seeker).json()
    assert len(unread["data"]) == 1

    client.put("/api/js/notifications/read-all", headers=seeker)
    assert client.get("/api/js/notifications", headers=seeker).json()["unread_count"] == 0
    assert client.put("/api/js/notifications/999/read", headers=seeker).status_code == 404


# ---------- job alerts ----------

def test_job_alerts(client, seeker):
    r = client.post("/api/js/alert", json={"name": "Python jobs", "keywords": ["python"]}, headers=seeker)
    assert r.status_code == 201, r.text
    alert = r.json()
    assert alert["is_active"] is True and alert["frequency"] == "daily"

    r = client.put(f"/api/js/alert/{alert['id']}", json={"frequency": "weekly"}, headers=seeker)
    assert r.json()["frequency"] == "weekly"
    assert client.put(f"/api/js/alert/{alert['id']}/toggle", headers=seeker).json()["is_active"] is False
    assert [a["name"] for a in client.get("/api/js/alert", headers=seeker).json()] == ["Python jobs"]

    other = auth_headers(client, "other@example.com", "job_seeker")
    assert client.delete(f"/api/js/alert/{alert['id']}", headers=other).status_code == 404
    assert client.delete(f"/api/js/alert/{alert['id']}", headers=seeker).status_code == 200
    assert client.get("/api/js/alert", headers=seeker).json() == []


# ---------- settings ----------

def test_settings_and_password(client, seeker):
    r = client.get("/api/js/settings", headers=seeker).json()
    assert r == {
        "email": "jane@example.com",
        "email_notifications": True,
        "job_alerts": True,
        "profile_visibility": "public",
    }
    r = client.put("/api/js/settings", json={"job_alerts": False}, headers=seeker)
    assert r.json()["job_alerts"] is False
    assert r.json()["email_notifications"] is True

    r = client.put(
        "/api/js/settings/password", json={"current_password": "password123", "new_password": "changed1"}, headers=seeker
    )
    assert r.status_code == 200
    login = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "changed1"})
    assert login.status_code == 200


def test_delete_account_releases_counters(client, employer, seeker, job):
    client.post(f"/api/js/jobs/{job['id']}/apply", headers=seeker)
    client.post(f"/api/js/companies/{job['company_id']}/follow", headers=seeker)

    r = client.request("DELETE", "/api/js/settings/account", json={"password": "wrong"}, headers=seeker)
    assert r.status_code == 401

    r = client.request("DELETE", "/api/js/settings/account", json={"password": "password123"}, headers=seeker)
    assert r.status_code == 200, r.text

    assert client.get(f"/api/employer/jobs/{job['id']}", headers=employer).json()["total_applications"] == 0
    assert client.get("/api/employer/profile", headers=employer).json()["total_followers"] == 0
    assert client.get("/api/auth/me", headers=seeker).status_code == 401


def test_delete_account_clears_notification_links(client, db_session, employer, seeker, job):
    application = client.post(f"/api/js/jobs/{job['id']}/apply", headers=seeker).json()
    note = db_session.query(models.Notification).filter_by(recipient_id=job["employer_id"]).one()
    assert note.related_application_id == application["id"]

    r = client.request("DELETE", "/api/js/settings/account", json={"password": "password123"}, headers=seeker)
    assert r.status_code == 200, r.text

    db_session.expire_all()
    note = db_session.query(models.Notification).filter_by(recipient_id=job["employer_id"]).one()
    assert note.related_application_id is None
    assert note.related_job_id == job["id"]
