import os
import tempfile
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

# Ensure tests always use SQLite to avoid requiring Postgres drivers
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_jobmatch.db")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="test_jobmatch_uploads_"))
os.environ.setdefault("EMAIL_USER", "")

from jobmatch.database import Base, get_db
from jobmatch.mailer import Mailer, get_mailer
from jobmatch.main import app
from jobmatch.storage import BlobStore, get_blob_store


class RecordingMailer(Mailer):
    """Collects outgoing mail instead of talking to SMTP."""

    def __init__(self):
        super().__init__(user="")
        self.sent = []

    def send_safe(self, to, subject, html):
        self.sent.append((to, subject))
        return True

    def subjects_to(self, to):
        return [s for t, s in self.sent if t == to]


@pytest.fixture(scope="session")
def test_db_url():
    # Use a temporary SQLite file to persist across tests within a session
    db_fd, db_path = tempfile.mkstemp(prefix="test_jobmatch_", suffix=".db")
    os.close(db_fd)
    url = f"sqlite:///{db_path}"
    yield url
    try:
        os.remove(db_path)
    except FileNotFoundError:
        pass


@pytest.fixture()
def db_session(test_db_url):
    engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    # Create all tables
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
    # Ensure file handles are released on Windows
    engine.dispose()


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def blob_store(tmp_path):
    return BlobStore(tmp_path, "/uploads")


@pytest.fixture()
def client(db_session, mailer, blob_store):
    # Override the dependency to use the test session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------- helpers ----------

def register(client, email, role, password="password123", name=None):
    body = {"email": email, "password": password, "role": role}
    if name:
        body["name"] = name
    return client.post("/api/auth/register", json=body)


def auth_headers(client, email, role, password="password123", name=None):
    r = register(client, email, role, password, name)
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def post_job(client, headers, **overrides):
    body = {"title": "Backend Engineer", "description": "Build APIs", "skills": ["python", "fastapi"], "city": "Hanoi"}
    body.update(overrides)
    r = client.post("/api/employer/jobs", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture()
def employer(client):
    headers = auth_headers(client, "boss@acme.com", "employer", name="Ada Boss")
    r = client.post("/api/employer/profile", json={"company_name": "Acme", "city": "Hanoi"}, headers=headers)
    assert r.status_code == 201, r.text
    return headers


@pytest.fixture()
def seeker(client):
    return auth_headers(client, "jane@example.com", "job_seeker", name="Jane Doe")


@pytest.fixture()
def job(client, employer):
    return post_job(client, employer)
