import pytest
from sqlalchemy import update
from sqlalchemy.orm import sessionmaker
from typer.testing import CliRunner

from jobmatch import crud, models
from jobmatch.scripts import seed_admin as seed_script
from jobmatch.scripts import sync_applications_count as sync_script

runner = CliRunner()


@pytest.fixture()
def script_sessions(monkeypatch, db_session):
    bind = db_session.get_bind()
    factory = sessionmaker(bind=bind, autoflush=False, autocommit=False, future=True)
    monkeypatch.setattr(seed_script, "SessionLocal", factory)
    monkeypatch.setattr(seed_script, "engine", bind)
    monkeypatch.setattr(sync_script, "SessionLocal", factory)
    return factory


def test_seed_admin_is_idempotent(db_session):
    admin, created = seed_script.seed_admin(db_session, "Root@JobMatch.com", "rootpass1")
    assert created is True
    assert admin.email == "root@jobmatch.com"

    again, created = seed_script.seed_admin(db_session, "root@jobmatch.com", "other-pass")
    assert created is False
    assert again.id == admin.id


def test_seed_admin_cli(script_sessions, db_session):
    result = runner.invoke(seed_script.app, ["--email", "ops@jobmatch.com", "--password", "opspass1"])
    assert result.exit_code == 0, result.output
    assert crud.get_admin_by_email(db_session, "ops@jobmatch.com") is not None

    result = runner.invoke(seed_script.app, ["--email", "ops@jobmatch.com", "--password", "opspass1"])
    assert result.exit_code == 0
    assert db_session.query(models.Admin).count() == 1


def test_sync_counts_cli(client, script_sessions, db_session, employer, seeker, job):
    client.post(f"/api/js/jobs/{job['id']}/apply", headers=seeker)
    db_session.execute(update(models.Job).where(models.Job.id == job["id"]).values(total_applications=9))
    db_session.execute(update(models.Company).values(total_jobs=4))
    db_session.commit()

    result = runner.invoke(sync_script.app, ["--jobs-only"])
    assert result.exit_code == 0, result.output
    db_session.expire_all()
    assert db_session.get(models.Job, job["id"]).total_applications == 1
    assert db_session.get(models.Company, job["company_id"]).total_jobs == 4

    result = runner.invoke(sync_script.app, [])
    assert result.exit_code == 0, result.output
    db_session.expire_all()
    assert db_session.get(models.Company, job["company_id"]).total_jobs == 1
