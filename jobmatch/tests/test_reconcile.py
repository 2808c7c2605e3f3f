from sqlalchemy import update

from jobmatch import models
from jobmatch.reconcile import reconcile, reconcile_company_counters, reconcile_job_applications
from conftest import auth_headers, post_job


def _corrupt(db, model, row_id, **values):
    db.execute(update(model).where(model.id == row_id).values(**values))
    db.commit()


def test_consistent_counters_need_no_corrections(client, db_session, seeker, job):
    client.post(f"/api/js/jobs/{job['id']}/apply", headers=seeker)
    assert reconcile(db_session) == []


def test_job_application_counter_is_recomputed(client, db_session, employer, seeker, job):
    other = auth_headers(client, "other@example.com", "job_seeker")
    client.post(f"/api/js/jobs/{job['id']}/apply", headers=seeker)
    applied = client.post(f"/api/js/jobs/{job['id']}/apply", headers=other).json()
    client.delete(f"/api/js/applications/{applied['id']}", headers=other)

    _corrupt(db_session, models.Job, job["id"], total_applications=7)
    corrections = reconcile_job_applications(db_session)
    db_session.commit()

    assert len(corrections) == 1
    fix = corrections[0]
    assert (fix.model, fix.id, fix.field, fix.old, fix.new) == ("job", job["id"], "total_applications", 7, 1)
    assert db_session.get(models.Job, job["id"]).total_applications == 1


def test_job_without_applications_is_reset_to_zero(client, db_session, employer):
    job = post_job(client, employer)
    _corrupt(db_session, models.Job, job["id"], total_applications=-2)
    corrections = reconcile(db_session)
    assert [(c.label, c.new) for c in corrections] == [("Backend Engineer", 0)]


def test_company_counters_are_recomputed(client, db_session, employer, seeker):
    post_job(client, employer)
    post_job(client, employer, title="Data Engineer")
    company_id = client.get("/api/employer/profile", headers=employer).json()["id"]
    client.post(f"/api/js/companies/{company_id}/follow", headers=seeker)

    _corrupt(db_session, models.Company, company_id, total_jobs=0, total_followers=5)
    corrections = reconcile_company_counters(db_session)
    db_session.commit()

    assert {(c.field, c.old, c.new) for c in corrections} == {("total_jobs", 0, 2), ("total_followers", 5, 1)}
    company = db_session.get(models.Company, company_id)
    assert (company.total_jobs, company.total_followers) == (2, 1)


def test_reconcile_is_idempotent(client, db_session, employer, seeker, job):
    client.post(f"/api/js/jobs/{job['id']}/apply", headers=seeker)
    _corrupt(db_session, models.Job, job["id"], total_applications=3)
    assert len(reconcile(db_session)) == 1
    assert reconcile(db_session) == []
