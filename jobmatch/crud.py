from __future__ import annotations
from datetime import datetime, timezone
import uuid

from sqlalchemy import String, cast, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from . import models, security
from .errors import ConflictError, NotFoundError
from .models import ApplicationStatus, JobStatus, Role

PROFILE_SECTIONS = ("experiences", "education", "certificates", "awards", "others")


# ---------- Shared helpers ----------

def increment(db: Session, model, row_id: int, **deltas: int) -> None:
    """Atomically add ``deltas`` to integer columns of one row (UPDATE col = col + n)."""
    values = {name: getattr(model, name) + delta for name, delta in deltas.items()}
    db.execute(
        update(model).where(model.id == row_id).values(values).execution_options(synchronize_session=False)
    )

def paginate(db: Session, stmt, page: int, limit: int) -> tuple[list, int]:
    total = db.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    rows = db.execute(stmt.offset((page - 1) * limit).limit(limit)).unique().scalars().all()
    return list(rows), total

def create_notification(db: Session, recipient_id: int, type: models.NotificationType, title: str, message: str, **related) -> models.Notification:
    n = models.Notification(recipient_id=recipient_id, type=type.value, title=title, message=message, **related)
    db.add(n)
    db.flush()
    return n

def _contains(column, text: str):
    return column.ilike(f"%{text}%")


# ---------- Users ----------

def get_user_by_email(db: Session, email: str) -> models.User | None:
    return db.query(models.User).filter(models.User.email == email.lower()).first()

def get_user(db: Session, user_id: int) -> models.User | None:
    return db.get(models.User, user_id)

def create_user(db: Session, email: str, password: str, role: Role, name: str | None = None) -> models.User:
    parts = (name or "").split()
    user = models.User(
        email=email.lower(),
        hashed_password=security.hash_password(password),
        role=role.value,
        first_name=parts[0] if parts else "",
        last_name=" ".join(parts[1:]),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already registered")
    db.refresh(user)
    return user

def set_password(db: Session, user: models.User | models.Admin, new_password: str) -> None:
    user.hashed_password = security.hash_password(new_password)
    db.commit()

def update_user(db: Session, user: models.User, **fields) -> models.User:
    for key, value in fields.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user

def delete_user(db: Session, user: models.User) -> None:
    """Hard-delete a user with everything they own, keeping counters on other rows in step."""
    active = db.execute(
        select(models.Application.job_id, func.count())
        .where(
            models.Application.job_seeker_id == user.id,
            models.Application.status != ApplicationStatus.WITHDRAWN.value,
        )
        .group_by(models.Application.job_id)
    ).all()
    for job_id, count in active:
        increment(db, models.Job, job_id, total_applications=-count)
    for (company_id,) in db.execute(
        select(models.FollowCompany.company_id).where(models.FollowCompany.job_seeker_id == user.id)
    ).all():
        increment(db, models.Company, company_id, total_followers=-1)

    for model, column in (
        (models.Application, models.Application.job_seeker_id),
        (models.SavedJob, models.SavedJob.job_seeker_id),
        (models.FollowCompany, models.FollowCompany.job_seeker_id),
        (models.JobAlert, models.JobAlert.job_seeker_id),
        (models.Notification, models.Notification.recipient_id),
        (models.Report, models.Report.reporter_id),
    ):
        db.execute(delete(model).where(column == user.id).execution_options(synchronize_session=False))

    # Company -> jobs -> applications cascade through the ORM relationships.
    db.delete(user)
    db.commit()

def list_users(db: Session, page: int, limit: int, role: str | None = None, is_active: bool | None = None, search: str | None = None):
    stmt = select(models.User).options(joinedload(models.User.company)).order_by(models.User.created_at.desc(), models.User.id.desc())
    if role:
        stmt = stmt.where(models.User.role == role)
    if is_active is not None:
        stmt = stmt.where(models.User.is_active == is_active)
    if search:
        stmt = stmt.where(or_(
            _contains(models.User.email, search),
            _contains(models.User.first_name, search),
            _contains(models.User.last_name, search),
        ))
    return paginate(db, stmt, page, limit)


# ---------- Admins ----------

def get_admin_by_email(db: Session, email: str) -> models.Admin | None:
    return db.query(models.Admin).filter(models.Admin.email == email.lower()).first()

def create_admin(db: Session, email: str, password: str, name: str = "Super Admin", is_super: bool = True) -> models.Admin:
    admin = models.Admin(email=email.lower(), hashed_password=security.hash_password(password), name=name, is_super=is_super)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


# ---------- Profile sections ----------

def add_section_item(db: Session, user: models.User, section: str, item: dict) -> dict:
    item = {"id": uuid.uuid4().hex, **item}
    # JSON columns only notice reassignment, never in-place mutation
    setattr(user, section, [*getattr(user, section), item])
    db.commit()
    return item

def update_section_item(db: Session, user: models.User, section: str, item_id: str, changes: dict) -> dict:
    items = list(getattr(user, section))
    for i, existing in enumerate(items):
        if existing.get("id") == item_id:
            items[i] = {**existing, **changes, "id": item_id}
            setattr(user, section, items)
            db.commit()
            return items[i]
    raise NotFoundError("Item not found")

def delete_section_item(db: Session, user: models.User, section: str, item_id: str) -> dict:
    items = list(getattr(user, section))
    kept = [it for it in items if it.get("id") != item_id]
    if len(kept) == len(items):
        raise NotFoundError("Item not found")
    removed = next(it for it in items if it.get("id") == item_id)
    setattr(user, section, kept)
    db.commit()
    return removed


# ---------- Companies ----------

def get_company_for_employer(db: Session, employer_id: int) -> models.Company | None:
    return db.execute(select(models.Company).where(models.Company.employer_id == employer_id)).scalar_one_or_none()

def get_company(db: Session, company_id: int) -> models.Company:
    company = db.get(models.Company, company_id)
    if company is None:
        raise NotFoundError("Company not found")
    return company

def create_company(db: Session, employer: models.User, **fields) -> models.Company:
    if get_company_for_employer(db, employer.id) is not None:
        raise ConflictError("Company profile already exists")
    company = models.Company(employer_id=employer.id, **fields)
    db.add(company)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Company profile already exists")
    db.refresh(company)
    return company

def update_company(db: Session, company: models.Company, **fields) -> models.Company:
    for key, value in fields.items():
        setattr(company, key, value)
    db.commit()
    db.refresh(company)
    return company

def search_companies(db: Session, page: int, limit: int, name: str | None = None, location: str | None = None, industry: str | None = None):
    stmt = select(models.Company).order_by(
        models.Company.total_jobs.desc(), models.Company.total_followers.desc(), models.Company.created_at.desc()
    )
    if name:
        stmt = stmt.where(_contains(models.Company.company_name, name))
    if location:
        stmt = stmt.where(_contains(models.Company.city, location))
    if industry:
        stmt = stmt.where(_contains(models.Company.industry, industry))
    return paginate(db, stmt, page, limit)

def verify_company(db: Session, company_id: int, status: models.VerificationStatus) -> models.Company:
    company = get_company(db, company_id)
    company.verification_status = status.value
    company.is_verified = status == models.VerificationStatus.VERIFIED
    company.verified_at = datetime.now(timezone.utc) if company.is_verified else None
    db.commit()
    db.refresh(company)
    return company

def follow_company(db: Session, job_seeker: models.User, company_id: int) -> models.FollowCompany:
    get_company(db, company_id)
    follow = models.FollowCompany(job_seeker_id=job_seeker.id, company_id=company_id)
    db.add(follow)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Already following this company")
    increment(db, models.Company, company_id, total_followers=1)
    db.commit()
    db.refresh(follow)
    return follow

def unfollow_company(db: Session, job_seeker: models.User, company_id: int) -> None:
    deleted = db.execute(
        delete(models.FollowCompany)
        .where(models.FollowCompany.job_seeker_id == job_seeker.id, models.FollowCompany.company_id == company_id)
        .execution_options(synchronize_session=False)
    ).rowcount
    if not deleted:
        raise NotFoundError("Not following this company")
    increment(db, models.Company, company_id, total_followers=-1)
    db.commit()

def list_followed_companies(db: Session, job_seeker: models.User, page: int, limit: int):
    stmt = (
        select(models.FollowCompany)
        .options(joinedload(models.FollowCompany.company))
        .where(models.FollowCompany.job_seeker_id == job_seeker.id)
        .order_by(models.FollowCompany.followed_at.desc(), models.FollowCompany.id.desc())
    )
    return paginate(db, stmt, page, limit)


# ---------- Jobs ----------

def create_job(db: Session, employer: models.User, **fields) -> models.Job:
    company = get_company_for_employer(db, employer.id)
    if company is None:
        raise ConflictError("Please create company profile before posting jobs")
    job = models.Job(employer_id=employer.id, company_id=company.id, **fields)
    db.add(job)
    db.flush()
    increment(db, models.Company, company.id, total_jobs=1)
    db.commit()
    db.refresh(job)
    return job

def get_employer_job(db: Session, employer_id: int, job_id: int) -> models.Job:
    job = db.execute(
        select(models.Job).where(models.Job.id == job_id, models.Job.employer_id == employer_id)
    ).scalar_one_or_none()
    if job is None:
        raise NotFoundError("Job not found")
    return job

def list_employer_jobs(db: Session, employer_id: int, page: int, limit: int, status: str | None = None):
    stmt = (
        select(models.Job)
        .options(joinedload(models.Job.company))
        .where(models.Job.employer_id == employer_id)
        .order_by(models.Job.created_at.desc(), models.Job.id.desc())
    )
    if status:
        stmt = stmt.where(models.Job.status == status)
    return paginate(db, stmt, page, limit)

def update_job(db: Session, job: models.Job, **fields) -> models.Job:
    for key, value in fields.items():
        setattr(job, key, value)
    db.commit()
    db.refresh(job)
    return job

def delete_job(db: Session, job: models.Job) -> None:
    """Delete a job with its applications and bookmarks; the company loses one job."""
    company_id = job.company_id
    db.delete(job)
    db.flush()
    increment(db, models.Company, company_id, total_jobs=-1)
    db.commit()

def get_job_detail(db: Session, job_id: int) -> models.Job:
    """Public job view. Counts the view."""
    job = db.get(models.Job, job_id)
    if job is None:
        raise NotFoundError("Job not found")
    increment(db, models.Job, job_id, total_views=1)
    db.commit()
    db.refresh(job)
    return job

def search_jobs(
    db: Session,
    page: int,
    limit: int,
    keyword: str | None = None,
    location: str | None = None,
    job_type: str | None = None,
    salary_min: int | None = None,
    category: str | None = None,
    experience_level: str | None = None,
):
    stmt = (
        select(models.Job)
        .options(joinedload(models.Job.company))
        .where(models.Job.status == JobStatus.OPEN.value)
        .order_by(models.Job.created_at.desc(), models.Job.id.desc())
    )
    if keyword:
        stmt = stmt.where(or_(
            _contains(models.Job.title, keyword),
            _contains(models.Job.description, keyword),
            _contains(cast(models.Job.skills, String), keyword),
        ))
    if location:
        stmt = stmt.where(_contains(models.Job.city, location))
    if job_type:
        stmt = stmt.where(models.Job.job_type == job_type)
    if salary_min is not None:
        stmt = stmt.where(models.Job.salary_min >= salary_min)
    if category:
        stmt = stmt.where(models.Job.category == category)
    if experience_level:
        stmt = stmt.where(models.Job.experience_level == experience_level)
    return paginate(db, stmt, page, limit)

def recommended_jobs(db: Session, user: models.User, page: int, limit: int):
    """Open jobs matching any of the seeker's skills, desired titles or desired locations."""
    interests = user.interests or {}
    conditions = [_contains(cast(models.Job.skills, String), s) for s in user.skills or []]
    conditions += [_contains(models.Job.title, t) for t in interests.get("desired_job_titles") or []]
    conditions += [_contains(models.Job.city, loc) for loc in interests.get("desired_locations") or []]

    stmt = (
        select(models.Job)
        .options(joinedload(models.Job.company))
        .where(models.Job.status == JobStatus.OPEN.value)
        .order_by(models.Job.created_at.desc(), models.Job.id.desc())
    )
    if conditions:
        stmt = stmt.where(or_(*conditions))
    return paginate(db, stmt, page, limit)

def open_jobs_for_company(db: Session, company_id: int, limit: int = 10) -> list[models.Job]:
    return list(db.execute(
        select(models.Job)
        .where(models.Job.company_id == company_id, models.Job.status == JobStatus.OPEN.value)
        .order_by(models.Job.created_at.desc(), models.Job.id.desc())
        .limit(limit)
    ).scalars())


# ---------- Applications (reads; writes live in lifecycle.py) ----------

def list_job_applicants(db: Session, employer_id: int, job_id: int, page: int, limit: int, status: str | None = None):
    get_employer_job(db, employer_id, job_id)
    stmt = (
        select(models.Application)
        .options(joinedload(models.Application.job_seeker), joinedload(models.Application.job))
        .where(models.Application.job_id == job_id)
        .order_by(models.Application.applied_at.desc(), models.Application.id.desc())
    )
    if status:
        stmt = stmt.where(models.Application.status == status)
    return paginate(db, stmt, page, limit)

def list_seeker_applications(db: Session, job_seeker_id: int, page: int, limit: int, status: str | None = None):
    stmt = (
        select(models.Application)
        .options(joinedload(models.Application.job).joinedload(models.Job.company))
        .where(models.Application.job_seeker_id == job_seeker_id)
        .order_by(models.Application.applied_at.desc(), models.Application.id.desc())
    )
    if status:
        stmt = stmt.where(models.Application.status == status)
    return paginate(db, stmt, page, limit)

def get_seeker_application(db: Session, job_seeker_id: int, application_id: int) -> models.Application:
    application = db.execute(
        select(models.Application)
        .options(joinedload(models.Application.job).joinedload(models.Job.company))
        .where(models.Application.id == application_id, models.Application.job_seeker_id == job_seeker_id)
    ).scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application not found")
    return application

def employer_stats(db: Session, employer_id: int) -> dict:
    def count(model, *where):
        return db.execute(select(func.count()).select_from(model).where(*where)).scalar_one()

    return {
        "total_jobs": count(models.Job, models.Job.employer_id == employer_id),
        "active_jobs": count(models.Job, models.Job.employer_id == employer_id, models.Job.status == JobStatus.OPEN.value),
        "total_applications": count(models.Application, models.Application.employer_id == employer_id),
        "pending_applications": count(
            models.Application,
            models.Application.employer_id == employer_id,
            models.Application.status == ApplicationStatus.PENDING.value,
        ),
    }


# ---------- Saved jobs ----------

def save_job(db: Session, job_seeker: models.User, job_id: int) -> models.SavedJob:
    if db.get(models.Job, job_id) is None:
        raise NotFoundError("Job not found")
    saved = models.SavedJob(job_seeker_id=job_seeker.id, job_id=job_id)
    db.add(saved)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Job already saved")
    db.refresh(saved)
    return saved

def list_saved_jobs(db: Session, job_seeker: models.User, page: int, limit: int):
    stmt = (
        select(models.SavedJob)
        .options(joinedload(models.SavedJob.job).joinedload(models.Job.company))
        .where(models.SavedJob.job_seeker_id == job_seeker.id)
        .order_by(models.SavedJob.saved_at.desc(), models.SavedJob.id.desc())
    )
    return paginate(db, stmt, page, limit)

def unsave_job(db: Session, job_seeker: models.User, saved_id: int) -> None:
    deleted = db.execute(
        delete(models.SavedJob)
        .where(models.SavedJob.id == saved_id, models.SavedJob.job_seeker_id == job_seeker.id)
        .execution_options(synchronize_session=False)
    ).rowcount
    if not deleted:
        raise NotFoundError("Saved job not found")
    db.commit()


# ---------- Notifications ----------

def list_notifications(db: Session, recipient_id: int, page: int, limit: int, is_read: bool | None = None):
    stmt = (
        select(models.Notification)
        .where(models.Notification.recipient_id == recipient_id)
        .order_by(models.Notification.created_at.desc(), models.Notification.id.desc())
    )
    if is_read is not None:
        stmt = stmt.where(models.Notification.is_read == is_read)
    return paginate(db, stmt, page, limit)

def unread_count(db: Session, recipient_id: int) -> int:
    return db.execute(
        select(func.count()).select_from(models.Notification).where(
            models.Notification.recipient_id == recipient_id, models.Notification.is_read.is_(False)
        )
    ).scalar_one()

def mark_notification_read(db: Session, recipient_id: int, notification_id: int) -> models.Notification:
    n = db.execute(
        select(models.Notification).where(
            models.Notification.id == notification_id, models.Notification.recipient_id == recipient_id
        )
    ).scalar_one_or_none()
    if n is None:
        raise NotFoundError("Notification not found")
    n.is_read = True
    n.read_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(n)
    return n

def mark_all_notifications_read(db: Session, recipient_id: int) -> int:
    updated = db.execute(
        update(models.Notification)
        .where(models.Notification.recipient_id == recipient_id, models.Notification.is_read.is_(False))
        .values(is_read=True, read_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    ).rowcount
    db.commit()
    return updated


# ---------- Job alerts ----------

def create_job_alert(db: Session, job_seeker: models.User, **fields) -> models.JobAlert:
    alert = models.JobAlert(job_seeker_id=job_seeker.id, **fields)
    db.add(alert)
    db.commit()
    db.refresh(alert)
    return alert

def list_job_alerts(db: Session, job_seeker: models.User) -> list[models.JobAlert]:
    return list(db.execute(
        select(models.JobAlert)
        .where(models.JobAlert.job_seeker_id == job_seeker.id)
        .order_by(models.JobAlert.created_at.desc(), models.JobAlert.id.desc())
    ).scalars())

def get_job_alert(db: Session, job_seeker: models.User, alert_id: int) -> models.JobAlert:
    alert = db.execute(
        select(models.JobAlert).where(models.JobAlert.id == alert_id, models.JobAlert.job_seeker_id == job_seeker.id)
    ).scalar_one_or_none()
    if alert is None:
        raise NotFoundError("Job alert not found")
    return alert

def update_job_alert(db: Session, alert: models.JobAlert, **fields) -> models.JobAlert:
    for key, value in fields.items():
        setattr(alert, key, value)
    db.commit()
    db.refresh(alert)
    return alert

def delete_job_alert(db: Session, alert: models.JobAlert) -> None:
    db.delete(alert)
    db.commit()


# ---------- Reports ----------

def create_report(db: Session, reporter: models.User, **fields) -> models.Report:
    report = models.Report(reporter_id=reporter.id, **fields)
    db.add(report)
    db.commit()
    db.refresh(report)
    return report

def list_reports(db: Session, page: int, limit: int, status: str | None = None, target_type: str | None = None):
    stmt = select(models.Report).order_by(models.Report.created_at.desc(), models.Report.id.desc())
    if status:
        stmt = stmt.where(models.Report.status == status)
    if target_type:
        stmt = stmt.where(models.Report.target_type == target_type)
    return paginate(db, stmt, page, limit)

def review_report(db: Session, report_id: int, admin: models.Admin, status: str, action_taken: str | None) -> models.Report:
    report = db.get(models.Report, report_id)
    if report is None:
        raise NotFoundError("Report not found")
    report.status = status
    report.action_taken = action_taken
    report.reviewed_by_id = admin.id
    report.reviewed_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(report)
    return report

def admin_stats(db: Session) -> dict:
    def count(model, *where):
        return db.execute(select(func.count()).select_from(model).where(*where)).scalar_one()

    return {
        "total_users": count(models.User),
        "total_job_seekers": count(models.User, models.User.role == Role.JOB_SEEKER.value),
        "total_employers": count(models.User, models.User.role == Role.EMPLOYER.value),
        "total_companies": count(models.Company),
        "verified_companies": count(models.Company, models.Company.is_verified.is_(True)),
        "pending_reports": count(models.Report, models.Report.status == models.ReportStatus.PENDING.value),
    }
