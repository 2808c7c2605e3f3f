"""
Application lifecycle: apply, employer status updates and withdrawal.

Each operation performs its primary write, the counter update and the
notification row in one transaction, then hands emails to ``dispatch``.
Emails are fire-and-forget: nothing here waits on, or fails because of, mail.

Status changes are written with a conditional UPDATE on the status the
caller saw, so two concurrent withdrawals (or a withdrawal racing an
employer update) cannot both succeed and double-count the job counter.
"""
from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import crud, mailer, models
from .config import settings
from .errors import ConflictError, NotFoundError
from .mailer import Dispatch
from .models import ApplicationStatus as S

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({S.REJECTED, S.ACCEPTED, S.WITHDRAWN})

# Review pipeline. Withdrawal is not listed: only ``withdraw`` may reach it.
ALLOWED_TRANSITIONS: dict[S, frozenset[S]] = {
    S.PENDING: frozenset({S.REVIEWING, S.SHORTLISTED, S.INTERVIEWED, S.REJECTED, S.ACCEPTED}),
    S.REVIEWING: frozenset({S.SHORTLISTED, S.INTERVIEWED, S.REJECTED, S.ACCEPTED}),
    S.SHORTLISTED: frozenset({S.INTERVIEWED, S.REJECTED, S.ACCEPTED}),
    S.INTERVIEWED: frozenset({S.REJECTED, S.ACCEPTED}),
    S.REJECTED: frozenset(),
    S.ACCEPTED: frozenset(),
    S.WITHDRAWN: frozenset(),
}


def can_transition(current: str, new: str, strict: bool | None = None) -> bool:
    """Whether an employer may move an application from ``current`` to ``new``.

    In loose mode every non-withdrawn status may move to any other
    non-withdrawn status, matching how the board behaved before the
    pipeline table existed.
    """
    if strict is None:
        strict = settings.STRICT_STATUS_TRANSITIONS
    current, new = S(current), S(new)
    if S.WITHDRAWN in (current, new):
        return False
    if not strict:
        return True
    return new in ALLOWED_TRANSITIONS[current]


def _noop_dispatch(to: str, message: mailer.EmailMessage) -> None:
    logger.debug("No dispatcher configured, dropping %r to %s", message.subject, to)


def _set_status_if(db: Session, application_id: int, expected: str, **values) -> bool:
    """Write ``values`` only if the application is still in ``expected``."""
    result = db.execute(
        update(models.Application)
        .where(models.Application.id == application_id, models.Application.status == expected)
        .values(updated_at=models.utcnow(), **values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def apply(
    db: Session,
    job_id: int,
    job_seeker: models.User,
    resume_id: str | None = None,
    cover_letter: str | None = None,
    dispatch: Dispatch | None = None,
) -> models.Application:
    dispatch = dispatch or _noop_dispatch

    job = db.get(models.Job, job_id)
    if job is None:
        raise NotFoundError("Job not found")
    if job.status != models.JobStatus.OPEN.value:
        raise ConflictError("This job is no longer accepting applications")

    existing = db.execute(
        select(models.Application).where(
            models.Application.job_id == job_id,
            models.Application.job_seeker_id == job_seeker.id,
        )
    ).scalar_one_or_none()

    if existing is not None and existing.status != S.WITHDRAWN.value:
        raise ConflictError("You have already applied to this job")

    if existing is None:
        application = models.Application(
            job_id=job.id,
            job_seeker_id=job_seeker.id,
            employer_id=job.employer_id,
            resume_id=resume_id,
            cover_letter=cover_letter,
            status=S.PENDING.value,
        )
        db.add(application)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise ConflictError("You have already applied to this job")
    else:
        # Withdrawn applications are reopened in place; the (job, seeker) row stays unique.
        reopened = _set_status_if(
            db,
            existing.id,
            S.WITHDRAWN.value,
            status=S.PENDING.value,
            resume_id=resume_id,
            cover_letter=cover_letter,
            applied_at=models.utcnow(),
            reviewed_at=None,
            updated_status_at=None,
            employer_notes=None,
        )
        if not reopened:
            db.rollback()
            raise ConflictError("You have already applied to this job")
        application = existing

    crud.increment(db, models.Job, job.id, total_applications=1)
    crud.create_notification(
        db,
        recipient_id=job.employer_id,
        type=models.NotificationType.NEW_APPLICANT,
        title="New Application Received",
        message=f"{job_seeker.full_name or job_seeker.email} has applied for {job.title}",
        related_job_id=job.id,
        related_application_id=application.id,
    )
    db.commit()
    db.refresh(application)
    db.refresh(job)
    logger.info("Seeker %s applied to job %s (application %s)", job_seeker.id, job.id, application.id)

    employer = db.get(models.User, job.employer_id)
    if employer is not None:
        dispatch(employer.email, mailer.new_applicant(job.title, job_seeker.full_name or job_seeker.email))
    dispatch(job_seeker.email, mailer.application_received(job.title, job.company.company_name))
    return application


def update_status(
    db: Session,
    application_id: int,
    employer: models.User,
    new_status: str,
    notes: str | None = None,
    dispatch: Dispatch | None = None,
) -> models.Application:
    dispatch = dispatch or _noop_dispatch

    application = db.execute(
        select(models.Application).where(
            models.Application.id == application_id,
            models.Application.employer_id == employer.id,
        )
    ).scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application not found")

    new_status = S(new_status).value
    if new_status == S.WITHDRAWN.value:
        raise ConflictError("Only the applicant can withdraw an application")
    current = application.status
    if not can_transition(current, new_status):
        raise ConflictError(f"Cannot change application status from {current} to {new_status}")

    now = models.utcnow()
    changed = _set_status_if(
        db,
        application.id,
        current,
        status=new_status,
        employer_notes=notes or application.employer_notes,
        reviewed_at=now,
        updated_status_at=now,
    )
    if not changed:
        db.rollback()
        raise ConflictError("Application status was changed by another request")

    job = application.job
    crud.create_notification(
        db,
        recipient_id=application.job_seeker_id,
        type=models.NotificationType.APPLICATION_STATUS,
        title="Application Status Updated",
        message=f"Your application for {job.title} has been updated to: {new_status}",
        related_job_id=job.id,
        related_application_id=application.id,
    )
    db.commit()
    db.refresh(application)
    logger.info("Application %s moved %s -> %s by employer %s", application.id, current, new_status, employer.id)

    dispatch(application.job_seeker.email, mailer.application_status_update(job.title, new_status))
    return application


def withdraw(db: Session, application_id: int, job_seeker: models.User) -> models.Application:
    application = db.execute(
        select(models.Application).where(
            models.Application.id == application_id,
            models.Application.job_seeker_id == job_seeker.id,
        )
    ).scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application not found")
    if application.status != S.PENDING.value:
        raise ConflictError("Cannot withdraw application at this stage")

    if not _set_status_if(db, application.id, S.PENDING.value, status=S.WITHDRAWN.value):
        db.rollback()
        raise ConflictError("Cannot withdraw application at this stage")
    crud.increment(db, models.Job, application.job_id, total_applications=-1)
    db.commit()
    db.refresh(application)
    logger.info("Application %s withdrawn by seeker %s", application.id, job_seeker.id)
    return application
