"""
Recompute denormalized counters from their source rows.

The request path keeps ``Job.total_applications``, ``Company.total_jobs`` and
``Company.total_followers`` up to date with atomic increments, but nothing
ties those increments to the rows they count (a crash between writes, or
rows removed in bulk, leaves them off). These passes overwrite every counter
that disagrees with a fresh count. They take no locks: writes landing during
a pass may be missed until the next one.

Withdrawn applications are not counted, same as the live decrement on
withdrawal.
"""
from __future__ import annotations

import logging
from typing import NamedTuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from . import models

logger = logging.getLogger(__name__)


class Correction(NamedTuple):
    model: str
    id: int
    label: str
    field: str
    old: int
    new: int


def _active_application_counts(db: Session) -> dict[int, int]:
    rows = db.execute(
        select(models.Application.job_id, func.count(models.Application.id))
        .where(models.Application.status != models.ApplicationStatus.WITHDRAWN.value)
        .group_by(models.Application.job_id)
    ).all()
    return {job_id: count for job_id, count in rows}


def _group_counts(db: Session, column) -> dict[int, int]:
    rows = db.execute(select(column, func.count()).group_by(column)).all()
    return {key: count for key, count in rows}


def _apply(db: Session, model, row_id: int, field: str, value: int) -> None:
    db.execute(
        update(model)
        .where(model.id == row_id)
        .values({field: value})
        .execution_options(synchronize_session=False)
    )


def reconcile_job_applications(db: Session) -> list[Correction]:
    counts = _active_application_counts(db)
    corrections: list[Correction] = []
    for job_id, title, current in db.execute(
        select(models.Job.id, models.Job.title, models.Job.total_applications).order_by(models.Job.id)
    ):
        actual = counts.get(job_id, 0)
        if current != actual:
            _apply(db, models.Job, job_id, "total_applications", actual)
            corrections.append(Correction("job", job_id, title, "total_applications", current, actual))
    return corrections


def reconcile_company_counters(db: Session) -> list[Correction]:
    job_counts = _group_counts(db, models.Job.company_id)
    follower_counts = _group_counts(db, models.FollowCompany.company_id)
    corrections: list[Correction] = []
    for company_id, name, total_jobs, total_followers in db.execute(
        select(
            models.Company.id,
            models.Company.company_name,
            models.Company.total_jobs,
            models.Company.total_followers,
        ).order_by(models.Company.id)
    ):
        for field, current, actual in (
            ("total_jobs", total_jobs, job_counts.get(company_id, 0)),
            ("total_followers", total_followers, follower_counts.get(company_id, 0)),
        ):
            if current != actual:
                _apply(db, models.Company, company_id, field, actual)
                corrections.append(Correction("company", company_id, name, field, current, actual))
    return corrections


def reconcile(db: Session) -> list[Correction]:
    """Run every counter pass and commit once. Returns what was changed."""
    corrections = reconcile_job_applications(db) + reconcile_company_counters(db)
    db.commit()
    for c in corrections:
        logger.info("Updated %s %r %s: %s -> %s", c.model, c.label, c.field, c.old, c.new)
    return corrections
