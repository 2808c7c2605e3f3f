"""Offline repair of denormalized counters (job applications, company jobs and followers)."""
from __future__ import annotations

import logging

import typer

from jobmatch.config import settings
from jobmatch.database import SessionLocal
from jobmatch.logger import setup_logging
from jobmatch.reconcile import reconcile, reconcile_job_applications

logger = logging.getLogger(__name__)

app = typer.Typer(help="Recompute JobMatch counters from source rows")


@app.command()
def main(
    jobs_only: bool = typer.Option(False, "--jobs-only", help="Only fix Job.total_applications"),
):
    setup_logging(settings.LOG_LEVEL)
    db = SessionLocal()
    try:
        if jobs_only:
            corrections = reconcile_job_applications(db)
            db.commit()
            for c in corrections:
                logger.info("Updated job %r - applications: %s", c.label, c.new)
        else:
            corrections = reconcile(db)
    except Exception:
        db.rollback()
        logger.exception("Error syncing counters")
        raise typer.Exit(code=1)
    finally:
        db.close()

    logger.info("Sync completed! Updated %d counters.", len(corrections))


if __name__ == "__main__":
    app()
