"""Create the super admin account unless one with ADMIN_EMAIL already exists."""
from __future__ import annotations

import logging

import typer
from sqlalchemy.orm import Session

from jobmatch import crud, models
from jobmatch.config import settings
from jobmatch.database import Base, SessionLocal, engine
from jobmatch.logger import setup_logging

logger = logging.getLogger(__name__)

app = typer.Typer(help="Seed the JobMatch super admin")


def seed_admin(db: Session, email: str, password: str) -> tuple[models.Admin, bool]:
    """Return ``(admin, created)``. Existing admins are left untouched."""
    existing = crud.get_admin_by_email(db, email)
    if existing is not None:
        return existing, False
    return crud.create_admin(db, email, password), True


@app.command()
def main(
    email: str = typer.Option(settings.ADMIN_EMAIL, help="Admin email (env ADMIN_EMAIL)"),
    password: str = typer.Option(settings.ADMIN_PASSWORD, help="Admin password (env ADMIN_PASSWORD)"),
):
    setup_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        admin, created = seed_admin(db, email, password)
    except Exception:
        db.rollback()
        logger.exception("Error seeding admin")
        raise typer.Exit(code=1)
    finally:
        db.close()

    if not created:
        logger.warning("Admin already exists: %s", admin.email)
        return
    logger.info("Admin created successfully: %s", admin.email)
    logger.warning("Please change the admin password after first login!")


if __name__ == "__main__":
    app()
