from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import crud, models
from ..auth import authenticate_admin, get_current_admin, get_current_user
from ..database import get_db
from ..deps import Pagination, pagination
from ..errors import AuthError, NotFoundError
from ..models import ReportStatus, Role, VerificationStatus
from ..schemas import (
    AdminStats,
    AdminToken,
    AdminUserOut,
    CompanyOut,
    CompanyVerify,
    LoginIn,
    Message,
    Page,
    ReportIn,
    ReportOut,
    ReportReview,
    UserStatusUpdate,
)
from ..token import create_access_token

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login", response_model=AdminToken)
def admin_login(payload: LoginIn, db: Session = Depends(get_db)):
    admin = authenticate_admin(db, payload.email, payload.password)
    if not admin:
        raise AuthError("Invalid credentials")
    token = create_access_token(admin.id, Role.ADMIN.value)
    return AdminToken(access_token=token, admin_id=admin.id, name=admin.name)


# Users
@router.get("/users", response_model=Page[AdminUserOut])
def list_users(
    role: Role | None = Query(None),
    is_active: bool | None = None,
    search: str | None = None,
    page: Pagination = Depends(pagination),
    db: Session = Depends(get_db),
    _: models.Admin = Depends(get_current_admin),
):
    items, total = crud.list_users(
        db, page.page, page.limit, role=role.value if role else None, is_active=is_active, search=search
    )
    return Page[AdminUserOut].build(items, total, page.page, page.limit)


@router.patch("/users/{user_id}/status", response_model=AdminUserOut)
def update_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    db: Session = Depends(get_db),
    _: models.Admin = Depends(get_current_admin),
):
    user = crud.get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return crud.update_user(db, user, is_active=payload.is_active)


@router.delete("/users/{user_id}", response_model=Message)
def delete_user(user_id: int, db: Session = Depends(get_db), _: models.Admin = Depends(get_current_admin)):
    user = crud.get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    crud.delete_user(db, user)
    return Message(message="User deleted successfully")


# Companies & jobs
@router.patch("/company/{company_id}/verify", response_model=CompanyOut)
def verify_company(
    company_id: int,
    payload: CompanyVerify,
    db: Session = Depends(get_db),
    _: models.Admin = Depends(get_current_admin),
):
    return crud.verify_company(db, company_id, VerificationStatus(payload.status))


@router.delete("/jobs/{job_id}", status_code=204)
def delete_job(job_id: int, db: Session = Depends(get_db), _: models.Admin = Depends(get_current_admin)):
    job = db.get(models.Job, job_id)
    if job is None:
        raise NotFoundError("Job not found")
    crud.delete_job(db, job)
    return None


# Reports
@router.get("/reports", response_model=Page[ReportOut])
def list_reports(
    status: ReportStatus | None = Query(None),
    target_type: str | None = None,
    page: Pagination = Depends(pagination),
    db: Session = Depends(get_db),
    _: models.Admin = Depends(get_current_admin),
):
    items, total = crud.list_reports(
        db, page.page, page.limit, status=status.value if status else None, target_type=target_type
    )
    return Page[ReportOut].build(items, total, page.page, page.limit)


@router.patch("/reports/{report_id}", response_model=ReportOut)
def review_report(
    report_id: int,
    payload: ReportReview,
    db: Session = Depends(get_db),
    admin: models.Admin = Depends(get_current_admin),
):
    return crud.review_report(db, report_id, admin, payload.status, payload.action_taken)


@router.post("/reports", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
def create_report(payload: ReportIn, db: Session = Depends(get_db), user: models.User = Depends(get_current_user)):
    return crud.create_report(db, user, **payload.model_dump())


@router.get("/stats", response_model=AdminStats)
def admin_stats(db: Session = Depends(get_db), _: models.Admin = Depends(get_current_admin)):
    return crud.admin_stats(db)
