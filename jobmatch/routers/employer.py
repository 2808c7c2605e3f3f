from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from .. import crud, lifecycle, models
from ..auth import get_employer
from ..database import get_db
from ..deps import Pagination, get_dispatch, pagination
from ..errors import NotFoundError
from ..mailer import Dispatch
from ..models import ApplicationStatus, JobStatus
from ..schemas import (
    ApplicationOut,
    ApplicationStatusUpdate,
    ApplicationWithApplicantOut,
    CompanyIn,
    CompanyOut,
    CompanyUpdate,
    EmployerStats,
    JobIn,
    JobOut,
    JobStatusUpdate,
    JobUpdate,
    Page,
)
from ..storage import BlobStore, get_blob_store, store_upload

router = APIRouter(prefix="/api/employer", tags=["employer"])


def _my_company(db: Session, employer: models.User) -> models.Company:
    company = crud.get_company_for_employer(db, employer.id)
    if company is None:
        raise NotFoundError("Company profile not found. Please create one first")
    return company


# Company profile
@router.post("/profile", response_model=CompanyOut, status_code=status.HTTP_201_CREATED)
def create_company_profile(payload: CompanyIn, db: Session = Depends(get_db), employer: models.User = Depends(get_employer)):
    return crud.create_company(db, employer, **payload.model_dump(exclude_none=True))


@router.get("/profile", response_model=CompanyOut)
def get_company_profile(db: Session = Depends(get_db), employer: models.User = Depends(get_employer)):
    return _my_company(db, employer)


@router.put("/profile", response_model=CompanyOut)
def update_company_profile(payload: CompanyUpdate, db: Session = Depends(get_db), employer: models.User = Depends(get_employer)):
    company = _my_company(db, employer)
    return crud.update_company(db, company, **payload.model_dump(exclude_unset=True))


@router.put("/profile/logo", response_model=CompanyOut)
async def upload_company_logo(
    logo: UploadFile = File(...),
    db: Session = Depends(get_db),
    employer: models.User = Depends(get_employer),
    store: BlobStore = Depends(get_blob_store),
):
    company = _my_company(db, employer)
    blob = await store_upload(store, logo, "companies", kind="image")
    return crud.update_company(db, company, logo_url=blob["url"])


# Jobs
@router.post("/jobs", response_model=JobOut, status_code=status.HTTP_201_CREATED)
def post_job(payload: JobIn, db: Session = Depends(get_db), employer: models.User = Depends(get_employer)):
    return crud.create_job(db, employer, **payload.model_dump())


@router.get("/jobs", response_model=Page[JobOut])
def list_my_jobs(
    status: JobStatus | None = Query(None),
    page: Pagination = Depends(pagination),
    db: Session = Depends(get_db),
    employer: models.User = Depends(get_employer),
):
    items, total = crud.list_employer_jobs(db, employer.id, page.page, page.limit, status.value if status else None)
    return Page[JobOut].build(items, total, page.page, page.limit)


@router.get("/jobs/{job_id}", response_model=JobOut)
def get_my_job(job_id: int, db: Session = Depends(get_db), employer: models.User = Depends(get_employer)):
    return crud.get_employer_job(db, employer.id, job_id)


@router.put("/jobs/{job_id}", response_model=JobOut)
def update_my_job(job_id: int, payload: JobUpdate, db: Session = Depends(get_db), employer: models.User = Depends(get_employer)):
    job = crud.get_employer_job(db, employer.id, job_id)
    return crud.update_job(db, job, **payload.model_dump(exclude_unset=True))


@router.patch("/jobs/{job_id}", response_model=JobOut)
def update_my_job_status(job_id: int, payload: JobStatusUpdate, db: Session = Depends(get_db), employer: models.User = Depends(get_employer)):
    job = crud.get_employer_job(db, employer.id, job_id)
    return crud.update_job(db, job, status=payload.status)


@router.delete("/jobs/{job_id}", status_code=204)
def delete_my_job(job_id: int, db: Session = Depends(get_db), employer: models.User = Depends(get_employer)):
    job = crud.get_employer_job(db, employer.id, job_id)
    crud.delete_job(db, job)
    return None


# Applicants
@router.get("/jobs/{job_id}/applicants", response_model=Page[ApplicationWithApplicantOut])
def list_applicants(
    job_id: int,
    status: ApplicationStatus | None = Query(None),
    page: Pagination = Depends(pagination),
    db: Session = Depends(get_db),
    employer: models.User = Depends(get_employer),
):
    items, total = crud.list_job_applicants(
        db, employer.id, job_id, page.page, page.limit, status.value if status else None
    )
    return Page[ApplicationWithApplicantOut].build(items, total, page.page, page.limit)


@router.patch("/applications/{application_id}/status", response_model=ApplicationOut)
def update_application_status(
    application_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    employer: models.User = Depends(get_employer),
    dispatch: Dispatch = Depends(get_dispatch),
):
    return lifecycle.update_status(db, application_id, employer, payload.status, payload.employer_notes, dispatch)


@router.get("/stats", response_model=EmployerStats)
def employer_stats(db: Session = Depends(get_db), employer: models.User = Depends(get_employer)):
    return crud.employer_stats(db, employer.id)
