from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile, status
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from .. import crud, lifecycle, models, security
from ..auth import get_job_seeker
from ..database import get_db
from ..deps import Pagination, get_dispatch, pagination
from ..errors import AuthError, NotFoundError, ValidationError, field_errors
from ..mailer import Dispatch
from ..models import ApplicationStatus
from ..schemas import (
    AccountDelete,
    ApplicationOut,
    ApplicationWithJobOut,
    ApplyIn,
    AwardIn,
    CertificateIn,
    CompanyDetailOut,
    CompanyOut,
    EducationIn,
    ExperienceIn,
    FollowOut,
    GeneralInfoUpdate,
    InterestsUpdate,
    JobAlertIn,
    JobAlertOut,
    JobAlertUpdate,
    JobOut,
    Message,
    NotificationOut,
    NotificationPage,
    OtherIn,
    Page,
    PageInfo,
    PasswordChange,
    ProfileOut,
    ResumeRename,
    SaveJobIn,
    SavedJobOut,
    SettingsOut,
    SettingsUpdate,
    SkillsUpdate,
    SummaryUpdate,
    UserOut,
    UserSettings,
)
from ..storage import BlobStore, get_blob_store, store_upload

router = APIRouter(prefix="/api/js", tags=["job seeker"])

SECTION_SCHEMAS: dict[str, type[BaseModel]] = {
    "experiences": ExperienceIn,
    "education": EducationIn,
    "certificates": CertificateIn,
    "awards": AwardIn,
    "others": OtherIn,
}
Section = Literal["experiences", "education", "certificates", "awards", "others"]


# ============= PROFILE =============

@router.get("/profile", response_model=ProfileOut)
def get_profile(user: models.User = Depends(get_job_seeker)):
    return ProfileOut(
        general={
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "phone": user.phone,
            "location": user.location,
            "date_of_birth": user.date_of_birth,
            "gender": user.gender,
            "date_joined_workforce": user.date_joined_workforce,
            "avatar_url": user.avatar_url,
        },
        summary=user.summary,
        experiences=user.experiences,
        education=user.education,
        skills=user.skills,
        certificates=user.certificates,
        awards=user.awards,
        others=user.others,
        resumes=user.resumes,
        interests=user.interests,
        settings=user.settings,
    )


@router.patch("/profile/general", response_model=UserOut)
def update_general_info(payload: GeneralInfoUpdate, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    return crud.update_user(db, user, **payload.model_dump(exclude_unset=True))


@router.put("/profile/avatar", response_model=UserOut)
async def upload_avatar(
    avatar: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_job_seeker),
    store: BlobStore = Depends(get_blob_store),
):
    blob = await store_upload(store, avatar, "avatars", kind="image")
    return crud.update_user(db, user, avatar_url=blob["url"])


@router.put("/profile/summary")
def update_summary(payload: SummaryUpdate, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    crud.update_user(db, user, summary=payload.summary)
    return {"summary": user.summary}


@router.put("/profile/skills")
def update_skills(payload: SkillsUpdate, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    crud.update_user(db, user, skills=payload.skills)
    return {"skills": user.skills}


@router.put("/profile/interests")
def update_interests(payload: InterestsUpdate, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    interests = {**(user.interests or {}), **payload.model_dump(exclude_none=True)}
    crud.update_user(db, user, interests=interests)
    return {"interests": user.interests}


def _validate_item(section: str, data: dict) -> dict:
    try:
        return SECTION_SCHEMAS[section].model_validate(data).model_dump(mode="json")
    except PydanticValidationError as exc:
        raise ValidationError("Validation failed", field_errors(exc.errors()))


@router.post("/profile/{section}", status_code=status.HTTP_201_CREATED)
def add_profile_item(section: Section, body: dict = Body(...), db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    return crud.add_section_item(db, user, section, _validate_item(section, body))


@router.put("/profile/{section}/{item_id}")
def update_profile_item(section: Section, item_id: str, body: dict = Body(...), db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    existing = next((it for it in getattr(user, section) if it.get("id") == item_id), None)
    if existing is None:
        raise NotFoundError("Item not found")
    changes = _validate_item(section, {**existing, **body})
    return crud.update_section_item(db, user, section, item_id, changes)


@router.delete("/profile/{section}/{item_id}", response_model=Message)
def delete_profile_item(section: Section, item_id: str, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    crud.delete_section_item(db, user, section, item_id)
    return Message(message="Item deleted")


# Resumes
@router.post("/resume", status_code=status.HTTP_201_CREATED)
async def upload_resume(
    resume: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_job_seeker),
    store: BlobStore = Depends(get_blob_store),
):
    blob = await store_upload(store, resume, "resumes", kind="document")
    item = {
        "name": resume.filename,
        "url": blob["url"],
        "blob_id": blob["id"],
        "uploaded_at": datetime.now(timezone.utc).isoformat(),
    }
    return crud.add_section_item(db, user, "resumes", item)


@router.get("/resume")
def list_resumes(user: models.User = Depends(get_job_seeker)):
    return user.resumes


@router.put("/resume/{resume_id}")
def rename_resume(resume_id: str, payload: ResumeRename, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    return crud.update_section_item(db, user, "resumes", resume_id, {"name": payload.name})


@router.delete("/resume/{resume_id}", response_model=Message)
def delete_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_job_seeker),
    store: BlobStore = Depends(get_blob_store),
):
    removed = crud.delete_section_item(db, user, "resumes", resume_id)
    if removed.get("blob_id"):
        store.delete(removed["blob_id"])
    return Message(message="Resume deleted")


# ============= JOBS =============

@router.get("/jobs/search", response_model=Page[JobOut])
def search_jobs(
    keyword: str | None = None,
    location: str | None = None,
    job_type: str | None = None,
    salary_min: int | None = Query(None, ge=0),
    category: str | None = None,
    experience_level: str | None = None,
    page: Pagination = Depends(pagination),
    db: Session = Depends(get_db),
):
    items, total = crud.search_jobs(
        db, page.page, page.limit,
        keyword=keyword, location=location, job_type=job_type, salary_min=salary_min,
        category=category, experience_level=experience_level,
    )
    return Page[JobOut].build(items, total, page.page, page.limit)


@router.get("/jobs/recommended", response_model=Page[JobOut])
def recommended_jobs(page: Pagination = Depends(pagination), db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    items, total = crud.recommended_jobs(db, user, page.page, page.limit)
    return Page[JobOut].build(items, total, page.page, page.limit)


@router.get("/jobs/saved", response_model=Page[SavedJobOut])
def list_saved_jobs(page: Pagination = Depends(pagination), db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    items, total = crud.list_saved_jobs(db, user, page.page, page.limit)
    return Page[SavedJobOut].build(items, total, page.page, page.limit)


@router.post("/jobs/saved", response_model=SavedJobOut, status_code=status.HTTP_201_CREATED)
def save_job(payload: SaveJobIn, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    return crud.save_job(db, user, payload.job_id)


@router.delete("/jobs/saved/{saved_id}", response_model=Message)
def unsave_job(saved_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    crud.unsave_job(db, user, saved_id)
    return Message(message="Job removed from saved list")


@router.get("/jobs/{job_id}", response_model=JobOut)
def get_job_detail(job_id: int, db: Session = Depends(get_db)):
    return crud.get_job_detail(db, job_id)


@router.post("/jobs/{job_id}/apply", response_model=ApplicationOut, status_code=status.HTTP_201_CREATED)
def apply_for_job(
    job_id: int,
    payload: ApplyIn | None = None,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_job_seeker),
    dispatch: Dispatch = Depends(get_dispatch),
):
    payload = payload or ApplyIn()
    if payload.resume_id and not any(r.get("id") == payload.resume_id for r in user.resumes):
        raise NotFoundError("Resume not found")
    return lifecycle.apply(db, job_id, user, payload.resume_id, payload.cover_letter, dispatch)


# ============= APPLICATIONS =============

@router.get("/applications", response_model=Page[ApplicationWithJobOut])
def list_my_applications(
    status: ApplicationStatus | None = Query(None),
    page: Pagination = Depends(pagination),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_job_seeker),
):
    items, total = crud.list_seeker_applications(db, user.id, page.page, page.limit, status.value if status else None)
    return Page[ApplicationWithJobOut].build(items, total, page.page, page.limit)


@router.get("/applications/{application_id}", response_model=ApplicationWithJobOut)
def get_my_application(application_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    return crud.get_seeker_application(db, user.id, application_id)


@router.delete("/applications/{application_id}", response_model=ApplicationOut)
def withdraw_application(application_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    return lifecycle.withdraw(db, application_id, user)


# ============= COMPANIES =============

@router.get("/companies", response_model=Page[CompanyOut])
def search_companies(
    name: str | None = None,
    location: str | None = None,
    industry: str | None = None,
    page: Pagination = Depends(pagination),
    db: Session = Depends(get_db),
):
    items, total = crud.search_companies(db, page.page, page.limit, name=name, location=location, industry=industry)
    return Page[CompanyOut].build(items, total, page.page, page.limit)


@router.get("/companies/following", response_model=Page[FollowOut])
def list_following(page: Pagination = Depends(pagination), db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    items, total = crud.list_followed_companies(db, user, page.page, page.limit)
    return Page[FollowOut].build(items, total, page.page, page.limit)


@router.get("/companies/{company_id}", response_model=CompanyDetailOut)
def get_company_detail(company_id: int, db: Session = Depends(get_db)):
    company = crud.get_company(db, company_id)
    return CompanyDetailOut(
        info=CompanyOut.model_validate(company),
        jobs=[JobOut.model_validate(j) for j in crud.open_jobs_for_company(db, company_id)],
    )


@router.post("/companies/{company_id}/follow", response_model=Message, status_code=status.HTTP_201_CREATED)
def follow_company(company_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    crud.follow_company(db, user, company_id)
    return Message(message="Successfully followed company")


@router.delete("/companies/{company_id}/follow", response_model=Message)
def unfollow_company(company_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    crud.unfollow_company(db, user, company_id)
    return Message(message="Successfully unfollowed company")


# ============= NOTIFICATIONS =============

@router.get("/notifications", response_model=NotificationPage)
def list_notifications(
    is_read: bool | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_job_seeker),
):
    items, total = crud.list_notifications(db, user.id, page, limit, is_read)
    return NotificationPage(
        data=[NotificationOut.model_validate(n) for n in items],
        pagination=PageInfo(current_page=page, total_pages=-(-total // limit), total_items=total, limit=limit),
        unread_count=crud.unread_count(db, user.id),
    )


@router.put("/notifications/read-all", response_model=Message)
def mark_all_read(db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    crud.mark_all_notifications_read(db, user.id)
    return Message(message="All notifications marked as read")


@router.put("/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    return crud.mark_notification_read(db, user.id, notification_id)


# ============= JOB ALERTS =============

@router.post("/alert", response_model=JobAlertOut, status_code=status.HTTP_201_CREATED)
def create_job_alert(payload: JobAlertIn, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    return crud.create_job_alert(db, user, **payload.model_dump())


@router.get("/alert", response_model=list[JobAlertOut])
def list_job_alerts(db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    return crud.list_job_alerts(db, user)


@router.put("/alert/{alert_id}", response_model=JobAlertOut)
def update_job_alert(alert_id: int, payload: JobAlertUpdate, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    alert = crud.get_job_alert(db, user, alert_id)
    return crud.update_job_alert(db, alert, **payload.model_dump(exclude_unset=True))


@router.put("/alert/{alert_id}/toggle", response_model=JobAlertOut)
def toggle_job_alert(alert_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    alert = crud.get_job_alert(db, user, alert_id)
    return crud.update_job_alert(db, alert, is_active=not alert.is_active)


@router.delete("/alert/{alert_id}", response_model=Message)
def delete_job_alert(alert_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    crud.delete_job_alert(db, crud.get_job_alert(db, user, alert_id))
    return Message(message="Job alert deleted successfully")


# ============= SETTINGS =============

@router.get("/settings", response_model=SettingsOut)
def get_settings(user: models.User = Depends(get_job_seeker)):
    return SettingsOut(email=user.email, **UserSettings(**(user.settings or {})).model_dump())


@router.put("/settings", response_model=UserSettings)
def update_settings(payload: SettingsUpdate, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    merged = {**(user.settings or {}), **payload.model_dump(exclude_none=True)}
    crud.update_user(db, user, settings=merged)
    return UserSettings(**user.settings)


@router.put("/settings/password", response_model=Message)
def change_password(payload: PasswordChange, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    if not security.verify_password(payload.current_password, user.hashed_password):
        raise AuthError("Current password is incorrect")
    crud.set_password(db, user, payload.new_password)
    return Message(message="Password changed successfully")


@router.delete("/settings/account", response_model=Message)
def delete_account(payload: AccountDelete, db: Session = Depends(get_db), user: models.User = Depends(get_job_seeker)):
    if not security.verify_password(payload.password, user.hashed_password):
        raise AuthError("Password is incorrect")
    crud.delete_user(db, user)
    return Message(message="Account deleted successfully")
