from __future__ import annotations
from datetime import datetime
from typing import Generic, Literal, TypeVar
from pydantic import BaseModel, EmailStr, Field

from .models import ApplicationStatus, JobStatus
from .security import MIN_PASSWORD_LENGTH

T = TypeVar("T")

JobType = Literal["fulltime", "parttime", "contract", "internship"]
WorkMode = Literal["onsite", "remote", "hybrid"]
ExperienceLevel = Literal["entry", "mid", "senior", "lead", "executive"]
CompanySize = Literal["1-10", "11-50", "51-200", "201-500", "501-1000", "1000+"]


# Pagination
class PageInfo(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    limit: int

class Page(BaseModel, Generic[T]):
    data: list[T]
    pagination: PageInfo

    @classmethod
    def build(cls, items: list, total: int, page: int, limit: int) -> "Page":
        return cls(
            data=items,
            pagination=PageInfo(
                current_page=page,
                total_pages=-(-total // limit),
                total_items=total,
                limit=limit,
            ),
        )

class Message(BaseModel):
    message: str


# Auth
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    role: Literal["job_seeker", "employer"]
    name: str | None = Field(None, min_length=1)

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH)

class AccountDelete(BaseModel):
    password: str = Field(min_length=1)

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class CompanyBrief(BaseModel):
    id: int
    company_name: str
    logo_url: str | None = None
    is_verified: bool = False

    model_config = {"from_attributes": True}

class UserOut(BaseModel):
    id: int
    email: EmailStr
    role: str
    first_name: str | None = None
    last_name: str | None = None
    full_name: str = ""
    avatar_url: str | None = None
    phone: str | None = None
    location: str | None = None
    is_active: bool
    is_email_verified: bool
    company: CompanyBrief | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


# Profile
class GeneralInfoUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    location: str | None = None
    date_of_birth: datetime | None = None
    gender: Literal["male", "female", "other"] | None = None
    date_joined_workforce: datetime | None = None

class SummaryUpdate(BaseModel):
    summary: str = Field(min_length=1)

class SkillsUpdate(BaseModel):
    skills: list[str]

class SalaryRange(BaseModel):
    min: int | None = None
    max: int | None = None

class Interests(BaseModel):
    desired_job_titles: list[str] = Field(default_factory=list)
    desired_locations: list[str] = Field(default_factory=list)
    desired_salary_range: SalaryRange | None = None
    desired_job_types: list[str] = Field(default_factory=list)

class InterestsUpdate(BaseModel):
    desired_job_titles: list[str] | None = None
    desired_locations: list[str] | None = None
    desired_salary_range: SalaryRange | None = None
    desired_job_types: list[str] | None = None

class ExperienceIn(BaseModel):
    company_name: str = Field(min_length=1)
    position: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime | None = None
    is_current: bool = False
    description: str | None = None

class EducationIn(BaseModel):
    school: str = Field(min_length=1)
    degree: str = Field(min_length=1)
    field_of_study: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    description: str | None = None

class CertificateIn(BaseModel):
    name: str = Field(min_length=1)
    organization: str = Field(min_length=1)
    issue_date: datetime | None = None
    expiry_date: datetime | None = None
    url: str | None = None
    description: str | None = None

class AwardIn(BaseModel):
    name: str = Field(min_length=1)
    organization: str | None = None
    issue_date: datetime | None = None
    description: str | None = None

class OtherIn(BaseModel):
    title: str = Field(min_length=1)
    organization: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    description: str | None = None

class ResumeRename(BaseModel):
    name: str = Field(min_length=1)

class UserSettings(BaseModel):
    email_notifications: bool = True
    job_alerts: bool = True
    profile_visibility: Literal["public", "private"] = "public"

class SettingsUpdate(BaseModel):
    email_notifications: bool | None = None
    job_alerts: bool | None = None
    profile_visibility: Literal["public", "private"] | None = None

class SettingsOut(UserSettings):
    email: EmailStr

class ProfileOut(BaseModel):
    general: dict
    summary: str | None = None
    experiences: list[dict]
    education: list[dict]
    skills: list[str]
    certificates: list[dict]
    awards: list[dict]
    others: list[dict]
    resumes: list[dict]
    interests: dict
    settings: dict


# Companies
class SocialLinks(BaseModel):
    linkedin: str | None = None
    facebook: str | None = None
    twitter: str | None = None

class CompanyIn(BaseModel):
    company_name: str = Field(min_length=1)
    description: str | None = None
    industry: str | None = None
    company_size: CompanySize | None = None
    website: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    phone: str | None = None
    email: EmailStr | None = None
    social_links: SocialLinks | None = None

class CompanyUpdate(CompanyIn):
    company_name: str | None = Field(None, min_length=1)

class CompanyOut(BaseModel):
    id: int
    employer_id: int
    company_name: str
    logo_url: str | None = None
    description: str | None = None
    industry: str | None = None
    company_size: str | None = None
    website: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    phone: str | None = None
    email: str | None = None
    social_links: dict = Field(default_factory=dict)
    is_verified: bool
    verification_status: str
    verified_at: datetime | None = None
    total_jobs: int
    total_followers: int
    created_at: datetime

    model_config = {"from_attributes": True}

class CompanyVerify(BaseModel):
    status: Literal["verified", "rejected"]


# Jobs
class JobIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    requirements: str | None = None
    responsibilities: str | None = None
    city: str | None = None
    country: str | None = None
    is_remote: bool = False
    salary_min: int | None = Field(None, ge=0)
    salary_max: int | None = Field(None, ge=0)
    currency: str = "VND"
    is_negotiable: bool = False
    work_mode: WorkMode = "onsite"
    job_type: JobType = "fulltime"
    experience_level: ExperienceLevel | None = None
    category: str | None = None
    skills: list[str] = Field(default_factory=list)
    status: JobStatus = JobStatus.OPEN.value
    deadline: datetime | None = None

    model_config = {"use_enum_values": True}

class JobUpdate(BaseModel):
    title: str | None = Field(None, min_length=1)
    description: str | None = Field(None, min_length=1)
    requirements: str | None = None
    responsibilities: str | None = None
    city: str | None = None
    country: str | None = None
    is_remote: bool | None = None
    salary_min: int | None = Field(None, ge=0)
    salary_max: int | None = Field(None, ge=0)
    currency: str | None = None
    is_negotiable: bool | None = None
    work_mode: WorkMode | None = None
    job_type: JobType | None = None
    experience_level: ExperienceLevel | None = None
    category: str | None = None
    skills: list[str] | None = None
    deadline: datetime | None = None

class JobStatusUpdate(BaseModel):
    status: JobStatus

    model_config = {"use_enum_values": True}

class JobOut(BaseModel):
    id: int
    employer_id: int
    company_id: int
    title: str
    description: str
    requirements: str | None = None
    responsibilities: str | None = None
    city: str | None = None
    country: str | None = None
    is_remote: bool
    salary_min: int | None = None
    salary_max: int | None = None
    currency: str
    is_negotiable: bool
    work_mode: str
    job_type: str
    experience_level: str | None = None
    category: str | None = None
    skills: list[str] = Field(default_factory=list)
    status: str
    deadline: datetime | None = None
    total_applications: int
    total_views: int
    created_at: datetime
    company: CompanyBrief | None = None

    model_config = {"from_attributes": True}

class CompanyDetailOut(BaseModel):
    info: CompanyOut
    jobs: list[JobOut]


# Applications
class ApplyIn(BaseModel):
    resume_id: str | None = None
    cover_letter: str | None = None

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    employer_notes: str | None = None

    model_config = {"use_enum_values": True}

class ApplicantOut(BaseModel):
    id: int
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    phone: str | None = None
    location: str | None = None
    skills: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}

class ApplicationOut(BaseModel):
    id: int
    job_id: int
    job_seeker_id: int
    employer_id: int
    resume_id: str | None = None
    cover_letter: str | None = None
    status: str
    applied_at: datetime
    reviewed_at: datetime | None = None
    updated_status_at: datetime | None = None
    employer_notes: str | None = None

    model_config = {"from_attributes": True}

class ApplicationWithJobOut(ApplicationOut):
    job: JobOut

class ApplicationWithApplicantOut(ApplicationOut):
    job_seeker: ApplicantOut

class EmployerStats(BaseModel):
    total_jobs: int
    active_jobs: int
    total_applications: int
    pending_applications: int


# Saved jobs / follows
class SaveJobIn(BaseModel):
    job_id: int

class SavedJobOut(BaseModel):
    id: int
    job_id: int
    saved_at: datetime
    job: JobOut

    model_config = {"from_attributes": True}

class FollowOut(BaseModel):
    id: int
    company_id: int
    followed_at: datetime
    company: CompanyOut

    model_config = {"from_attributes": True}


# Notifications
class NotificationOut(BaseModel):
    id: int
    type: str
    title: str
    message: str
    link: str | None = None
    is_read: bool
    read_at: datetime | None = None
    related_job_id: int | None = None
    related_application_id: int | None = None
    related_company_id: int | None = None
    created_at: datetime

    model_config = {"from_attributes": True}

class NotificationPage(Page[NotificationOut]):
    unread_count: int


# Job alerts
class JobAlertIn(BaseModel):
    name: str = Field(min_length=1)
    keywords: list[str] = Field(default_factory=list)
    location: str | None = None
    job_types: list[str] = Field(default_factory=list)
    salary_min: int | None = Field(None, ge=0)
    category: str | None = None
    experience_level: ExperienceLevel | None = None
    frequency: Literal["instant", "daily", "weekly"] = "daily"

class JobAlertUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    keywords: list[str] | None = None
    location: str | None = None
    job_types: list[str] | None = None
    salary_min: int | None = Field(None, ge=0)
    category: str | None = None
    experience_level: ExperienceLevel | None = None
    is_active: bool | None = None
    frequency: Literal["instant", "daily", "weekly"] | None = None

class JobAlertOut(BaseModel):
    id: int
    name: str
    keywords: list[str]
    location: str | None = None
    job_types: list[str]
    salary_min: int | None = None
    category: str | None = None
    experience_level: str | None = None
    is_active: bool
    frequency: str
    last_sent: datetime | None = None
    total_jobs_found: int
    created_at: datetime

    model_config = {"from_attributes": True}


# Admin
class AdminToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin_id: int
    name: str

class AdminUserOut(BaseModel):
    id: int
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    role: str
    is_active: bool
    company: CompanyBrief | None = None
    created_at: datetime

    model_config = {"from_attributes": True}

class UserStatusUpdate(BaseModel):
    is_active: bool

class ReportIn(BaseModel):
    target_type: Literal["user", "job", "company"] = "user"
    target_id: int
    reason: str = Field(min_length=1)
    description: str | None = None

class ReportReview(BaseModel):
    status: Literal["pending", "reviewed", "resolved", "dismissed"]
    action_taken: str | None = None

class ReportOut(BaseModel):
    id: int
    reporter_id: int
    target_type: str
    target_id: int
    reason: str
    description: str | None = None
    status: str
    reviewed_by_id: int | None = None
    reviewed_at: datetime | None = None
    action_taken: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}

class AdminStats(BaseModel):
    total_users: int
    total_job_seekers: int
    total_employers: int
    total_companies: int
    verified_companies: int
    pending_reports: int
