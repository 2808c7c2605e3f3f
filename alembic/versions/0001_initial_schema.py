"""initial jobmatch schema

Revision ID: 0001_initial
Revises:
Create Date: 2025-09-01

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*names):
    return [sa.Column(name, sa.DateTime(timezone=True), nullable=False) for name in names]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_email_verified', sa.Boolean(), nullable=False),
        sa.Column('first_name', sa.String(128), nullable=True),
        sa.Column('last_name', sa.String(128), nullable=True),
        sa.Column('avatar_url', sa.String(2048), nullable=True),
        sa.Column('phone', sa.String(64), nullable=True),
        sa.Column('location', sa.String(256), nullable=True),
        sa.Column('date_of_birth', sa.DateTime(timezone=True), nullable=True),
        sa.Column('gender', sa.String(16), nullable=True),
        sa.Column('date_joined_workforce', sa.DateTime(timezone=True), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        *[sa.Column(name, sa.JSON(), nullable=False) for name in (
            'experiences', 'education', 'certificates', 'awards', 'others',
            'resumes', 'skills', 'interests', 'settings',
        )],
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'admins',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('is_super', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)

    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('employer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_name', sa.String(256), nullable=False),
        sa.Column('logo_url', sa.String(2048), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('industry', sa.String(128), nullable=True),
        sa.Column('company_size', sa.String(16), nullable=True),
        sa.Column('website', sa.String(2048), nullable=True),
        sa.Column('address', sa.String(512), nullable=True),
        sa.Column('city', sa.String(128), nullable=True),
        sa.Column('country', sa.String(128), nullable=True),
        sa.Column('phone', sa.String(64), nullable=True),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('social_links', sa.JSON(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('verification_status', sa.String(16), nullable=False),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_jobs', sa.Integer(), nullable=False),
        sa.Column('total_followers', sa.Integer(), nullable=False),
        *_timestamps('created_at', 'updated_at'),
    )
    op.create_index('ix_companies_employer_id', 'companies', ['employer_id'], unique=True)

    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('employer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('requirements', sa.Text(), nullable=True),
        sa.Column('responsibilities', sa.Text(), nullable=True),
        sa.Column('city', sa.String(128), nullable=True),
        sa.Column('country', sa.String(128), nullable=True),
        sa.Column('is_remote', sa.Boolean(), nullable=False),
        sa.Column('salary_min', sa.Integer(), nullable=True),
        sa.Column('salary_max', sa.Integer(), nullable=True),
        sa.Column('currency', sa.String(8), nullable=False),
        sa.Column('is_negotiable', sa.Boolean(), nullable=False),
        sa.Column('work_mode', sa.String(16), nullable=False),
        sa.Column('job_type', sa.String(16), nullable=False),
        sa.Column('experience_level', sa.String(16), nullable=True),
        sa.Column('category', sa.String(128), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_applications', sa.Integer(), nullable=False),
        sa.Column('total_views', sa.Integer(), nullable=False),
        *_timestamps('created_at', 'updated_at'),
    )
    op.create_index('ix_jobs_employer_id', 'jobs', ['employer_id'])
    op.create_index('ix_jobs_company_id', 'jobs', ['company_id'])
    op.create_index('ix_jobs_status_deadline', 'jobs', ['status', 'deadline'])

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('job_seeker_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('employer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('resume_id', sa.String(64), nullable=True),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('applied_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_status_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('employer_notes', sa.Text(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.UniqueConstraint('job_id', 'job_seeker_id', name='uq_applications_job_seeker'),
    )
    op.create_index('ix_applications_job_id', 'applications', ['job_id'])
    op.create_index('ix_applications_job_seeker_id', 'applications', ['job_seeker_id'])
    op.create_index('ix_applications_employer_id', 'applications', ['employer_id'])
    op.create_index('ix_applications_seeker_status', 'applications', ['job_seeker_id', 'status'])
    op.create_index('ix_applications_employer_status', 'applications', ['employer_id', 'status'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('recipient_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('title', sa.String(256), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('link', sa.String(2048), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('related_job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='SET NULL'), nullable=True),
        sa.Column(
            'related_application_id', sa.Integer(),
            sa.ForeignKey('applications.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column(
            'related_company_id', sa.Integer(),
            sa.ForeignKey('companies.id', ondelete='SET NULL'), nullable=True,
        ),
        *_timestamps('created_at'),
    )
    op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])
    op.create_index(
        'ix_notifications_recipient_read', 'notifications', ['recipient_id', 'is_read', 'created_at']
    )

    op.create_table(
        'saved_jobs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('job_seeker_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        *_timestamps('saved_at'),
        sa.UniqueConstraint('job_seeker_id', 'job_id', name='uq_saved_jobs_seeker_job'),
    )
    op.create_index('ix_saved_jobs_job_seeker_id', 'saved_jobs', ['job_seeker_id'])

    op.create_table(
        'follow_companies',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('job_seeker_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        *_timestamps('followed_at'),
        sa.UniqueConstraint('job_seeker_id', 'company_id', name='uq_follow_companies_seeker_company'),
    )
    op.create_index('ix_follow_companies_job_seeker_id', 'follow_companies', ['job_seeker_id'])

    op.create_table(
        'job_alerts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('job_seeker_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(256), nullable=False),
        sa.Column('keywords', sa.JSON(), nullable=False),
        sa.Column('location', sa.String(256), nullable=True),
        sa.Column('job_types', sa.JSON(), nullable=False),
        sa.Column('salary_min', sa.Integer(), nullable=True),
        sa.Column('category', sa.String(128), nullable=True),
        sa.Column('experience_level', sa.String(16), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('frequency', sa.String(16), nullable=False),
        sa.Column('last_sent', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_jobs_found', sa.Integer(), nullable=False),
        *_timestamps('created_at'),
    )
    op.create_index('ix_job_alerts_job_seeker_id', 'job_alerts', ['job_seeker_id'])
    op.create_index('ix_job_alerts_seeker_active', 'job_alerts', ['job_seeker_id', 'is_active'])

    op.create_table(
        'reports',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('reporter_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('target_type', sa.String(16), nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('reviewed_by_id', sa.Integer(), sa.ForeignKey('admins.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('action_taken', sa.Text(), nullable=True),
        *_timestamps('created_at'),
    )
    op.create_index('ix_reports_reporter_id', 'reports', ['reporter_id'])
    op.create_index('ix_reports_target_status', 'reports', ['target_id', 'status'])


def downgrade() -> None:
    # Children first so foreign keys never dangle
    for table in (
        'reports', 'job_alerts', 'follow_companies', 'saved_jobs', 'notifications',
        'applications', 'jobs', 'companies', 'admins', 'users',
    ):
        op.drop_table(table)
