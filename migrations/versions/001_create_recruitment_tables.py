"""Create recruitment workflow and letter tables

Revision ID: 001_create_recruitment_tables
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_create_recruitment_tables'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    """Create jobs, candidates, applications, offers, employees and letter tables"""

    op.create_table(
        'job_requirements',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('job_code', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('department', sa.String(255), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('employment_type', sa.String(50), nullable=True, server_default='FULL_TIME'),
        sa.Column('openings', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='OPEN'),
    )
    op.create_index('ix_job_requirements_tenant_id', 'job_requirements', ['tenant_id'])
    op.create_index('idx_job_requirement_code', 'job_requirements', ['tenant_id', 'job_code'], unique=True)
    op.create_index('idx_job_requirement_tenant_status', 'job_requirements', ['tenant_id', 'status'])

    op.create_table(
        'candidates',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('mobile', sa.String(20), nullable=True),
        sa.Column('father_name', sa.String(200), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('current_designation', sa.String(200), nullable=True),
        sa.Column('resume_path', sa.String(500), nullable=True),
    )
    op.create_index('ix_candidates_tenant_id', 'candidates', ['tenant_id'])
    op.create_index('idx_candidate_tenant_email', 'candidates', ['tenant_id', 'email'], unique=True)

    op.create_table(
        'applications',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('application_code', sa.String(20), nullable=False),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('job_requirements.id', ondelete='CASCADE'), nullable=False),
        sa.Column('candidate_id', sa.Integer(), sa.ForeignKey('candidates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('candidate_info', sa.JSON(), nullable=False),
        sa.Column('source', sa.String(30), nullable=False, server_default='CAREER_PORTAL'),
        sa.Column('priority', sa.String(20), nullable=False, server_default='MEDIUM'),
        sa.Column('notes', sa.Text(), nullable=True),

        # Status
        sa.Column('status', sa.String(20), nullable=False, server_default='APPLIED'),
        sa.Column('previous_status', sa.String(20), nullable=True),
        sa.Column('status_changed_at', sa.DateTime(), nullable=True),
        sa.Column('status_changed_by', sa.String(255), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_by', sa.String(255), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('rejection_stage', sa.String(20), nullable=True),
        sa.Column('withdrawn_at', sa.DateTime(), nullable=True),
        sa.Column('withdrawal_reason', sa.Text(), nullable=True),

        # Interviews
        sa.Column('total_interview_rounds', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed_interview_rounds', sa.Integer(), nullable=False, server_default='0'),

        # Offer and employee links
        sa.Column('offer_id', sa.Integer(), nullable=True),
        sa.Column('offer_status', sa.String(20), nullable=True),
        sa.Column('employee_id', sa.Integer(), nullable=True),

        # Letter fields
        sa.Column('offer_letter_path', sa.String(500), nullable=True),
        sa.Column('offer_ref_code', sa.String(100), nullable=True),
        sa.Column('joining_letter_path', sa.String(500), nullable=True),
        sa.Column('joining_date', sa.Date(), nullable=True),
        sa.Column('designation', sa.String(200), nullable=True),
        sa.Column('department', sa.String(200), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('father_name', sa.String(200), nullable=True),
    )
    op.create_index('ix_applications_tenant_id', 'applications', ['tenant_id'])
    op.create_index('ix_applications_job_id', 'applications', ['job_id'])
    op.create_index('ix_applications_candidate_id', 'applications', ['candidate_id'])
    op.create_index('idx_application_unique', 'applications', ['tenant_id', 'job_id', 'candidate_id'], unique=True)
    op.create_index('idx_application_code', 'applications', ['tenant_id', 'application_code'], unique=True)
    op.create_index('idx_application_tenant_status', 'applications', ['tenant_id', 'status'])

    op.create_table(
        'status_history',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('entity_type', sa.String(20), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('from_status', sa.String(20), nullable=True),
        sa.Column('to_status', sa.String(20), nullable=False),
        sa.Column('changed_by', sa.String(255), nullable=True),
        sa.Column('changed_by_id', sa.Integer(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
    )
    op.create_index('ix_status_history_tenant_id', 'status_history', ['tenant_id'])
    op.create_index('idx_status_history_entity', 'status_history', ['tenant_id', 'entity_type', 'entity_id'])

    op.create_table(
        'interviews',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('round_name', sa.String(100), nullable=True),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('scheduled_time', sa.String(20), nullable=True),
        sa.Column('mode', sa.String(20), nullable=False, server_default='IN_PERSON'),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('interviewer_name', sa.String(255), nullable=True),
        sa.Column('interviewer_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='SCHEDULED'),
        sa.Column('result', sa.String(20), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by_id', sa.Integer(), nullable=True),
    )
    op.create_index('ix_interviews_tenant_id', 'interviews', ['tenant_id'])
    op.create_index('idx_interview_round', 'interviews', ['application_id', 'round_number'], unique=True)

    op.create_table(
        'salary_structures',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('earnings', sa.JSON(), nullable=False),
        sa.Column('deductions', sa.JSON(), nullable=False),
        sa.Column('employer_benefits', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_salary_structures_tenant_id', 'salary_structures', ['tenant_id'])
    op.create_index('idx_salary_structure_name', 'salary_structures', ['tenant_id', 'name'], unique=True)

    op.create_table(
        'salary_snapshots',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('structure_id', sa.Integer(), sa.ForeignKey('salary_structures.id', ondelete='SET NULL'), nullable=True),
        sa.Column('earnings', sa.JSON(), nullable=False),
        sa.Column('deductions', sa.JSON(), nullable=False),
        sa.Column('employer_benefits', sa.JSON(), nullable=False),
        sa.Column('totals', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.String(255), nullable=True),
    )
    op.create_index('ix_salary_snapshots_tenant_id', 'salary_snapshots', ['tenant_id'])
    op.create_index('ix_salary_snapshots_application_id', 'salary_snapshots', ['application_id'])

    op.create_table(
        'offers',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('offer_code', sa.String(20), nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('candidate_id', sa.Integer(), nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=False),
        sa.Column('salary_snapshot_id', sa.Integer(), sa.ForeignKey('salary_snapshots.id'), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='DRAFT'),

        # Terms
        sa.Column('designation', sa.String(200), nullable=True),
        sa.Column('department', sa.String(200), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('joining_date', sa.Date(), nullable=True),
        sa.Column('valid_until', sa.DateTime(), nullable=False),
        sa.Column('probation_months', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('notice_period_days', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('working_days', sa.String(100), nullable=False, server_default='Monday to Friday'),
        sa.Column('working_hours', sa.String(100), nullable=False, server_default='9:00 AM to 6:00 PM'),
        sa.Column('benefits', sa.JSON(), nullable=False),
        sa.Column('special_terms', sa.Text(), nullable=True),

        # Lifecycle
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('accepted_via', sa.String(20), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('withdrawn_at', sa.DateTime(), nullable=True),
        sa.Column('withdrawal_reason', sa.Text(), nullable=True),
        sa.Column('expired_at', sa.DateTime(), nullable=True),
        sa.Column('employee_id', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.String(255), nullable=True),
    )
    op.create_index('ix_offers_tenant_id', 'offers', ['tenant_id'])
    op.create_index('idx_offer_application', 'offers', ['tenant_id', 'application_id'], unique=True)
    op.create_index('idx_offer_code', 'offers', ['tenant_id', 'offer_code'], unique=True)
    op.create_index('idx_offer_tenant_status', 'offers', ['tenant_id', 'status'])

    op.create_table(
        'employees',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('employee_code', sa.String(20), nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('offer_id', sa.Integer(), sa.ForeignKey('offers.id'), nullable=False),
        sa.Column('candidate_id', sa.Integer(), nullable=False),
        sa.Column('salary_snapshot_id', sa.Integer(), sa.ForeignKey('salary_snapshots.id'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('mobile', sa.String(20), nullable=True),
        sa.Column('designation', sa.String(200), nullable=True),
        sa.Column('department', sa.String(200), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('joining_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='ACTIVE'),
    )
    op.create_index('ix_employees_tenant_id', 'employees', ['tenant_id'])
    op.create_index('idx_employee_offer', 'employees', ['tenant_id', 'offer_id'], unique=True)
    op.create_index('idx_employee_code', 'employees', ['tenant_id', 'employee_code'], unique=True)

    op.create_table(
        'letter_templates',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('letter_type', sa.String(20), nullable=False),
        sa.Column('template_type', sa.String(20), nullable=False, server_default='WORD'),
        sa.Column('file_path', sa.String(500), nullable=True),
        sa.Column('original_filename', sa.String(255), nullable=True),
        sa.Column('body_content', sa.Text(), nullable=True),
        sa.Column('placeholders', sa.JSON(), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', sa.String(255), nullable=True),
    )
    op.create_index('ix_letter_templates_tenant_id', 'letter_templates', ['tenant_id'])
    op.create_index('idx_letter_template_tenant_type', 'letter_templates', ['tenant_id', 'letter_type', 'is_active'])

    op.create_table(
        'generated_letters',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('template_id', sa.Integer(), sa.ForeignKey('letter_templates.id', ondelete='SET NULL'), nullable=True),
        sa.Column('letter_type', sa.String(20), nullable=False),
        sa.Column('template_type', sa.String(20), nullable=False),
        sa.Column('docx_path', sa.String(500), nullable=True),
        sa.Column('pdf_path', sa.String(500), nullable=False),
        sa.Column('pdf_url', sa.String(500), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='generated'),
        sa.Column('generated_by', sa.String(255), nullable=True),
        sa.Column('snapshot_data', sa.JSON(), nullable=False),
    )
    op.create_index('ix_generated_letters_tenant_id', 'generated_letters', ['tenant_id'])
    op.create_index('idx_generated_letter_application', 'generated_letters', ['tenant_id', 'application_id'])


def downgrade():
    """Drop all recruitment workflow and letter tables"""
    op.drop_table('generated_letters')
    op.drop_table('letter_templates')
    op.drop_table('employees')
    op.drop_table('offers')
    op.drop_table('salary_snapshots')
    op.drop_table('salary_structures')
    op.drop_table('interviews')
    op.drop_table('status_history')
    op.drop_table('applications')
    op.drop_table('candidates')
    op.drop_table('job_requirements')
