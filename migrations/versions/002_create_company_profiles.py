"""Create company profiles

Revision ID: 002_create_company_profiles
Revises: 001_create_recruitment_tables
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '002_create_company_profiles'
down_revision = '001_create_recruitment_tables'
branch_labels = None
depends_on = None


def upgrade():
    """Create the per-tenant company profile table"""
    op.create_table(
        'company_profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('signatory_name', sa.String(255), nullable=True),
        sa.Column('signatory_designation', sa.String(255), nullable=True),
        sa.Column('branding', sa.JSON(), nullable=False),
    )
    op.create_index('ix_company_profiles_tenant_id', 'company_profiles', ['tenant_id'], unique=True)


def downgrade():
    """Drop the company profile table"""
    op.drop_table('company_profiles')
