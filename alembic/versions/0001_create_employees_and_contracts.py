"""Create employees and contracts tables

Revision ID: 0001_create_employees_and_contracts
Revises:
Create Date: 2026-10-16
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_create_employees_and_contracts'
down_revision = None
branch_labels = None
depends_on = None

DELEGATION_COLUMNS = (
    'delegation_auto_insurance',
    'delegation_personal_insurance',
    'delegation_workers_comp',
    'delegation_disability_pension',
    'delegation_employer_liability',
    'delegation_school_safety',
    'delegation_other',
)


def upgrade():
    op.create_table(
        'employees',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('auth_user_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('dob', sa.Date(), nullable=False),
        sa.Column('pin_hash', sa.String(100), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='staff'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('name', 'dob', name='employees_name_dob_unique'),
    )
    op.create_index('ix_employees_auth_user_id', 'employees', ['auth_user_id'], unique=True)

    op.create_table(
        'contracts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('created_by', sa.String(36), nullable=False),
        sa.Column('employee_name', sa.String(100), nullable=False),
        sa.Column('contract_type', sa.String(100)),
        # Customer
        sa.Column('customer_name', sa.String(100), nullable=False),
        sa.Column('victim_or_insured', sa.String(100)),
        sa.Column('beneficiary_name', sa.String(100)),
        sa.Column('customer_gender', sa.String(20)),
        sa.Column('customer_phone', sa.String(50)),
        sa.Column('customer_dob', sa.Date()),
        sa.Column('customer_address', sa.Text()),
        sa.Column('relation_to_party', sa.String(100)),
        # Accident
        sa.Column('accident_date', sa.Date()),
        sa.Column('accident_location', sa.Text()),
        sa.Column('accident_summary', sa.Text()),
        # Delegated claim areas
        *[
            sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false())
            for name in DELEGATION_COLUMNS
        ],
        sa.Column('delegation_other_text', sa.Text()),
        # Fees
        sa.Column('upfront_fee_ten_thousand', sa.Integer()),
        sa.Column('admin_fee_percent', sa.Numeric(5, 2)),
        sa.Column('adjuster_fee_percent', sa.Numeric(5, 2)),
        sa.Column('fee_notes', sa.Text()),
        sa.Column('content', sa.Text()),
        sa.Column('consent_personal_info', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('consent_required_terms', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('signature_data_url', sa.Text()),
        sa.Column('confirmed', sa.Boolean(), nullable=False, server_default=sa.false()),
        # Written back by the Google sync
        sa.Column('drive_file_id', sa.String(255)),
        sa.Column('sheet_row_id', sa.String(20)),
        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_contracts_created_by', 'contracts', ['created_by'])


def downgrade():
    op.drop_index('ix_contracts_created_by', table_name='contracts')
    op.drop_table('contracts')
    op.drop_index('ix_employees_auth_user_id', table_name='employees')
    op.drop_table('employees')
