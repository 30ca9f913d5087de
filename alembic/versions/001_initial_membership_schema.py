"""initial membership schema

Revision ID: 001_initial_membership_schema
Revises:
Create Date: 2025-06-02 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_membership_schema'
down_revision = None
branch_labels = None
depends_on = None

application_status = sa.Enum('pending', 'approved', 'rejected', 'under_review', name='application_status')
payment_status = sa.Enum('pending', 'paid', 'not_paid', name='payment_status')
membership_type = sa.Enum('existing', 'new', name='membership_type')
user_role = sa.Enum('member', 'admin', name='user_role')
admin_role = sa.Enum('super_admin', 'membership_admin', 'content_admin', name='admin_role')


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
    ]


def profile_columns():
    return [
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('middle_name', sa.String(length=255), nullable=True),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('area_of_specialty', sa.Text(), nullable=True),
        sa.Column('phone_number', sa.String(length=255), nullable=True),
        sa.Column('street_address', sa.Text(), nullable=True),
        sa.Column('permanent_address', sa.Text(), nullable=True),
        sa.Column('mdcn_registration_number', sa.String(length=255), nullable=True),
        sa.Column('year_qualified_mbbs', sa.Integer(), nullable=True),
        sa.Column('additional_qualification_mdcn', sa.String(length=255), nullable=True),
        sa.Column('year_qualified_urologist', sa.Integer(), nullable=True),
        sa.Column('current_practice', sa.String(length=255), nullable=True),
        sa.Column('next_of_kin_name', sa.String(length=255), nullable=True),
        sa.Column('next_of_kin_phone', sa.String(length=255), nullable=True),
        sa.Column('next_of_kin_email', sa.String(length=255), nullable=True),
        sa.Column('fellowship_college', sa.String(length=255), nullable=True),
        sa.Column('fwacs', sa.Boolean(), nullable=True),
        sa.Column('fmcs', sa.Boolean(), nullable=True),
        sa.Column('facs', sa.Boolean(), nullable=True),
        sa.Column('frcs', sa.Boolean(), nullable=True),
        sa.Column('others', sa.Boolean(), nullable=True),
        sa.Column('qualification_year', sa.Integer(), nullable=True),
        sa.Column('additional_qualification', sa.String(length=255), nullable=True),
        sa.Column('residency_training', sa.Text(), nullable=True),
        sa.Column('foreign_institution', sa.String(length=255), nullable=True),
        sa.Column('conference_attended', sa.String(length=255), nullable=True),
        sa.Column('declaration', sa.Text(), nullable=True),
        sa.Column('declaration_date', sa.Date(), nullable=True),
        sa.Column('mbbs_certificate', sa.String(length=500), nullable=True),
        sa.Column('fellowship_certificate', sa.String(length=500), nullable=True),
    ]


def upgrade() -> None:
    op.create_table('applications',
        sa.Column('id', sa.Integer(), nullable=False),
        *profile_columns(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('status', application_status, nullable=False),
        sa.Column('payment_status', payment_status, nullable=False),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('membership_number', sa.String(length=50), nullable=True),
        *timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_applications_id', 'applications', ['id'])
    op.create_index('ix_applications_email', 'applications', ['email'], unique=True)
    op.create_index('ix_applications_status', 'applications', ['status'])
    op.create_index('ix_applications_membership_number', 'applications', ['membership_number'])

    op.create_table('members',
        sa.Column('id', sa.Integer(), nullable=False),
        *profile_columns(),
        sa.Column('membership_number', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('joined_date', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('membership_type', membership_type, nullable=False),
        sa.Column('has_account', sa.Boolean(), nullable=False),
        sa.Column('account_created', sa.DateTime(timezone=True), nullable=True),
        sa.Column('profile_photo', sa.String(length=500), nullable=True),
        sa.Column('show_in_directory', sa.Boolean(), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_members_id', 'members', ['id'])
    op.create_index('ix_members_membership_number', 'members', ['membership_number'], unique=True)
    op.create_index('ix_members_email', 'members', ['email'], unique=True)

    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('membership_number', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('login_count', sa.Integer(), nullable=False),
        sa.Column('reset_password_token', sa.String(length=255), nullable=True),
        sa.Column('reset_password_expires', sa.DateTime(timezone=True), nullable=True),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        sa.Column('email_verification_token', sa.String(length=255), nullable=True),
        *timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_membership_number', 'users', ['membership_number'])
    op.create_index('ix_users_reset_password_token', 'users', ['reset_password_token'])

    op.create_table('admins',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', admin_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('login_count', sa.Integer(), nullable=False),
        sa.Column('reset_password_token', sa.String(length=255), nullable=True),
        sa.Column('reset_password_expires', sa.DateTime(timezone=True), nullable=True),
        *timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_admins_id', 'admins', ['id'])
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)
    op.create_index('ix_admins_reset_password_token', 'admins', ['reset_password_token'])

    op.create_table('membership_sequence_counters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('current_number', sa.Integer(), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_membership_sequence_counters_id', 'membership_sequence_counters', ['id'])
    op.create_index('ix_membership_sequence_counters_year', 'membership_sequence_counters', ['year'], unique=True)


def downgrade() -> None:
    op.drop_table('membership_sequence_counters')
    op.drop_table('admins')
    op.drop_table('users')
    op.drop_table('members')
    op.drop_table('applications')

    bind = op.get_bind()
    for enum_type in (admin_role, user_role, membership_type, payment_status, application_status):
        enum_type.drop(bind, checkfirst=True)
