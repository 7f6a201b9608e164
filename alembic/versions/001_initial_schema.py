"""Initial schema: users, rescues, pets, applications, coupons, transactions,
rescue requests and the audit log

Revision ID: 001
Revises:
Create Date: 2025-06-02 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')

user_role = sa.Enum('user', 'rescue', 'admin', name='user_role')
pet_species = sa.Enum('capybara', 'guinea_pig', 'rock_cavy', 'chinchilla', name='pet_species')
pet_size = sa.Enum('small', 'medium', 'large', 'extra_large', name='pet_size')
application_status = sa.Enum('pending', 'accepted', 'unsuccessful', name='application_status')
discount_type = sa.Enum('percentage', 'fixed_amount', name='discount_type')
coupon_applies_to = sa.Enum('rescue_fee', 'promotion', name='coupon_applies_to')
transaction_status = sa.Enum('success', 'pending', 'failure', 'error', name='transaction_status')
transaction_kind = sa.Enum('sale', 'refund', 'fee', 'free_promotion', name='transaction_kind')
rescue_request_status = sa.Enum('pending', 'approved', 'rejected', name='rescue_request_status')

ENUM_TYPES = (
    user_role,
    pet_species,
    pet_size,
    application_status,
    discount_type,
    coupon_applies_to,
    transaction_status,
    transaction_kind,
    rescue_request_status,
)


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Create rescues table
    op.create_table('rescues',
        *_base_columns(),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('website_url', sa.String(length=500), nullable=True),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        sa.Column('registration_number', sa.String(length=100), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_rescues_name', 'rescues', ['name'])

    # Create users table
    op.create_table('users',
        *_base_columns(),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', user_role, server_default='user', nullable=False),
        sa.Column('rescue_id', sa.Uuid(), nullable=True),
        sa.Column('profile_info', JSON_TYPE, nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reset_token_hash', sa.String(length=255), nullable=True),
        sa.Column('reset_token_expires', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['rescue_id'], ['rescues.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_rescue_id', 'users', ['rescue_id'])
    op.create_index('idx_users_role_rescue', 'users', ['role', 'rescue_id'])

    # Create pets table
    op.create_table('pets',
        *_base_columns(),
        sa.Column('reference_number', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('species', pet_species, nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('size', pet_size, nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('gallery', JSON_TYPE, nullable=False),
        sa.Column('rescue_id', sa.Uuid(), nullable=False),
        sa.Column('is_adopted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_promoted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('date_listed', sa.DateTime(timezone=True), nullable=False),
        sa.Column('internal_notes', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.CheckConstraint('age >= 0 AND age <= 30', name='ck_pets_age_range'),
        sa.ForeignKeyConstraint(['rescue_id'], ['rescues.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reference_number'),
    )
    op.create_index('ix_pets_species', 'pets', ['species'])
    op.create_index('ix_pets_size', 'pets', ['size'])
    op.create_index('ix_pets_rescue_id', 'pets', ['rescue_id'])
    op.create_index('idx_pets_rescue_adopted', 'pets', ['rescue_id', 'is_adopted'])
    op.create_index('idx_pets_species_size', 'pets', ['species', 'size'])
    op.create_index('idx_pets_promoted_listed', 'pets', ['is_promoted', 'date_listed'])

    # Create applications table
    op.create_table('applications',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('pet_id', sa.Uuid(), nullable=False),
        sa.Column('status', application_status, nullable=False),
        sa.Column('form_data', JSON_TYPE, nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['pet_id'], ['pets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_applications_user_id', 'applications', ['user_id'])
    op.create_index('ix_applications_pet_id', 'applications', ['pet_id'])
    op.create_index('ix_applications_status', 'applications', ['status'])
    op.create_index('idx_applications_pet_status', 'applications', ['pet_id', 'status'])

    # Create coupon_codes table
    op.create_table('coupon_codes',
        *_base_columns(),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('discount_type', discount_type, nullable=False),
        sa.Column('value', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('applies_to', coupon_applies_to, nullable=False),
        sa.Column('max_uses', sa.Integer(), nullable=True),
        sa.Column('times_used', sa.Integer(), nullable=False),
        sa.Column('expiry_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.CheckConstraint('value >= 0', name='ck_coupon_codes_value_non_negative'),
        sa.CheckConstraint('times_used >= 0', name='ck_coupon_codes_times_used'),
        sa.CheckConstraint('max_uses IS NULL OR max_uses > 0', name='ck_coupon_codes_max_uses'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )

    # Create transactions table
    op.create_table('transactions',
        *_base_columns(),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', transaction_status, nullable=False),
        sa.Column('kind', transaction_kind, nullable=False),
        sa.Column('gateway', sa.String(length=50), nullable=False),
        sa.Column('gateway_transaction_id', sa.String(length=100), nullable=False),
        sa.Column('payment_details', JSON_TYPE, nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('rescue_id', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['rescue_id'], ['rescues.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('gateway_transaction_id'),
    )
    op.create_index('ix_transactions_status', 'transactions', ['status'])
    op.create_index('ix_transactions_kind', 'transactions', ['kind'])
    op.create_index('ix_transactions_user_id', 'transactions', ['user_id'])
    op.create_index('ix_transactions_rescue_id', 'transactions', ['rescue_id'])
    op.create_index('idx_transactions_created', 'transactions', ['created_at'])

    # Create rescue_requests table
    op.create_table('rescue_requests',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('rescue_name', sa.String(length=150), nullable=False),
        sa.Column('rescue_location', sa.String(length=255), nullable=False),
        sa.Column('coupon_code', sa.String(length=50), nullable=True),
        sa.Column('required_fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('status', rescue_request_status, nullable=False),
        sa.Column('approval_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('rescue_id', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['rescue_id'], ['rescues.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_rescue_requests_user_id', 'rescue_requests', ['user_id'])
    op.create_index('ix_rescue_requests_status', 'rescue_requests', ['status'])

    # Create audit_logs table; user_id carries no foreign key
    op.create_table('audit_logs',
        *_base_columns(),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('entity_type', sa.String(length=50), nullable=True),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('details', JSON_TYPE, nullable=False),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'])
    op.create_index('idx_audit_logs_created', 'audit_logs', ['created_at'])


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_table('audit_logs')
    op.drop_table('rescue_requests')
    op.drop_table('transactions')
    op.drop_table('coupon_codes')
    op.drop_table('applications')
    op.drop_table('pets')
    op.drop_table('users')
    op.drop_table('rescues')

    # Drop enum types (PostgreSQL only)
    bind = op.get_bind()
    for enum_type in ENUM_TYPES:
        enum_type.drop(bind, checkfirst=True)
