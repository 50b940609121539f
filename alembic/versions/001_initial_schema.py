"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('subscription_plan', sa.String(length=50), nullable=True),
        sa.Column('api_key_hash', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_api_key_hash'), 'users', ['api_key_hash'], unique=True)

    # Create usage_ledger table
    op.create_table(
        'usage_ledger',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('identity', sa.String(length=64), nullable=False),
        sa.Column('session_id', sa.String(length=128), nullable=False),
        sa.Column('regular_monthly_count', sa.Integer(), nullable=False),
        sa.Column('raw_monthly_count', sa.Integer(), nullable=False),
        sa.Column('monthly_bandwidth_bytes', sa.BigInteger(), nullable=False),
        sa.Column('monthly_window_started_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('identity', 'session_id', name='uq_usage_ledger_identity_session'),
        sa.CheckConstraint('regular_monthly_count >= 0', name='ck_usage_ledger_regular_non_negative'),
        sa.CheckConstraint('raw_monthly_count >= 0', name='ck_usage_ledger_raw_non_negative'),
        sa.CheckConstraint('monthly_bandwidth_bytes >= 0', name='ck_usage_ledger_bandwidth_non_negative'),
    )
    op.create_index(op.f('ix_usage_ledger_identity'), 'usage_ledger', ['identity'], unique=False)

    # Create operation_log table
    op.create_table(
        'operation_log',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('identity', sa.String(length=64), nullable=False),
        sa.Column('session_id', sa.String(length=128), nullable=False),
        sa.Column('event', sa.String(length=20), nullable=False),
        sa.Column('operation_category', sa.String(length=20), nullable=False),
        sa.Column('file_format', sa.String(length=20), nullable=False),
        sa.Column('file_size_mb', sa.Float(), nullable=False),
        sa.Column('page_context', sa.String(length=255), nullable=True),
        sa.Column('was_bypassed', sa.Boolean(), nullable=False),
        sa.Column('bypass_reason', sa.String(length=255), nullable=True),
        sa.Column('acting_administrator', sa.String(length=255), nullable=True),
        sa.Column('reason', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_operation_log_id'), 'operation_log', ['id'], unique=False)
    op.create_index(op.f('ix_operation_log_identity'), 'operation_log', ['identity'], unique=False)
    op.create_index(op.f('ix_operation_log_was_bypassed'), 'operation_log', ['was_bypassed'], unique=False)
    op.create_index(op.f('ix_operation_log_created_at'), 'operation_log', ['created_at'], unique=False)

    # Create app_settings table
    op.create_table(
        'app_settings',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.String(length=255), nullable=False),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade() -> None:
    op.drop_table('app_settings')

    op.drop_index(op.f('ix_operation_log_created_at'), table_name='operation_log')
    op.drop_index(op.f('ix_operation_log_was_bypassed'), table_name='operation_log')
    op.drop_index(op.f('ix_operation_log_identity'), table_name='operation_log')
    op.drop_index(op.f('ix_operation_log_id'), table_name='operation_log')
    op.drop_table('operation_log')

    op.drop_index(op.f('ix_usage_ledger_identity'), table_name='usage_ledger')
    op.drop_table('usage_ledger')

    op.drop_index(op.f('ix_users_api_key_hash'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
