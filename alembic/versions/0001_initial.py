"""Initial POS schema

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19

Compatible with SQLite and PostgreSQL:
- CURRENT_TIMESTAMP server defaults
- ENUMs stored as VARCHAR (native_enum=False in models)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Create all tables."""

    op.create_table('users',
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=7), server_default='cashier', nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_created_at'), 'users', ['created_at'], unique=False)

    op.create_table('items',
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('buy_price', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('price', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_items_name'), 'items', ['name'], unique=False)
    op.create_index(op.f('ix_items_created_at'), 'items', ['created_at'], unique=False)

    op.create_table('transactions',
        sa.Column('status', sa.String(length=9), nullable=False),
        sa.Column('total', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('discount', sa.Numeric(precision=15, scale=2), server_default='0', nullable=False),
        sa.Column('payment', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('change', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('payment_type', sa.String(length=6), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('transaction_type', sa.String(length=50), server_default='onsite', nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_transaction_user_id'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_transaction_status_created', 'transactions', ['status', 'created_at'], unique=False)
    op.create_index('idx_transaction_payment_type', 'transactions', ['payment_type'], unique=False)
    op.create_index(op.f('ix_transactions_user_id'), 'transactions', ['user_id'], unique=False)
    op.create_index(op.f('ix_transactions_created_at'), 'transactions', ['created_at'], unique=False)

    op.create_table('transaction_items',
        sa.Column('transaction_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=15, scale=2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id'], name='fk_transaction_item_transaction_id'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], name='fk_transaction_item_item_id'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_transaction_items_transaction_id'), 'transaction_items', ['transaction_id'], unique=False)
    op.create_index(op.f('ix_transaction_items_item_id'), 'transaction_items', ['item_id'], unique=False)
    op.create_index(op.f('ix_transaction_items_created_at'), 'transaction_items', ['created_at'], unique=False)

    op.create_table('cash_sessions',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=6), nullable=False),
        sa.Column('opening_cash', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('opened_at', sa.DateTime(), nullable=False),
        sa.Column('closing_cash', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('closed_at', sa.DateTime(), nullable=True),
        sa.Column('expected_cash', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('total_cash_in', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('total_change', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('difference', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_cash_session_user_id'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_cash_session_user_status', 'cash_sessions', ['user_id', 'status'], unique=False)
    op.create_index(op.f('ix_cash_sessions_opened_at'), 'cash_sessions', ['opened_at'], unique=False)
    op.create_index(op.f('ix_cash_sessions_created_at'), 'cash_sessions', ['created_at'], unique=False)

    op.create_table('audit_logs',
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=8), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('old_value', sa.JSON(), nullable=True),
        sa.Column('new_value', sa.JSON(), nullable=True),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_audit_log_user_id'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_audit_log_entity', 'audit_logs', ['entity_type', 'entity_id'], unique=False)
    op.create_index(op.f('ix_audit_logs_created_at'), 'audit_logs', ['created_at'], unique=False)

    op.create_table('attendance',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=7), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_attendance_user_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'date', name='uq_attendance_user_date')
    )
    op.create_index(op.f('ix_attendance_user_id'), 'attendance', ['user_id'], unique=False)
    op.create_index(op.f('ix_attendance_date'), 'attendance', ['date'], unique=False)
    op.create_index(op.f('ix_attendance_created_at'), 'attendance', ['created_at'], unique=False)


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('attendance')
    op.drop_table('audit_logs')
    op.drop_table('cash_sessions')
    op.drop_table('transaction_items')
    op.drop_table('transactions')
    op.drop_table('items')
    op.drop_table('users')
