"""initial booking schema

Revision ID: a1f3c9d2e7b4
Revises:
Create Date: 2026-10-19 10:12:41.305518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'a1f3c9d2e7b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Service catalog
    op.create_table(
        'services',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('price_max', sa.Numeric(10, 2), nullable=True),
        sa.Column('duration', sa.Integer, nullable=False, server_default='0'),
        sa.Column('is_addon', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('display_order', sa.Integer, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_services_is_addon', 'services', ['is_addon'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])

    # 2. Open hours and blocked time
    op.create_table(
        'availability',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('day', sa.Date, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('start_time < end_time', name='ck_availability_start_before_end')
    )
    op.create_index('ix_availability_day', 'availability', ['day'])

    op.create_table(
        'blocked_times',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('day', sa.Date, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('reason', sa.String, nullable=True),
        sa.Column('source', sa.String, nullable=False, server_default='admin'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('start_time < end_time', name='ck_blocked_times_start_before_end')
    )
    op.create_index('ix_blocked_times_day', 'blocked_times', ['day'])

    # 3. Bookings
    op.create_table(
        'bookings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('service_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('time', sa.Time, nullable=False),
        sa.Column('duration_minutes', sa.Integer, nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('client_name', sa.String, nullable=False),
        sa.Column('client_email', sa.String, nullable=False),
        sa.Column('client_phone', sa.String, nullable=False),
        sa.Column('language', sa.String(5), server_default='en'),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('custom_request', sa.Text, nullable=True),
        sa.Column('custom_image', sa.String, nullable=True),
        sa.Column('status', sa.String, nullable=False, server_default='active'),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('google_event_id', sa.String, nullable=True),
        sa.Column('sync_status', sa.String, server_default='pending'),
        sa.Column('sync_attempts', sa.Integer, server_default='0'),
        sa.Column('last_sync_error', sa.Text, nullable=True),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_bookings_service_id', 'bookings', ['service_id'])
    op.create_index('ix_bookings_date', 'bookings', ['date'])
    op.create_index('ix_bookings_token', 'bookings', ['token'], unique=True)

    # One active booking per start time
    op.create_index(
        'uq_bookings_active_slot', 'bookings', ['date', 'time'],
        unique=True, postgresql_where=sa.text("status = 'active'")
    )

    op.create_table(
        'booking_addons',
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('bookings.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('addon_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('services.id', ondelete='CASCADE'), primary_key=True)
    )

    # 4. Dashboard admins
    op.create_table(
        'admin_users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True)
    )
    op.create_index('ix_admin_users_username', 'admin_users', ['username'], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_admin_users_username', table_name='admin_users')
    op.drop_table('admin_users')

    op.drop_table('booking_addons')

    op.drop_index('uq_bookings_active_slot', table_name='bookings')
    op.drop_index('ix_bookings_token', table_name='bookings')
    op.drop_index('ix_bookings_date', table_name='bookings')
    op.drop_index('ix_bookings_service_id', table_name='bookings')
    op.drop_table('bookings')

    op.drop_index('ix_blocked_times_day', table_name='blocked_times')
    op.drop_table('blocked_times')

    op.drop_index('ix_availability_day', table_name='availability')
    op.drop_table('availability')

    op.drop_index('ix_services_is_active', table_name='services')
    op.drop_index('ix_services_is_addon', table_name='services')
    op.drop_table('services')
