"""Initial coordinator schema

Revision ID: 0001
Revises:
Create Date: 2025-10-19 12:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create staff_members table
    op.create_table('staff_members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('availability', sa.String(length=20), nullable=False),
        sa.Column('current_tour_status', sa.String(length=20), nullable=True),
        sa.Column('daily_availability', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("role IN ('tourGuide', 'safariDriver')", name='ck_staff_role_valid'),
        sa.CheckConstraint("availability IN ('Available', 'Busy')", name='ck_staff_availability_valid'),
        sa.CheckConstraint('version >= 0', name='ck_staff_version_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_staff_members_availability'), 'staff_members', ['availability'], unique=False)
    op.create_index(op.f('ix_staff_members_email'), 'staff_members', ['email'], unique=True)
    op.create_index(op.f('ix_staff_members_role'), 'staff_members', ['role'], unique=False)

    # Create tours table
    op.create_table('tours',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('booking_id', sa.String(length=64), nullable=False),
        sa.Column('preferred_date', sa.Date(), nullable=False),
        sa.Column('assigned_tour_guide', sa.Uuid(), nullable=True),
        sa.Column('assigned_driver', sa.Uuid(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('tour_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(booking_id) > 0', name='ck_tour_booking_id_not_empty'),
        sa.ForeignKeyConstraint(['assigned_driver'], ['staff_members.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['assigned_tour_guide'], ['staff_members.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tours_assigned_driver'), 'tours', ['assigned_driver'], unique=False)
    op.create_index(op.f('ix_tours_assigned_tour_guide'), 'tours', ['assigned_tour_guide'], unique=False)
    op.create_index(op.f('ix_tours_booking_id'), 'tours', ['booking_id'], unique=True)
    op.create_index(op.f('ix_tours_preferred_date'), 'tours', ['preferred_date'], unique=False)
    op.create_index(op.f('ix_tours_status'), 'tours', ['status'], unique=False)

    # Create tour_rejections table
    op.create_table('tour_rejections',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tour_id', sa.Uuid(), nullable=False),
        sa.Column('tour_guide_id', sa.Uuid(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(reason) > 0', name='ck_rejection_reason_not_empty'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tour_rejections_tour_guide_id'), 'tour_rejections', ['tour_guide_id'], unique=False)
    op.create_index(op.f('ix_tour_rejections_tour_id'), 'tour_rejections', ['tour_id'], unique=False)

    # Create notifications table
    op.create_table('notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('user_type', sa.String(length=20), nullable=False),
        sa.Column('tour_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['staff_members.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_notifications_created_at'), 'notifications', ['created_at'], unique=False)
    op.create_index(op.f('ix_notifications_tour_id'), 'notifications', ['tour_id'], unique=False)
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index(op.f('ix_notifications_user_id'), table_name='notifications')
    op.drop_index(op.f('ix_notifications_tour_id'), table_name='notifications')
    op.drop_index(op.f('ix_notifications_created_at'), table_name='notifications')
    op.drop_table('notifications')

    op.drop_index(op.f('ix_tour_rejections_tour_id'), table_name='tour_rejections')
    op.drop_index(op.f('ix_tour_rejections_tour_guide_id'), table_name='tour_rejections')
    op.drop_table('tour_rejections')

    op.drop_index(op.f('ix_tours_status'), table_name='tours')
    op.drop_index(op.f('ix_tours_preferred_date'), table_name='tours')
    op.drop_index(op.f('ix_tours_booking_id'), table_name='tours')
    op.drop_index(op.f('ix_tours_assigned_tour_guide'), table_name='tours')
    op.drop_index(op.f('ix_tours_assigned_driver'), table_name='tours')
    op.drop_table('tours')

    op.drop_index(op.f('ix_staff_members_role'), table_name='staff_members')
    op.drop_index(op.f('ix_staff_members_email'), table_name='staff_members')
    op.drop_index(op.f('ix_staff_members_availability'), table_name='staff_members')
    op.drop_table('staff_members')
