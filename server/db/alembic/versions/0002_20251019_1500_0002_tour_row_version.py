"""Add optimistic lock version to tours

Revision ID: 0002
Revises: 0001
Create Date: 2025-10-19 15:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: str | None = '0001'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    with op.batch_alter_table('tours') as batch_op:
        batch_op.add_column(sa.Column('version', sa.Integer(), server_default='0', nullable=False))
        batch_op.create_check_constraint('ck_tour_version_non_negative', 'version >= 0')


def downgrade() -> None:
    """Downgrade database schema."""
    with op.batch_alter_table('tours') as batch_op:
        batch_op.drop_constraint('ck_tour_version_non_negative', type_='check')
        batch_op.drop_column('version')
