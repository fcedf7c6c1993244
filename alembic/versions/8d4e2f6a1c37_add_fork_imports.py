"""add fork imports table

Revision ID: 8d4e2f6a1c37
Revises: 3f1c9a7e2b10
Create Date: 2026-10-19 15:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d4e2f6a1c37'
down_revision: Union[str, Sequence[str], None] = '3f1c9a7e2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add fork_imports so the account sync can spare fork-imported activity."""
    op.create_table('fork_imports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('imported_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'full_name', name='uq_owner_fork_import')
    )
    op.create_index('ix_fork_imports_owner_id', 'fork_imports', ['owner_id'])


def downgrade() -> None:
    """Remove fork_imports table."""
    op.drop_index('ix_fork_imports_owner_id', table_name='fork_imports')
    op.drop_table('fork_imports')
