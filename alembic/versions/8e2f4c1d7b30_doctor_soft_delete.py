"""doctor soft delete

Revision ID: 8e2f4c1d7b30
Revises: 5b1c0e7a9d21
Create Date: 2025-11-10 11:04:52.118730

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e2f4c1d7b30'
down_revision: Union[str, Sequence[str], None] = '5b1c0e7a9d21'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table("doctors") as batch:
        batch.add_column(sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()))


def downgrade() -> None:
    with op.batch_alter_table("doctors") as batch:
        batch.drop_column("is_active")
