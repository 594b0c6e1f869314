"""Create task table.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

task_type = sa.Enum("Foo", "Bar", "Baz", name="task_type")
task_state = sa.Enum("Pending", "Active", "Failed", "Done", name="task_state")


def upgrade() -> None:
    op.create_table(
        "task",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("type", task_type, nullable=False),
        sa.Column("state", task_state, nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_task_poll",
        "task",
        ["state", "start_time"],
        postgresql_where=sa.text("state = 'Pending'"),
    )


def downgrade() -> None:
    op.drop_index("ix_task_poll", table_name="task")
    op.drop_table("task")
    bind = op.get_bind()
    task_state.drop(bind, checkfirst=True)
    task_type.drop(bind, checkfirst=True)
