"""Create lists and tasks tables

Revision ID: 001_lists_and_tasks
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_lists_and_tasks'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the two ordered tables.

    lists: one row per user list, ordered per owner_id
    tasks: tasks (list_id set) and subtasks (parent_node_id set),
           ordered per parent
    """
    op.create_table(
        'lists',
        sa.Column('id', sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column('owner_id', sa.BigInteger(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False, server_default=''),
        sa.Column('index', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_lists_owner_id', 'lists', ['owner_id'])

    op.create_table(
        'tasks',
        sa.Column('id', sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column('list_id', sa.BigInteger(), nullable=True),
        sa.Column('parent_node_id', sa.BigInteger(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False, server_default=''),
        sa.Column('index', sa.Integer(), nullable=False),
        sa.Column('categories', postgresql.ARRAY(sa.Text()), nullable=False, server_default='{}'),
        sa.Column('due_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('done', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('special', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['list_id'], ['lists.id']),
        sa.ForeignKeyConstraint(['parent_node_id'], ['tasks.id']),
        sa.CheckConstraint(
            '(list_id IS NULL) <> (parent_node_id IS NULL)',
            name='ck_tasks_single_parent',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tasks_list_id', 'tasks', ['list_id'])
    op.create_index('ix_tasks_parent_node_id', 'tasks', ['parent_node_id'])


def downgrade() -> None:
    """Drop the tasks and lists tables."""
    op.drop_index('ix_tasks_parent_node_id', table_name='tasks')
    op.drop_index('ix_tasks_list_id', table_name='tasks')
    op.drop_table('tasks')
    op.drop_index('ix_lists_owner_id', table_name='lists')
    op.drop_table('lists')
