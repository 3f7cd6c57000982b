"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create local_items table
    op.create_table(
        'local_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('original_title', sa.String(length=500), nullable=True),
        sa.Column('overview', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('premiere_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('external_ids', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_local_items_title'), 'local_items', ['title'], unique=False)
    op.create_index(op.f('ix_local_items_type'), 'local_items', ['type'], unique=False)

    # Create tags table
    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('group', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tags_name'), 'tags', ['name'], unique=True)

    # Create local_item_tags association table
    op.create_table(
        'local_item_tags',
        sa.Column('local_item_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['local_item_id'], ['local_items.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('local_item_id', 'tag_id')
    )

    # Create remote_servers table
    op.create_table(
        'remote_servers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('api_key', sa.String(length=200), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('remote_id', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # Create remote_items table
    op.create_table(
        'remote_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('remote_id', sa.String(length=100), nullable=False),
        sa.Column('server_id', sa.Integer(), nullable=False),
        sa.Column('local_item_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('original_title', sa.String(length=500), nullable=True),
        sa.Column('overview', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('premiere_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('production_year', sa.Integer(), nullable=True),
        sa.Column('date_added', sa.DateTime(timezone=True), nullable=True),
        sa.Column('community_rating', sa.Float(), nullable=True),
        sa.Column('poster_tag', sa.String(length=100), nullable=True),
        sa.Column('backdrop_tag', sa.String(length=100), nullable=True),
        sa.Column('external_ids', sa.JSON(), nullable=True),
        sa.Column('genres', sa.JSON(), nullable=True),
        sa.Column('studios', sa.JSON(), nullable=True),
        sa.Column('actors', sa.JSON(), nullable=True),
        sa.Column('directors', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['server_id'], ['remote_servers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['local_item_id'], ['local_items.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('remote_id', 'server_id', name='uq_remote_item_server')
    )
    op.create_index(op.f('ix_remote_items_server_id'), 'remote_items', ['server_id'], unique=False)
    op.create_index(op.f('ix_remote_items_local_item_id'), 'remote_items', ['local_item_id'], unique=False)


def downgrade() -> None:
    op.drop_table('remote_items')
    op.drop_table('remote_servers')
    op.drop_table('local_item_tags')
    op.drop_table('tags')
    op.drop_table('local_items')
