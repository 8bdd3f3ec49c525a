"""initial schema

Revision ID: 8c1f0e2b7a41
Revises:
Create Date: 2026-10-17 12:10:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8c1f0e2b7a41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

def upgrade():
    op.create_table(
        'boards',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=False, server_default=''),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('creator_name', sa.String(), nullable=True),
        sa.Column('creator_image_url', sa.String(), nullable=True),
    )
    op.create_index('ix_boards_id', 'boards', ['id'])
    op.create_index('ix_boards_user_id', 'boards', ['user_id'])

    op.create_table(
        'cards',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('board_id', sa.String(), sa.ForeignKey('boards.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('label', sa.String(100), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('audio_url', sa.String(), nullable=True),
        sa.Column('color', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('template_key', sa.String(), nullable=True),
        sa.Column('source_board_id', sa.String(), nullable=True),
    )
    op.create_index('ix_cards_id', 'cards', ['id'])
    op.create_index('ix_cards_board_id', 'cards', ['board_id'])

    op.create_table(
        'app_settings',
        sa.Column('key', sa.String(100), primary_key=True),
        sa.Column('value', sa.String(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'board_comments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('board_id', sa.String(), sa.ForeignKey('boards.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('commenter_name', sa.String(), nullable=False),
        sa.Column('commenter_image_url', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('is_edited', sa.Boolean(), nullable=False, server_default='false'),
    )
    op.create_index('ix_board_comments_id', 'board_comments', ['id'])
    op.create_index('ix_board_comments_board_id', 'board_comments', ['board_id'])

    op.create_table(
        'board_likes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('board_id', sa.String(), sa.ForeignKey('boards.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('board_id', 'user_id', name='uq_board_like_user'),
    )
    op.create_index('ix_board_likes_id', 'board_likes', ['id'])
    op.create_index('ix_board_likes_board_id', 'board_likes', ['board_id'])

def downgrade():
    op.drop_table('board_likes')
    op.drop_table('board_comments')
    op.drop_table('app_settings')
    op.drop_table('cards')
    op.drop_table('boards')
