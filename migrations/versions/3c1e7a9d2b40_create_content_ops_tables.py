"""create content ops tables

Revision ID: 3c1e7a9d2b40
Revises:
Create Date: 2026-10-19 10:12:41.118203

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '3c1e7a9d2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'content_videos',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('account_id', sa.String(36), nullable=False),
        sa.Column('video_number', sa.Integer(), nullable=False),
        sa.Column('video_type', sa.String(16), nullable=False),
        sa.Column('topic_id', sa.String(36)),
        sa.Column('internal_title', sa.Text(), nullable=False),
        sa.Column('code_name', sa.Text()),
        sa.Column('en_main_title', sa.Text()),
        sa.Column('en_status', sa.String(16)),
        sa.Column('en_publication_date', sa.TIMESTAMP(timezone=True)),
        sa.Column('en_youtube_link', sa.Text()),
        sa.Column('es_main_title', sa.Text()),
        sa.Column('es_status', sa.String(16)),
        sa.Column('es_publication_date', sa.TIMESTAMP(timezone=True)),
        sa.Column('es_youtube_link', sa.Text()),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('account_id', 'video_number', name='uq_content_videos_account_number'),
    )
    op.create_index('idx_content_videos_account', 'content_videos', ['account_id'])

    op.create_table(
        'youtube_channels',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('account_id', sa.String(36), nullable=False),
        sa.Column('channel_id', sa.String(), nullable=False),
        sa.Column('channel_title', sa.Text()),
        sa.Column('language', sa.String(2), nullable=False),
        sa.Column('subscriber_count', sa.BIGINT()),
        sa.Column('video_count', sa.BIGINT()),
        sa.Column('view_count', sa.BIGINT()),
        sa.Column('last_synced_at', sa.TIMESTAMP(timezone=True)),
        sa.UniqueConstraint('account_id', 'language', name='uq_youtube_channels_account_language'),
    )

    op.create_table(
        'youtube_videos',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('account_id', sa.String(36), nullable=False),
        sa.Column('channel_id', sa.String(), nullable=False),
        sa.Column('video_id', sa.String(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('published_at', sa.TIMESTAMP(timezone=True)),
        sa.Column('duration_seconds', sa.Integer()),
        sa.Column('is_short', sa.Boolean()),
        sa.Column('view_count', sa.BIGINT()),
        sa.Column('like_count', sa.BIGINT()),
        sa.Column('comment_count', sa.BIGINT()),
        sa.Column('content_video_id', sa.String(36)),
        sa.Column('last_synced_at', sa.TIMESTAMP(timezone=True)),
        sa.UniqueConstraint('account_id', 'video_id', name='uq_youtube_videos_account_video'),
    )
    op.create_index('idx_youtube_videos_channel', 'youtube_videos', ['channel_id'])
    op.create_index('idx_youtube_videos_content', 'youtube_videos', ['content_video_id'])

    op.create_table(
        'topics',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('account_id', sa.String(36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('color', sa.String(32)),
        sa.Column('keywords', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')),
    )


def downgrade() -> None:
    op.drop_table('topics')
    op.drop_index('idx_youtube_videos_content', table_name='youtube_videos')
    op.drop_index('idx_youtube_videos_channel', table_name='youtube_videos')
    op.drop_table('youtube_videos')
    op.drop_table('youtube_channels')
    op.drop_index('idx_content_videos_account', table_name='content_videos')
    op.drop_table('content_videos')
