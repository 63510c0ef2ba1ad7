"""Initial schema

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=24), primary_key=True),
        sa.Column('username', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('avatar_url', sa.String(length=2000), nullable=False),
        sa.Column('cover_url', sa.String(length=2000), nullable=True),
        sa.Column('refresh_token_hash', sa.String(length=64), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_created_at'), 'users', ['created_at'])

    op.create_table(
        'videos',
        sa.Column('id', sa.String(length=24), primary_key=True),
        sa.Column('owner_id', sa.String(length=24), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('media_url', sa.String(length=2000), nullable=False),
        sa.Column('media_public_id', sa.String(length=500), nullable=True),
        sa.Column('thumbnail_url', sa.String(length=2000), nullable=True),
        sa.Column('thumbnail_public_id', sa.String(length=500), nullable=True),
        sa.Column('duration_seconds', sa.Float(), nullable=False),
        sa.Column('views', sa.Integer(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('duration_seconds >= 0', name='ck_video_duration_non_negative'),
        sa.CheckConstraint('views >= 0', name='ck_video_views_non_negative'),
    )
    op.create_index(op.f('ix_videos_owner_id'), 'videos', ['owner_id'])
    op.create_index(op.f('ix_videos_created_at'), 'videos', ['created_at'])
    op.create_index('ix_video_published_created', 'videos', ['is_published', 'created_at'])

    op.create_table(
        'comments',
        sa.Column('id', sa.String(length=24), primary_key=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('video_id', sa.String(length=24), sa.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('owner_id', sa.String(length=24), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_comments_video_id'), 'comments', ['video_id'])
    op.create_index(op.f('ix_comments_owner_id'), 'comments', ['owner_id'])
    op.create_index(op.f('ix_comments_created_at'), 'comments', ['created_at'])

    op.create_table(
        'tweets',
        sa.Column('id', sa.String(length=24), primary_key=True),
        sa.Column('content', sa.String(length=280), nullable=False),
        sa.Column('owner_id', sa.String(length=24), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_tweets_owner_id'), 'tweets', ['owner_id'])
    op.create_index(op.f('ix_tweets_created_at'), 'tweets', ['created_at'])

    op.create_table(
        'likes',
        sa.Column('id', sa.String(length=24), primary_key=True),
        sa.Column('liked_by', sa.String(length=24), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('target_kind', sa.Enum('VIDEO', 'COMMENT', 'TWEET', name='liketargetkind'), nullable=False),
        sa.Column('target_id', sa.String(length=24), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('liked_by', 'target_kind', 'target_id', name='uq_like_user_target'),
    )
    op.create_index(op.f('ix_likes_liked_by'), 'likes', ['liked_by'])
    op.create_index(op.f('ix_likes_created_at'), 'likes', ['created_at'])
    op.create_index('ix_like_target', 'likes', ['target_kind', 'target_id'])

    op.create_table(
        'playlists',
        sa.Column('id', sa.String(length=24), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('owner_id', sa.String(length=24), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_playlists_owner_id'), 'playlists', ['owner_id'])
    op.create_index(op.f('ix_playlists_created_at'), 'playlists', ['created_at'])

    op.create_table(
        'playlist_videos',
        sa.Column('playlist_id', sa.String(length=24), sa.ForeignKey('playlists.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('video_id', sa.String(length=24), sa.ForeignKey('videos.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('position', sa.Integer(), nullable=False),
    )
    op.create_index(op.f('ix_playlist_videos_video_id'), 'playlist_videos', ['video_id'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(length=24), primary_key=True),
        sa.Column('subscriber_id', sa.String(length=24), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('channel_id', sa.String(length=24), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('subscriber_id', 'channel_id', name='uq_subscription_pair'),
        sa.CheckConstraint('subscriber_id != channel_id', name='ck_subscription_not_self'),
    )
    op.create_index(op.f('ix_subscriptions_subscriber_id'), 'subscriptions', ['subscriber_id'])
    op.create_index(op.f('ix_subscriptions_channel_id'), 'subscriptions', ['channel_id'])
    op.create_index(op.f('ix_subscriptions_created_at'), 'subscriptions', ['created_at'])

    op.create_table(
        'watch_history',
        sa.Column('user_id', sa.String(length=24), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('video_id', sa.String(length=24), sa.ForeignKey('videos.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('watched_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(op.f('ix_watch_history_video_id'), 'watch_history', ['video_id'])


def downgrade() -> None:
    op.drop_table('watch_history')
    op.drop_table('subscriptions')
    op.drop_table('playlist_videos')
    op.drop_table('playlists')
    op.drop_table('likes')
    op.drop_table('tweets')
    op.drop_table('comments')
    op.drop_table('videos')
    op.drop_table('users')
    sa.Enum(name='liketargetkind').drop(op.get_bind(), checkfirst=True)
