import uuid

from sqlalchemy import Column, String, Text, Integer, BIGINT, Boolean, TIMESTAMP, Index, UniqueConstraint
from core.db import Base

class YouTubeVideo(Base):
    """Synced YouTube video snapshot"""
    __tablename__ = "youtube_videos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), nullable=False)
    channel_id = Column(String, nullable=False, comment="YouTube channel ID")
    video_id = Column(String, nullable=False, comment="YouTube video ID")
    title = Column(Text, nullable=False, default="")
    description = Column(Text)
    published_at = Column(TIMESTAMP(timezone=True), comment="Video publication time (UTC)")
    duration_seconds = Column(Integer)
    is_short = Column(Boolean)
    view_count = Column(BIGINT, default=0)
    like_count = Column(BIGINT, default=0)
    comment_count = Column(BIGINT, default=0)
    # No foreign key: the referenced content record may be deleted and the
    # reconciliation pass clears the dangling id
    content_video_id = Column(String(36), comment="Linked content record")
    last_synced_at = Column(TIMESTAMP(timezone=True))

    __table_args__ = (
        UniqueConstraint('account_id', 'video_id', name='uq_youtube_videos_account_video'),
        Index('idx_youtube_videos_channel', 'channel_id'),
        Index('idx_youtube_videos_content', 'content_video_id'),
    )
