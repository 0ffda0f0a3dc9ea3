import uuid

from sqlalchemy import Column, String, Text, BIGINT, TIMESTAMP, UniqueConstraint
from core.db import Base

class YouTubeChannel(Base):
    """One YouTube channel per language per account"""
    __tablename__ = "youtube_channels"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), nullable=False)
    channel_id = Column(String, nullable=False, comment="YouTube channel ID")
    channel_title = Column(Text)
    language = Column(String(2), nullable=False, default="en")
    subscriber_count = Column(BIGINT)
    video_count = Column(BIGINT)
    view_count = Column(BIGINT)
    last_synced_at = Column(TIMESTAMP(timezone=True), comment="Last sync time (UTC)")

    __table_args__ = (
        UniqueConstraint('account_id', 'language', name='uq_youtube_channels_account_language'),
    )
