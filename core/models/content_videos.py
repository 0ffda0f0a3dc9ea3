import uuid

from sqlalchemy import Column, String, Text, Integer, TIMESTAMP, Index, UniqueConstraint
from sqlalchemy.sql import func
from core.db import Base

class ContentVideo(Base):
    """Internally authored content record with English and Spanish variants"""
    __tablename__ = "content_videos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), nullable=False, comment="Owning account")
    video_number = Column(Integer, nullable=False, comment="Sequential number per account")
    video_type = Column(String(16), nullable=False, default="long-form",
                       comment="long-form or short-form")
    topic_id = Column(String(36), comment="Reference to topic")
    internal_title = Column(Text, nullable=False, default="")
    code_name = Column(Text)

    en_main_title = Column(Text)
    en_status = Column(String(16), default="idea")
    en_publication_date = Column(TIMESTAMP(timezone=True), comment="English publish time (UTC)")
    en_youtube_link = Column(Text)

    es_main_title = Column(Text)
    es_status = Column(String(16), default="idea")
    es_publication_date = Column(TIMESTAMP(timezone=True), comment="Spanish publish time (UTC)")
    es_youtube_link = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(),
                        onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('account_id', 'video_number', name='uq_content_videos_account_number'),
        Index('idx_content_videos_account', 'account_id'),
    )
