"""Common test fixtures for all test modules"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core import models
from core.db import Base
from core.schemas import (
    ContentItem,
    ExternalVideo,
    Language,
    LanguageVariant,
    VideoStatus,
    VideoType,
    watch_url,
)
from linking.link_store import LinkStore

ACCOUNT_ID = "acct-1"


@pytest.fixture
def db_session():
    """In-memory SQLite session with the full schema"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def seeded_account(db_session):
    """One account with an English and a Spanish channel, three records and four videos"""
    db_session.add_all([
        models.YouTubeChannel(id="ch-en", account_id=ACCOUNT_ID, channel_id="UC_EN", language="en"),
        models.YouTubeChannel(id="ch-es", account_id=ACCOUNT_ID, channel_id="UC_ES", language="es"),
        models.Topic(id="t-rust", account_id=ACCOUNT_ID, name="Rust", color="#dea584", keywords=["rust"]),
        models.Topic(id="t-food", account_id=ACCOUNT_ID, name="Food", color="#ffcc00"),
        models.ContentVideo(
            id="c-1", account_id=ACCOUNT_ID, video_number=1, video_type="long-form", topic_id="t-rust",
            internal_title="Rust intro", en_main_title="Intro to Rust Programming", en_status="edited",
            es_main_title="Introducción a Rust", es_status="idea"
        ),
        models.ContentVideo(
            id="c-2", account_id=ACCOUNT_ID, video_number=2, video_type="long-form", topic_id="t-food",
            internal_title="Pasta", en_main_title="Cooking Pasta at Home", en_status="scripted"
        ),
        models.ContentVideo(
            id="c-3", account_id=ACCOUNT_ID, video_number=3, video_type="short-form", topic_id="t-rust",
            internal_title="Rust tips", en_main_title="Rust Tips Short", en_status="published",
            en_publication_date=datetime(2024, 12, 1, tzinfo=timezone.utc)
        ),
        models.YouTubeVideo(
            id="yv-1", account_id=ACCOUNT_ID, channel_id="UC_EN", video_id="abc123",
            title="Intro Rust Programming Tutorial", duration_seconds=900, is_short=False,
            published_at=datetime(2024, 12, 10, tzinfo=timezone.utc)
        ),
        models.YouTubeVideo(
            id="yv-2", account_id=ACCOUNT_ID, channel_id="UC_EN", video_id="def456",
            title="Pasta Night", duration_seconds=45, is_short=True,
            published_at=datetime(2024, 12, 9, tzinfo=timezone.utc)
        ),
        models.YouTubeVideo(
            id="yv-3", account_id=ACCOUNT_ID, channel_id="UC_EN", video_id="ghi789",
            title="Random Vlog", published_at=datetime(2024, 12, 8, tzinfo=timezone.utc)
        ),
        models.YouTubeVideo(
            id="yv-4", account_id=ACCOUNT_ID, channel_id="UC_ES", video_id="jkl012",
            title="Introducción a Rust Programación", duration_seconds=700, is_short=False,
            published_at=datetime(2024, 12, 7, tzinfo=timezone.utc)
        ),
    ])
    db_session.commit()
    return ACCOUNT_ID


@pytest.fixture
def make_content():
    """Factory for content records with per-language overrides"""
    def _make(
        id: str,
        video_number: int = 1,
        en_title: Optional[str] = None,
        es_title: Optional[str] = None,
        video_type: VideoType = VideoType.LONG_FORM,
        topic_id: Optional[str] = None,
        en_status: VideoStatus = VideoStatus.IDEA,
        es_status: VideoStatus = VideoStatus.IDEA,
        en_date: Optional[datetime] = None,
        es_date: Optional[datetime] = None,
        en_link: Optional[str] = None,
        internal_title: str = "",
    ) -> ContentItem:
        return ContentItem(
            id=id,
            account_id=ACCOUNT_ID,
            video_number=video_number,
            video_type=video_type,
            topic_id=topic_id,
            internal_title=internal_title,
            languages={
                Language.EN: LanguageVariant(main_title=en_title, status=en_status,
                                             publication_date=en_date, youtube_link=en_link),
                Language.ES: LanguageVariant(main_title=es_title, status=es_status, publication_date=es_date),
            },
        )
    return _make


@pytest.fixture
def make_video():
    """Factory for synced videos"""
    def _make(
        id: str,
        title: str = "",
        external_id: Optional[str] = None,
        channel_id: str = "UC_EN",
        duration_seconds: Optional[int] = None,
        is_short: Optional[bool] = None,
        linked_content_id: Optional[str] = None,
    ) -> ExternalVideo:
        return ExternalVideo(
            id=id,
            external_id=external_id or f"ext-{id}",
            title=title,
            channel_id=channel_id,
            account_id=ACCOUNT_ID,
            duration_seconds=duration_seconds,
            is_short=is_short,
            linked_content_id=linked_content_id,
        )
    return _make


class MemoryLinkStore(LinkStore):
    """Dict-backed link store for exercising linking logic without a database"""

    def __init__(self, videos: List[ExternalVideo] = (), items: List[ContentItem] = ()):
        self.videos: Dict[str, ExternalVideo] = {v.id: v for v in videos}
        self.items: Dict[str, ContentItem] = {i.id: i for i in items}
        self.calls: List[Tuple] = []

    def set_link(self, external_video_id, content_id, language):
        self.calls.append(("set_link", external_video_id, content_id, Language(language)))
        video = self.videos[external_video_id]
        video.linked_content_id = content_id
        if content_id in self.items:
            self.items[content_id].variant(language).youtube_link = watch_url(video.external_id)

    def clear_link(self, external_video_id):
        self.calls.append(("clear_link", external_video_id))
        self.videos[external_video_id].linked_content_id = None

    def clear_content_links(self, content_id, languages=tuple(Language)):
        for language in languages:
            self.items[content_id].variant(language).youtube_link = None

    def unlink(self, external_video_id, content_id, languages=tuple(Language)):
        languages = [Language(language) for language in languages]
        self.calls.append(("unlink", external_video_id, content_id, languages))
        self.videos[external_video_id].linked_content_id = None
        if content_id in self.items:
            self.clear_content_links(content_id, languages)

    def find_by_external_id(self, account_id, external_id):
        return next((v for v in self.videos.values() if v.external_id == external_id), None)

    def find_linked(self, account_id):
        return [
            (video, self.items.get(video.linked_content_id))
            for video in self.videos.values()
            if video.linked_content_id is not None
        ]


@pytest.fixture
def memory_link_store():
    return MemoryLinkStore
