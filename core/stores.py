"""SQLAlchemy-backed content and external video stores"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from core import models
from core.schemas import (
    Channel,
    ContentItem,
    ExternalVideo,
    Language,
    LanguageVariant,
    Topic,
    VideoStatus,
    VideoType,
)

logger = logging.getLogger(__name__)


class LanguageColumns(NamedTuple):
    main_title: str
    status: str
    publication_date: str
    youtube_link: str


LANGUAGE_COLUMNS: Dict[Language, LanguageColumns] = {
    Language.EN: LanguageColumns("en_main_title", "en_status", "en_publication_date", "en_youtube_link"),
    Language.ES: LanguageColumns("es_main_title", "es_status", "es_publication_date", "es_youtube_link"),
}


class ContentFilters(BaseModel):
    """Filters for listing content records"""
    language: Optional[Language] = None
    unscheduled_drafts_only: bool = False
    topic_ids: List[str] = Field(default_factory=list)
    video_type: Optional[VideoType] = None
    ascending: bool = True
    limit: Optional[int] = None


class VideoFilters(BaseModel):
    """Filters for listing synced videos"""
    account_id: Optional[str] = None
    unlinked_only: bool = False
    limit: Optional[int] = None


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo; stored timestamps are always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _status(raw: Optional[str]) -> VideoStatus:
    try:
        return VideoStatus(raw) if raw else VideoStatus.IDEA
    except ValueError:
        logger.warning(f"Unknown status {raw!r}, treating as idea")
        return VideoStatus.IDEA


def content_to_domain(row: models.ContentVideo) -> ContentItem:
    languages = {}
    for language, columns in LANGUAGE_COLUMNS.items():
        languages[language] = LanguageVariant(
            main_title=getattr(row, columns.main_title),
            status=_status(getattr(row, columns.status)),
            publication_date=_as_utc(getattr(row, columns.publication_date)),
            youtube_link=getattr(row, columns.youtube_link),
        )

    return ContentItem(
        id=row.id,
        account_id=row.account_id,
        video_number=row.video_number,
        video_type=VideoType(row.video_type or VideoType.LONG_FORM.value),
        topic_id=row.topic_id,
        internal_title=row.internal_title or "",
        code_name=row.code_name,
        languages=languages,
    )


def video_to_domain(row: models.YouTubeVideo) -> ExternalVideo:
    return ExternalVideo(
        id=row.id,
        external_id=row.video_id,
        title=row.title or "",
        channel_id=row.channel_id,
        account_id=row.account_id,
        published_at=_as_utc(row.published_at),
        view_count=row.view_count or 0,
        like_count=row.like_count or 0,
        comment_count=row.comment_count or 0,
        duration_seconds=row.duration_seconds,
        is_short=row.is_short,
        linked_content_id=row.content_video_id,
    )


class ContentStore:
    """CRUD over content records, topics and channels"""

    def __init__(self, session: Session):
        self.db = session

    def list(self, account_id: str, filters: Optional[ContentFilters] = None) -> List[ContentItem]:
        filters = filters or ContentFilters()
        query = self.db.query(models.ContentVideo).filter(models.ContentVideo.account_id == account_id)

        if filters.topic_ids:
            query = query.filter(models.ContentVideo.topic_id.in_(filters.topic_ids))
        if filters.video_type is not None:
            query = query.filter(models.ContentVideo.video_type == filters.video_type.value)
        if filters.unscheduled_drafts_only:
            if filters.language is None:
                raise ValueError("unscheduled_drafts_only requires a language")
            columns = LANGUAGE_COLUMNS[filters.language]
            status_col = getattr(models.ContentVideo, columns.status)
            query = query.filter(
                or_(status_col.is_(None), status_col != VideoStatus.PUBLISHED.value),
                getattr(models.ContentVideo, columns.publication_date).is_(None),
            )

        order = models.ContentVideo.video_number
        query = query.order_by(order.asc() if filters.ascending else order.desc())
        if filters.limit:
            query = query.limit(filters.limit)

        return [content_to_domain(row) for row in query.all()]

    def get(self, account_id: str, content_id: str) -> Optional[ContentItem]:
        row = (
            self.db.query(models.ContentVideo)
            .filter(models.ContentVideo.account_id == account_id, models.ContentVideo.id == content_id)
            .one_or_none()
        )
        return content_to_domain(row) if row is not None else None

    def get_many(self, account_id: str, content_ids: Iterable[str]) -> Dict[str, ContentItem]:
        ids = list({cid for cid in content_ids if cid})
        if not ids:
            return {}
        rows = (
            self.db.query(models.ContentVideo)
            .filter(models.ContentVideo.account_id == account_id, models.ContentVideo.id.in_(ids))
            .all()
        )
        return {row.id: content_to_domain(row) for row in rows}

    def update(self, content_id: str, fields: Dict[str, Any], commit: bool = True) -> int:
        """Apply a partial update of column values to one content record, returning rows matched"""
        updated = (
            self.db.query(models.ContentVideo)
            .filter(models.ContentVideo.id == content_id)
            .update(fields, synchronize_session=False)
        )
        if updated == 0:
            logger.warning("Content update matched no rows", extra={"content_id": content_id})
        if commit:
            self.db.commit()
        return updated

    def set_publication_date(self, content_id: str, language: Language,
                             when: Optional[datetime], commit: bool = True) -> int:
        column = LANGUAGE_COLUMNS[Language(language)].publication_date
        return self.update(content_id, {column: when}, commit=commit)

    def set_youtube_link(self, content_id: str, language: Language,
                         url: Optional[str], commit: bool = True) -> int:
        column = LANGUAGE_COLUMNS[Language(language)].youtube_link
        return self.update(content_id, {column: url}, commit=commit)

    def list_topics(self, account_id: str) -> List[Topic]:
        rows = (
            self.db.query(models.Topic)
            .filter(models.Topic.account_id == account_id)
            .order_by(models.Topic.name)
            .all()
        )
        return [Topic(id=row.id, name=row.name, color=row.color, keywords=row.keywords or []) for row in rows]

    def list_channels(self, account_id: str, language: Optional[Language] = None) -> List[Channel]:
        query = self.db.query(models.YouTubeChannel).filter(models.YouTubeChannel.account_id == account_id)
        if language is not None:
            query = query.filter(models.YouTubeChannel.language == Language(language).value)
        return [
            Channel(id=row.id, channel_id=row.channel_id, language=Language(row.language or "en"),
                    title=row.channel_title)
            for row in query.all()
        ]

    def channel_language(self, account_id: str, channel_id: str) -> Optional[Language]:
        row = (
            self.db.query(models.YouTubeChannel.language)
            .filter(models.YouTubeChannel.account_id == account_id,
                    models.YouTubeChannel.channel_id == channel_id)
            .first()
        )
        return Language(row.language) if row is not None and row.language else None


class ExternalVideoStore:
    """Reads and updates synced YouTube video snapshots"""

    def __init__(self, session: Session):
        self.db = session

    def _filtered(self, query, filters: VideoFilters):
        if filters.account_id is not None:
            query = query.filter(models.YouTubeVideo.account_id == filters.account_id)
        if filters.unlinked_only:
            query = query.filter(models.YouTubeVideo.content_video_id.is_(None))
        query = query.order_by(models.YouTubeVideo.published_at.desc())
        if filters.limit:
            query = query.limit(filters.limit)
        return query

    def list(self, channel_id: str, filters: Optional[VideoFilters] = None) -> List[ExternalVideo]:
        query = self.db.query(models.YouTubeVideo).filter(models.YouTubeVideo.channel_id == channel_id)
        return [video_to_domain(row) for row in self._filtered(query, filters or VideoFilters()).all()]

    def list_for_channels(self, channel_ids: List[str],
                          filters: Optional[VideoFilters] = None) -> List[ExternalVideo]:
        if not channel_ids:
            return []
        query = self.db.query(models.YouTubeVideo).filter(models.YouTubeVideo.channel_id.in_(channel_ids))
        return [video_to_domain(row) for row in self._filtered(query, filters or VideoFilters()).all()]

    def list_linked(self, account_id: str) -> List[ExternalVideo]:
        rows = (
            self.db.query(models.YouTubeVideo)
            .filter(models.YouTubeVideo.account_id == account_id,
                    models.YouTubeVideo.content_video_id.isnot(None))
            .all()
        )
        return [video_to_domain(row) for row in rows]

    def get(self, video_row_id: str) -> Optional[ExternalVideo]:
        row = self.db.get(models.YouTubeVideo, video_row_id)
        return video_to_domain(row) if row is not None else None

    def find_by_external_id(self, account_id: str, external_id: str) -> Optional[ExternalVideo]:
        row = (
            self.db.query(models.YouTubeVideo)
            .filter(models.YouTubeVideo.account_id == account_id,
                    models.YouTubeVideo.video_id == external_id)
            .one_or_none()
        )
        return video_to_domain(row) if row is not None else None

    def update(self, video_row_id: str, fields: Dict[str, Any], commit: bool = True) -> None:
        updated = (
            self.db.query(models.YouTubeVideo)
            .filter(models.YouTubeVideo.id == video_row_id)
            .update(fields, synchronize_session=False)
        )
        if updated == 0:
            logger.warning("Video update matched no rows", extra={"video_id": video_row_id})
        if commit:
            self.db.commit()

    def clear_links(self, video_row_ids: List[str]) -> int:
        """Null out content references on many videos in one statement"""
        if not video_row_ids:
            return 0
        cleared = (
            self.db.query(models.YouTubeVideo)
            .filter(models.YouTubeVideo.id.in_(video_row_ids))
            .update({"content_video_id": None}, synchronize_session=False)
        )
        self.db.commit()
        return cleared

    def upsert_snapshots(self, rows: List[Dict[str, Any]]) -> int:
        """Insert or refresh video snapshots keyed by (account_id, video_id).

        Existing content links are left untouched.
        """
        if not rows:
            return 0

        for row in rows:
            row.setdefault("id", str(uuid.uuid4()))

        insert = pg_insert if self.db.get_bind().dialect.name == "postgresql" else sqlite_insert
        stmt = insert(models.YouTubeVideo).values(rows)
        refreshed = {
            column: getattr(stmt.excluded, column)
            for column in ("title", "description", "published_at", "duration_seconds", "is_short",
                           "view_count", "like_count", "comment_count", "channel_id", "last_synced_at")
            if column in rows[0]
        }
        stmt = stmt.on_conflict_do_update(index_elements=["account_id", "video_id"], set_=refreshed)

        try:
            self.db.execute(stmt)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return len(rows)
