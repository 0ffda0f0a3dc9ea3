"""Domain models shared by linking, planning and the service layer"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, Field

WATCH_URL = "https://youtube.com/watch?v={external_id}"


class Language(str, Enum):
    EN = "en"
    ES = "es"


class VideoType(str, Enum):
    LONG_FORM = "long-form"
    SHORT_FORM = "short-form"


class FormatMix(str, Enum):
    BALANCED = "balanced"
    LONG_FORM = "long-form"
    SHORT_FORM = "short-form"


class VideoStatus(str, Enum):
    """Production pipeline status, ordered by definition order"""
    IDEA = "idea"
    SCRIPTED = "scripted"
    RECORDED = "recorded"
    EDITED = "edited"
    UNLISTED = "unlisted"
    PUBLISHED = "published"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    @property
    def is_draft(self) -> bool:
        """Any status before published can still be scheduled"""
        return self < VideoStatus.PUBLISHED

    def __lt__(self, other):
        if not isinstance(other, VideoStatus):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, VideoStatus):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, VideoStatus):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, VideoStatus):
            return NotImplemented
        return self.rank >= other.rank


_STATUS_ORDER = list(VideoStatus)


def watch_url(external_id: str) -> str:
    """Canonical watch URL for a YouTube video id"""
    return WATCH_URL.format(external_id=external_id)


def extract_video_id(link: Optional[str]) -> Optional[str]:
    """Pull the video id out of a watch or youtu.be link"""
    if not link:
        return None

    parsed = urlparse(link.strip())
    if parsed.netloc.endswith("youtu.be"):
        video_id = parsed.path.lstrip("/").split("/")[0]
        return video_id or None

    if "watch" in parsed.path:
        values = parse_qs(parsed.query).get("v")
        return values[0] if values else None

    return None


class LanguageVariant(BaseModel):
    """Per-language sub-record of a content item"""
    main_title: Optional[str] = None
    status: VideoStatus = VideoStatus.IDEA
    publication_date: Optional[datetime] = None
    youtube_link: Optional[str] = None

    @property
    def is_unscheduled_draft(self) -> bool:
        return self.status.is_draft and self.publication_date is None


def _default_variants() -> Dict[Language, LanguageVariant]:
    return {language: LanguageVariant() for language in Language}


class ContentItem(BaseModel):
    """Internally authored video concept spanning both languages"""
    id: str
    account_id: Optional[str] = None
    video_number: int
    video_type: VideoType = VideoType.LONG_FORM
    topic_id: Optional[str] = None
    internal_title: str = ""
    code_name: Optional[str] = None
    languages: Dict[Language, LanguageVariant] = Field(default_factory=_default_variants)

    def variant(self, language: Language) -> LanguageVariant:
        return self.languages.get(Language(language)) or LanguageVariant()

    def title(self, language: Language) -> Optional[str]:
        return self.variant(language).main_title

    def is_unscheduled_draft(self, language: Language) -> bool:
        return self.variant(language).is_unscheduled_draft

    def links_to(self, external_id: str) -> bool:
        """Whether any language's youtube link points at the given video id"""
        if not external_id:
            return False
        return any(
            variant.youtube_link and external_id in variant.youtube_link
            for variant in self.languages.values()
        )


class ExternalVideo(BaseModel):
    """Synced snapshot of a YouTube video"""
    id: str
    external_id: str
    title: str = ""
    channel_id: str
    account_id: Optional[str] = None
    published_at: Optional[datetime] = None
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    duration_seconds: Optional[int] = None
    is_short: Optional[bool] = None
    linked_content_id: Optional[str] = None

    @property
    def watch_url(self) -> str:
        return watch_url(self.external_id)


class Channel(BaseModel):
    id: str
    channel_id: str
    language: Language = Language.EN
    title: Optional[str] = None


class Topic(BaseModel):
    id: str
    name: str
    color: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
