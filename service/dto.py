"""Data Transfer Objects for service layer"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from core.schemas import Language, VideoType, VideoStatus
from linking.candidates import Direction
from planning.schedule_generator import SchedulingPreferences


class VideoCandidateDTO(BaseModel):
    """Synced video offered for linking"""
    id: str
    external_id: str
    title: str
    published_at: Optional[datetime] = None
    view_count: int = 0
    is_short: Optional[bool] = None
    linked: bool = False


class ContentCandidateDTO(BaseModel):
    """Content record offered for linking"""
    id: str
    video_number: int
    internal_title: str
    video_type: VideoType
    en_title: Optional[str] = None
    es_title: Optional[str] = None
    en_status: VideoStatus = VideoStatus.IDEA
    es_status: VideoStatus = VideoStatus.IDEA
    linked: bool = False


class CandidatesResponseDTO(BaseModel):
    direction: Direction
    source_id: str
    language: Optional[Language] = None
    videos: List[VideoCandidateDTO] = Field(default_factory=list)
    content: List[ContentCandidateDTO] = Field(default_factory=list)


class AutoLinkRequestDTO(BaseModel):
    """Auto-link a content record or a synced video to its best match"""
    account_id: str
    direction: Direction
    source_id: str
    language: Optional[Language] = None


class MatchDTO(BaseModel):
    content_id: str
    external_video_id: str
    external_id: str
    title: str
    language: Language
    score: float


class AutoLinkResponseDTO(BaseModel):
    linked: bool
    match: Optional[MatchDTO] = None
    message: str


class LinkRequestDTO(BaseModel):
    """Manual link between a synced video row and a content record"""
    account_id: str
    video_id: str
    content_id: str
    language: Optional[Language] = None


class UnlinkRequestDTO(BaseModel):
    """Manual unlink; from the content side only one language's link is cleared"""
    account_id: str
    direction: Direction
    video_id: str
    content_id: Optional[str] = None
    language: Optional[Language] = None


class LinkResponseDTO(BaseModel):
    ok: bool = True
    video_id: str
    content_id: Optional[str] = None
    language: Optional[Language] = None


class ReconcileRequestDTO(BaseModel):
    account_id: str
    dry_run: bool = False


class GapRequestDTO(BaseModel):
    """Content gap analysis request"""
    account_id: str
    language: Language = Language.EN
    period: str = Field(default="3-months", pattern=r"^(1-month|3-months|6-months|custom)$")
    custom_end_date: Optional[datetime] = None
    posts_per_week: int = Field(default=3, ge=1, le=14)


class ScheduleRequestDTO(BaseModel):
    """Generate a schedule preview for one language"""
    account_id: str
    language: Language = Language.EN
    preferences: Optional[SchedulingPreferences] = None
    start: Optional[datetime] = None


class ScheduledItemDTO(BaseModel):
    content_id: str
    date: datetime
    video_number: Optional[int] = None
    internal_title: Optional[str] = None


class ScheduleResponseDTO(BaseModel):
    language: Language
    assignments: List[ScheduledItemDTO] = Field(default_factory=list)
    candidates: int = 0
    unscheduled: int = 0


class ScheduleCommitRequestDTO(BaseModel):
    account_id: str
    language: Language
    assignments: List[ScheduledItemDTO] = Field(min_length=1)


class ScheduleCommitResponseDTO(BaseModel):
    applied: int


class HealthResponseDTO(BaseModel):
    """Service layer DTO for health check responses"""
    ok: bool = True
    timestamp: Optional[str] = None
    version: Optional[str] = None
    database: Optional[str] = None
