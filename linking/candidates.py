"""Candidate pools for linking content records and synced videos"""
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from core.schemas import ContentItem, ExternalVideo, VideoType

SHORT_MAX_SECONDS = 60


class Direction(str, Enum):
    CONTENT_TO_EXTERNAL = "content-to-youtube"
    EXTERNAL_TO_CONTENT = "youtube-to-content"


def classify_is_short(video: ExternalVideo) -> Optional[bool]:
    """Explicit short flag if synced, else derived from duration, else unknown"""
    if video.is_short is not None:
        return video.is_short
    if video.duration_seconds is not None:
        return video.duration_seconds <= SHORT_MAX_SECONDS
    return None


def matches_video_type(video: ExternalVideo, video_type: VideoType) -> bool:
    # An undetermined classification never matches either type
    is_short = classify_is_short(video)
    if is_short is None:
        return False
    return is_short is (video_type == VideoType.SHORT_FORM)


def external_candidates(
    source: Optional[ContentItem],
    videos: Iterable[ExternalVideo],
    channel_ids: Sequence[str],
) -> List[ExternalVideo]:
    """Unlinked videos on the language's channels whose format matches the source"""
    if source is None:
        return []
    allowed = set(channel_ids)
    return [
        video for video in videos
        if video.channel_id in allowed
        and video.linked_content_id is None
        and matches_video_type(video, source.video_type)
    ]


def content_candidates(
    source: Optional[ExternalVideo],
    items: Iterable[ContentItem],
) -> List[ContentItem]:
    """Every content record of the account is eligible"""
    if source is None:
        return []
    return list(items)


def search_videos(videos: Iterable[ExternalVideo], term: Optional[str]) -> List[ExternalVideo]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(videos)
    return [
        video for video in videos
        if needle in video.title.lower() or needle in video.external_id.lower()
    ]


def search_content(items: Iterable[ContentItem], term: Optional[str]) -> List[ContentItem]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(items)

    def haystacks(item: ContentItem):
        yield item.internal_title
        yield item.code_name
        for variant in item.languages.values():
            yield variant.main_title

    return [
        item for item in items
        if any(text and needle in text.lower() for text in haystacks(item))
    ]


def is_linked(direction: Direction, source, candidate) -> bool:
    """Whether a candidate is already linked to the source"""
    if direction == Direction.CONTENT_TO_EXTERNAL:
        return candidate.linked_content_id == source.id
    return candidate.links_to(source.external_id)
