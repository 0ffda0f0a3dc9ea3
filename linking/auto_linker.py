"""Best-match auto-linking between synced videos and content records"""
import logging
from typing import Iterable, Optional

from pydantic import BaseModel

from core.schemas import ContentItem, ExternalVideo, Language
from linking import similarity
from linking.candidates import Direction
from linking.link_store import LinkStore

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.6


class Match(BaseModel):
    """A committed (or committable) video/content pairing"""
    direction: Direction
    content_id: str
    external_video_id: str
    external_id: str
    title: str
    language: Language
    score: float


def best_external_match(
    source: ContentItem,
    candidates: Iterable[ExternalVideo],
    language: Language,
    threshold: float = DEFAULT_THRESHOLD,
) -> Optional[Match]:
    """Highest scoring video for the content record's title in one language"""
    title = source.title(language)
    best: Optional[ExternalVideo] = None
    best_score = 0.0

    for video in candidates:
        value = similarity.score(title, video.title)
        # Strict comparison keeps the first candidate that reaches the max
        if value > best_score:
            best, best_score = video, value

    if best is None or best_score <= threshold:
        return None

    return Match(
        direction=Direction.CONTENT_TO_EXTERNAL,
        content_id=source.id,
        external_video_id=best.id,
        external_id=best.external_id,
        title=best.title,
        language=Language(language),
        score=best_score,
    )


def best_content_match(
    source: ExternalVideo,
    candidates: Iterable[ContentItem],
    language: Language = Language.EN,
    threshold: float = DEFAULT_THRESHOLD,
) -> Optional[Match]:
    """Highest scoring content record, best of its English and Spanish titles.

    ``language`` is the language of the video's channel and decides which
    youtube link the match is written to.
    """
    best: Optional[ContentItem] = None
    best_score = 0.0

    for item in candidates:
        value = max(
            similarity.score(source.title, item.title(Language.EN)),
            similarity.score(source.title, item.title(Language.ES)),
        )
        if value > best_score:
            best, best_score = item, value

    if best is None or best_score <= threshold:
        return None

    return Match(
        direction=Direction.EXTERNAL_TO_CONTENT,
        content_id=best.id,
        external_video_id=source.id,
        external_id=source.external_id,
        title=best.title(language) or best.internal_title,
        language=Language(language),
        score=best_score,
    )


class AutoLinker:
    """Finds and commits links through a link store"""

    def __init__(self, link_store: LinkStore, threshold: float = DEFAULT_THRESHOLD):
        self.link_store = link_store
        self.threshold = threshold

    def auto_link_content(
        self,
        source: Optional[ContentItem],
        candidates: Iterable[ExternalVideo],
        language: Language,
        trace_id: str = "",
    ) -> Optional[Match]:
        """Link a content record to its best matching video, if any clears the threshold"""
        if source is None:
            return None

        match = best_external_match(source, candidates, language, self.threshold)
        return self._commit(match, trace_id)

    def auto_link_video(
        self,
        source: Optional[ExternalVideo],
        candidates: Iterable[ContentItem],
        language: Language,
        trace_id: str = "",
    ) -> Optional[Match]:
        """Link a synced video to its best matching content record"""
        if source is None:
            return None

        match = best_content_match(source, candidates, language, self.threshold)
        return self._commit(match, trace_id)

    def _commit(self, match: Optional[Match], trace_id: str) -> Optional[Match]:
        if match is None:
            logger.info("No suitable match found", extra={"trace_id": trace_id})
            return None

        self.link_store.set_link(match.external_video_id, match.content_id, match.language)

        logger.info("Auto-link committed", extra={
            "trace_id": trace_id,
            "direction": match.direction.value,
            "content_id": match.content_id,
            "video_id": match.external_id,
            "language": match.language.value,
            "score": round(match.score, 4),
        })
        return match

    def link(self, video: ExternalVideo, item: ContentItem, language: Language) -> None:
        """Manually link a video and a content record"""
        self.link_store.set_link(video.id, item.id, language)

    def unlink_from_content(self, item: ContentItem, video: ExternalVideo, language: Language) -> None:
        """Unlink starting from a content record: only that language's link is cleared"""
        self.link_store.unlink(video.id, item.id, [Language(language)])

    def unlink_from_video(self, video: ExternalVideo, content_id: Optional[str] = None) -> None:
        """Unlink starting from a video: both language links of the record are cleared"""
        content_id = content_id or video.linked_content_id
        if content_id is None:
            self.link_store.clear_link(video.id)
            return
        self.link_store.unlink(video.id, content_id, tuple(Language))
