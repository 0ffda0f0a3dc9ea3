"""Persistence of the link between a synced video and a content record"""
import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.schemas import ContentItem, ExternalVideo, Language, watch_url
from core.stores import ContentStore, ExternalVideoStore

logger = logging.getLogger(__name__)


class LinkCommitError(Exception):
    """A link or unlink could not be written"""
    def __init__(self, message: str, code: str = "LINK_COMMIT_FAILED"):
        self.message = message
        self.code = code
        super().__init__(message)


class LinkStore(ABC):
    """Abstract link persistence over the video and content collections"""

    @abstractmethod
    def set_link(self, external_video_id: str, content_id: str, language: Language) -> None:
        """Point the video at the content record and the record's link at the video"""

    @abstractmethod
    def clear_link(self, external_video_id: str) -> None:
        """Clear the content reference on the video side only"""

    @abstractmethod
    def clear_content_links(self, content_id: str, languages: Iterable[Language] = tuple(Language)) -> None:
        """Clear the youtube links of a content record for the given languages"""

    @abstractmethod
    def unlink(self, external_video_id: str, content_id: str,
               languages: Iterable[Language] = tuple(Language)) -> None:
        """Clear both sides of a link"""

    @abstractmethod
    def find_by_external_id(self, account_id: str, external_id: str) -> Optional[ExternalVideo]:
        pass

    @abstractmethod
    def find_linked(self, account_id: str) -> List[Tuple[ExternalVideo, Optional[ContentItem]]]:
        """Linked videos paired with their content record, None when it is gone"""

    def clear_links(self, external_video_ids: List[str]) -> int:
        for external_video_id in external_video_ids:
            self.clear_link(external_video_id)
        return len(external_video_ids)

    def find_orphaned(self, account_id: str) -> List[ExternalVideo]:
        """Linked videos whose content record no longer exists in the account"""
        return [video for video, item in self.find_linked(account_id) if item is None]


class SqlLinkStore(LinkStore):
    """Link store writing both sides of a link in one transaction"""

    def __init__(self, session: Session):
        self.db = session
        self.videos = ExternalVideoStore(session)
        self.content = ContentStore(session)

    def _in_transaction(self, action: str, write) -> None:
        try:
            write()
            self.db.commit()
        except LinkCommitError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise LinkCommitError(f"Failed to {action}: {e}") from e

    def set_link(self, external_video_id: str, content_id: str, language: Language) -> None:
        video = self.videos.get(external_video_id)
        if video is None:
            raise LinkCommitError(f"Video {external_video_id} not found", code="VIDEO_NOT_FOUND")

        def write():
            self.videos.update(external_video_id, {"content_video_id": content_id}, commit=False)
            if not self.content.set_youtube_link(content_id, language, watch_url(video.external_id), commit=False):
                raise LinkCommitError(f"Content video {content_id} not found", code="CONTENT_NOT_FOUND")

        self._in_transaction("set link", write)

    def clear_link(self, external_video_id: str) -> None:
        self._in_transaction(
            "clear link",
            lambda: self.videos.update(external_video_id, {"content_video_id": None}, commit=False),
        )

    def clear_content_links(self, content_id: str, languages: Iterable[Language] = tuple(Language)) -> None:
        languages = list(languages)

        def write():
            for language in languages:
                self.content.set_youtube_link(content_id, language, None, commit=False)

        self._in_transaction("clear content links", write)

    def unlink(self, external_video_id: str, content_id: str,
               languages: Iterable[Language] = tuple(Language)) -> None:
        languages = list(languages)

        def write():
            self.videos.update(external_video_id, {"content_video_id": None}, commit=False)
            for language in languages:
                self.content.set_youtube_link(content_id, language, None, commit=False)

        self._in_transaction("unlink", write)

    def find_by_external_id(self, account_id: str, external_id: str) -> Optional[ExternalVideo]:
        return self.videos.find_by_external_id(account_id, external_id)

    def find_linked(self, account_id: str) -> List[Tuple[ExternalVideo, Optional[ContentItem]]]:
        linked = self.videos.list_linked(account_id)
        items = self.content.get_many(account_id, (video.linked_content_id for video in linked))
        return [(video, items.get(video.linked_content_id)) for video in linked]

    def clear_links(self, external_video_ids: List[str]) -> int:
        """Clear the video side of many links at once"""
        try:
            return self.videos.clear_links(external_video_ids)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise LinkCommitError(f"Failed to clear links: {e}") from e
