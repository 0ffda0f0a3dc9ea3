"""Linking service: candidate pools, auto-link, manual link/unlink and reconciliation"""
import logging
import time
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import LinkingSettings
from core.schemas import ContentItem, ExternalVideo, Language
from core.stores import ContentFilters, ContentStore, ExternalVideoStore, VideoFilters
from linking.auto_linker import AutoLinker, Match
from linking.candidates import (
    Direction,
    content_candidates,
    external_candidates,
    is_linked,
    search_content,
    search_videos,
)
from linking.link_store import LinkCommitError, SqlLinkStore
from linking.reconcile import LinkReconciler, ReconcileReport
from service.dto import (
    AutoLinkRequestDTO,
    AutoLinkResponseDTO,
    CandidatesResponseDTO,
    ContentCandidateDTO,
    LinkRequestDTO,
    LinkResponseDTO,
    MatchDTO,
    ReconcileRequestDTO,
    UnlinkRequestDTO,
    VideoCandidateDTO,
)
from service.errors import DependencyError, DomainValidationError

logger = logging.getLogger(__name__)

NO_MATCH_MESSAGE = "No suitable match found"


def _load_content(store: ContentStore, account_id: str, content_id: str) -> ContentItem:
    item = store.get(account_id, content_id)
    if item is None:
        raise DomainValidationError(f"Content video {content_id} not found", code="CONTENT_NOT_FOUND")
    return item


def _load_video(store: ExternalVideoStore, account_id: str, video_id: str) -> ExternalVideo:
    video = store.get(video_id)
    if video is None or video.account_id != account_id:
        raise DomainValidationError(f"YouTube video {video_id} not found", code="VIDEO_NOT_FOUND")
    return video


def _external_pool(
    session: Session, account_id: str, item: ContentItem, language: Language, limit: int
) -> List[ExternalVideo]:
    channel_ids = [c.channel_id for c in ContentStore(session).list_channels(account_id, language)]
    if not channel_ids:
        return []
    videos = ExternalVideoStore(session).list_for_channels(
        channel_ids, VideoFilters(account_id=account_id, unlinked_only=True, limit=limit)
    )
    return external_candidates(item, videos, channel_ids)


def _content_pool(session: Session, account_id: str, video: ExternalVideo) -> Tuple[List[ContentItem], Language]:
    store = ContentStore(session)
    language = store.channel_language(account_id, video.channel_id) or Language.EN
    items = store.list(account_id, ContentFilters(ascending=False))
    return content_candidates(video, items), language


def _match_dto(match: Match) -> MatchDTO:
    return MatchDTO(
        content_id=match.content_id,
        external_video_id=match.external_video_id,
        external_id=match.external_id,
        title=match.title,
        language=match.language,
        score=round(match.score, 4),
    )


def list_candidates(
    account_id: str,
    direction: Direction,
    source_id: str,
    *,
    language: Optional[Language],
    search: Optional[str],
    trace_id: str,
    session: Session,
    settings: LinkingSettings
) -> CandidatesResponseDTO:
    """Candidate pool for the linking dialog, narrowed by an optional search term"""
    try:
        if direction == Direction.CONTENT_TO_EXTERNAL:
            language = Language(language or Language.EN)
            item = _load_content(ContentStore(session), account_id, source_id)
            pool = search_videos(
                _external_pool(session, account_id, item, language, settings.external_candidate_limit), search
            )
            videos = [
                VideoCandidateDTO(
                    id=v.id,
                    external_id=v.external_id,
                    title=v.title,
                    published_at=v.published_at,
                    view_count=v.view_count,
                    is_short=v.is_short,
                    linked=is_linked(direction, item, v),
                )
                for v in pool
            ]
            return CandidatesResponseDTO(direction=direction, source_id=source_id, language=language, videos=videos)

        video = _load_video(ExternalVideoStore(session), account_id, source_id)
        items, language = _content_pool(session, account_id, video)
        content = [
            ContentCandidateDTO(
                id=c.id,
                video_number=c.video_number,
                internal_title=c.internal_title,
                video_type=c.video_type,
                en_title=c.title(Language.EN),
                es_title=c.title(Language.ES),
                en_status=c.variant(Language.EN).status,
                es_status=c.variant(Language.ES).status,
                linked=is_linked(direction, video, c),
            )
            for c in search_content(items, search)
        ]
        return CandidatesResponseDTO(direction=direction, source_id=source_id, language=language, content=content)

    except SQLAlchemyError as e:
        logger.error("Failed to load link candidates", extra={"trace_id": trace_id, "error": str(e)})
        raise DependencyError(f"Failed to load videos: {e}")


def auto_link(
    dto: AutoLinkRequestDTO,
    *,
    trace_id: str,
    session: Session,
    settings: LinkingSettings
) -> AutoLinkResponseDTO:
    """
    Link the source to its best title match when the score clears the threshold.

    Raises:
        DomainValidationError: Unknown source
        DependencyError: Store failure or failed link commit
    """
    start_time = time.time()

    logger.info("Starting auto-link", extra={
        "trace_id": trace_id,
        "account_id": dto.account_id,
        "direction": dto.direction.value,
        "language": dto.language.value if dto.language else None,
    })

    linker = AutoLinker(SqlLinkStore(session), threshold=settings.auto_link_threshold)

    try:
        if dto.direction == Direction.CONTENT_TO_EXTERNAL:
            language = Language(dto.language or Language.EN)
            item = _load_content(ContentStore(session), dto.account_id, dto.source_id)
            candidates = _external_pool(session, dto.account_id, item, language, settings.auto_link_candidate_limit)
            match = linker.auto_link_content(item, candidates, language, trace_id=trace_id)
        else:
            video = _load_video(ExternalVideoStore(session), dto.account_id, dto.source_id)
            candidates, language = _content_pool(session, dto.account_id, video)
            match = linker.auto_link_video(video, candidates, language, trace_id=trace_id)

    except LinkCommitError as e:
        logger.error("Auto-link commit failed", extra={"trace_id": trace_id, "error": e.message})
        raise DependencyError(e.message, code=e.code)

    except SQLAlchemyError as e:
        logger.error("Auto-link failed", extra={"trace_id": trace_id, "error": str(e)})
        raise DependencyError(f"Failed to auto-link videos: {e}")

    logger.info("Auto-link finished", extra={
        "trace_id": trace_id,
        "linked": match is not None,
        "candidates": len(candidates),
        "latency_ms": int((time.time() - start_time) * 1000),
    })

    if match is None:
        return AutoLinkResponseDTO(linked=False, message=NO_MATCH_MESSAGE)

    return AutoLinkResponseDTO(
        linked=True,
        match=_match_dto(match),
        message=f'Linked to "{match.title}" ({match.score * 100:.0f}% match)',
    )


def link_videos(dto: LinkRequestDTO, *, trace_id: str, session: Session) -> LinkResponseDTO:
    """Manually link a synced video to a content record"""
    content_store = ContentStore(session)
    try:
        video = _load_video(ExternalVideoStore(session), dto.account_id, dto.video_id)
        item = _load_content(content_store, dto.account_id, dto.content_id)
        # Without an explicit language the video's channel decides
        language = dto.language or content_store.channel_language(dto.account_id, video.channel_id) or Language.EN

        AutoLinker(SqlLinkStore(session)).link(video, item, language)

    except LinkCommitError as e:
        raise DependencyError(e.message, code=e.code)
    except SQLAlchemyError as e:
        raise DependencyError(f"Failed to link videos: {e}")

    logger.info("Videos linked", extra={
        "trace_id": trace_id,
        "content_id": item.id,
        "video_id": video.external_id,
        "language": Language(language).value,
    })
    return LinkResponseDTO(video_id=video.id, content_id=item.id, language=language)


def unlink_videos(dto: UnlinkRequestDTO, *, trace_id: str, session: Session) -> LinkResponseDTO:
    """Clear a link; content-side unlinks clear one language, video-side unlinks clear both"""
    linker = AutoLinker(SqlLinkStore(session))
    try:
        video = _load_video(ExternalVideoStore(session), dto.account_id, dto.video_id)

        if dto.direction == Direction.CONTENT_TO_EXTERNAL:
            if not dto.content_id:
                raise DomainValidationError("content_id is required to unlink from a content video")
            item = _load_content(ContentStore(session), dto.account_id, dto.content_id)
            language = Language(dto.language or Language.EN)
            linker.unlink_from_content(item, video, language)
            content_id = item.id
        else:
            language = None
            content_id = dto.content_id or video.linked_content_id
            linker.unlink_from_video(video, content_id)

    except LinkCommitError as e:
        raise DependencyError(e.message, code=e.code)
    except SQLAlchemyError as e:
        raise DependencyError(f"Failed to unlink videos: {e}")

    logger.info("Videos unlinked", extra={
        "trace_id": trace_id,
        "direction": dto.direction.value,
        "content_id": content_id,
        "video_id": video.external_id,
    })
    return LinkResponseDTO(video_id=video.id, content_id=content_id, language=language)


def reconcile_links(dto: ReconcileRequestDTO, *, trace_id: str, session: Session) -> ReconcileReport:
    """Clear orphaned and implausible links for an account"""
    try:
        return LinkReconciler(SqlLinkStore(session)).run(dto.account_id, trace_id=trace_id, dry_run=dto.dry_run)
    except LinkCommitError as e:
        raise DependencyError(e.message, code=e.code)
    except SQLAlchemyError as e:
        raise DependencyError(f"Failed to reconcile links: {e}")
