"""Planning service: content gap analysis and schedule generation"""
import logging
import time
from collections import Counter

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import PlanningSettings
from core.stores import ContentFilters, ContentStore
from planning.gap_analyzer import GapAnalyzer, GapReport, resolve_target_date
from planning.schedule_generator import (
    DEFAULT_PREFERENCES,
    ScheduleCommitError,
    ScheduleDraft,
    ScheduledSlot,
    ScheduleGenerator,
    select_candidates,
)
from service.dto import (
    GapRequestDTO,
    ScheduleCommitRequestDTO,
    ScheduleCommitResponseDTO,
    ScheduledItemDTO,
    ScheduleRequestDTO,
    ScheduleResponseDTO,
)
from service.errors import DependencyError, DomainValidationError

logger = logging.getLogger(__name__)


def analyze_gap(
    dto: GapRequestDTO,
    *,
    trace_id: str,
    session: Session,
    settings: PlanningSettings
) -> GapReport:
    """Gap between slots needed until the target date and unscheduled drafts"""
    if dto.period == "custom" and dto.custom_end_date is None:
        raise DomainValidationError("custom_end_date is required for a custom period")

    store = ContentStore(session)
    try:
        items = store.list(dto.account_id)
        topics = store.list_topics(dto.account_id)
    except SQLAlchemyError as e:
        logger.error("Failed to load content snapshot", extra={"trace_id": trace_id, "error": str(e)})
        raise DependencyError(f"Failed to load content videos: {e}")

    target_date = resolve_target_date(dto.period, dto.custom_end_date)
    analyzer = GapAnalyzer(long_form_percent=settings.long_form_percent)
    return analyzer.analyze(items, topics, target_date, dto.posts_per_week, dto.language, trace_id=trace_id)


def generate_schedule(
    dto: ScheduleRequestDTO,
    *,
    trace_id: str,
    session: Session,
    settings: PlanningSettings
) -> ScheduleResponseDTO:
    """Preview publication dates for unscheduled drafts; nothing is persisted"""
    start_time = time.time()
    preferences = dto.preferences or DEFAULT_PREFERENCES[dto.language]

    try:
        items = ContentStore(session).list(
            dto.account_id, ContentFilters(language=dto.language, unscheduled_drafts_only=True)
        )
    except SQLAlchemyError as e:
        logger.error("Failed to load drafts", extra={"trace_id": trace_id, "error": str(e)})
        raise DependencyError(f"Failed to load content videos: {e}")

    candidates = select_candidates(items, preferences, dto.language)
    generator = ScheduleGenerator(max_weeks=settings.max_schedule_weeks)
    draft = ScheduleDraft(dto.language, generator.generate(candidates, preferences, dto.language, dto.start))
    by_id = {item.id: item for item in candidates}

    assignments = [
        ScheduledItemDTO(
            content_id=content_id,
            date=slot.date,
            video_number=by_id[content_id].video_number,
            internal_title=by_id[content_id].internal_title,
        )
        for content_id, slot in draft.assignments.items()
    ]
    logger.info("Schedule generated", extra={
        "trace_id": trace_id,
        "account_id": dto.account_id,
        "language": dto.language.value,
        "assigned": len(assignments),
        "latency_ms": int((time.time() - start_time) * 1000),
    })

    return ScheduleResponseDTO(
        language=dto.language,
        assignments=assignments,
        candidates=len(candidates),
        unscheduled=len(candidates) - len(assignments),
    )


def commit_schedule(
    dto: ScheduleCommitRequestDTO,
    *,
    trace_id: str,
    session: Session
) -> ScheduleCommitResponseDTO:
    """
    Persist publication dates one record at a time.

    Raises:
        DomainValidationError: Assignment for a record outside the account, or a record assigned twice
        DependencyError: A write failed; earlier writes stay applied
    """
    store = ContentStore(session)
    ids = [a.content_id for a in dto.assignments]
    duplicates = sorted(cid for cid, n in Counter(ids).items() if n > 1)
    if duplicates:
        raise DomainValidationError(f"Content videos assigned more than once: {duplicates}", code="DUPLICATE_ASSIGNMENT")

    try:
        known = store.get_many(dto.account_id, ids)
    except SQLAlchemyError as e:
        raise DependencyError(f"Failed to load content videos: {e}")

    unknown = sorted(set(ids) - set(known))
    if unknown:
        raise DomainValidationError(f"Unknown content videos: {unknown}", code="CONTENT_NOT_FOUND")

    draft = ScheduleDraft(dto.language, {
        a.content_id: ScheduledSlot(date=a.date, language=dto.language) for a in dto.assignments
    })

    try:
        applied = draft.save(store, trace_id=trace_id)
    except ScheduleCommitError as e:
        session.rollback()
        raise DependencyError(e.message, code=e.code)

    return ScheduleCommitResponseDTO(applied=applied)
