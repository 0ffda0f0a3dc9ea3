"""Greedy auto-scheduling of draft videos onto future publication days"""
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from core.schemas import ContentItem, FormatMix, Language
from core.stores import ContentStore

logger = logging.getLogger(__name__)

MAX_WEEKS = 52
SUNDAY = 0


class SchedulingPreferences(BaseModel):
    """Posting preferences for one language"""
    days_of_week: Set[int] = Field(default_factory=set)
    frequency: int = Field(default=3, ge=0)
    format_mix: FormatMix = FormatMix.BALANCED
    selected_topics: Set[str] = Field(default_factory=set)

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v):
        invalid = [day for day in v if not 0 <= day <= 6]
        if invalid:
            raise ValueError(f"Weekday indices must be 0-6 (0 = Sunday), got {sorted(invalid)}")
        return v


DEFAULT_PREFERENCES = {
    Language.EN: SchedulingPreferences(days_of_week={1, 3, 5}, frequency=3),
    Language.ES: SchedulingPreferences(days_of_week={2, 4, 6}, frequency=3),
}


class ScheduledSlot(BaseModel):
    date: datetime
    language: Language


class ScheduleCommitError(Exception):
    """Saving a schedule failed partway; earlier writes are kept"""
    def __init__(self, message: str, applied: int, failed: int, code: str = "SCHEDULE_COMMIT_FAILED"):
        self.message = message
        self.applied = applied
        self.failed = failed
        self.code = code
        super().__init__(message)


def weekday_index(day: datetime) -> int:
    """Weekday with Sunday as 0"""
    return (day.weekday() + 1) % 7


def select_candidates(
    items: Iterable[ContentItem],
    preferences: SchedulingPreferences,
    language: Language,
) -> List[ContentItem]:
    """Unscheduled drafts for the language that pass the topic and format filters, order kept"""
    language = Language(language)
    selected = []
    for item in items:
        if not item.is_unscheduled_draft(language):
            continue
        if preferences.selected_topics and item.topic_id not in preferences.selected_topics:
            continue
        if preferences.format_mix != FormatMix.BALANCED and item.video_type.value != preferences.format_mix.value:
            continue
        selected.append(item)
    return selected


class ScheduleGenerator:
    """Walks forward day by day assigning candidates under weekly caps"""

    def __init__(self, max_weeks: int = MAX_WEEKS):
        self.max_weeks = max_weeks

    def generate(
        self,
        candidates: List[ContentItem],
        preferences: SchedulingPreferences,
        language: Language,
        start: Optional[datetime] = None,
    ) -> Dict[str, ScheduledSlot]:
        language = Language(language)
        current = start or datetime.now(timezone.utc)
        schedule: Dict[str, ScheduledSlot] = {}

        index = 0
        weeks = 0
        posts_this_week = 0

        while index < len(candidates) and weeks < self.max_weeks:
            if weekday_index(current) in preferences.days_of_week and posts_this_week < preferences.frequency:
                schedule[candidates[index].id] = ScheduledSlot(date=current, language=language)
                index += 1
                posts_this_week += 1

            current = current + timedelta(days=1)

            if weekday_index(current) == SUNDAY:
                posts_this_week = 0
                weeks += 1

        return schedule


class ScheduleDraft:
    """A generated schedule held in memory until it is saved or cleared"""

    def __init__(self, language: Language, assignments: Optional[Dict[str, ScheduledSlot]] = None):
        self.language = Language(language)
        self.assignments: Dict[str, ScheduledSlot] = dict(assignments or {})

    @classmethod
    def generate(
        cls,
        items: Iterable[ContentItem],
        preferences: SchedulingPreferences,
        language: Language,
        start: Optional[datetime] = None,
        generator: Optional[ScheduleGenerator] = None,
    ) -> "ScheduleDraft":
        generator = generator or ScheduleGenerator()
        candidates = select_candidates(items, preferences, language)
        return cls(language, generator.generate(candidates, preferences, language, start))

    def __len__(self) -> int:
        return len(self.assignments)

    def clear(self) -> None:
        """Discard the unsaved assignments; the store is never touched"""
        self.assignments = {}

    def save(self, store: ContentStore, trace_id: str = "") -> int:
        """Write each publication date in turn, returning how many were applied"""
        start_time = time.time()
        applied = 0
        total = len(self.assignments)

        for content_id, slot in self.assignments.items():
            try:
                store.set_publication_date(content_id, slot.language, slot.date)
            except Exception as e:
                logger.error(f"Schedule save failed: {e}", extra={
                    "trace_id": trace_id,
                    "content_id": content_id,
                    "language": slot.language.value,
                    "applied": applied,
                })
                raise ScheduleCommitError(
                    f"Saved {applied} of {total} publication dates before failing: {e}",
                    applied=applied,
                    failed=total - applied,
                ) from e
            applied += 1

        logger.info("Schedule saved", extra={
            "trace_id": trace_id,
            "language": self.language.value,
            "applied": applied,
            "latency_ms": int((time.time() - start_time) * 1000),
        })
        self.assignments = {}
        return applied
