"""Content gap analysis: slots needed until a target date versus drafts on hand"""
import logging
import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

import pandas as pd
from pydantic import BaseModel, Field, computed_field

from core.schemas import ContentItem, Language, Topic, VideoType

logger = logging.getLogger(__name__)

DEFAULT_LONG_FORM_PERCENT = 60
TARGET_PERIODS = {"1-month": 1, "3-months": 3, "6-months": 6}
DEFAULT_PERIOD = "3-months"


class SlotCount(BaseModel):
    needed: int
    available: int

    @computed_field
    @property
    def deficit(self) -> bool:
        return self.available < self.needed


class TopicGap(BaseModel):
    topic_id: str
    topic: str
    topic_color: Optional[str] = None
    long_form: SlotCount
    short_form: SlotCount
    total: SlotCount


class GapReport(BaseModel):
    language: Language
    target_date: datetime
    posts_per_week: int
    days_until_target: int
    weeks_until_target: int
    total_needed: int
    available_drafts: int
    shortfall: int
    breakdown: List[TopicGap] = Field(default_factory=list)


def _utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def resolve_target_date(period: str = DEFAULT_PERIOD, custom: Optional[datetime] = None,
                        now: Optional[datetime] = None) -> datetime:
    """Turn a named target period (or a custom date) into a target datetime"""
    now = _utc(now or datetime.now(timezone.utc))
    if period == "custom" and custom is not None:
        return _utc(custom)

    months = TARGET_PERIODS.get(period, TARGET_PERIODS[DEFAULT_PERIOD])
    # DateOffset clamps to the last day of shorter months
    return (pd.Timestamp(now) + pd.DateOffset(months=months)).to_pydatetime()


def _draft_tallies(items: Iterable[ContentItem], language: Language) -> pd.DataFrame:
    rows = [
        {"content_id": item.id, "topic_id": item.topic_id, "video_type": item.video_type.value}
        for item in items
        if item.is_unscheduled_draft(language)
    ]
    return pd.DataFrame(rows, columns=["content_id", "topic_id", "video_type"])


class GapAnalyzer:
    """Computes the content gap for one language and posting cadence"""

    def __init__(self, long_form_percent: int = DEFAULT_LONG_FORM_PERCENT):
        if not 0 <= long_form_percent <= 100:
            raise ValueError("long_form_percent must be between 0 and 100")
        self.long_form_percent = long_form_percent

    def analyze(
        self,
        content_items: Sequence[ContentItem],
        topics: Sequence[Topic],
        target_date: datetime,
        posts_per_week: int,
        language: Language,
        now: Optional[datetime] = None,
        trace_id: str = "",
    ) -> GapReport:
        language = Language(language)
        now = _utc(now or datetime.now(timezone.utc))
        target_date = _utc(target_date)

        # Whole days, truncated toward zero
        days_until_target = int((target_date - now).total_seconds() / 86400)
        weeks_until_target = max(0, math.ceil(days_until_target / 7))
        total_needed = weeks_until_target * posts_per_week

        drafts = _draft_tallies(content_items, language)
        available_drafts = len(drafts)
        shortfall = max(0, total_needed - available_drafts)

        breakdown = self._breakdown(drafts, topics, total_needed)

        logger.info("Content gap analysis completed", extra={
            "trace_id": trace_id,
            "language": language.value,
            "total_needed": total_needed,
            "available_drafts": available_drafts,
            "shortfall": shortfall,
            "topics": len(breakdown),
        })

        return GapReport(
            language=language,
            target_date=target_date,
            posts_per_week=posts_per_week,
            days_until_target=days_until_target,
            weeks_until_target=weeks_until_target,
            total_needed=total_needed,
            available_drafts=available_drafts,
            shortfall=shortfall,
            breakdown=breakdown,
        )

    def _breakdown(self, drafts: pd.DataFrame, topics: Sequence[Topic], total_needed: int) -> List[TopicGap]:
        if not topics:
            return []

        # Equal share per topic, split into long and short form by a fixed percentage
        needed_per_topic = _ceil_div(total_needed, len(topics))
        long_needed = _ceil_div(needed_per_topic * self.long_form_percent, 100)
        short_needed = _ceil_div(needed_per_topic * (100 - self.long_form_percent), 100)

        counts = {}
        if not drafts.empty:
            tallies = drafts.dropna(subset=["topic_id"]).groupby(["topic_id", "video_type"]).size()
            counts = {key: int(n) for key, n in tallies.items()}

        breakdown = []
        for topic in topics:
            long_available = counts.get((topic.id, VideoType.LONG_FORM.value), 0)
            short_available = counts.get((topic.id, VideoType.SHORT_FORM.value), 0)
            breakdown.append(TopicGap(
                topic_id=topic.id,
                topic=topic.name,
                topic_color=topic.color,
                long_form=SlotCount(needed=long_needed, available=long_available),
                short_form=SlotCount(needed=short_needed, available=short_available),
                total=SlotCount(needed=long_needed + short_needed,
                                available=long_available + short_available),
            ))
        return breakdown
