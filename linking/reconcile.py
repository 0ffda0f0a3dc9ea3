"""Background consistency check for video/content links"""
import logging
import time
from typing import List, Optional

from pydantic import BaseModel, Field

from core.schemas import ContentItem, ExternalVideo, Language
from linking import similarity
from linking.link_store import LinkStore

logger = logging.getLogger(__name__)


class ReconcileReport(BaseModel):
    """Outcome of a reconciliation pass"""
    account_id: str
    checked: int = 0
    orphaned: List[str] = Field(default_factory=list)
    stale: List[str] = Field(default_factory=list)
    cleared: int = 0
    dry_run: bool = False


def is_plausible_link(video: ExternalVideo, item: ContentItem, min_score: float = 0.0) -> bool:
    """Whether the video title contains, or shares enough words with, any of the record's titles.

    A case-insensitive substring relation in either direction is always plausible.
    A record with no titles at all cannot be judged and is kept.
    """
    titles = [t.strip() for t in (item.title(Language.EN), item.title(Language.ES), item.internal_title)
              if t and t.strip()]
    if not titles:
        return True

    video_title = (video.title or "").strip().lower()
    if video_title and any(title.lower() in video_title or video_title in title.lower() for title in titles):
        return True
    return any(similarity.score(video.title, title) > min_score for title in titles)


class LinkReconciler:
    """Clears orphaned and implausible links on the video side"""

    def __init__(self, link_store: LinkStore, min_score: float = 0.0):
        self.link_store = link_store
        self.min_score = min_score

    def run(self, account_id: str, trace_id: str = "", dry_run: bool = False) -> ReconcileReport:
        start_time = time.time()
        report = ReconcileReport(account_id=account_id, dry_run=dry_run)

        logger.info("Starting link reconciliation", extra={
            "trace_id": trace_id,
            "job": "reconcile_links",
            "account_id": account_id,
        })

        for video, item in self.link_store.find_linked(account_id):
            report.checked += 1
            if item is None:
                report.orphaned.append(video.id)
            elif not is_plausible_link(video, item, self.min_score):
                report.stale.append(video.id)

        to_clear = report.orphaned + report.stale
        if to_clear and not dry_run:
            report.cleared = self.link_store.clear_links(to_clear)

        logger.info("Link reconciliation completed", extra={
            "trace_id": trace_id,
            "job": "reconcile_links",
            "account_id": account_id,
            "checked": report.checked,
            "orphaned": len(report.orphaned),
            "stale": len(report.stale),
            "latency_ms": int((time.time() - start_time) * 1000),
        })
        return report
