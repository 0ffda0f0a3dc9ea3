# APScheduler orchestrator for channel sync and link reconciliation
from __future__ import annotations
import logging
from typing import List

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from pydantic_settings import BaseSettings, SettingsConfigDict

from collection.jobs.collector_channel import ChannelCollector
from core.logging import setup_json_logging
from linking.jobs.reconcile_links import reconcile_account

log = logging.getLogger("runner")


class RunnerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="RUNNER_", extra="ignore")

    # Comma separated
    account_ids: str = ""
    sync_minute: str = "0"
    reconcile_minute: str = "30"
    reconcile_hour: str = "3"

    @property
    def accounts(self) -> List[str]:
        return [a.strip() for a in self.account_ids.split(",") if a.strip()]


def safe(fn, *args):
    def _wrap():
        try:
            fn(*args)
        except Exception:
            log.exception("Job failed: %s", getattr(fn, "__name__", "unknown"))
    return _wrap


def sync_channels(account_id: str):
    with ChannelCollector() as collector:
        collector.collect_account(account_id)


def build_scheduler(settings: RunnerSettings) -> BlockingScheduler:
    sched = BlockingScheduler(timezone="UTC")
    for account_id in settings.accounts:
        # hourly channel sync
        sched.add_job(safe(sync_channels, account_id), CronTrigger(minute=settings.sync_minute),
                      id=f"sync_channels:{account_id}")
        # nightly link cleanup
        sched.add_job(safe(reconcile_account, account_id),
                      CronTrigger(hour=settings.reconcile_hour, minute=settings.reconcile_minute),
                      id=f"reconcile_links:{account_id}")
    return sched


if __name__ == "__main__":
    setup_json_logging()
    settings = RunnerSettings()
    if not settings.accounts:
        log.warning("RUNNER_ACCOUNT_IDS is empty, no jobs scheduled.")
    sched = build_scheduler(settings)
    log.info("Scheduler starting (UTC)...")
    try:
        sched.start()
    except (KeyboardInterrupt, SystemExit):
        log.info("Scheduler stopped.")
