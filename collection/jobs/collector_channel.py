#!/usr/bin/env python3
import sys
import logging
import argparse
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from core import models
from core.db import SessionLocal
from core.logging import setup_json_logging
from core.schemas import Channel, Language
from core.stores import ContentStore, ExternalVideoStore
from collection.clients.youtube import ChannelVideo, YouTubeClient, classify_short

logger = logging.getLogger(__name__)

class ChannelCollector:
    def __init__(self, session: Optional[Session] = None, client: Optional[YouTubeClient] = None):
        self.db = session or SessionLocal()
        self.client = client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.db.close()

    def collect_account(self, account_id: str, language: Optional[Language] = None,
                        limit: int = 200, dry_run: bool = False) -> dict:
        """Sync every channel of an account, or only the one for a language"""
        trace_id = f"collect_channel_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"
        channels = ContentStore(self.db).list_channels(account_id, language)
        totals = {"channels": len(channels), "fetched": 0, "upserts": 0, "errors": 0}

        if not channels:
            logger.warning("No channels configured", extra={"trace_id": trace_id, "account_id": account_id})
            return totals

        client = self.client or YouTubeClient()
        try:
            for channel in channels:
                try:
                    fetched, upserts = self.collect_channel(account_id, channel, client, limit, dry_run, trace_id)
                    totals["fetched"] += fetched
                    totals["upserts"] += upserts
                except Exception as e:
                    totals["errors"] += 1
                    logger.error(f"Channel sync failed: {e}", extra={
                        "trace_id": trace_id,
                        "job": "collector_channel",
                        "channel_id": channel.channel_id
                    })
        finally:
            if self.client is None:
                client.client.close()

        logger.info("Collection completed", extra={
            "trace_id": trace_id,
            "job": "collector_channel",
            "account_id": account_id,
            **totals
        })
        return totals

    def collect_channel(self, account_id: str, channel: Channel, client: YouTubeClient,
                        limit: int, dry_run: bool, trace_id: str) -> tuple[int, int]:
        """Fetch one channel's uploads and upsert their snapshots"""
        logger.info("Starting channel collection", extra={
            "trace_id": trace_id,
            "job": "collector_channel",
            "channel_id": channel.channel_id,
            "language": channel.language.value,
            "limit": limit,
            "dry_run": dry_run
        })

        videos = client.get_channel_videos(channel.channel_id, limit)
        if not videos:
            logger.warning("No videos fetched", extra={"trace_id": trace_id, "channel_id": channel.channel_id})
            return 0, 0

        if dry_run:
            logger.info("Dry run mode - no database changes", extra={
                "trace_id": trace_id,
                "would_upsert": len(videos)
            })
            return len(videos), 0

        rows = self._snapshot_rows(account_id, videos, client, trace_id)
        upserts = ExternalVideoStore(self.db).upsert_snapshots(rows)

        self.db.query(models.YouTubeChannel).filter(models.YouTubeChannel.id == channel.id).update(
            {"last_synced_at": datetime.now(timezone.utc)}, synchronize_session=False
        )
        self.db.commit()

        return len(videos), upserts

    def _snapshot_rows(self, account_id: str, videos: List[ChannelVideo],
                       client: YouTubeClient, trace_id: str) -> List[dict]:
        synced_at = datetime.now(timezone.utc)
        rows = []
        for video in videos:
            is_short = classify_short(video.duration_seconds, lambda: client.probe_is_short(video.video_id))
            rows.append({
                "account_id": account_id,
                "channel_id": video.channel_id,
                "video_id": video.video_id,
                "title": video.title,
                "description": video.description or None,
                "published_at": video.published_at,
                "duration_seconds": video.duration_seconds,
                "is_short": is_short,
                "view_count": video.view_count,
                "like_count": video.like_count,
                "comment_count": video.comment_count,
                "last_synced_at": synced_at
            })
        logger.info(f"Prepared {len(rows)} snapshots", extra={"trace_id": trace_id})
        return rows

def main(argv=None):
    parser = argparse.ArgumentParser(description="Sync YouTube channel videos for an account")
    parser.add_argument("--account", required=True, help="Account ID")
    parser.add_argument("--language", choices=[l.value for l in Language], help="Only sync this language's channel")
    parser.add_argument("--limit", type=int, default=200, help="Max videos per channel (default: 200)")
    parser.add_argument("--dry-run", action="store_true", help="Don't write to database")

    args = parser.parse_args(argv)

    setup_json_logging()

    language = Language(args.language) if args.language else None
    with ChannelCollector() as collector:
        totals = collector.collect_account(args.account, language, args.limit, args.dry_run)
    return 1 if totals["errors"] else 0

if __name__ == "__main__":
    sys.exit(main())
