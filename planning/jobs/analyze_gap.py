#!/usr/bin/env python3
import sys
import logging
import argparse
import json
from datetime import datetime, timezone

from core.config import get_planning_settings
from core.db import SessionLocal
from core.logging import setup_json_logging
from core.schemas import Language
from core.stores import ContentStore
from planning.gap_analyzer import GapAnalyzer, TARGET_PERIODS, resolve_target_date

logger = logging.getLogger(__name__)

class GapAnalysisJob:
    def __init__(self):
        self.db = SessionLocal()
        self.settings = get_planning_settings()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.db.close()

    def analyze(self, account_id: str, language: Language, target_date: datetime, posts_per_week: int):
        """Load the account's content snapshot and compute its gap report"""
        trace_id = f"gap_analysis_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"

        try:
            logger.info("Starting gap analysis", extra={
                "trace_id": trace_id,
                "job": "analyze_gap",
                "account_id": account_id,
                "language": language.value,
            })

            store = ContentStore(self.db)
            items = store.list(account_id)
            topics = store.list_topics(account_id)

            analyzer = GapAnalyzer(long_form_percent=self.settings.long_form_percent)
            return analyzer.analyze(items, topics, target_date, posts_per_week, language, trace_id=trace_id)

        except Exception as e:
            logger.error(f"Gap analysis failed: {e}", extra={
                "trace_id": trace_id,
                "job": "analyze_gap"
            })
            raise

def main(argv=None):
    settings = get_planning_settings()

    parser = argparse.ArgumentParser(description="Analyze the content gap for one language")
    parser.add_argument("--account", required=True, help="Account ID")
    parser.add_argument("--language", choices=[l.value for l in Language], default="en")
    parser.add_argument("--period", choices=list(TARGET_PERIODS) + ["custom"], default="3-months")
    parser.add_argument("--target-date", help="Custom target date (YYYY-MM-DD), used with --period custom")
    parser.add_argument("--posts-per-week", type=int, default=settings.default_posts_per_week)
    parser.add_argument("--out-file", help="Output file path (optional)")

    args = parser.parse_args(argv)

    setup_json_logging()

    custom = datetime.fromisoformat(args.target_date) if args.target_date else None
    target_date = resolve_target_date(args.period, custom)

    with GapAnalysisJob() as job:
        report = job.analyze(args.account, Language(args.language), target_date, args.posts_per_week)

    output_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "analysis_params": {
            "period": args.period,
            "posts_per_week": args.posts_per_week
        },
        "report": report.model_dump(mode="json")
    }

    json_output = json.dumps(output_data, indent=2, ensure_ascii=False)

    if args.out_file:
        with open(args.out_file, 'w', encoding='utf-8') as f:
            f.write(json_output)
        print(f"Results saved to {args.out_file}")
    else:
        print(json_output)
    return 0

if __name__ == "__main__":
    sys.exit(main())
