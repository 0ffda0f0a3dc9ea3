#!/usr/bin/env python3
import sys
import logging
import argparse
import json
from datetime import datetime, timezone

from core.db import SessionLocal
from core.logging import setup_json_logging
from linking.link_store import SqlLinkStore
from linking.reconcile import LinkReconciler

logger = logging.getLogger(__name__)

def reconcile_account(account_id: str, dry_run: bool = False) -> dict:
    """Run one reconciliation pass for an account"""
    trace_id = f"reconcile_links_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"

    with SessionLocal() as session:
        reconciler = LinkReconciler(SqlLinkStore(session))
        try:
            report = reconciler.run(account_id, trace_id=trace_id, dry_run=dry_run)
        except Exception as e:
            logger.error(f"Reconciliation failed: {e}", extra={
                "trace_id": trace_id,
                "job": "reconcile_links",
                "account_id": account_id,
            })
            raise

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "report": report.model_dump(),
    }

def main(argv=None):
    parser = argparse.ArgumentParser(description="Clear orphaned and stale video links")
    parser.add_argument("--account", required=True, help="Account ID to reconcile")
    parser.add_argument("--dry-run", action="store_true", help="Report without clearing links")

    args = parser.parse_args(argv)

    setup_json_logging()

    output = reconcile_account(args.account, args.dry_run)
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0

if __name__ == "__main__":
    sys.exit(main())
