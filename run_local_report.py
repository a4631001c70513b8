#!/usr/bin/env python3
"""
Local Report Script
Builds the labour cost trend payload locally and prints it as JSON.
"""

import argparse
import os
import sys
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Add app to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.models.enums import RangeDays
from app.services.labour_trend import (
    DEFAULT_RANGE_DAYS,
    build_labour_cost_trend_payload,
    validate_trend_request,
)
from app.sync import get_snapshot_loader


def main():
    parser = argparse.ArgumentParser(description="Print the labour cost trend payload")
    parser.add_argument("--range-days", type=int, default=DEFAULT_RANGE_DAYS)
    parser.add_argument("--target", type=float, default=None, help="Target labour cost per job")
    parser.add_argument("--company-id", default=os.getenv("DEFAULT_COMPANY_ID"))
    args = parser.parse_args()

    try:
        config = validate_trend_request(
            args.range_days, args.target, os.getenv("REPORT_CURRENCY", "GBP")
        )
    except ValueError as e:
        parser.error(str(e))

    print("=" * 60, file=sys.stderr)
    print("LOCAL LABOUR TREND REPORT", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"Company ID: {args.company_id or 'all'}", file=sys.stderr)
    print(f"Range: {RangeDays.to_label(config.range_days)}", file=sys.stderr)

    snapshot = get_snapshot_loader().load_snapshot(args.company_id)
    print(f"Snapshot: version={snapshot.version} records={snapshot.record_count}", file=sys.stderr)

    payload = build_labour_cost_trend_payload(snapshot, config)
    print(payload.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    main()
