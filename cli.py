"""Storefront-Analytics CLI.

Usage:
    python -m cli report snapshot.json --period 30d --granularity weekly
    python -m cli revenue snapshot.json --period custom --start 2026-01-01 --end 2026-01-31
    python -m cli products snapshot.json --limit 5
    python -m cli customers snapshot.json --compare
    python -m cli orders snapshot.json
    python -m cli segments snapshot.json --segment VIP

A snapshot file is a JSON object with "orders" and/or "customers" arrays.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from storefront_analytics.config import get_settings
from storefront_analytics.services.buckets import Granularity
from storefront_analytics.services.date_range import AnalyticsError, DatePreset
from storefront_analytics.services.report import (
    AnalyticsRequest, AnalyticsService, Snapshot, response_to_dict, to_jsonable,
)
from storefront_analytics.services.segments import CustomerSegment


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="analytics-cli",
        description="Storefront-Analytics CLI",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", help="Report to run")

    for name, help_text in [
        ("report", "Full dashboard (all metric families)"),
        ("revenue", "Revenue metrics and time series"),
        ("products", "Top products"),
        ("customers", "Customer acquisition"),
        ("orders", "Order status distribution"),
    ]:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("file", help="Snapshot JSON file")
        p.add_argument("--period", choices=[d.value for d in DatePreset], default=settings.default_period)
        p.add_argument("--start", help="Custom range start (ISO date)")
        p.add_argument("--end", help="Custom range end (ISO date)")
        p.add_argument(
            "--granularity", choices=[g.value for g in Granularity], default=settings.default_granularity,
        )
        p.add_argument("--compare", action="store_true", help="Compare with the previous period")
        p.add_argument("--limit", type=int, default=settings.default_top_limit, help="Top N products")

    seg = sub.add_parser("segments", help="Customer segmentation")
    seg.add_argument("file", help="Snapshot JSON file")
    seg.add_argument("--segment", choices=[s.value for s in CustomerSegment], help="Only list this segment")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    path = Path(args.file)
    if not path.exists():
        print(f"File not found: {args.file}", file=sys.stderr)
        return 1

    try:
        snapshot = Snapshot.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValueError) as e:
        print(f"Invalid snapshot: {e}", file=sys.stderr)
        return 1

    svc = AnalyticsService()

    if args.command == "segments":
        output = handle_segments(svc, snapshot, args.segment)
    else:
        request = AnalyticsRequest(
            period=DatePreset(args.period),
            custom_start=args.start,
            custom_end=args.end,
            granularity=Granularity(args.granularity),
            compare_with_previous=args.compare,
            limit=args.limit,
        )
        try:
            if args.command == "report":
                response = asyncio.run(svc.dashboard(snapshot, request))
            else:
                response = getattr(svc, args.command)(snapshot, request)
        except (AnalyticsError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        output = response_to_dict(response)

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


def handle_segments(svc: AnalyticsService, snapshot: Snapshot, segment: str | None) -> dict:
    customers = snapshot.customers
    if segment:
        customers = svc.classifier.filter_by_segment(customers, CustomerSegment(segment))
    return to_jsonable(svc.segments(customers))


if __name__ == "__main__":
    sys.exit(main())
