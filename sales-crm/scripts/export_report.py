#!/usr/bin/env python3
"""
Sales Report Export Script

Exports a filtered sales report from the Supabase database to CSV, in the
same format the Reports page downloads.

Usage:
    python export_report.py --output relatorio.csv
    python export_report.py --category telecomunicacoes --status ativo --output telecom_ativos.csv
    python export_report.py --start 2024-01-01 --end 2024-12-31 --output vendas_2024.csv
"""

from __future__ import annotations

import argparse
import sys
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.sale import SaleCategory, SaleStatus
from repositories.sale_repository import list_sales
from services.csv_export_service import CATEGORY_LABELS, STATUS_LABELS, generate_report_csv
from services.report_service import ReportFilters, generate_report
from services.settings import load_settings


def _day_bound(value: Optional[str], tz: ZoneInfo, *, end_of_day: bool) -> Optional[datetime]:
    """Turn a YYYY-MM-DD argument into an inclusive UTC bound for that local day."""
    if value is None:
        return None
    day = date.fromisoformat(value)
    moment = time.max if end_of_day else time.min
    return datetime.combine(day, moment, tzinfo=tz).astimezone(timezone.utc)


def build_filters(args: argparse.Namespace, tz: ZoneInfo) -> ReportFilters:
    return ReportFilters(
        start=_day_bound(args.start, tz, end_of_day=False),
        end=_day_bound(args.end, tz, end_of_day=True),
        category=SaleCategory(args.category) if args.category else None,
        status=SaleStatus(args.status) if args.status else None,
        seller_id=args.seller,
        partner_id=args.partner,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Export a filtered sales report from Supabase to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export all sales
  python export_report.py --output relatorio.csv

  # Export active telecom contracts
  python export_report.py --category telecomunicacoes --status ativo --output telecom.csv

  # Export one partner's sales for 2024
  python export_report.py --partner <partner-id> --start 2024-01-01 --end 2024-12-31 -o parceiro.csv
        """
    )

    parser.add_argument("--output", "-o", required=True, help="Path to output CSV file")
    parser.add_argument("--start", help="First creation day included (YYYY-MM-DD)")
    parser.add_argument("--end", help="Last creation day included (YYYY-MM-DD)")
    parser.add_argument(
        "--category",
        "-c",
        choices=[category.value for category in SaleCategory],
        help="Filter by category",
    )
    parser.add_argument(
        "--status",
        "-s",
        choices=[status.value for status in SaleStatus],
        help="Filter by status",
    )
    parser.add_argument("--seller", help="Filter by seller ID")
    parser.add_argument("--partner", help="Filter by partner ID")

    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        filters = build_filters(args, settings.display_timezone)
    except ValueError as e:
        parser.error(str(e))

    try:
        print("Fetching sales from database...")
        report = generate_report(list_sales(), filters)

        if not report.sales:
            print("No sales found matching the specified filters")
            return 1

        csv_content = generate_report_csv(report, settings.display_timezone)
        with open(args.output, "w", newline="", encoding="utf-8") as f:
            f.write(csv_content)

        print()
        print("=" * 60)
        print("EXPORT SUMMARY")
        print("=" * 60)
        print(f"Total sales exported: {report.total_sales}")
        print(f"Total contract value: {report.total_value} EUR")
        print(f"Total commission:     {report.total_commission} EUR")
        print()
        print("By category:")
        for category, count in report.by_category.items():
            print(f"  {CATEGORY_LABELS[category]}: {count}")
        print("By status:")
        for status, count in report.by_status.items():
            print(f"  {STATUS_LABELS[status]}: {count}")
        print("=" * 60)
        return 0

    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
