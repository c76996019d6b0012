#!/usr/bin/env python3
"""
Print a settlement table and summary for a caller and date range.

Usage:
    python scripts/settlement_report.py --caller store-1 --from 2026-10-01 --to 2026-10-18
    python scripts/settlement_report.py --caller hq-1 --from 2026-10-01 --to 2026-10-18 \
        --vendor oroplay --search kim --level 6 --execute week
"""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from commission import format_currency, format_percentage
from settlement.config.settings import get_settings
from settlement.models.enums import NodeType, SettlementPeriod
from settlement.services.settlement.dto import DateRange, SettlementRow
from settlement.services.settlement.summary import RowFilter, displayed_rolling
from settlement.services.settlement_service import SettlementService
from settlement.utils.database import create_session_maker, create_settlement_engine
from settlement.utils.exceptions import SettlementError
from settlement.utils.logging_setup import setup_logging


def _format_row(row: SettlementRow, shown_rolling) -> str:
    indent = "  " * row.depth
    return (
        f"{indent}{row.username:<20} {row.level_name:<16} "
        f"bet {format_currency(row.total_bet):>22} "
        f"rolling {format_currency(shown_rolling):>20} "
        f"own {format_currency(row.individual_commission):>20} "
        f"cash {format_currency(row.net_cash_diff):>20}"
        f"{'' if row.data_complete else '  (incomplete)'}"
    )


async def report(args: argparse.Namespace) -> int:
    settings = get_settings()
    setup_logging(settings)

    engine = create_settlement_engine(settings)
    service = SettlementService.from_session_maker(create_session_maker(engine), settings)

    try:
        date_range = DateRange.create(args.date_from, args.date_to)
        config = await service.get_padding_cut_config(args.caller)
        rows = await service.compute_settlement(args.caller, date_range, args.vendor, config)

        row_filter = RowFilter(
            search=args.search,
            levels=frozenset(args.level) if args.level else None,
            node_type=NodeType(args.node_type) if args.node_type else None,
        )
        visible = service.list_rows(rows, row_filter)
        for row in visible:
            print(_format_row(row, displayed_rolling(row, config)))

        stats = service.compute_summary(rows, row_filter)
        print()
        print(f"Rows:               {stats.row_count} ({stats.partner_count} partners, {stats.member_count} members)")
        print(f"Total bet:          {format_currency(stats.total_bet)}")
        print(f"GGR:                {format_currency(stats.ggr)}")
        print(f"Rolling (gross):    {format_currency(stats.aggregate_rolling)}")
        print(f"Padding cut:        {format_currency(stats.cut_amount)}"
              f" at {format_percentage(config.cut_percentage)}")
        print(f"Own commission:     {format_currency(stats.individual_rolling + stats.individual_losing)}")
        print(f"Net cash diff:      {format_currency(stats.net_cash_diff)}")

        if args.execute:
            result = await service.execute_settlement(
                args.caller, date_range, args.execute, args.vendor
            )
            if result.success:
                logger.success(
                    f"Settlement #{result.data.id} stored: "
                    f"{format_currency(result.data.commission_amount)}"
                )
            else:
                logger.error(f"Settlement refused [{result.error_code}]: {result.error}")
                return 1
    except SettlementError as e:
        logger.error(f"Settlement failed: {e}")
        return 2
    finally:
        await engine.dispose()

    return 0


def main():
    parser = argparse.ArgumentParser(description="Partner settlement report")
    parser.add_argument("--caller", required=True, help="Requesting partner ID")
    parser.add_argument("--from", dest="date_from", type=date.fromisoformat, required=True, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--to", dest="date_to", type=date.fromisoformat, required=True, help="End date (YYYY-MM-DD)")
    parser.add_argument("--vendor", default=None, help="Only wagers of this game vendor")
    parser.add_argument("--search", default=None, help="Filter rows by id/username substring")
    parser.add_argument("--level", type=int, action="append", help="Filter rows by level (repeatable)")
    parser.add_argument("--node-type", choices=[t.value for t in NodeType], default=None)
    parser.add_argument(
        "--execute",
        choices=[p.value for p in SettlementPeriod],
        default=None,
        help="Store a settlement record for this period label",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(report(args)))


if __name__ == "__main__":
    main()
