"""
Command line entry point for the supply tracker reports.

    python main.py reorder [--priority critical urgent] [--test]
    python main.py count --cash 42.50 [--actor NAME] [--notes TEXT] [--test]
    python main.py usage [--range 7d|30d|90d|all] [--test]
"""
import argparse
import logging
import sys

from supply_tracker import settings
from supply_tracker.errors import SupplyTrackerError
from supply_tracker.logger import setup_logger
from supply_tracker.pipelines.count import CountPipeline
from supply_tracker.pipelines.reorder import ReorderPipeline
from supply_tracker.pipelines.usage import UsagePipeline

logger = logging.getLogger("supply_tracker")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Office supply inventory reports")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reorder = subparsers.add_parser("reorder", help="Reorder alerts and shopping list")
    reorder.add_argument(
        "--priority",
        nargs="+",
        choices=settings.PRIORITY_ORDER,
        help="Priorities to put on the shopping list (default: all)",
    )

    count = subparsers.add_parser("count", help="Reconcile a physical count sheet")
    count.add_argument("--cash", required=True, help="Cash counted in the box")
    count.add_argument("--actor", default="Unknown", help="Who performed the count")
    count.add_argument("--notes", default="", help="Notes for the cash reconciliation")

    usage = subparsers.add_parser("usage", help="Usage metrics over a time range")
    usage.add_argument(
        "--range",
        dest="time_range",
        default="30d",
        choices=list(settings.USAGE_TIME_RANGES),
    )

    for sub in (reorder, count, usage):
        sub.add_argument("--test", action="store_true", help="Skip the webhook post")
    return parser


def build_pipeline(args):
    if args.command == "reorder":
        return ReorderPipeline(priorities=args.priority, test_mode=args.test)
    if args.command == "count":
        return CountPipeline(
            actual_cash=args.cash,
            actor=args.actor,
            notes=args.notes,
            test_mode=args.test,
        )
    return UsagePipeline(time_range=args.time_range, test_mode=args.test)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger("supply_tracker", logging.DEBUG if args.debug else logging.INFO)

    try:
        pipeline = build_pipeline(args)
    except SupplyTrackerError as e:
        logger.error(f"❌ {e}")
        return 2

    result = pipeline.run()
    return 0 if result is not None else 1


if __name__ == "__main__":
    sys.exit(main())
