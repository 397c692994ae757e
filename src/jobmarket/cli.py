"""jobmarket CLI — command-line interface for the job marketplace.

Usage:
    python -m jobmarket.cli status
    python -m jobmarket.cli --block 100 create-job --caller alice \
        --title "Web Development" --description "Build a website" \
        --budget 1000 --deadline 200 --bid-deadline 150
    python -m jobmarket.cli --block 100 place-bid --caller bob --job 1 --amount 800 --time 10
    python -m jobmarket.cli accept-bid --caller alice --job 1 --bidder bob
    python -m jobmarket.cli show-job --job 1
    python -m jobmarket.cli check-invariants

The host ledger supplies the block height; pass it with --block.
State persists in the data directory (state.json, events.jsonl).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from jobmarket.config import MarketConfig
from jobmarket.market.clock import LogicalClock
from jobmarket.market.invariants import check_invariants
from jobmarket.market.lifecycle import JobLifecycle, LifecycleResult
from jobmarket.persistence.event_log import EventLog
from jobmarket.persistence.state_store import StateStore


DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "config"
DEFAULT_DATA = Path(__file__).resolve().parents[2] / "data"


def _make_lifecycle(args: argparse.Namespace) -> JobLifecycle:
    """Create a JobLifecycle with durable persistence."""
    data_dir: Path = args.data
    data_dir.mkdir(parents=True, exist_ok=True)
    config = MarketConfig.from_env(args.config)
    return JobLifecycle(
        config,
        LogicalClock(args.block),
        event_log=EventLog(storage_path=data_dir / "events.jsonl"),
        state_store=StateStore(storage_path=data_dir / "state.json"),
    )


def _report(result: LifecycleResult, message: str) -> int:
    if result.success:
        print(message)
        return 0
    code = int(result.error) if result.error is not None else 0
    print(f"Failed [{code}]: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def cmd_status(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    print(json.dumps(market.status(), indent=2))
    return 0


def cmd_create_job(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.create_job(
        args.caller,
        args.title,
        args.description,
        args.budget,
        args.deadline,
        args.bid_deadline,
    )
    return _report(result, f"Created job: {result.value}")


def cmd_edit_job(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.edit_job(
        args.caller,
        args.job,
        title=args.title,
        description=args.description,
        budget=args.budget,
        deadline=args.deadline,
        bid_deadline=args.bid_deadline,
    )
    return _report(result, f"Edited job: {args.job}")


def cmd_place_bid(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.place_bid(args.caller, args.job, args.amount, args.time)
    return _report(result, f"Bid placed on job {args.job}")


def cmd_withdraw_bid(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.withdraw_bid(args.caller, args.job)
    return _report(result, f"Bid withdrawn from job {args.job}")


def cmd_accept_bid(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.accept_bid(args.caller, args.job, args.bidder)
    return _report(result, f"Job {args.job} assigned to {args.bidder}")


def cmd_start_progress(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.start_progress(args.caller, args.job)
    return _report(result, f"Job {args.job} in progress")


def cmd_complete(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.mark_completed(args.caller, args.job)
    return _report(result, f"Job {args.job} completed")


def cmd_dispute(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.mark_disputed(args.caller, args.job)
    return _report(result, f"Job {args.job} disputed")


def cmd_cancel(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.cancel_job(args.caller, args.job)
    return _report(result, f"Job {args.job} cancelled")


def cmd_pause(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.set_paused(args.caller, True)
    return _report(result, "Marketplace paused")


def cmd_unpause(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.set_paused(args.caller, False)
    return _report(result, "Marketplace unpaused")


def cmd_show_job(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    result = market.get_job(args.job)
    if not result.success:
        return _report(result, "")
    data = result.value.to_dict()
    data["bid_count"] = market.get_bid_count(args.job).value
    print(json.dumps(data, indent=2))
    return 0


def cmd_check_invariants(args: argparse.Namespace) -> int:
    market = _make_lifecycle(args)
    errors = check_invariants(market)
    if errors:
        for error in errors:
            print(f"FAIL: {error}", file=sys.stderr)
        return 1
    print("All marketplace invariants hold")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobmarket",
        description="Job marketplace — ledger-ordered job lifecycle CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to config directory (default: config/)",
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=DEFAULT_DATA,
        help="Path to data directory (default: data/)",
    )
    parser.add_argument(
        "--block", type=int, default=0,
        help="Current block height supplied by the host ledger (default: 0)",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("status", help="Show marketplace status")

    p_create = sub.add_parser("create-job", help="Post a new job")
    p_create.add_argument("--caller", required=True, help="Client identity")
    p_create.add_argument("--title", required=True)
    p_create.add_argument("--description", required=True)
    p_create.add_argument("--budget", type=int, required=True)
    p_create.add_argument("--deadline", type=int, required=True)
    p_create.add_argument("--bid-deadline", type=int, required=True)

    p_edit = sub.add_parser("edit-job", help="Edit an open job")
    p_edit.add_argument("--caller", required=True, help="Client identity")
    p_edit.add_argument("--job", type=int, required=True)
    p_edit.add_argument("--title")
    p_edit.add_argument("--description")
    p_edit.add_argument("--budget", type=int)
    p_edit.add_argument("--deadline", type=int)
    p_edit.add_argument("--bid-deadline", type=int)

    p_bid = sub.add_parser("place-bid", help="Bid on an open job")
    p_bid.add_argument("--caller", required=True, help="Bidder identity")
    p_bid.add_argument("--job", type=int, required=True)
    p_bid.add_argument("--amount", type=int, required=True)
    p_bid.add_argument("--time", type=int, required=True, help="Proposed time")

    p_accept = sub.add_parser("accept-bid", help="Accept a bid")
    p_accept.add_argument("--caller", required=True, help="Client identity")
    p_accept.add_argument("--job", type=int, required=True)
    p_accept.add_argument("--bidder", required=True)

    for name, help_text in (
        ("withdraw-bid", "Withdraw your bid"),
        ("start-progress", "Start work on an assigned job"),
        ("complete", "Mark a job completed"),
        ("dispute", "Mark a job disputed"),
        ("cancel", "Cancel an open job"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--caller", required=True)
        p.add_argument("--job", type=int, required=True)

    for name, help_text in (("pause", "Pause the marketplace"), ("unpause", "Resume")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--caller", required=True, help="Administrator identity")

    p_show = sub.add_parser("show-job", help="Show a job record")
    p_show.add_argument("--job", type=int, required=True)

    sub.add_parser("check-invariants", help="Audit marketplace invariants")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "status": cmd_status,
        "create-job": cmd_create_job,
        "edit-job": cmd_edit_job,
        "place-bid": cmd_place_bid,
        "withdraw-bid": cmd_withdraw_bid,
        "accept-bid": cmd_accept_bid,
        "start-progress": cmd_start_progress,
        "complete": cmd_complete,
        "dispute": cmd_dispute,
        "cancel": cmd_cancel,
        "pause": cmd_pause,
        "unpause": cmd_unpause,
        "show-job": cmd_show_job,
        "check-invariants": cmd_check_invariants,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
