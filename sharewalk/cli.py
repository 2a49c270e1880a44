"""Command line interface for sharewalk.

    sharewalk scan ROOT --report report.csv --state state.json [--budget 240]
    sharewalk status --state state.json
    sharewalk reset --state state.json

Run `scan` from a time-based scheduler (cron, systemd timer) until the
report's "Iteration finished" cell says "yes". The budget must be shorter
than the scheduler interval: invocations have to run strictly one after
another or they overwrite each other's checkpoint.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .adapters.filesystem import FileSystemAdapter
from .api import run_scan, scan_all
from .checkpoint import JsonFileCheckpointStore, clear_checkpoint, describe_checkpoint
from .config import DEFAULT_BUDGET_SECONDS, DEFAULT_CHECKPOINT_KEY, ScanConfig
from .errors import SharewalkError
from .report import CsvReportSink

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sharewalk",
        description="Report shared files and folders across budget-limited, resumable runs.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Run one budgeted scan invocation")
    scan.add_argument("root", help="Directory tree to scan")
    scan.add_argument("--report", required=True, help="CSV report file")
    scan.add_argument("--state", required=True, help="JSON file holding the checkpoint")
    scan.add_argument(
        "--budget", type=float, default=DEFAULT_BUDGET_SECONDS,
        help=f"Seconds before the run suspends, 0 = unlimited (default: {DEFAULT_BUDGET_SECONDS:.0f})",
    )
    scan.add_argument(
        "--force-new", action="store_true",
        help="Start a new iteration from the root, ignoring --start-path and any checkpoint",
    )
    scan.add_argument(
        "--start-path", default="",
        help='Start a new iteration from this folder, relative to ROOT (e.g. "my/subfolder")',
    )
    scan.add_argument(
        "--until-done", action="store_true",
        help="Keep invoking back to back until the iteration finishes",
    )
    scan.add_argument("--checkpoint-key", default=DEFAULT_CHECKPOINT_KEY, help=argparse.SUPPRESS)

    status = sub.add_parser("status", help="Show the stored checkpoint")
    status.add_argument("--state", required=True, help="JSON file holding the checkpoint")
    status.add_argument("--checkpoint-key", default=DEFAULT_CHECKPOINT_KEY, help=argparse.SUPPRESS)

    reset = sub.add_parser("reset", help="Delete the stored checkpoint")
    reset.add_argument("--state", required=True, help="JSON file holding the checkpoint")
    reset.add_argument("--checkpoint-key", default=DEFAULT_CHECKPOINT_KEY, help=argparse.SUPPRESS)

    return parser


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    return ScanConfig(
        force_new=args.force_new,
        start_path=args.start_path,
        budget_seconds=None if args.budget == 0 else args.budget,
        checkpoint_key=args.checkpoint_key,
    )


def cmd_scan(args: argparse.Namespace) -> int:
    config = config_from_args(args)
    adapter = FileSystemAdapter(args.root)
    sink = CsvReportSink(args.report)
    store = JsonFileCheckpointStore(args.state)

    if args.until_done:
        result = scan_all(config, adapter, sink, store)
    else:
        result = run_scan(config, adapter, sink, store)

    print(f"{result.outcome.value}: {result.steps} steps, {result.records} shared "
          f"nodes reported in {result.elapsed:.1f}s")
    if not result.finished:
        print(f"Resume point: {result.stack.path() or '/'} (run again to continue)")
    return EXIT_OK


def cmd_status(args: argparse.Namespace) -> int:
    print(describe_checkpoint(JsonFileCheckpointStore(args.state), args.checkpoint_key))
    return EXIT_OK


def cmd_reset(args: argparse.Namespace) -> int:
    clear_checkpoint(JsonFileCheckpointStore(args.state), args.checkpoint_key)
    print(f"Checkpoint {args.checkpoint_key!r} deleted.")
    return EXIT_OK


COMMANDS = {
    "scan": cmd_scan,
    "status": cmd_status,
    "reset": cmd_reset,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        return COMMANDS[args.command](args)
    except (SharewalkError, OSError) as e:
        logger.debug("Fatal error", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
