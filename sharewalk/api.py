"""High-level API for sharewalk.

run_scan performs one invocation: pick the start, prepare the report,
drive the engine under the budget and persist or clear the checkpoint.
Schedule it repeatedly (strictly one at a time) until it reports
FINISHED.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from .bootstrap import select_start
from .checkpoint import CheckpointStore
from .config import ScanConfig
from .core.adapter import TreeAdapter
from .core.engine import TraversalEngine
from .errors import ConfigurationError
from .report import ReportSink
from .runner import Clock, RunOutcome, RunResult, run_budgeted

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def run_scan(config: ScanConfig,
             adapter: TreeAdapter,
             sink: ReportSink,
             store: CheckpointStore,
             clock: Clock = time.monotonic,
             now: Callable[[], datetime] = _utcnow) -> RunResult:
    """Run one budgeted scan invocation.

    Args:
        config: Immutable scan configuration
        adapter: Tree provider and classification source
        sink: Report the shared nodes are appended to
        store: Checkpoint store
        clock: Monotonic time source for the budget
        now: Wall-clock source for the report's last-run cell

    Returns:
        RunResult of the invocation

    Raises:
        ConfigurationError: If config is invalid
        SharewalkError: Any fatal traversal error (see sharewalk.errors)

    Example:
        >>> result = run_scan(ScanConfig(), FileSystemAdapter("/srv/share"),
        ...                   CsvReportSink("report.csv"),
        ...                   JsonFileCheckpointStore("state.json"))
        >>> result.outcome
        <RunOutcome.SUSPENDED: 'suspended'>
    """
    errors = config.validate()
    if errors:
        raise ConfigurationError(f"Invalid configuration: {'; '.join(errors)}")

    started_at = clock()
    if config.budget_seconds is None:
        logger.info("Run iteration without time limit")
    else:
        logger.info("End script execution after %.0f s", config.budget_seconds)

    decision = select_start(config, adapter, store)
    if decision.new_table:
        sink.begin_table(now())
    else:
        sink.continue_table(now())

    acting_identity = adapter.get_acting_identity()
    engine = TraversalEngine(adapter, sink, acting_identity)

    logger.info("List files and folders and populate the report...")
    return run_budgeted(
        engine,
        decision.stack,
        store,
        sink,
        config.budget_seconds,
        started_at,
        clock=clock,
        checkpoint_key=config.checkpoint_key,
    )


def scan_all(config: ScanConfig,
             adapter: TreeAdapter,
             sink: ReportSink,
             store: CheckpointStore,
             clock: Clock = time.monotonic,
             now: Callable[[], datetime] = _utcnow,
             max_invocations: Optional[int] = None) -> RunResult:
    """Invoke run_scan back to back until the traversal finishes.

    Only the first invocation honours force_new and start_path; later ones
    resume from the checkpoint the previous one left.

    Raises:
        RuntimeError: If max_invocations runs did not finish the traversal
    """
    invocations = 0
    current = config
    while True:
        result = run_scan(current, adapter, sink, store, clock=clock, now=now)
        invocations += 1
        if result.outcome is RunOutcome.FINISHED:
            return result
        if max_invocations is not None and invocations >= max_invocations:
            raise RuntimeError(
                f"Traversal not finished after {invocations} invocations"
            )
        current = ScanConfig(
            budget_seconds=config.budget_seconds,
            checkpoint_key=config.checkpoint_key,
        )


__all__ = ['run_scan', 'scan_all']
