"""Budgeted run loop.

Drives the engine until the traversal finishes or the wall-clock budget is
used up. The budget is checked between steps only, so a step is never cut
in half: on suspend the stack is exactly what the last completed step left
behind.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .checkpoint import CheckpointStore, clear_checkpoint, save_checkpoint
from .config import DEFAULT_CHECKPOINT_KEY, CompletionState
from .core.engine import TraversalEngine
from .core.frame import TraversalStack
from .report import ReportSink

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class RunOutcome(Enum):
    FINISHED = "finished"
    SUSPENDED = "suspended"


@dataclass
class RunResult:
    """What one invocation achieved."""
    outcome: RunOutcome
    steps: int
    records: int
    elapsed: float
    stack: TraversalStack

    @property
    def finished(self) -> bool:
        return self.outcome is RunOutcome.FINISHED


def run_budgeted(engine: TraversalEngine,
                 stack: TraversalStack,
                 store: CheckpointStore,
                 sink: ReportSink,
                 budget_seconds: Optional[float],
                 started_at: float,
                 clock: Clock = time.monotonic,
                 checkpoint_key: str = DEFAULT_CHECKPOINT_KEY) -> RunResult:
    """Step the engine until the stack empties or the budget runs out.

    Args:
        engine: Engine bound to the adapter and sink
        stack: Initial stack (non-empty)
        store: Where the stack is persisted on suspend
        sink: Report sink receiving the completion flag
        budget_seconds: Wall-clock budget, None for unlimited
        started_at: clock() reading taken when the invocation began
        clock: Monotonic time source in seconds
        checkpoint_key: Store slot for the checkpoint

    Returns:
        RunResult with FINISHED (checkpoint cleared, flag "yes") or
        SUSPENDED (checkpoint saved, flag "no")

    Errors raised by the engine propagate untouched; neither the
    checkpoint nor the completion flag is written in that case.
    """
    steps_before = engine.counters.steps
    records_before = engine.counters.records

    def result(outcome: RunOutcome, elapsed: float) -> RunResult:
        return RunResult(
            outcome=outcome,
            steps=engine.counters.steps - steps_before,
            records=engine.counters.records - records_before,
            elapsed=elapsed,
            stack=stack,
        )

    elapsed = 0.0
    while stack:
        engine.step(stack)

        elapsed = clock() - started_at
        if stack and budget_seconds is not None and elapsed >= budget_seconds:
            save_checkpoint(store, stack, checkpoint_key)
            sink.set_completion(CompletionState.SUSPENDED)
            logger.info(
                "Stop iteration after %.1f seconds at %r. Run again to resume iteration.",
                elapsed, stack.path() or "/",
            )
            return result(RunOutcome.SUSPENDED, elapsed)

    clear_checkpoint(store, checkpoint_key)
    sink.set_completion(CompletionState.FINISHED)
    logger.info("Iteration finished after %.1f seconds", elapsed)
    return result(RunOutcome.FINISHED, elapsed)
