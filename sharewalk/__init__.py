"""sharewalk - resumable report of shared files and folders.

sharewalk walks a large hosted tree depth-first and writes every node that
is not private to the scanning account into an append-only report. The walk
is split into budget-limited invocations: each one advances the traversal
one pagination step at a time, and when its time budget runs out it stores
the traversal stack as a checkpoint so the next invocation continues where
it stopped.

    from sharewalk import ScanConfig, run_scan
    from sharewalk.adapters import FileSystemAdapter
    from sharewalk.checkpoint import JsonFileCheckpointStore
    from sharewalk.report import CsvReportSink

    result = run_scan(ScanConfig(), FileSystemAdapter("/srv/share"),
                      CsvReportSink("report.csv"),
                      JsonFileCheckpointStore("state.json"))

Invocations must run strictly one after another. If a scheduler starts a
new invocation while the previous one is still running, both resume from
the same checkpoint and one of them loses its progress.
"""

__version__ = "0.1.0"

from .config import (
    Access,
    Classification,
    CompletionState,
    NodeKind,
    ScanConfig,
)
from .errors import (
    CheckpointError,
    ConfigurationError,
    EngineStateError,
    InvalidCursorError,
    PathNotFoundError,
    ReportError,
    SharewalkError,
)
from .core import (
    TraversalEngine,
    TraversalFrame,
    TraversalStack,
    TreeAdapter,
    TreeNode,
    classify,
)
from .report import CsvReportSink, MemoryReportSink, OutputRecord, ReportSink, RunMetadata
from .checkpoint import (
    CheckpointStore,
    JsonFileCheckpointStore,
    MemoryCheckpointStore,
    decode_stack,
    encode_stack,
)
from .bootstrap import StartDecision, StartMode, select_start
from .runner import RunOutcome, RunResult, run_budgeted
from .api import run_scan, scan_all

__all__ = [
    "__version__",
    # Config
    "Access",
    "Classification",
    "CompletionState",
    "NodeKind",
    "ScanConfig",
    # Errors
    "CheckpointError",
    "ConfigurationError",
    "EngineStateError",
    "InvalidCursorError",
    "PathNotFoundError",
    "ReportError",
    "SharewalkError",
    # Core
    "TraversalEngine",
    "TraversalFrame",
    "TraversalStack",
    "TreeAdapter",
    "TreeNode",
    "classify",
    # Report
    "CsvReportSink",
    "MemoryReportSink",
    "OutputRecord",
    "ReportSink",
    "RunMetadata",
    # Checkpoint
    "CheckpointStore",
    "JsonFileCheckpointStore",
    "MemoryCheckpointStore",
    "decode_stack",
    "encode_stack",
    # Running
    "StartDecision",
    "StartMode",
    "select_start",
    "RunOutcome",
    "RunResult",
    "run_budgeted",
    "run_scan",
    "scan_all",
]
