"""Exception hierarchy for sharewalk.

Every error raised here is fatal for the current invocation: it propagates
to the caller and no completion flag or checkpoint is written on the way
out, so the checkpoint from the last successful suspend stays the resume
point.
"""


class SharewalkError(Exception):
    """Base class for all sharewalk errors."""
    pass


class ConfigurationError(SharewalkError):
    """Raised when a ScanConfig fails validation."""
    pass


class CheckpointError(SharewalkError):
    """Raised when a persisted checkpoint is structurally invalid."""
    pass


class EngineStateError(SharewalkError):
    """Raised when the engine is stepped in a state it cannot advance from.

    Either the stack is empty or the top frame has both cursors exhausted,
    which means the checkpoint and the engine are out of sync.
    """
    pass


class PathNotFoundError(SharewalkError):
    """Raised when a start path cannot be resolved segment by segment."""

    def __init__(self, path: str, segment: str):
        self.path = path
        self.segment = segment
        super().__init__(f"Folder {segment!r} not found while resolving {path!r}")


class InvalidCursorError(SharewalkError):
    """Raised by adapters when a continuation token cannot be resumed."""
    pass


class ReportError(SharewalkError):
    """Raised when an existing report cannot be read back."""
    pass
