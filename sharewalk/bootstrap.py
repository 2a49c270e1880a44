"""Start selection: fresh from the root, fresh from a path, or resume.

    force_new   start_path   checkpoint   ->  start
    ---------   ----------   ----------       -----------------------
    True        any          any              fresh at tree root
    False       "a/b"        any              fresh at folder "a/b"
    False       ""           stored           resume from checkpoint
    False       ""           absent           fresh at tree root

A fresh start discards any stored checkpoint and asks for a new report
table; resuming keeps appending to the existing one.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .checkpoint import CheckpointStore, clear_checkpoint, load_checkpoint
from .config import ScanConfig
from .core.adapter import TreeAdapter
from .core.frame import TraversalStack

logger = logging.getLogger(__name__)


class StartMode(Enum):
    FRESH_ROOT = "fresh_root"
    FRESH_PATH = "fresh_path"
    RESUME = "resume"


@dataclass
class StartDecision:
    """Initial stack for a run and whether the report starts over."""
    mode: StartMode
    stack: TraversalStack

    @property
    def new_table(self) -> bool:
        return self.mode is not StartMode.RESUME


def select_start(config: ScanConfig, adapter: TreeAdapter, store: CheckpointStore) -> StartDecision:
    """Choose the initial traversal stack for this invocation.

    Raises:
        PathNotFoundError: If start_path does not resolve
        CheckpointError: If a stored checkpoint is corrupt
    """
    key = config.checkpoint_key

    if config.force_new:
        logger.info("[Force new iteration] Start new iteration from root folder")
        return _fresh_root(adapter, store, key)

    if config.start_segments:
        path = config.normalized_start_path
        logger.info("[Start folder given] Start new iteration from folder %r", path)
        container = adapter.resolve_path(config.start_segments)
        stack = TraversalStack.from_container(adapter, container, name=path)
        clear_checkpoint(store, key)
        return StartDecision(StartMode.FRESH_PATH, stack)

    stack = load_checkpoint(store, key)
    if stack is not None:
        logger.info("[Use persisted iterator] Resume iteration from folder %r", stack.path() or "/")
        return StartDecision(StartMode.RESUME, stack)

    logger.info("[Persisted iterator empty] Start new iteration from root folder")
    return _fresh_root(adapter, store, key)


def _fresh_root(adapter: TreeAdapter, store: CheckpointStore, key: str) -> StartDecision:
    # Root frame is named "" so report paths are relative to the tree root.
    stack = TraversalStack.from_container(adapter, adapter.get_root(), name="")
    clear_checkpoint(store, key)
    return StartDecision(StartMode.FRESH_ROOT, stack)
