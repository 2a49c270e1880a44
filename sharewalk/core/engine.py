"""Resumable depth-first traversal engine.

The engine is a step function over a TraversalStack. Each call advances
exactly one pagination (one leaf item, one child container, or the
discovery that a listing is exhausted), so a run can be cut off between
any two calls and continued later from the serialized stack.

Order within a container: every leaf item first, then child containers
one at a time, each child's subtree fully drained before its next sibling
is listed. A container's own record is emitted when it is discovered, not
when it is left.
"""

import logging
from dataclasses import dataclass

from ..config import NodeKind
from ..errors import EngineStateError
from ..report import OutputRecord, ReportSink
from .adapter import TreeAdapter
from .classify import classify, is_reportable
from .frame import TraversalFrame, TraversalStack
from .node import TreeNode

logger = logging.getLogger(__name__)


@dataclass
class StepCounters:
    """Work done by an engine since it was created."""
    steps: int = 0
    records: int = 0
    pushes: int = 0
    pops: int = 0


class TraversalEngine:
    """Advances a TraversalStack one unit of pagination progress per step.

    Example:
        engine = TraversalEngine(adapter, sink, adapter.get_acting_identity())
        while stack:
            engine.step(stack)
    """

    def __init__(self, adapter: TreeAdapter, sink: ReportSink, acting_identity: str):
        """Initialize the engine.

        Args:
            adapter: Tree provider and classification source
            sink: Report sink receiving shared nodes
            acting_identity: Principal the classification is evaluated for
        """
        self.adapter = adapter
        self.sink = sink
        self.acting_identity = acting_identity
        self.counters = StepCounters()

    def step(self, stack: TraversalStack) -> TraversalStack:
        """Advance the traversal by one step.

        The stack is mutated in place and returned. At most one record is
        appended to the sink.

        Raises:
            EngineStateError: If the stack is empty, or the top frame has
                both cursors exhausted (checkpoint/engine desynchronization)
        """
        if not stack:
            logger.error("Traversal engine stepped on an empty stack")
            raise EngineStateError("Cannot step an empty traversal stack")

        self.counters.steps += 1
        top = stack.top

        if top.leaf_cursor is not None:
            self._advance_leaves(stack, top)
        elif top.child_cursor is not None:
            self._advance_children(stack, top)
        else:
            logger.error("Iterator failure at %r: both cursors are exhausted", stack.path())
            raise EngineStateError(
                f"Frame {stack.path()!r} has no leaf or child cursor left; "
                f"the checkpoint is out of sync with the engine"
            )

        return stack

    def _advance_leaves(self, stack: TraversalStack, top: TraversalFrame) -> None:
        page = self.adapter.next_leaf_item(top.leaf_cursor)
        if page is None:
            logger.debug("Done listing files of %r", stack.path())
            top.leaf_cursor = None
            return

        item, next_cursor = page
        self._report(stack, item, NodeKind.LEAF)
        top.leaf_cursor = next_cursor

    def _advance_children(self, stack: TraversalStack, top: TraversalFrame) -> None:
        page = self.adapter.next_child_container(top.child_cursor)
        if page is None:
            logger.debug("Done listing folders of %r", stack.path())
            stack.pop()
            self.counters.pops += 1
            return

        child, next_cursor = page
        self._report(stack, child, NodeKind.CONTAINER)
        top.child_cursor = next_cursor
        stack.push(TraversalFrame.from_container(self.adapter, child))
        self.counters.pushes += 1

    def _report(self, stack: TraversalStack, node: TreeNode, kind: NodeKind) -> None:
        classification = classify(node, self.adapter, self.acting_identity)
        if not is_reportable(classification):
            return

        path = stack.child_path(node.name())
        logger.info("Add shared %s %r to report", kind.value.lower(), path)
        self.sink.append(OutputRecord(path, kind, classification))
        self.counters.records += 1
