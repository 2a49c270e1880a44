"""Test fixtures for sharewalk consumers.

Small builders for in-memory trees and a deterministic clock, so budget
cut-offs can be placed at exact step counts without sleeping.

Example:
    adapter = tree(
        leaf("a.txt", shared=True),
        folder("sub", leaf("b.txt", shared=True)),
    )
    clock = TickingClock(tick=1.0)
    run_scan(ScanConfig(budget_seconds=3), adapter, sink, store, clock=clock)
"""

from typing import List, Sequence

from ..adapters.memory import MemoryNode, MemoryTreeAdapter
from ..config import Access
from ..report import MemoryReportSink

ME = "me@example.com"
OTHER = "other@example.com"


def leaf(name: str,
         shared: bool = False,
         access: Access = None,
         owner: str = ME,
         viewers: Sequence[str] = (),
         editors: Sequence[str] = ()) -> MemoryNode:
    """Create a leaf item; shared=True gives it Access.ANYONE."""
    if access is None:
        access = Access.ANYONE if shared else Access.PRIVATE
    return MemoryNode(name, container=False, access=access, owner=owner,
                      viewers=viewers, editors=editors)


def folder(name: str,
           *children: MemoryNode,
           shared: bool = False,
           access: Access = None,
           owner: str = ME,
           viewers: Sequence[str] = (),
           editors: Sequence[str] = ()) -> MemoryNode:
    """Create a container holding children in the given order."""
    if access is None:
        access = Access.ANYONE if shared else Access.PRIVATE
    node = MemoryNode(name, container=True, access=access, owner=owner,
                      viewers=viewers, editors=editors)
    for child in children:
        node.add(child)
    return node


def tree(*children: MemoryNode, acting_identity: str = ME, root_name: str = "My Drive") -> MemoryTreeAdapter:
    """Wrap children in a private root container and return its adapter."""
    return MemoryTreeAdapter(folder(root_name, *children), acting_identity=acting_identity)


class TickingClock:
    """Monotonic clock that advances a fixed amount on every reading.

    run_scan reads the clock once at start and once after every step, so
    with tick=1.0 and budget_seconds=n a run performs exactly n steps.
    """

    def __init__(self, tick: float = 1.0, start: float = 0.0):
        self.tick = tick
        self.now = start
        self.readings = 0

    def __call__(self) -> float:
        value = self.now
        self.now += self.tick
        self.readings += 1
        return value


def collect_paths(sink: MemoryReportSink) -> List[str]:
    """Paths of every record in the sink's current table, in order."""
    return [record.path for record in sink.records]
