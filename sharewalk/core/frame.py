"""Traversal frames and the traversal stack.

A frame is one container currently being visited; the stack holds the
chain of containers from the traversal root down to the one being worked
on. Both are plain data: the engine mutates them and the checkpoint codec
turns them into JSON and back.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .adapter import Cursor, TreeAdapter
from .node import TreeNode

PATH_SEPARATOR = "/"


@dataclass
class TraversalFrame:
    """Per-container traversal state.

    Attributes:
        name: Label used only to build display paths; not an identity key
        leaf_cursor: Token into the leaf-item listing, None once exhausted
        child_cursor: Token into the child-container listing, consulted only
            after leaf_cursor is None
    """

    name: str
    leaf_cursor: Optional[Cursor]
    child_cursor: Optional[Cursor]

    @classmethod
    def from_container(cls,
                       adapter: TreeAdapter,
                       container: TreeNode,
                       name: Optional[str] = None) -> 'TraversalFrame':
        """Open both listings of a container.

        Args:
            adapter: Adapter that owns the container
            container: Container to visit
            name: Display label override (defaults to the container name)
        """
        return cls(
            name=container.name() if name is None else name,
            leaf_cursor=adapter.open_leaf_cursor(container),
            child_cursor=adapter.open_child_cursor(container),
        )

    @property
    def leaves_exhausted(self) -> bool:
        return self.leaf_cursor is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'leaf_cursor': self.leaf_cursor,
            'child_cursor': self.child_cursor,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TraversalFrame':
        return cls(
            name=data['name'],
            leaf_cursor=data['leaf_cursor'],
            child_cursor=data['child_cursor'],
        )


class TraversalStack:
    """Ordered frames, index 0 = traversal root, last = active container.

    A non-empty stack means the traversal is in progress; an empty one
    means it is complete.
    """

    def __init__(self, frames: Optional[Iterable[TraversalFrame]] = None):
        self._frames: List[TraversalFrame] = list(frames or [])

    @classmethod
    def from_container(cls,
                       adapter: TreeAdapter,
                       container: TreeNode,
                       name: Optional[str] = None) -> 'TraversalStack':
        """Create a one-frame stack rooted at a container."""
        return cls([TraversalFrame.from_container(adapter, container, name)])

    @property
    def frames(self) -> List[TraversalFrame]:
        return self._frames

    @property
    def top(self) -> TraversalFrame:
        """The active (deepest) frame.

        Raises:
            IndexError: If the stack is empty
        """
        return self._frames[-1]

    def push(self, frame: TraversalFrame) -> None:
        self._frames.append(frame)

    def pop(self) -> TraversalFrame:
        return self._frames.pop()

    def path(self, index: Optional[int] = None) -> str:
        """Display path of the frame at index (default: the top frame).

        Joins the names of every frame from the root down to index,
        skipping empty names so a root frame named "" adds nothing.
        """
        if index is None:
            index = len(self._frames) - 1
        names = [frame.name for frame in self._frames[:index + 1]]
        return PATH_SEPARATOR.join(name for name in names if name)

    def child_path(self, name: str) -> str:
        """Display path of a node named `name` inside the top frame."""
        parent = self.path()
        return f"{parent}{PATH_SEPARATOR}{name}" if parent else name

    @property
    def depth(self) -> int:
        return len(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    def __iter__(self) -> Iterator[TraversalFrame]:
        return iter(self._frames)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TraversalStack):
            return NotImplemented
        return self._frames == other._frames

    def __repr__(self) -> str:
        return f"TraversalStack(path={self.path()!r}, depth={len(self._frames)})"
