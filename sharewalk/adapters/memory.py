"""In-memory tree adapter.

Holds the whole tree as MemoryNode objects and mints tokens that carry the
container identifier, the listing kind and the offset into the listing.
Identifiers are built from insertion ordinals, not names, so sibling
containers that share a name stay distinct and identically built trees
accept each other's tokens.

Useful for tests and for feeding trees fetched by other means into the
engine.
"""

import base64
import binascii
import json
from typing import Dict, List, Optional, Sequence

from ..config import Access
from ..core.adapter import Cursor, Page, TreeAdapter
from ..core.node import TreeNode
from ..errors import InvalidCursorError

_LEAVES = "l"
_CHILDREN = "c"


class MemoryNode(TreeNode):
    """A leaf item or container with its sharing attributes.

    Containers keep their children in insertion order; that order is the
    listing order the adapter pages through.
    """

    def __init__(self,
                 name: str,
                 container: bool = False,
                 access: Access = Access.PRIVATE,
                 owner: Optional[str] = None,
                 viewers: Sequence[str] = (),
                 editors: Sequence[str] = (),
                 node_id: Optional[str] = None):
        self._name = name
        self._container = container
        self.access = access
        self.owner = owner
        self.viewers = list(viewers)
        self.editors = list(editors)
        self.node_id = node_id
        self.parent: Optional['MemoryNode'] = None
        self.children: List['MemoryNode'] = []
        self._ordinal: Optional[int] = None
        self._next_ordinal = 0

    def add(self, child: 'MemoryNode') -> 'MemoryNode':
        """Append a child and return it."""
        if not self._container:
            raise ValueError(f"{self._name!r} is a leaf item and cannot hold children")
        child.parent = self
        # Ordinals are never reused, so removals do not renumber siblings
        child._ordinal = self._next_ordinal
        self._next_ordinal += 1
        self.children.append(child)
        return child

    def remove(self, name: str) -> None:
        for child in self.children:
            if child.name() == name:
                child.parent = None
        self.children = [c for c in self.children if c.name() != name]

    @property
    def leaves(self) -> List['MemoryNode']:
        return [c for c in self.children if not c.is_container()]

    @property
    def containers(self) -> List['MemoryNode']:
        return [c for c in self.children if c.is_container()]

    def identifier(self) -> str:
        if self.node_id is not None:
            return self.node_id
        if self.parent is None:
            return "/"
        parent_id = self.parent.identifier().rstrip("/")
        return f"{parent_id}/{self._ordinal}"

    def name(self) -> str:
        return self._name

    def is_container(self) -> bool:
        return self._container


class MemoryTreeAdapter(TreeAdapter):
    """Adapter over a MemoryNode tree.

    Example:
        root = MemoryNode("My Drive", container=True, owner="me")
        root.add(MemoryNode("a.txt", access=Access.ANYONE, owner="me"))
        adapter = MemoryTreeAdapter(root, acting_identity="me")
    """

    def __init__(self, root: MemoryNode, acting_identity: str):
        if not root.is_container():
            raise ValueError("Tree root must be a container")
        self.root = root
        self.acting_identity = acting_identity
        # Pagination calls made, for tests that count steps
        self.calls = 0
        self._index: Dict[str, MemoryNode] = {}

    def get_root(self) -> MemoryNode:
        return self.root

    def open_leaf_cursor(self, container: MemoryNode) -> Optional[Cursor]:
        return self._encode(container.identifier(), _LEAVES, 0)

    def open_child_cursor(self, container: MemoryNode) -> Cursor:
        return self._encode(container.identifier(), _CHILDREN, 0)

    def next_leaf_item(self, cursor: Cursor) -> Optional[Page]:
        container, offset = self._decode(cursor, _LEAVES)
        return self._advance(container, container.leaves, offset, _LEAVES)

    def next_child_container(self, cursor: Cursor) -> Optional[Page]:
        container, offset = self._decode(cursor, _CHILDREN)
        return self._advance(container, container.containers, offset, _CHILDREN)

    def find_child_container(self, container: MemoryNode, name: str) -> Optional[MemoryNode]:
        for child in container.containers:
            if child.name() == name:
                return child
        return None

    def get_access(self, node: MemoryNode) -> Access:
        return node.access

    def get_owner_identity(self, node: MemoryNode) -> Optional[str]:
        return node.owner

    def get_viewer_identities(self, node: MemoryNode) -> Sequence[str]:
        return node.viewers

    def get_editor_identities(self, node: MemoryNode) -> Sequence[str]:
        return node.editors

    def get_acting_identity(self) -> str:
        return self.acting_identity

    def find(self, identifier: str) -> Optional[MemoryNode]:
        """Look a container up by identifier.

        Served from an id index that is rebuilt when the tree has changed
        under it.
        """
        node = self._index.get(identifier)
        if node is None or not self._is_current(node, identifier):
            self._reindex()
            node = self._index.get(identifier)
        return node

    def _is_current(self, node: MemoryNode, identifier: str) -> bool:
        current = node
        while current.parent is not None:
            current = current.parent
        return current is self.root and node.identifier() == identifier

    def _reindex(self) -> None:
        self._index = {}
        pending = [self.root]
        while pending:
            node = pending.pop()
            self._index[node.identifier()] = node
            pending.extend(node.containers)

    def _advance(self, container: MemoryNode, listing: List[MemoryNode],
                 offset: int, kind: str) -> Optional[Page]:
        self.calls += 1
        if offset >= len(listing):
            return None
        return listing[offset], self._encode(container.identifier(), kind, offset + 1)

    @staticmethod
    def _encode(container_id: str, kind: str, offset: int) -> Cursor:
        payload = json.dumps({"c": container_id, "k": kind, "o": offset}, separators=(',', ':'))
        return base64.urlsafe_b64encode(payload.encode('utf-8')).decode('ascii')

    def _decode(self, cursor: Cursor, kind: str):
        try:
            payload = json.loads(base64.urlsafe_b64decode(cursor.encode('ascii')))
            container_id, cursor_kind, offset = payload["c"], payload["k"], payload["o"]
        except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as e:
            raise InvalidCursorError(f"Cannot decode continuation token {cursor!r}") from e

        if cursor_kind != kind or not isinstance(offset, int) or offset < 0:
            raise InvalidCursorError(f"Continuation token {cursor!r} is not a {kind!r} token")

        container = self.find(container_id)
        if container is None:
            raise InvalidCursorError(f"Container {container_id!r} no longer exists")
        return container, offset
