"""TreeAdapter abstraction for sharewalk.

The TreeAdapter is the boundary to the hosted tree. It exposes the two
paginated listings the engine interleaves per container (leaf items and
child containers) through opaque continuation tokens, and it doubles as
the classification source that reports the sharing state of a node.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from ..config import Access
from ..errors import PathNotFoundError
from .node import TreeNode

# Segments that name no child folder in any tree.
RESERVED_SEGMENTS = (".", "..")

# Opaque continuation token. Only equality and the None sentinel
# ("exhausted") carry meaning outside the adapter that minted it.
Cursor = str

# One pagination advance: the element and the token positioned after it.
Page = Tuple[TreeNode, Cursor]


class TreeAdapter(ABC):
    """Abstract adapter for paginated, resumable access to a hosted tree.

    Tokens must be self-sufficient: a token alone has to identify the
    container it belongs to and the position within its listing, because a
    resumed run has nothing but the tokens persisted in its checkpoint.
    """

    @abstractmethod
    def get_root(self) -> TreeNode:
        """Return the root container of the tree."""
        pass

    @abstractmethod
    def open_leaf_cursor(self, container: TreeNode) -> Optional[Cursor]:
        """Return a token positioned before the first leaf item.

        May return None when the adapter already knows the container holds
        no leaf items.
        """
        pass

    @abstractmethod
    def open_child_cursor(self, container: TreeNode) -> Cursor:
        """Return a token positioned before the first child container.

        Always a token, even for a container without children; exhaustion
        is discovered by advancing it.
        """
        pass

    @abstractmethod
    def next_leaf_item(self, cursor: Cursor) -> Optional[Page]:
        """Advance a leaf-item listing by one element.

        Args:
            cursor: Token from open_leaf_cursor or a previous advance

        Returns:
            (item, next_cursor), or None when the listing is exhausted

        Raises:
            InvalidCursorError: If the token cannot be resumed
        """
        pass

    @abstractmethod
    def next_child_container(self, cursor: Cursor) -> Optional[Page]:
        """Advance a child-container listing by one element.

        Returns:
            (container, next_cursor), or None when the listing is exhausted

        Raises:
            InvalidCursorError: If the token cannot be resumed
        """
        pass

    # Classification source

    @abstractmethod
    def get_access(self, node: TreeNode) -> Access:
        """Return the sharing-access level of a node."""
        pass

    @abstractmethod
    def get_owner_identity(self, node: TreeNode) -> Optional[str]:
        """Return the identity of the node's registered owner, if any."""
        pass

    @abstractmethod
    def get_viewer_identities(self, node: TreeNode) -> Sequence[str]:
        pass

    @abstractmethod
    def get_editor_identities(self, node: TreeNode) -> Sequence[str]:
        pass

    @abstractmethod
    def get_acting_identity(self) -> str:
        """Return the identity of the principal running the scan."""
        pass

    # Path resolution - default implementations walk the child listings

    def find_child_container(self, container: TreeNode, name: str) -> Optional[TreeNode]:
        """Find the first child container with the given name.

        Adapters with a name index should override this; the default pages
        through every child.
        """
        cursor = self.open_child_cursor(container)
        while True:
            page = self.next_child_container(cursor)
            if page is None:
                return None
            child, cursor = page
            if child.name() == name:
                return child

    def resolve_path(self, segments: List[str]) -> TreeNode:
        """Resolve a container by walking folder names from the root.

        Args:
            segments: Folder names below the root, outermost first

        Returns:
            The container the path points at

        Raises:
            PathNotFoundError: If any segment cannot be resolved, or is
                "." or ".."
        """
        for segment in segments:
            if segment in RESERVED_SEGMENTS:
                raise PathNotFoundError("/".join(segments), segment)

        current = self.get_root()
        for segment in segments:
            child = self.find_child_container(current, segment)
            if child is None:
                raise PathNotFoundError("/".join(segments), segment)
            current = child
        return current
