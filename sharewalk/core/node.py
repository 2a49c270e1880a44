"""TreeNode abstraction for sharewalk.

The TreeNode is intentionally kept simple - it's primarily a data container.
Listing children and reading sharing state is delegated to the TreeAdapter,
which is what lets the engine walk any hosted tree.
"""

from abc import ABC, abstractmethod


class TreeNode(ABC):
    """Abstract base class for nodes in a hosted tree.

    A node is either a leaf item (a file) or a container (a folder). The
    engine only ever needs its display name; everything else goes through
    the adapter that produced it.
    """

    @abstractmethod
    def identifier(self) -> str:
        """Return an identifier unique within the provider.

        Used by adapters to find the node again from a continuation token.
        It is NOT used by the engine to de-duplicate nodes.
        """
        pass

    @abstractmethod
    def name(self) -> str:
        """Return the display name used to build report paths."""
        pass

    @abstractmethod
    def is_container(self) -> bool:
        """Check if this node can hold leaf items and child containers."""
        pass

    def __str__(self) -> str:
        return self.name()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.identifier()!r})"

    def __eq__(self, other: object) -> bool:
        """Nodes are equal if they have the same identifier."""
        if not isinstance(other, TreeNode):
            return NotImplemented
        return self.identifier() == other.identifier()

    def __hash__(self) -> int:
        return hash(self.identifier())
