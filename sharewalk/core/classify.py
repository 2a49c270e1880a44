"""Sharing classification of tree nodes."""

import logging

from ..config import Access, Classification
from .adapter import TreeAdapter
from .node import TreeNode

logger = logging.getLogger(__name__)


def classify(node: TreeNode, source: TreeAdapter, acting_identity: str) -> Classification:
    """Decide whether a node is private to the acting principal.

    A node is PRIVATE only if its access level is the most restrictive one,
    the acting principal owns it and no viewer or editor is anyone else.
    Checks run in that order and stop at the first sign of sharing.

    Args:
        node: Leaf item or container to classify
        source: Adapter reporting the node's sharing state
        acting_identity: Identity of the principal running the scan

    Returns:
        Classification.SHARED or Classification.PRIVATE
    """
    logger.debug("Classify %s", node.name())

    if source.get_access(node) != Access.PRIVATE:
        return Classification.SHARED

    if source.get_owner_identity(node) != acting_identity:
        return Classification.SHARED

    for viewer in source.get_viewer_identities(node):
        if viewer != acting_identity:
            return Classification.SHARED

    for editor in source.get_editor_identities(node):
        if editor != acting_identity:
            return Classification.SHARED

    return Classification.PRIVATE


def is_reportable(classification: Classification) -> bool:
    """Only shared nodes are written to the report."""
    return classification is Classification.SHARED
