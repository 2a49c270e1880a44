"""Core traversal components: nodes, adapters, frames and the engine."""

from .node import TreeNode
from .adapter import Cursor, Page, TreeAdapter
from .frame import PATH_SEPARATOR, TraversalFrame, TraversalStack
from .classify import classify, is_reportable
from .engine import StepCounters, TraversalEngine

__all__ = [
    'TreeNode',
    'Cursor',
    'Page',
    'TreeAdapter',
    'PATH_SEPARATOR',
    'TraversalFrame',
    'TraversalStack',
    'classify',
    'is_reportable',
    'StepCounters',
    'TraversalEngine',
]
