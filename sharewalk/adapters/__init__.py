"""Tree adapters shipped with sharewalk."""

from .memory import MemoryNode, MemoryTreeAdapter
from .filesystem import FileSystemAdapter, FileSystemNode

__all__ = [
    'MemoryNode',
    'MemoryTreeAdapter',
    'FileSystemAdapter',
    'FileSystemNode',
]
