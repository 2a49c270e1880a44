"""Testing utilities for sharewalk consumers."""

from .fixtures import ME, OTHER, TickingClock, collect_paths, folder, leaf, tree

__all__ = [
    'ME',
    'OTHER',
    'TickingClock',
    'collect_paths',
    'folder',
    'leaf',
    'tree',
]
