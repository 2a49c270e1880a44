"""Configuration system for sharewalk.

This module defines the enumerations shared by every layer and the
immutable ScanConfig that is built once before a run and passed down
explicitly. Nothing in the library reads configuration from ambient state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


DEFAULT_CHECKPOINT_KEY = "sharewalk.traversal"

# 4 min; must stay below the scheduler interval.
DEFAULT_BUDGET_SECONDS = 4 * 60.0


class NodeKind(Enum):
    """What kind of node a report row describes."""
    LEAF = "File"
    CONTAINER = "Folder"


class Classification(Enum):
    """Sharing classification of a node."""
    SHARED = "Shared"
    PRIVATE = "Private"


class Access(Enum):
    """Sharing-access levels a provider can report.

    PRIVATE is the most restrictive level; every other level means the
    node is reachable by someone besides the explicitly listed users.
    """
    PRIVATE = "private"
    DOMAIN_WITH_LINK = "domain_with_link"
    DOMAIN = "domain"
    ANYONE_WITH_LINK = "anyone_with_link"
    ANYONE = "anyone"


class CompletionState(Enum):
    """Tri-state completion flag shown to the operator."""
    RUNNING = "running"
    SUSPENDED = "no"
    FINISHED = "yes"


def split_path(path: str) -> List[str]:
    """Split a slash separated folder path into its non-empty segments."""
    if not path.strip():
        return []
    return [segment for segment in path.split("/") if segment]


@dataclass(frozen=True)
class ScanConfig:
    """Complete configuration for one scan invocation.

    Start selection precedence is force_new > start_path > persisted
    checkpoint > tree root.
    """

    force_new: bool = False                          # Ignore start_path and checkpoint
    start_path: str = ""                             # "" = unset, relative to the tree root
    budget_seconds: Optional[float] = DEFAULT_BUDGET_SECONDS  # None = unlimited
    checkpoint_key: str = DEFAULT_CHECKPOINT_KEY

    @classmethod
    def unlimited(cls, **kwargs) -> 'ScanConfig':
        """Create a config that runs the traversal to completion."""
        return cls(budget_seconds=None, **kwargs)

    @property
    def start_segments(self) -> List[str]:
        return split_path(self.start_path)

    @property
    def normalized_start_path(self) -> str:
        return "/".join(self.start_segments)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.budget_seconds is not None and self.budget_seconds <= 0:
            errors.append("budget_seconds must be positive (use None for unlimited)")

        if not self.checkpoint_key or not self.checkpoint_key.strip():
            errors.append("checkpoint_key cannot be empty")

        if self.start_path.strip() and not self.start_segments:
            errors.append(f"start_path {self.start_path!r} contains no folder names")

        return errors
