"""Checkpoint codec and checkpoint stores.

Between invocations the whole traversal state is one JSON document in a
single well-known slot of a key-value store:

    {"version": 1, "key": "sharewalk.traversal",
     "frames": [{"name": "", "leaf_cursor": null, "child_cursor": "..."}]}

Decoding is strict. A missing slot means "no checkpoint"; a slot holding
anything that does not match the schema raises CheckpointError instead of
producing a stack the engine would walk incorrectly.

Invocations must be strictly serialized: two runs that read the same slot
and both write it back lose one run's progress. Nothing here locks the
slot; the scheduler has to guarantee it.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import DEFAULT_CHECKPOINT_KEY
from .core.frame import TraversalFrame, TraversalStack
from .errors import CheckpointError

logger = logging.getLogger(__name__)

CHECKPOINT_VERSION = 1

_FRAME_FIELDS = frozenset({'name', 'leaf_cursor', 'child_cursor'})
_DOCUMENT_FIELDS = frozenset({'version', 'key', 'frames'})


# --- Codec ---------------------------------------------------------------

def encode_stack(stack: TraversalStack, key: str = DEFAULT_CHECKPOINT_KEY) -> str:
    """Serialize a non-empty stack to a checkpoint blob.

    Raises:
        CheckpointError: If the stack is empty (a finished traversal is
            never persisted)
    """
    if not stack:
        raise CheckpointError("Refusing to serialize an empty traversal stack")
    document = {
        'version': CHECKPOINT_VERSION,
        'key': key,
        'frames': [frame.to_dict() for frame in stack],
    }
    return json.dumps(document, ensure_ascii=False, separators=(',', ':'))


def decode_stack(blob: Optional[str], key: str = DEFAULT_CHECKPOINT_KEY) -> Optional[TraversalStack]:
    """Deserialize a checkpoint blob.

    Args:
        blob: Value read from the store, or None if the slot is empty
        key: Slot the blob was read from; must match the embedded key

    Returns:
        The stored stack, or None when there is no checkpoint

    Raises:
        CheckpointError: If the blob is not a valid checkpoint document
    """
    if blob is None:
        return None

    try:
        document = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise CheckpointError(f"Checkpoint {key!r} is not valid JSON: {e}") from e

    _validate_document(document, key)
    return TraversalStack(TraversalFrame.from_dict(frame) for frame in document['frames'])


def _validate_document(document: Any, key: str) -> None:
    if not isinstance(document, dict):
        raise CheckpointError(f"Checkpoint {key!r} must be a JSON object")

    fields = set(document)
    if fields != _DOCUMENT_FIELDS:
        raise CheckpointError(
            f"Checkpoint {key!r} has fields {sorted(fields)}, expected {sorted(_DOCUMENT_FIELDS)}"
        )

    version = document['version']
    if isinstance(version, bool) or version != CHECKPOINT_VERSION:
        raise CheckpointError(f"Unsupported checkpoint version {version!r}")

    if document['key'] != key:
        raise CheckpointError(f"Checkpoint was written for {document['key']!r}, not {key!r}")

    frames = document['frames']
    if not isinstance(frames, list) or not frames:
        raise CheckpointError(f"Checkpoint {key!r} must hold a non-empty list of frames")

    for index, frame in enumerate(frames):
        _validate_frame(frame, index)


def _validate_frame(frame: Any, index: int) -> None:
    if not isinstance(frame, dict) or set(frame) != _FRAME_FIELDS:
        raise CheckpointError(f"Frame {index} must be an object with fields {sorted(_FRAME_FIELDS)}")
    if not isinstance(frame['name'], str):
        raise CheckpointError(f"Frame {index} name must be a string")
    for cursor_field in ('leaf_cursor', 'child_cursor'):
        value = frame[cursor_field]
        if value is not None and not isinstance(value, str):
            raise CheckpointError(f"Frame {index} {cursor_field} must be a string or null")


# --- Stores --------------------------------------------------------------

class CheckpointStore(ABC):
    """Persistent key-value store holding checkpoint blobs."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, blob: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key; deleting an absent key is a no-op."""
        pass

    @abstractmethod
    def items(self) -> Dict[str, str]:
        """Return a copy of every stored key and blob."""
        pass


class MemoryCheckpointStore(CheckpointStore):
    """Dict-backed store; survives only as long as the object does."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, blob: str) -> None:
        self._data[key] = blob

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def items(self) -> Dict[str, str]:
        return dict(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileCheckpointStore(CheckpointStore):
    """Store backed by one JSON object file mapping keys to blobs.

    A missing file is an empty store. Every write replaces the file
    atomically.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, blob: str) -> None:
        data = self._load()
        data[key] = blob
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def items(self) -> Dict[str, str]:
        return self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except ValueError as e:
            raise CheckpointError(f"State file {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise CheckpointError(f"State file {self.path} must map keys to strings")
        return data

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


# --- Store helpers -------------------------------------------------------

def load_checkpoint(store: CheckpointStore, key: str = DEFAULT_CHECKPOINT_KEY) -> Optional[TraversalStack]:
    """Read and decode the checkpoint slot (None if absent)."""
    return decode_stack(store.get(key), key)


def save_checkpoint(store: CheckpointStore,
                    stack: TraversalStack,
                    key: str = DEFAULT_CHECKPOINT_KEY) -> None:
    store.set(key, encode_stack(stack, key))
    logger.debug("Saved checkpoint %r at %r (depth %d)", key, stack.path(), len(stack))


def clear_checkpoint(store: CheckpointStore, key: str = DEFAULT_CHECKPOINT_KEY) -> None:
    store.delete(key)
    logger.debug("Cleared checkpoint %r", key)


def describe_checkpoint(store: CheckpointStore, key: str = DEFAULT_CHECKPOINT_KEY) -> str:
    """Human-readable summary of the persisted traversal for operators."""
    stack = load_checkpoint(store, key)
    if stack is None:
        return f"No checkpoint stored under {key!r}."

    lines = [
        f"Checkpoint {key!r}:",
        f"  resume folder: {stack.path() or '/'}",
        f"  depth: {len(stack)}",
    ]
    for index, frame in enumerate(stack):
        phase = "files" if frame.leaf_cursor is not None else "folders"
        lines.append(f"  [{index}] {frame.name or '/'} ({phase})")
    return "\n".join(lines)
