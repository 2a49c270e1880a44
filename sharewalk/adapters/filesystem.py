"""Filesystem adapter for sharewalk.

Walks a local directory tree (for example a mounted network share) and
reports files and directories whose POSIX permissions let anyone besides
the owner in. Tokens carry the directory relative to the scan root and an
offset into its sorted listing, so a later process can resume them.
"""

import base64
import binascii
import getpass
import json
import os
import stat
from pathlib import Path
from typing import List, Optional, Sequence, Union

from cachetools import LRUCache, cached

from ..config import Access
from ..core.adapter import RESERVED_SEGMENTS, Cursor, Page, TreeAdapter
from ..core.node import TreeNode
from ..errors import InvalidCursorError

_LEAVES = "l"
_CHILDREN = "c"

_GROUP_BITS = stat.S_IRWXG
_OTHER_BITS = stat.S_IRWXO


@cached(cache=LRUCache(maxsize=1024))
def _account_name(uid: int) -> str:
    """Map a uid to its account name, falling back to the number."""
    try:
        import pwd
        return pwd.getpwuid(uid).pw_name
    except (ImportError, KeyError):
        return str(uid)


class FileSystemNode(TreeNode):
    """A file or directory below the scan root.

    Designed to be lightweight - stat data is fetched on demand and kept.
    """

    def __init__(self, path: Union[str, Path], stat_result: Optional[os.stat_result] = None):
        self.path = Path(path)
        self._stat_result = stat_result

    def identifier(self) -> str:
        return str(self.path.absolute())

    def name(self) -> str:
        return self.path.name or str(self.path)

    def is_container(self) -> bool:
        # Symlinked directories are reported, not descended.
        return stat.S_ISDIR(self.stat().st_mode)

    def stat(self) -> os.stat_result:
        if self._stat_result is None:
            self._stat_result = self.path.lstat()
        return self._stat_result


class FileSystemAdapter(TreeAdapter):
    """Adapter over a local directory tree.

    Access levels derive from the permission bits: no group or other bits
    is PRIVATE, group bits only is DOMAIN, any other bit is ANYONE. POSIX
    has no per-user share lists, so viewer and editor lists are empty.
    """

    def __init__(self, root_path: Union[str, Path], acting_identity: Optional[str] = None):
        self.root_path = Path(root_path).absolute()
        if not self.root_path.is_dir():
            raise NotADirectoryError(f"Scan root {self.root_path} is not a directory")
        self._acting_identity = acting_identity

    def get_root(self) -> FileSystemNode:
        return FileSystemNode(self.root_path)

    def open_leaf_cursor(self, container: FileSystemNode) -> Optional[Cursor]:
        return self._encode(container, _LEAVES, 0)

    def open_child_cursor(self, container: FileSystemNode) -> Cursor:
        return self._encode(container, _CHILDREN, 0)

    def next_leaf_item(self, cursor: Cursor) -> Optional[Page]:
        directory, offset = self._decode(cursor, _LEAVES)
        entries = [node for node in self._list(directory) if not node.is_container()]
        return self._advance(directory, entries, offset, _LEAVES)

    def next_child_container(self, cursor: Cursor) -> Optional[Page]:
        directory, offset = self._decode(cursor, _CHILDREN)
        entries = [node for node in self._list(directory) if node.is_container()]
        return self._advance(directory, entries, offset, _CHILDREN)

    def find_child_container(self, container: FileSystemNode, name: str) -> Optional[FileSystemNode]:
        if name in RESERVED_SEGMENTS or os.sep in name or (os.altsep and os.altsep in name):
            return None
        candidate = FileSystemNode(container.path / name)
        try:
            return candidate if candidate.is_container() else None
        except FileNotFoundError:
            return None

    def get_access(self, node: FileSystemNode) -> Access:
        mode = node.stat().st_mode
        if mode & _OTHER_BITS:
            return Access.ANYONE
        if mode & _GROUP_BITS:
            return Access.DOMAIN
        return Access.PRIVATE

    def get_owner_identity(self, node: FileSystemNode) -> Optional[str]:
        return _account_name(node.stat().st_uid)

    def get_viewer_identities(self, node: FileSystemNode) -> Sequence[str]:
        return []

    def get_editor_identities(self, node: FileSystemNode) -> Sequence[str]:
        return []

    def get_acting_identity(self) -> str:
        if self._acting_identity is None:
            if hasattr(os, 'getuid'):
                self._acting_identity = _account_name(os.getuid())
            else:
                self._acting_identity = getpass.getuser()
        return self._acting_identity

    def _list(self, directory: Path) -> List[FileSystemNode]:
        with os.scandir(directory) as it:
            entries = [FileSystemNode(entry.path, entry.stat(follow_symlinks=False)) for entry in it]
        entries.sort(key=lambda node: node.name())
        return entries

    def _advance(self, directory: Path, entries: List[FileSystemNode],
                 offset: int, kind: str) -> Optional[Page]:
        if offset >= len(entries):
            return None
        relative = directory.relative_to(self.root_path).as_posix()
        return entries[offset], self._token(relative, kind, offset + 1)

    def _encode(self, container: FileSystemNode, kind: str, offset: int) -> Cursor:
        relative = container.path.absolute().relative_to(self.root_path).as_posix()
        return self._token(relative, kind, offset)

    @staticmethod
    def _token(relative: str, kind: str, offset: int) -> Cursor:
        payload = json.dumps({"d": relative, "k": kind, "o": offset}, separators=(',', ':'))
        return base64.urlsafe_b64encode(payload.encode('utf-8')).decode('ascii')

    def _decode(self, cursor: Cursor, kind: str):
        try:
            payload = json.loads(base64.urlsafe_b64decode(cursor.encode('ascii')))
            relative, cursor_kind, offset = payload["d"], payload["k"], payload["o"]
        except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as e:
            raise InvalidCursorError(f"Cannot decode continuation token {cursor!r}") from e

        if cursor_kind != kind or not isinstance(offset, int) or offset < 0:
            raise InvalidCursorError(f"Continuation token {cursor!r} is not a {kind!r} token")

        directory = (self.root_path / relative).resolve()
        if directory != self.root_path.resolve() and self.root_path.resolve() not in directory.parents:
            raise InvalidCursorError(f"Continuation token {cursor!r} points outside the scan root")
        if not directory.is_dir():
            raise InvalidCursorError(f"Directory {relative!r} no longer exists")
        return self.root_path / relative, offset
