"""Tests for the filesystem adapter.

Builds a small directory tree with explicit permission bits and walks it
through the full run_scan pipeline.
"""

import os
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sharewalk import (
    Access,
    InvalidCursorError,
    MemoryCheckpointStore,
    MemoryReportSink,
    PathNotFoundError,
    ScanConfig,
    run_scan,
    scan_all,
)
from sharewalk.config import DEFAULT_CHECKPOINT_KEY
from sharewalk.adapters import FileSystemAdapter, FileSystemNode
from sharewalk.testing import TickingClock, collect_paths

pytestmark = pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits required")


def create_test_tree(base: Path) -> Path:
    """Create a test directory structure.

    Structure (mode in brackets):
    base/ [700]
    ├── a.txt [644]          shared with everyone
    ├── secret.txt [600]
    ├── pub/ [755]           shared with everyone
    │   └── c.txt [600]
    └── sub/ [700]
        ├── b.txt [640]      shared with the group
        └── deeper/ [700]
            └── d.txt [600]
    """
    root = base / "share"
    (root / "pub").mkdir(parents=True)
    (root / "sub" / "deeper").mkdir(parents=True)

    files = {
        "a.txt": 0o644,
        "secret.txt": 0o600,
        "pub/c.txt": 0o600,
        "sub/b.txt": 0o640,
        "sub/deeper/d.txt": 0o600,
    }
    for name, mode in files.items():
        path = root / name
        path.write_text(name)
        path.chmod(mode)

    for name, mode in {".": 0o700, "pub": 0o755, "sub": 0o700, "sub/deeper": 0o700}.items():
        (root / name).chmod(mode)
    return root


@pytest.fixture
def share(tmp_path):
    return create_test_tree(tmp_path)


def test_full_scan_reports_shared_entries(share):
    print("\n=== Test: Filesystem scan ===")
    sink = MemoryReportSink()
    result = run_scan(ScanConfig.unlimited(), FileSystemAdapter(share), sink, MemoryCheckpointStore())

    assert result.finished
    assert collect_paths(sink) == ["a.txt", "pub", "sub/b.txt"]
    print("[PASS] Found shared entries: " + ", ".join(collect_paths(sink)))


def test_split_scan_matches_full_scan(share):
    full = MemoryReportSink()
    run_scan(ScanConfig.unlimited(), FileSystemAdapter(share), full, MemoryCheckpointStore())

    for budget in (1, 2, 5):
        sink = MemoryReportSink()
        # New adapter per run proves tokens survive a process restart.
        store = MemoryCheckpointStore()
        result = run_scan(ScanConfig(budget_seconds=budget), FileSystemAdapter(share), sink, store,
                          clock=TickingClock())
        while not result.finished:
            result = run_scan(ScanConfig(budget_seconds=budget), FileSystemAdapter(share), sink, store,
                              clock=TickingClock())
        assert sink.records == full.records


def test_access_levels_follow_permission_bits(share):
    adapter = FileSystemAdapter(share)
    assert adapter.get_access(FileSystemNode(share / "secret.txt")) is Access.PRIVATE
    assert adapter.get_access(FileSystemNode(share / "sub" / "b.txt")) is Access.DOMAIN
    assert adapter.get_access(FileSystemNode(share / "a.txt")) is Access.ANYONE


def test_owner_is_the_acting_identity(share):
    adapter = FileSystemAdapter(share)
    node = FileSystemNode(share / "secret.txt")
    assert adapter.get_owner_identity(node) == adapter.get_acting_identity()
    assert adapter.get_viewer_identities(node) == []
    assert adapter.get_editor_identities(node) == []


def test_foreign_acting_identity_sees_everything_as_shared(share):
    sink = MemoryReportSink()
    adapter = FileSystemAdapter(share, acting_identity="nobody-in-particular")
    scan_all(ScanConfig.unlimited(), adapter, sink, MemoryCheckpointStore())
    assert collect_paths(sink) == [
        "a.txt", "secret.txt", "pub", "pub/c.txt", "sub", "sub/b.txt", "sub/deeper", "sub/deeper/d.txt",
    ]


def test_resolve_path(share):
    adapter = FileSystemAdapter(share)
    assert adapter.resolve_path(["sub", "deeper"]).path == share / "sub" / "deeper"

    with pytest.raises(PathNotFoundError):
        adapter.resolve_path(["sub", "nope"])
    with pytest.raises(PathNotFoundError):
        adapter.resolve_path(["a.txt"])


@pytest.mark.parametrize("start_path", ["..", "sub/../..", "./sub", "sub/."])
def test_dot_segments_fail_before_any_state_changes(share, start_path):
    store = MemoryCheckpointStore({DEFAULT_CHECKPOINT_KEY: "previous"})
    sink = MemoryReportSink()

    with pytest.raises(PathNotFoundError):
        run_scan(ScanConfig.unlimited(start_path=start_path), FileSystemAdapter(share), sink, store)

    assert store.get(DEFAULT_CHECKPOINT_KEY) == "previous"
    assert sink.metadata() is None


def test_start_path_reports_full_paths(share):
    sink = MemoryReportSink()
    adapter = FileSystemAdapter(share, acting_identity="nobody-in-particular")
    run_scan(ScanConfig.unlimited(start_path="sub/deeper"), adapter, sink, MemoryCheckpointStore())
    assert collect_paths(sink) == ["sub/deeper/d.txt"]


def test_symlinked_directory_is_not_descended(share):
    link = share / "link-to-sub"
    try:
        link.symlink_to(share / "sub", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported")

    adapter = FileSystemAdapter(share, acting_identity="nobody-in-particular")
    sink = MemoryReportSink()
    scan_all(ScanConfig.unlimited(), adapter, sink, MemoryCheckpointStore())

    paths = collect_paths(sink)
    assert "link-to-sub" in paths
    assert not any(p.startswith("link-to-sub/") for p in paths)


def test_bad_tokens_are_rejected(share):
    adapter = FileSystemAdapter(share)
    leaf_token = adapter.open_leaf_cursor(adapter.get_root())

    with pytest.raises(InvalidCursorError):
        adapter.next_leaf_item("%%%")
    with pytest.raises(InvalidCursorError):
        adapter.next_child_container(leaf_token)
    with pytest.raises(InvalidCursorError):
        adapter.next_leaf_item(FileSystemAdapter._token("../..", "l", 0))


def test_removed_directory_token_is_rejected(share):
    adapter = FileSystemAdapter(share)
    token = adapter.open_leaf_cursor(FileSystemNode(share / "sub" / "deeper"))
    (share / "sub" / "deeper" / "d.txt").unlink()
    (share / "sub" / "deeper").rmdir()

    with pytest.raises(InvalidCursorError):
        adapter.next_leaf_item(token)


def test_root_must_be_a_directory(share):
    with pytest.raises(NotADirectoryError):
        FileSystemAdapter(share / "a.txt")
