"""Tests for the per-request cleanup scope."""

import os
import stat
from pathlib import Path

import pytest

from models.source_tree import SourceTree
from source_acquisition import cleanup_guard
from source_acquisition.cleanup_guard import CleanupGuard, cleanup
from source_acquisition.temp_storage import TempStorage


def _populate(tree: SourceTree) -> None:
    (tree.path / ".git" / "objects").mkdir(parents=True)
    packed = tree.path / ".git" / "objects" / "pack.idx"
    packed.write_text("x")
    os.chmod(packed, stat.S_IREAD)
    (tree.path / "package.json").write_text("{}")


def test_local_tree_is_never_removed(storage: TempStorage, tmp_path: Path):
    project = tmp_path / "proj"
    project.mkdir()

    assert cleanup(SourceTree.local(project), storage) is False
    assert project.is_dir()


def test_removes_ephemeral_tree_with_read_only_files(storage: TempStorage):
    tree = storage.create_tree("repo")
    _populate(tree)

    assert cleanup(tree, storage) is True
    assert not tree.path.exists()


def test_cleanup_is_idempotent(storage: TempStorage):
    tree = storage.create_tree("repo")

    assert cleanup(tree, storage) is True
    assert cleanup(tree, storage) is True
    assert not tree.path.exists()


def test_refuses_path_traversal(storage: TempStorage, temp_root: Path, tmp_path: Path):
    storage.ensure_root()
    victim = tmp_path / "victim"
    victim.mkdir()
    (victim / "keep.txt").write_text("important")

    crafted = SourceTree(path=temp_root / ".." / "victim", ephemeral=True, root=temp_root)

    assert cleanup(crafted, storage) is False
    assert (victim / "keep.txt").read_text() == "important"


def test_refuses_tree_from_another_root(storage: TempStorage, tmp_path: Path):
    other = TempStorage(tmp_path / "other-root")
    tree = other.create_tree("repo")

    assert cleanup(tree, storage) is False
    assert tree.path.is_dir()


def test_guard_cleans_up_when_body_raises(storage: TempStorage):
    with pytest.raises(RuntimeError):
        with CleanupGuard(storage) as guard:
            tree = guard.track(storage.create_tree("repo"))
            _populate(tree)
            raise RuntimeError("generator blew up")

    assert not tree.path.exists()


def test_guard_runs_cleanup_exactly_once(storage: TempStorage, monkeypatch):
    calls = []
    monkeypatch.setattr(cleanup_guard, "cleanup", lambda tree, st: calls.append(tree) or True)

    guard = CleanupGuard(storage)
    tree = guard.track(storage.create_tree("repo"))
    guard.track(tree)
    guard.close()
    guard.close()

    assert calls == [tree]


def test_guard_ignores_local_trees(storage: TempStorage, tmp_path: Path):
    with CleanupGuard(storage) as guard:
        guard.track(SourceTree.local(tmp_path))
        assert guard.tracked == []

    assert tmp_path.is_dir()
