"""
Deterministic teardown of ephemeral source trees.

``CleanupGuard`` is a per-request scope: trees are registered with ``track``
as soon as their directory exists, and the guard removes each of them exactly
once when the scope exits, whatever the exit path.
"""
from __future__ import annotations

import os
import shutil
import stat
from typing import List, Optional

from models.source_tree import SourceTree
from source_acquisition.temp_storage import TempStorage
from loggers.acquisition_logger import acquisition_logger as logger


def _rmtree_onexc(func, path, exc):
    if isinstance(exc, FileNotFoundError):
        return
    # read-only entries (e.g. git pack files); clear and retry once
    os.chmod(path, stat.S_IRWXU)
    func(path)


def cleanup(tree: Optional[SourceTree], storage: TempStorage) -> bool:
    """
    Remove ``tree`` if it is ephemeral and lies under the storage root.

    Returns True when the directory no longer exists afterwards (an already
    removed directory counts), False when nothing was removed.
    """
    if tree is None or not tree.ephemeral:
        return False

    if not storage.owns(tree):
        logger.error(f"Refusing to remove {tree.path}: not under the temporary storage root {storage.root}")
        return False

    if not os.path.lexists(tree.path):
        return True

    logger.info(f"Cleaning up {tree.path}")
    if tree.path.is_dir() and not tree.path.is_symlink():
        shutil.rmtree(tree.path, onexc=_rmtree_onexc)
    else:
        tree.path.unlink(missing_ok=True)
    return True


class CleanupGuard:
    def __init__(self, storage: TempStorage) -> None:
        self.storage = storage
        self._trees: List[SourceTree] = []
        self._closed = False

    def track(self, tree: SourceTree) -> SourceTree:
        if tree.ephemeral and tree not in self._trees:
            self._trees.append(tree)
        return tree

    @property
    def tracked(self) -> List[SourceTree]:
        return list(self._trees)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        while self._trees:
            tree = self._trees.pop()
            try:
                cleanup(tree, self.storage)
            except OSError as e:
                logger.error(f"Failed to clean up {tree.path}: {e}")

    def __enter__(self) -> "CleanupGuard":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
