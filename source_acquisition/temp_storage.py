from __future__ import annotations

import os
import tempfile
from pathlib import Path

from models.source_tree import SourceTree
from utils import safe_name


class TempStorage:
    """
    The process-wide ephemeral-storage root.

    Every request gets its own uniquely named child directory (``mkdtemp``
    guarantees uniqueness across concurrent requests); nothing else under the
    root is ever handed out.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def create_tree(self, name_hint: str) -> SourceTree:
        self.ensure_root()
        path = tempfile.mkdtemp(prefix=f"{safe_name(name_hint)}-", dir=self.root)
        return SourceTree(path=Path(path), ephemeral=True, root=self.root)

    def create_file(self, name_hint: str, suffix: str = "") -> Path:
        self.ensure_root()
        fd, path = tempfile.mkstemp(prefix=f"{safe_name(name_hint)}-", suffix=suffix, dir=self.root)
        os.close(fd)
        return Path(path)

    def contains(self, path: str | Path) -> bool:
        root = self.root.resolve()
        target = Path(path).resolve()
        return target != root and target.is_relative_to(root)

    def owns(self, tree: SourceTree) -> bool:
        """An ephemeral tree allocated under this root and still inside it."""
        if not tree.ephemeral or tree.root is None:
            return False
        return tree.root.resolve() == self.root.resolve() and tree.is_under_root()
