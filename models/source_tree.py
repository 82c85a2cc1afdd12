from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class SourceTree:
    """
    A directory holding one request's source material.

    Ephemeral trees are only ever built by ``TempStorage`` and remember the
    storage root they were allocated under; local trees carry no root and are
    never deleted.
    """
    path: Path
    ephemeral: bool = False
    root: Optional[Path] = None

    @classmethod
    def local(cls, path: str | Path) -> "SourceTree":
        return cls(path=Path(path), ephemeral=False)

    def is_under_root(self) -> bool:
        """True when ``path`` resolves to a strict descendant of ``root``."""
        if self.root is None:
            return False
        root = self.root.resolve()
        target = self.path.resolve()
        return target != root and target.is_relative_to(root)

    def __str__(self) -> str:
        return str(self.path)
