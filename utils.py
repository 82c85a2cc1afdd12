import os
import re
from pathlib import Path
from typing import Any, Iterable, Optional

p = Path(__file__).resolve()

TRUTHY = ("1", "true", "yes", "y", "on")
SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


def load_env_vars(filepath=Path(".env").resolve()):
    try:
        with open(filepath) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#') and '=' in line:
                    key, value = line.split('=', 1)
                    os.environ.setdefault(key.strip(), value.strip())
    except FileNotFoundError:
        pass


def boolish(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    return str(v).strip().lower() in TRUTHY


def coerce_int(v: Any, default: int, *, minimum: Optional[int] = None) -> int:
    try:
        i = int(v)
    except (TypeError, ValueError):
        return default
    if minimum is not None and i < minimum:
        return default
    return i


def split_list(v: Any) -> tuple[str, ...]:
    """
    Normalize a list-ish option into a tuple of non-empty strings.

    Accepts a list/tuple of strings, or a single string separated by commas
    and/or whitespace (the way the values arrive from a query string).
    """
    if v is None or v is False:
        return ()
    if isinstance(v, str):
        items: Iterable[Any] = re.split(r"[,\s]+", v)
    elif isinstance(v, (list, tuple, set)):
        items = v
    else:
        items = [v]
    return tuple(s for s in (str(i).strip() for i in items) if s)


def safe_name(raw: str, default: str = "src") -> str:
    """
    Reduce an arbitrary locator fragment to a filesystem-safe name prefix.

    e.g. "https://github.com/owner/repo.git" -> "repo"
    """
    s = (raw or "").strip().rstrip("/")
    s = re.split(r"[/:\\]", s)[-1] if s else ""
    if s.endswith(".git"):
        s = s[:-4]
    s = SAFE_NAME_RE.sub("-", s).strip(".-")
    return s[:64] or default
