from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional

from source_acquisition.errors import CloneError
from loggers.acquisition_logger import acquisition_logger as logger


def build_clone_cmd(repo_url: str, target_dir: Path, branch: Optional[str] = None, git_command: str = "git") -> list[str]:
    cmd = [git_command, "clone", "--depth", "1"]
    if branch:
        cmd += ["--branch", branch]
    # "--" keeps a crafted URL from being read as an option
    cmd += ["--", repo_url, str(target_dir)]
    return cmd


def clone_repository(
        repo_url: str,
        target_dir: Path,
        branch: Optional[str] = None,
        *,
        git_command: str = "git",
        timeout: Optional[float] = None,
) -> Path:
    """
    Shallow-clone ``repo_url`` into the (already created, empty) ``target_dir``.

    Raises CloneError carrying git's exit status and stderr when the clone
    fails. ``target_dir`` is left in place either way; removing it is the
    caller's job.
    """
    cmd = build_clone_cmd(repo_url, target_dir, branch, git_command)
    if branch:
        logger.info(f"Cloning repo with branch {branch} to {target_dir}")
    else:
        logger.info(f"Cloning repo to {target_dir}")

    env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
    try:
        cp = subprocess.run(
            cmd,
            text=True,
            capture_output=True,
            env=env,
            timeout=timeout,
            shell=False,
        )
    except subprocess.TimeoutExpired as e:
        logger.error(f"git clone timed out after {e.timeout}s for {target_dir}")
        raise CloneError(f"git clone timed out after {e.timeout}s") from e
    except OSError as e:
        logger.error(f"Unable to run {git_command}: {e}")
        raise CloneError(f"Unable to run {git_command}: {e}") from e

    if cp.returncode != 0:
        stderr = (cp.stderr or "").strip()
        logger.error(f"git clone exited with {cp.returncode}: {stderr[:300]}")
        raise CloneError(f"git clone exited with {cp.returncode}", returncode=cp.returncode, stderr=stderr)

    return target_dir
