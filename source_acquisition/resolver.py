from __future__ import annotations

from typing import Callable, Optional

from models.request_options import RequestOptions
from models.server_settings import ServerSettings
from models.source_tree import SourceTree
from source_acquisition import git_clone, github_archive
from source_acquisition.cleanup_guard import CleanupGuard
from source_acquisition.errors import MissingSourceError
from source_acquisition.temp_storage import TempStorage
from utils import safe_name
from loggers.acquisition_logger import acquisition_logger as logger

LOCAL_PATH = "local"
PUBLIC_CLONE = "clone"
PRIVATE_ARCHIVE = "private-archive"

URL_PREFIXES = ("http", "git")


def acquisition_mode(options: RequestOptions) -> str:
    """
    Decide how the request's source tree is obtained. First match wins:

    1. git + private            -> private archive (needs repository/owner/token)
    2. no path/url              -> MissingSourceError
    3. git + http*/git* locator -> shallow public clone
    4. anything else            -> local path, used as-is
    """
    if options.git and options.private:
        if not options.has_private_coordinates:
            raise MissingSourceError("repository, owner and token are required.")
        return PRIVATE_ARCHIVE
    if not options.locator:
        raise MissingSourceError()
    if options.git and options.locator.startswith(URL_PREFIXES):
        return PUBLIC_CLONE
    return LOCAL_PATH


class SourceResolver:
    def __init__(
            self,
            settings: ServerSettings,
            storage: Optional[TempStorage] = None,
            *,
            clone: Callable = git_clone.clone_repository,
            fetch_archive: Callable = github_archive.fetch_private_archive,
    ) -> None:
        self.settings = settings
        self.storage = storage or TempStorage(settings.temp_root)
        self._clone = clone
        self._fetch_archive = fetch_archive

    def resolve(self, options: RequestOptions, guard: CleanupGuard) -> SourceTree:
        """
        Return a usable source tree for ``options``.

        Ephemeral directories are registered with ``guard`` before any clone
        or download starts, so a failed acquisition still gets cleaned up.
        """
        mode = acquisition_mode(options)

        if mode == LOCAL_PATH:
            logger.info(f"Using local path {options.locator}")
            return SourceTree.local(options.locator)

        if mode == PUBLIC_CLONE:
            tree = guard.track(self.storage.create_tree(safe_name(options.locator)))
            self._clone(
                options.locator,
                tree.path,
                options.git_branch,
                git_command=self.settings.git_command,
                timeout=self.settings.git_clone_timeout_seconds,
            )
            return tree

        tree = guard.track(self.storage.create_tree(f"{options.owner}-{options.repository}"))
        self._fetch_archive(
            options.repository,
            options.owner,
            options.token,
            options.git_branch,
            tree.path,
            self.storage,
            base_url=self.settings.github_api_base_url,
            api_version=self.settings.github_api_version,
            timeout=self.settings.github_timeout_seconds,
            default_branch=self.settings.github_default_branch,
        )
        return tree
