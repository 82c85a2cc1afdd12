"""Tests for choosing and running an acquisition strategy."""

from pathlib import Path

import pytest

from conftest import entries
from models.request_options import RequestOptions
from models.server_settings import ServerSettings
from source_acquisition.cleanup_guard import CleanupGuard
from source_acquisition.errors import CloneError, MissingSourceError
from source_acquisition.resolver import (
    LOCAL_PATH,
    PRIVATE_ARCHIVE,
    PUBLIC_CLONE,
    SourceResolver,
    acquisition_mode,
)
from source_acquisition.temp_storage import TempStorage


@pytest.mark.parametrize(
    "options, expected",
    [
        (RequestOptions(locator="/tmp/proj"), LOCAL_PATH),
        (RequestOptions(locator="https://example.com/r.git"), LOCAL_PATH),
        (RequestOptions(locator="https://example.com/r.git", git=True), PUBLIC_CLONE),
        (RequestOptions(locator="git@example.com:o/r.git", git=True), PUBLIC_CLONE),
        (RequestOptions(locator="/srv/checkout", git=True), LOCAL_PATH),
        (RequestOptions(git=True, private=True, owner="o", repository="r", token="t"), PRIVATE_ARCHIVE),
        (RequestOptions(locator="/ignored", git=True, private=True, owner="o", repository="r", token="t"), PRIVATE_ARCHIVE),
    ],
)
def test_acquisition_mode(options, expected):
    assert acquisition_mode(options) == expected


@pytest.mark.parametrize(
    "options",
    [
        RequestOptions(),
        RequestOptions(git=True),
        RequestOptions(private=True, owner="o", repository="r", token="t"),
        RequestOptions(git=True, private=True, owner="o", repository="r"),
        RequestOptions(locator="/tmp/proj", git=True, private=True, owner="o", token="t"),
    ],
)
def test_missing_source(options):
    with pytest.raises(MissingSourceError):
        acquisition_mode(options)


class Recorder:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.error:
            raise self.error


def _resolver(settings: ServerSettings, storage: TempStorage, clone=None, fetch=None) -> SourceResolver:
    return SourceResolver(settings, storage, clone=clone or Recorder(), fetch_archive=fetch or Recorder())


def test_local_path_touches_nothing(settings, storage, temp_root):
    resolver = _resolver(settings, storage)

    with CleanupGuard(storage) as guard:
        tree = resolver.resolve(RequestOptions(locator="/tmp/proj"), guard)
        assert guard.tracked == []

    assert tree.path == Path("/tmp/proj")
    assert not tree.ephemeral
    assert entries(temp_root) == []


def test_public_clone_is_ephemeral_and_cleaned(settings, storage, temp_root):
    clone = Recorder()
    resolver = _resolver(settings, storage, clone=clone)
    options = RequestOptions(locator="https://example.com/r.git", git=True, git_branch="dev")

    with CleanupGuard(storage) as guard:
        tree = resolver.resolve(options, guard)
        assert tree.ephemeral
        assert guard.tracked == [tree]
        assert entries(temp_root) == [tree.path]

    args, kwargs = clone.calls[0]
    assert args == ("https://example.com/r.git", tree.path, "dev")
    assert kwargs["git_command"] == "git"
    assert entries(temp_root) == []


def test_failed_clone_still_tracked(settings, storage, temp_root):
    resolver = _resolver(settings, storage, clone=Recorder(CloneError("boom", returncode=128)))

    with CleanupGuard(storage) as guard:
        with pytest.raises(CloneError):
            resolver.resolve(RequestOptions(locator="https://example.com/r.git", git=True), guard)
        assert len(guard.tracked) == 1

    assert entries(temp_root) == []


def test_private_archive_arguments(settings, storage, temp_root):
    fetch = Recorder()
    resolver = _resolver(settings, storage, fetch=fetch)
    options = RequestOptions(git=True, private=True, owner="o", repository="r", token="t")

    with CleanupGuard(storage) as guard:
        tree = resolver.resolve(options, guard)
        assert tree.path.name.startswith("o-r-")

    args, kwargs = fetch.calls[0]
    assert args[:5] == ("r", "o", "t", None, tree.path)
    assert kwargs["default_branch"] == "main"
    assert entries(temp_root) == []


def test_missing_private_coordinates_creates_nothing(settings, storage, temp_root):
    fetch = Recorder()
    resolver = _resolver(settings, storage, fetch=fetch)

    with CleanupGuard(storage) as guard:
        with pytest.raises(MissingSourceError):
            resolver.resolve(RequestOptions(git=True, private=True, owner="o", repository="r"), guard)

    assert fetch.calls == []
    assert entries(temp_root) == []
