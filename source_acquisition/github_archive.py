#!/usr/bin/env python3
"""
Download and unpack a private GitHub repository as a source tree.

Uses: GET /repos/{owner}/{repo}/tarball/{ref}
- The API answers with a redirect to a short-lived codeload URL; requests
  follows it, so the final response is normally 200. A 302 that was not
  followed but carries a body is accepted as well.
- The payload is a gzip-compressed tar whose single top-level directory is
  named "<owner>-<repo>-<sha>".

Extraction runs on a worker and the caller blocks on its future, so the
target directory is never handed on before every member has been written.
"""

from __future__ import annotations

import gzip
import tarfile
import zlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3 import Retry

from source_acquisition.errors import ExtractionError, FetchError
from source_acquisition.temp_storage import TempStorage
from loggers.acquisition_logger import acquisition_logger as logger

ACCEPTED_STATUS = (200, 302)


class GitHubArchiveClient:
    def __init__(
            self,
            token: str,
            *,
            base_url: str = "https://api.github.com",
            api_version: str = "2022-11-28",
            timeout: float = 120,
            session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        if session is None:
            session = requests.Session()
            retries = Retry(
                total=3,
                backoff_factor=0.5,
                status_forcelist=(429, 500, 502, 503, 504),
                allowed_methods=frozenset(["GET"]),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retries)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session

        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": api_version,
                "User-Agent": "sbom-server",
            }
        )

    def tarball_url(self, owner: str, repository: str, ref: str) -> str:
        return f"{self.base_url}/repos/{owner}/{repository}/tarball/{ref}"

    def download_tarball(self, owner: str, repository: str, ref: str) -> bytes:
        url = self.tarball_url(owner, repository, ref)
        try:
            resp = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except (ValueError, requests.RequestException) as e:
            raise FetchError(f"Error downloading {owner}/{repository}@{ref}: {e}") from e

        if resp.status_code not in ACCEPTED_STATUS or not resp.content:
            raise FetchError(
                f"Error downloading {owner}/{repository}@{ref}: HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.content


def _extract(tar_file: Path, target: Path) -> Path:
    with tarfile.open(tar_file, mode="r:") as tar:
        tar.extractall(target, filter="data")
    return target


def unpack_tarball(data: bytes, target: Path, storage: TempStorage, name_hint: str) -> Path:
    """
    Gunzip ``data`` to a temporary .tar under the storage root, extract it into
    ``target`` and delete the .tar once extraction has completed.
    """
    try:
        decompressed = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise ExtractionError(f"Unable to decompress archive: {e}") from e

    tar_file = storage.create_file(name_hint, suffix=".tar")
    try:
        tar_file.write_bytes(decompressed)
        # Block on the future: the tree must be fully written before it is returned.
        with ThreadPoolExecutor(max_workers=1) as ex:
            extraction = ex.submit(_extract, tar_file, target)
            try:
                extraction.result()
            except (tarfile.TarError, OSError) as e:
                raise ExtractionError(f"Unable to extract archive: {e}") from e
        logger.info("Extraction complete")
    finally:
        tar_file.unlink(missing_ok=True)
    return target


def fetch_private_archive(
        repository: str,
        owner: str,
        token: str,
        branch: Optional[str],
        target: Path,
        storage: TempStorage,
        *,
        client: Optional[GitHubArchiveClient] = None,
        base_url: str = "https://api.github.com",
        api_version: str = "2022-11-28",
        timeout: float = 120,
        default_branch: str = "main",
) -> Path:
    ref = branch or default_branch
    logger.info(f"Downloading {owner}/{repository}@{ref} in {target}")
    if client is None:
        client = GitHubArchiveClient(token, base_url=base_url, api_version=api_version, timeout=timeout)

    try:
        data = client.download_tarball(owner, repository, ref)
    except FetchError as e:
        logger.error(str(e))
        raise
    return unpack_tarball(data, target, storage, f"{owner}-{repository}")
