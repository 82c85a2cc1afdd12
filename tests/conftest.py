from __future__ import annotations

import gzip
import io
import tarfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from models.server_settings import ServerSettings
from source_acquisition.temp_storage import TempStorage


SAMPLE_BOM = {
    "bomFormat": "CycloneDX",
    "specVersion": "1.5",
    "components": [
        {"bom-ref": "pkg:npm/left-pad@1.3.0", "name": "left-pad", "purl": "pkg:npm/left-pad@1.3.0", "scope": "required"},
        {"bom-ref": "pkg:npm/jest@29.0.0", "name": "jest", "purl": "pkg:npm/jest@29.0.0", "scope": "optional"},
        {"bom-ref": "pkg:pypi/requests@2.31.0", "name": "requests", "purl": "pkg:pypi/requests@2.31.0"},
    ],
    "dependencies": [
        {"ref": "pkg:npm/left-pad@1.3.0", "dependsOn": ["pkg:npm/jest@29.0.0"]},
        {"ref": "pkg:npm/jest@29.0.0", "dependsOn": []},
        {"ref": "pkg:pypi/requests@2.31.0", "dependsOn": []},
    ],
    "compositions": [{"aggregate": "complete"}],
}


def entries(root: Path) -> list[Path]:
    return sorted(root.iterdir()) if root.exists() else []


def make_tarball(files: dict[str, str], top: str = "o-r-abc1234") -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{top}/{name}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return gzip.compress(buf.getvalue())


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    return tmp_path / "ephemeral"


@pytest.fixture
def storage(temp_root: Path) -> TempStorage:
    return TempStorage(temp_root)


@pytest.fixture
def settings(temp_root: Path) -> ServerSettings:
    return ServerSettings(temp_root=temp_root, publish_workers=1)


@pytest.fixture
def publish_executor():
    ex = ThreadPoolExecutor(max_workers=1)
    yield ex
    ex.shutdown(wait=True)
