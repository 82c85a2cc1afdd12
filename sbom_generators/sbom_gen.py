#!/usr/bin/env python3
"""
Generate a CycloneDX SBOM for a source tree by invoking the cdxgen CLI.

Each call writes to its own scratch directory (removed afterwards), reads the
JSON document back and returns it as a BomResult. A run that finishes without
writing a BOM yields an empty result rather than an error.
"""

from __future__ import annotations

import json
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from models.bom_result import BomResult
from models.request_options import RequestOptions
from models.server_settings import ServerSettings
from source_acquisition.errors import NotFoundError
from timer import Timer
from loggers.sbom_gen_logger import sbom_gen_logger as logger


class GenerationError(RuntimeError):
    def __init__(self, message: str, *, returncode: Optional[int] = None, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output


def _flag(cmd: list[str], value: Optional[bool], on: str, off: Optional[str] = None) -> None:
    if value is True:
        cmd.append(on)
    elif value is False and off:
        cmd.append(off)


def _value(cmd: list[str], flag: str, value: Optional[str]) -> None:
    if value:
        cmd += [flag, value]


def build_cdxgen_cmd(source_path: Path, out_file: Path, options: RequestOptions, cdxgen_command: str = "cdxgen") -> list[str]:
    cmd = [cdxgen_command, "-o", str(out_file)]

    _value(cmd, "-t", options.project_type)
    _flag(cmd, options.multi_project, "--recurse", "--no-recurse")
    _flag(cmd, options.required_only, "--required-only")
    _flag(cmd, options.no_babel, "--no-babel")
    _flag(cmd, options.install_deps, "--install-deps", "--no-install-deps")
    _flag(cmd, options.auto_compositions, "--auto-compositions", "--no-auto-compositions")
    _value(cmd, "--project-name", options.project_name)
    _value(cmd, "--project-group", options.project_group)
    _value(cmd, "--project-version", options.project_version)
    _value(cmd, "--project-id", options.project_id)
    _value(cmd, "--parent-project-id", options.parent_uuid)
    _value(cmd, "--spec-version", options.spec_version)

    cmd.append(str(source_path))
    return cmd


def run(cmd: list[str], *, cwd: Path, timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    """Run cdxgen and raise GenerationError with an output excerpt on failure."""
    logger.debug(f">> {' '.join(cmd)}")
    try:
        cp = subprocess.run(
            cmd,
            cwd=str(cwd),
            text=True,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise GenerationError(f"cdxgen timed out after {e.timeout}s") from e
    except OSError as e:
        raise GenerationError(f"Unable to run {cmd[0]}: {e}") from e

    if cp.returncode != 0:
        output = f"{cp.stdout or ''}\n{cp.stderr or ''}".strip()
        logger.error(f"cdxgen exited with {cp.returncode}: {output[-500:]}")
        raise GenerationError(f"cdxgen exited with {cp.returncode}", returncode=cp.returncode, output=output)
    return cp


def read_bom(out_file: Path) -> BomResult:
    if not out_file.is_file():
        return BomResult.empty()
    text = out_file.read_text(encoding="utf-8").strip()
    if not text:
        return BomResult.empty()
    try:
        return BomResult(bom_json=json.loads(text))
    except json.JSONDecodeError:
        return BomResult(bom_json=text)


def generate(source_path: str | Path, options: RequestOptions, settings: Optional[ServerSettings] = None) -> BomResult:
    settings = settings or ServerSettings()
    source = Path(source_path)
    if not source.exists():
        raise NotFoundError(f"Source path does not exist: {source}")

    work_dir = Path(tempfile.mkdtemp(prefix="sbom_gen_"))
    out_file = work_dir / settings.sbom_output_file_name
    cmd = build_cdxgen_cmd(source, out_file, options, settings.cdxgen_command)

    logger.info(f"Generating SBOM for {source}")
    timer = Timer().start()
    try:
        run(cmd, cwd=source if source.is_dir() else source.parent, timeout=settings.cdxgen_timeout_seconds)
        result = read_bom(out_file)
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)
        timer.stop()
        logger.info(timer.elapsed(f"Elapsed time for cdxgen on {source}:"))

    if result.is_empty:
        logger.warning(f"cdxgen produced no BOM for {source}")
    return result
