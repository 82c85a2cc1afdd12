from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from configuration import Configuration as Config


@dataclass(frozen=True)
class ServerSettings:
    """Read-only snapshot of process configuration, built once at startup."""
    host: str = "127.0.0.1"
    port: int = 9090
    timeout_ms: int = 10 * 60 * 1000
    max_body_bytes: int = 1024 * 1024
    temp_root: Path = Path("/tmp/sbom-server")
    default_options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    publish_workers: int = 4

    git_command: str = "git"
    git_clone_timeout_seconds: int = 15 * 60

    github_api_base_url: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"
    github_timeout_seconds: int = 120
    github_default_branch: str = "main"

    cdxgen_command: str = "cdxgen"
    cdxgen_timeout_seconds: int = 10 * 60
    sbom_output_file_name: str = "bom.json"

    dtrack_verify_tls: bool = True
    dtrack_timeout: int = 60
    dtrack_max_retries: int = 3
    dtrack_default_project_version: str = "master"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_configuration(cls, **overrides: Any) -> "ServerSettings":
        defaults = Config.default_options if isinstance(Config.default_options, dict) else {}
        values: dict[str, Any] = dict(
            host=Config.server_host,
            port=Config.server_port,
            timeout_ms=Config.server_timeout_ms,
            max_body_bytes=Config.server_max_body_bytes,
            temp_root=Path(Config.temp_root_dir),
            default_options=defaults,
            publish_workers=Config.server_publish_workers,
            git_command=Config.git_command,
            git_clone_timeout_seconds=Config.git_clone_timeout_seconds,
            github_api_base_url=Config.github_api_base_url,
            github_api_version=Config.github_api_version,
            github_timeout_seconds=Config.github_timeout_seconds,
            github_default_branch=Config.github_default_branch,
            cdxgen_command=Config.cdxgen_command,
            cdxgen_timeout_seconds=Config.cdxgen_timeout_seconds,
            sbom_output_file_name=Config.sbom_output_file_name,
            dtrack_verify_tls=Config.dtrack_verify_tls,
            dtrack_timeout=Config.dtrack_timeout,
            dtrack_max_retries=Config.dtrack_max_retries,
            dtrack_default_project_version=Config.dtrack_default_project_version,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["temp_root"] = Path(values["temp_root"])
        values["default_options"] = MappingProxyType(dict(values["default_options"]))
        return cls(**values)
