import json
import os
import tempfile
import utils
from pathlib import Path

p = Path(__file__).resolve()


class Configuration:
    # DIRECTORIES
    root_dir = Path(p.parent)

    # PROJECT SETUP
    utils.load_env_vars(Path(root_dir, ".env"))
    log_dir = Path(os.getenv("SBOM_SERVER_LOG_DIR") or Path(root_dir, "logs"))

    # SERVER PROPERTIES
    server_host = os.getenv("SBOM_SERVER_HOST", "127.0.0.1")
    server_port = utils.coerce_int(os.getenv("SBOM_SERVER_PORT"), 9090)
    # Timeout milliseconds. Default 10 mins
    server_timeout_ms = utils.coerce_int(
        os.getenv("SBOM_SERVER_TIMEOUT_MS") or os.getenv("CDXGEN_SERVER_TIMEOUT_MS"),
        10 * 60 * 1000,
        minimum=1,
    )
    server_max_body_bytes = utils.coerce_int(os.getenv("SBOM_SERVER_MAX_BODY_BYTES"), 1024 * 1024, minimum=1)
    server_publish_workers = 4
    log_level = os.getenv("SBOM_SERVER_LOG_LEVEL", "INFO").upper()

    # SOURCE ACQUISITION PROPERTIES
    temp_root_dir = Path(os.getenv("SBOM_SERVER_TEMP_DIR") or Path(tempfile.gettempdir(), "sbom-server"))
    git_command = os.getenv("SBOM_SERVER_GIT_COMMAND", "git")
    git_clone_timeout_seconds = 15 * 60

    # GITHUB PROPERTIES
    proxies = {"http": "", "https": ""}
    github_api_base_url = os.getenv("GITHUB_API_URL", "https://api.github.com")
    github_api_version = "2022-11-28"
    github_timeout_seconds = 120
    github_default_branch = "main"

    # SBOM GEN PROPERTIES
    cdxgen_command = os.getenv("CDXGEN_COMMAND", "cdxgen")
    cdxgen_timeout_seconds = utils.coerce_int(os.getenv("CDXGEN_TIMEOUT_SECONDS"), 10 * 60, minimum=1)
    sbom_output_file_name = "bom.json"

    # DEFAULT REQUEST OPTIONS (camelCase keys, same vocabulary as the /sbom endpoint)
    default_options = json.loads(os.getenv("SBOM_SERVER_DEFAULT_OPTIONS") or "{}")

    # DTRACK PROPERTIES
    dtrack_verify_tls = utils.boolish(os.getenv("DTRACK_VERIFY_TLS", "true"))
    dtrack_timeout = 60
    dtrack_max_retries = 3
    dtrack_default_project_version = "master"
