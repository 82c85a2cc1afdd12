import argparse

import uvicorn

from models.server_settings import ServerSettings
from server.app import create_app
from loggers.server_logger import server_logger as logger


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="HTTP server that generates SBOMs for local paths and git repositories.")
    parser.add_argument("--host", dest="host", default=None, help="Listen host (env SBOM_SERVER_HOST)")
    parser.add_argument("--port", dest="port", type=int, default=None, help="Listen port (env SBOM_SERVER_PORT)")
    parser.add_argument("--temp-dir", dest="temp_root", default=None,
                        help="Root for cloned/downloaded sources (env SBOM_SERVER_TEMP_DIR)")
    parser.add_argument("--timeout-ms", dest="timeout_ms", type=int, default=None,
                        help="Per-request timeout in milliseconds (env SBOM_SERVER_TIMEOUT_MS)")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    settings = ServerSettings.from_configuration(**vars(args))
    app = create_app(settings)

    logger.info(f"Listening on {settings.host} {settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=5,
        log_level="info",
    )


if __name__ == "__main__":
    main()
