from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from models.request_options import RequestOptions
from models.server_settings import ServerSettings
from server.orchestrator import SbomRequestHandler, SbomResponse
from loggers.server_logger import server_logger as logger


def _respond(result: SbomResponse) -> Response:
    return Response(content=result.body + "\n", status_code=result.status_code, media_type="application/json")


async def _read_capped(request: Request, limit: int) -> Optional[bytes]:
    """Return the request body, or None once it is known to exceed ``limit`` bytes."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        return None

    raw = bytearray()
    async for chunk in request.stream():
        raw.extend(chunk)
        if len(raw) > limit:
            return None
    return bytes(raw)


def create_app(settings: ServerSettings, handler: Optional[SbomRequestHandler] = None) -> FastAPI:
    handler = handler or SbomRequestHandler(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        handler.storage.ensure_root()
        yield
        handler.shutdown(wait=False)

    app = FastAPI(title="sbom-server", lifespan=lifespan)
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.state.settings = settings
    app.state.handler = handler

    @app.api_route("/health", methods=["GET", "POST"])
    async def health():
        return JSONResponse({"status": "OK"})

    @app.api_route("/sbom", methods=["GET", "POST"])
    async def sbom(request: Request):
        raw = await _read_capped(request, settings.max_body_bytes)
        if raw is None:
            return _respond(SbomResponse.error(413, "request body too large."))

        body = {}
        if raw.strip():
            try:
                body = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError):
                return _respond(SbomResponse.error(400, "request body is not valid JSON."))
            if not isinstance(body, dict):
                return _respond(SbomResponse.error(400, "request body must be a JSON object."))

        options = RequestOptions.from_request(dict(request.query_params), body, settings.default_options)

        # The worker thread keeps running after a timeout; its cleanup scope
        # still removes whatever it created once it unwinds.
        loop = asyncio.get_running_loop()
        try:
            result = await asyncio.wait_for(
                loop.run_in_executor(None, handler.handle, options),
                timeout=settings.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"Request timed out after {settings.timeout_seconds}s")
            result = SbomResponse.error(504, "request timed out.")

        return _respond(result)

    return app
