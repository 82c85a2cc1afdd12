"""
Per-request sequencing for /sbom.

resolve source -> generate -> (post-process) -> build response ->
(publish, in the background) -> clean up. The source tree's cleanup scope
wraps everything after resolution starts, so ephemeral directories are removed
on every exit path, including exceptions raised by collaborators.
"""
from __future__ import annotations

import json
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional

from models.bom_result import BomResult
from models.request_options import RequestOptions
from models.server_settings import ServerSettings
from source_acquisition.cleanup_guard import CleanupGuard
from source_acquisition.errors import MissingSourceError, NotFoundError, SourceAcquisitionError
from source_acquisition.resolver import SourceResolver
from source_acquisition.temp_storage import TempStorage
from sbom_generators import sbom_gen
from tools import sbom_filter
from dtrack import dtrack_post_api
from loggers.server_logger import server_logger as logger

GenerateFn = Callable[[Any, RequestOptions], Optional[BomResult]]
PostProcessFn = Callable[[BomResult, RequestOptions], BomResult]
PublishFn = Callable[[RequestOptions, Any], Any]


@dataclass(frozen=True)
class SbomResponse:
    status_code: int
    body: str

    @classmethod
    def error(cls, status_code: int, message: str) -> "SbomResponse":
        return cls(status_code, json.dumps({"error": True, "message": message}))


class SbomRequestHandler:
    def __init__(
            self,
            settings: ServerSettings,
            *,
            storage: Optional[TempStorage] = None,
            resolver: Optional[SourceResolver] = None,
            generate: Optional[GenerateFn] = None,
            post_process: Optional[PostProcessFn] = None,
            publish: Optional[PublishFn] = None,
            publish_executor: Optional[Executor] = None,
    ) -> None:
        self.settings = settings
        self.storage = storage or TempStorage(settings.temp_root)
        self.resolver = resolver or SourceResolver(settings, self.storage)
        self.generate = generate or partial(sbom_gen.generate, settings=settings)
        self.post_process = post_process or sbom_filter.post_process
        self.publish = publish or partial(dtrack_post_api.submit_bom, settings=settings)
        self._owns_executor = publish_executor is None
        self.publish_executor = publish_executor or ThreadPoolExecutor(
            max_workers=settings.publish_workers, thread_name_prefix="sbom-publish"
        )

    def handle(self, options: RequestOptions) -> SbomResponse:
        with CleanupGuard(self.storage) as guard:
            try:
                logger.info(f"Resolving source for {options!r}")
                tree = self.resolver.resolve(options, guard)
            except MissingSourceError as e:
                logger.warning(f"Rejected request: {e.message}")
                return SbomResponse.error(400, e.message)
            except (SourceAcquisitionError, OSError) as e:
                logger.error(f"Unable to acquire source tree: {e}")
                return SbomResponse.error(500, "Unable to acquire the source tree.")
            except Exception:
                logger.exception("Unexpected failure while acquiring source tree")
                return SbomResponse.error(500, "Unable to acquire the source tree.")

            try:
                bom = self.generate(tree.path, options) or BomResult.empty()
                raw = bom
                if options.wants_post_processing:
                    bom = self.post_process(bom, options)
                body = bom.to_text()
            except NotFoundError as e:
                logger.error(str(e))
                return SbomResponse.error(404, "path not found.")
            except Exception:
                logger.exception(f"SBOM generation failed for {tree.path}")
                return SbomResponse.error(500, "SBOM generation failed.")

            if options.wants_publishing:
                self.publish_async(options, raw)

            return SbomResponse(200, body)

    def publish_async(self, options: RequestOptions, bom: BomResult) -> Optional[Future]:
        if bom.is_empty:
            logger.warning("Nothing to publish to Dependency Track: no SBOM was produced")
            return None
        logger.info("Publishing SBOM to Dependency Track")
        return self.publish_executor.submit(self._publish_quietly, options, bom.bom_json)

    def _publish_quietly(self, options: RequestOptions, bom_json: Any) -> None:
        try:
            self.publish(options, bom_json)
        except Exception as e:
            logger.error(f"Publishing SBOM to {options.server_url} failed: {e}")

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self.publish_executor.shutdown(wait=wait)
