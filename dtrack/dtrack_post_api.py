#!/usr/bin/env python3
"""
Upload an SBOM to OWASP Dependency-Track.

Uses: PUT /api/v1/bom (application/json)
- Either a project UUID, or projectName/projectVersion with autoCreate.
- The BOM itself travels base64-encoded in the "bom" field.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Optional

from models.request_options import RequestOptions
from models.server_settings import ServerSettings
from dtrack.dtrack_client import DependencyTrackClient
from loggers.dtrack_logger import dtrack_logger as logger


def _bom_text(bom: Any) -> str:
    if isinstance(bom, str):
        return bom
    return json.dumps(bom, ensure_ascii=False)


def build_bom_payload(options: RequestOptions, bom: Any, default_project_version: str = "master") -> dict[str, str]:
    payload: dict[str, str] = {
        "projectVersion": options.project_version or default_project_version,
        "autoCreate": "true",
        "bom": base64.b64encode(_bom_text(bom).encode("utf-8")).decode("ascii"),
    }
    if options.project_name:
        payload["projectName"] = options.project_name
    if options.project_id:
        payload["project"] = options.project_id
    if options.parent_uuid:
        payload["parentUUID"] = options.parent_uuid
    return payload


def submit_bom(
        options: RequestOptions,
        bom: Any,
        *,
        settings: Optional[ServerSettings] = None,
        client: Optional[DependencyTrackClient] = None,
) -> Any:
    """
    Push ``bom`` to the Dependency-Track server named in ``options``.

    Returns the server's response (usually {"token": "..."}). Raises
    ValueError when there is nothing to publish, requests.HTTPError on a
    non-2xx answer.
    """
    if not options.wants_publishing:
        raise ValueError("serverUrl and apiKey are required to publish an SBOM")
    if bom is None or bom == "":
        raise ValueError("No SBOM to publish")

    settings = settings or ServerSettings()
    if client is None:
        client = DependencyTrackClient(
            options.server_url,
            options.api_key,
            verify=settings.dtrack_verify_tls,
            timeout=settings.dtrack_timeout,
            max_retries=settings.dtrack_max_retries,
        )

    payload = build_bom_payload(options, bom, settings.dtrack_default_project_version)
    logger.info(f"Publishing SBOM to Dependency Track at {client.base_url}")
    result = client.request("PUT", "/bom", json=payload)
    logger.info(f"Dependency Track accepted SBOM upload: {result}")
    return result
