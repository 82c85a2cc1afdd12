from typing import Optional, Dict, Any

import requests
from requests.adapters import HTTPAdapter
from urllib3 import Retry


class DependencyTrackClient:
    def __init__(
            self,
            base_url: str,
            api_key: str,
            *,
            verify: bool = True,
            timeout: float = 60,
            max_retries: int = 3,
    ) -> None:
        """
        base_url should be the root URL of your dependency-track instance,
        e.g. "https://dependency-track.example.com"
        api_key is the API key configured in Dependency-Track (X-Api-Key).
        """
        self.base_url = base_url.strip().rstrip("/")
        self.verify = verify
        self.timeout = timeout

        self.session = requests.Session()
        retries = Retry(
            total=max_retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET", "POST", "PUT"]),
        )
        adapter = HTTPAdapter(max_retries=retries)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        self.session.headers.update(
            {
                "X-Api-Key": api_key,
                "Accept": "application/json",
                "User-Agent": "sbom-server",
            }
        )

    def url(self, path: str) -> str:
        # All API endpoints are under /api/v1
        path = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url}/api/v1{path}"

    def request(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None, json: Any = None) -> Any:
        url = self.url(path)
        resp = self.session.request(method, url, params=params, json=json, timeout=self.timeout, verify=self.verify)
        resp.raise_for_status()
        if resp.content:
            try:
                return resp.json()
            except ValueError:
                return resp.text
        return None
