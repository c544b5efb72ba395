"""HTTP client for the backend search proxy."""

from __future__ import annotations

from typing import Any, Mapping

import requests

from FacetSearch.utils.log import log

DEFAULT_TIMEOUT = 60.0
PROXY_SEARCH_PATH = "elasticsearch/proxy_search"

HEADERS = {
    "User-Agent": "facet-search/0.1",
    "Content-Type": "application/json",
}


class SearchProxyClient:
    """Low-level HTTP client posting compiled bodies to the backend.

    The backend forwards search and aggregation bodies to Elasticsearch and
    serves CSV exports for a search body.
    """

    def __init__(
        self,
        api_path: str,
        *,
        search_path: str = "search",
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client with a reusable HTTP session.

        Args:
            api_path: Base URL of the backend API.
            search_path: Document search endpoint, relative to `api_path`.
            timeout: Request timeout in seconds.
            session: Optional preconfigured session.
        """
        self.api_path = api_path.rstrip("/")
        self.search_path = search_path.strip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def __enter__(self) -> SearchProxyClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def search(self, body: Mapping[str, Any]) -> dict[str, Any]:
        """Run a document search body and return the decoded response."""
        return self._post_json(f"{self.api_path}/{self.search_path}", body)

    def proxy_search(self, index: str, body: Mapping[str, Any]) -> dict[str, Any]:
        """Run a raw search body (e.g. an aggregation) against `index`."""
        return self._post_json(f"{self.api_path}/{PROXY_SEARCH_PATH}/{index}", body)

    def download_csv(self, body: Mapping[str, Any], *, filename: str) -> bytes:
        """Request a CSV export of the documents matching `body`.

        Returns:
            Raw CSV bytes.
        """
        url = f"{self.api_path}/{self.search_path}/csv"
        log.debug("POST %s filename=%s", url, filename)
        response = self._session.post(
            url,
            params={"filename": filename},
            json=dict(body),
            headers=HEADERS,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.content

    def _post_json(self, url: str, body: Mapping[str, Any]) -> dict[str, Any]:
        log.debug("POST %s", url)
        response = self._session.post(url, json=dict(body), headers=HEADERS, timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected response from {url}: expected a JSON object")
        return payload
