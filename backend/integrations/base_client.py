"""Shared httpx plumbing for upstream API clients."""

import logging
from typing import Any

import httpx

from integrations.exceptions import (
    IntegrationAPIError,
    IntegrationAuthError,
    IntegrationConnectionError,
    IntegrationDataError,
)

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; DadDashboard/1.0)"
DEFAULT_TIMEOUT_SECONDS = 30.0


class UpstreamClient:
    """Base class for clients that call one upstream REST API.

    Subclasses set ``source`` (used in errors and logs) and ``base_url``.
    Every non-2xx response is raised as an :class:`IntegrationAPIError`
    (or :class:`IntegrationAuthError` for 401/403) so callers never have
    to inspect status codes themselves.
    """

    source = "upstream"
    base_url = ""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.Client | None = None,
    ):
        self._client = http_client or httpx.Client(
            base_url=self.base_url,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise IntegrationConnectionError(
                f"{self.source} connection failed: {exc}",
                source=self.source,
            ) from exc

        status = response.status_code
        if status in (401, 403):
            raise IntegrationAuthError(
                f"{self.source} rejected credentials (HTTP {status})",
                source=self.source,
                status_code=status,
                payload=_error_payload(response),
            )
        if status >= 400:
            raise IntegrationAPIError(
                f"{self.source} API error (HTTP {status})",
                source=self.source,
                status_code=status,
                payload=_error_payload(response),
            )
        return response

    def _get_json(self, url: str, **kwargs) -> Any:
        response = self._request("GET", url, **kwargs)
        return _decode(response, self.source)

    def _post_json(self, url: str, **kwargs) -> Any:
        response = self._request("POST", url, **kwargs)
        return _decode(response, self.source)


def _decode(response: httpx.Response, source: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise IntegrationDataError(
            f"{source} returned a non-JSON response", source=source
        ) from exc


def _error_payload(response: httpx.Response) -> Any:
    """Best-effort body of an error response (JSON if possible, else text)."""
    try:
        return response.json()
    except ValueError:
        return response.text
