"""Typed exception hierarchy for upstream integration errors.

Provides structured exceptions so routes can tell auth errors from
transient network errors, bad payloads and missing configuration.
"""


class IntegrationError(Exception):
    """Base exception for all upstream integration errors.

    Carries the source name so callers can identify which upstream failed.
    """

    def __init__(self, message: str, source: str = ""):
        self.source = source
        super().__init__(message)


class IntegrationConnectionError(IntegrationError):
    """Network failures - timeouts, DNS resolution, connection refused.

    Retriable by default.
    """

    def __init__(self, message: str, source: str = "", retriable: bool = True):
        self.retriable = retriable
        super().__init__(message, source)


class IntegrationAPIError(IntegrationError):
    """Non-2xx response from the upstream API."""

    def __init__(
        self,
        message: str,
        source: str = "",
        status_code: int | None = None,
        payload: object = None,
    ):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message, source)

    @property
    def retriable(self) -> bool:
        """429 (rate limit) and 5xx errors are generally retriable."""
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class IntegrationAuthError(IntegrationAPIError):
    """Credentials or tokens rejected by the upstream (HTTP 401/403)."""

    pass


class IntegrationDataError(IntegrationError):
    """Malformed or unparseable response from the upstream."""

    pass


class IntegrationConfigError(IntegrationError):
    """A required credential or client setting is not configured."""

    pass
