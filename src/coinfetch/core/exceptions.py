"""Errors raised by coinfetch when talking to an upstream API."""


class FetchError(Exception):
    """Base class for failed upstream fetches.

    Attributes:
        endpoint: The logical resource path that was requested, if known.
    """

    def __init__(self, message: str, endpoint: str | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class NetworkError(FetchError):
    """No response was received from the upstream."""


class RateLimited(FetchError):
    """The upstream answered HTTP 429. Retryable.

    Attributes:
        retry_after: Seconds suggested by a ``Retry-After`` header, if any.
    """

    status_code = 429

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, endpoint)
        self.retry_after = retry_after


class UpstreamError(FetchError):
    """The upstream answered with a non-2xx status other than 429."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        body: bytes = b"",
    ) -> None:
        super().__init__(message, endpoint)
        self.status_code = status_code
        self.body = body


class InvalidResponse(FetchError):
    """The upstream answered 2xx but the body could not be decoded."""
