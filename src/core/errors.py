"""Failures raised by a user source while fetching a page.

Every failure derives from FetchError so callers can catch the whole family
without knowing which step of the request went wrong.
"""


class FetchError(Exception):
    """Base class for page fetch failures."""


class InvalidRequest(FetchError):
    """The request URL could not be built from the given inputs."""


class TransportFailure(FetchError):
    """Connectivity-level failure (DNS, refused connection, timeout)."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Transport failure: {cause}")
        self.cause = cause


class HTTPStatusFailure(FetchError):
    """The server answered with a status outside 200-299."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP status {status_code}")
        self.status_code = status_code


class EmptyResponse(FetchError):
    """Successful status but the body was empty."""

    def __init__(self) -> None:
        super().__init__("Empty response body")


class DecodeFailure(FetchError):
    """The body could not be parsed into a page."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Failed to decode page: {cause}")
        self.cause = cause
