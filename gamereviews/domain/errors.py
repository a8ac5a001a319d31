"""Error taxonomy for the review catalog.

Every failure surfaces to the immediate caller; nothing here is recovered
locally. Only `PartialResultWarning` is non-fatal.
"""

from typing import Optional


class GameReviewsError(Exception):
    """Base class for all application errors."""


class ConfigurationError(GameReviewsError):
    """A required setting (usually a credential) is missing."""


class AuthenticationError(GameReviewsError):
    """The token exchange failed or returned an unusable body."""


class TransportError(GameReviewsError):
    """The remote API could not be reached."""

    def __init__(self, endpoint: str, original_exception: Exception):
        self.endpoint = endpoint
        self.original_exception = original_exception
        super().__init__(f"Request to {endpoint} failed: {original_exception}")


class RemoteAPIError(GameReviewsError):
    """A bulk request returned a non-success HTTP status."""

    def __init__(self, endpoint: str, request_body: str, response_body: str, status_code: int):
        self.endpoint = endpoint
        self.request_body = request_body
        self.response_body = response_body
        self.status_code = status_code
        super().__init__(
            f"invalid request for endpoint {endpoint} with body {request_body} "
            f"(HTTP {status_code}): {response_body}"
        )


class DecodeError(GameReviewsError):
    """A response body did not match the expected schema."""

    def __init__(
        self,
        endpoint: str,
        request_body: str,
        response_text: str,
        cause: Optional[Exception] = None,
    ):
        self.endpoint = endpoint
        self.request_body = request_body
        self.response_text = response_text
        self.cause = cause
        super().__init__(
            f"Invalid json when fetching {endpoint} with body {request_body}: {cause}"
        )


class CacheStoreError(GameReviewsError):
    """Reading from or writing to the record cache failed."""


class ReviewStoreError(GameReviewsError):
    """Reading the review database failed."""


class MissingMetadataError(GameReviewsError):
    """A review refers to metadata the remote service did not provide."""


class PartialResultWarning(UserWarning):
    """The remote service returned fewer records than requested."""
