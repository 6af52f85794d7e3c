"""Exception types for Showcase."""

from typing import Optional


class ShowcaseError(Exception):
    """Base class for all Showcase errors."""


class IdentityError(ShowcaseError):
    """The profile owner could not be resolved."""


class WebsimAPIError(ShowcaseError):
    """A request to the Websim API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(WebsimAPIError):
    """A response body did not match the expected envelope."""


class TipError(ShowcaseError):
    """A tip could not be posted."""
