"""Exception hierarchy shared by the handlers, controllers and storage."""

from __future__ import annotations


class LearnXError(Exception):
    """Base class for all LearnX errors."""

    pass


class ConfigurationError(LearnXError):
    """Raised at startup when required settings are missing or invalid."""

    def __init__(self, missing: list[str] | None = None, message: str | None = None):
        self.missing = missing or []
        super().__init__(
            message or f"Missing required configuration: {', '.join(self.missing)}"
        )


class GatewayError(LearnXError):
    """Raised when the AI Gateway call fails or returns an unusable body."""

    pass


class MissingFieldError(GatewayError):
    """Raised when an expected field is absent from a gateway completion."""

    def __init__(self, field_path: str):
        self.field_path = field_path
        super().__init__(f"Missing field in gateway response: {field_path}")


class PayloadError(LearnXError):
    """Raised when the caller sent a malformed payload."""

    pass


class GalleryError(LearnXError):
    """Raised when a managed backend operation fails."""

    pass
