"""Custom exception classes for the 52 Projects tracker.

This module defines application-specific exceptions following Google Python
Style Guide. Managers raise these; routes translate them to HTTP responses.
"""


class TrackerError(Exception):
    """Base exception for all 52 Projects tracker errors."""

    pass


class UnauthorizedError(TrackerError):
    """Raised when credentials are missing, invalid or revoked."""

    pass


class ForbiddenError(TrackerError):
    """Raised when an authenticated user may not act on a resource."""

    pass


class NotFoundError(TrackerError):
    """Raised when a resource is absent or not owned by the caller."""

    def __init__(self, resource: str, resource_id: str):
        """Initialize the exception.

        Args:
            resource: Human readable resource name, e.g. "Project".
            resource_id: The ID that was looked up.
        """
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class ValidationError(TrackerError):
    """Raised when data validation fails."""

    pass


class ConflictError(TrackerError):
    """Raised when a write collides with existing data."""

    pass


class UpstreamError(TrackerError):
    """Raised when a call to an external provider fails."""

    pass


class ConfigurationError(TrackerError):
    """Raised when there is a configuration error."""

    pass
