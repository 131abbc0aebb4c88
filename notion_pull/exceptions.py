"""
Custom exceptions for the Notion pull system.
"""


class NotionPullError(Exception):
    """Base exception for Notion pull operations."""
    pass


class ConfigurationError(NotionPullError):
    """Raised when configuration is invalid or missing."""
    pass


class InvalidReferenceError(NotionPullError):
    """Raised when a page/database reference cannot be parsed."""

    def __init__(self, value, reason="Unrecognized Notion reference"):
        super().__init__(
            f'{reason}: "{value}". Expected a page/database ID or Notion URL.'
        )
        self.value = value


class ResourceNotFoundError(NotionPullError):
    """Raised when a page or database does not exist or is not shared with the integration."""

    def __init__(self, reference, message=None):
        super().__init__(
            message
            or f"Could not find a Notion page or database with ID: {reference}. "
            "Make sure the integration has access to this resource."
        )
        self.reference = reference


class PartialObjectError(ResourceNotFoundError):
    """Raised when the API returns a partial object where a full one is required."""

    def __init__(self, reference, kind="object"):
        super().__init__(reference, f"Received partial {kind} object for {reference}")
        self.kind = kind


class RemoteFetchError(NotionPullError):
    """Raised when Notion API calls fail for transport or server reasons."""

    def __init__(self, reference, cause):
        super().__init__(f"Error fetching {reference}: {cause}")
        self.reference = reference
        self.cause = cause


class NoDataSourceError(NotionPullError):
    """Raised when a database container has no data sources."""

    def __init__(self, reference):
        super().__init__(f"Database {reference} has no data sources")
        self.reference = reference


class ConversionError(NotionPullError):
    """Raised when converted content cannot be written."""
    pass
