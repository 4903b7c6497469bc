"""
Exception hierarchy for the listings service.

    ListingServiceError (base)
    ├── RepositoryUnavailableError
    ├── PropertyNotFoundError
    └── UploadRejectedError
"""
from typing import Optional


class ListingServiceError(Exception):
    """Base exception for all listings service errors."""

    def __init__(self, message: str, *args):
        self.message = message
        super().__init__(message, *args)


class RepositoryUnavailableError(ListingServiceError):
    """Raised when the property repository cannot be reached or denies access."""


class PropertyNotFoundError(ListingServiceError):
    """Raised when a property id is absent from both the live and pending collections."""

    def __init__(self, property_id: str):
        self.property_id = property_id
        super().__init__(f"Property '{property_id}' not found")


class UploadRejectedError(ListingServiceError):
    """Raised when an upload request breaks the relay's file rules."""

    def __init__(self, message: str, filename: Optional[str] = None):
        self.filename = filename
        super().__init__(message)
