"""
Custom exception hierarchy for the application.
All exceptions inherit from AppException for unified handling.
"""

from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        status_code: HTTP status code for API responses
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# === Not Found Errors ===

class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, entity: str, identifier: str = None):
        message = f"{entity} not found"
        if identifier:
            message = f"{entity} '{identifier}' not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404
        )


class PersonNotFoundError(NotFoundError):
    def __init__(self, person_id: str):
        super().__init__("Person", person_id)


class FamilyNotFoundError(NotFoundError):
    def __init__(self, family_id: str):
        super().__init__("Family", family_id)


class PhotoNotFoundError(NotFoundError):
    def __init__(self, person_id: str = None):
        super().__init__("Photo", f"in gallery of {person_id}" if person_id else None)


# === Validation Errors ===

class ValidationError(AppException):
    """Input validation failed."""

    def __init__(self, message: str, field: str = None, code: str = "VALIDATION_ERROR"):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            details=details
        )


class InvalidImageError(ValidationError):
    def __init__(self, reason: str = "Invalid or corrupted image"):
        super().__init__(message=reason, field="image")


class InvalidCategoryError(ValidationError):
    def __init__(self, category: str):
        super().__init__(message=f"Invalid category '{category}'", field="category")


class GalleryMismatchError(ValidationError):
    """Submitted photo order is not a permutation of the current gallery."""

    def __init__(self, missing: int = 0, unexpected: int = 0):
        super().__init__(
            message=(
                "Photo order must contain exactly the current gallery photos "
                f"({missing} missing, {unexpected} unexpected)"
            ),
            field="photos",
            code="GALLERY_MISMATCH"
        )


# === Database Errors ===

class DatabaseError(AppException):
    """Database operation failed."""

    def __init__(self, message: str, operation: str = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=f"Database error: {message}",
            code="DATABASE_ERROR",
            status_code=500,
            details=details
        )


class ConnectionError(DatabaseError):
    def __init__(self):
        super().__init__(message="Failed to connect to database")
