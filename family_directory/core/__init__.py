"""
Core package - foundation for the application.

Modules:
- config.py - Application settings via Pydantic Settings
- exceptions.py - Custom exception hierarchy
- responses.py - Unified API response format
- logging.py - Centralized logging configuration
- slug.py - Family slug and join code helpers
"""

from family_directory.core.config import settings
from family_directory.core.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    DatabaseError,
)
from family_directory.core.responses import ApiResponse

__all__ = [
    'settings',
    'AppException',
    'NotFoundError',
    'ValidationError',
    'DatabaseError',
    'ApiResponse',
]
