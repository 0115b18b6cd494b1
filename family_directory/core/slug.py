"""
Slug utilities for human-readable family URLs.
Family slugs are chosen once at signup and never change.
"""

import re
import secrets
from typing import Optional

# UUID regex pattern
UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')

# No 0/O or 1/I, join codes are read aloud over the phone
JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def is_uuid(value: str) -> bool:
    """Check if a string is a valid UUID."""
    if not value:
        return False
    return bool(UUID_PATTERN.match(value))


def generate_slug(text: str, max_length: int = 60) -> str:
    """
    Generate a URL-friendly slug from text.

    Args:
        text: Source text (usually the family display name)
        max_length: Maximum slug length

    Returns:
        URL-safe slug, empty string if nothing usable remains
    """
    if not text:
        return ""

    slug = re.sub(r'[^a-z0-9]+', '-', text.lower())
    slug = re.sub(r'-+', '-', slug).strip('-')

    return slug[:max_length].rstrip('-')


def is_valid_slug(slug: Optional[str]) -> bool:
    """A slug is lowercase alphanumerics separated by single hyphens and never a UUID."""
    if not slug or len(slug) > 60:
        return False
    return bool(SLUG_PATTERN.match(slug)) and not is_uuid(slug)


def generate_join_code(length: int = 6) -> str:
    """Random member self-registration code."""
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))
