"""
Infrastructure package - external dependencies and integrations.

Modules:
- supabase.py - Record store client
- images.py - Data URI helpers and thumbnail generator
- icon_cache.py - Icon cache invalidation signal
"""

from family_directory.infrastructure.supabase import SupabaseClient
from family_directory.infrastructure.images import ThumbnailGenerator
from family_directory.infrastructure.icon_cache import IconCacheNotifier

__all__ = [
    'SupabaseClient',
    'ThumbnailGenerator',
    'IconCacheNotifier',
]
