"""
People API Router Package
Tenant-scoped person reads, writes and photo gallery operations.
Mounted under /api/families/{family_id}/people.
"""

from fastapi import APIRouter

from family_directory.services.directory import DirectoryService
from family_directory.services.gallery import PhotoGalleryManager
from family_directory.services.person_cache import PersonCache

# Global service instances (set via set_services)
directory_instance: DirectoryService = None
person_cache_instance: PersonCache = None
gallery_instance: PhotoGalleryManager = None


def set_services(directory: DirectoryService, person_cache: PersonCache, gallery: PhotoGalleryManager):
    """Set service instances for dependency injection."""
    global directory_instance, person_cache_instance, gallery_instance
    directory_instance = directory
    person_cache_instance = person_cache
    gallery_instance = gallery


# Create main router
router = APIRouter()

# Import sub-routers AFTER globals are defined (they reference them)
from .crud import router as crud_router
from .photos import router as photos_router

router.include_router(crud_router)
router.include_router(photos_router)

# Export for main.py
__all__ = ["router", "set_services"]
