"""
Services package.

Main modules:
- person_cache.py - PersonCache, the in-memory snapshot of all people
- directory.py - DirectoryService, tenant-scoped reads over the cache
- home_view.py - HomeViewCache, memoized per-family home screen
- gallery.py - PhotoGalleryManager, primary / thumbnail / photos consistency
- category_settings.py - CategorySettingsService

Supporting modules:
- families.py - FamilyService (signup, slug lookup, members)
- quiz.py - QuizService
- face_detection.py - FacePositionDetector (offline only)
- container.py - ServiceContainer, the composition root
"""

from family_directory.services.person_cache import PersonCache, PersonSnapshot
from family_directory.services.directory import DirectoryService
from family_directory.services.home_view import HomeViewCache
from family_directory.services.gallery import PhotoGalleryManager
from family_directory.services.category_settings import CategorySettingsService
from family_directory.services.families import FamilyService
from family_directory.services.quiz import QuizService
from family_directory.services.container import ServiceContainer

__all__ = [
    'PersonCache',
    'PersonSnapshot',
    'DirectoryService',
    'HomeViewCache',
    'PhotoGalleryManager',
    'CategorySettingsService',
    'FamilyService',
    'QuizService',
    'ServiceContainer',
]
