"""
Composition root for the directory services.

Builds every service exactly once and wires the shared PersonCache into
each of them. main.py and the offline scripts create one ServiceContainer;
tests build one over in-memory repositories.
"""

from family_directory.core.config import settings
from family_directory.core.logging import get_logger
from family_directory.infrastructure.icon_cache import IconCacheNotifier
from family_directory.infrastructure.images import ThumbnailGenerator
from family_directory.infrastructure.supabase import SupabaseClient
from family_directory.repositories import (
    PeopleRepository,
    FamiliesRepository,
    MembersRepository,
    QuizRepository,
)
from family_directory.services.category_settings import CategorySettingsService
from family_directory.services.directory import DirectoryService
from family_directory.services.families import FamilyService
from family_directory.services.gallery import PhotoGalleryManager
from family_directory.services.home_view import HomeViewCache
from family_directory.services.person_cache import PersonCache
from family_directory.services.quiz import QuizService

logger = get_logger(__name__)


class ServiceContainer:
    """
    Holds the service graph of one process.

    Args:
        people_repository: Record store access for people
        families_repository: Record store access for families
        members_repository: Record store access for family members
        quiz_repository: Record store access for quiz results
        thumbnailer: Thumbnail generator (defaults to Pillow)
        icon_notifier: Icon cache signal (defaults to HTTP notifier from settings)
        clock: "today" provider for ages and birthdays
    """

    def __init__(
        self,
        people_repository,
        families_repository,
        members_repository=None,
        quiz_repository=None,
        thumbnailer=None,
        icon_notifier=None,
        clock=None,
    ):
        self.people_repository = people_repository
        self.families_repository = families_repository
        self.thumbnailer = thumbnailer or ThumbnailGenerator()

        self.person_cache = PersonCache(people_repository)
        self.home_views = HomeViewCache(self.person_cache, families_repository)
        self.directory = DirectoryService(self.person_cache, clock=clock)
        self.category_settings = CategorySettingsService(
            families_repository, self.person_cache, self.home_views
        )
        self.gallery = PhotoGalleryManager(
            self.person_cache,
            self.thumbnailer,
            icon_notifier if icon_notifier is not None else IconCacheNotifier(),
        )
        self.families = FamilyService(families_repository, members_repository)
        self.quiz = QuizService(quiz_repository, families_repository)

    @classmethod
    def from_settings(cls) -> "ServiceContainer":
        """Service graph over the configured Supabase project."""
        client = SupabaseClient(settings.supabase_url, settings.supabase_service_role_key)
        container = cls(
            people_repository=PeopleRepository(client),
            families_repository=FamiliesRepository(client),
            members_repository=MembersRepository(client),
            quiz_repository=QuizRepository(client),
            thumbnailer=ThumbnailGenerator(settings.thumbnail_size, settings.thumbnail_quality),
            icon_notifier=IconCacheNotifier(
                settings.icon_cache_invalidate_url,
                settings.icon_cache_timeout_seconds,
            ),
        )
        logger.info("✓ Created service container")
        return container
