"""
HomeViewCache - per-family home screen aggregate, memoized.

The home view is derived from the person cache snapshot plus the family's
category settings. Each family's view is built on first request and kept
until either:
- the person cache is invalidated (any person/photo write), which drops all
  families' views, or
- the family's category settings change, which drops that family's view only.

Each view carries a generation marker "<person generation>.<settings
generation>" so clients can cache it indefinitely and still detect staleness.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from family_directory.core.config import settings
from family_directory.core.exceptions import FamilyNotFoundError, ValidationError
from family_directory.core.logging import get_logger
from family_directory.models.domain.family import Family
from family_directory.models.domain.home import HomeView, CategorySummary, BackgroundPhoto
from family_directory.models.domain.person import (
    Person,
    PersonCategory,
    CATEGORY_ORDER,
    CATEGORY_NOUNS,
    DEFAULT_CATEGORY_LABELS,
)
from family_directory.services.category_settings import (
    parse_category_settings,
    effective_settings,
    count_by_category,
)

logger = get_logger(__name__)

# Eye line used for crop framing when face detection has not run or failed
DEFAULT_EYE_POSITION = settings.default_eye_position


def describe_category(category: PersonCategory, members: List[Person]) -> str:
    """
    Subtitle of a category button.

    Spouses show their name; every other category shows a count with a
    singular or plural noun. Empty categories have no description.
    """
    if not members:
        return ""
    if category.is_spouse:
        return " & ".join(p.name for p in members)
    singular, plural = CATEGORY_NOUNS[category]
    return f"{len(members)} {singular if len(members) == 1 else plural}"


def collect_background_photos(
    members: List[Person],
    limit: int,
    default_eye_position: float = DEFAULT_EYE_POSITION,
) -> List[BackgroundPhoto]:
    """Best image of each member (thumbnail over full photo), deduplicated."""
    photos: List[BackgroundPhoto] = []
    seen = set()
    for person in members:
        image = person.best_image
        if not image or image in seen:
            continue
        seen.add(image)
        eye = person.eye_center_y if person.eye_center_y is not None else default_eye_position
        photos.append(BackgroundPhoto(image=image, eye_center_y=eye))
        if len(photos) >= limit:
            break
    return photos


def build_home_view(
    family: Family,
    people: List[Person],
    generation: str,
    photo_limit: int,
    default_eye_position: float = DEFAULT_EYE_POSITION,
) -> HomeView:
    """Aggregate one family's people into the home view."""
    stored = parse_category_settings(family.category_settings, strict=False)
    counts = count_by_category(people)
    effective = effective_settings(stored, counts)

    categories = []
    for category in CATEGORY_ORDER:
        members = [p for p in people if p.category == category]
        setting = effective[category]
        categories.append(CategorySummary(
            id=category,
            label=setting.label or DEFAULT_CATEGORY_LABELS[category],
            description=describe_category(category, members),
            count=len(members),
            hidden=bool(setting.hidden),
            background_photos=collect_background_photos(members, photo_limit, default_eye_position),
            single_person_id=members[0].id if len(members) == 1 else None,
        ))

    return HomeView(
        family_id=family.id,
        senior_name=family.senior_name,
        categories=categories,
        total_people=len(people),
        generation=generation,
        generated_at=datetime.now(timezone.utc),
    )


class HomeViewCache:
    """
    Memoized home views keyed by family ID.

    Args:
        person_cache: Shared PersonCache (invalidation is subscribed to)
        families_repository: Source of family name and category settings
        photo_limit: Max background photos per category
    """

    def __init__(
        self,
        person_cache,
        families_repository,
        photo_limit: int = None,
        default_eye_position: float = None,
    ):
        self._people = person_cache
        self._families = families_repository
        self._photo_limit = photo_limit or settings.home_background_photo_limit
        self._default_eye_position = (
            default_eye_position if default_eye_position is not None else DEFAULT_EYE_POSITION
        )
        self._entries: Dict[str, HomeView] = {}
        self._settings_generations: Dict[str, int] = {}
        self.builds = 0

        person_cache.add_invalidation_listener(self._on_people_invalidated)

    def is_cached(self, family_id: str) -> bool:
        entry = self._entries.get(family_id)
        return entry is not None and entry.generation == self._marker(family_id, self._people.generation)

    def _marker(self, family_id: str, people_generation: int) -> str:
        return f"{self._people.boot_id}.{people_generation}.{self._settings_generations.get(family_id, 0)}"

    async def get_home_view(self, family_id: str) -> HomeView:
        """
        Return the family's home view, building it if missing or stale.

        Raises:
            FamilyNotFoundError: Unknown family
        """
        if not family_id:
            raise ValidationError("family_id is required", field="family_id")

        snapshot = await self._people.load()
        marker = self._marker(family_id, snapshot.generation)

        entry = self._entries.get(family_id)
        if entry is not None and entry.generation == marker:
            return entry

        family = await self._families.get_by_id(family_id)
        if family is None:
            raise FamilyNotFoundError(family_id)

        view = build_home_view(
            family,
            snapshot.for_family(family_id),
            marker,
            self._photo_limit,
            self._default_eye_position,
        )
        self.builds += 1

        # Something was invalidated while building: serve it once, do not keep it
        if marker == self._marker(family_id, self._people.generation):
            self._entries[family_id] = view
            logger.info(f"[HomeView] Built home view for family {family_id} (generation {marker})")
        else:
            logger.debug(f"[HomeView] Built stale home view for family {family_id}, not cached")
        return view

    def invalidate_tenant(self, family_id: str):
        """Drop one family's view, e.g. after its category settings changed."""
        self._settings_generations[family_id] = self._settings_generations.get(family_id, 0) + 1
        self._entries.pop(family_id, None)
        logger.info(f"[HomeView] Invalidated home view for family {family_id}")

    def invalidate_all(self):
        dropped = len(self._entries)
        self._entries.clear()
        if dropped:
            logger.debug(f"[HomeView] Dropped {dropped} cached home views")

    def _on_people_invalidated(self, generation: int):
        self.invalidate_all()
