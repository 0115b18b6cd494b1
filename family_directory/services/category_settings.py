"""
Category display settings per family.

Stored as a JSON blob on the family row, modeled here as a fixed-shape
mapping PersonCategory -> CategorySetting(label, hidden), validated when
written.

An empty category is always reported hidden, whatever the stored flag says.
That override is applied at read time only and never written back.
"""

from collections import Counter
from typing import Dict, Any, Iterable

from pydantic import ValidationError as PydanticValidationError

from family_directory.core.exceptions import (
    FamilyNotFoundError,
    ValidationError,
    InvalidCategoryError,
)
from family_directory.core.logging import get_logger
from family_directory.models.domain.family import Family, CategorySetting, CategorySettings
from family_directory.models.domain.person import Person, PersonCategory, CATEGORY_ORDER, parse_category

logger = get_logger(__name__)


def parse_category_settings(raw: Any, strict: bool = True) -> CategorySettings:
    """
    Validate a settings blob.

    Args:
        raw: Mapping of category name to {"label": str?, "hidden": bool?}
        strict: Raise on bad entries (write path); drop them with a warning (read path)

    Raises:
        ValidationError: strict and the blob has the wrong shape
    """
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        if strict:
            raise ValidationError("Category settings must be an object", field="category_settings")
        logger.warning(f"[CategorySettings] Ignoring non-object settings blob: {type(raw).__name__}")
        return {}

    parsed: CategorySettings = {}
    for key, value in raw.items():
        category = parse_category(key)
        if category is None:
            if strict:
                raise InvalidCategoryError(str(key))
            logger.warning(f"[CategorySettings] Dropping unknown category '{key}'")
            continue
        try:
            parsed[category] = (
                value if isinstance(value, CategorySetting)
                else CategorySetting.model_validate(value or {})
            )
        except PydanticValidationError as e:
            if strict:
                raise ValidationError(
                    f"Invalid settings for category '{category.value}': {e.errors()[0]['msg']}",
                    field=category.value
                )
            logger.warning(f"[CategorySettings] Dropping invalid settings for '{category.value}'")
    return parsed


def serialize_category_settings(settings: CategorySettings) -> Dict[str, Dict[str, Any]]:
    """Shape stored on the family row; unset fields are omitted."""
    return {
        category.value: setting.model_dump(exclude_none=True)
        for category, setting in settings.items()
        if setting.model_dump(exclude_none=True)
    }


def count_by_category(people: Iterable[Person]) -> Dict[PersonCategory, int]:
    counts = Counter(p.category for p in people)
    return {category: counts.get(category, 0) for category in CATEGORY_ORDER}


def effective_settings(stored: CategorySettings, counts: Dict[PersonCategory, int]) -> CategorySettings:
    """Stored settings for every category, with empty categories forced hidden."""
    result: CategorySettings = {}
    for category in CATEGORY_ORDER:
        setting = stored.get(category) or CategorySetting()
        result[category] = CategorySetting(
            label=setting.label,
            hidden=bool(setting.hidden) or counts.get(category, 0) == 0,
        )
    return result


class CategorySettingsService:
    """
    Reads and writes category settings for one family at a time.

    Writes invalidate the home view of that family only.
    """

    def __init__(self, families_repository, person_cache, home_view_cache):
        self._families = families_repository
        self._people = person_cache
        self._home_views = home_view_cache

    async def _get_family(self, family_id: str) -> Family:
        family = await self._families.get_by_id(family_id)
        if family is None:
            raise FamilyNotFoundError(family_id)
        return family

    async def _counts(self, family_id: str) -> Dict[PersonCategory, int]:
        snapshot = await self._people.load()
        return count_by_category(snapshot.for_family(family_id))

    async def get_settings(self, family_id: str) -> CategorySettings:
        """Effective settings: stored labels, hidden forced on empty categories."""
        family = await self._get_family(family_id)
        stored = parse_category_settings(family.category_settings, strict=False)
        return effective_settings(stored, await self._counts(family_id))

    async def update_settings(self, family_id: str, raw: Any) -> CategorySettings:
        """
        Merge new per-category settings into the stored ones.

        Raises:
            ValidationError: Bad shape, or an empty category marked visible
            FamilyNotFoundError: Unknown family
            DatabaseError: Record store rejected the write (home view untouched)
        """
        incoming = parse_category_settings(raw, strict=True)
        family = await self._get_family(family_id)
        counts = await self._counts(family_id)

        for category, setting in incoming.items():
            if setting.hidden is False and counts.get(category, 0) == 0:
                raise ValidationError(
                    f"Category '{category.value}' has no people and cannot be shown",
                    field=category.value
                )

        merged = parse_category_settings(family.category_settings, strict=False)
        merged.update(incoming)

        updated = await self._families.update_category_settings(
            family_id, serialize_category_settings(merged)
        )
        if updated is None:
            raise FamilyNotFoundError(family_id)

        self._home_views.invalidate_tenant(family_id)
        logger.info(f"[CategorySettings] Updated {len(incoming)} categories for family {family_id}")
        return effective_settings(merged, counts)
