"""
PhotoGalleryManager - keeps a person's photo set consistent.

Photo state per person:
- photo_data: primary photo (at most one)
- thumbnail_data: always derived from the current primary photo
- photos: additional photos, ordered, no duplicates

Conceptually the gallery is one deduplicated list with the primary first
(Person.gallery). Every change is written through the person cache, which
invalidates itself (and the home views) after the write succeeds.

Spouse photos double as the installable app icon, so changing them also
signals the external icon cache. That signal is best effort and runs in the
background.

Concurrent changes to the same person are not serialized: the last write
wins at the record store.
"""

import asyncio
import functools
from typing import Optional, List, Dict, Any, Set

from family_directory.core.exceptions import (
    PersonNotFoundError,
    PhotoNotFoundError,
    InvalidImageError,
    GalleryMismatchError,
)
from family_directory.core.logging import get_logger
from family_directory.infrastructure.images import is_data_image
from family_directory.models.domain.person import Person

logger = get_logger(__name__)


class PhotoGalleryManager:
    """
    Add / delete / set-primary / reorder / replace-primary for one person's photos.

    Args:
        person_cache: Shared PersonCache (reads and writes)
        thumbnailer: Object with generate(image) -> image | None, never raising
        icon_notifier: Object with async invalidate(family_id)
    """

    def __init__(self, person_cache, thumbnailer, icon_notifier=None):
        self._cache = person_cache
        self._thumbnailer = thumbnailer
        self._icons = icon_notifier
        self._pending_signals: Set[asyncio.Task] = set()

    # ==================== Helpers ====================

    async def _get_person(self, person_id: str) -> Person:
        person = await self._cache.get(person_id)
        if person is None:
            raise PersonNotFoundError(person_id)
        return person

    @staticmethod
    def _require_image(image: Optional[str]):
        if not is_data_image(image):
            raise InvalidImageError("Photo must be a base64 image data URI")

    def _thumbnail(self, image: Optional[str]) -> Optional[str]:
        if not image:
            return None
        thumbnail = self._thumbnailer.generate(image)
        if thumbnail is None:
            logger.warning("[Gallery] Thumbnail generation failed, storing photo without thumbnail")
        return thumbnail

    async def _write(self, person: Person, changes: Dict[str, Any], action: str) -> Person:
        updated = await self._cache.update_person(person.id, changes)
        logger.info(f"[Gallery] {action} for person {person.id}")
        if person.category.is_spouse:
            self._signal_icon(person.family_id)
        return updated

    def _signal_icon(self, family_id: str):
        """Send the icon cache signal as a background task."""
        if self._icons is None:
            return
        task = asyncio.get_running_loop().create_task(self._icons.invalidate(family_id))
        self._pending_signals.add(task)
        task.add_done_callback(functools.partial(self._signal_done, family_id))

    def _signal_done(self, family_id: str, task: asyncio.Task):
        self._pending_signals.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"[Gallery] Icon cache invalidation failed for family {family_id}: {error}")

    async def wait_for_icon_signals(self):
        """Wait until every icon signal already sent has finished (used on shutdown)."""
        if self._pending_signals:
            await asyncio.gather(*list(self._pending_signals), return_exceptions=True)

    def initial_photo_fields(self, image: str) -> Dict[str, Any]:
        """Photo columns for a person created with a photo."""
        self._require_image(image)
        return {
            "photo_data": image,
            "thumbnail_data": self._thumbnail(image),
            "photos": [image],
        }

    # ==================== Operations ====================

    async def add_photo(self, person_id: str, image: str) -> Person:
        """
        Append a photo. The first photo of a person also becomes the primary.
        Adding a photo that is already in the gallery changes nothing.
        """
        self._require_image(image)
        person = await self._get_person(person_id)

        if image == person.photo_data or image in person.photos:
            logger.info(f"[Gallery] Photo already in gallery of {person_id}, nothing to add")
            return person

        changes: Dict[str, Any] = {"photos": list(person.photos) + [image]}
        if not person.photo_data:
            changes["photo_data"] = image
            changes["thumbnail_data"] = self._thumbnail(image)

        return await self._write(person, changes, "Added photo")

    async def delete_photo(self, person_id: str, image: str) -> Person:
        """
        Remove a photo everywhere. Deleting the primary promotes the first
        remaining photo, or clears the primary when none is left.
        """
        person = await self._get_person(person_id)

        is_primary = image == person.photo_data
        if not is_primary and image not in person.photos:
            raise PhotoNotFoundError(person_id)

        remaining = [p for p in person.photos if p != image]
        changes: Dict[str, Any] = {"photos": remaining}
        if is_primary:
            new_primary = remaining[0] if remaining else None
            changes["photo_data"] = new_primary
            changes["thumbnail_data"] = self._thumbnail(new_primary)

        return await self._write(person, changes, "Deleted photo")

    async def set_primary(self, person_id: str, image: str) -> Person:
        """
        Make a gallery photo the primary. The additional photo order is kept.
        """
        person = await self._get_person(person_id)

        if image not in person.gallery:
            raise PhotoNotFoundError(person_id)
        if image == person.photo_data and person.thumbnail_data:
            return person

        photos = list(person.photos)
        # A primary stored only in photo_data would otherwise drop out of the gallery
        if person.photo_data and person.photo_data != image and person.photo_data not in photos:
            photos.insert(0, person.photo_data)

        changes = {
            "photo_data": image,
            "thumbnail_data": self._thumbnail(image),
            "photos": photos,
        }
        return await self._write(person, changes, "Set primary photo")

    async def reorder(self, person_id: str, order: List[str]) -> Person:
        """
        Apply a new gallery order. The first photo becomes the primary, the rest
        become the additional photos in the given order.

        Raises:
            GalleryMismatchError: `order` is not a permutation of the gallery
        """
        person = await self._get_person(person_id)
        current = person.gallery

        if len(order) != len(set(order)) or set(order) != set(current):
            missing = len(set(current) - set(order))
            unexpected = len(set(order) - set(current)) + (len(order) - len(set(order)))
            raise GalleryMismatchError(missing=missing, unexpected=unexpected)

        if not order:
            return person

        new_primary = order[0]
        changes: Dict[str, Any] = {"photos": list(order[1:])}
        if new_primary != person.photo_data or not person.thumbnail_data:
            changes["photo_data"] = new_primary
            changes["thumbnail_data"] = self._thumbnail(new_primary)

        return await self._write(person, changes, "Reordered photos")

    async def replace_primary(self, person_id: str, image: str) -> Person:
        """
        Set the primary photo directly (single photo capture flow) and fold it
        into the additional photos when missing.
        """
        self._require_image(image)
        person = await self._get_person(person_id)

        if image == person.photo_data and person.thumbnail_data and image in person.photos:
            return person

        photos = list(person.photos)
        if image not in photos:
            photos.insert(0, image)

        changes = {
            "photo_data": image,
            "thumbnail_data": self._thumbnail(image),
            "photos": photos,
        }
        return await self._write(person, changes, "Replaced primary photo")
