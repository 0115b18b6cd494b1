"""
Unit tests for PhotoGalleryManager.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from family_directory.core.exceptions import (
    DatabaseError,
    GalleryMismatchError,
    InvalidImageError,
    PersonNotFoundError,
    PhotoNotFoundError,
)
from family_directory.services.gallery import PhotoGalleryManager
from family_directory.services.person_cache import PersonCache

from conftest import (
    FakePeopleRepository,
    FakeThumbnailer,
    FakeIconNotifier,
    make_person,
    thumbnail_of,
    IMAGE_A,
    IMAGE_B,
    IMAGE_C,
)


@pytest.fixture
def repo():
    return FakePeopleRepository([
        make_person("kid", category="children", photo_data=IMAGE_A,
                    thumbnail_data=thumbnail_of(IMAGE_A), photos=[IMAGE_A, IMAGE_B]),
        make_person("legacy", category="children", photo_data=IMAGE_A,
                    thumbnail_data=thumbnail_of(IMAGE_A), photos=[IMAGE_B]),
        make_person("empty", category="caregivers"),
        make_person("hank", category="husband", photo_data=IMAGE_A,
                    thumbnail_data=thumbnail_of(IMAGE_A), photos=[IMAGE_A]),
    ])


@pytest.fixture
def cache(repo):
    return PersonCache(repo)


@pytest.fixture
def thumbnailer():
    return FakeThumbnailer()


@pytest.fixture
def icons():
    return FakeIconNotifier()


@pytest.fixture
def gallery(cache, thumbnailer, icons):
    return PhotoGalleryManager(cache, thumbnailer, icons)


class TestAddPhoto:

    @pytest.mark.asyncio
    async def test_first_photo_becomes_primary(self, gallery):
        person = await gallery.add_photo("empty", IMAGE_C)

        assert person.photo_data == IMAGE_C
        assert person.thumbnail_data == thumbnail_of(IMAGE_C)
        assert person.photos == [IMAGE_C]

    @pytest.mark.asyncio
    async def test_append_keeps_primary(self, gallery):
        person = await gallery.add_photo("kid", IMAGE_C)

        assert person.photo_data == IMAGE_A
        assert person.photos == [IMAGE_A, IMAGE_B, IMAGE_C]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("image", [IMAGE_A, IMAGE_B])
    async def test_existing_photo_is_noop(self, gallery, cache, repo, image):
        before = await cache.get("kid")

        after = await gallery.add_photo("kid", image)

        assert after == before
        assert repo.writes == 0
        assert cache.generation == 0

    @pytest.mark.asyncio
    async def test_primary_only_photo_is_noop(self, gallery, repo):
        await gallery.add_photo("legacy", IMAGE_A)

        assert repo.writes == 0

    @pytest.mark.asyncio
    async def test_rejects_non_data_image(self, gallery, repo):
        with pytest.raises(InvalidImageError):
            await gallery.add_photo("kid", "https://example.com/a.jpg")
        assert repo.writes == 0

    @pytest.mark.asyncio
    async def test_unknown_person(self, gallery):
        with pytest.raises(PersonNotFoundError):
            await gallery.add_photo("nobody", IMAGE_A)

    @pytest.mark.asyncio
    async def test_thumbnail_failure_still_stores_photo(self, gallery, thumbnailer):
        thumbnailer.fail = True

        person = await gallery.add_photo("empty", IMAGE_C)

        assert person.photo_data == IMAGE_C
        assert person.thumbnail_data is None


class TestDeletePhoto:

    @pytest.mark.asyncio
    async def test_delete_primary_promotes_next(self, gallery):
        person = await gallery.delete_photo("kid", IMAGE_A)

        assert person.photo_data == IMAGE_B
        assert person.photos == [IMAGE_B]
        assert person.thumbnail_data == thumbnail_of(IMAGE_B)
        assert IMAGE_A not in person.gallery

    @pytest.mark.asyncio
    async def test_delete_additional_keeps_primary(self, gallery, thumbnailer):
        person = await gallery.delete_photo("kid", IMAGE_B)

        assert person.photo_data == IMAGE_A
        assert person.photos == [IMAGE_A]
        assert thumbnailer.calls == []

    @pytest.mark.asyncio
    async def test_delete_last_photo_clears_primary(self, gallery):
        await gallery.add_photo("empty", IMAGE_C)

        person = await gallery.delete_photo("empty", IMAGE_C)

        assert person.photo_data is None
        assert person.thumbnail_data is None
        assert person.photos == []

    @pytest.mark.asyncio
    async def test_delete_unknown_photo(self, gallery, repo):
        with pytest.raises(PhotoNotFoundError):
            await gallery.delete_photo("kid", IMAGE_C)
        assert repo.writes == 0


class TestSetPrimary:

    @pytest.mark.asyncio
    async def test_set_primary_keeps_additional_order(self, gallery):
        person = await gallery.set_primary("kid", IMAGE_B)

        assert person.photo_data == IMAGE_B
        assert person.thumbnail_data == thumbnail_of(IMAGE_B)
        assert person.photos == [IMAGE_A, IMAGE_B]

    @pytest.mark.asyncio
    async def test_set_primary_folds_old_primary_into_photos(self, gallery):
        person = await gallery.set_primary("legacy", IMAGE_B)

        assert person.photo_data == IMAGE_B
        assert person.photos == [IMAGE_A, IMAGE_B]

    @pytest.mark.asyncio
    async def test_set_primary_requires_gallery_photo(self, gallery):
        with pytest.raises(PhotoNotFoundError):
            await gallery.set_primary("kid", IMAGE_C)

    @pytest.mark.asyncio
    async def test_set_current_primary_is_noop(self, gallery, repo):
        await gallery.set_primary("kid", IMAGE_A)

        assert repo.writes == 0


class TestReorder:

    @pytest.mark.asyncio
    async def test_reorder_makes_first_photo_primary(self, gallery):
        person = await gallery.reorder("kid", [IMAGE_B, IMAGE_A])

        assert person.photo_data == IMAGE_B
        assert person.photos == [IMAGE_A]
        assert person.thumbnail_data == thumbnail_of(IMAGE_B)

    @pytest.mark.asyncio
    async def test_reorder_same_primary_skips_thumbnail(self, gallery, thumbnailer):
        person = await gallery.reorder("kid", [IMAGE_A, IMAGE_B])

        assert person.photo_data == IMAGE_A
        assert person.photos == [IMAGE_B]
        assert thumbnailer.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("order", [
        [IMAGE_B, IMAGE_C],
        [IMAGE_A, IMAGE_B, IMAGE_C],
        [IMAGE_A],
        [IMAGE_A, IMAGE_A, IMAGE_B],
    ])
    async def test_reorder_mismatch_is_rejected(self, gallery, cache, repo, order):
        before = await cache.get("kid")

        with pytest.raises(GalleryMismatchError) as exc_info:
            await gallery.reorder("kid", order)

        assert exc_info.value.status_code == 422
        assert repo.writes == 0
        assert await cache.get("kid") == before


class TestReplacePrimary:

    @pytest.mark.asyncio
    async def test_replace_primary_folds_into_photos(self, gallery):
        person = await gallery.replace_primary("kid", IMAGE_C)

        assert person.photo_data == IMAGE_C
        assert person.thumbnail_data == thumbnail_of(IMAGE_C)
        assert person.photos == [IMAGE_C, IMAGE_A, IMAGE_B]

    @pytest.mark.asyncio
    async def test_replace_primary_with_existing_photo(self, gallery):
        person = await gallery.replace_primary("kid", IMAGE_B)

        assert person.photo_data == IMAGE_B
        assert person.photos == [IMAGE_A, IMAGE_B]

    @pytest.mark.asyncio
    async def test_replace_primary_rejects_non_data_image(self, gallery):
        with pytest.raises(InvalidImageError):
            await gallery.replace_primary("kid", "not an image")


class TestIconCacheSignal:

    @pytest.mark.asyncio
    async def test_spouse_photo_change_signals_icon(self, gallery, icons):
        await gallery.add_photo("hank", IMAGE_B)
        await gallery.wait_for_icon_signals()

        assert icons.invalidated == ["fam-1"]

    @pytest.mark.asyncio
    async def test_other_categories_do_not_signal(self, gallery, icons):
        await gallery.add_photo("kid", IMAGE_C)
        await gallery.wait_for_icon_signals()

        assert icons.invalidated == []

    @pytest.mark.asyncio
    async def test_signal_failure_is_not_raised(self, cache, thumbnailer):
        notifier = AsyncMock()
        notifier.invalidate.side_effect = RuntimeError("asset layer down")
        gallery = PhotoGalleryManager(cache, thumbnailer, notifier)

        person = await gallery.add_photo("hank", IMAGE_C)
        await gallery.wait_for_icon_signals()

        assert IMAGE_C in person.photos
        notifier.invalidate.assert_awaited_once_with("fam-1")

    @pytest.mark.asyncio
    async def test_photo_change_does_not_wait_for_signal(self, cache, thumbnailer):
        release = asyncio.Event()
        signalled = []

        class SlowNotifier:
            async def invalidate(self, family_id):
                await release.wait()
                signalled.append(family_id)

        gallery = PhotoGalleryManager(cache, thumbnailer, SlowNotifier())

        person = await gallery.add_photo("hank", IMAGE_C)

        assert IMAGE_C in person.photos
        assert signalled == []

        release.set()
        await gallery.wait_for_icon_signals()
        assert signalled == ["fam-1"]

    @pytest.mark.asyncio
    async def test_failed_write_does_not_signal(self, gallery, repo, icons):
        repo.fail_writes = True

        with pytest.raises(DatabaseError):
            await gallery.add_photo("hank", IMAGE_B)
        await gallery.wait_for_icon_signals()
        assert icons.invalidated == []
