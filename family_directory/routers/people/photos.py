"""
People API - Photo Operations
Gallery endpoints: add, delete, set primary, reorder, replace primary.
Each returns the updated person.
"""

from fastapi import APIRouter

from family_directory.core.responses import ApiResponse
from family_directory.core.logging import get_logger

from .models import PhotoRequest, PhotoOrderRequest
from .helpers import get_directory, get_gallery, person_payload

logger = get_logger(__name__)
router = APIRouter()


async def _owned_person_id(family_id: str, person_id: str) -> str:
    person = await get_directory().get_for_tenant(family_id, person_id)
    return person.id


@router.post("/{person_id}/photos")
async def add_photo(family_id: str, person_id: str, data: PhotoRequest):
    """Append a photo; the first photo becomes the primary."""
    person_id = await _owned_person_id(family_id, person_id)
    person = await get_gallery().add_photo(person_id, data.image)
    return ApiResponse.ok(person_payload(person))


@router.delete("/{person_id}/photos")
async def delete_photo(family_id: str, person_id: str, data: PhotoRequest):
    """Remove a photo; deleting the primary promotes the next one."""
    person_id = await _owned_person_id(family_id, person_id)
    person = await get_gallery().delete_photo(person_id, data.image)
    return ApiResponse.ok(person_payload(person))


@router.put("/{person_id}/photos/primary")
async def set_primary_photo(family_id: str, person_id: str, data: PhotoRequest):
    person_id = await _owned_person_id(family_id, person_id)
    person = await get_gallery().set_primary(person_id, data.image)
    return ApiResponse.ok(person_payload(person))


@router.put("/{person_id}/photos/order")
async def reorder_photos(family_id: str, person_id: str, data: PhotoOrderRequest):
    """New gallery order; the first photo becomes the primary."""
    person_id = await _owned_person_id(family_id, person_id)
    person = await get_gallery().reorder(person_id, data.photos)
    return ApiResponse.ok(person_payload(person))


@router.put("/{person_id}/photo")
async def replace_primary_photo(family_id: str, person_id: str, data: PhotoRequest):
    """Single-photo capture flow: set the primary photo directly."""
    person_id = await _owned_person_id(family_id, person_id)
    person = await get_gallery().replace_primary(person_id, data.image)
    return ApiResponse.ok(person_payload(person))
