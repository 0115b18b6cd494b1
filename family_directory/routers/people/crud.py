"""
People API - CRUD Operations
List, search, get, create, update, delete and visit tracking.
All reads come from the person cache; all writes go through it.
"""

from typing import Optional

from fastapi import APIRouter, Query

from family_directory.core.responses import ApiResponse, DeletedResponse
from family_directory.core.exceptions import AppException, DatabaseError
from family_directory.core.logging import get_logger

from .models import PersonCreate, PersonUpdate, VisitRequest
from .helpers import (
    get_directory,
    get_person_cache,
    get_gallery,
    person_payload,
    list_payload,
)

logger = get_logger(__name__)
router = APIRouter()


@router.get("/")
async def get_people(
    family_id: str,
    category: Optional[str] = Query(None, description="Only this category, in its display order")
):
    """
    Get the family's people as list items.

    Parameters:
    - category: descendants are ordered oldest first, others by sort order
    """
    directory = get_directory()

    if category:
        people = await directory.list_by_category(family_id, category)
    else:
        people = await directory.list_all(family_id)
    return ApiResponse.ok(list_payload(people), meta={"count": len(people)})


@router.get("/everyone")
async def get_everyone(family_id: str):
    """Everyone page: category order, then name."""
    people = await get_directory().everyone(family_id)
    return ApiResponse.ok(list_payload(people), meta={"count": len(people)})


@router.get("/search")
async def search_people(family_id: str, q: str = Query("", description="Search text")):
    """Search name, relationship, location and summary. Blank query returns nothing."""
    people = await get_directory().search(family_id, q)
    return ApiResponse.ok(list_payload(people), meta={"count": len(people)})


@router.get("/{person_id}")
async def get_person(family_id: str, person_id: str):
    """Get one person with the full photo set."""
    person = await get_directory().get_for_tenant(family_id, person_id)
    return ApiResponse.ok(person_payload(person))


@router.get("/{person_id}/neighbors")
async def get_person_neighbors(family_id: str, person_id: str):
    """Previous and next person for swipe navigation."""
    directory = get_directory()
    neighbors = await directory.neighbors(family_id, person_id)
    return ApiResponse.ok({
        key: directory.to_list_item(person).model_dump(mode="json") if person else None
        for key, person in neighbors.items()
    })


@router.post("/")
async def create_person(family_id: str, data: PersonCreate):
    """Create a person, optionally with a first photo."""
    insert_data = data.model_dump(exclude={"photo"})
    insert_data["family_id"] = family_id
    if data.photo:
        insert_data.update(get_gallery().initial_photo_fields(data.photo))

    try:
        person = await get_person_cache().create_person(insert_data)
        logger.info(f"Created person {person.id} in family {family_id}")
        return ApiResponse.ok(person_payload(person))
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Error creating person: {e}")
        raise DatabaseError(str(e), operation="create_person")


@router.patch("/{person_id}")
async def update_person(family_id: str, person_id: str, data: PersonUpdate):
    """Partial update. Category and family cannot change."""
    await get_directory().get_for_tenant(family_id, person_id)
    person = await get_person_cache().update_person(person_id, data.model_dump(exclude_unset=True))
    return ApiResponse.ok(person_payload(person))


@router.delete("/{person_id}")
async def delete_person(family_id: str, person_id: str):
    await get_directory().get_for_tenant(family_id, person_id)
    deleted = await get_person_cache().delete_person(person_id)
    logger.info(f"Deleted person {person_id} from family {family_id}")
    return ApiResponse.ok(DeletedResponse(deleted=deleted))


@router.post("/{person_id}/visit")
async def record_visit(family_id: str, person_id: str, data: Optional[VisitRequest] = None):
    """Record that the senior saw this person."""
    await get_directory().get_for_tenant(family_id, person_id)
    person = await get_person_cache().record_visit(person_id, data.visit_date if data else None)
    return ApiResponse.ok(person_payload(person))
