"""
Families API Router
Signup, slug lookup, home view, category settings, birthdays, members.

v1.1: Home view served with immutable caching headers; the ETag is the
      view's generation marker, so clients revalidate only after a change.
"""

from typing import Optional, Dict, Any

from fastapi import APIRouter, Body, Header, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from family_directory.core.responses import ApiResponse
from family_directory.core.exceptions import AppException, DatabaseError
from family_directory.core.logging import get_logger
from family_directory.models.domain.family import Family, CategorySettings
from family_directory.services.category_settings import CategorySettingsService
from family_directory.services.directory import DirectoryService
from family_directory.services.families import FamilyService
from family_directory.services.home_view import HomeViewCache

logger = get_logger(__name__)
router = APIRouter()

HOME_VIEW_CACHE_CONTROL = "public, max-age=31536000, immutable"

# Global service instances (set via set_services)
family_service: FamilyService = None
directory_service: DirectoryService = None
home_view_cache: HomeViewCache = None
category_settings_service: CategorySettingsService = None


def set_services(
    families: FamilyService,
    directory: DirectoryService,
    home_views: HomeViewCache,
    category_settings: CategorySettingsService,
):
    """Set service instances for dependency injection."""
    global family_service, directory_service, home_view_cache, category_settings_service
    family_service = families
    directory_service = directory
    home_view_cache = home_views
    category_settings_service = category_settings


class FamilyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    senior_name: str = Field(..., min_length=1, max_length=120)
    slug: Optional[str] = None
    welcome_message: Optional[str] = None


def public_family(family: Family) -> Dict[str, Any]:
    """Family fields safe to send to any client."""
    return family.model_dump(mode="json", exclude={"password_hash", "category_settings"})


def settings_payload(settings: CategorySettings) -> Dict[str, Any]:
    return {category.value: setting.model_dump() for category, setting in settings.items()}


# ============================================================
# Families
# ============================================================

@router.post("/")
async def create_family(data: FamilyCreate):
    """Sign up a new family. The slug cannot change afterwards."""
    try:
        family = await family_service.create_family(
            name=data.name,
            senior_name=data.senior_name,
            slug=data.slug,
            welcome_message=data.welcome_message,
        )
        return ApiResponse.ok(public_family(family))
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Error creating family: {e}")
        raise DatabaseError(str(e), operation="create_family")


@router.get("/by-slug/{slug}")
async def get_family_by_slug(slug: str):
    family = await family_service.get_by_slug(slug)
    return ApiResponse.ok(public_family(family))


@router.get("/{family_id}/members")
async def get_members(family_id: str, include_inactive: bool = Query(False)):
    members = await family_service.list_members(family_id, include_inactive=include_inactive)
    return ApiResponse.ok(
        [m.model_dump(mode="json", exclude={"password_hash"}) for m in members],
        meta={"count": len(members)}
    )


# ============================================================
# Home view
# ============================================================

@router.get("/{family_id}/home")
async def get_home_view(family_id: str, if_none_match: Optional[str] = Header(None)):
    """
    Home screen aggregate.

    Cached by clients indefinitely; a changed generation marker (ETag) is the
    only staleness signal.
    """
    view = await home_view_cache.get_home_view(family_id)
    headers = {
        "Cache-Control": HOME_VIEW_CACHE_CONTROL,
        "ETag": f'"{view.generation}"',
    }

    if if_none_match and if_none_match.strip('"') == view.generation:
        return Response(status_code=304, headers=headers)

    return JSONResponse(
        content=ApiResponse.ok(view.model_dump(mode="json")).model_dump(mode="json"),
        headers=headers,
    )


# ============================================================
# Category settings
# ============================================================

@router.get("/{family_id}/category-settings")
async def get_category_settings(family_id: str):
    """Effective settings: empty categories are always reported hidden."""
    settings = await category_settings_service.get_settings(family_id)
    return ApiResponse.ok(settings_payload(settings))


@router.put("/{family_id}/category-settings")
async def update_category_settings(family_id: str, data: Dict[str, Any] = Body(...)):
    """Merge per-category label/hidden overrides."""
    settings = await category_settings_service.update_settings(family_id, data)
    return ApiResponse.ok(settings_payload(settings))


# ============================================================
# Birthdays
# ============================================================

@router.get("/{family_id}/birthdays")
async def get_upcoming_birthdays(family_id: str, limit: int = Query(3, ge=1, le=50)):
    birthdays = await directory_service.upcoming_birthdays(family_id, limit=limit)
    for birthday in birthdays:
        birthday["next_birthday"] = birthday["next_birthday"].isoformat()
    return ApiResponse.ok(birthdays)
