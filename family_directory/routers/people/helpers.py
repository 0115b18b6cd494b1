"""
People API - Helper Functions
Shared utilities for people endpoints
"""

from typing import Dict, Any

from family_directory.models.domain.person import Person


def get_directory():
    """Get directory instance from package globals."""
    from . import directory_instance
    return directory_instance


def get_person_cache():
    """Get person_cache instance from package globals."""
    from . import person_cache_instance
    return person_cache_instance


def get_gallery():
    """Get gallery instance from package globals."""
    from . import gallery_instance
    return gallery_instance


def person_payload(person: Person) -> Dict[str, Any]:
    """Full person record plus the read-time age."""
    data = person.model_dump(mode="json")
    data["age"] = get_directory().age_of(person)
    data["gallery"] = person.gallery
    return data


def list_payload(people) -> list:
    directory = get_directory()
    return [directory.to_list_item(p).model_dump(mode="json") for p in people]
