"""
Repositories package - record store access layer.

Repositories handle all database operations.
No business logic - only queries and data transformation.

Usage:
    from family_directory.repositories import PeopleRepository

    repo = PeopleRepository(supabase_client)
    people = await repo.get_all()
"""

from family_directory.repositories.base import BaseRepository
from family_directory.repositories.people_repo import PeopleRepository
from family_directory.repositories.families_repo import FamiliesRepository
from family_directory.repositories.members_repo import MembersRepository
from family_directory.repositories.quiz_repo import QuizRepository

__all__ = [
    'BaseRepository',
    'PeopleRepository',
    'FamiliesRepository',
    'MembersRepository',
    'QuizRepository',
]
