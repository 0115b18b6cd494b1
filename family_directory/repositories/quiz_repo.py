"""
Quiz results repository - handles quiz_results table operations.
"""

from typing import List

from family_directory.repositories.base import BaseRepository
from family_directory.models.domain.quiz import QuizResult


class QuizRepository(BaseRepository[QuizResult]):
    """
    Repository for quiz_results table.
    """

    table_name = "quiz_results"
    model_class = QuizResult

    async def list_for_family(self, family_id: str, limit: int = 50) -> List[QuizResult]:
        """
        Get a family's quiz history, newest first.
        """
        try:
            response = (
                self.table
                .select("*")
                .eq("family_id", family_id)
                .order("completed_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            self._handle_error("list_for_family", e)

        return [self._to_model(row) for row in response.data or []]
