"""
QuizService - recognition quiz results per family.
"""

from datetime import datetime, timezone
from typing import List

from family_directory.core.exceptions import ValidationError, FamilyNotFoundError
from family_directory.core.logging import get_logger
from family_directory.models.domain.quiz import QuizResult

logger = get_logger(__name__)


def _require_int(value, field: str) -> int:
    # bool is an int subclass but never a valid score
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    return value


class QuizService:

    def __init__(self, quiz_repository, families_repository):
        self._results = quiz_repository
        self._families = families_repository

    async def save_result(self, family_id: str, score, total_questions) -> QuizResult:
        """
        Store one completed quiz.

        Raises:
            ValidationError: Non-integer values, total <= 0 or score outside 0..total
            FamilyNotFoundError: Unknown family
        """
        score = _require_int(score, "score")
        total_questions = _require_int(total_questions, "total_questions")
        if total_questions <= 0:
            raise ValidationError("total_questions must be positive", field="total_questions")
        if score < 0 or score > total_questions:
            raise ValidationError("score must be between 0 and total_questions", field="score")

        if await self._families.get_by_id(family_id) is None:
            raise FamilyNotFoundError(family_id)

        result = await self._results.create({
            "family_id": family_id,
            "score": score,
            "total_questions": total_questions,
            "completed_at": datetime.now(timezone.utc),
        })
        logger.info(f"[Quiz] Family {family_id} scored {score}/{total_questions}")
        return result

    async def list_results(self, family_id: str, limit: int = 50) -> List[QuizResult]:
        return await self._results.list_for_family(family_id, limit=limit)
