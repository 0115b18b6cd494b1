"""
Quiz API Router
Recognition quiz results, mounted under /api/families/{family_id}/quiz.
"""

from fastapi import APIRouter, Query
from pydantic import BaseModel

from family_directory.core.responses import ApiResponse
from family_directory.core.logging import get_logger
from family_directory.services.quiz import QuizService

logger = get_logger(__name__)
router = APIRouter()

quiz_service: QuizService = None


def set_services(quiz: QuizService):
    """Set service instance for dependency injection."""
    global quiz_service
    quiz_service = quiz


class QuizResultCreate(BaseModel):
    # Range checks live in QuizService so scripts get them too
    score: int
    total_questions: int


@router.post("/")
async def save_quiz_result(family_id: str, data: QuizResultCreate):
    result = await quiz_service.save_result(family_id, data.score, data.total_questions)
    return ApiResponse.ok({**result.model_dump(mode="json"), "percentage": result.percentage})


@router.get("/")
async def list_quiz_results(family_id: str, limit: int = Query(50, ge=1, le=200)):
    """Quiz history, newest first."""
    results = await quiz_service.list_results(family_id, limit=limit)
    return ApiResponse.ok(
        [{**r.model_dump(mode="json"), "percentage": r.percentage} for r in results],
        meta={"count": len(results)}
    )
