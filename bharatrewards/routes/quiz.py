"""Quiz routes."""
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from bharatrewards.core.config import settings
from bharatrewards.core.security import get_current_session
from bharatrewards.models import QuestionCategory, UserPublic, UserSession
from bharatrewards.services.question_service import QuestionService, QuestionSource, get_question_service
from bharatrewards.services.rewards_service import award_correct_answer, check_answer
from bharatrewards.services.storage_service import StorageService, get_storage


router = APIRouter(prefix="/quiz", tags=["Quiz"])


# Request/Response schemas
class QuizQuestion(BaseModel):
    """A question as sent to players; the answer stays on the server."""

    id: str
    type: QuestionCategory
    question_text: str
    options: Optional[List[str]] = None
    source: QuestionSource

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class QuestionBatchResponse(BaseModel):
    category: QuestionCategory
    requested: int
    questions: List[QuizQuestion]
    sources: Dict[QuestionSource, int]
    fallback_used: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CheckAnswerRequest(BaseModel):
    question_id: str
    user_answer: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CheckAnswerResponse(BaseModel):
    correct: bool
    correct_answer: str
    points_awarded: int
    user: UserPublic

    class Config:
        alias_generator = to_camel
        populate_by_name = True


@router.get("/{category}", response_model=QuestionBatchResponse)
def get_questions(
    category: QuestionCategory,
    count: int = Query(default=settings.DEFAULT_QUESTION_COUNT, ge=1, le=settings.MAX_QUESTION_COUNT),
    session: UserSession = Depends(get_current_session),
    question_service: QuestionService = Depends(get_question_service),
    storage: StorageService = Depends(get_storage)
):
    """
    Build a quiz for one category.

    Custom questions come first, then generated ones, then the built-in
    fallback set. Each question carries the source it was served from.
    The questions are recorded on the session, replacing any earlier quiz,
    so answers can be checked against them.
    """
    batch = question_service.fetch_questions(category, count)
    storage.issue_questions(session, batch.questions)

    questions = [
        QuizQuestion(
            id=question.id,
            type=question.type,
            question_text=question.question_text,
            options=question.options,
            source=source
        )
        for source, question in batch.items()
    ]

    return QuestionBatchResponse(
        category=batch.category,
        requested=batch.requested,
        questions=questions,
        sources={
            QuestionSource.CUSTOM: len(batch.custom),
            QuestionSource.GENERATED: len(batch.generated),
            QuestionSource.FALLBACK: len(batch.fallback),
        },
        fallback_used=bool(batch.fallback)
    )


@router.post("/check", response_model=CheckAnswerResponse)
def check(
    request: CheckAnswerRequest,
    session: UserSession = Depends(get_current_session),
    storage: StorageService = Depends(get_storage)
):
    """
    Check an answer to a question issued to this session and credit the
    user when it is correct. Each issued question can be answered once.
    """
    question = storage.take_issued_question(session, request.question_id)
    if question is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question not issued to this session or already answered"
        )

    if not check_answer(question.correct_answer, request.user_answer, question.options):
        return CheckAnswerResponse(
            correct=False,
            correct_answer=question.correct_answer,
            points_awarded=0,
            user=session.user.to_public()
        )

    user, awarded = award_correct_answer(storage, session.user.id, session)
    return CheckAnswerResponse(
        correct=True,
        correct_answer=question.correct_answer,
        points_awarded=awarded,
        user=user.to_public()
    )
