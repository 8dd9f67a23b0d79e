"""Admin routes: users, redemptions, settings and custom questions."""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from bharatrewards.core.exceptions import InvalidStatusTransitionError
from bharatrewards.core.security import require_admin
from bharatrewards.models import (
    AppSettings,
    Question,
    QuestionCategory,
    RedeemRequest,
    RedeemStatus,
    UserPublic,
    UserRole,
    UserSession,
)
from bharatrewards.services.rewards_service import decide_redemption
from bharatrewards.services.storage_service import StorageService, get_storage


router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])

DECISIONS = {"approve": RedeemStatus.APPROVED, "reject": RedeemStatus.REJECTED}


# Request/Response schemas
class UpdateUserRequest(BaseModel):
    name: Optional[str] = None
    role: Optional[UserRole] = None
    points: Optional[int] = Field(default=None, ge=0)
    wallet_balance: Optional[float] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CreateQuestionRequest(BaseModel):
    type: QuestionCategory
    question_text: str = Field(min_length=1)
    correct_answer: str = Field(min_length=1)
    options: Optional[List[str]] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @model_validator(mode="after")
    def check_options(self):
        if self.type == QuestionCategory.QUIZ:
            if not self.options or len(self.options) < 2:
                raise ValueError("QUIZ questions need at least 2 options")
            if self.correct_answer not in self.options:
                raise ValueError("correctAnswer must be one of the options")
        return self


# --- Users ---

@router.get("/users", response_model=List[UserPublic])
def list_users(storage: StorageService = Depends(get_storage)):
    return [u.to_public() for u in storage.list_users()]


@router.patch("/users/{user_id}", response_model=UserPublic)
def update_user(
    user_id: str,
    request: UpdateUserRequest,
    session: UserSession = Depends(require_admin),
    storage: StorageService = Depends(get_storage)
):
    """
    Edit a user's name, role, points or wallet balance.

    Only fields present in the body change.
    """
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user = user.model_copy(update=request.model_dump(exclude_unset=True, exclude_none=True))
    storage.save_user(user, session)
    return user.to_public()


# --- Redeem requests ---

@router.get("/redeem-requests", response_model=List[RedeemRequest])
def list_redeem_requests(storage: StorageService = Depends(get_storage)):
    return storage.list_redeem_requests()


@router.post("/redeem-requests/{request_id}/{decision}", response_model=RedeemRequest)
def decide_redeem_request(
    request_id: str,
    decision: str,
    storage: StorageService = Depends(get_storage)
):
    """
    Approve (credit the wallet) or reject (refund the points) a pending request.
    """
    if decision not in DECISIONS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Decision must be 'approve' or 'reject'")

    try:
        updated = decide_redemption(storage, request_id, DECISIONS[decision])
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Redeem request not found")
    return updated


# --- Settings ---

@router.get("/settings", response_model=AppSettings)
def get_settings(storage: StorageService = Depends(get_storage)):
    return storage.get_settings()


@router.put("/settings", response_model=AppSettings)
def save_settings(request: AppSettings, storage: StorageService = Depends(get_storage)):
    storage.save_settings(request)
    return request


# --- Custom questions ---

@router.get("/questions", response_model=List[Question])
def list_questions(
    category: Optional[QuestionCategory] = None,
    storage: StorageService = Depends(get_storage)
):
    return storage.list_custom_questions(category)


@router.post("/questions", response_model=Question, status_code=status.HTTP_201_CREATED)
def add_question(request: CreateQuestionRequest, storage: StorageService = Depends(get_storage)):
    question = Question(
        id=f"custom-{uuid.uuid4().hex}",
        type=request.type,
        question_text=request.question_text,
        correct_answer=request.correct_answer,
        options=request.options
    )
    storage.add_custom_question(question)
    return question


@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_question(question_id: str, storage: StorageService = Depends(get_storage)):
    if not storage.delete_custom_question(question_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
