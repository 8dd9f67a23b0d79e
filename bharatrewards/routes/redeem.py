"""Redemption routes."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from bharatrewards.core.exceptions import RedemptionError
from bharatrewards.core.security import get_current_session
from bharatrewards.models import RedeemRequest, UserSession
from bharatrewards.services.rewards_service import request_redemption
from bharatrewards.services.storage_service import StorageService, get_storage


router = APIRouter(prefix="/redeem", tags=["Redeem"])


class CreateRedeemRequest(BaseModel):
    points: int = Field(gt=0)


@router.post("", response_model=RedeemRequest, status_code=status.HTTP_201_CREATED)
def create_redeem_request(
    request: CreateRedeemRequest,
    session: UserSession = Depends(get_current_session),
    storage: StorageService = Depends(get_storage)
):
    """
    Convert points to a pending payout.

    Points leave the balance immediately and come back if an admin rejects
    the request.
    """
    try:
        return request_redemption(storage, session.user.id, request.points, session)
    except RedemptionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=List[RedeemRequest])
def list_my_redeem_requests(
    session: UserSession = Depends(get_current_session),
    storage: StorageService = Depends(get_storage)
):
    return storage.list_redeem_requests(user_id=session.user.id)
