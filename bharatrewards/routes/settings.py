"""Public settings routes."""
from fastapi import APIRouter, Depends

from bharatrewards.models import AppSettings
from bharatrewards.services.storage_service import StorageService, get_storage


router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=AppSettings)
def read_settings(storage: StorageService = Depends(get_storage)):
    """Redeem threshold, points per question and currency rate."""
    return storage.get_settings()
