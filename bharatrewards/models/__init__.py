"""Database models and stored records."""
from bharatrewards.models.kv_entry import KVEntry
from bharatrewards.models.user import User, UserPublic, UserRole
from bharatrewards.models.session import UserSession
from bharatrewards.models.redeem_request import RedeemRequest, RedeemStatus
from bharatrewards.models.app_settings import AppSettings
from bharatrewards.models.question import Question, QuestionCategory

__all__ = [
    "KVEntry",
    "User",
    "UserPublic",
    "UserRole",
    "UserSession",
    "RedeemRequest",
    "RedeemStatus",
    "AppSettings",
    "Question",
    "QuestionCategory",
]
