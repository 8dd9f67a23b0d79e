"""Points, answers and redemption rules."""
import logging
import uuid
from typing import List, Optional, Tuple

from bharatrewards.core.exceptions import InvalidStatusTransitionError, RedemptionError
from bharatrewards.models import RedeemRequest, RedeemStatus, User, UserSession
from bharatrewards.services.storage_service import StorageService

logger = logging.getLogger(__name__)


def _normalize(text: str) -> str:
    return " ".join(str(text).split()).lower()


def _as_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


def check_answer(correct_answer: str, user_answer: str, options: Optional[List[str]] = None) -> bool:
    """Compare a submitted answer with the expected one.

    Comparison ignores case and surrounding/repeated whitespace. Numeric
    answers compare by value. For multiple choice, a single letter picks the
    option at that position (A = first).
    """
    stored = _normalize(correct_answer)
    given = _normalize(user_answer)

    if options and len(given) == 1 and given.isalpha():
        idx = ord(given.upper()) - 65
        if 0 <= idx < len(options):
            picked = _normalize(options[idx])
            # stored answer may itself be a letter
            if len(stored) == 1 and stored.isalpha():
                return given == stored
            return picked == stored

    if given == stored:
        return True

    given_num, stored_num = _as_number(given), _as_number(stored)
    if given_num is not None and stored_num is not None:
        return abs(given_num - stored_num) < 1e-9

    return False


def _require_user(storage: StorageService, user_id: str) -> User:
    user = storage.get_user(user_id)
    if user is None:
        raise ValueError(f"User not found: {user_id}")
    return user


def award_correct_answer(
    storage: StorageService, user_id: str, session: Optional[UserSession] = None
) -> Tuple[User, int]:
    """Credit one solved question to the user.

    Returns the saved user and the points credited.
    """
    awarded = storage.get_settings().points_per_question
    user = _require_user(storage, user_id)
    user.points += awarded
    user.solved_count += 1
    storage.save_user(user, session)
    return user, awarded


def _adjust_user(
    storage: StorageService,
    user_id: str,
    points: int = 0,
    wallet: float = 0.0,
    session: Optional[UserSession] = None,
) -> User:
    user = _require_user(storage, user_id)
    user.points += points
    user.wallet_balance = round(user.wallet_balance + wallet, 2)
    storage.save_user(user, session)
    return user


def request_redemption(
    storage: StorageService, user_id: str, points: int, session: Optional[UserSession] = None
) -> RedeemRequest:
    """Reserve `points` from the user's balance and open a pending request.

    If the request cannot be stored the reserved points are given back
    before the error propagates.
    """
    app_settings = storage.get_settings()
    user = _require_user(storage, user_id)

    if points < app_settings.min_redeem_points:
        raise RedemptionError(f"Minimum redeemable points is {app_settings.min_redeem_points}")
    if points > user.points:
        raise RedemptionError(f"Not enough points: have {user.points}, requested {points}")

    request = RedeemRequest(
        id=uuid.uuid4().hex,
        user_id=user.id,
        user_email=user.email,
        points=points,
        amount=round(points / app_settings.currency_rate, 2),
    )

    user.points -= points
    storage.save_user(user, session)
    try:
        storage.add_redeem_request(request)
    except Exception:
        logger.warning("Could not store redeem request for %s; refunding %d points", user.email, points)
        _adjust_user(storage, user.id, points=points, session=session)
        raise

    logger.info("Redeem request %s opened by %s for %d points", request.id, user.email, points)
    return request


def decide_redemption(
    storage: StorageService, request_id: str, status: RedeemStatus
) -> Optional[RedeemRequest]:
    """Approve (credit wallet) or reject (refund points) a pending request.

    The user's balance changes first; if the status cannot be saved that
    change is undone, so the request stays PENDING and can be decided again.
    Returns None for unknown ids.
    """
    if status == RedeemStatus.PENDING:
        raise InvalidStatusTransitionError("A request can only be approved or rejected")

    request = storage.get_redeem_request(request_id)
    if request is None:
        return None
    if request.status != RedeemStatus.PENDING:
        raise InvalidStatusTransitionError(
            f"Redeem request {request_id} is already {request.status.value}"
        )

    if status == RedeemStatus.APPROVED:
        points, wallet = 0, request.amount
    else:
        points, wallet = request.points, 0.0

    if storage.get_user(request.user_id) is None:
        logger.warning("Redeem request %s references missing user %s", request_id, request.user_id)
        return storage.update_redeem_request_status(request_id, status)

    _adjust_user(storage, request.user_id, points=points, wallet=wallet)
    try:
        return storage.update_redeem_request_status(request_id, status)
    except Exception:
        logger.warning("Could not save decision on redeem request %s; reverting balance", request_id)
        _adjust_user(storage, request.user_id, points=-points, wallet=-wallet)
        raise
