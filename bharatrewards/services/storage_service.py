"""Storage service.

Owns every durable record of the app: users, sessions, redeem requests,
settings and custom questions. Each collection is one JSON document in the
key-value store, indexed by record id, and every mutation is a versioned
read-modify-write.
"""
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from fastapi import Depends
from sqlalchemy.orm import Session

from bharatrewards.core.config import settings
from bharatrewards.core.exceptions import DuplicateEmailError
from bharatrewards.db.kv_store import KeyValueStore
from bharatrewards.db.sessions import get_db
from bharatrewards.models import (
    AppSettings,
    Question,
    QuestionCategory,
    RedeemRequest,
    RedeemStatus,
    User,
    UserRole,
    UserSession,
)

logger = logging.getLogger(__name__)

USERS_KEY = "bharatrewards_users"
SESSIONS_KEY = "bharatrewards_sessions"
REDEEM_KEY = "bharatrewards_redeems"
SETTINGS_KEY = "bharatrewards_settings"
CUSTOM_QUESTIONS_KEY = "bharatrewards_custom_questions"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class StorageService:
    """CRUD over the app's record collections."""

    def __init__(self, db: Session):
        self.store = KeyValueStore(db)

    def _load(self, key: str) -> Tuple[Dict[str, dict], int]:
        records, version = self.store.get_versioned(key)
        return records or {}, version

    def _dump(self, record) -> dict:
        return record.model_dump(mode="json", by_alias=True)

    # --- Setup ---

    def initialize(self) -> None:
        """Seed the admin account and default settings if missing. Idempotent."""
        if self.find_user_by_email(settings.ADMIN_EMAIL) is None:
            admin = User(
                id=settings.ADMIN_ID,
                email=settings.ADMIN_EMAIL,
                password=settings.ADMIN_PASSWORD,
                name=settings.ADMIN_NAME,
                role=UserRole.ADMIN,
            )
            self.save_user(admin)
            logger.info("Seeded admin account %s", admin.email)

        _, version = self.store.get_versioned(SETTINGS_KEY)
        if version == 0:
            self.store.set(SETTINGS_KEY, self._dump(AppSettings()), expected_version=0)

    # --- Users ---

    def list_users(self) -> List[User]:
        records, _ = self._load(USERS_KEY)
        return [User.model_validate(r) for r in records.values()]

    def get_user(self, user_id: str) -> Optional[User]:
        records, _ = self._load(USERS_KEY)
        record = records.get(user_id)
        return User.model_validate(record) if record is not None else None

    def find_user_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup; first match in insertion order wins."""
        wanted = _normalize_email(email)
        for user in self.list_users():
            if _normalize_email(user.email) == wanted:
                return user
        return None

    def save_user(self, user: User, session: Optional[UserSession] = None) -> None:
        """Insert or replace `user` by id.

        Replacing keeps the record's position. If `session` belongs to the
        same user, its snapshot is replaced as well.
        """
        records, version = self._load(USERS_KEY)
        records[user.id] = self._dump(user)
        self.store.set(USERS_KEY, records, expected_version=version)

        if session is not None and session.user.id == user.id:
            session.user = user
            self._save_session(session)

    def register(
        self,
        name: str,
        email: str,
        password: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        if self.find_user_by_email(email) is not None:
            raise DuplicateEmailError(f"Email already registered: {email}")

        user = User(
            id=uuid.uuid4().hex,
            email=email,
            password=password,
            name=name,
            role=role,
        )
        self.save_user(user)
        return user

    # --- Sessions ---

    def _save_session(self, session: UserSession) -> None:
        """Write `session` and drop every other session whose token has expired."""
        records, version = self._load(SESSIONS_KEY)
        now = datetime.utcnow()
        records = {
            session_id: record
            for session_id, record in records.items()
            if not UserSession.model_validate(record).is_expired(now)
        }
        records[session.id] = self._dump(session)
        self.store.set(SESSIONS_KEY, records, expected_version=version)

    def login(self, email: str, password: Optional[str] = None) -> Optional[UserSession]:
        """Open a session for the user with this email.

        Users without a password accept any input. Returns None on unknown
        email or wrong password, leaving existing sessions as they were.
        """
        user = self.find_user_by_email(email)
        if user is None:
            return None
        if user.password and user.password != password:
            return None

        session = UserSession(id=uuid.uuid4().hex, user=user)
        self._save_session(session)
        return session

    def get_session(self, session_id: str) -> Optional[UserSession]:
        """Stored session by id; expired sessions read as absent."""
        records, _ = self._load(SESSIONS_KEY)
        record = records.get(session_id)
        if record is None:
            return None
        session = UserSession.model_validate(record)
        return None if session.is_expired() else session

    def issue_questions(self, session: UserSession, questions: List[Question]) -> None:
        """Remember the questions handed out to this session, replacing earlier ones."""
        session.issued_questions = {q.id: q for q in questions}
        self._save_session(session)

    def take_issued_question(self, session: UserSession, question_id: str) -> Optional[Question]:
        """Remove and return an issued question; each one can be answered once."""
        question = session.issued_questions.pop(question_id, None)
        if question is not None:
            self._save_session(session)
        return question

    def get_current_user(self, session_id: str) -> Optional[User]:
        session = self.get_session(session_id)
        return session.user if session else None

    def logout(self, session_id: str) -> None:
        records, version = self._load(SESSIONS_KEY)
        if records.pop(session_id, None) is not None:
            self.store.set(SESSIONS_KEY, records, expected_version=version)

    # --- Redeem requests ---

    def list_redeem_requests(self, user_id: Optional[str] = None) -> List[RedeemRequest]:
        records, _ = self._load(REDEEM_KEY)
        requests = [RedeemRequest.model_validate(r) for r in records.values()]
        if user_id is not None:
            requests = [r for r in requests if r.user_id == user_id]
        return requests

    def get_redeem_request(self, request_id: str) -> Optional[RedeemRequest]:
        records, _ = self._load(REDEEM_KEY)
        record = records.get(request_id)
        return RedeemRequest.model_validate(record) if record is not None else None

    def add_redeem_request(self, request: RedeemRequest) -> None:
        records, version = self._load(REDEEM_KEY)
        if request.id in records:
            raise ValueError(f"Redeem request {request.id} already exists")
        records[request.id] = self._dump(request)
        self.store.set(REDEEM_KEY, records, expected_version=version)

    def update_redeem_request_status(
        self, request_id: str, status: RedeemStatus
    ) -> Optional[RedeemRequest]:
        """Set the status of one request. Unknown ids are a no-op (None)."""
        records, version = self._load(REDEEM_KEY)
        record = records.get(request_id)
        if record is None:
            return None

        request = RedeemRequest.model_validate(record)
        request.status = status
        records[request_id] = self._dump(request)
        self.store.set(REDEEM_KEY, records, expected_version=version)
        return request

    # --- Settings ---

    def get_settings(self) -> AppSettings:
        data = self.store.get(SETTINGS_KEY)
        return AppSettings.model_validate(data) if data is not None else AppSettings()

    def save_settings(self, app_settings: AppSettings) -> None:
        self.store.set(SETTINGS_KEY, self._dump(app_settings))

    # --- Custom questions ---

    def list_custom_questions(
        self, category: Optional[QuestionCategory] = None
    ) -> List[Question]:
        records, _ = self._load(CUSTOM_QUESTIONS_KEY)
        questions = [Question.model_validate(r) for r in records.values()]
        if category is not None:
            questions = [q for q in questions if q.type == category]
        return questions

    def add_custom_question(self, question: Question) -> None:
        records, version = self._load(CUSTOM_QUESTIONS_KEY)
        records[question.id] = self._dump(question)
        self.store.set(CUSTOM_QUESTIONS_KEY, records, expected_version=version)

    def delete_custom_question(self, question_id: str) -> bool:
        records, version = self._load(CUSTOM_QUESTIONS_KEY)
        if records.pop(question_id, None) is None:
            return False
        self.store.set(CUSTOM_QUESTIONS_KEY, records, expected_version=version)
        return True


def get_storage(db: Session = Depends(get_db)) -> StorageService:
    return StorageService(db)
